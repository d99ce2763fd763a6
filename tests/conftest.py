"""Shared fixtures.

``time.sleep`` is patched for every test so politeness pauses and retry
backoff never slow the suite; tests that care about the delays request the
``no_sleep`` fixture to inspect the mock.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest

from scout.discovery.candidates import CandidateRef

ARTIFACT_ID = "3f2a9c1e-8b7d-4e6f-a5c4-1d2e3f4a5b6c"
ARTIFACT_URL = f"https://claude.ai/public/artifacts/{ARTIFACT_ID}"


@pytest.fixture(autouse=True)
def no_sleep():
    with patch("time.sleep") as mock_sleep:
        yield mock_sleep


@pytest.fixture
def candidate() -> CandidateRef:
    return CandidateRef(id=ARTIFACT_ID, source_url=ARTIFACT_URL)
