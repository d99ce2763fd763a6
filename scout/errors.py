"""Failure taxonomy for discovery and extraction.

Only :class:`RunStartupError` is ever allowed to reach the CLI; everything
else is caught by the coordinators, logged, and turned into an empty round
or a failed strategy attempt.
"""

from __future__ import annotations


class ScoutError(Exception):
    """Base class for all Artifact Scout errors."""


class TransientNetworkFailure(ScoutError):
    """Timeout or connection error that persisted for every configured attempt."""


class AutomationChallengeDetected(ScoutError):
    """The response was an anti-automation challenge page, not real content."""


class MalformedCandidate(ScoutError):
    """A URL does not point at an artifact or its id fails pattern validation."""


class RunStartupError(ScoutError):
    """Neither a browser nor the network could be obtained; the run cannot start."""
