"""Scraper package — bounded fetches, strategy chain & content location."""

from scout.scraper.fetcher import fetch, is_challenge, open_page
from scout.scraper.models import (
    ArtifactRecord,
    ContentType,
    ExtractionAttemptResult,
    ExtractionMethod,
)

__all__ = [
    "fetch",
    "is_challenge",
    "open_page",
    "ArtifactRecord",
    "ContentType",
    "ExtractionAttemptResult",
    "ExtractionMethod",
]
