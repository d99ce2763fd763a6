"""Data models for the extraction pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class ExtractionMethod(str, Enum):
    """Which strategy produced a record, in chain order."""

    API = "api"
    ARCHIVE = "archive"
    PROXY = "proxy"
    BROWSER = "browser"
    METADATA = "metadata"


class ContentType(str, Enum):
    HTML = "html"
    REACT = "react"
    SVG = "svg"
    JAVASCRIPT = "javascript"
    CSS = "css"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ExtractionAttemptResult:
    """Outcome of one strategy attempt for one candidate.

    Ephemeral: only the extraction coordinator looks at it, to decide whether
    the chain continues.
    """

    strategy: ExtractionMethod
    success: bool
    raw_content: Optional[str] = None
    failure_reason: Optional[str] = None
    title: str = ""
    description: str = ""
    screenshot: Optional[str] = None

    @classmethod
    def ok(cls, strategy: ExtractionMethod, raw_content: str, **meta: Any) -> "ExtractionAttemptResult":
        return cls(strategy=strategy, success=True, raw_content=raw_content, **meta)

    @classmethod
    def fail(cls, strategy: ExtractionMethod, reason: str) -> "ExtractionAttemptResult":
        return cls(strategy=strategy, success=False, failure_reason=reason)


@dataclass(frozen=True)
class ArtifactRecord:
    """Normalized record for one extracted (or metadata-only) artifact."""

    id: str
    url: str
    title: str
    description: str
    raw_content: str
    content_type: ContentType
    language: str
    content_length: int
    has_content: bool
    extraction_method: ExtractionMethod
    discovered_at: str
    screenshot: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Output shape consumed by the persistence and feed collaborators."""
        return {
            "id": self.id,
            "url": self.url,
            "title": self.title,
            "description": self.description,
            "rawContent": self.raw_content,
            "contentType": self.content_type.value,
            "language": self.language,
            "contentLength": self.content_length,
            "hasContent": self.has_content,
            "extractionMethod": self.extraction_method.value,
            "discoveredAt": self.discovered_at,
            "screenshot": self.screenshot,
        }
