"""Assemble normalized :class:`ArtifactRecord` values and their output projections."""

from __future__ import annotations

import random
from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional

from scout.classifier import Classification, classify
from scout.config import settings
from scout.discovery.candidates import CandidateRef
from scout.scraper.models import ArtifactRecord, ExtractionAttemptResult, ExtractionMethod


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _truncate(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[:limit]


def build_record(
    candidate: CandidateRef,
    attempt: ExtractionAttemptResult,
    classification: Optional[Classification] = None,
) -> ArtifactRecord:
    """Build the record for *candidate* from a successful *attempt*.

    Content, title and description are truncated to storage-friendly lengths;
    ``content_length`` is measured after truncation.
    """
    method = attempt.strategy
    raw = _truncate(attempt.raw_content or "", settings.max_content_length)
    if classification is None:
        classification = classify(raw)

    title = _truncate(
        (attempt.title or "").strip() or f"Artifact {candidate.id[:8]}",
        settings.max_title_length,
    )
    description = _truncate(
        (attempt.description or "").strip() or f"Extracted via {method.value}",
        settings.max_description_length,
    )

    return ArtifactRecord(
        id=candidate.id,
        url=candidate.source_url,
        title=title,
        description=description,
        raw_content=raw,
        content_type=classification.content_type,
        language=classification.language,
        content_length=len(raw),
        has_content=bool(raw) and method is not ExtractionMethod.METADATA,
        extraction_method=method,
        discovered_at=_now(),
        screenshot=attempt.screenshot,
    )


# ---------------------------------------------------------------------------
# Output projections
# ---------------------------------------------------------------------------

def build_dataset(artifacts: Iterable[ArtifactRecord | dict]) -> dict[str, Any]:
    """Complete dataset document: ``{scrapedAt, totalArtifacts, artifacts}``.

    Accepts records or already-serialized dicts so that prior runs loaded
    from disk can be merged in update-only mode.
    """
    items = [a.to_dict() if isinstance(a, ArtifactRecord) else a for a in artifacts]
    return {
        "scrapedAt": _now(),
        "totalArtifacts": len(items),
        "artifacts": items,
    }


def build_feed(
    artifacts: Iterable[ArtifactRecord | dict],
    rng: random.Random | None = None,
) -> List[dict[str, Any]]:
    """Display-oriented projection for the feed client.

    Engagement counters are synthetic.  ``isRenderable`` requires both source
    text and a positive content signal.
    """
    rng = rng or random.Random()
    feed: List[dict[str, Any]] = []
    for index, artifact in enumerate(artifacts):
        data = artifact.to_dict() if isinstance(artifact, ArtifactRecord) else artifact
        raw = data.get("rawContent") or ""
        has_content = bool(data.get("hasContent"))
        feed.append({
            "id": index + 1,
            "artifactId": data.get("id"),
            "title": data.get("title"),
            "description": data.get("description"),
            "author": "Unknown",
            "likes": rng.randint(50, 1049),
            "comments": rng.randint(5, 104),
            "type": data.get("contentType"),
            "language": data.get("language") or "html",
            "rawContent": raw,
            "contentLength": data.get("contentLength", len(raw)),
            "hasContent": has_content,
            "url": data.get("url"),
            "thumbnail": data.get("screenshot"),
            "createdAt": data.get("discoveredAt"),
            "isRenderable": bool(raw) and has_content,
            "previewCode": raw[: settings.preview_length] + "..." if raw else "",
        })
    return feed
