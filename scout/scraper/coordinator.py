"""Extraction coordinator: walk the strategy chain for one candidate."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from scout.classifier import classify
from scout.discovery.candidates import CandidateRef
from scout.records import build_record
from scout.scraper.models import (
    ArtifactRecord,
    ContentType,
    ExtractionAttemptResult,
)
from scout.scraper.strategies import (
    ExtractionStrategy,
    MetadataOnlyStrategy,
    build_default_chain,
)


@dataclass
class ExtractionOutcome:
    """Record (content-bearing, metadata-only, or ``None`` = unextractable) plus the trail."""

    record: Optional[ArtifactRecord]
    attempts: List[ExtractionAttemptResult] = field(default_factory=list)

    @property
    def has_content(self) -> bool:
        return self.record is not None and self.record.has_content

    @property
    def last_failure_reason(self) -> str:
        for attempt in reversed(self.attempts):
            if not attempt.success:
                return f"{attempt.strategy.value}: {attempt.failure_reason}"
        return ""


def _run_attempt(strategy: ExtractionStrategy, candidate: CandidateRef) -> ExtractionAttemptResult:
    try:
        return strategy.attempt(candidate)
    except Exception as exc:
        # Timeouts, challenges and parser errors are all a failed attempt.
        return ExtractionAttemptResult.fail(strategy.method, f"{exc.__class__.__name__}: {exc}")


def extract_candidate(
    candidate: CandidateRef,
    strategies: Sequence[ExtractionStrategy] | None = None,
    fallback: ExtractionStrategy | None = None,
) -> ExtractionOutcome:
    """Run the content strategies in order and stop at the first real content.

    An attempt only counts when it succeeded, returned non-empty content and
    that content classifies as some artifact type.  When every strategy fails,
    *fallback* (metadata-only by default) produces a placeholder record.
    """
    chain = build_default_chain() if strategies is None else strategies
    fallback = fallback or MetadataOnlyStrategy()
    attempts: List[ExtractionAttemptResult] = []

    for strategy in chain:
        print(f"[extract] {candidate.id[:8]} → {strategy.name} …")
        result = _run_attempt(strategy, candidate)

        if result.success and result.raw_content:
            classification = classify(result.raw_content)
            if classification.content_type is not ContentType.UNKNOWN:
                attempts.append(result)
                print(f"[extract] ✓ {strategy.name}: {classification.content_type.value}")
                return ExtractionOutcome(
                    record=build_record(candidate, result, classification),
                    attempts=attempts,
                )
            result = ExtractionAttemptResult.fail(result.strategy, "no content signal")
        elif result.success:
            result = ExtractionAttemptResult.fail(result.strategy, "empty content")

        attempts.append(result)
        print(f"[extract] ✗ {strategy.name}: {result.failure_reason}")

    fb = _run_attempt(fallback, candidate)
    if not fb.success:
        attempts.append(fb)
        print(f"[extract] unextractable: {fb.failure_reason}")
        return ExtractionOutcome(record=None, attempts=attempts)

    print(f"[extract] falling back to metadata-only record for {candidate.id}")
    return ExtractionOutcome(record=build_record(candidate, fb), attempts=attempts)
