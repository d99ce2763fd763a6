"""High-level runner: discovery → extraction → records.

``run_scrape`` is the single public entry point.  Candidates are processed
one at a time with a randomized politeness pause in between.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

from scout.config import settings
from scout.discovery.candidates import CandidateRef, normalize_url
from scout.discovery.coordinator import discover
from scout.discovery.sources import (
    SourceAdapter,
    build_primary_sources,
    build_secondary_sources,
)
from scout.scraper.coordinator import extract_candidate
from scout.scraper.fetcher import polite_pause
from scout.scraper.models import ArtifactRecord
from scout.scraper.strategies import ExtractionStrategy, build_default_chain


@dataclass
class RunReport:
    """Summary of one run: counts, failed candidates and the produced records."""

    found: int = 0
    scraped: int = 0
    failed: int = 0
    failures: List[Tuple[str, str]] = field(default_factory=list)
    records: List[ArtifactRecord] = field(default_factory=list)
    skipped_existing: int = 0
    cancelled: bool = False

    @property
    def attempted(self) -> int:
        return self.scraped + self.failed


def filter_new(
    candidates: Iterable[CandidateRef],
    existing_urls: Iterable[str],
) -> List[CandidateRef]:
    """Drop candidates whose normalized URL already appears in *existing_urls*."""
    known = {normalize_url(u) for u in existing_urls if u}
    return [c for c in candidates if c.source_url not in known]


def run_scrape(
    depth: int | None = None,
    *,
    update_only: bool = False,
    existing_urls: Iterable[str] = (),
    limit: int | None = None,
    headless: bool | None = None,
    screenshots: bool | None = None,
    cancel: Optional[threading.Event] = None,
    primary: Sequence[SourceAdapter] | None = None,
    secondary: Sequence[SourceAdapter] | None = None,
    strategies: Sequence[ExtractionStrategy] | None = None,
) -> RunReport:
    """Discover candidates and extract a record for each.

    Args:
        depth: Query rounds per discovery adapter (defaults to
            ``settings.search_depth``).
        update_only: Skip candidates whose URL is in *existing_urls*.
        existing_urls: URLs from a prior dataset.
        limit: Process at most this many candidates.
        headless: Browser mode override for discovery and rendering.
        screenshots: Capture a screenshot during full renders.
        cancel: Set it to stop the run before the next candidate.
        primary, secondary, strategies: Overrides for the default adapters
            and strategy chain.

    Returns:
        A :class:`RunReport`.  Metadata-only records are included in
        ``records`` and also counted as ``failed``.
    """
    depth = settings.search_depth if depth is None else depth
    take_shots = settings.screenshots if screenshots is None else screenshots

    if primary is None:
        primary = build_primary_sources(headless=headless)
    if secondary is None:
        secondary = build_secondary_sources()
    if strategies is None:
        strategies = build_default_chain(
            headless=headless,
            screenshot_dir=settings.screenshot_dir if take_shots else None,
        )

    report = RunReport()
    discovery = discover(depth, primary, secondary)
    candidates = discovery.candidates
    report.found = len(candidates)

    if update_only:
        fresh = filter_new(candidates, existing_urls)
        report.skipped_existing = len(candidates) - len(fresh)
        candidates = fresh
        print(f"[run] update mode: {len(candidates)} new candidate(s), "
              f"{report.skipped_existing} already known.")
    if limit is not None:
        candidates = candidates[:limit]

    total = len(candidates)
    for index, candidate in enumerate(candidates):
        if cancel is not None and cancel.is_set():
            print(f"[run] cancelled after {index}/{total} candidate(s).")
            report.cancelled = True
            break
        if index > 0:
            polite_pause(settings.delay_min, settings.delay_max)

        print(f"[run] [{index + 1}/{total}] {candidate.source_url}")
        outcome = extract_candidate(candidate, strategies)

        if outcome.record is not None:
            report.records.append(outcome.record)
        if outcome.has_content:
            report.scraped += 1
        else:
            report.failed += 1
            report.failures.append((candidate.source_url, outcome.last_failure_reason))

    print(
        f"[run] done: found={report.found} scraped={report.scraped} "
        f"failed={report.failed}"
    )
    return report
