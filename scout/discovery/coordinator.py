"""Discovery coordinator: runs source adapters over a depth budget.

The dedup set is an explicit value: callers may pass one in (to continue a
previous run) and always receive the updated copy back, so no module-level
state survives between runs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Sequence

from scout.config import settings
from scout.discovery.candidates import CandidateRef, parse_candidate
from scout.discovery.sources import SourceAdapter
from scout.scraper.fetcher import polite_pause


@dataclass
class DiscoveryResult:
    """Outcome of one discovery run."""

    candidates: List[CandidateRef] = field(default_factory=list)
    seen: set[str] = field(default_factory=set)
    escalated: bool = False


class _Pacer:
    """Inserts the randomized politeness pause before every round but the first."""

    def __init__(self) -> None:
        self._started = False

    def wait(self) -> None:
        if self._started:
            polite_pause(settings.discovery_delay_min, settings.discovery_delay_max)
        self._started = True


def _run_tier(
    adapters: Sequence[SourceAdapter],
    depth: int,
    seen: set[str],
    found: List[CandidateRef],
    pacer: _Pacer,
) -> int:
    """Run every adapter in *adapters* for up to *depth* rounds.

    Returns the number of new candidates the tier contributed.
    """
    added = 0
    for adapter in adapters:
        rounds = depth if adapter.max_rounds is None else min(depth, adapter.max_rounds)
        for round_index in range(rounds):
            pacer.wait()
            try:
                urls = adapter.query_round(round_index)
            except Exception as exc:
                # Timeouts, challenges and API errors all end the round, not the run;
                # the next round moves on to the next query variant.
                print(f"[discovery] {adapter.name} round {round_index + 1} failed: {exc!r:.160}")
                continue
            added += _accumulate(urls, seen, found)
    return added


def _accumulate(urls: Iterable[str], seen: set[str], found: List[CandidateRef]) -> int:
    added = 0
    for url in urls or []:
        candidate = parse_candidate(url)
        if candidate is None or candidate.source_url in seen:
            continue
        seen.add(candidate.source_url)
        found.append(candidate)
        added += 1
    return added


def discover(
    depth: int,
    primary: Sequence[SourceAdapter],
    secondary: Sequence[SourceAdapter] = (),
    seen: Iterable[str] | None = None,
) -> DiscoveryResult:
    """Collect a deduplicated list of candidates.

    Args:
        depth: Query rounds to attempt per adapter (capped by the adapter's
            own ``max_rounds``).
        primary: Adapters tried first.
        secondary: Fallback adapters, only run when *primary* yields nothing.
        seen: Normalized URLs already known; they are not returned again.

    Returns:
        A :class:`DiscoveryResult` whose ``seen`` is a new set containing the
        input URLs plus every candidate found in this run.
    """
    known: set[str] = set(seen or ())
    found: List[CandidateRef] = []
    pacer = _Pacer()

    print(f"[discovery] primary tier: {[a.name for a in primary]}  depth={depth}")
    added = _run_tier(primary, depth, known, found, pacer)
    print(f"[discovery] primary tier → {added} candidate(s).")

    escalated = False
    if added == 0 and secondary:
        escalated = True
        print(f"[discovery] escalating to secondary tier: {[a.name for a in secondary]}")
        added = _run_tier(secondary, depth, known, found, pacer)
        print(f"[discovery] secondary tier → {added} candidate(s).")

    print(f"[discovery] total unique candidates: {len(found)}")
    return DiscoveryResult(candidates=found, seen=known, escalated=escalated)
