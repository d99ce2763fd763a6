"""End-to-end tests for ``run_scrape`` with fake sources and strategies."""

from __future__ import annotations

import threading
from unittest.mock import patch

from scout.discovery.candidates import CandidateRef
from scout.discovery.sources import SourceAdapter
from scout.pipeline import filter_new, run_scrape
from scout.scraper.models import ExtractionAttemptResult, ExtractionMethod
from scout.scraper.strategies import ExtractionStrategy

BASE = "https://claude.ai/public/artifacts/"
URLS = [f"{BASE}{prefix * 8}-0001" for prefix in "abcd"]


class StaticSource(SourceAdapter):
    def __init__(self, urls: list[str]) -> None:
        self._urls = urls

    @property
    def name(self) -> str:
        return "Static"

    def query_round(self, round_index: int) -> list[str]:
        return self._urls if round_index == 0 else []


class ContentByUrl(ExtractionStrategy):
    """Returns HTML for URLs in *good*, fails for the rest."""

    method = ExtractionMethod.BROWSER

    def __init__(self, good: set[str], on_attempt=None) -> None:
        self._good = good
        self._on_attempt = on_attempt
        self.seen: list[str] = []

    def attempt(self, candidate: CandidateRef) -> ExtractionAttemptResult:
        self.seen.append(candidate.source_url)
        if self._on_attempt is not None:
            self._on_attempt()
        if candidate.source_url in self._good:
            return ExtractionAttemptResult.ok(self.method, "<html><body>ok</body></html>")
        return self._fail("blocked")


def _run(urls=URLS, good=None, **kwargs):
    strategy = kwargs.pop("strategy", None) or ContentByUrl(set(urls) if good is None else good)
    report = run_scrape(1, primary=[StaticSource(urls)], secondary=[], strategies=[strategy], **kwargs)
    return report, strategy


class TestRunScrape:
    def test_counts_and_failures(self) -> None:
        report, _ = _run(good={URLS[0], URLS[2]})

        assert report.found == 4
        assert report.scraped == 2
        assert report.failed == 2
        assert report.attempted == 4
        assert [url for url, _ in report.failures] == [URLS[1], URLS[3]]
        assert report.failures[0][1] == "browser: blocked"
        # metadata-only placeholders are still kept
        assert len(report.records) == 4
        assert [r.has_content for r in report.records] == [True, False, True, False]

    def test_limit(self) -> None:
        report, strategy = _run(limit=2)
        assert strategy.seen == URLS[:2]
        assert report.found == 4
        assert report.attempted == 2

    def test_pause_between_candidates_only(self) -> None:
        with patch("scout.pipeline.polite_pause") as pause:
            _run(limit=3)
        assert pause.call_count == 2

    def test_cancel_stops_before_next_candidate(self) -> None:
        cancel = threading.Event()
        strategy = ContentByUrl(set(URLS), on_attempt=cancel.set)
        report, _ = _run(strategy=strategy, cancel=cancel)

        assert strategy.seen == [URLS[0]]
        assert report.cancelled is True
        assert report.scraped == 1

    def test_no_candidates(self) -> None:
        report, strategy = _run(urls=[])
        assert report.found == 0
        assert report.records == []
        assert strategy.seen == []


class TestUpdateOnly:
    def test_known_urls_are_skipped(self) -> None:
        existing = [URLS[0].replace("https://", "http://www."), URLS[1] + "?ref=feed"]
        report, strategy = _run(update_only=True, existing_urls=existing)

        assert report.skipped_existing == 2
        assert strategy.seen == URLS[2:]

    def test_second_run_is_idempotent(self) -> None:
        first, _ = _run()
        existing = [r.url for r in first.records]
        second, strategy = _run(update_only=True, existing_urls=existing)

        assert second.records == []
        assert strategy.seen == []
        assert second.skipped_existing == 4

    def test_existing_urls_ignored_without_update_flag(self) -> None:
        report, strategy = _run(existing_urls=URLS)
        assert strategy.seen == URLS


def test_filter_new_normalizes_existing() -> None:
    candidates = [CandidateRef(id=u.rsplit("/", 1)[1], source_url=u) for u in URLS[:2]]
    assert filter_new(candidates, [URLS[0] + "#top", ""]) == candidates[1:]
