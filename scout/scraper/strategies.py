"""Extraction strategies, cheapest and least detectable first.

Every strategy exposes the same contract, ``attempt(candidate) ->
ExtractionAttemptResult``, so the coordinator can walk them as a flat list.
Strategies may raise; the coordinator turns any exception into a failed
attempt.

    1. DirectEndpointStrategy  — conventional API/content URLs for the id.
    2. ArchiveSnapshotStrategy — closest Wayback Machine snapshot.
    3. ProxyRelayStrategy      — public fetch relays that request server-side.
    4. FullRenderStrategy      — real browser session (most capable, most fragile).
    5. MetadataOnlyStrategy    — placeholder so the candidate is not lost.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from pathlib import Path
from urllib.parse import quote

from scout.config import settings
from scout.discovery.candidates import CandidateRef, is_valid_id
from scout.errors import AutomationChallengeDetected
from scout.scraper.fetcher import fetch, is_challenge, open_page
from scout.scraper.locators import clean_title, locate_content, page_metadata
from scout.scraper.models import ExtractionAttemptResult, ExtractionMethod


class ExtractionStrategy(ABC):
    """Abstract base class for one link of the extraction chain."""

    method: ExtractionMethod

    @property
    def name(self) -> str:
        return self.method.value

    @abstractmethod
    def attempt(self, candidate: CandidateRef) -> ExtractionAttemptResult:
        """Try to obtain the artifact source for *candidate*."""

    def _fail(self, reason: str) -> ExtractionAttemptResult:
        return ExtractionAttemptResult.fail(self.method, reason)


def _located(
    method: ExtractionMethod,
    html: str,
    url: str,
    include_container: bool = False,
) -> ExtractionAttemptResult:
    """Run the content locators over a fetched page and wrap the outcome."""
    found = locate_content(html, include_container=include_container)
    if found is None:
        return ExtractionAttemptResult.fail(method, "no artifact content located in page")
    locator, text = found
    title, description = page_metadata(html, url)
    print(f"[{method.value}] content located via {locator} ({len(text)} chars)")
    return ExtractionAttemptResult.ok(method, text, title=title, description=description)


# ---------------------------------------------------------------------------
# 1. Direct endpoints
# ---------------------------------------------------------------------------

def endpoint_urls(candidate: CandidateRef) -> list[str]:
    """Conventionally shaped API/content URLs derived from the artifact id."""
    host = settings.artifact_host
    aid = candidate.id
    url = candidate.source_url
    return [
        f"https://{host}/api/public/artifacts/{aid}",
        f"https://{host}/api/v1/artifacts/{aid}",
        f"{url}/raw",
        f"{url}/content",
        f"{url}.json",
        f"https://api.{host}/artifacts/{aid}",
        f"https://artifacts.{host}/{aid}",
        f"https://cdn.{host}/artifacts/{aid}",
    ]


def _parse_endpoint_payload(payload: object) -> tuple[str, str] | None:
    """Return ``(content, title)`` from a JSON endpoint payload, if it has content."""
    if not isinstance(payload, dict):
        return None
    artifact = payload.get("artifact")
    if isinstance(artifact, dict) and isinstance(artifact.get("content"), str) and artifact["content"]:
        return artifact["content"], str(artifact.get("title") or "")
    for key in ("content", "code"):
        if isinstance(payload.get(key), str) and payload[key]:
            title = payload.get("title") or payload.get("name") or ""
            return payload[key], str(title)
    return None


class DirectEndpointStrategy(ExtractionStrategy):
    method = ExtractionMethod.API

    def attempt(self, candidate: CandidateRef) -> ExtractionAttemptResult:
        last_reason = "no endpoint responded"
        for endpoint in endpoint_urls(candidate):
            try:
                resp = fetch(
                    endpoint,
                    headers={
                        "Accept": "application/json, text/html, */*",
                        "Referer": f"https://{settings.artifact_host}/",
                    },
                    attempts=1,
                )
            except Exception as exc:
                last_reason = f"{endpoint}: {exc}"
                continue
            if not resp.is_success:
                last_reason = f"{endpoint}: HTTP {resp.status_code}"
                continue

            body = resp.text
            if is_challenge(body):
                last_reason = f"{endpoint}: automated-access challenge"
                continue

            if "json" in resp.headers.get("content-type", ""):
                try:
                    parsed = _parse_endpoint_payload(json.loads(body))
                except ValueError:
                    parsed = None
                if parsed:
                    content, title = parsed
                    print(f"[api] ✓ content at {endpoint}")
                    return ExtractionAttemptResult.ok(
                        self.method, content, title=clean_title(title)
                    )
                last_reason = f"{endpoint}: JSON without content"
                continue

            if len(body) > settings.min_endpoint_length:
                print(f"[api] ✓ content at {endpoint}")
                return ExtractionAttemptResult.ok(self.method, body)
            last_reason = f"{endpoint}: body too short"
        return self._fail(last_reason)


# ---------------------------------------------------------------------------
# 2. Archived snapshot
# ---------------------------------------------------------------------------

def raw_snapshot_url(snapshot_url: str) -> str:
    """Rewrite a Wayback snapshot URL to its ``id_`` form (original bytes, no toolbar)."""
    marker = "/web/"
    if marker not in snapshot_url:
        return snapshot_url
    head, tail = snapshot_url.split(marker, 1)
    timestamp, _, original = tail.partition("/")
    if timestamp.endswith("id_"):
        return snapshot_url
    return f"{head}{marker}{timestamp}id_/{original}"


class ArchiveSnapshotStrategy(ExtractionStrategy):
    method = ExtractionMethod.ARCHIVE

    def attempt(self, candidate: CandidateRef) -> ExtractionAttemptResult:
        resp = fetch("https://archive.org/wayback/available", params={"url": candidate.source_url})
        if not resp.is_success:
            return self._fail(f"availability API HTTP {resp.status_code}")
        closest = resp.json().get("archived_snapshots", {}).get("closest") or {}
        if not closest.get("available") or not closest.get("url"):
            return self._fail("no archived snapshot")

        snapshot = fetch(raw_snapshot_url(closest["url"]))
        if not snapshot.is_success:
            return self._fail(f"snapshot HTTP {snapshot.status_code}")
        if is_challenge(snapshot.text):
            raise AutomationChallengeDetected("archived snapshot is a challenge page")
        return _located(self.method, snapshot.text, candidate.source_url)


# ---------------------------------------------------------------------------
# 3. Proxy relays
# ---------------------------------------------------------------------------

RELAY_TEMPLATES = [
    "https://api.allorigins.win/get?url={url}",
    "https://api.allorigins.win/raw?url={url}",
    "https://corsproxy.io/?url={url}",
]


class ProxyRelayStrategy(ExtractionStrategy):
    method = ExtractionMethod.PROXY

    def __init__(self, templates: list[str] | None = None) -> None:
        self._templates = templates or RELAY_TEMPLATES

    def _relay(self, template: str, url: str) -> str:
        resp = fetch(template.format(url=quote(url, safe="")))
        resp.raise_for_status()
        body = resp.text
        if "allorigins.win/get" in template:
            # The JSON endpoint wraps the page as {"contents": "...", "status": {...}}
            body = json.loads(body).get("contents") or ""
        return body

    def attempt(self, candidate: CandidateRef) -> ExtractionAttemptResult:
        last_reason = "no relay configured"
        for template in self._templates:
            relay = template.split("?")[0]
            try:
                body = self._relay(template, candidate.source_url)
            except Exception as exc:
                last_reason = f"{relay}: {exc}"
                print(f"[proxy] {relay} failed: {exc!r:.120}")
                continue
            if len(body) <= settings.min_relay_length:
                last_reason = f"{relay}: response too short ({len(body)} chars)"
                continue
            if is_challenge(body):
                last_reason = f"{relay}: automated-access challenge"
                continue
            result = _located(self.method, body, candidate.source_url)
            if result.success:
                return result
            last_reason = f"{relay}: {result.failure_reason}"
        return self._fail(last_reason)


# ---------------------------------------------------------------------------
# 4. Full browser render
# ---------------------------------------------------------------------------

class FullRenderStrategy(ExtractionStrategy):
    method = ExtractionMethod.BROWSER

    def __init__(
        self,
        headless: bool | None = None,
        screenshot_dir: Path | None = None,
    ) -> None:
        self._headless = headless
        self._screenshot_dir = screenshot_dir

    def _capture(self, page, artifact_id: str) -> str | None:
        """Best-effort screenshot; a failure here never fails the attempt."""
        if self._screenshot_dir is None:
            return None
        try:
            self._screenshot_dir.mkdir(parents=True, exist_ok=True)
            path = self._screenshot_dir / f"{artifact_id}.png"
            page.screenshot(
                path=str(path),
                full_page=False,
                clip={"x": 0, "y": 0, "width": 1200, "height": 800},
            )
            return str(path)
        except Exception as exc:
            print(f"[browser] screenshot failed: {exc!r:.120}")
            return None

    def attempt(self, candidate: CandidateRef) -> ExtractionAttemptResult:
        with open_page(headless=self._headless) as page:
            page.goto(
                candidate.source_url,
                wait_until="load",
                timeout=int(settings.render_timeout * 1000),
            )
            page.wait_for_timeout(int(settings.render_settle_seconds * 1000))

            if is_challenge(page.content()):
                print("[browser] challenge detected, waiting for it to clear …")
                page.wait_for_timeout(int(settings.challenge_wait_seconds * 1000))
                if is_challenge(page.content()):
                    raise AutomationChallengeDetected("challenge did not clear")

            html = page.content()
            found = locate_content(html, include_container=True)
            if found is None:
                return self._fail("rendered page has no locatable content")

            locator, text = found
            title, description = page_metadata(html, candidate.source_url)
            title = title or clean_title(page.title())
            screenshot = self._capture(page, candidate.id)

        print(f"[browser] content located via {locator} ({len(text)} chars)")
        return ExtractionAttemptResult.ok(
            self.method,
            text,
            title=title,
            description=description,
            screenshot=screenshot,
        )


# ---------------------------------------------------------------------------
# 5. Metadata only
# ---------------------------------------------------------------------------

class MetadataOnlyStrategy(ExtractionStrategy):
    method = ExtractionMethod.METADATA

    def attempt(self, candidate: CandidateRef) -> ExtractionAttemptResult:
        if not is_valid_id(candidate.id):
            return self._fail(f"malformed artifact id {candidate.id!r}")
        return ExtractionAttemptResult.ok(
            self.method,
            "",
            description="Discovered via URL pattern matching",
        )


def build_default_chain(
    headless: bool | None = None,
    screenshot_dir: Path | None = None,
) -> list[ExtractionStrategy]:
    """Content strategies in priority order (metadata fallback excluded)."""
    return [
        DirectEndpointStrategy(),
        ArchiveSnapshotStrategy(),
        ProxyRelayStrategy(),
        FullRenderStrategy(headless=headless, screenshot_dir=screenshot_dir),
    ]
