"""Discovery channels, one adapter per source of candidate URLs.

Primary tier (targeted, but heavily defended against automation):
  1. Brave Search — REST API; only when BRAVE_API_KEY is configured.
  2. Google — rendered results page in a throwaway browser session.

Secondary tier (costlier per result, rarely blocked):
  3. DuckDuckGo — alternate search engine via ``duckduckgo_search``.
  4. Reddit — discussion-forum search JSON API.
  5. Wayback Machine — CDX archive index of the artifact path prefix.

All adapters share one interface: ``query_round(round_index) -> list[str]``
returning raw URLs.  Unlike the coordinator, adapters are allowed to raise;
a failing round simply contributes nothing.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from urllib.parse import urlencode

from bs4 import BeautifulSoup
from duckduckgo_search import DDGS

from scout.config import settings
from scout.discovery.candidates import find_artifact_urls, unwrap_redirect
from scout.errors import AutomationChallengeDetected
from scout.scraper.fetcher import fetch, is_challenge, open_page


def search_queries() -> list[str]:
    """Query variants rotated across rounds; later variants exclude noisy hosts."""
    site = settings.artifact_host
    path = settings.artifact_path.strip("/")
    return [
        f'site:{site} "{path}"',
        f"{site}/{path}/",
        f'"{site}/{path}/" -site:reddit.com -site:github.com',
    ]


# ---------------------------------------------------------------------------
# Abstract base
# ---------------------------------------------------------------------------

class SourceAdapter(ABC):
    """Abstract base class for a single discovery channel."""

    #: Highest number of distinct rounds the source can serve (``None`` = unbounded).
    max_rounds: int | None = None

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable source name."""

    @abstractmethod
    def query_round(self, round_index: int) -> list[str]:
        """Return raw URLs found by query round *round_index* (0-based)."""


# ---------------------------------------------------------------------------
# Brave Search (primary, API)
# ---------------------------------------------------------------------------

class BraveSearchSource(SourceAdapter):
    """Brave Search REST API.  Query variant rotates per round, then pages."""

    @property
    def name(self) -> str:
        return "Brave"

    def query_round(self, round_index: int) -> list[str]:
        queries = search_queries()
        query = queries[round_index % len(queries)]
        offset = round_index // len(queries)

        resp = fetch(
            "https://api.search.brave.com/res/v1/web/search",
            params={"q": query, "count": 20, "offset": offset},
            headers={
                "Accept": "application/json",
                "X-Subscription-Token": settings.brave_api_key,
            },
        )
        resp.raise_for_status()
        data = resp.json()

        urls = [
            item["url"]
            for item in data.get("web", {}).get("results", [])
            if item.get("url")
        ]
        print(f"[Brave] {query!r} (page {offset + 1}) → {len(urls)} result(s).")
        return urls


# ---------------------------------------------------------------------------
# Google (primary, rendered)
# ---------------------------------------------------------------------------

def extract_result_links(html: str) -> list[str]:
    """Pull artifact URLs out of a search results page.

    Anchors are unwrapped from redirect links; bare URLs in the visible text
    are picked up as well since snippets often quote them.
    """
    soup = BeautifulSoup(html, "html.parser")
    marker = f"{settings.artifact_host}{settings.artifact_path}"
    links: list[str] = []
    for anchor in soup.find_all("a", href=True):
        href = unwrap_redirect(anchor["href"])
        if marker in href and "google." not in href.split(marker)[0]:
            links.append(href)
    links.extend(find_artifact_urls(soup.get_text(" ")))
    return links


class GoogleSearchSource(SourceAdapter):
    """Google web search rendered in a fresh browser session per round."""

    def __init__(self, headless: bool | None = None) -> None:
        self._headless = headless

    @property
    def name(self) -> str:
        return "Google"

    def search_url(self, round_index: int) -> tuple[str, dict]:
        queries = search_queries()
        query = queries[round_index % len(queries)]
        start = (round_index // len(queries)) * 10
        params = {"q": query, "start": start, "hl": "en", "safe": "off", "filter": 0}
        return "https://www.google.com/search", params

    def query_round(self, round_index: int) -> list[str]:
        base, params = self.search_url(round_index)
        print(f"[Google] round {round_index + 1}: {params['q']!r} (start={params['start']})")

        with open_page(headless=self._headless) as page:
            page.goto(
                f"{base}?{urlencode(params)}",
                wait_until="domcontentloaded",
                timeout=int(settings.render_timeout * 1000),
            )
            page.wait_for_timeout(int(settings.render_settle_seconds * 1000))
            html = page.content()

        if is_challenge(html):
            raise AutomationChallengeDetected("Google served a CAPTCHA page")
        urls = extract_result_links(html)
        print(f"[Google] ✓ {len(urls)} artifact link(s).")
        return urls


# ---------------------------------------------------------------------------
# DuckDuckGo (secondary)
# ---------------------------------------------------------------------------

class DuckDuckGoSource(SourceAdapter):
    """Wrapper around ``duckduckgo_search.DDGS``; one query variant per round."""

    max_rounds = 3

    @property
    def name(self) -> str:
        return "DuckDuckGo"

    def query_round(self, round_index: int) -> list[str]:
        query = search_queries()[round_index % 3]
        with DDGS() as ddgs:
            results = ddgs.text(query, max_results=settings.ddg_max_results) or []

        urls: list[str] = []
        for r in results:
            if r.get("href"):
                urls.append(r["href"])
            urls.extend(find_artifact_urls(r.get("body", "")))
        print(f"[DuckDuckGo] {query!r} → {len(urls)} URL(s).")
        return urls


# ---------------------------------------------------------------------------
# Reddit (secondary)
# ---------------------------------------------------------------------------

REDDIT_TERMS = ["claude.ai/public/artifacts/", "claude artifacts", "claude ai artifacts"]


class RedditSource(SourceAdapter):
    """Reddit's public search JSON; artifact URLs are scanned out of posts."""

    max_rounds = len(REDDIT_TERMS)

    @property
    def name(self) -> str:
        return "Reddit"

    def query_round(self, round_index: int) -> list[str]:
        term = REDDIT_TERMS[round_index % len(REDDIT_TERMS)]
        resp = fetch(
            "https://www.reddit.com/search.json",
            params={"q": term, "limit": settings.reddit_limit, "sort": "new"},
            headers={"Accept": "application/json"},
        )
        resp.raise_for_status()
        data = resp.json()

        urls: list[str] = []
        for post in data.get("data", {}).get("children", []):
            body = post.get("data", {})
            text = " ".join(
                str(body.get(key) or "") for key in ("title", "selftext", "url")
            )
            urls.extend(find_artifact_urls(text))
        print(f"[Reddit] {term!r} → {len(urls)} URL(s).")
        return urls


# ---------------------------------------------------------------------------
# Wayback Machine CDX index (secondary)
# ---------------------------------------------------------------------------

class WaybackIndexSource(SourceAdapter):
    """Internet Archive CDX index listing captured URLs under the artifact path."""

    @property
    def name(self) -> str:
        return "Wayback"

    def query_round(self, round_index: int) -> list[str]:
        limit = settings.cdx_limit
        resp = fetch(
            "https://web.archive.org/cdx/search/cdx",
            params={
                "url": f"{settings.artifact_host}{settings.artifact_path}*",
                "output": "json",
                "fl": "original",
                "collapse": "urlkey",
                "limit": limit,
                "offset": round_index * limit,
            },
        )
        resp.raise_for_status()
        rows = resp.json() if resp.content.strip() else []

        # First row is the field-name header.
        urls = [row[0] for row in rows[1:] if row and row[0]]
        print(f"[Wayback] offset {round_index * limit} → {len(urls)} URL(s).")
        return urls


# ---------------------------------------------------------------------------
# Default tiers
# ---------------------------------------------------------------------------

def build_primary_sources(headless: bool | None = None) -> list[SourceAdapter]:
    """Brave (if key) → Google."""
    sources: list[SourceAdapter] = []
    if settings.brave_api_key:
        sources.append(BraveSearchSource())
    sources.append(GoogleSearchSource(headless=headless))
    return sources


def build_secondary_sources() -> list[SourceAdapter]:
    """DuckDuckGo → Reddit → Wayback index."""
    return [DuckDuckGoSource(), RedditSource(), WaybackIndexSource()]
