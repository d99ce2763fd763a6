"""Bounded HTTP requests and scoped browser sessions.

Every network touch in the pipeline goes through this module so that the
identity (user agent, headers), timeouts and retry policy live in one place.
"""

from __future__ import annotations

import random
import time
from contextlib import contextmanager
from typing import Any, Iterator

import httpx

from scout.config import settings
from scout.errors import RunStartupError, TransientNetworkFailure

# ---------------------------------------------------------------------------
# Automated-access challenge detection
# ---------------------------------------------------------------------------
CHALLENGE_MARKERS = (
    "verify you are human",
    "just a moment...",
    "checking your browser",
    "cf-chl-",
    'id="captcha"',
    "g-recaptcha",
    "unusual traffic from your computer network",
    "enable javascript and cookies to continue",
)

_BROWSER_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--no-first-run",
]


def default_headers() -> dict[str, str]:
    return {
        "User-Agent": settings.user_agent,
        "Accept": "text/html,application/xhtml+xml,application/json;q=0.9,*/*;q=0.8",
        "Accept-Language": settings.accept_language,
    }


def is_challenge(text: str | None) -> bool:
    """Return ``True`` if *text* looks like an anti-automation challenge page.

    Substring heuristics only: a challenge page using unfamiliar wording is
    not recognised and will be treated as (low quality) content.
    """
    if not text:
        return False
    lowered = text.lower()
    return any(marker in lowered for marker in CHALLENGE_MARKERS)


def polite_pause(low: float, high: float) -> float:
    """Sleep for a random duration in ``[low, high]`` seconds and return it."""
    delay = random.uniform(low, max(low, high))
    if delay > 0:
        time.sleep(delay)
    return delay


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------

def fetch(
    url: str,
    *,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    timeout: float | None = None,
    attempts: int | None = None,
) -> httpx.Response:
    """GET *url* once per attempt and return the response, whatever its status.

    Timeouts and connection errors are retried up to *attempts* times with an
    exponential backoff.  HTTP error statuses are *not* raised; callers check
    ``response.is_success`` themselves.

    Raises:
        TransientNetworkFailure: every attempt failed at the transport level.
    """
    merged = default_headers()
    if headers:
        merged.update(headers)
    max_attempts = max(1, attempts if attempts is not None else settings.fetch_attempts)
    last_exc: Exception | None = None

    for attempt in range(max_attempts):
        try:
            with httpx.Client(
                headers=merged,
                timeout=timeout if timeout is not None else settings.request_timeout,
                follow_redirects=True,
            ) as client:
                return client.get(url, params=params)
        except httpx.TransportError as exc:
            last_exc = exc
            if attempt < max_attempts - 1:
                delay = settings.retry_base_delay * (2 ** attempt)
                print(
                    f"[fetch] {url} failed ({exc.__class__.__name__}), "
                    f"attempt {attempt + 1}/{max_attempts}; retrying in {delay:.0f}s …"
                )
                time.sleep(delay)

    raise TransientNetworkFailure(f"{url}: {last_exc!r}")


# ---------------------------------------------------------------------------
# Browser
# ---------------------------------------------------------------------------

@contextmanager
def open_page(headless: bool | None = None) -> Iterator[Any]:
    """Launch a fresh Chromium session and yield a single page.

    The browser, its context and the page are always torn down on exit, even
    when the body raises, so no automation fingerprint outlives one operation.
    Playwright is imported lazily so the HTTP-only paths work without a
    browser install.
    """
    from playwright.sync_api import sync_playwright  # noqa: PLC0415

    with sync_playwright() as pw:
        browser = pw.chromium.launch(
            headless=settings.headless if headless is None else headless,
            args=_BROWSER_ARGS,
        )
        try:
            context = browser.new_context(
                user_agent=settings.user_agent,
                locale="en-US",
                viewport={"width": 1200, "height": 800},
                extra_http_headers={"Accept-Language": settings.accept_language},
            )
            page = context.new_page()
            page.set_default_timeout(settings.render_timeout * 1000)
            try:
                yield page
            finally:
                context.close()
        finally:
            browser.close()


def check_runtime(headless: bool | None = None) -> dict[str, bool]:
    """Pre-flight: make sure at least one of browser or network is usable.

    Returns:
        ``{"browser": bool, "network": bool}``.

    Raises:
        RunStartupError: neither resource could be obtained.
    """
    status = {"browser": False, "network": False}

    try:
        with open_page(headless=headless):
            status["browser"] = True
    except Exception as exc:
        print(f"[preflight] browser unavailable: {exc}")

    try:
        fetch(f"https://{settings.artifact_host}/", attempts=1)
        status["network"] = True
    except TransientNetworkFailure as exc:
        print(f"[preflight] network unavailable: {exc}")

    if not any(status.values()):
        raise RunStartupError("no browser and no network connectivity available")
    return status
