"""Locate artifact source inside an HTML document.

The same ordered list of locators is applied to archived snapshots, relayed
pages and fully rendered pages.  Each locator is a pure function of a parsed
document and the minimum length: it skips shorter candidates and returns the
first longer one, or ``None``.  The first locator that returns text wins.
"""

from __future__ import annotations

import json
import re
from typing import Callable, List, Optional, Tuple

import trafilatura
from bs4 import BeautifulSoup

from scout.config import settings

_SCRIPT_HINTS = ("artifact", "content", "code", "html", "react")
_CODE_MARKERS = ("<html", "<div", "function ", "const ", "import ", "<svg")
_EDITABLE_MARKERS = ("<", "function", "const", "import")
_TITLE_SUFFIXES = (" | Claude", " - Claude")
_GENERIC_TITLES = {"", "claude", "untitled artifact"}

Locator = Callable[[BeautifulSoup, int], Optional[str]]


# ---------------------------------------------------------------------------
# Locators (ordered)
# ---------------------------------------------------------------------------

def _from_json_payload(text: str) -> Optional[str]:
    try:
        data = json.loads(text)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    artifact = data.get("artifact")
    if isinstance(artifact, dict) and isinstance(artifact.get("content"), str):
        return artifact["content"]
    for key in ("content", "code"):
        if isinstance(data.get(key), str):
            return data[key]
    return None


def structured_data(soup: BeautifulSoup, min_length: int = 0) -> Optional[str]:
    """Embedded JSON or inline scripts that carry the artifact source."""
    for script in soup.find_all("script"):
        if script.get("src"):
            continue
        text = script.string or script.get_text() or ""
        if not any(hint in text for hint in _SCRIPT_HINTS):
            continue
        payload = _from_json_payload(text)
        if payload and len(payload.strip()) > min_length:
            return payload
        if (
            script.get("type") != "application/json"
            and "<" in text
            and ">" in text
            and len(text.strip()) > min_length
        ):
            return text
    return None


def code_block(soup: BeautifulSoup, min_length: int = 0) -> Optional[str]:
    """``<pre>``/``<code>`` blocks whose text looks like markup or script."""
    for block in soup.select("pre code, code, pre"):
        text = block.get_text()
        if len(text) > max(100, min_length) and any(marker in text for marker in _CODE_MARKERS):
            return text
    return None


def data_attribute(soup: BeautifulSoup, min_length: int = 0) -> Optional[str]:
    """Custom ``data-artifact`` / ``data-code`` / ``data-content`` attributes."""
    for element in soup.select("[data-artifact], [data-code], [data-content]"):
        for attr in ("data-artifact", "data-code", "data-content"):
            value = element.get(attr)
            if value and len(value.strip()) > min_length:
                return value
    return None


def iframe_srcdoc(soup: BeautifulSoup, min_length: int = 0) -> Optional[str]:
    """Inline document of an embedded frame."""
    for frame in soup.find_all("iframe", srcdoc=True):
        srcdoc = frame.get("srcdoc") or ""
        if len(srcdoc.strip()) > min_length:
            return srcdoc
    return None


def editable_region(soup: BeautifulSoup, min_length: int = 0) -> Optional[str]:
    """Text areas and ``contenteditable`` regions holding code."""
    for area in soup.select('textarea, [contenteditable="true"]'):
        text = area.get_text()
        if len(text) > max(50, min_length) and any(marker in text for marker in _EDITABLE_MARKERS):
            return text
    return None


def main_container(soup: BeautifulSoup, min_length: int = 0) -> Optional[str]:
    """Last resort: a sandboxed frame reference, or the primary content container."""
    frame = soup.find("iframe", src=True)
    if frame is not None:
        return f'<iframe src="{frame["src"]}"></iframe>'
    container = (
        soup.find("main")
        or soup.select_one('[role="main"]')
        or soup.select_one(".artifact-content")
        or soup.body
    )
    if container is None:
        return None
    return container.decode_contents().strip() or None


LOCATORS: List[Tuple[str, Locator]] = [
    ("structured_data", structured_data),
    ("code_block", code_block),
    ("data_attribute", data_attribute),
    ("iframe_srcdoc", iframe_srcdoc),
    ("editable_region", editable_region),
    ("main_container", main_container),
]


def locate_content(
    html: str,
    min_length: int | None = None,
    include_container: bool = True,
) -> Optional[Tuple[str, str]]:
    """Return ``(locator_name, text)`` for the first locator that finds enough text.

    Args:
        html: Serialized document.
        min_length: Minimum text length; defaults to ``settings.min_content_length``.
        include_container: Whether the ``main_container`` last resort may win.
            Off for fetched snapshots, where the container is mostly chrome.
    """
    if not html:
        return None
    threshold = settings.min_content_length if min_length is None else min_length
    soup = BeautifulSoup(html, "html.parser")
    for name, locator in LOCATORS:
        if name == "main_container" and not include_container:
            continue
        text = locator(soup, threshold)
        if text and len(text.strip()) > threshold:
            return name, text
    return None


# ---------------------------------------------------------------------------
# Page metadata
# ---------------------------------------------------------------------------

def clean_title(title: str) -> str:
    title = (title or "").strip()
    for suffix in _TITLE_SUFFIXES:
        if title.endswith(suffix):
            title = title[: -len(suffix)].strip()
    return title


def _bs4_metadata(html: str) -> Tuple[str, str]:
    soup = BeautifulSoup(html, "html.parser")
    title = clean_title(soup.title.get_text() if soup.title else "")
    if title.lower() in _GENERIC_TITLES:
        heading = soup.find(["h1", "h2", "h3"])
        if heading is not None:
            title = heading.get_text(" ", strip=True)

    description = ""
    for attrs in (
        {"name": "description"},
        {"property": "og:description"},
        {"name": "twitter:description"},
    ):
        tag = soup.find("meta", attrs=attrs)
        if tag is not None and tag.get("content"):
            description = tag["content"].strip()
            break
    return title, description


def page_metadata(html: str, url: str | None = None) -> Tuple[str, str]:
    """Return ``(title, description)`` for *html*, either possibly empty.

    Tries ``trafilatura``'s metadata extractor first, falling back to plain
    ``<title>``/``<meta>`` lookups when it finds nothing.
    """
    if not html:
        return "", ""
    title, description = "", ""
    meta = trafilatura.extract_metadata(html, default_url=url)
    if meta is not None:
        title = clean_title(meta.title or "")
        description = (meta.description or "").strip()

    if title.lower() in _GENERIC_TITLES or not description:
        fb_title, fb_description = _bs4_metadata(html)
        if title.lower() in _GENERIC_TITLES:
            title = fb_title
        description = description or fb_description
    return re.sub(r"\s+", " ", title).strip(), description
