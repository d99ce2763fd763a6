"""Infer an artifact's content type and language from its raw source.

Rules are evaluated top to bottom and the first match wins.  Order matters:
generic markup characters appear in nearly every artifact, so the specific
signals (component idioms, ``<svg``, document roots) are checked before the
generic ones.
"""

from __future__ import annotations

from typing import Callable, NamedTuple

from scout.scraper.models import ContentType


class Classification(NamedTuple):
    content_type: ContentType
    language: str


Predicate = Callable[[str], bool]


def is_react(code: str) -> bool:
    return (
        "import React" in code
        or "export default function" in code
        or ("function " in code and "return (" in code)
        or ("const " in code and "=> {" in code)
        or "useState" in code
        or "useEffect" in code
    )


def is_svg(code: str) -> bool:
    return "<svg" in code.lower()


def is_html_document(code: str) -> bool:
    lowered = code.lower()
    return any(tag in lowered for tag in ("<!doctype", "<html", "<head", "<body"))


def is_javascript(code: str) -> bool:
    return any(kw in code for kw in ("function ", "const ", "let ", "var "))


def is_css(code: str) -> bool:
    # Every rule block carries at least one declaration.
    opening = code.count("{")
    return opening > 0 and "}" in code and code.count(":") >= opening


def has_tags(code: str) -> bool:
    return "<" in code and ">" in code


UNKNOWN = Classification(ContentType.UNKNOWN, "")

RULES: list[tuple[Predicate, Classification]] = [
    (is_react, Classification(ContentType.REACT, "jsx")),
    (is_svg, Classification(ContentType.SVG, "xml")),
    (is_html_document, Classification(ContentType.HTML, "html")),
    (is_javascript, Classification(ContentType.JAVASCRIPT, "javascript")),
    (is_css, Classification(ContentType.CSS, "css")),
    (has_tags, Classification(ContentType.HTML, "html")),
]


def classify(raw_content: str | None) -> Classification:
    """Return ``(content_type, language)`` for *raw_content*."""
    if not raw_content or not raw_content.strip():
        return UNKNOWN
    for predicate, result in RULES:
        if predicate(raw_content):
            return result
    return UNKNOWN


def has_content_signal(raw_content: str | None) -> bool:
    """``True`` when the classifier recognises *raw_content* as some artifact type."""
    return classify(raw_content).content_type is not ContentType.UNKNOWN
