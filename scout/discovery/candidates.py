"""Candidate references: URL normalization, id validation and URL scanning."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List
from urllib.parse import parse_qs, unquote, urlparse

from scout.config import settings
from scout.errors import MalformedCandidate


@dataclass(frozen=True)
class CandidateRef:
    """A discovered artifact URL, not yet known to hold extractable content.

    ``source_url`` is always normalized, so equality of two refs is equality
    of their normalized URLs.
    """

    id: str
    source_url: str


def _id_pattern() -> re.Pattern[str]:
    return re.compile(rf"^[0-9a-f-]{{{settings.min_id_length},}}$", re.IGNORECASE)


def is_valid_id(artifact_id: str) -> bool:
    """Return ``True`` if *artifact_id* is a hex/hyphen token of the minimum length."""
    return bool(artifact_id) and bool(_id_pattern().match(artifact_id))


def _split(url: str) -> tuple[str, str] | None:
    """Return ``(host, id)`` for an artifact URL, or ``None`` if it is not one."""
    raw = url.strip()
    if not raw:
        return None
    if "://" not in raw:
        raw = "https://" + raw.lstrip("/")
    try:
        parsed = urlparse(raw)
        host = (parsed.hostname or "").lower()
    except ValueError:
        return None
    if host.startswith("www."):
        host = host[4:]
    if host != settings.artifact_host.lower():
        return None

    prefix = settings.artifact_path
    if not parsed.path.startswith(prefix):
        return None
    remainder = parsed.path[len(prefix):].strip("/")
    artifact_id = remainder.split("/", 1)[0].lower()
    return host, artifact_id


def normalize_url(url: str) -> str:
    """Canonical form used as the dedup key.

    ``https`` scheme, lowercase host without ``www.`` or port, lowercase id,
    no query or fragment, and the path cut down to ``<artifact_path><id>``.
    URLs that are not artifact URLs are returned with only query and fragment
    stripped.
    """
    split = _split(url)
    if split is None:
        parsed = urlparse(url.strip())
        return f"{parsed.scheme}://{parsed.netloc.lower()}{parsed.path}"
    host, artifact_id = split
    return f"https://{host}{settings.artifact_path}{artifact_id}"


def parse_candidate(url: str) -> CandidateRef | None:
    """Turn a raw discovered URL into a :class:`CandidateRef`.

    Foreign hosts, foreign paths and malformed ids return ``None``; they are
    dropped at discovery time and never reach extraction.
    """
    split = _split(url)
    if split is None:
        return None
    host, artifact_id = split
    if not is_valid_id(artifact_id):
        return None
    return CandidateRef(
        id=artifact_id,
        source_url=f"https://{host}{settings.artifact_path}{artifact_id}",
    )


def require_candidate(url: str) -> CandidateRef:
    """Strict variant of :func:`parse_candidate`.

    Raises:
        MalformedCandidate: *url* is not a well-formed artifact URL.
    """
    candidate = parse_candidate(url)
    if candidate is None:
        raise MalformedCandidate(f"not a well-formed artifact URL: {url!r}")
    return candidate


def unwrap_redirect(href: str) -> str:
    """Unwrap search-engine redirect links (``/url?q=…``, ``uddg=…``)."""
    if not href:
        return ""
    parsed = urlparse(href)
    if parsed.path.endswith("/url") or parsed.path.startswith("/l/") or "uddg=" in parsed.query:
        params = parse_qs(parsed.query)
        for key in ("q", "url", "uddg"):
            if params.get(key):
                return unquote(params[key][0])
    return href


def find_artifact_urls(text: str) -> List[str]:
    """Return every artifact-looking URL mentioned in free *text*, in order."""
    if not text:
        return []
    pattern = re.compile(
        rf"https?://(?:www\.)?{re.escape(settings.artifact_host)}"
        rf"{re.escape(settings.artifact_path)}[0-9a-fA-F-]+"
    )
    seen: set[str] = set()
    found: List[str] = []
    for match in pattern.finditer(text):
        url = match.group(0)
        if url not in seen:
            seen.add(url)
            found.append(url)
    return found


def dedupe(candidates: Iterable[CandidateRef]) -> List[CandidateRef]:
    """Drop repeated normalized URLs, keeping the first occurrence."""
    seen: set[str] = set()
    unique: List[CandidateRef] = []
    for candidate in candidates:
        if candidate.source_url not in seen:
            seen.add(candidate.source_url)
            unique.append(candidate)
    return unique
