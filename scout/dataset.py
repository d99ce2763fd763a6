"""JSON persistence for the dataset and feed files.

The pipeline never touches the filesystem.  The CLI loads prior output
through here and writes the new one back.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, List, Tuple

from scout.records import build_dataset, build_feed
from scout.scraper.models import ArtifactRecord


def load_existing(path: Path) -> Tuple[List[dict[str, Any]], set[str]]:
    """Return ``(artifacts, urls)`` from a previous dataset file.

    Accepts both the dataset document and a bare list of artifacts.  A missing
    or unreadable file yields an empty result rather than an error.
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except FileNotFoundError:
        return [], set()
    except (OSError, ValueError) as exc:
        print(f"[dataset] could not read {path}: {exc}; starting fresh.")
        return [], set()

    artifacts = data.get("artifacts", []) if isinstance(data, dict) else data
    if not isinstance(artifacts, list):
        return [], set()
    artifacts = [a for a in artifacts if isinstance(a, dict)]
    urls = {a["url"] for a in artifacts if a.get("url")}
    return artifacts, urls


def _write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")


def save_outputs(
    artifacts: Iterable[ArtifactRecord | dict],
    dataset_path: Path,
    feed_path: Path,
) -> dict[str, Any]:
    """Write the dataset document and the derived feed; return the dataset."""
    items = list(artifacts)
    dataset = build_dataset(items)
    _write_json(Path(dataset_path), dataset)
    _write_json(Path(feed_path), build_feed(items))
    return dataset
