"""Centralised settings for Artifact Scout.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (two levels up from this file)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)

_DEFAULT_UA = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Target host
    # ------------------------------------------------------------------
    artifact_host: str = field(
        default_factory=lambda: os.environ.get("ARTIFACT_HOST", "claude.ai")
    )
    artifact_path: str = field(
        default_factory=lambda: os.environ.get("ARTIFACT_PATH", "/public/artifacts/")
    )
    min_id_length: int = field(
        default_factory=lambda: int(os.environ.get("MIN_ID_LENGTH", "8"))
    )

    @property
    def artifact_base_url(self) -> str:
        """``https://<host><path>``; every normalized candidate URL starts with this."""
        return f"https://{self.artifact_host}{self.artifact_path}"

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------
    user_agent: str = field(
        default_factory=lambda: os.environ.get("SCOUT_USER_AGENT", _DEFAULT_UA)
    )
    accept_language: str = field(
        default_factory=lambda: os.environ.get("SCOUT_ACCEPT_LANGUAGE", "en-US,en;q=0.9")
    )

    # ------------------------------------------------------------------
    # Timeouts & retry
    # ------------------------------------------------------------------
    request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("REQUEST_TIMEOUT", "15.0"))
    )
    render_timeout: float = field(
        default_factory=lambda: float(os.environ.get("RENDER_TIMEOUT", "30.0"))
    )
    render_settle_seconds: float = field(
        default_factory=lambda: float(os.environ.get("RENDER_SETTLE_SECONDS", "3.0"))
    )
    challenge_wait_seconds: float = field(
        default_factory=lambda: float(os.environ.get("CHALLENGE_WAIT_SECONDS", "10.0"))
    )
    fetch_attempts: int = field(
        default_factory=lambda: int(os.environ.get("FETCH_ATTEMPTS", "2"))
    )
    retry_base_delay: float = field(
        default_factory=lambda: float(os.environ.get("RETRY_BASE_DELAY", "1.0"))
    )

    # ------------------------------------------------------------------
    # Politeness delays (seconds, randomized within [min, max])
    # ------------------------------------------------------------------
    delay_min: float = field(
        default_factory=lambda: float(os.environ.get("DELAY_MIN", "2.0"))
    )
    delay_max: float = field(
        default_factory=lambda: float(os.environ.get("DELAY_MAX", "4.0"))
    )
    discovery_delay_min: float = field(
        default_factory=lambda: float(os.environ.get("DISCOVERY_DELAY_MIN", "3.0"))
    )
    discovery_delay_max: float = field(
        default_factory=lambda: float(os.environ.get("DISCOVERY_DELAY_MAX", "7.0"))
    )

    # ------------------------------------------------------------------
    # Content thresholds & truncation
    # ------------------------------------------------------------------
    min_content_length: int = field(
        default_factory=lambda: int(os.environ.get("MIN_CONTENT_LENGTH", "50"))
    )
    min_relay_length: int = field(
        default_factory=lambda: int(os.environ.get("MIN_RELAY_LENGTH", "500"))
    )
    min_endpoint_length: int = field(
        default_factory=lambda: int(os.environ.get("MIN_ENDPOINT_LENGTH", "100"))
    )
    max_title_length: int = 200
    max_description_length: int = 500
    max_content_length: int = field(
        default_factory=lambda: int(os.environ.get("MAX_CONTENT_LENGTH", "20000"))
    )
    preview_length: int = 200

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------
    search_depth: int = field(
        default_factory=lambda: int(os.environ.get("SEARCH_DEPTH", "3"))
    )
    brave_api_key: str = field(
        default_factory=lambda: os.environ.get("BRAVE_API_KEY", "")
    )
    ddg_max_results: int = field(
        default_factory=lambda: int(os.environ.get("DDG_MAX_RESULTS", "25"))
    )
    reddit_limit: int = field(
        default_factory=lambda: int(os.environ.get("REDDIT_LIMIT", "25"))
    )
    cdx_limit: int = field(
        default_factory=lambda: int(os.environ.get("CDX_LIMIT", "100"))
    )

    # ------------------------------------------------------------------
    # Browser & outputs
    # ------------------------------------------------------------------
    headless: bool = field(default_factory=lambda: _env_bool("SCOUT_HEADLESS", "true"))
    screenshots: bool = field(default_factory=lambda: _env_bool("SCOUT_SCREENSHOTS", "false"))
    output_dir: Path = field(
        default_factory=lambda: Path(os.environ.get("SCOUT_OUTPUT_DIR", "."))
    )

    @property
    def dataset_path(self) -> Path:
        return self.output_dir / "scraped_artifacts.json"

    @property
    def feed_path(self) -> Path:
        return self.output_dir / "feed_data.json"

    @property
    def screenshot_dir(self) -> Path:
        return self.output_dir / "screenshots"

    def ensure_output_dir(self) -> None:
        """Create the output directory if it does not exist."""
        self.output_dir.mkdir(parents=True, exist_ok=True)


# Module-level singleton, import this everywhere:
#   from scout.config import settings
settings = Settings()
