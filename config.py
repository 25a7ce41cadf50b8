"""Centralised config loader: reads from .env and environment variables."""

import os
from dataclasses import dataclass, replace
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root (silently skipped if absent in CI)
load_dotenv(Path(__file__).parent / ".env")


def _get(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def _get_int(key: str, default: int = 0) -> int:
    try:
        return int(_get(key, str(default)))
    except ValueError:
        return default


def _get_float(key: str, default: float = 0.0) -> float:
    try:
        return float(_get(key, str(default)))
    except ValueError:
        return default


def _get_bool(key: str, default: bool = False) -> bool:
    return _get(key, "true" if default else "false").lower() in ("1", "true", "yes")


# ── Browser ────────────────────────────────────────────────────────────────────
HEADLESS: bool = _get_bool("HEADLESS", True)
TIMEOUT_MS: int = _get_int("TIMEOUT_MS", 30_000)
LISTING_WAIT_MS: int = _get_int("LISTING_WAIT_MS", 15_000)
PROXY_URL: str = _get("PROXY_URL")

# Pause after dismissing the cookie dialog (seconds)
PAUSE_MIN: float = _get_float("PAUSE_MIN", 0.8)
PAUSE_MAX: float = _get_float("PAUSE_MAX", 1.5)

# ── Delivery ───────────────────────────────────────────────────────────────────
HOST: str = _get("HOST", "0.0.0.0")
PORT: int = _get_int("PORT", 3000)
OUTPUT_FILE: str = _get("OUTPUT_FILE", "booking-results.json")
LOG_LEVEL: str = _get("LOG_LEVEL", "INFO").upper()


@dataclass(frozen=True)
class Settings:
    """Process-wide settings handed to the pipeline and the HTTP app."""

    headless: bool = HEADLESS
    timeout_ms: int = TIMEOUT_MS
    listing_wait_ms: int = LISTING_WAIT_MS
    proxy_url: str = PROXY_URL
    pause_min: float = PAUSE_MIN
    pause_max: float = PAUSE_MAX
    host: str = HOST
    port: int = PORT
    output_file: str = OUTPUT_FILE


def load_settings(**overrides) -> Settings:
    """Build Settings from the environment, with keyword overrides applied."""
    return replace(Settings(), **overrides)
