"""Shared utilities: logger, pause helper."""

import asyncio
import logging
import random

import config

# ── Logger ─────────────────────────────────────────────────────────────────────

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s — %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


# ── Sleep helpers ──────────────────────────────────────────────────────────────

async def async_random_sleep(min_s: float, max_s: float) -> None:
    """Async random sleep between ``min_s`` and ``max_s`` seconds."""
    duration = random.uniform(min_s, max_s)
    get_logger("utils").debug("Async sleeping %.2fs", duration)
    await asyncio.sleep(duration)
