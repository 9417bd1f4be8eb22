"""Configuration defaults and .env loading.

WHY: Front ends share a few deployment-level settings (where the state
file lives, the starting reading speed, how long a pause may last before
a session is committed). Keeping them in one module makes them easy to
find and override without touching engine code.

HOW: python-dotenv loads the .env file on import. Each setting is read
from the environment with a documented default. Numeric settings that
fail to parse fall back to the default with a warning rather than
stopping the program.

RULES:
- RSVP_STATE_PATH: JSON state file (default ~/.rsvp_reader/state.json)
- RSVP_DEFAULT_WPM: starting words per minute when nothing is saved (250)
- RSVP_IDLE_COMMIT_SECONDS: pause length that ends a session (60)
- RSVP_SAVE_DEBOUNCE_MS: delay before a position snapshot is written (500)
- RSVP_LOG_LEVEL: logging level name for the front ends (WARNING)
"""

from __future__ import annotations

import logging
import math
import os
from pathlib import Path

from dotenv import load_dotenv

from rsvp_reader.core.units import DEFAULT_WPM

# Load .env from the project root (where the script is run from)
load_dotenv()

logger = logging.getLogger(__name__)


def _env_number(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring non-numeric %s=%r", name, raw)
        return default
    if not math.isfinite(value) or value <= 0:
        logger.warning("Ignoring non-positive or non-finite %s=%r", name, raw)
        return default
    return value


DEFAULT_STATE_PATH = Path(
    os.getenv("RSVP_STATE_PATH", "~/.rsvp_reader/state.json")
).expanduser()

DEFAULT_START_WPM = _env_number("RSVP_DEFAULT_WPM", DEFAULT_WPM)

IDLE_COMMIT_MS = int(_env_number("RSVP_IDLE_COMMIT_SECONDS", 60) * 1000)

SAVE_DEBOUNCE_MS = int(_env_number("RSVP_SAVE_DEBOUNCE_MS", 500))

LOG_LEVEL = os.getenv("RSVP_LOG_LEVEL", "WARNING").upper()
