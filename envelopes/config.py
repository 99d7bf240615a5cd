"""Configuration for the envelope planner.

Paths, household members and logging level, each overridable through an
environment variable.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Tuple

# Base project root - assumes this file is in envelopes/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

DATA_DIR = Path(os.getenv("ENVELOPES_DATA_DIR", _PROJECT_ROOT / "data"))
SEED_PATH = DATA_DIR / "seed.json"
STATE_PATH = Path(os.getenv("ENVELOPES_STATE_PATH", DATA_DIR / "state.json"))

DEFAULT_OWNER = "Joint"
CURRENCY_SYMBOL = "£"

LOG_LEVEL = os.getenv("ENVELOPES_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _parse_members(raw: str) -> Tuple[str, ...]:
    members = []
    for name in raw.split(","):
        name = name.strip()
        if name and name not in members:
            members.append(name)
    if DEFAULT_OWNER not in members:
        members.append(DEFAULT_OWNER)
    return tuple(members)


HOUSEHOLD_MEMBERS = _parse_members(os.getenv("ENVELOPES_MEMBERS", "Alex,Jordan,Joint"))


def configure_logging(level: str | None = None) -> None:
    """Set up root logging once for the app entry point."""
    logging.basicConfig(level=level or LOG_LEVEL, format=LOG_FORMAT)
