"""JSON persistence for planner state snapshots.

The file keeps the camelCase shape (``accounts``, ``goals`` with
``subGoals``, ``allocations`` with ``accountId``/``subGoalId``) so older
snapshots keep loading.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Callable

from envelopes import config
from envelopes.domain import State
from envelopes.events import Event
from envelopes.functional import Either, Left, Right
from envelopes.sanitize import sanitize
from envelopes.transforms import state_from_dict, state_to_dict

logger = logging.getLogger(__name__)


def _decode(text: str) -> Either[dict, object]:
    try:
        return Right(json.loads(text))
    except (ValueError, TypeError, RecursionError) as exc:
        # ValueError covers JSONDecodeError and over-long integer literals
        return Left({
            "error": "invalid_json",
            "message": f"Could not parse state JSON: {exc}",
        })


def _require_object(data: object) -> Either[dict, dict]:
    if not isinstance(data, dict):
        return Left({
            "error": "invalid_shape",
            "message": f"Expected a JSON object, got {type(data).__name__}",
        })
    return Right(data)


def parse_state(text: str) -> Either[dict, State]:
    return _decode(text).bind(_require_object).map(state_from_dict).map(sanitize)


def export_json(state: State) -> str:
    return json.dumps(state_to_dict(state), indent=2)


def _read_text(path: Path) -> Either[dict, str]:
    try:
        return Right(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        return Left({"error": "unreadable", "message": f"{path}: {exc}"})


def _read(path: Path) -> Either[dict, State]:
    return _read_text(path).bind(parse_state)


def load_seed(path: Path | None = None) -> State:
    target = path or config.SEED_PATH
    result = _read(target)
    if result.is_left():
        logger.warning("Seed unavailable, starting empty: %s", result.get_error()["message"])
    return result.get_or_else(sanitize(State()))


def load_state(path: Path | None = None, seed_path: Path | None = None) -> State:
    """Load saved state, falling back to the seed and then to an empty state."""
    target = path or config.STATE_PATH
    if not target.exists():
        logger.info("No saved state at %s, loading seed", target)
        return load_seed(seed_path)

    result = _read(target)
    if result.is_left():
        logger.warning("Saved state rejected, loading seed: %s", result.get_error()["message"])
        return load_seed(seed_path)
    return result.get_or_else(None)


def save_state(state: State, path: Path | None = None) -> None:
    target = path or config.STATE_PATH
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("w", encoding="utf-8") as handle:
        json.dump(state_to_dict(state), handle, indent=2)


def make_persist_handler(path: Path | None = None) -> Callable[[Event, dict], dict]:
    """STATE_CHANGED handler that writes the snapshot; a failed write is logged only."""

    def persist_handler(event: Event, payload: dict) -> dict:
        state = payload.get("state")
        if not isinstance(state, State):
            return {"saved": False}
        try:
            save_state(state, path)
        except OSError as exc:
            logger.error("Failed to save state: %s", exc)
            return {"saved": False, "error": str(exc)}
        return {"saved": True}

    return persist_handler
