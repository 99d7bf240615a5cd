"""Display helpers for currency amounts and allocator outcomes."""

from __future__ import annotations

import math
from typing import Tuple

from envelopes.config import CURRENCY_SYMBOL
from envelopes.domain import (
    ALL_FUNDED,
    ALREADY_FUNDED,
    APPLIED_FULL,
    APPLIED_PARTIAL,
    INVALID_SELECTION,
    MOVED,
    NO_AVAILABLE_CASH,
    NO_FUNDS,
    NO_VALID_MOVES,
    NOTHING,
    Outcome,
)


def _whole_pounds(amount: float) -> int:
    # halves round away from zero, like the browser's currency formatter
    if isinstance(amount, int):
        return amount
    if not math.isfinite(amount):
        return 0
    magnitude = math.floor(abs(amount) + 0.5)
    return -magnitude if amount < 0 else magnitude


def format_gbp(amount: float) -> str:
    """Format an amount as whole pounds, e.g. ``£1,234`` or ``-£50``."""
    value = _whole_pounds(amount or 0)
    sign = "-" if value < 0 else ""
    return f"{sign}{CURRENCY_SYMBOL}{abs(value):,}"


_WARNINGS = {
    NOTHING: "Enter a positive amount to assign.",
    INVALID_SELECTION: "Select both an account and a sub-goal.",
    NO_AVAILABLE_CASH: "Selected account has no available cash to assign.",
    ALREADY_FUNDED: "That sub-goal is already fully funded.",
    ALL_FUNDED: "All sub-goals are fully funded already.",
    NO_FUNDS: "No available cash to auto-assign.",
    NO_VALID_MOVES: "Auto-assign did not find any valid allocation moves.",
}


def outcome_message(outcome: Outcome, label: str | None = None) -> Tuple[str, str]:
    """Return ``(text, level)`` for an outcome; level is "success" or "warn".

    ``label`` names the sub-goal for a full assignment, e.g. "House -> Deposit".
    """
    if outcome.kind in _WARNINGS:
        return _WARNINGS[outcome.kind], "warn"
    if outcome.kind == APPLIED_PARTIAL:
        return f"Assigned {format_gbp(outcome.amount)} (capped by available cash or remaining target).", "warn"
    if outcome.kind == APPLIED_FULL:
        target = f" to {label}" if label else ""
        return f"Assigned {format_gbp(outcome.amount)}{target}.", "success"
    if outcome.kind == MOVED:
        return f"Auto-assigned {format_gbp(outcome.amount)} across open sub-goals.", "success"
    return outcome.kind, "warn"
