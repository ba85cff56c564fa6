"""Custom exception hierarchy for SOLSIM."""

from __future__ import annotations

from typing import Any


class SimulatorBaseError(Exception):
    """Base exception for all SOLSIM errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.context: dict[str, Any] = context or {}


# ── Simulation Engine ────────────────────────────────────────────

class InvalidParameterError(SimulatorBaseError):
    """Unknown game mode or non-positive starting capital."""


# ── Session Store ────────────────────────────────────────────────

class ActiveSessionExistsError(SimulatorBaseError):
    """The user already has an active trading session."""
