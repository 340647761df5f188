"""Custom exception hierarchy for cmdpilot."""

from __future__ import annotations


class CmdPilotError(Exception):
    """Base exception for all cmdpilot errors."""


class PolicyConfigError(CmdPilotError):
    """Raised when a policy configuration cannot be imported."""


class ExecutionError(CmdPilotError):
    """Raised when a plan step cannot be executed."""

    def __init__(self, message: str, step_id: str = "") -> None:
        super().__init__(message)
        self.step_id = step_id


class InvalidTransitionError(CmdPilotError):
    """Raised when a step is moved to a status it cannot reach."""


class StoreError(CmdPilotError):
    """Raised when the execution store is misused."""
