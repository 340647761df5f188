"""Risk and mode classification helpers."""

from __future__ import annotations

from cmdpilot.models.policy import AutoApprovalMode, RiskLevel


def mode_from_string(value: str) -> AutoApprovalMode:
    try:
        return AutoApprovalMode(value.strip().lower())
    except ValueError:
        raise ValueError(f"Unknown auto-approval mode: {value}") from None


def is_above_threshold(level: RiskLevel, threshold: RiskLevel) -> bool:
    return level.value > threshold.value
