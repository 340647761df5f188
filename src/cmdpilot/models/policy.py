"""Policy models: verdicts and configuration of the safety policy."""

from __future__ import annotations

import enum
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from cmdpilot.policy.rules import (
    DEFAULT_CONFIRM_PATTERNS,
    DEFAULT_FORBIDDEN_PATTERNS,
    DEFAULT_SENSITIVE_PATH_PATTERNS,
    DEFAULT_TRUSTED_PATTERNS,
)


class RiskLevel(int, enum.Enum):
    LOW = 1
    MEDIUM = 2
    HIGH = 3
    CRITICAL = 4


class AutoApprovalMode(str, enum.Enum):
    CONSERVATIVE = "conservative"
    BALANCED = "balanced"
    AGGRESSIVE = "aggressive"


class FileOperation(str, enum.Enum):
    READ = "read"
    WRITE = "write"
    DELETE = "delete"
    CREATE = "create"


class VerdictRule(str, enum.Enum):
    """Which classification rule produced a verdict."""

    FORBIDDEN = "forbidden"
    ELEVATED = "elevated"
    PIPED_SHELL = "piped_shell"
    TRUSTED = "trusted"
    CONFIRM = "confirm"
    DEFAULT = "default"


class SafetyVerdict(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_safe: bool
    reason: str
    risk_level: RiskLevel
    rule: VerdictRule = VerdictRule.DEFAULT


class PolicyConfig(BaseModel):
    enabled: bool = True
    mode: AutoApprovalMode = AutoApprovalMode.AGGRESSIVE
    trusted_patterns: list[str] = Field(
        default_factory=lambda: list(DEFAULT_TRUSTED_PATTERNS)
    )
    forbidden_patterns: list[str] = Field(
        default_factory=lambda: list(DEFAULT_FORBIDDEN_PATTERNS)
    )
    confirm_patterns: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CONFIRM_PATTERNS)
    )
    sensitive_path_patterns: list[str] = Field(
        default_factory=lambda: list(DEFAULT_SENSITIVE_PATH_PATTERNS)
    )
    max_auto_executions: int = Field(default=50, ge=0)


class CommandUsage(BaseModel):
    count: int = 0
    last_used: datetime | None = None


class PolicyStats(BaseModel):
    execution_count: int
    max_auto_executions: int
    mode: AutoApprovalMode
    enabled: bool
