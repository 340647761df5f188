"""Safety policy: classifies shell commands and decides auto-approval."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable

from pydantic import ValidationError

from cmdpilot.exceptions import PolicyConfigError
from cmdpilot.models.policy import (
    AutoApprovalMode,
    CommandUsage,
    FileOperation,
    PolicyConfig,
    PolicyStats,
    RiskLevel,
    SafetyVerdict,
    VerdictRule,
)
from cmdpilot.policy.risk_levels import is_above_threshold

logger = logging.getLogger(__name__)

# Highest risk each mode auto-approves.
_MODE_CEILING: dict[AutoApprovalMode, RiskLevel] = {
    AutoApprovalMode.CONSERVATIVE: RiskLevel.LOW,
    AutoApprovalMode.BALANCED: RiskLevel.MEDIUM,
    AutoApprovalMode.AGGRESSIVE: RiskLevel.HIGH,
}

_FILE_OPS_BY_MODE: dict[AutoApprovalMode, frozenset[FileOperation]] = {
    AutoApprovalMode.CONSERVATIVE: frozenset({FileOperation.READ}),
    AutoApprovalMode.BALANCED: frozenset({FileOperation.READ, FileOperation.WRITE}),
    AutoApprovalMode.AGGRESSIVE: frozenset(FileOperation),
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _normalize(command: str) -> str:
    return command.strip().lower()


def _first_prefix(normalized: str, patterns: list[str]) -> str | None:
    for pattern in patterns:
        if normalized.startswith(pattern.lower()):
            return pattern
    return None


class SafetyPolicy:
    """Scores commands by risk and answers whether they may skip confirmation.

    One instance is owned per session; it carries the policy configuration, the
    auto-execution counter and a per-command usage tally.
    """

    def __init__(
        self,
        config: PolicyConfig | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._config = config.model_copy(deep=True) if config else PolicyConfig()
        self._clock = clock
        self._execution_count = 0
        self._usage: dict[str, CommandUsage] = {}

    # -- configuration -----------------------------------------------------

    @property
    def mode(self) -> AutoApprovalMode:
        return self._config.mode

    @property
    def execution_count(self) -> int:
        return self._execution_count

    def is_enabled(self) -> bool:
        return self._config.enabled

    def enable(self, mode: AutoApprovalMode = AutoApprovalMode.BALANCED) -> None:
        self._config.enabled = True
        self._config.mode = mode
        logger.info("Auto-approval enabled in %s mode", mode.value)

    def disable(self) -> None:
        self._config.enabled = False
        logger.info("Auto-approval disabled; every command needs confirmation")

    def set_mode(self, mode: AutoApprovalMode) -> None:
        self._config.mode = mode
        logger.info("Auto-approval mode set to %s", mode.value)

    def export_config(self) -> PolicyConfig:
        return self._config.model_copy(deep=True)

    def import_config(self, config: PolicyConfig | dict[str, Any]) -> None:
        """Shallow-merge ``config`` into the current configuration."""
        if isinstance(config, PolicyConfig):
            updates = config.model_dump()
        else:
            updates = dict(config)
        merged = {**self._config.model_dump(), **updates}
        try:
            self._config = PolicyConfig.model_validate(merged)
        except ValidationError as exc:
            raise PolicyConfigError(f"Invalid policy configuration: {exc}") from exc

    # -- classification ----------------------------------------------------

    def classify(self, command: str) -> SafetyVerdict:
        normalized = _normalize(command)
        # Leading space lets " nc -e" match at the start but not inside "rsync -e".
        padded = f" {normalized}"

        for pattern in self._config.forbidden_patterns:
            if pattern.lower() in padded:
                return SafetyVerdict(
                    is_safe=False,
                    reason=f"contains risky pattern: {pattern.strip()}",
                    risk_level=RiskLevel.CRITICAL,
                    rule=VerdictRule.FORBIDDEN,
                )

        if normalized.startswith("sudo ") or "as administrator" in normalized:
            return SafetyVerdict(
                is_safe=False,
                reason="requires elevated privileges",
                risk_level=RiskLevel.CRITICAL,
                rule=VerdictRule.ELEVATED,
            )

        if "| sh" in normalized or "| bash" in normalized:
            return SafetyVerdict(
                is_safe=False,
                reason="piped shell execution is dangerous",
                risk_level=RiskLevel.CRITICAL,
                rule=VerdictRule.PIPED_SHELL,
            )

        if self.is_trusted(command):
            return SafetyVerdict(
                is_safe=True,
                reason="trusted command pattern",
                risk_level=RiskLevel.LOW,
                rule=VerdictRule.TRUSTED,
            )

        confirm = _first_prefix(normalized, self._config.confirm_patterns)
        if confirm is not None:
            return SafetyVerdict(
                is_safe=True,
                reason=f"requires confirmation: {confirm}",
                risk_level=RiskLevel.MEDIUM,
                rule=VerdictRule.CONFIRM,
            )

        return SafetyVerdict(
            is_safe=True,
            reason="unknown command — proceed with caution",
            risk_level=RiskLevel.MEDIUM,
            rule=VerdictRule.DEFAULT,
        )

    def is_trusted(self, command: str) -> bool:
        return _first_prefix(_normalize(command), self._config.trusted_patterns) is not None

    # -- decisions ---------------------------------------------------------

    def should_auto_approve(self, command: str) -> bool:
        if not self._config.enabled:
            return False

        if self._execution_count >= self._config.max_auto_executions:
            logger.warning(
                "Auto-execution limit of %d reached; routing to confirmation",
                self._config.max_auto_executions,
            )
            return False

        verdict = self.classify(command)
        if verdict.rule == VerdictRule.CONFIRM:
            return False
        if self._config.mode == AutoApprovalMode.CONSERVATIVE and verdict.rule != VerdictRule.TRUSTED:
            return False
        return not is_above_threshold(verdict.risk_level, _MODE_CEILING[self._config.mode])

    def should_approve_file_op(self, operation: FileOperation | str, path: str) -> bool:
        if not self._config.enabled:
            return False

        operation = FileOperation(operation)
        if operation == FileOperation.READ:
            return True

        normalized_path = path.lower()
        for pattern in self._config.sensitive_path_patterns:
            if pattern.lower() in normalized_path:
                return False

        return operation in _FILE_OPS_BY_MODE[self._config.mode]

    # -- bookkeeping -------------------------------------------------------

    def record_execution(self, command: str, succeeded: bool) -> None:
        self._execution_count += 1

        key = self._command_key(command)
        usage = self._usage.get(key) or CommandUsage()
        self._usage[key] = CommandUsage(count=usage.count + 1, last_used=self._clock())

        preview = command[:50]
        if succeeded:
            logger.info("Command succeeded: %s", preview)
        else:
            logger.warning("Command failed: %s", preview)

    def reset_execution_counter(self) -> None:
        self._execution_count = 0

    def get_usage(self) -> dict[str, CommandUsage]:
        return {k: v.model_copy() for k, v in self._usage.items()}

    def get_stats(self) -> PolicyStats:
        return PolicyStats(
            execution_count=self._execution_count,
            max_auto_executions=self._config.max_auto_executions,
            mode=self._config.mode,
            enabled=self._config.enabled,
        )

    @staticmethod
    def _command_key(command: str) -> str:
        parts = command.strip().split()
        return parts[0].lower() if parts else ""
