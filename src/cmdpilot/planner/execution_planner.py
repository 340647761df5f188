"""Execution planner: turns AI response text into an ordered execution plan."""

from __future__ import annotations

import logging

from cmdpilot.models.plan import CommandStep, ExecutionPlan
from cmdpilot.planner.code_blocks import extract_commands, is_shell_block, parse_code_blocks
from cmdpilot.policy.safety_policy import SafetyPolicy

logger = logging.getLogger(__name__)

_DESCRIPTION_LIMIT = 50


def describe_command(command: str) -> str:
    suffix = "..." if len(command) > _DESCRIPTION_LIMIT else ""
    return f"Execute: {command[:_DESCRIPTION_LIMIT]}{suffix}"


class ExecutionPlanner:
    def __init__(self, policy: SafetyPolicy) -> None:
        self._policy = policy

    def extract_all_commands(self, response_text: str) -> list[str]:
        commands: list[str] = []
        for block in parse_code_blocks(response_text):
            if is_shell_block(block):
                commands.extend(extract_commands(block.code))
        return commands

    def create_plan(self, response_text: str) -> ExecutionPlan:
        steps = [
            CommandStep(
                id=f"step-{index}",
                description=describe_command(command),
                command=command,
                auto_approved=self._policy.should_auto_approve(command),
            )
            for index, command in enumerate(self.extract_all_commands(response_text), 1)
        ]
        plan = ExecutionPlan(steps=steps)
        logger.debug(
            "Built plan %s: %d step(s), %d auto-approved, risk %s",
            plan.id,
            len(steps),
            len(plan.auto_approved_steps()),
            plan.risk_level.value,
        )
        return plan
