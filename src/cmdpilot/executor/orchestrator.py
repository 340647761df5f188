"""Execution orchestrator: runs the auto-approved steps of a plan."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Awaitable, Callable

from cmdpilot.exceptions import ExecutionError
from cmdpilot.executor.terminal import BaseTerminal, TerminalResult
from cmdpilot.models.plan import (
    AnalysisStep,
    CommandStep,
    ExecutionPlan,
    FileReadStep,
    FileWriteStep,
    RunTestsStep,
    StepBase,
    StepEvent,
    StepKind,
    StepStatus,
)
from cmdpilot.models.policy import AutoApprovalMode, PolicyStats
from cmdpilot.models.project import ProjectProfile
from cmdpilot.policy.safety_policy import SafetyPolicy

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[StepEvent], None]
_Handler = Callable[[StepBase, BaseTerminal, str], Awaitable[None]]


def _compose_output(result: TerminalResult) -> str:
    if result.stderr:
        return f"{result.stdout}\n[stderr]: {result.stderr}"
    return result.stdout


class ExecutionOrchestrator:
    def __init__(
        self,
        policy: SafetyPolicy,
        workspace: Path | str | None = None,
        project: ProjectProfile | None = None,
    ) -> None:
        self._policy = policy
        self._workspace = str(workspace) if workspace is not None else None
        self._project = project
        self._history: list[StepBase] = []
        self._run_lock = asyncio.Lock()
        self._handlers: dict[StepKind, _Handler] = {
            StepKind.COMMAND: self._run_command,
            StepKind.FILE_READ: self._complete_placeholder,
            StepKind.FILE_WRITE: self._complete_placeholder,
            StepKind.ANALYSIS: self._complete_placeholder,
            StepKind.TEST: self._run_tests,
        }

    # -- context -----------------------------------------------------------

    @property
    def workspace(self) -> str | None:
        return self._workspace

    def set_workspace(self, path: Path | str) -> None:
        self._workspace = str(path)
        self._project = None

    @property
    def project(self) -> ProjectProfile | None:
        return self._project

    def set_project(self, profile: ProjectProfile | None) -> None:
        self._project = profile

    # -- execution ---------------------------------------------------------

    async def run_step(
        self,
        step: StepBase,
        terminal: BaseTerminal,
        on_progress: ProgressCallback | None = None,
        *,
        index: int = 0,
        total: int = 1,
    ) -> StepBase:
        if step.status != StepStatus.PENDING:
            logger.warning("Step %s is already %s; not running it again", step.id, step.status.value)
            return step

        if self._workspace is None:
            step.fail("No workspace set")
            return step

        step.transition(StepStatus.RUNNING)
        self._emit(on_progress, step, index, total)

        try:
            await self._handlers[step.kind](step, terminal, self._workspace)
        except Exception as exc:
            if step.status == StepStatus.RUNNING:
                step.fail(str(exc))
            else:
                step.error = str(exc)

        logger.debug("Step %s finished: %s", step.id, step.status.value)
        self._history.append(step)
        self._emit(on_progress, step, index, total)
        return step

    async def run_auto_approved_steps(
        self,
        plan: ExecutionPlan,
        terminal: BaseTerminal,
        on_progress: ProgressCallback | None = None,
    ) -> list[StepBase]:
        async with self._run_lock:
            selected = [s for s in plan.auto_approved_steps() if s.status == StepStatus.PENDING]
            attempted: list[StepBase] = []
            for index, step in enumerate(selected):
                result = await self.run_step(
                    step, terminal, on_progress, index=index, total=len(selected)
                )
                attempted.append(result)

                if (
                    result.status == StepStatus.FAILED
                    and self._policy.mode == AutoApprovalMode.CONSERVATIVE
                ):
                    logger.info(
                        "Stopping plan %s after failed step %s (conservative mode)",
                        plan.id,
                        result.id,
                    )
                    break
            return attempted

    # -- history -----------------------------------------------------------

    def get_execution_history(self) -> tuple[StepBase, ...]:
        return tuple(step.model_copy(deep=True) for step in self._history)

    def clear_execution_history(self) -> None:
        self._history.clear()
        self._policy.reset_execution_counter()

    def get_stats(self) -> PolicyStats:
        return self._policy.get_stats()

    # -- step handlers -----------------------------------------------------

    async def _run_command(self, step: CommandStep, terminal: BaseTerminal, cwd: str) -> None:
        if not step.command:
            raise ExecutionError("No command specified", step_id=step.id)
        await self._execute(step, step.command, terminal, cwd)

    async def _run_tests(self, step: RunTestsStep, terminal: BaseTerminal, cwd: str) -> None:
        command = step.command or (self._project.test_command() if self._project else None)
        if not command:
            raise ExecutionError("No test command available for this project", step_id=step.id)
        await self._execute(step, command, terminal, cwd)

    async def _complete_placeholder(
        self,
        step: FileReadStep | FileWriteStep | AnalysisStep,
        terminal: BaseTerminal,
        cwd: str,
    ) -> None:
        # File access and analysis are carried out by their own collaborators.
        step.transition(StepStatus.COMPLETED)

    async def _execute(self, step: StepBase, command: str, terminal: BaseTerminal, cwd: str) -> None:
        result = await terminal.execute(command, cwd)
        succeeded = result.exit_code == 0
        step.output = _compose_output(result)
        if succeeded:
            step.transition(StepStatus.COMPLETED)
        else:
            step.fail(f"Exit code: {result.exit_code}")
        self._policy.record_execution(command, succeeded)

    @staticmethod
    def _emit(on_progress: ProgressCallback | None, step: StepBase, index: int, total: int) -> None:
        if on_progress is None:
            return
        try:
            on_progress(StepEvent.capture(step, index=index, total=total))
        except Exception:
            logger.exception("Progress callback failed for step %s", step.id)
