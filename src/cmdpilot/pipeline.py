"""Pipeline that plans, logs, executes and logs again for one AI response."""

from __future__ import annotations

from cmdpilot.executor.orchestrator import ExecutionOrchestrator, ProgressCallback
from cmdpilot.executor.terminal import BaseTerminal
from cmdpilot.memory.store import ExecutionStore
from cmdpilot.models.plan import ExecutionPlan, StepBase
from cmdpilot.planner.execution_planner import ExecutionPlanner
from cmdpilot.policy.safety_policy import SafetyPolicy


class Pipeline:
    def __init__(
        self,
        policy: SafetyPolicy,
        planner: ExecutionPlanner,
        orchestrator: ExecutionOrchestrator,
        terminal: BaseTerminal,
        store: ExecutionStore,
    ) -> None:
        self._policy = policy
        self._planner = planner
        self._orchestrator = orchestrator
        self._terminal = terminal
        self._store = store

    def plan(self, response_text: str) -> ExecutionPlan:
        return self._planner.create_plan(response_text)

    async def run(
        self,
        response_text: str,
        on_progress: ProgressCallback | None = None,
    ) -> tuple[ExecutionPlan, list[StepBase]]:
        # 1. Build the plan
        plan = self._planner.create_plan(response_text)

        # 2. Log it
        await self._store.log_plan(
            self._store.plan_record(plan, source_text=response_text, mode=self._policy.mode.value)
        )

        if not plan.steps:
            return plan, []

        # 3. Execute the auto-approved subset
        attempted = await self._orchestrator.run_auto_approved_steps(
            plan, self._terminal, on_progress
        )

        # 4. Log results
        for step in attempted:
            await self._store.log_step(self._store.step_record(plan.id, step))

        return plan, attempted
