"""Plan models: output of the execution planner, mutated by the orchestrator."""

from __future__ import annotations

import enum
import uuid
from datetime import datetime, timezone
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field

from cmdpilot.exceptions import InvalidTransitionError

SECONDS_PER_STEP = 5


class StepKind(str, enum.Enum):
    COMMAND = "command"
    FILE_READ = "file_read"
    FILE_WRITE = "file_write"
    ANALYSIS = "analysis"
    TEST = "test"


class StepStatus(str, enum.Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATUSES


_TERMINAL_STATUSES = frozenset({StepStatus.COMPLETED, StepStatus.FAILED, StepStatus.SKIPPED})

_ALLOWED_TRANSITIONS: dict[StepStatus, frozenset[StepStatus]] = {
    StepStatus.PENDING: frozenset({StepStatus.RUNNING}) | _TERMINAL_STATUSES,
    StepStatus.RUNNING: _TERMINAL_STATUSES,
    StepStatus.COMPLETED: frozenset(),
    StepStatus.FAILED: frozenset(),
    StepStatus.SKIPPED: frozenset(),
}


class PlanRisk(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class StepBase(BaseModel):
    id: str
    description: str = ""
    auto_approved: bool = False
    status: StepStatus = StepStatus.PENDING
    output: str | None = None
    error: str | None = None

    def transition(self, status: StepStatus) -> None:
        if status not in _ALLOWED_TRANSITIONS[self.status]:
            raise InvalidTransitionError(
                f"Step {self.id} cannot move from {self.status.value} to {status.value}"
            )
        self.status = status

    def fail(self, error: str) -> None:
        self.transition(StepStatus.FAILED)
        self.error = error


class CommandStep(StepBase):
    kind: Literal[StepKind.COMMAND] = StepKind.COMMAND
    command: str | None = None


class FileReadStep(StepBase):
    kind: Literal[StepKind.FILE_READ] = StepKind.FILE_READ
    file_path: str | None = None


class FileWriteStep(StepBase):
    kind: Literal[StepKind.FILE_WRITE] = StepKind.FILE_WRITE
    file_path: str | None = None
    content: str | None = None


class AnalysisStep(StepBase):
    kind: Literal[StepKind.ANALYSIS] = StepKind.ANALYSIS
    file_path: str | None = None


class RunTestsStep(StepBase):
    # Explicit override; derived from the project profile when absent.
    kind: Literal[StepKind.TEST] = StepKind.TEST
    command: str | None = None


ExecutionStep = Annotated[
    Union[CommandStep, FileReadStep, FileWriteStep, AnalysisStep, RunTestsStep],
    Field(discriminator="kind"),
]


class ExecutionPlan(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    steps: list[ExecutionStep] = Field(default_factory=list)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def estimated_seconds(self) -> int:
        return len(self.steps) * SECONDS_PER_STEP

    @computed_field  # type: ignore[prop-decorator]
    @property
    def risk_level(self) -> PlanRisk:
        not_approved = sum(1 for s in self.steps if not s.auto_approved)
        if not_approved > len(self.steps) / 2:
            return PlanRisk.HIGH
        if not_approved > 0:
            return PlanRisk.MEDIUM
        return PlanRisk.LOW

    def auto_approved_steps(self) -> list[StepBase]:
        return [s for s in self.steps if s.auto_approved]

    def steps_awaiting_approval(self) -> list[StepBase]:
        return [
            s for s in self.steps
            if not s.auto_approved and s.status == StepStatus.PENDING
        ]


class StepEvent(BaseModel):
    """Immutable snapshot of a step, emitted on every status transition."""

    model_config = ConfigDict(frozen=True)

    step: ExecutionStep
    index: int = 0
    total: int = 1

    @classmethod
    def capture(cls, step: StepBase, index: int = 0, total: int = 1) -> StepEvent:
        return cls(step=step.model_copy(deep=True), index=index, total=total)
