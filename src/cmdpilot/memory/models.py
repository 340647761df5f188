"""Pydantic models for database records."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field


class PlanRecord(BaseModel):
    id: str
    source_text: str = ""
    step_count: int = 0
    auto_approved_count: int = 0
    estimated_seconds: int = 0
    risk_level: str = "low"
    mode: str = ""
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


class StepRecord(BaseModel):
    plan_id: str
    step_id: str
    kind: str
    description: str = ""
    command: str = ""
    auto_approved: bool = False
    status: str = "pending"
    output: str = ""
    error: str = ""
    recorded_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
