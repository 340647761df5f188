"""SQLite-backed audit store for plans and executed steps."""

from __future__ import annotations

from pathlib import Path

import aiosqlite

from cmdpilot.exceptions import StoreError
from cmdpilot.memory.migrations import TABLES
from cmdpilot.memory.models import PlanRecord, StepRecord
from cmdpilot.models.plan import ExecutionPlan, StepBase


class ExecutionStore:
    def __init__(self, db_path: Path | str = ":memory:") -> None:
        self.db_path = str(db_path)
        self._db: aiosqlite.Connection | None = None

    async def initialize(self) -> None:
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._db = await aiosqlite.connect(self.db_path)
        for table_sql in TABLES:
            await self._db.execute(table_sql)
        await self._db.commit()

    async def close(self) -> None:
        if self._db:
            await self._db.close()
            self._db = None

    def _get_db(self) -> aiosqlite.Connection:
        if self._db is None:
            raise StoreError("ExecutionStore not initialized - call initialize() first")
        return self._db

    @staticmethod
    def plan_record(plan: ExecutionPlan, source_text: str = "", mode: str = "") -> PlanRecord:
        return PlanRecord(
            id=plan.id,
            source_text=source_text,
            step_count=len(plan.steps),
            auto_approved_count=len(plan.auto_approved_steps()),
            estimated_seconds=plan.estimated_seconds,
            risk_level=plan.risk_level.value,
            mode=mode,
            created_at=plan.created_at,
        )

    @staticmethod
    def step_record(plan_id: str, step: StepBase) -> StepRecord:
        return StepRecord(
            plan_id=plan_id,
            step_id=step.id,
            kind=step.kind.value,
            description=step.description,
            command=getattr(step, "command", None) or "",
            auto_approved=step.auto_approved,
            status=step.status.value,
            output=step.output or "",
            error=step.error or "",
        )

    async def log_plan(self, record: PlanRecord) -> None:
        db = self._get_db()
        await db.execute(
            "INSERT INTO plans (id, source_text, step_count, auto_approved_count, "
            "estimated_seconds, risk_level, mode, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            (
                record.id,
                record.source_text,
                record.step_count,
                record.auto_approved_count,
                record.estimated_seconds,
                record.risk_level,
                record.mode,
                record.created_at.isoformat(),
            ),
        )
        await db.commit()

    async def log_step(self, record: StepRecord) -> None:
        db = self._get_db()
        await db.execute(
            "INSERT INTO step_results (plan_id, step_id, kind, description, command, "
            "auto_approved, status, output, error, recorded_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                record.plan_id,
                record.step_id,
                record.kind,
                record.description,
                record.command,
                int(record.auto_approved),
                record.status,
                record.output,
                record.error,
                record.recorded_at.isoformat(),
            ),
        )
        await db.commit()

    async def get_plan(self, plan_id: str) -> PlanRecord | None:
        db = self._get_db()
        cursor = await db.execute(
            "SELECT id, source_text, step_count, auto_approved_count, estimated_seconds, "
            "risk_level, mode, created_at FROM plans WHERE id = ?",
            (plan_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return PlanRecord(
            id=row[0],
            source_text=row[1],
            step_count=row[2],
            auto_approved_count=row[3],
            estimated_seconds=row[4],
            risk_level=row[5],
            mode=row[6],
            created_at=row[7],
        )

    async def get_plan_steps(self, plan_id: str) -> list[StepRecord]:
        db = self._get_db()
        cursor = await db.execute(
            "SELECT plan_id, step_id, kind, description, command, auto_approved, "
            "status, output, error, recorded_at "
            "FROM step_results WHERE plan_id = ? ORDER BY id",
            (plan_id,),
        )
        rows = await cursor.fetchall()
        return [
            StepRecord(
                plan_id=r[0],
                step_id=r[1],
                kind=r[2],
                description=r[3],
                command=r[4],
                auto_approved=bool(r[5]),
                status=r[6],
                output=r[7],
                error=r[8],
                recorded_at=r[9],
            )
            for r in rows
        ]

    async def get_history(self, limit: int = 20) -> list[dict]:
        db = self._get_db()
        cursor = await db.execute(
            "SELECT p.id, p.risk_level, p.mode, p.created_at, "
            "       s.step_id, s.command, s.status, s.error "
            "FROM plans p LEFT JOIN step_results s ON s.plan_id = p.id "
            "ORDER BY p.created_at DESC, s.id ASC LIMIT ?",
            (limit,),
        )
        rows = await cursor.fetchall()
        results: list[dict] = []
        for r in rows:
            results.append(
                {
                    "plan_id": r[0],
                    "risk_level": r[1],
                    "mode": r[2],
                    "created_at": r[3],
                    "step_id": r[4],
                    "command": r[5],
                    "status": r[6],
                    "error": r[7],
                }
            )
        return results
