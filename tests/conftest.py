"""Shared fixtures and mocks for all tests."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from cmdpilot.config.settings import Settings
from cmdpilot.executor.orchestrator import ExecutionOrchestrator
from cmdpilot.executor.terminal import BaseTerminal, TerminalResult
from cmdpilot.memory.store import ExecutionStore
from cmdpilot.models.plan import CommandStep, ExecutionPlan
from cmdpilot.models.policy import AutoApprovalMode, PolicyConfig
from cmdpilot.planner.execution_planner import ExecutionPlanner
from cmdpilot.policy.safety_policy import SafetyPolicy


@pytest.fixture
def mock_settings(monkeypatch, tmp_path):
    monkeypatch.setenv("CMDPILOT_ENABLED", "true")
    monkeypatch.setenv("CMDPILOT_MODE", "balanced")
    monkeypatch.setenv("CMDPILOT_MAX_AUTO_EXECUTIONS", "50")
    monkeypatch.setenv("CMDPILOT_DB_PATH", str(tmp_path / "history.db"))
    monkeypatch.setenv("CMDPILOT_DRY_RUN", "false")
    monkeypatch.setenv("CMDPILOT_LOG_LEVEL", "DEBUG")
    monkeypatch.delenv("CMDPILOT_POLICY_FILE", raising=False)
    return Settings()


@pytest.fixture
def make_policy():
    def _make(mode: AutoApprovalMode = AutoApprovalMode.BALANCED, **overrides) -> SafetyPolicy:
        return SafetyPolicy(PolicyConfig(mode=mode, **overrides))
    return _make


@pytest.fixture
def policy(make_policy):
    return make_policy(AutoApprovalMode.BALANCED)


@pytest.fixture
def planner(policy):
    return ExecutionPlanner(policy)


@pytest.fixture
def orchestrator(policy, tmp_path):
    return ExecutionOrchestrator(policy, workspace=tmp_path)


@pytest.fixture
def make_terminal():
    """Terminal whose execute() returns the given results in order."""
    def _make(*results: TerminalResult) -> AsyncMock:
        terminal = AsyncMock(spec=BaseTerminal)
        terminal.execute = AsyncMock(
            side_effect=list(results) if results else None,
            return_value=TerminalResult(stdout="ok"),
        )
        return terminal
    return _make


@pytest_asyncio.fixture
async def temp_store():
    store = ExecutionStore(db_path=":memory:")
    await store.initialize()
    yield store
    await store.close()


@pytest.fixture
def sample_response():
    return (
        "First install the dependencies, then build:\n\n"
        "```bash\n"
        "npm install\n"
        "npm run build\n"
        "```\n"
    )


@pytest.fixture
def sample_plan():
    return ExecutionPlan(
        id="plan-001",
        steps=[
            CommandStep(id="step-1", description="Execute: git status", command="git status", auto_approved=True),
            CommandStep(id="step-2", description="Execute: npm install", command="npm install"),
            CommandStep(id="step-3", description="Execute: npm test", command="npm test", auto_approved=True),
        ],
    )
