"""Entry point and dependency wiring."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from cmdpilot.cli.app import app
from cmdpilot.config.settings import Settings
from cmdpilot.exceptions import PolicyConfigError
from cmdpilot.executor.orchestrator import ExecutionOrchestrator
from cmdpilot.executor.terminal import BaseTerminal, DryRunTerminal, SubprocessTerminal
from cmdpilot.memory.store import ExecutionStore
from cmdpilot.models.policy import AutoApprovalMode, PolicyConfig
from cmdpilot.models.project import ProjectProfile
from cmdpilot.pipeline import Pipeline
from cmdpilot.planner.execution_planner import ExecutionPlanner
from cmdpilot.policy.risk_levels import mode_from_string
from cmdpilot.policy.safety_policy import SafetyPolicy


def load_policy_file(path: Path) -> dict[str, Any]:
    """Read a partial policy configuration from a JSON file."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except OSError as exc:
        raise PolicyConfigError(f"Cannot read policy file {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise PolicyConfigError(f"Malformed JSON in policy file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise PolicyConfigError(f"Policy file {path} must contain a JSON object")
    return data


def build_policy(
    settings: Settings | None = None,
    mode: AutoApprovalMode | None = None,
) -> SafetyPolicy:
    settings = settings or Settings()

    policy = SafetyPolicy(
        PolicyConfig(
            enabled=settings.enabled,
            mode=mode_from_string(settings.mode),
            max_auto_executions=settings.max_auto_executions,
        )
    )
    # Policy file overrides environment settings; an explicit mode overrides both.
    if settings.policy_file is not None:
        policy.import_config(load_policy_file(settings.policy_file))
    if mode is not None:
        policy.set_mode(mode)
    return policy


def build_terminal(settings: Settings, dry_run: bool = False) -> BaseTerminal:
    if dry_run or settings.dry_run:
        return DryRunTerminal()
    return SubprocessTerminal(timeout=settings.command_timeout)


def build_pipeline(
    workspace: Path | str | None = None,
    dry_run: bool = False,
    mode: AutoApprovalMode | None = None,
    project: ProjectProfile | None = None,
    settings: Settings | None = None,
) -> Pipeline:
    settings = settings or Settings()

    policy = build_policy(settings, mode=mode)
    planner = ExecutionPlanner(policy)
    orchestrator = ExecutionOrchestrator(policy, workspace=workspace, project=project)
    store = ExecutionStore(db_path=settings.db_path)

    return Pipeline(
        policy=policy,
        planner=planner,
        orchestrator=orchestrator,
        terminal=build_terminal(settings, dry_run=dry_run),
        store=store,
    )


if __name__ == "__main__":
    app()
