"""Typer CLI commands."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from cmdpilot.cli.output import (
    print_awaiting_approval,
    print_error,
    print_history,
    print_info,
    print_plan,
    print_results,
    print_stats,
    print_step_event,
    print_verdict,
)
from cmdpilot.exceptions import CmdPilotError
from cmdpilot.models.policy import AutoApprovalMode
from cmdpilot.models.project import ProjectProfile, ProjectType
from cmdpilot.policy.risk_levels import mode_from_string

console = Console()
app = typer.Typer(name="cmdpilot", help="Decide which AI-suggested shell commands may run unattended.")


def _get_pipeline(
    workspace: Optional[Path] = None,
    dry_run: bool = False,
    mode: Optional[AutoApprovalMode] = None,
    project: Optional[ProjectProfile] = None,
):
    from cmdpilot.main import build_pipeline
    return build_pipeline(workspace=workspace, dry_run=dry_run, mode=mode, project=project)


def _get_policy(mode: Optional[AutoApprovalMode] = None):
    from cmdpilot.main import build_policy
    return build_policy(mode=mode)


def _parse_mode(value: Optional[str]) -> Optional[AutoApprovalMode]:
    if value is None:
        return None
    try:
        return mode_from_string(value)
    except ValueError as exc:
        print_error(str(exc))
        raise typer.Exit(1)


def _read_source(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    try:
        return Path(source).read_text(encoding="utf-8")
    except OSError as exc:
        print_error(f"Cannot read {source}: {exc}")
        raise typer.Exit(1)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Configure logging before any command runs."""
    from cmdpilot.config.log_setup import configure_logging
    from cmdpilot.config.settings import Settings

    try:
        level = "DEBUG" if verbose else Settings().log_level
    except Exception as exc:
        print_error(f"Failed to load settings: {exc}")
        raise typer.Exit(1)
    configure_logging(level)


@app.command()
def classify(
    command: str = typer.Argument(..., help="Shell command to classify"),
    mode: Optional[str] = typer.Option(None, "--mode", "-m", help="Auto-approval mode"),
) -> None:
    """Classify a single command and show whether it would be auto-approved."""
    try:
        policy = _get_policy(mode=_parse_mode(mode))
    except CmdPilotError as exc:
        print_error(str(exc))
        raise typer.Exit(1)
    print_verdict(command, policy.classify(command), policy.should_auto_approve(command))


@app.command()
def plan(
    source: str = typer.Argument(..., help="File with the AI response, or - for stdin"),
    mode: Optional[str] = typer.Option(None, "--mode", "-m", help="Auto-approval mode"),
) -> None:
    """Show the execution plan for an AI response without running anything."""
    text = _read_source(source)
    try:
        pipeline = _get_pipeline(mode=_parse_mode(mode))
    except CmdPilotError as exc:
        print_error(str(exc))
        raise typer.Exit(1)

    execution_plan = pipeline.plan(text)
    if not execution_plan.steps:
        print_info("No shell commands found.")
        return
    print_plan(execution_plan)


@app.command()
def run(
    source: str = typer.Argument(..., help="File with the AI response, or - for stdin"),
    workspace: Path = typer.Option(Path("."), "--workspace", "-w", help="Working directory"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Simulate without executing"),
    mode: Optional[str] = typer.Option(None, "--mode", "-m", help="Auto-approval mode"),
    project_type: Optional[ProjectType] = typer.Option(
        None, "--project-type", help="Project toolchain, used to resolve test steps"
    ),
    package_manager: Optional[str] = typer.Option(None, "--package-manager", help="Node package manager"),
    framework: Optional[str] = typer.Option(None, "--framework", help="Application framework"),
) -> None:
    """Run the auto-approved commands of an AI response."""
    text = _read_source(source)
    project = None
    if project_type is not None:
        project = ProjectProfile(
            project_type=project_type,
            package_manager=package_manager,
            framework=framework,
        )

    async def _run():
        pipeline = _get_pipeline(
            workspace=workspace.resolve(),
            dry_run=dry_run,
            mode=_parse_mode(mode),
            project=project,
        )
        await pipeline._store.initialize()
        try:
            execution_plan, attempted = await pipeline.run(text, on_progress=print_step_event)
            if not execution_plan.steps:
                print_info("No shell commands found.")
                return

            print_plan(execution_plan)
            if attempted:
                print_results(attempted)
            print_awaiting_approval(execution_plan.steps_awaiting_approval())
            print_stats(pipeline._orchestrator.get_stats())
        except CmdPilotError as exc:
            print_error(str(exc))
            raise typer.Exit(1)
        finally:
            await pipeline._store.close()

    asyncio.run(_run())


@app.command()
def history(
    limit: int = typer.Option(20, "--limit", "-n", help="Number of records"),
) -> None:
    """Show recently executed plans and steps."""
    async def _run():
        pipeline = _get_pipeline()
        await pipeline._store.initialize()
        try:
            rows = await pipeline._store.get_history(limit=limit)
            if not rows:
                print_info("No history found.")
            else:
                print_history(rows)
        finally:
            await pipeline._store.close()

    asyncio.run(_run())


@app.command()
def policy(
    mode: Optional[str] = typer.Option(None, "--mode", "-m", help="Auto-approval mode"),
) -> None:
    """Print the effective policy configuration as JSON."""
    try:
        safety_policy = _get_policy(mode=_parse_mode(mode))
    except CmdPilotError as exc:
        print_error(str(exc))
        raise typer.Exit(1)
    console.print_json(safety_policy.export_config().model_dump_json())


@app.command(name="config")
def show_config() -> None:
    """Show current configuration."""
    from cmdpilot.config.settings import Settings

    try:
        settings = Settings()
    except Exception as exc:
        print_error(f"Failed to load settings: {exc}")
        raise typer.Exit(1)

    table_data = {
        "Enabled": str(settings.enabled),
        "Mode": settings.mode,
        "Max Auto Executions": str(settings.max_auto_executions),
        "Policy File": str(settings.policy_file) if settings.policy_file else "-",
        "DB Path": str(settings.db_path),
        "Dry Run": str(settings.dry_run),
        "Command Timeout": f"{settings.command_timeout:g}s",
        "Log Level": settings.log_level,
    }

    from rich.table import Table
    table = Table(title="Configuration", show_header=False)
    table.add_column("Setting", style="bold cyan")
    table.add_column("Value")
    for k, v in table_data.items():
        table.add_row(k, v)
    console.print(table)
