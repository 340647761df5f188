"""Rich display helpers for CLI output."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from cmdpilot.models.plan import ExecutionPlan, StepBase, StepEvent, StepStatus
from cmdpilot.models.policy import PolicyStats, RiskLevel, SafetyVerdict

console = Console()

_STATUS_STYLE: dict[StepStatus, str] = {
    StepStatus.PENDING: "dim",
    StepStatus.RUNNING: "yellow",
    StepStatus.COMPLETED: "green",
    StepStatus.FAILED: "red",
    StepStatus.SKIPPED: "dim",
}

_RISK_STYLE: dict[RiskLevel, str] = {
    RiskLevel.LOW: "green",
    RiskLevel.MEDIUM: "yellow",
    RiskLevel.HIGH: "red",
    RiskLevel.CRITICAL: "bold red",
}


def _status(status: StepStatus) -> str:
    style = _STATUS_STYLE[status]
    return f"[{style}]{status.value.upper()}[/]"


def print_verdict(command: str, verdict: SafetyVerdict, approved: bool) -> None:
    table = Table(title="Safety Verdict", show_header=False, expand=True)
    table.add_column("Field", style="bold cyan")
    table.add_column("Value")
    style = _RISK_STYLE[verdict.risk_level]
    table.add_row("Command", escape(command))
    table.add_row("Risk", f"[{style}]{verdict.risk_level.name}[/]")
    table.add_row("Safe", "Yes" if verdict.is_safe else "No")
    table.add_row("Reason", escape(verdict.reason))
    table.add_row("Auto-approve", "[green]Yes[/]" if approved else "[red]No[/]")
    console.print(table)


def print_plan(plan: ExecutionPlan) -> None:
    table = Table(
        title=f"Execution Plan ({plan.risk_level.value} risk, ~{plan.estimated_seconds}s)",
        expand=True,
    )
    table.add_column("#", style="bold", width=3)
    table.add_column("Step", style="cyan")
    table.add_column("Approval", justify="center")
    table.add_column("Status", justify="center")

    for i, step in enumerate(plan.steps, 1):
        approval = "[green]AUTO[/]" if step.auto_approved else "[yellow]CONFIRM[/]"
        table.add_row(str(i), escape(step.description), approval, _status(step.status))

    console.print(table)


def print_step_event(event: StepEvent) -> None:
    step = event.step
    console.print(f"  [{event.index + 1}/{event.total}] {_status(step.status)} {escape(step.description)}")


def print_results(results: list[StepBase]) -> None:
    table = Table(title="Execution Results", expand=True)
    table.add_column("#", style="bold", width=3)
    table.add_column("Step")
    table.add_column("Status", justify="center")
    table.add_column("Output")

    for i, step in enumerate(results, 1):
        detail = step.output if step.status == StepStatus.COMPLETED else step.error
        table.add_row(str(i), escape(step.description), _status(step.status), escape(detail or ""))

    console.print(table)


def print_awaiting_approval(steps: list[StepBase]) -> None:
    if not steps:
        return
    console.print("\n[bold yellow]The following steps need confirmation and were not run:[/]\n")
    for i, step in enumerate(steps, 1):
        console.print(f"  {i}. {escape(step.description)}")


def print_stats(stats: PolicyStats) -> None:
    console.print(
        f"[dim]Auto-executions: {stats.execution_count}/{stats.max_auto_executions} "
        f"({stats.mode.value} mode)[/]"
    )


def print_error(message: str) -> None:
    console.print(Panel(f"[red]{escape(message)}[/]", title="Error", border_style="red"))


def print_info(message: str) -> None:
    console.print(f"[dim]{message}[/]")


def print_history(rows: list[dict]) -> None:
    table = Table(title="Execution History", expand=True)
    table.add_column("Time")
    table.add_column("Plan")
    table.add_column("Risk")
    table.add_column("Command")
    table.add_column("Status", justify="center")

    for row in rows:
        status = ""
        if row.get("status"):
            status = _status(StepStatus(row["status"]))
        table.add_row(
            str(row.get("created_at", "")),
            (row.get("plan_id") or "")[:8],
            row.get("risk_level", "") or "",
            escape(row.get("command", "") or ""),
            status,
        )

    console.print(table)
