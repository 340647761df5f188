"""Application settings loaded from environment variables."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_prefix": "CMDPILOT_"}

    enabled: bool = Field(default=True, description="Enable command auto-approval")
    mode: str = Field(
        default="aggressive",
        description="Auto-approval mode (conservative/balanced/aggressive)",
    )
    max_auto_executions: int = Field(
        default=50, ge=0, description="Auto-executions allowed before confirmation is forced"
    )
    policy_file: Path | None = Field(
        default=None, description="JSON policy configuration merged over the defaults"
    )
    db_path: Path = Field(
        default=Path.home() / ".cmdpilot" / "history.db",
        description="SQLite database path",
    )
    dry_run: bool = Field(default=False, description="Global dry-run mode")
    command_timeout: float = Field(
        default=300.0, gt=0, description="Per-command timeout in seconds"
    )
    log_level: str = Field(default="INFO", description="Logging level")
