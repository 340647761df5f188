"""SQLite CREATE TABLE statements."""

from __future__ import annotations

TABLES: list[str] = [
    """
    CREATE TABLE IF NOT EXISTS plans (
        id TEXT PRIMARY KEY,
        source_text TEXT DEFAULT '',
        step_count INTEGER NOT NULL,
        auto_approved_count INTEGER NOT NULL,
        estimated_seconds INTEGER NOT NULL,
        risk_level TEXT NOT NULL,
        mode TEXT DEFAULT '',
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS step_results (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        plan_id TEXT NOT NULL,
        step_id TEXT NOT NULL,
        kind TEXT NOT NULL,
        description TEXT DEFAULT '',
        command TEXT DEFAULT '',
        auto_approved INTEGER DEFAULT 0,
        status TEXT NOT NULL,
        output TEXT DEFAULT '',
        error TEXT DEFAULT '',
        recorded_at TEXT NOT NULL,
        FOREIGN KEY (plan_id) REFERENCES plans(id)
    )
    """,
]
