from __future__ import annotations

from sqlalchemy import text as sql_text

from backend.db import get_engine


JOURNAL_TABLE = "journal_entries"
MEALS_TABLE = "meals"
PLANS_TABLE = "weekly_plans"
CHANGE_LOG_TABLE = "change_log"


async def init_db():
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {JOURNAL_TABLE} (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    date TEXT NOT NULL,
                    content TEXT NOT NULL,
                    energy INTEGER DEFAULT 5,
                    productivity INTEGER DEFAULT 5,
                    created_at TEXT,
                    updated_at TEXT
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {MEALS_TABLE} (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    date TEXT NOT NULL,
                    type TEXT NOT NULL,
                    name TEXT NOT NULL,
                    calories REAL DEFAULT 0,
                    protein REAL DEFAULT 0,
                    carbs REAL DEFAULT 0,
                    fat REAL DEFAULT 0,
                    notes TEXT,
                    created_at TEXT,
                    updated_at TEXT
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {PLANS_TABLE} (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    week_start TEXT NOT NULL,
                    days_json TEXT,
                    created_at TEXT,
                    updated_at TEXT
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {CHANGE_LOG_TABLE} (
                    user_id TEXT NOT NULL,
                    table_name TEXT NOT NULL,
                    revision INTEGER NOT NULL DEFAULT 0,
                    updated_at TEXT,
                    PRIMARY KEY (user_id, table_name)
                )
                """
            )
        )
        for table, column in ((JOURNAL_TABLE, "date"), (MEALS_TABLE, "date")):
            await conn.execute(
                sql_text(f"CREATE INDEX IF NOT EXISTS idx_{table}_user_{column} ON {table} (user_id, {column})")
            )
        # One plan per user and week; creating again updates it.
        await conn.execute(
            sql_text(
                f"CREATE UNIQUE INDEX IF NOT EXISTS ux_{PLANS_TABLE}_user_week_start ON {PLANS_TABLE} (user_id, week_start)"
            )
        )
