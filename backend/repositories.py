from __future__ import annotations

import json
from datetime import date, datetime
from uuid import uuid4

from sqlalchemy import text as sql_text

from backend.db import get_sessionmaker
from backend.db_init import CHANGE_LOG_TABLE, JOURNAL_TABLE, MEALS_TABLE, PLANS_TABLE

TABLE_COLUMNS = {
    JOURNAL_TABLE: ["date", "content", "energy", "productivity"],
    MEALS_TABLE: ["date", "type", "name", "calories", "protein", "carbs", "fat", "notes"],
    PLANS_TABLE: ["week_start", "days_json"],
}

TABLE_ORDER = {
    JOURNAL_TABLE: "date DESC, created_at DESC",
    MEALS_TABLE: "date DESC, created_at DESC",
    PLANS_TABLE: "week_start DESC, created_at DESC",
}

# Columns that identify a row per user besides its id.
NATURAL_KEYS = {
    PLANS_TABLE: "week_start",
}

PLAN_SLOTS = ("breakfast", "lunch", "dinner")


def _new_id() -> str:
    return uuid4().hex


def _now_iso() -> str:
    return datetime.utcnow().isoformat()


def _check_table(table: str) -> list[str]:
    try:
        return TABLE_COLUMNS[table]
    except KeyError:
        raise ValueError(f"Unknown table: {table}")


def _encode_days(days) -> str:
    clean = {}
    for day, plan in (days or {}).items():
        if not isinstance(plan, dict):
            continue
        entry = {slot: plan[slot] for slot in PLAN_SLOTS if plan.get(slot)}
        snacks = [item for item in plan.get("snacks") or [] if item]
        if snacks:
            entry["snacks"] = snacks
        if plan.get("notes"):
            entry["notes"] = plan["notes"]
        if entry:
            clean[str(day)] = entry
    return json.dumps(clean, sort_keys=True)


def _decode_days(raw) -> dict:
    if not raw:
        return {}
    try:
        value = json.loads(raw)
    except Exception:
        return {}
    return value if isinstance(value, dict) else {}


def _to_columns(table: str, payload: dict) -> dict:
    allowed = _check_table(table)
    values = dict(payload or {})
    if table == PLANS_TABLE and "days" in values:
        values["days_json"] = _encode_days(values.pop("days"))
    clean = {}
    for key, value in values.items():
        if key not in allowed:
            continue
        if isinstance(value, date):
            value = value.isoformat()
        clean[key] = value
    return clean


def _normalize_row(table: str, row) -> dict:
    if not row:
        return {}
    payload = dict(row)
    for key in ("date", "week_start", "created_at", "updated_at"):
        value = payload.get(key)
        if value is not None and hasattr(value, "isoformat"):
            payload[key] = value.isoformat()
    if table == PLANS_TABLE:
        payload["days"] = _decode_days(payload.pop("days_json", None))
    return payload


async def _bump_revision(session, user_id: str, table: str) -> None:
    await session.execute(
        sql_text(
            f"""
            INSERT INTO {CHANGE_LOG_TABLE} (user_id, table_name, revision, updated_at)
            VALUES (:user_id, :table_name, 1, :updated_at)
            ON CONFLICT (user_id, table_name) DO UPDATE SET
                revision = {CHANGE_LOG_TABLE}.revision + 1,
                updated_at = EXCLUDED.updated_at
            """
        ),
        {"user_id": user_id, "table_name": table, "updated_at": _now_iso()},
    )


async def get_revision(user_id: str, table: str) -> int:
    _check_table(table)
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        result = await session.execute(
            sql_text(
                f"SELECT revision FROM {CHANGE_LOG_TABLE} WHERE user_id = :user_id AND table_name = :table_name"
            ),
            {"user_id": user_id, "table_name": table},
        )
        value = result.scalar_one_or_none()
    return int(value or 0)


async def list_rows(user_id: str, table: str) -> list[dict]:
    _check_table(table)
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        result = await session.execute(
            sql_text(f"SELECT * FROM {table} WHERE user_id = :user_id ORDER BY {TABLE_ORDER[table]}"),
            {"user_id": user_id},
        )
        rows = result.mappings().all()
    return [_normalize_row(table, row) for row in rows]


async def get_row(user_id: str, table: str, row_id: str) -> dict | None:
    _check_table(table)
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        result = await session.execute(
            sql_text(f"SELECT * FROM {table} WHERE id = :id AND user_id = :user_id"),
            {"id": row_id, "user_id": user_id},
        )
        row = result.mappings().first()
    return _normalize_row(table, row) if row else None


async def create_row(user_id: str, table: str, payload: dict) -> dict:
    """Insert a row; tables with a natural key update the existing row instead."""
    record = _to_columns(table, payload)
    now = _now_iso()
    record.update({"id": _new_id(), "user_id": user_id, "created_at": now, "updated_at": now})
    columns = list(record.keys())
    statement = f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({', '.join(f':{col}' for col in columns)})"
    natural_key = NATURAL_KEYS.get(table)
    if natural_key:
        kept = {"id", "user_id", "created_at", natural_key}
        updates = ", ".join(f"{col} = EXCLUDED.{col}" for col in columns if col not in kept)
        statement += f" ON CONFLICT (user_id, {natural_key}) DO UPDATE SET {updates}"
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(sql_text(statement), record)
        await _bump_revision(session, user_id, table)
        await session.commit()
        if not natural_key:
            row_id = record["id"]
        else:
            result = await session.execute(
                sql_text(f"SELECT id FROM {table} WHERE user_id = :user_id AND {natural_key} = :value"),
                {"user_id": user_id, "value": record[natural_key]},
            )
            row_id = result.scalar_one()
    return await get_row(user_id, table, row_id)


async def update_row(user_id: str, table: str, row_id: str, patch: dict) -> dict | None:
    """Apply ``patch`` to an owned row; ``None`` when the row is missing or foreign."""
    clean = _to_columns(table, patch)
    current = await get_row(user_id, table, row_id)
    if current is None:
        return None
    if not clean:
        return current
    clean["updated_at"] = _now_iso()
    updates = ", ".join(f"{key} = :{key}" for key in clean)
    params = {**clean, "id": row_id, "user_id": user_id}
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(f"UPDATE {table} SET {updates} WHERE id = :id AND user_id = :user_id"),
            params,
        )
        await _bump_revision(session, user_id, table)
        await session.commit()
    return await get_row(user_id, table, row_id)


async def delete_row(user_id: str, table: str, row_id: str) -> bool:
    _check_table(table)
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        result = await session.execute(
            sql_text(f"DELETE FROM {table} WHERE id = :id AND user_id = :user_id"),
            {"id": row_id, "user_id": user_id},
        )
        deleted = (result.rowcount or 0) > 0
        if deleted:
            await _bump_revision(session, user_id, table)
        await session.commit()
    return deleted
