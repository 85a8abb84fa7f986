from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional

from journal.constants import (
    DEFAULT_RATING,
    JOURNAL_ENTRIES,
    MEAL_TYPES,
    MEALS,
    RATING_MAX,
    RATING_MIN,
    WEEKLY_PLANS,
)


def clamp_rating(value, default=DEFAULT_RATING):
    try:
        rating = int(round(float(value)))
    except Exception:
        return default
    return max(RATING_MIN, min(RATING_MAX, rating))


def parse_amount(value):
    """Parse a nutrition amount; blank or non-numeric input counts as 0."""
    if value is None:
        return 0.0
    if isinstance(value, str) and not value.strip():
        return 0.0
    try:
        amount = float(value)
    except Exception:
        return 0.0
    if amount != amount:
        return 0.0
    return amount


def normalize_day(value) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    value_str = str(value).strip()[:10]
    if not value_str:
        return None
    try:
        return date.fromisoformat(value_str).isoformat()
    except ValueError:
        return None


def week_start_for(day) -> date:
    """Sunday on or before ``day``."""
    if isinstance(day, str):
        day = date.fromisoformat(day)
    return day - timedelta(days=(day.weekday() + 1) % 7)


def week_days(week_start) -> List[str]:
    if isinstance(week_start, str):
        week_start = date.fromisoformat(week_start)
    return [(week_start + timedelta(days=offset)).isoformat() for offset in range(7)]


def _timestamp(value):
    if value is None:
        return None
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


@dataclass
class JournalEntry:
    id: Optional[str]
    date: str
    content: str = ""
    energy: int = DEFAULT_RATING
    productivity: int = DEFAULT_RATING
    user_id: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    kind = JOURNAL_ENTRIES

    @property
    def sort_date(self):
        return self.date or ""

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "JournalEntry":
        return cls(
            id=row.get("id"),
            date=normalize_day(row.get("date")) or "",
            content=str(row.get("content") or ""),
            energy=clamp_rating(row.get("energy")),
            productivity=clamp_rating(row.get("productivity")),
            user_id=row.get("user_id"),
            created_at=_timestamp(row.get("created_at")),
            updated_at=_timestamp(row.get("updated_at")),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "content": self.content,
            "energy": self.energy,
            "productivity": self.productivity,
        }

    def to_row(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Meal:
    id: Optional[str]
    date: str
    type: str = "breakfast"
    name: str = ""
    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    notes: str = ""
    user_id: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    kind = MEALS

    @property
    def sort_date(self):
        return self.date or ""

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Meal":
        meal_type = str(row.get("type") or "").strip().lower()
        return cls(
            id=row.get("id"),
            date=normalize_day(row.get("date")) or "",
            type=meal_type if meal_type in MEAL_TYPES else "snack",
            name=str(row.get("name") or ""),
            calories=parse_amount(row.get("calories")),
            protein=parse_amount(row.get("protein")),
            carbs=parse_amount(row.get("carbs")),
            fat=parse_amount(row.get("fat")),
            notes=str(row.get("notes") or ""),
            user_id=row.get("user_id"),
            created_at=_timestamp(row.get("created_at")),
            updated_at=_timestamp(row.get("updated_at")),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "type": self.type,
            "name": self.name,
            "calories": self.calories,
            "protein": self.protein,
            "carbs": self.carbs,
            "fat": self.fat,
            "notes": self.notes,
        }

    def to_row(self) -> Dict[str, Any]:
        return asdict(self)


def normalize_day_plan(raw) -> Dict[str, Any]:
    if not isinstance(raw, dict):
        return {}
    plan: Dict[str, Any] = {}
    for slot in ("breakfast", "lunch", "dinner"):
        value = raw.get(slot)
        if value:
            plan[slot] = str(value)
    snacks = raw.get("snacks")
    if isinstance(snacks, list):
        clean_snacks = [str(item) for item in snacks if item]
        if clean_snacks:
            plan["snacks"] = clean_snacks
    notes = raw.get("notes")
    if notes:
        plan["notes"] = str(notes)
    return plan


@dataclass
class WeeklyPlan:
    id: Optional[str]
    week_start: str
    days: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    user_id: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    kind = WEEKLY_PLANS

    @property
    def sort_date(self):
        return self.week_start or ""

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "WeeklyPlan":
        days = row.get("days")
        if days is None and row.get("days_json"):
            try:
                days = json.loads(row["days_json"])
            except Exception:
                days = {}
        if not isinstance(days, dict):
            days = {}
        return cls(
            id=row.get("id"),
            week_start=normalize_day(row.get("week_start")) or "",
            days={str(day): normalize_day_plan(plan) for day, plan in days.items()},
            user_id=row.get("user_id"),
            created_at=_timestamp(row.get("created_at")),
            updated_at=_timestamp(row.get("updated_at")),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "week_start": self.week_start,
            "days": {day: dict(plan) for day, plan in self.days.items()},
        }

    def to_row(self) -> Dict[str, Any]:
        return asdict(self)

    def meal_ids(self) -> set:
        ids = set()
        for plan in self.days.values():
            for slot in ("breakfast", "lunch", "dinner"):
                if plan.get(slot):
                    ids.add(plan[slot])
            ids.update(plan.get("snacks") or [])
        return ids


ENTITY_TYPES = {
    JOURNAL_ENTRIES: JournalEntry,
    MEALS: Meal,
    WEEKLY_PLANS: WeeklyPlan,
}


def entity_from_row(kind: str, row: Dict[str, Any]):
    try:
        entity_type = ENTITY_TYPES[kind]
    except KeyError:
        raise ValueError(f"Unknown entity kind: {kind}")
    return entity_type.from_row(row)
