from __future__ import annotations

import pandas as pd

from journal.constants import NUTRITION_FIELDS

ENTRY_COLUMNS = ["date", "energy", "productivity", "content"]
MEAL_COLUMNS = ["date", "type", "name", *NUTRITION_FIELDS]


def entries_frame(entries) -> pd.DataFrame:
    rows = [
        {
            "date": entry.date,
            "energy": entry.energy,
            "productivity": entry.productivity,
            "content": entry.content,
        }
        for entry in entries or []
        if entry.date
    ]
    if not rows:
        return pd.DataFrame(columns=ENTRY_COLUMNS)
    df = pd.DataFrame(rows)
    df["date"] = pd.to_datetime(df["date"]).dt.date
    return df.sort_values("date", kind="stable").reset_index(drop=True)


def rating_summary(entries):
    df = entries_frame(entries)
    if df.empty:
        return {"entries": 0, "energy": None, "productivity": None}
    return {
        "entries": int(len(df)),
        "energy": round(float(df["energy"].mean()), 1),
        "productivity": round(float(df["productivity"].mean()), 1),
    }


def meals_frame(meals) -> pd.DataFrame:
    rows = [
        {
            "date": meal.date,
            "type": meal.type,
            "name": meal.name,
            **{key: float(getattr(meal, key) or 0) for key in NUTRITION_FIELDS},
        }
        for meal in meals or []
        if meal.date
    ]
    if not rows:
        return pd.DataFrame(columns=MEAL_COLUMNS)
    return pd.DataFrame(rows)


def daily_nutrition_totals(meals) -> pd.DataFrame:
    df = meals_frame(meals)
    if df.empty:
        return pd.DataFrame(columns=["date", *NUTRITION_FIELDS])
    totals = df.groupby("date", as_index=False)[list(NUTRITION_FIELDS)].sum()
    return totals.sort_values("date", ascending=False).reset_index(drop=True)


def meals_by_date(meals):
    grouped = {}
    for meal in meals or []:
        grouped.setdefault(meal.date, []).append(meal)
    return {day: grouped[day] for day in sorted(grouped, reverse=True)}
