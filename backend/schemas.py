from __future__ import annotations

import datetime as dt
from typing import Optional, List, Dict, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

MealType = Literal["breakfast", "lunch", "dinner", "snack"]


def _required_text(value):
    if value is None:
        return value
    clean = str(value).strip()
    if not clean:
        raise ValueError("must not be empty")
    return clean


def _reject_nulls(model, nullable=("user_id", "notes")):
    nulls = sorted(name for name in model.model_fields_set if name not in nullable and getattr(model, name) is None)
    if nulls:
        raise ValueError(f"fields cannot be null: {', '.join(nulls)}")
    return model


class JournalEntryCreate(BaseModel):
    user_id: Optional[str] = None
    date: dt.date
    content: str
    energy: int = Field(default=5, ge=1, le=10)
    productivity: int = Field(default=5, ge=1, le=10)

    @field_validator("content")
    @classmethod
    def _content_required(cls, value):
        return _required_text(value)


class JournalEntryPatch(BaseModel):
    user_id: Optional[str] = None
    date: Optional[dt.date] = None
    content: Optional[str] = None
    energy: Optional[int] = Field(default=None, ge=1, le=10)
    productivity: Optional[int] = Field(default=None, ge=1, le=10)

    @field_validator("content")
    @classmethod
    def _content_required(cls, value):
        return _required_text(value)

    @model_validator(mode="after")
    def _no_nulls(self):
        return _reject_nulls(self)


class MealCreate(BaseModel):
    user_id: Optional[str] = None
    date: dt.date
    type: MealType
    name: str
    calories: float = Field(default=0, ge=0)
    protein: float = Field(default=0, ge=0)
    carbs: float = Field(default=0, ge=0)
    fat: float = Field(default=0, ge=0)
    notes: Optional[str] = ""

    @field_validator("name")
    @classmethod
    def _name_required(cls, value):
        return _required_text(value)


class MealPatch(BaseModel):
    user_id: Optional[str] = None
    date: Optional[dt.date] = None
    type: Optional[MealType] = None
    name: Optional[str] = None
    calories: Optional[float] = Field(default=None, ge=0)
    protein: Optional[float] = Field(default=None, ge=0)
    carbs: Optional[float] = Field(default=None, ge=0)
    fat: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _name_required(cls, value):
        return _required_text(value)

    @model_validator(mode="after")
    def _no_nulls(self):
        return _reject_nulls(self)


class DayPlan(BaseModel):
    breakfast: Optional[str] = None
    lunch: Optional[str] = None
    dinner: Optional[str] = None
    snacks: List[str] = Field(default_factory=list)
    notes: Optional[str] = None


def _check_days_in_week(week_start, days):
    if week_start is None or not days:
        return
    allowed = {(week_start + dt.timedelta(days=offset)).isoformat() for offset in range(7)}
    outside = sorted(day for day in days if day not in allowed)
    if outside:
        raise ValueError(f"days outside the week of {week_start.isoformat()}: {', '.join(outside)}")


class WeeklyPlanCreate(BaseModel):
    user_id: Optional[str] = None
    week_start: dt.date
    days: Dict[str, DayPlan] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _days_in_week(self):
        _check_days_in_week(self.week_start, self.days)
        return self


class WeeklyPlanPatch(BaseModel):
    user_id: Optional[str] = None
    week_start: Optional[dt.date] = None
    days: Optional[Dict[str, DayPlan]] = None

    @model_validator(mode="after")
    def _days_in_week(self):
        _check_days_in_week(self.week_start, self.days)
        return _reject_nulls(self)
