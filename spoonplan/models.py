from datetime import date, datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import JSON, Column, DateTime
from sqlmodel import Field, SQLModel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class GoalRecord(SQLModel, table=True):
    """Goal definition stored as its JSON document; `position` keeps declaration order."""
    id: str = Field(primary_key=True)
    position: int = Field(default=0, index=True)
    kind: str
    document: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    updated_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))


class DayLedger(SQLModel, table=True):
    day: date = Field(primary_key=True)  # native date, ISO key
    slots: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    updated_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))


class EnergyCheckIn(SQLModel, table=True):
    day: date = Field(primary_key=True)
    spoon_count: Optional[int] = None
    energy_modifier: int = 0
    logged_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))


class CalendarBlock(SQLModel, table=True):
    """Busy interval as last supplied by the calendar source. Never written back."""
    id: Optional[int] = Field(default=None, primary_key=True)
    day: date = Field(index=True)
    start: datetime = Field(sa_type=DateTime(timezone=True))
    end: datetime = Field(sa_type=DateTime(timezone=True))
    title: str = ""
    weather_tag: str = "leaf"
