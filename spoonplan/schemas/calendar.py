from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class Weather(str, Enum):
    """Coarse day-load classification. storm = high pressure, sun = restorative."""
    storm = "storm"
    leaf = "leaf"
    sun = "sun"


class CalendarBusyInterval(BaseModel):
    """Externally fixed busy period. Read-only input to the core."""
    start: datetime
    end: datetime
    title: str = ""
    weather_tag: Weather = Weather.leaf

    @model_validator(mode="after")
    def _end_after_start(self):
        if self.end <= self.start:
            raise ValueError("end must be after start")
        return self


class EnergyState(BaseModel):
    """
    Per-day energy signals. Derived on every read, never persisted.
    spoon_count is honoured only inside [0, 12]; energy_modifier is the legacy signal.
    """
    spoon_count: Optional[int] = None
    energy_modifier: int = 0
    weather: Weather = Weather.sun


class Capacity(BaseModel):
    max_slots: int = Field(..., ge=0)
    is_low_energy: bool
