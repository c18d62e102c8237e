"""
Request schemas for the Spoonplan API.
"""

from datetime import date
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from spoonplan.schemas.assignment import Assignment
from spoonplan.schemas.calendar import CalendarBusyInterval


class CheckInRequest(BaseModel):
    """Morning self-report. spoon_count overrides the legacy modifier when present."""
    spoon_count: Optional[int] = Field(None, ge=0, le=12)
    energy_modifier: Literal[-2, 0, 1, 2] = 0


class CalendarRequest(BaseModel):
    intervals: List[CalendarBusyInterval] = Field(default_factory=list)


class SlotRequest(BaseModel):
    assignment: Assignment


class AutoFillRequest(BaseModel):
    prior_hours: Dict[str, float] = Field(default_factory=dict, description="Hours already planned this week, by goal id.")


class PlanCreateRequest(BaseModel):
    dates: List[date] = Field(..., min_length=1, max_length=31)
