from datetime import date
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from spoonplan.schemas.calendar import CalendarBusyInterval
from spoonplan.schemas.goal import Goal


class HourAllocation(BaseModel):
    date: date
    goal_id: str = Field(..., min_length=1)
    hours: float = Field(..., gt=0, le=24)


class PlanPhase(BaseModel):
    title: str = ""
    allocations: List[HourAllocation] = Field(default_factory=list)


class PlanProposal(BaseModel):
    """What the advisory producer must return. Anything else fails the whole Planning step."""
    summary: Optional[str] = None
    phases: List[PlanPhase] = Field(..., min_length=1)


class EnergyProfile(BaseModel):
    """Per-date spoon budgets handed to the producer as context."""
    max_slots_by_date: Dict[date, int] = Field(default_factory=dict)


class PlanRequest(BaseModel):
    dates: List[date] = Field(..., min_length=1, max_length=31)
    goals: List[Goal] = Field(default_factory=list)
    busy: List[CalendarBusyInterval] = Field(default_factory=list)
    energy: EnergyProfile = Field(default_factory=EnergyProfile)


class UnplacedHours(BaseModel):
    date: date
    goal_id: str
    hours: int


class DraftPlacement(BaseModel):
    date: date
    hour: str
    goal_id: str
