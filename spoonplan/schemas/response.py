"""
Response schemas for the Spoonplan API.
"""

from datetime import date
from typing import Dict, List, Optional

from pydantic import BaseModel

from spoonplan.schemas.assignment import Assignment
from spoonplan.schemas.calendar import Weather
from spoonplan.schemas.plan import DraftPlacement, UnplacedHours


class CapacityRead(BaseModel):
    weather: Weather
    max_slots: int
    used: int
    is_low_energy: bool
    is_over_capacity: bool


class DayRead(BaseModel):
    day: date
    slots: Dict[str, Assignment]
    busy_hours: List[str]
    capacity: CapacityRead


class RemovedRead(BaseModel):
    hour: str
    title: str
    assignment: Assignment


class ShedRead(BaseModel):
    day: DayRead
    removed: List[RemovedRead]
    still_over_capacity: bool


class PlanRead(BaseModel):
    state: str
    last_outcome: Optional[str] = None
    last_error: Optional[str] = None
    summary: Optional[str] = None
    placements: List[DraftPlacement] = []
    unplaced: List[UnplacedHours] = []
    drafts: Dict[date, Dict[str, Assignment]] = {}
