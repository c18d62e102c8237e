from datetime import date
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional, Union

from pydantic import BaseModel, Field


class GoalKind(str, Enum):
    kaizen = "kaizen"
    routine = "routine"
    vitality = "vitality"


class EnergyImpact(str, Enum):
    drain = "drain"
    boost = "boost"


class Frequency(str, Enum):
    weekly = "weekly"
    biweekly = "biweekly"
    monthly = "monthly"


class RitualRule(BaseModel):
    """
    Recurrence rule attached to a goal.
    `days` uses 0=Sunday .. 6=Saturday; `month_day` is only read for monthly rules.
    Range checks live in the matcher so a bad rule degrades to "never fires".
    """
    id: Optional[str] = None
    title: Optional[str] = None
    frequency: Frequency = Frequency.weekly
    days: List[int] = Field(default_factory=list)
    month_day: Optional[int] = None


class Subtask(BaseModel):
    """A vine: tracked for progress, never scheduled on its own."""
    id: str
    title: str = ""
    estimated_hours: float = Field(0.0, ge=0)
    completed_hours: float = Field(0.0, ge=0)
    deadline: Optional[date] = None

    @property
    def remaining_hours(self) -> float:
        return max(0.0, self.estimated_hours - self.completed_hours)


class Milestone(BaseModel):
    id: Optional[str] = None
    title: str = ""
    completed: bool = False


class Goal(BaseModel):
    id: str = Field(..., min_length=1)
    kind: GoalKind = GoalKind.kaizen
    title: str = ""
    target_hours_per_week: float = Field(0.0, ge=0, description="Weekly hour target.")
    estimated_minutes_per_session: Optional[int] = Field(None, gt=0, description="Kaizen session length.")
    energy_impact: EnergyImpact = EnergyImpact.drain
    spoon_cost: Optional[int] = Field(None, ge=1, le=4, description="Capacity used per occupied slot.")
    activation_energy: Optional[int] = Field(None, ge=1, le=4, description="Advisory only.")
    rituals: List[RitualRule] = Field(default_factory=list)
    subtasks: List[Subtask] = Field(default_factory=list)
    milestones: List[Milestone] = Field(default_factory=list)
    linked_vitality_goal_id: Optional[str] = None

    @property
    def cost(self) -> int:
        return self.spoon_cost or 1

    @property
    def has_open_milestone(self) -> bool:
        return any(not m.completed for m in self.milestones)


def index_goals(goals: Union[Iterable[Goal], Mapping[str, Goal]]) -> Dict[str, Goal]:
    if isinstance(goals, Mapping):
        return dict(goals)
    return {g.id: g for g in goals}
