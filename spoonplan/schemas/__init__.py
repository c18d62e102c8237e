"""
Spoonplan domain schemas.
"""

from spoonplan.schemas.assignment import (
    EMPTY,
    Assignment,
    Direct,
    Empty,
    Recovery,
    RoutineSession,
)
from spoonplan.schemas.calendar import CalendarBusyInterval, Capacity, EnergyState, Weather
from spoonplan.schemas.goal import (
    EnergyImpact,
    Frequency,
    Goal,
    GoalKind,
    Milestone,
    RitualRule,
    Subtask,
)

__all__ = [
    "EMPTY",
    "Assignment",
    "Direct",
    "Empty",
    "Recovery",
    "RoutineSession",
    "CalendarBusyInterval",
    "Capacity",
    "EnergyState",
    "Weather",
    "EnergyImpact",
    "Frequency",
    "Goal",
    "GoalKind",
    "Milestone",
    "RitualRule",
    "Subtask",
]
