from datetime import date, datetime
from typing import List

from spoonplan.schemas.calendar import CalendarBusyInterval, Weather
from spoonplan.schemas.goal import EnergyImpact, Goal, GoalKind, RitualRule

# 2024-03-04 is a Monday
MONDAY = date(2024, 3, 4)


def kaizen(goal_id: str, target: float = 3.0, **kw) -> Goal:
    return Goal(id=goal_id, kind=GoalKind.kaizen, title=goal_id.title(), target_hours_per_week=target, **kw)


def routine(goal_id: str, days: List[int], **kw) -> Goal:
    return Goal(
        id=goal_id,
        kind=GoalKind.routine,
        title=goal_id.title(),
        rituals=[RitualRule(id=f"{goal_id}-r", title=f"{goal_id.title()} ritual", days=days)],
        **kw,
    )


def vitality(goal_id: str) -> Goal:
    return Goal(id=goal_id, kind=GoalKind.vitality, title=goal_id.title(), energy_impact=EnergyImpact.boost)


def busy(day: date, start_hour: int, end_hour: int, weather: Weather = Weather.leaf) -> CalendarBusyInterval:
    return CalendarBusyInterval(
        start=datetime(day.year, day.month, day.day, start_hour),
        end=datetime(day.year, day.month, day.day, end_hour),
        title="Busy",
        weather_tag=weather,
    )
