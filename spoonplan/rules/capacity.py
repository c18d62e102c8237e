"""
Capacity model: daily slot budget from weather + self-reported energy.
"""

from collections import Counter
from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Mapping, Optional, Sequence, Set

from spoonplan.schemas.calendar import CalendarBusyInterval, Capacity, EnergyState, Weather
from spoonplan.schemas.goal import Goal

BASE_CAPACITY = {Weather.storm: 3, Weather.leaf: 5, Weather.sun: 6}
MAX_SPOONS = 12
LOW_ENERGY_SPOONS = 4
LOW_ENERGY_MODIFIER = -2

# heavier weather wins a tied vote
_HEAVINESS = {Weather.storm: 2, Weather.leaf: 1, Weather.sun: 0}


def _at(day: date, at: time, like: datetime) -> datetime:
    # match the interval's tz-awareness so comparisons are valid
    return datetime.combine(day, at, tzinfo=like.tzinfo)


def intervals_on(day: date, intervals: Iterable[CalendarBusyInterval]) -> List[CalendarBusyInterval]:
    """Intervals overlapping any part of `day`."""
    out = []
    for iv in intervals:
        day_start = _at(day, time(0), iv.start)
        day_end = day_start + timedelta(days=1)
        if iv.start < day_end and iv.end > day_start:
            out.append(iv)
    return out


def busy_hours(
    hours: Sequence[str],
    intervals: Iterable[CalendarBusyInterval],
    day: date,
) -> Set[str]:
    """Hour labels whose [hh:00, hh+1:00) window overlaps a busy interval on `day`."""
    blocked = set()
    intervals = list(intervals)
    for hour in hours:
        hh = int(hour.split(":")[0])
        for iv in intervals:
            slot_start = _at(day, time(hh), iv.start)
            slot_end = slot_start + timedelta(hours=1)
            if iv.start < slot_end and iv.end > slot_start:
                blocked.add(hour)
                break
    return blocked


def derive_weather(intervals: Iterable[CalendarBusyInterval]) -> Weather:
    """Majority vote over weather tags; sun when the day has no intervals."""
    votes = Counter(iv.weather_tag for iv in intervals)
    if not votes:
        return Weather.sun
    return max(votes, key=lambda w: (votes[w], _HEAVINESS[w]))


def derive_energy_state(
    intervals: Iterable[CalendarBusyInterval],
    spoon_count: Optional[int] = None,
    energy_modifier: int = 0,
    day: Optional[date] = None,
) -> EnergyState:
    intervals = list(intervals)
    if day is not None:
        intervals = intervals_on(day, intervals)
    return EnergyState(
        spoon_count=spoon_count,
        energy_modifier=energy_modifier,
        weather=derive_weather(intervals),
    )


def compute_capacity(state: EnergyState) -> Capacity:
    if state.spoon_count is not None and 0 <= state.spoon_count <= MAX_SPOONS:
        return Capacity(
            max_slots=state.spoon_count,
            is_low_energy=state.spoon_count <= LOW_ENERGY_SPOONS,
        )
    base = BASE_CAPACITY[state.weather]
    return Capacity(
        max_slots=max(1, base + state.energy_modifier),
        is_low_energy=state.energy_modifier == LOW_ENERGY_MODIFIER,
    )


def used_capacity(ledger, goals: Iterable[Goal] | Mapping[str, Goal] = ()) -> int:
    return ledger.total_cost(goals)


def is_over_capacity(ledger, goals, capacity: Capacity) -> bool:
    """Manual placements may exceed the budget; this only flags it."""
    return used_capacity(ledger, goals) > capacity.max_slots
