from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Optional, Tuple

from pydantic import BaseModel

from spoonplan.config import settings
from spoonplan.schemas.calendar import CalendarBusyInterval
from spoonplan.schemas.goal import Goal, GoalKind


class StormWarning(BaseModel):
    goal_id: str
    goal_title: str
    subtask_id: str
    subtask_title: str
    remaining_hours: float
    workable_hours: float
    message: str


def _merge(spans: List[Tuple[float, float]]) -> List[Tuple[float, float]]:
    merged: List[Tuple[float, float]] = []
    for start, end in sorted(spans):
        if merged and start <= merged[-1][1]:
            merged[-1] = (merged[-1][0], max(merged[-1][1], end))
        else:
            merged.append((start, end))
    return merged


def workable_hours(
    day: date,
    busy: Iterable[CalendarBusyInterval],
    start_hour: Optional[int] = None,
    end_hour: Optional[int] = None,
) -> float:
    """
    Free time in [start_hour:00, end_hour:00) on `day`, minute-accurate.
    Overlapping busy intervals are merged before they are subtracted.
    """
    start_hour = settings.day_start_hour if start_hour is None else start_hour
    end_hour = settings.day_end_hour if end_hour is None else end_hour
    window = (end_hour - start_hour) * 60

    spans = []
    for iv in busy:
        # window edges in the interval's own tz-awareness
        window_start = datetime.combine(day, time(0), tzinfo=iv.start.tzinfo) + timedelta(hours=start_hour)
        lo = max(iv.start, window_start)
        hi = min(iv.end, window_start + timedelta(minutes=window))
        if hi > lo:
            spans.append(((lo - window_start).total_seconds() / 60, (hi - window_start).total_seconds() / 60))

    blocked = sum(end - start for start, end in _merge(spans))
    return max(0.0, window - blocked) / 60


def storm_warnings(
    goals: Iterable[Goal],
    calendar_busy: Iterable[CalendarBusyInterval],
    start: date,
    days: Optional[int] = None,
) -> List[StormWarning]:
    """
    Routine vines whose remaining hours exceed the free hours left before their deadline,
    looking at the window [start, start + days).
    """
    days = days or settings.storm_horizon_days
    busy = list(calendar_busy)
    window = [start + timedelta(days=i) for i in range(days)]
    per_day = {d: workable_hours(d, busy) for d in window}

    warnings = []
    for goal in goals:
        if goal.kind != GoalKind.routine:
            continue
        for st in goal.subtasks:
            if st.deadline is None or st.remaining_hours <= 0:
                continue
            available = sum(n for d, n in per_day.items() if d <= st.deadline)
            if st.remaining_hours > available:
                warnings.append(
                    StormWarning(
                        goal_id=goal.id,
                        goal_title=goal.title,
                        subtask_id=st.id,
                        subtask_title=st.title,
                        remaining_hours=st.remaining_hours,
                        workable_hours=available,
                        message=(
                            f'"{st.title}" has {st.remaining_hours:.1f}h left '
                            f"but only {available:.1f}h before deadline."
                        ),
                    )
                )
    return warnings
