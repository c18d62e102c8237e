"""
Auto-Fill Planner: greedy, single-pass packing of a day's empty hours.

Queue order:
  a. goals with a ritual firing today that are not yet on the ledger
     (goal order, then rule declaration order; one candidate per goal)
  b. kaizen goals still short of their weekly hours, largest deficit first,
     then goals with an open milestone, then goal id
Each candidate takes the earliest empty, non-busy hour. Nothing already on the
ledger is overwritten, and placements never push usage past max_slots.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Mapping, Optional

from spoonplan.rules.capacity import busy_hours, compute_capacity
from spoonplan.rules.ledger import SlotLedger
from spoonplan.rules.recurrence import firing_rules
from spoonplan.schemas.assignment import Recovery, assignment_for_goal
from spoonplan.schemas.calendar import CalendarBusyInterval, EnergyState
from spoonplan.schemas.goal import Goal, GoalKind, Subtask, index_goals

logger = logging.getLogger("spoonplan")

RECOVERY_TITLE = "Recovery"


@dataclass
class Candidate:
    goal: Goal
    ritual_title: Optional[str] = None


def planned_hours(ledger: SlotLedger, goal_id: str, prior_hours: Optional[Mapping[str, float]] = None) -> float:
    """Hours on this ledger, plus hours already planned elsewhere in the week."""
    return len(ledger.hours_for_goal(goal_id)) + (prior_hours or {}).get(goal_id, 0.0)


def next_subtask(goal: Goal) -> Optional[Subtask]:
    """Nearest-deadline vine that still has hours left."""
    due = [s for s in goal.subtasks if s.deadline is not None and s.remaining_hours > 0]
    if not due:
        return None
    return min(due, key=lambda s: (s.deadline, s.id))


def build_candidates(
    goals: Iterable[Goal],
    ledger: SlotLedger,
    day: date,
    prior_hours: Optional[Mapping[str, float]] = None,
) -> List[Candidate]:
    goals = [g for g in goals if g.kind != GoalKind.vitality]
    queue: List[Candidate] = []
    queued = set()

    for goal in goals:
        if ledger.hours_for_goal(goal.id):
            continue
        rules = firing_rules(goal, day)
        if rules:
            queue.append(Candidate(goal=goal, ritual_title=rules[0].title))
            queued.add(goal.id)

    needing = []
    for goal in goals:
        if goal.kind != GoalKind.kaizen or goal.id in queued:
            continue
        deficit = goal.target_hours_per_week - planned_hours(ledger, goal.id, prior_hours)
        if deficit > 0:
            needing.append((deficit, goal))
    needing.sort(key=lambda item: (-item[0], not item[1].has_open_milestone, item[1].id))
    queue.extend(Candidate(goal=goal) for _, goal in needing)
    return queue


def auto_fill(
    goals: Iterable[Goal],
    calendar_busy: Iterable[CalendarBusyInterval],
    energy_state: EnergyState,
    existing_ledger: SlotLedger,
    day: Optional[date] = None,
    prior_hours: Optional[Mapping[str, float]] = None,
) -> SlotLedger:
    """
    Returns a new ledger; `existing_ledger` is left as it was.
    Empty goal list or a fully occupied day returns an unchanged copy.
    """
    day = day or existing_ledger.day
    if day is None:
        raise ValueError("auto_fill needs the ledger's date")

    goals = list(goals)
    ledger = existing_ledger.copy()
    if not goals:
        return ledger

    capacity = compute_capacity(energy_state)
    blocked = busy_hours(ledger.hours, calendar_busy, day)
    free = [hour for hour in ledger.empty_hours() if hour not in blocked]
    if not free:
        return ledger

    headroom = capacity.max_slots - ledger.total_cost(index_goals(goals))
    placed = []
    for candidate in build_candidates(goals, ledger, day, prior_hours):
        if headroom <= 0 or not free:
            break
        cost = candidate.goal.cost
        if cost > headroom:
            continue
        subtask = next_subtask(candidate.goal) if candidate.goal.kind == GoalKind.routine else None
        hour = free.pop(0)
        ledger.set(
            hour,
            assignment_for_goal(
                candidate.goal,
                ritual_title=candidate.ritual_title,
                subtask_id=subtask.id if subtask else None,
            ),
        )
        headroom -= cost
        placed.append(hour)

    if capacity.is_low_energy and free and not ledger.has_recovery():
        hour = free.pop(0)
        ledger.set(hour, Recovery(title=RECOVERY_TITLE))
        logger.info("recovery_synthesized", extra={"day": day.isoformat(), "hour": hour})

    logger.info(
        "autofill_complete",
        extra={
            "day": day.isoformat(),
            "placed": placed,
            "max_slots": capacity.max_slots,
            "busy_hours": sorted(blocked),
        },
    )
    return ledger
