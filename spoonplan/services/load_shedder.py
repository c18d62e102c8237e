"""
Load Shedder: trims a ledger back under its spoon budget.

Boost goals and Recovery blocks are exempt. Among the rest, the costliest slot
goes first, then the latest hour (evenings before mornings), then goal id.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from spoonplan.rules.ledger import SlotLedger
from spoonplan.schemas.assignment import assignment_cost, goal_id_of
from spoonplan.schemas.goal import EnergyImpact, Goal, index_goals

logger = logging.getLogger("spoonplan")


@dataclass
class RemovedAssignment:
    hour: str
    assignment: Any
    title: str = ""


@dataclass
class ShedResult:
    ledger: SlotLedger
    removed: List[RemovedAssignment] = field(default_factory=list)
    still_over_capacity: bool = False


def _removable(ledger: SlotLedger, goals: Mapping[str, Goal]) -> List[Tuple[str, Any]]:
    out = []
    for hour in ledger.occupied_hours():
        assignment = ledger.get(hour)
        goal_id = goal_id_of(assignment)
        if goal_id is None:
            continue  # Recovery
        goal = goals.get(goal_id)
        if goal is not None and goal.energy_impact == EnergyImpact.boost:
            continue
        out.append((hour, assignment))
    return out


def _pick(candidates: List[Tuple[str, Any]], goals: Mapping[str, Goal]) -> Tuple[str, Any]:
    # max cost, then latest hour, then smallest goal id
    return min(
        candidates,
        key=lambda c: (
            -assignment_cost(c[1], goals),
            -int(c[0].split(":")[0]),
            goal_id_of(c[1]),
        ),
    )


def _title(assignment, goal: Optional[Goal]) -> str:
    title = getattr(assignment, "title", "")
    return title or (goal.title if goal else "")


def lighten_load(ledger: SlotLedger, goals: Iterable[Goal] | Mapping[str, Goal], max_slots: int) -> ShedResult:
    """
    Returns a new ledger. When every remaining paid slot is exempt the result
    is still over budget; that is reported, not raised.
    """
    by_id = index_goals(goals)
    result = ShedResult(ledger=ledger.copy())

    while result.ledger.total_cost(by_id) > max_slots:
        candidates = _removable(result.ledger, by_id)
        if not candidates:
            result.still_over_capacity = True
            logger.warning(
                "load_shed_exhausted",
                extra={
                    "day": result.ledger.day.isoformat() if result.ledger.day else None,
                    "used": result.ledger.total_cost(by_id),
                    "max_slots": max_slots,
                },
            )
            break
        hour, assignment = _pick(candidates, by_id)
        result.ledger.clear(hour)
        result.removed.append(
            RemovedAssignment(
                hour=hour,
                assignment=assignment,
                title=_title(assignment, by_id.get(goal_id_of(assignment))),
            )
        )
        logger.info("load_shed_item", extra={"hour": hour, "goal_id": goal_id_of(assignment)})

    return result
