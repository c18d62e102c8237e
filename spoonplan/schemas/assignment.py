"""
Slot contents as a closed set of variants, discriminated on `kind`.
Every consumer dispatches with isinstance and raises on anything else.
"""

from typing import Annotated, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from spoonplan.schemas.goal import Goal, GoalKind


class Empty(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["empty"] = "empty"


class Direct(BaseModel):
    """A goal occupying the slot, optionally tagged with the ritual that fired it."""
    model_config = ConfigDict(frozen=True)
    kind: Literal["direct"] = "direct"
    goal_id: str
    ritual_title: Optional[str] = None


class RoutineSession(BaseModel):
    """One occurrence of a routine goal, costed independently of the goal."""
    model_config = ConfigDict(frozen=True)
    kind: Literal["routine"] = "routine"
    parent_goal_id: str
    title: str = ""
    duration_minutes: int = Field(60, gt=0)
    spoon_cost: int = Field(1, ge=1, le=4)
    subtask_id: Optional[str] = None


class Recovery(BaseModel):
    """Zero-cost rest block."""
    model_config = ConfigDict(frozen=True)
    kind: Literal["recovery"] = "recovery"
    title: str = "Recovery"


Assignment = Annotated[
    Union[Empty, Direct, RoutineSession, Recovery],
    Field(discriminator="kind"),
]

assignment_adapter = TypeAdapter(Assignment)

EMPTY = Empty()


def goal_id_of(assignment) -> Optional[str]:
    if isinstance(assignment, Direct):
        return assignment.goal_id
    if isinstance(assignment, RoutineSession):
        return assignment.parent_goal_id
    if isinstance(assignment, (Empty, Recovery)):
        return None
    raise TypeError(f"Unknown assignment variant: {type(assignment).__name__}")


def assignment_cost(assignment, goals: Mapping[str, Goal]) -> int:
    """Spoons consumed by one slot. Direct slots resolve their goal; unknown goals cost 1."""
    if isinstance(assignment, (Empty, Recovery)):
        return 0
    if isinstance(assignment, RoutineSession):
        return assignment.spoon_cost
    if isinstance(assignment, Direct):
        goal = goals.get(assignment.goal_id)
        return goal.cost if goal else 1
    raise TypeError(f"Unknown assignment variant: {type(assignment).__name__}")


def assignment_for_goal(goal: Goal, ritual_title: Optional[str] = None, subtask_id: Optional[str] = None):
    """The slot value a placement of `goal` produces: routine goals get their own session."""
    if goal.kind == GoalKind.routine:
        return RoutineSession(
            parent_goal_id=goal.id,
            title=ritual_title or goal.title,
            duration_minutes=60,
            spoon_cost=goal.cost,
            subtask_id=subtask_id,
        )
    return Direct(goal_id=goal.id, ritual_title=ritual_title)
