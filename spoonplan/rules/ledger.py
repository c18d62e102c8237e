"""
Slot Ledger: the per-date hour -> Assignment map.
Empty slots are not stored; get() returns EMPTY for them.
"""

from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from spoonplan.config import get_slot_hours
from spoonplan.errors import OutOfRangeSlot, OverwriteRefused
from spoonplan.schemas.assignment import (
    EMPTY,
    Empty,
    Recovery,
    assignment_adapter,
    assignment_cost,
    goal_id_of,
)
from spoonplan.schemas.goal import Goal, index_goals


class SlotLedger:
    def __init__(
        self,
        day: Optional[date] = None,
        hours: Optional[Sequence[str]] = None,
        slots: Optional[Mapping[str, Any]] = None,
    ):
        self.day = day
        self._hours: Tuple[str, ...] = tuple(hours) if hours is not None else get_slot_hours()
        self._slots: Dict[str, Any] = {}
        for hour, assignment in (slots or {}).items():
            self.set(hour, assignment)

    @property
    def hours(self) -> Tuple[str, ...]:
        return self._hours

    def _check(self, hour: str) -> None:
        if hour not in self._hours:
            raise OutOfRangeSlot(hour)

    def get(self, hour: str):
        self._check(hour)
        return self._slots.get(hour, EMPTY)

    def set(self, hour: str, assignment, override: bool = False) -> None:
        self._check(hour)
        if isinstance(self._slots.get(hour), Recovery) and not override:
            raise OverwriteRefused(hour)
        if isinstance(assignment, Empty):
            self._slots.pop(hour, None)
        else:
            # validates the variant, rejects anything outside the closed set
            goal_id_of(assignment)
            self._slots[hour] = assignment

    def clear(self, hour: str, override: bool = False) -> None:
        self.set(hour, EMPTY, override=override)

    def is_empty(self, hour: str) -> bool:
        self._check(hour)
        return hour not in self._slots

    def items(self) -> List[Tuple[str, Any]]:
        return [(hour, self._slots.get(hour, EMPTY)) for hour in self._hours]

    def occupied_hours(self) -> List[str]:
        return [hour for hour in self._hours if hour in self._slots]

    def empty_hours(self) -> List[str]:
        return [hour for hour in self._hours if hour not in self._slots]

    def hours_for_goal(self, goal_id: str) -> List[str]:
        return [hour for hour in self.occupied_hours() if goal_id_of(self._slots[hour]) == goal_id]

    def has_recovery(self) -> bool:
        return any(isinstance(a, Recovery) for a in self._slots.values())

    def total_cost(self, goals: Iterable[Goal] | Mapping[str, Goal] = ()) -> int:
        """Capacity used: spoon cost over non-Empty, non-Recovery slots."""
        by_id = index_goals(goals)
        return sum(assignment_cost(a, by_id) for a in self._slots.values())

    def copy(self) -> "SlotLedger":
        clone = SlotLedger(day=self.day, hours=self._hours)
        clone._slots = dict(self._slots)
        return clone

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return {hour: self._slots[hour].model_dump() for hour in self.occupied_hours()}

    @classmethod
    def from_dict(
        cls,
        data: Optional[Mapping[str, Any]],
        day: Optional[date] = None,
        hours: Optional[Sequence[str]] = None,
    ) -> "SlotLedger":
        ledger = cls(day=day, hours=hours)
        for hour, raw in (data or {}).items():
            ledger.set(hour, assignment_adapter.validate_python(raw), override=True)
        return ledger

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SlotLedger):
            return NotImplemented
        return self.day == other.day and self._hours == other._hours and self._slots == other._slots

    def __repr__(self) -> str:
        return f"SlotLedger(day={self.day}, occupied={len(self._slots)}/{len(self._hours)})"
