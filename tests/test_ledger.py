import pytest

from spoonplan.errors import OutOfRangeSlot, OverwriteRefused
from spoonplan.rules.ledger import SlotLedger
from spoonplan.schemas.assignment import EMPTY, Direct, Empty, Recovery, RoutineSession, assignment_cost, goal_id_of

from fixtures import MONDAY, kaizen


def test_fresh_ledger_is_empty():
    ledger = SlotLedger(day=MONDAY)
    assert len(ledger.hours) == 18
    assert ledger.hours[0] == "06:00"
    assert ledger.hours[-1] == "23:00"
    assert ledger.get("12:00") == EMPTY
    assert ledger.occupied_hours() == []

@pytest.mark.parametrize("hour", ["05:00", "24:00", "6:00", "noon"])
def test_out_of_window_hours_rejected(hour):
    ledger = SlotLedger(day=MONDAY)
    with pytest.raises(OutOfRangeSlot):
        ledger.get(hour)
    with pytest.raises(OutOfRangeSlot):
        ledger.set(hour, Direct(goal_id="a"))

def test_set_and_clear():
    ledger = SlotLedger(day=MONDAY)
    ledger.set("09:00", Direct(goal_id="a"))
    assert ledger.get("09:00") == Direct(goal_id="a")
    assert not ledger.is_empty("09:00")
    ledger.clear("09:00")
    assert ledger.is_empty("09:00")
    ledger.set("10:00", Direct(goal_id="a"))
    ledger.set("10:00", EMPTY)
    assert ledger.occupied_hours() == []

def test_recovery_needs_override():
    ledger = SlotLedger(day=MONDAY)
    ledger.set("14:00", Recovery())
    with pytest.raises(OverwriteRefused) as exc:
        ledger.set("14:00", Direct(goal_id="a"))
    assert exc.value.hour == "14:00"
    assert ledger.get("14:00") == Recovery()
    ledger.set("14:00", Direct(goal_id="a"), override=True)
    assert ledger.get("14:00") == Direct(goal_id="a")

def test_total_cost_by_variant():
    goals = [kaizen("heavy", spoon_cost=3), kaizen("light")]
    ledger = SlotLedger(day=MONDAY)
    ledger.set("06:00", Direct(goal_id="heavy"))
    ledger.set("07:00", Direct(goal_id="light"))
    ledger.set("08:00", RoutineSession(parent_goal_id="light", title="Stretch", spoon_cost=2))
    ledger.set("09:00", Recovery())
    assert ledger.total_cost(goals) == 6
    # unknown goals cost one
    assert assignment_cost(Direct(goal_id="gone"), {}) == 1

def test_hours_for_goal_covers_routine_sessions():
    ledger = SlotLedger(day=MONDAY)
    ledger.set("06:00", RoutineSession(parent_goal_id="walk"))
    ledger.set("08:00", Direct(goal_id="walk"))
    ledger.set("09:00", Direct(goal_id="read"))
    assert ledger.hours_for_goal("walk") == ["06:00", "08:00"]
    assert ledger.has_recovery() is False

def test_copy_is_independent():
    ledger = SlotLedger(day=MONDAY)
    ledger.set("06:00", Direct(goal_id="a"))
    clone = ledger.copy()
    clone.set("07:00", Recovery())
    assert ledger.is_empty("07:00")
    assert clone != ledger

def test_dict_form_keeps_variants():
    ledger = SlotLedger(day=MONDAY)
    ledger.set("06:00", Direct(goal_id="a", ritual_title="Morning pages"))
    ledger.set("07:00", RoutineSession(parent_goal_id="walk", title="Walk", subtask_id="v1"))
    ledger.set("08:00", Recovery())
    data = ledger.to_dict()
    assert set(data) == {"06:00", "07:00", "08:00"}
    assert data["08:00"] == {"kind": "recovery", "title": "Recovery"}
    assert SlotLedger.from_dict(data, day=MONDAY) == ledger

def test_unknown_variant_raises():
    with pytest.raises(TypeError):
        goal_id_of({"kind": "direct", "goal_id": "a"})
    ledger = SlotLedger(day=MONDAY)
    with pytest.raises(TypeError):
        ledger.set("06:00", "a")

def test_empty_is_its_own_variant():
    assert goal_id_of(Empty()) is None
    assert assignment_cost(Empty(), {}) == 0

def test_clearing_recovery_needs_override():
    ledger = SlotLedger(day=MONDAY)
    ledger.set("15:00", Recovery())
    with pytest.raises(OverwriteRefused):
        ledger.clear("15:00")
    assert ledger.get("15:00") == Recovery()
    ledger.clear("15:00", override=True)
    assert ledger.is_empty("15:00")
