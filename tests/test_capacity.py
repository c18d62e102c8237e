from datetime import datetime, timedelta

import pytest

from spoonplan.rules.capacity import (
    busy_hours,
    compute_capacity,
    derive_energy_state,
    derive_weather,
    is_over_capacity,
)
from spoonplan.rules.ledger import SlotLedger
from spoonplan.schemas.assignment import Direct, Recovery
from spoonplan.schemas.calendar import CalendarBusyInterval, EnergyState, Weather

from fixtures import MONDAY, busy, kaizen


@pytest.mark.parametrize("weather, expected", [(Weather.storm, 3), (Weather.leaf, 5), (Weather.sun, 6)])
def test_base_capacity_by_weather(weather, expected):
    cap = compute_capacity(EnergyState(weather=weather))
    assert cap.max_slots == expected
    assert cap.is_low_energy is False

@pytest.mark.parametrize("weather", list(Weather))
def test_modifier_is_monotonic_and_floored(weather):
    slots = [compute_capacity(EnergyState(weather=weather, energy_modifier=m)).max_slots for m in (-9, -2, 0, 1, 2)]
    assert slots == sorted(slots)
    assert min(slots) == 1

def test_storm_with_low_modifier_is_one_slot_and_low_energy():
    cap = compute_capacity(EnergyState(weather=Weather.storm, energy_modifier=-2))
    assert cap.max_slots == 1
    assert cap.is_low_energy is True

def test_spoon_count_overrides_weather_and_modifier():
    cap = compute_capacity(EnergyState(weather=Weather.sun, energy_modifier=2, spoon_count=4))
    assert cap.max_slots == 4
    assert cap.is_low_energy is True
    cap = compute_capacity(EnergyState(weather=Weather.storm, spoon_count=9))
    assert cap.max_slots == 9
    assert cap.is_low_energy is False

def test_spoon_count_zero_means_no_slots():
    cap = compute_capacity(EnergyState(spoon_count=0))
    assert cap.max_slots == 0
    assert cap.is_low_energy is True

def test_spoon_count_out_of_range_falls_back_to_modifier():
    cap = compute_capacity(EnergyState(weather=Weather.leaf, energy_modifier=1, spoon_count=13))
    assert cap.max_slots == 6

def test_weather_majority_and_ties():
    assert derive_weather([]) == Weather.sun
    assert derive_weather([busy(MONDAY, 9, 10, Weather.leaf), busy(MONDAY, 11, 12, Weather.leaf),
                           busy(MONDAY, 13, 14, Weather.storm)]) == Weather.leaf
    # ties go to the heavier tag
    assert derive_weather([busy(MONDAY, 9, 10, Weather.sun), busy(MONDAY, 11, 12, Weather.storm)]) == Weather.storm
    assert derive_weather([busy(MONDAY, 9, 10, Weather.sun), busy(MONDAY, 11, 12, Weather.leaf)]) == Weather.leaf

def test_energy_state_only_counts_the_day():
    tomorrow = MONDAY + timedelta(days=1)
    state = derive_energy_state(
        [busy(MONDAY, 9, 10, Weather.sun), busy(tomorrow, 9, 10, Weather.storm), busy(tomorrow, 11, 12, Weather.storm)],
        energy_modifier=1,
        day=MONDAY,
    )
    assert state.weather == Weather.sun
    assert state.energy_modifier == 1
    assert state.spoon_count is None

def test_busy_hours_overlap():
    hours = SlotLedger(day=MONDAY).hours
    assert busy_hours(hours, [busy(MONDAY, 10, 11)], MONDAY) == {"10:00"}
    half = CalendarBusyInterval(start=datetime(2024, 3, 4, 10, 30), end=datetime(2024, 3, 4, 11, 30))
    assert busy_hours(hours, [half], MONDAY) == {"10:00", "11:00"}
    assert busy_hours(hours, [busy(MONDAY, 10, 11)], MONDAY + timedelta(days=1)) == set()
    # before the window
    assert busy_hours(hours, [busy(MONDAY, 3, 5)], MONDAY) == set()

def test_interval_must_end_after_start():
    with pytest.raises(ValueError):
        CalendarBusyInterval(start=datetime(2024, 3, 4, 11), end=datetime(2024, 3, 4, 10))

def test_over_capacity_is_flagged_not_enforced():
    goals = [kaizen("a", spoon_cost=2), kaizen("b", spoon_cost=2)]
    ledger = SlotLedger(day=MONDAY)
    ledger.set("06:00", Direct(goal_id="a"))
    ledger.set("07:00", Direct(goal_id="b"))
    ledger.set("08:00", Recovery())
    cap = compute_capacity(EnergyState(spoon_count=3))
    assert is_over_capacity(ledger, goals, cap) is True
    assert ledger.total_cost(goals) == 4
