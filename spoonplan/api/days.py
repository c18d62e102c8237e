"""
Day API: slot ledger, capacity, manual edits, auto-fill and load shedding.
"""

from datetime import date, timedelta
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from spoonplan.config import settings
from spoonplan.errors import OutOfRangeSlot, OverwriteRefused
from spoonplan.rules.capacity import busy_hours, compute_capacity, used_capacity
from spoonplan.rules.ledger import SlotLedger
from spoonplan.schemas.assignment import goal_id_of
from spoonplan.schemas.goal import Goal, GoalKind, index_goals
from spoonplan.schemas.request import AutoFillRequest, CalendarRequest, CheckInRequest, SlotRequest
from spoonplan.schemas.response import CapacityRead, DayRead, RemovedRead, ShedRead
from spoonplan.services.autofill import auto_fill
from spoonplan.services.ledger_store import SqlLedgerStore
from spoonplan.services.load_shedder import lighten_load
from spoonplan.services.storm_warnings import StormWarning, storm_warnings
from spoonplan.api.deps import get_store

router = APIRouter(prefix="/days", tags=["days"])


async def _day_read(
    store: SqlLedgerStore,
    day: date,
    ledger: Optional[SlotLedger] = None,
    goals: Optional[List[Goal]] = None,
) -> DayRead:
    goals = goals if goals is not None else await store.load_goals()
    ledger = ledger if ledger is not None else await store.load_ledger(day)
    state = await store.energy_state(day)
    capacity = compute_capacity(state)
    used = used_capacity(ledger, goals)
    busy = await store.load_busy(day)
    return DayRead(
        day=day,
        slots={hour: ledger.get(hour) for hour in ledger.occupied_hours()},
        busy_hours=sorted(busy_hours(ledger.hours, busy, day)),
        capacity=CapacityRead(
            weather=state.weather,
            max_slots=capacity.max_slots,
            used=used,
            is_low_energy=capacity.is_low_energy,
            is_over_capacity=used > capacity.max_slots,
        ),
    )


@router.get("/{day}", response_model=DayRead)
async def read_day(day: date, store: SqlLedgerStore = Depends(get_store)):
    return await _day_read(store, day)


@router.put("/{day}/checkin", response_model=DayRead)
async def check_in(day: date, body: CheckInRequest, store: SqlLedgerStore = Depends(get_store)):
    await store.save_check_in(day, body.spoon_count, body.energy_modifier)
    return await _day_read(store, day)


@router.put("/{day}/calendar", response_model=DayRead)
async def replace_calendar(day: date, body: CalendarRequest, store: SqlLedgerStore = Depends(get_store)):
    """Calendar source pushes the day's busy intervals. Stored read-only, never written back."""
    await store.replace_busy(day, body.intervals)
    return await _day_read(store, day)


@router.put("/{day}/slots/{hour}", response_model=DayRead)
async def place_slot(
    day: date,
    hour: str,
    body: SlotRequest,
    override: bool = False,
    store: SqlLedgerStore = Depends(get_store),
):
    """
    Manual placement. Never blocked by capacity; over-capacity is only flagged.
    Recovery blocks need override=true to be replaced.
    """
    goals = await store.load_goals()
    goal_id = goal_id_of(body.assignment)
    if goal_id is not None:
        goal = index_goals(goals).get(goal_id)
        if goal is None:
            raise HTTPException(status_code=404, detail="Goal not found")
        if goal.kind == GoalKind.vitality:
            raise HTTPException(status_code=422, detail="Vitality goals are tracked, not scheduled")

    ledger = await store.load_ledger(day)
    try:
        ledger.set(hour, body.assignment, override=override)
    except OutOfRangeSlot as e:
        raise HTTPException(status_code=404, detail=str(e))
    except OverwriteRefused as e:
        raise HTTPException(status_code=409, detail=str(e))
    await store.save_ledger(day, ledger)
    return await _day_read(store, day, ledger=ledger, goals=goals)


@router.delete("/{day}/slots/{hour}", response_model=DayRead)
async def clear_slot(
    day: date,
    hour: str,
    override: bool = False,
    store: SqlLedgerStore = Depends(get_store),
):
    ledger = await store.load_ledger(day)
    try:
        ledger.clear(hour, override=override)
    except OutOfRangeSlot as e:
        raise HTTPException(status_code=404, detail=str(e))
    except OverwriteRefused as e:
        raise HTTPException(status_code=409, detail=str(e))
    await store.save_ledger(day, ledger)
    return await _day_read(store, day, ledger=ledger)


@router.post("/{day}/autofill", response_model=DayRead)
async def autofill_day(
    day: date,
    body: Optional[AutoFillRequest] = None,
    store: SqlLedgerStore = Depends(get_store),
):
    goals = await store.load_goals()
    ledger = auto_fill(
        goals,
        await store.load_busy(day),
        await store.energy_state(day),
        await store.load_ledger(day),
        day=day,
        prior_hours=body.prior_hours if body else None,
    )
    await store.save_ledger(day, ledger)
    return await _day_read(store, day, ledger=ledger, goals=goals)


@router.post("/{day}/lighten", response_model=ShedRead)
async def lighten_day(day: date, store: SqlLedgerStore = Depends(get_store)):
    goals = await store.load_goals()
    capacity = compute_capacity(await store.energy_state(day))
    result = lighten_load(await store.load_ledger(day), goals, capacity.max_slots)
    if result.removed:
        await store.save_ledger(day, result.ledger)
    return ShedRead(
        day=await _day_read(store, day, ledger=result.ledger, goals=goals),
        removed=[RemovedRead(hour=r.hour, title=r.title, assignment=r.assignment) for r in result.removed],
        still_over_capacity=result.still_over_capacity,
    )


@router.get("/{day}/storm-warnings", response_model=List[StormWarning])
async def day_storm_warnings(
    day: date,
    days: Optional[int] = Query(None, ge=1, le=31),
    store: SqlLedgerStore = Depends(get_store),
):
    days = days or settings.storm_horizon_days
    goals = await store.load_goals()
    busy = []
    for offset in range(days):
        busy.extend(await store.load_busy(day + timedelta(days=offset)))
    return storm_warnings(goals, busy, start=day, days=days)
