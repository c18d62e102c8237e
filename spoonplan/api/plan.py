"""
Plan API: ask the advisory producer for a week/month plan, preview it as draft
ledgers, then apply or discard.
"""

from fastapi import APIRouter, Depends, HTTPException

from spoonplan.errors import AdvisoryFailure, PlanInProgress, PlanStateError
from spoonplan.rules.capacity import compute_capacity
from spoonplan.schemas.plan import EnergyProfile, PlanRequest
from spoonplan.schemas.request import PlanCreateRequest
from spoonplan.schemas.response import PlanRead
from spoonplan.services.advisory import AdvisoryProducer
from spoonplan.services.ledger_store import SqlLedgerStore
from spoonplan.services.plan_negotiator import PlanNegotiator
from spoonplan.api.deps import get_advisor, get_negotiator, get_store

router = APIRouter(prefix="/plan", tags=["plan"])


def _plan_read(negotiator: PlanNegotiator) -> PlanRead:
    read = PlanRead(
        state=negotiator.state.value,
        last_outcome=negotiator.last_outcome.value if negotiator.last_outcome else None,
        last_error=negotiator.last_error,
    )
    preview = negotiator.preview
    if preview is not None:
        read.summary = preview.proposal.summary
        read.placements = preview.placements
        read.unplaced = preview.unplaced
        read.drafts = {
            day: {hour: ledger.get(hour) for hour in ledger.occupied_hours()}
            for day, ledger in sorted(preview.drafts.items())
        }
    return read


@router.get("", response_model=PlanRead)
async def read_plan(negotiator: PlanNegotiator = Depends(get_negotiator)):
    return _plan_read(negotiator)


@router.post("", response_model=PlanRead)
async def create_plan(
    body: PlanCreateRequest,
    store: SqlLedgerStore = Depends(get_store),
    negotiator: PlanNegotiator = Depends(get_negotiator),
    advisor: AdvisoryProducer = Depends(get_advisor),
):
    """
    Idle -> Planning -> Preview. Nothing is persisted until /plan/apply.
    502 when the producer fails or returns a malformed proposal.
    """
    dates = sorted(set(body.dates))
    busy = []
    budgets = {}
    for day in dates:
        busy.extend(await store.load_busy(day))
        budgets[day] = compute_capacity(await store.energy_state(day)).max_slots

    request = PlanRequest(
        dates=dates,
        goals=await store.load_goals(),
        busy=busy,
        energy=EnergyProfile(max_slots_by_date=budgets),
    )
    try:
        await negotiator.request(advisor, request, store)
    except PlanInProgress as e:
        raise HTTPException(status_code=409, detail=str(e))
    except AdvisoryFailure as e:
        raise HTTPException(status_code=502, detail=str(e))
    return _plan_read(negotiator)


@router.post("/apply", response_model=PlanRead)
async def apply_plan(
    store: SqlLedgerStore = Depends(get_store),
    negotiator: PlanNegotiator = Depends(get_negotiator),
):
    try:
        await negotiator.apply(store)
    except PlanStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _plan_read(negotiator)


@router.post("/discard", response_model=PlanRead)
async def discard_plan(negotiator: PlanNegotiator = Depends(get_negotiator)):
    try:
        negotiator.discard()
    except PlanStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _plan_read(negotiator)
