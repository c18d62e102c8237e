"""
Goals API: the ordered goal definitions the scheduler works from.
Replaced wholesale; list order is the tie-break order for rituals.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from spoonplan.schemas.goal import Goal
from spoonplan.services.ledger_store import SqlLedgerStore
from spoonplan.api.deps import get_store

router = APIRouter(prefix="/goals", tags=["goals"])


@router.get("", response_model=List[Goal])
async def list_goals(store: SqlLedgerStore = Depends(get_store)):
    return await store.load_goals()


@router.put("", response_model=List[Goal])
async def replace_goals(goals: List[Goal], store: SqlLedgerStore = Depends(get_store)):
    seen = set()
    for goal in goals:
        if goal.id in seen:
            raise HTTPException(status_code=422, detail=f"Duplicate goal id {goal.id!r}")
        seen.add(goal.id)
    await store.save_goals(goals)
    return await store.load_goals()
