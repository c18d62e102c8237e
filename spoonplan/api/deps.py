from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from spoonplan.db import get_db
from spoonplan.services.advisory import AdvisoryProducer, OpenAIAdvisor
from spoonplan.services.ledger_store import SqlLedgerStore
from spoonplan.services.plan_negotiator import PlanNegotiator


async def get_store(db: AsyncSession = Depends(get_db)) -> SqlLedgerStore:
    return SqlLedgerStore(db)


def get_negotiator(request: Request) -> PlanNegotiator:
    """One negotiator per process: the scheduler is single-user."""
    negotiator = getattr(request.app.state, "negotiator", None)
    if negotiator is None:
        negotiator = request.app.state.negotiator = PlanNegotiator()
    return negotiator


def get_advisor() -> AdvisoryProducer:
    return OpenAIAdvisor()
