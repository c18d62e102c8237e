"""
Week/Month Plan Negotiator.

    Idle -> Planning -> Preview -> Applied | Discarded -> Idle
    Planning -> Idle on advisory failure

Draft ledgers live only on the negotiator until apply(); apply() is the single
place persisted ledgers are written.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError

from spoonplan.errors import AdvisoryFailure, PlanInProgress, PlanStateError
from spoonplan.rules.capacity import busy_hours
from spoonplan.rules.ledger import SlotLedger
from spoonplan.schemas.assignment import assignment_for_goal
from spoonplan.schemas.goal import GoalKind, index_goals
from spoonplan.schemas.plan import DraftPlacement, PlanProposal, PlanRequest, UnplacedHours
from spoonplan.services.advisory import AdvisoryProducer
from spoonplan.services.ledger_store import LedgerStore

logger = logging.getLogger("spoonplan")


class PlanState(str, Enum):
    idle = "idle"
    planning = "planning"
    preview = "preview"
    applied = "applied"
    discarded = "discarded"


@dataclass
class PlanPreview:
    proposal: PlanProposal
    drafts: Dict[date, SlotLedger]
    placements: List[DraftPlacement] = field(default_factory=list)
    unplaced: List[UnplacedHours] = field(default_factory=list)


class PlanNegotiator:
    def __init__(self):
        self.state = PlanState.idle
        self.preview: Optional[PlanPreview] = None
        self.last_outcome: Optional[PlanState] = None
        self.last_error: Optional[str] = None

    # ==========================================
    # TRANSITIONS
    # ==========================================

    def begin(self) -> None:
        if self.state in (PlanState.planning, PlanState.preview):
            raise PlanInProgress(f"A plan is already {self.state.value}")
        self.state = PlanState.planning
        self.preview = None
        self.last_error = None

    def fail(self, reason: str) -> None:
        """Planning -> Idle. Nothing was written, so nothing to unwind."""
        self.state = PlanState.idle
        self.preview = None
        self.last_error = reason
        logger.warning("advisory_failure", extra={"reason": reason})

    def cancel(self) -> None:
        if self.state in (PlanState.planning, PlanState.preview):
            self.state = PlanState.idle
            self.preview = None

    def validate(self, raw: Any, request: PlanRequest) -> PlanProposal:
        """Reject the whole proposal on any malformed or partial part."""
        if self.state != PlanState.planning:
            raise PlanStateError(f"Cannot accept a proposal while {self.state.value}")
        try:
            proposal = PlanProposal.model_validate(raw)
        except ValidationError as e:
            self.fail(f"Malformed proposal: {e.error_count()} validation error(s)")
            raise AdvisoryFailure(self.last_error) from e
        if not any(phase.allocations for phase in proposal.phases):
            self.fail("Malformed proposal: no allocations")
            raise AdvisoryFailure(self.last_error)

        goals = index_goals(request.goals)
        allowed = set(request.dates)
        for phase in proposal.phases:
            for alloc in phase.allocations:
                goal = goals.get(alloc.goal_id)
                if goal is None:
                    problem = f"unknown goal {alloc.goal_id!r}"
                elif goal.kind == GoalKind.vitality:
                    problem = f"vitality goal {alloc.goal_id!r} cannot take slots"
                elif alloc.date not in allowed:
                    problem = f"date {alloc.date} outside the requested range"
                else:
                    continue
                self.fail(f"Malformed proposal: {problem}")
                raise AdvisoryFailure(self.last_error)
        return proposal

    def stage(
        self,
        proposal: PlanProposal,
        request: PlanRequest,
        base_ledgers: Mapping[date, SlotLedger],
    ) -> PlanPreview:
        """Planning -> Preview: map allocated hours onto earliest free slots of draft copies."""
        if self.state != PlanState.planning:
            raise PlanStateError(f"Cannot stage a plan while {self.state.value}")

        goals = index_goals(request.goals)
        drafts: Dict[date, SlotLedger] = {}
        free: Dict[date, List[str]] = {}
        placements: List[DraftPlacement] = []
        unplaced: List[UnplacedHours] = []

        for phase in proposal.phases:
            for alloc in phase.allocations:
                day = alloc.date
                if day not in drafts:
                    base = base_ledgers.get(day) or SlotLedger(day=day)
                    drafts[day] = base.copy()
                    drafts[day].day = day
                    blocked = busy_hours(drafts[day].hours, request.busy, day)
                    free[day] = [h for h in drafts[day].empty_hours() if h not in blocked]

                goal = goals[alloc.goal_id]
                wanted = math.ceil(alloc.hours)
                for _ in range(wanted):
                    if not free[day]:
                        break
                    hour = free[day].pop(0)
                    drafts[day].set(hour, assignment_for_goal(goal))
                    placements.append(DraftPlacement(date=day, hour=hour, goal_id=goal.id))
                    wanted -= 1
                if wanted:
                    unplaced.append(UnplacedHours(date=day, goal_id=goal.id, hours=wanted))

        self.preview = PlanPreview(proposal=proposal, drafts=drafts, placements=placements, unplaced=unplaced)
        self.state = PlanState.preview
        logger.info(
            "plan_preview_ready",
            extra={"dates": sorted(d.isoformat() for d in drafts), "placed": len(placements), "unplaced": len(unplaced)},
        )
        return self.preview

    async def request(self, producer: AdvisoryProducer, request: PlanRequest, store: LedgerStore) -> PlanPreview:
        """Idle -> Planning -> Preview, or back to Idle with AdvisoryFailure."""
        self.begin()
        try:
            raw = await producer(request)
        except AdvisoryFailure as e:
            self.fail(str(e))
            raise
        except Exception as e:
            self.fail(f"Advisory producer error: {e}")
            raise AdvisoryFailure(self.last_error) from e

        try:
            proposal = self.validate(raw, request)
            touched = sorted({a.date for p in proposal.phases for a in p.allocations})
            bases = {day: await store.load_ledger(day) for day in touched}
            return self.stage(proposal, request, bases)
        except Exception:
            self.cancel()
            raise

    async def apply(self, store: LedgerStore) -> List[date]:
        """Preview -> Applied -> Idle. Drafts replace persisted ledgers for every touched date."""
        if self.state != PlanState.preview or self.preview is None:
            raise PlanStateError(f"Nothing to apply while {self.state.value}")
        written = []
        for day in sorted(self.preview.drafts):
            await store.save_ledger(day, self.preview.drafts[day])
            written.append(day)
        self.state = PlanState.idle
        self.preview = None
        self.last_outcome = PlanState.applied
        logger.info("plan_applied", extra={"dates": [d.isoformat() for d in written]})
        return written

    def discard(self) -> None:
        """Preview -> Discarded -> Idle."""
        if self.state != PlanState.preview:
            raise PlanStateError(f"Nothing to discard while {self.state.value}")
        self.state = PlanState.idle
        self.preview = None
        self.last_outcome = PlanState.discarded
        logger.info("plan_discarded")
