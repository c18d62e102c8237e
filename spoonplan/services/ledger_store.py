"""
Persistence behind the scheduling core.
"Not found" is never an error: missing ledgers load empty, missing goals load as [].
"""

from datetime import date, datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from spoonplan.models import CalendarBlock, DayLedger, EnergyCheckIn, GoalRecord, utc_now
from spoonplan.rules.capacity import derive_energy_state
from spoonplan.rules.ledger import SlotLedger
from spoonplan.schemas.calendar import CalendarBusyInterval, EnergyState, Weather
from spoonplan.schemas.goal import Goal


def _stored(at: datetime) -> datetime:
    """Calendar times are local wall-clock values; the column needs them tz-aware."""
    return at if at.tzinfo else at.replace(tzinfo=timezone.utc)


def _wall_clock(at: datetime) -> datetime:
    return at.replace(tzinfo=None)


class LedgerStore:
    """Async accessors the negotiator and API depend on."""

    async def load_ledger(self, day: date) -> SlotLedger:
        raise NotImplementedError

    async def save_ledger(self, day: date, ledger: SlotLedger) -> None:
        raise NotImplementedError

    async def load_goals(self) -> List[Goal]:
        raise NotImplementedError

    async def save_goals(self, goals: List[Goal]) -> None:
        raise NotImplementedError


class InMemoryLedgerStore(LedgerStore):
    def __init__(self, ledgers: Optional[Dict[date, SlotLedger]] = None, goals: Optional[List[Goal]] = None):
        self.ledgers: Dict[date, SlotLedger] = dict(ledgers or {})
        self.goals: List[Goal] = list(goals or [])
        self.writes: List[date] = []

    async def load_ledger(self, day: date) -> SlotLedger:
        ledger = self.ledgers.get(day)
        return ledger.copy() if ledger else SlotLedger(day=day)

    async def save_ledger(self, day: date, ledger: SlotLedger) -> None:
        self.ledgers[day] = ledger.copy()
        self.writes.append(day)

    async def load_goals(self) -> List[Goal]:
        return list(self.goals)

    async def save_goals(self, goals: List[Goal]) -> None:
        self.goals = list(goals)


class SqlLedgerStore(LedgerStore):
    def __init__(self, db: AsyncSession):
        self.db = db

    async def load_ledger(self, day: date) -> SlotLedger:
        row = await self.db.get(DayLedger, day)
        return SlotLedger.from_dict(row.slots if row else None, day=day)

    async def save_ledger(self, day: date, ledger: SlotLedger) -> None:
        row = await self.db.get(DayLedger, day)
        if row is None:
            row = DayLedger(day=day)
            self.db.add(row)
        row.slots = ledger.to_dict()
        row.updated_at = utc_now()
        await self.db.commit()

    async def load_goals(self) -> List[Goal]:
        rows = await self.db.scalars(select(GoalRecord).order_by(GoalRecord.position))
        return [Goal.model_validate(r.document) for r in rows.all()]

    async def save_goals(self, goals: List[Goal]) -> None:
        await self.db.execute(delete(GoalRecord))
        for position, goal in enumerate(goals):
            self.db.add(
                GoalRecord(
                    id=goal.id,
                    position=position,
                    kind=goal.kind.value,
                    document=goal.model_dump(mode="json"),
                )
            )
        await self.db.commit()

    # ==========================================
    # DAY INPUTS (check-in + calendar snapshot)
    # ==========================================

    async def save_check_in(self, day: date, spoon_count: Optional[int], energy_modifier: int) -> EnergyCheckIn:
        row = await self.db.get(EnergyCheckIn, day)
        if row is None:
            row = EnergyCheckIn(day=day)
            self.db.add(row)
        row.spoon_count = spoon_count
        row.energy_modifier = energy_modifier
        row.logged_at = utc_now()
        await self.db.commit()
        await self.db.refresh(row)
        return row

    async def load_busy(self, day: date) -> List[CalendarBusyInterval]:
        rows = await self.db.scalars(
            select(CalendarBlock).where(CalendarBlock.day == day).order_by(CalendarBlock.start)
        )
        return [
            CalendarBusyInterval(
                start=_wall_clock(r.start),
                end=_wall_clock(r.end),
                title=r.title,
                weather_tag=Weather(r.weather_tag),
            )
            for r in rows.all()
        ]

    async def replace_busy(self, day: date, intervals: List[CalendarBusyInterval]) -> None:
        await self.db.execute(delete(CalendarBlock).where(CalendarBlock.day == day))
        for iv in intervals:
            self.db.add(
                CalendarBlock(
                    day=day,
                    start=_stored(iv.start),
                    end=_stored(iv.end),
                    title=iv.title,
                    weather_tag=iv.weather_tag.value,
                )
            )
        await self.db.commit()

    async def energy_state(self, day: date) -> EnergyState:
        """Derived fresh on every call from the day's calendar and check-in."""
        check_in = await self.db.get(EnergyCheckIn, day)
        return derive_energy_state(
            await self.load_busy(day),
            spoon_count=check_in.spoon_count if check_in else None,
            energy_modifier=check_in.energy_modifier if check_in else 0,
            day=day,
        )
