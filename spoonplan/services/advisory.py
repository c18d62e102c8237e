import json
import logging
from typing import Awaitable, Callable, Optional

from langsmith import traceable
from openai import AsyncOpenAI, OpenAIError

from spoonplan.config import settings
from spoonplan.errors import AdvisoryFailure
from spoonplan.schemas.plan import PlanProposal, PlanRequest

logger = logging.getLogger("spoonplan")

# An advisory producer takes the planning context and returns a raw proposal dict.
AdvisoryProducer = Callable[[PlanRequest], Awaitable[dict]]

SYSTEM_PROMPT = (
    "You are a gentle weekly planner. Allocate whole hours of the user's goals across the "
    "given dates. Respect each date's spoon budget and avoid busy calendar time. "
    "Never allocate vitality goals. Output must match the schema."
)


def build_prompt(request: PlanRequest) -> str:
    goals = [
        {
            "id": g.id,
            "kind": g.kind.value,
            "title": g.title,
            "target_hours_per_week": g.target_hours_per_week,
            "spoon_cost": g.cost,
        }
        for g in request.goals
    ]
    busy = [
        {"start": b.start.isoformat(), "end": b.end.isoformat(), "weather": b.weather_tag.value}
        for b in request.busy
    ]
    budgets = {d.isoformat(): n for d, n in request.energy.max_slots_by_date.items()}
    return (
        f"Dates: {', '.join(d.isoformat() for d in request.dates)}\n"
        f"Goals: {json.dumps(goals)}\n"
        f"Busy: {json.dumps(busy)}\n"
        f"Spoon budgets: {json.dumps(budgets)}\n"
        "Group the allocations into 1-4 phases."
    )


class OpenAIAdvisor:
    """Structured-output producer. Any transport or parsing problem is an AdvisoryFailure."""

    def __init__(self, client: Optional[AsyncOpenAI] = None, model: Optional[str] = None):
        self._client = client
        self.model = model or settings.advisory_model

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            if not settings.openai_api_key:
                raise AdvisoryFailure("Advisory producer not configured (OPENAI_API_KEY missing)")
            self._client = AsyncOpenAI(api_key=settings.openai_api_key)
        return self._client

    @traceable(run_type="llm", name="propose_plan")
    async def __call__(self, request: PlanRequest) -> dict:
        try:
            completion = await self.client.beta.chat.completions.parse(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_prompt(request)},
                ],
                response_format=PlanProposal,
            )
        except OpenAIError as e:
            raise AdvisoryFailure(f"Advisory request failed: {e}") from e
        parsed = completion.choices[0].message.parsed
        logger.info("structured_output_parsed", extra={"is_schema": isinstance(parsed, PlanProposal)})
        if parsed is None:
            raise AdvisoryFailure("Advisory producer returned no proposal")
        return parsed.model_dump(mode="json")
