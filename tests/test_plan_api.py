from fastapi.testclient import TestClient

from spoonplan.api.deps import get_advisor
from spoonplan.main import app

DAY = "2024-03-04"

GOALS = [
    {"id": "write", "title": "Write", "target_hours_per_week": 3},
    {"id": "water", "kind": "vitality", "title": "Water"},
]


def _advise(payload):
    async def produce(request):
        produce.requests.append(request)
        return payload
    produce.requests = []
    app.dependency_overrides[get_advisor] = lambda: produce
    return produce


def _proposal(hours=2, goal_id="write", day=DAY):
    return {"summary": "Ease in", "phases": [{"title": "Week", "allocations": [{"date": day, "goal_id": goal_id, "hours": hours}]}]}


def test_plan_starts_idle(client: TestClient):
    r = client.get("/api/plan")
    assert r.status_code == 200
    assert r.json()["state"] == "idle"
    assert r.json()["drafts"] == {}

def test_preview_apply_cycle(client: TestClient):
    client.put("/api/goals", json=GOALS)
    client.put(f"/api/days/{DAY}/checkin", json={"spoon_count": 5})
    producer = _advise(_proposal())

    r = client.post("/api/plan", json={"dates": [DAY]})
    assert r.status_code == 200
    data = r.json()
    assert data["state"] == "preview"
    assert data["summary"] == "Ease in"
    assert [p["hour"] for p in data["placements"]] == ["06:00", "07:00"]
    assert list(data["drafts"][DAY]) == ["06:00", "07:00"]
    # producer sees the day's budget
    assert producer.requests[0].energy.max_slots_by_date[producer.requests[0].dates[0]] == 5

    # nothing persisted during preview
    assert client.get(f"/api/days/{DAY}").json()["slots"] == {}

    r = client.post("/api/plan/apply")
    assert r.status_code == 200
    assert r.json()["state"] == "idle"
    assert r.json()["last_outcome"] == "applied"
    slots = client.get(f"/api/days/{DAY}").json()["slots"]
    assert slots["06:00"] == {"kind": "direct", "goal_id": "write", "ritual_title": None}

def test_discard(client: TestClient):
    client.put("/api/goals", json=GOALS)
    _advise(_proposal())
    client.post("/api/plan", json={"dates": [DAY]})
    r = client.post("/api/plan/discard")
    assert r.status_code == 200
    assert r.json()["last_outcome"] == "discarded"
    assert client.get(f"/api/days/{DAY}").json()["slots"] == {}

def test_malformed_proposal_is_bad_gateway(client: TestClient):
    client.put("/api/goals", json=GOALS)
    _advise({"summary": "forgot the phases"})
    r = client.post("/api/plan", json={"dates": [DAY]})
    assert r.status_code == 502
    plan = client.get("/api/plan").json()
    assert plan["state"] == "idle"
    assert plan["last_error"].startswith("Malformed proposal")

def test_vitality_allocation_is_rejected(client: TestClient):
    client.put("/api/goals", json=GOALS)
    _advise(_proposal(goal_id="water"))
    assert client.post("/api/plan", json={"dates": [DAY]}).status_code == 502

def test_second_plan_while_previewing(client: TestClient):
    client.put("/api/goals", json=GOALS)
    _advise(_proposal())
    assert client.post("/api/plan", json={"dates": [DAY]}).status_code == 200
    assert client.post("/api/plan", json={"dates": [DAY]}).status_code == 409

def test_apply_or_discard_without_preview(client: TestClient):
    assert client.post("/api/plan/apply").status_code == 409
    assert client.post("/api/plan/discard").status_code == 409

def test_unconfigured_advisor_fails_cleanly(client: TestClient):
    client.put("/api/goals", json=GOALS)
    r = client.post("/api/plan", json={"dates": [DAY]})
    assert r.status_code == 502
    assert client.get("/api/plan").json()["state"] == "idle"

def test_plan_needs_dates(client: TestClient):
    assert client.post("/api/plan", json={"dates": []}).status_code == 422
