from timetabler.api.deps import get_generation_defaults
from timetabler.core.config import get_settings
from timetabler.main import app
from timetabler.schemas.generator import GenerationSettings


def test_health(client):
    assert client.get("/api/health").json() == {"status": "ok"}
    assert "timestamp" in client.get("/api/health/live").json()


def test_sample_data_uses_camel_case(client):
    response = client.get("/api/sample-data")

    assert response.status_code == 200
    body = response.json()
    assert [batch["batchCode"] for batch in body["studentBatches"]] == ["CSE-2A", "CSE-2B", "CSE-M1"]
    assert body["faculty"][0]["maxClassesPerWeek"] == 10
    assert body["fixedSlots"][1]["eventName"] == "Seminar"
    assert body["grid"]["timeSlots"][0] == "9-10 AM"


def test_generate_returns_options(client):
    sample = client.get("/api/sample-data").json()

    response = client.post(
        "/api/generate",
        json={"input": sample, "optionCount": 2, "settingsOverride": {"randomSeed": 5}},
    )

    assert response.status_code == 200
    body = response.json()
    assert set(body) == {"options", "settingsUsed", "runtimeMs", "occupancyMatrices"}
    assert [option["id"] for option in body["options"]] == [1, 2]
    assert [option["seed"] for option in body["options"]] == [5, 6]
    assert body["settingsUsed"]["randomSeed"] == 5
    assert set(body["occupancyMatrices"]) == {"1", "2"}

    first = body["options"][0]
    assert first["scores"]["conflicts"] == 0
    assert first["timetable"]
    assert {"day", "time", "subject", "subjectCode", "faculty", "room", "batch"} == set(first["timetable"][0])
    assert any(item["subjectCode"] == "CSL101" for item in first["unmetDemands"])


def test_generate_uses_configured_defaults(client):
    app.dependency_overrides[get_generation_defaults] = lambda: GenerationSettings(
        strategy="backtracking", max_search_steps=200, random_seed=3
    )
    try:
        sample = client.get("/api/sample-data").json()
        response = client.post("/api/generate", json={"input": sample, "optionCount": 1})
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 200
    assert response.json()["settingsUsed"]["strategy"] == "backtracking"
    assert response.json()["options"][0]["seed"] == 3


def test_generate_rejects_invalid_input(client):
    sample = client.get("/api/sample-data").json()
    sample["faculty"][0]["subjects"] = []

    response = client.post("/api/generate", json={"input": sample})

    assert response.status_code == 422
    body = response.json()
    assert body["message"] == "Scheduling input is invalid"
    assert body["details"]["problems"] == ["Faculty Dr. Sharma has no teachable subjects"]


def test_generate_rejects_out_of_range_fields(client):
    sample = client.get("/api/sample-data").json()
    sample["classrooms"][0]["capacity"] = 0

    response = client.post("/api/generate", json={"input": sample})

    assert response.status_code == 422
    body = response.json()
    assert body["message"] == "Request validation failed"
    assert any("capacity" in error["loc"] for error in body["details"]["errors"])


def test_oversized_request_is_rejected(client):
    limit = get_settings().max_request_bytes
    response = client.post(
        "/api/generate",
        content=b" " * (limit + 1),
        headers={"content-type": "application/json"},
    )

    assert response.status_code == 413
    assert "too large" in response.json()["message"]


def test_detect_conflicts_reports_and_suggests(client):
    sample = client.get("/api/sample-data").json()
    clash = {
        "day": "Monday",
        "time": "9-10 AM",
        "subject": "Intro to Programming",
        "subjectCode": "CSE101",
        "faculty": "Dr. Sharma",
        "room": "A101",
        "batch": "CSE-2A",
    }

    response = client.post(
        "/api/conflicts/detect",
        json={"input": sample, "timetable": [clash, {**clash, "faculty": "Dr. Singh", "batch": "CSE-2B"}]},
    )

    assert response.status_code == 200
    body = response.json()
    assert [item["conflictType"] for item in body["conflicts"]] == ["room_conflict"]
    assert body["conflicts"][0]["affectedEntries"] == [0, 1]
    actions = {item["actionType"] for item in body["suggestedResolutions"]}
    assert actions == {"change_room", "move_slot"}


def test_partial_override_keeps_configured_defaults(client):
    app.dependency_overrides[get_generation_defaults] = lambda: GenerationSettings(
        strategy="backtracking", exclusivity="slot", option_count=3, max_search_steps=200
    )
    try:
        sample = client.get("/api/sample-data").json()
        response = client.post("/api/generate", json={"input": sample, "settingsOverride": {"randomSeed": 5}})
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 200
    used = response.json()["settingsUsed"]
    assert used["strategy"] == "backtracking"
    assert used["optionCount"] == 3
    assert used["maxSearchSteps"] == 200
    assert used["randomSeed"] == 5
    assert [option["seed"] for option in response.json()["options"]] == [5, 6, 7]
