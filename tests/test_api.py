import time

import pytest
from fastapi.testclient import TestClient

from auto_shorts.api.dependencies import RunRegistry, get_services
from auto_shorts.main import app
from auto_shorts.task import GenerationTask

MESSAGE = {
    "type": "message",
    "contactname": "Sam",
    "script": [{"voice": "male", "message": "Ping", "msgtype": "sender"}],
}


@pytest.fixture
def client(services):
    app.dependency_overrides[get_services] = lambda: services
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def option_overrides(options):
    return {
        "temp_path": options.temp_path,
        "res_path": options.res_path,
        "output_dir": options.output_dir,
        "use_bg_music": False,
    }


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_unknown_type_is_rejected(client, option_overrides):
    response = client.post("/api/v1/videos", json={"script": {"type": "bogus"}, "options": option_overrides})
    assert response.status_code == 422
    assert "bogus" in response.json()["detail"]


def test_bad_options_are_rejected(client):
    response = client.post("/api/v1/videos", json={"script": MESSAGE, "options": {"orientation": "diagonal"}})
    assert response.status_code == 422


def test_unknown_run(client):
    assert client.get("/api/v1/videos/nope/status").status_code == 404
    assert client.get("/api/v1/videos/nope/events").status_code == 404


def test_run_completes(client, option_overrides):
    response = client.post("/api/v1/videos", json={"script": MESSAGE, "options": option_overrides})
    assert response.status_code == 200
    run_id = response.json()["run_id"]

    status = {}
    for _ in range(200):
        status = client.get(f"/api/v1/videos/{run_id}/status").json()
        if status["status"] != "running":
            break
        time.sleep(0.01)

    assert status["status"] == "completed", status
    assert status["output_path"].endswith(f"{run_id}.mp4")
    assert status["logs"]


def _finished(options, run_id: str, age: float) -> GenerationTask:
    task = GenerationTask(options, run_id=run_id)
    task.finished_at = time.monotonic() - age
    return task


def test_registry_drops_expired_and_excess_finished_runs(options):
    registry = RunRegistry(retention=60.0, max_finished=2)
    registry.add(GenerationTask(options, run_id="running"))
    for run_id, age in [("stale", 120.0), ("old", 30.0), ("recent", 20.0), ("newest", 10.0)]:
        registry.add(_finished(options, run_id, age))

    registry.prune()
    assert sorted(t.run_id for t in registry.values()) == ["newest", "recent", "running"]
    assert registry.get("stale") is None
    assert registry.get("running") is not None
