"""Tests for the HTTP request surface."""

import asyncio
import json

from conftest import posix_only, read_json
from jrunner.api.routers.runs import _event_stream
from jrunner.modules.runs import RunRecord


def parse_sse(text):
    """Split a server-sent event body into ``(event, payload)`` pairs."""
    events = []
    for block in text.split("\n\n"):
        name, data = "message", None
        for line in block.splitlines():
            if line.startswith("event: "):
                name = line[len("event: "):]
            elif line.startswith("data: "):
                data = json.loads(line[len("data: "):])
        if data is not None:
            events.append((name, data))
    return events


def _start(client, command, name="job"):
    response = client.post("/api/run", json={"name": name, "command": command})
    assert response.status_code == 200
    return response.json()["id"]


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"ok": True}


def test_scripts_view_before_init(client):
    body = client.get("/api/scripts").json()

    assert body["initialized"] is False
    assert body["overridesPresent"] is False
    assert body["hiddenScripts"] == []
    assert body["customScripts"] == []
    assert body["columns"] == [{"id": "custom", "name": "custom scripts"}]
    assert body["packageScripts"]["dev"] == "vite"
    assert body["packageMeta"] == {"name": "demo-app", "version": "1.2.3"}


def test_init_twice_keeps_existing_config(client, project_dir):
    assert client.post("/api/init").json() == {"initialized": True}
    client.post("/api/custom-scripts", json={"name": "keep", "command": ["true"]})
    before = (project_dir / "jrunner-conf.json").read_text(encoding="utf-8")

    assert client.post("/api/init").json() == {"initialized": True}
    assert (project_dir / "jrunner-conf.json").read_text(encoding="utf-8") == before
    assert client.get("/api/scripts").json()["initialized"] is True


def test_custom_script_lifecycle(client):
    created = client.post(
        "/api/custom-scripts",
        json={"name": "release", "command": ["npm test", "npm publish"], "description": "ship", "color": "green"},
    )
    assert created.status_code == 200
    [script] = created.json()["customScripts"]
    assert script["columnId"] == "custom"
    assert script["command"] == ["npm test", "npm publish"]

    duplicate = client.post("/api/custom-scripts", json={"name": "release", "command": ["true"]})
    assert duplicate.status_code == 400
    assert "already exists" in duplicate.json()["detail"]

    empty = client.post("/api/custom-scripts", json={"name": "nothing", "command": []})
    assert empty.status_code == 400

    missing = client.put("/api/custom-scripts", json={"originalName": "ghost", "name": "x", "command": ["true"]})
    assert missing.status_code == 404

    renamed = client.put(
        "/api/custom-scripts",
        json={"originalName": "release", "name": "publish", "command": ["npm publish"]},
    )
    assert renamed.status_code == 200
    assert [s["name"] for s in renamed.json()["customScripts"]] == ["publish"]

    deleted = client.request("DELETE", "/api/custom-scripts", json={"name": "publish"})
    assert deleted.status_code == 200
    assert deleted.json()["customScripts"] == []

    again = client.request("DELETE", "/api/custom-scripts", json={"name": "publish"})
    assert again.status_code == 404


def test_arrange_custom_scripts(client):
    client.post("/api/columns", json={"name": "Later"})
    client.post("/api/custom-scripts", json={"name": "a", "command": ["true"]})
    client.post("/api/custom-scripts", json={"name": "b", "command": ["true"]})

    response = client.post(
        "/api/custom-scripts/arrange",
        json={"order": ["b", "a"], "columnIdByName": {"a": "later"}},
    )

    assert [(s["name"], s["columnId"]) for s in response.json()["customScripts"]] == [
        ("b", "custom"),
        ("a", "later"),
    ]


def test_arrange_with_unknown_column_falls_back_to_default(client):
    client.post("/api/columns", json={"name": "Later"})
    client.post("/api/custom-scripts", json={"name": "a", "command": ["true"], "columnId": "later"})

    response = client.post(
        "/api/custom-scripts/arrange",
        json={"order": ["a"], "columnIdByName": {"a": "gone"}},
    )

    assert response.json()["customScripts"][0]["columnId"] == "custom"


def test_update_can_clear_color(client):
    client.post("/api/custom-scripts", json={"name": "lint", "command": ["eslint ."], "color": "red"})

    response = client.put(
        "/api/custom-scripts",
        json={"originalName": "lint", "name": "lint", "command": ["eslint ."], "color": None},
    )

    assert response.status_code == 200
    assert response.json()["customScripts"][0].get("color") is None
    assert client.get("/api/scripts").json()["customScripts"][0].get("color") is None


def test_package_script_rename(client, project_dir):
    response = client.post(
        "/api/package-scripts",
        json={"originalName": "build", "name": "build2", "command": ["tsc"]},
    )

    assert response.status_code == 200
    scripts = response.json()["packageScripts"]
    assert "build" not in scripts
    assert scripts["build2"] == "tsc"
    assert read_json(project_dir / "package.json")["scripts"]["build2"] == "tsc"


def test_package_script_requires_command(client):
    response = client.post("/api/package-scripts", json={"name": "noop", "command": ["  "]})

    assert response.status_code == 400


def test_delete_script_requires_a_source(client):
    response = client.post(
        "/api/delete-script",
        json={"name": "dev", "removeFromPackage": False, "removeFromCustom": False},
    )
    assert response.status_code == 400

    response = client.post("/api/delete-script", json={"name": "dev", "removeFromPackage": True})
    assert response.status_code == 200
    assert "dev" not in response.json()["packageScripts"]


def test_hide_creates_override_file_and_ignore_entry(client, project_dir):
    response = client.post("/api/overrides/hide", json={"name": "test", "hidden": True})

    assert response.status_code == 200
    assert response.json()["hiddenScripts"] == ["test"]
    assert (project_dir / ".jrunner-conf-overrides.json").is_file()
    assert ".jrunner-conf-overrides.json" in (project_dir / ".gitignore").read_text(encoding="utf-8")
    assert client.get("/api/scripts").json()["overridesPresent"] is True


def test_column_lifecycle(client):
    created = client.post("/api/columns", json={"name": "Deploy Tasks"})
    assert created.status_code == 200
    assert [c["id"] for c in created.json()["columns"]] == ["custom", "deploy-tasks"]

    client.post("/api/custom-scripts", json={"name": "ship", "command": ["true"], "columnId": "deploy-tasks"})

    renamed = client.put("/api/columns/deploy-tasks", json={"name": "Deploy"})
    assert renamed.json()["columns"][-1] == {"id": "deploy-tasks", "name": "Deploy"}
    assert client.put("/api/columns/ghost", json={"name": "Boo"}).status_code == 404

    reordered = client.post("/api/columns/reorder", json={"order": ["deploy-tasks", "custom"]})
    assert [c["id"] for c in reordered.json()["columns"]] == ["deploy-tasks", "custom"]

    deleted = client.delete("/api/columns/deploy-tasks")
    assert deleted.status_code == 200
    assert [c["id"] for c in deleted.json()["columns"]] == ["custom"]
    assert deleted.json()["customScripts"][0]["columnId"] == "custom"
    assert client.delete("/api/columns/deploy-tasks").status_code == 404


def test_missing_manifest_is_a_server_error(client, project_dir):
    (project_dir / "package.json").unlink()

    response = client.get("/api/scripts")

    assert response.status_code == 500
    assert "package.json" in response.json()["detail"]


def test_run_requires_a_command(client):
    assert client.post("/api/run", json={"name": "x", "command": ""}).status_code == 400
    assert client.post("/api/run", json={"name": "x"}).status_code == 422


def test_unknown_run_is_not_found(client):
    assert client.get("/api/runs/nope/stream").status_code == 404
    assert client.post("/api/runs/nope/stop").status_code == 404
    assert client.get("/api/runs/nope").status_code == 404


@posix_only
def test_run_and_stream_output(client):
    run_id = _start(client, ["echo hello", "echo world"], name="greet")

    events = parse_sse(client.get(f"/api/runs/{run_id}/stream").text)

    assert events[-1] == ("end", {"code": 0})
    output = "".join(payload["data"] for name, payload in events if name == "message")
    assert output == "hello\nworld\n"
    assert {payload["type"] for name, payload in events if name == "message"} == {"stdout"}

    detail = client.get(f"/api/runs/{run_id}").json()
    assert detail["status"] == "completed"
    assert detail["code"] == 0
    assert detail["command"] == "echo hello && echo world"
    assert "".join(entry["data"] for entry in detail["logs"]) == "hello\nworld\n"

    listed = client.get("/api/runs").json()["runs"]
    assert [run["id"] for run in listed] == [run_id]

    assert client.post(f"/api/runs/{run_id}/stop").status_code == 404


@posix_only
def test_replayed_stream_matches_live_stream(client):
    run_id = _start(client, "echo out; echo err 1>&2; exit 2")

    first = parse_sse(client.get(f"/api/runs/{run_id}/stream").text)
    second = parse_sse(client.get(f"/api/runs/{run_id}/stream").text)

    assert first == second
    assert first[-1] == ("end", {"code": 2})


@posix_only
def test_stop_running_script(client):
    run_id = _start(client, "sleep 30", name="sleepy")

    assert client.post(f"/api/runs/{run_id}/stop").json() == {"ok": True}

    events = parse_sse(client.get(f"/api/runs/{run_id}/stream").text)
    assert events[-1] == ("end", {"code": None})
    assert client.get(f"/api/runs/{run_id}").json()["status"] == "terminated"


def test_stream_attaches_listener_only_once_iterated():
    async def scenario():
        record = RunRecord(id="r1", name="job", command="true")
        stream = _event_stream(record, heartbeat=1.0)
        before = record.listener_count
        task = asyncio.ensure_future(stream.__anext__())
        await asyncio.sleep(0)
        during = record.listener_count
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        await stream.aclose()
        return before, during, record.listener_count

    assert asyncio.run(scenario()) == (0, 1, 0)
