"""Tests for the sample application."""
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from influxdb_client.rest import ApiException
from prometheus_client import REGISTRY

from influx_snippets import sample_app
from influx_snippets.websocket import ActivityFeed


def task_response(status_code, payload=None, text=""):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    response.text = text
    response.headers = {"Content-Type": "application/json"}
    return response


@pytest.fixture
def tasks_client():
    client = MagicMock()
    client.create_task.return_value = task_response(201, {"id": "0a1b2c"})
    return client


@pytest.fixture
def client(fake_gateway, tasks_client, monkeypatch):
    monkeypatch.setattr(sample_app, "influx", fake_gateway)
    monkeypatch.setattr(sample_app, "tasks_client", tasks_client)
    monkeypatch.setattr(sample_app, "activity", ActivityFeed())
    return TestClient(sample_app.app)


def test_welcome(client):
    assert "Welcome" in client.get("/").text


def test_ingest(client, fake_gateway):
    response = client.post("/ingest", json={"user_id": "user1", "measurement": "measurement1", "field1": 0.0})

    assert response.status_code == 200
    fake_gateway.write_point.assert_called_once()
    assert "ingest measurement1 user_id=user1" in sample_app.activity.history[-1]


def test_ingest_bad_body(client):
    assert client.post("/ingest", json={"user_id": "user1"}).status_code == 400


def test_ingest_failure_status(client, fake_gateway):
    fake_gateway.write_point.side_effect = ApiException(status=413)

    assert client.post("/ingest", json={"user_id": "u", "measurement": "m", "field1": 1}).status_code == 413
    assert "ingest failed" in sample_app.activity.history[-1]


def test_query_includes_metadata(client, fake_gateway, sample_tables):
    fake_gateway.query.return_value = sample_tables

    response = client.post("/query", json={"user_id": "user1"})

    assert response.status_code == 200
    tables = response.json()["tables"]
    assert len(tables) == 2
    assert tables[0]["metadata"][0]["label"] == "_time"
    assert len(tables[0]["records"]) == 2
    flux, params = fake_gateway.query.call_args[0]
    assert "range(start: -1h)" in flux
    assert params == {"bucket_name": "raw_data_bucket", "user_id": "user1"}


def test_query_error(client, fake_gateway):
    fake_gateway.query.side_effect = RuntimeError("boom")

    assert client.post("/query", json={"user_id": "user1"}).status_code == 500


def test_tasks_creates_task_and_processed_bucket(client, fake_gateway, tasks_client):
    response = client.post("/tasks", json={"user_id": "user1"})

    assert response.status_code == 201
    assert response.json() == {"task_id": "0a1b2c"}
    fake_gateway.find_or_create_bucket.assert_called_once_with("processed_data_bucket")
    flux = tasks_client.create_task.call_args[0][0]
    assert flux.startswith('option task = {name: "user1_task", every: 1m}')
    assert 'to(bucket: "processed_data_bucket")' in flux


def test_tasks_passes_upstream_error_through(client, tasks_client):
    tasks_client.create_task.return_value = task_response(
        400, text='{"code":"invalid","message":"compilation failed"}'
    )

    response = client.post("/tasks", json={"user_id": "user1"})

    assert response.status_code == 400
    assert response.json()["code"] == "invalid"


def test_tasks_created_without_task_id(client, tasks_client):
    tasks_client.create_task.return_value = task_response(201, {})
    before = REGISTRY.get_sample_value("influxdb_errors_total", {"status": "500"}) or 0

    response = client.post("/tasks", json={"user_id": "user1"})

    assert response.status_code == 500
    assert "task id" in response.json()["detail"]
    assert "task for user1 failed" in sample_app.activity.history[-1]
    assert REGISTRY.get_sample_value("influxdb_errors_total", {"status": "500"}) == before + 1


def test_tasks_created_with_unparseable_body(client, tasks_client):
    created = task_response(201, text="not json")
    created.json.side_effect = ValueError("Expecting value")
    tasks_client.create_task.return_value = created

    assert client.post("/tasks", json={"user_id": "user1"}).status_code == 500


def test_tasks_bucket_failure(client, fake_gateway, tasks_client):
    fake_gateway.find_or_create_bucket.side_effect = ApiException(status=403)

    assert client.post("/tasks", json={"user_id": "user1"}).status_code == 403
    tasks_client.create_task.assert_not_called()


def test_monitor_page(client):
    response = client.get("/monitor")

    assert response.status_code == 200
    assert "/ws/activity" in response.text


def test_activity_history_replayed_to_new_monitor(client):
    client.post("/ingest", json={"user_id": "user7", "measurement": "m", "field1": 3})

    with client.websocket_connect("/ws/activity") as websocket:
        assert "Connected - showing last 1 events" in websocket.receive_text()
        assert "user_id=user7" in websocket.receive_text()


def test_startup_ensures_raw_bucket(fake_gateway, monkeypatch):
    monkeypatch.setattr(sample_app, "influx", fake_gateway)

    with TestClient(sample_app.app):
        fake_gateway.find_or_create_bucket.assert_called_once_with("raw_data_bucket")
