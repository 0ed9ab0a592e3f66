"""PyTest configuration and test fixtures."""
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from influxdb_client.client.flux_table import FluxColumn, FluxRecord, FluxTable

from influx_snippets.database import InfluxGateway


def make_table(rows, columns=("_time", "_value", "_field", "_measurement", "user_id")):
    """Build a parsed Flux table holding one record per row dict."""
    table = FluxTable()
    for index, label in enumerate(columns):
        table.columns.append(
            FluxColumn(index=index, label=label, data_type="string",
                       group=label in ("_field", "_measurement", "user_id"))
        )
    for row in rows:
        table.records.append(FluxRecord(table=0, values=dict(row)))
    return table


@pytest.fixture
def sample_tables():
    """Two tables the way the query API returns them."""
    when = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    return [
        make_table([
            {"_time": when, "_value": 1.5, "_field": "field1_max", "user_id": "user1"},
            {"_time": when, "_value": 2.5, "_field": "field1_max", "user_id": "user1"},
        ]),
        make_table([
            {"_time": when, "_value": 0.5, "_field": "field1_min", "user_id": "user1"},
        ]),
    ]


@pytest.fixture
def fake_gateway():
    """An InfluxGateway double that records calls instead of talking to InfluxDB."""
    gateway = MagicMock(spec=InfluxGateway)
    gateway.bucket = "test-bucket"
    gateway.org = "test-org"
    gateway.ping.return_value = True
    gateway.query.return_value = []
    gateway.create_task_every.return_value = SimpleNamespace(id="task-123")
    return gateway
