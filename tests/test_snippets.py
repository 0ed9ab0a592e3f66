"""Tests for the command line snippets."""
import io

import pytest

from influx_snippets import snippets


@pytest.fixture
def gateway(fake_gateway, monkeypatch):
    monkeypatch.setattr(snippets, "InfluxGateway", lambda bucket=None: fake_gateway)
    return fake_gateway


def test_write_data_writes_sequential_values(fake_gateway, monkeypatch):
    sleeps = []
    monkeypatch.setattr(snippets.time, "sleep", sleeps.append)

    snippets.write_data(fake_gateway, count=5, interval=1.0)

    lines = [call[0][0].to_line_protocol() for call in fake_gateway.write_point.call_args_list]
    assert [line.split(" ")[1] for line in lines] == [f"field1={i}i" for i in range(5)]
    assert all(line.startswith("measurement1,tagname1=tagvalue1 ") for line in lines)
    assert sleeps == [1.0] * 4


def test_run_query_prints_records(fake_gateway, sample_tables):
    fake_gateway.query.return_value = sample_tables
    out = io.StringIO()

    snippets.run_query(fake_gateway, minutes=10, aggregate="mean", out=out)

    flux = fake_gateway.query.call_args[0][0]
    assert 'from(bucket: "test-bucket")' in flux
    assert flux.endswith("|> mean()")
    assert len(out.getvalue().splitlines()) == 3


def test_main_ping(gateway):
    assert snippets.main(["ping"]) == 0
    gateway.connect.assert_called_once()
    gateway.close.assert_called_once()


def test_main_query(gateway, capsys):
    assert snippets.main(["query", "--minutes", "5"]) == 0
    assert "range(start: -5m)" in gateway.query.call_args[0][0]


def test_main_reports_failure(gateway):
    gateway.query.side_effect = RuntimeError("unauthorized")

    assert snippets.main(["aggregate"]) == 1
    gateway.close.assert_called_once()


def test_main_requires_command():
    with pytest.raises(SystemExit):
        snippets.main([])
