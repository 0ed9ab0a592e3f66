"""
Flux queries and task scripts used by the samples.

Queries that take request input are parameterized (``params.<name>``) and
executed with ``InfluxGateway.query(flux, params)``. Task scripts are stored by
InfluxDB and cannot be parameterized, so user input is embedded as an escaped
Flux string literal instead.
"""
from typing import Optional

# All data for one user in the last hour.
USER_LAST_HOUR = '''from(bucket: params.bucket_name)
  |> range(start: -1h)
  |> filter(fn: (r) => r.user_id == params.user_id)'''

# Latest downsampled value of each field for one user.
DOWNSAMPLED_LATEST = '''from(bucket: params.bucket_name)
  |> range(start: -1h)
  |> filter(fn: (r) => r._measurement == "downsampled")
  |> filter(fn: (r) => r.user_id == params.user_id)
  |> group(columns: ["_field"])
  |> last()'''

# Everything in the bucket over the last 100 hours.
RECENT_DATA = '''from(bucket: params.bucket_name)
  |> range(start: -100h)'''

DOWNSAMPLED_MEASUREMENT = "downsampled"


def flux_string(value: str) -> str:
    """Quote a value as a Flux string literal"""
    escaped = (
        str(value)
        .replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
        .replace("${", "\\${")
    )
    return f'"{escaped}"'


def downsample_task(bucket: str, user_id: str) -> str:
    """
    Task script that downsamples a user's data.

    Every run computes the max, min and mean of each field over the last five
    minutes and writes them back to the same bucket as ``<field>_max``,
    ``<field>_min`` and ``<field>_mean`` in the ``downsampled`` measurement.
    Rows already in that measurement are skipped.
    """
    bucket_literal = flux_string(bucket)
    return f'''
data = from(bucket: {bucket_literal})
  |> range(start: -5m)
  |> filter(fn: (r) => r.user_id == {flux_string(user_id)})
  |> filter(fn: (r) => r._measurement != "{DOWNSAMPLED_MEASUREMENT}")
  |> drop(columns: ["_start", "_time", "_stop"])

max_data = data
  |> max()
  |> map(fn: (r) => ({{ r with _field: r._field + "_max"}}))

min_data = data
  |> min()
  |> map(fn: (r) => ({{ r with _field: r._field + "_min"}}))

mean_data = data
  |> mean()
  |> map(fn: (r) => ({{ r with _field: r._field + "_mean"}}))

union(tables: [max_data, min_data, mean_data])
  |> map(fn: (r) => ({{ r with _time: now(), _measurement: "{DOWNSAMPLED_MEASUREMENT}" }}))
  |> to(bucket: {bucket_literal})'''


def copy_zero_values_task(user_id: str, source_bucket: str, target_bucket: str) -> str:
    """
    Task script that runs every minute and copies a user's zero values into
    another bucket.

    Shows downsampling (precomputing data for low latency reads) and the basis
    of alerting: instead of ``to()`` the script could ``http.post()`` back to
    the application.
    """
    return f'''option task = {{name: {flux_string(f"{user_id}_task")}, every: 1m}}

from(bucket: {flux_string(source_bucket)})
  |> range(start: -1m)
  |> filter(fn: (r) => r.user_id == {flux_string(user_id)})
  |> filter(fn: (r) => r._value == 0.0)
  |> to(bucket: {flux_string(target_bucket)})'''


def recent_measurement(bucket: str, measurement: str = "measurement1",
                       minutes: int = 10, aggregate: Optional[str] = None) -> str:
    """Query one measurement over the last few minutes, optionally aggregated (e.g. "mean")"""
    query = (
        f'from(bucket: {flux_string(bucket)})\n'
        f'  |> range(start: -{int(minutes)}m)\n'
        f'  |> filter(fn: (r) => r._measurement == {flux_string(measurement)})'
    )
    if aggregate:
        query += f'\n  |> {aggregate}()'
    return query
