"""
Prometheus metrics module
All metric definitions for monitoring and observability
"""
from prometheus_client import Counter, Histogram


# API Request Metrics
REQUEST_COUNT = Counter(
    'api_requests_total',
    'Total API requests',
    ['method', 'endpoint']
)

REQUEST_DURATION = Histogram(
    'api_request_duration_seconds',
    'API request duration'
)

# InfluxDB Metrics
POINTS_WRITTEN = Counter(
    'influxdb_points_written_total',
    'Points written to InfluxDB',
    ['measurement']
)

QUERIES_EXECUTED = Counter(
    'influxdb_queries_total',
    'Flux queries executed against InfluxDB'
)

TASKS_CREATED = Counter(
    'influxdb_tasks_created_total',
    'InfluxDB tasks created'
)

INFLUX_ERRORS = Counter(
    'influxdb_errors_total',
    'Failed InfluxDB calls by returned HTTP status',
    ['status']
)

# IoT app login metrics
LOGIN_ATTEMPTS = Counter(
    'login_attempts_total',
    'Local login attempts',
    ['outcome']
)
