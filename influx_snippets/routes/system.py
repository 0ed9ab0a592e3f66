"""
System routes
Prometheus metrics, health status and the pieces every sample app shares
"""
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, FastAPI, HTTPException, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from ..config import API_VERSION
from ..database import influx_status_code
from ..metrics import REQUEST_COUNT, REQUEST_DURATION
from ..models import HealthStatus

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/metrics", response_class=PlainTextResponse, summary="Prometheus Metrics", tags=["Metrics"])
async def metrics():
    """
    Prometheus metrics endpoint in text exposition format.

    - `api_requests_total{method, endpoint}`: Request counter
    - `api_request_duration_seconds`: Request duration histogram
    - `influxdb_points_written_total{measurement}`: Points written
    - `influxdb_queries_total`: Flux queries executed
    - `influxdb_tasks_created_total`: Tasks created
    - `influxdb_errors_total{status}`: Failed InfluxDB calls
    - `login_attempts_total{outcome}`: IoT app logins
    """
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


def health_status(gateway, app_name: str) -> HealthStatus:
    """Healthy when InfluxDB answers ping"""
    try:
        influxdb_connected = bool(gateway.ping())
    except Exception as e:
        logger.warning(f"InfluxDB ping failed: {e}")
        influxdb_connected = False

    return HealthStatus(
        status="healthy" if influxdb_connected else "unhealthy",
        timestamp=datetime.now(timezone.utc),
        version=API_VERSION,
        app=app_name,
        influxdb_connected=influxdb_connected
    )


def influx_http_error(exc: Exception) -> HTTPException:
    """
    Pass the InfluxDB API status through, e.g. 404 when the bucket does not
    exist, and default to 500 for everything else.
    """
    return HTTPException(status_code=influx_status_code(exc), detail=str(exc))


async def bad_request_handler(request, exc):
    """Undecodable or incomplete request bodies are a plain 400"""
    logger.info(f"Rejected request to {request.url.path}: {exc.errors()}")
    return Response(status_code=400)


def instrument(app: FastAPI):
    """Attach the metrics middleware, the 400 handler and the /metrics route"""

    @app.middleware("http")
    async def metrics_middleware(request, call_next):
        with REQUEST_DURATION.time():
            REQUEST_COUNT.labels(method=request.method, endpoint=request.url.path).inc()
            response = await call_next(request)
            return response

    app.add_exception_handler(RequestValidationError, bad_request_handler)
    app.include_router(router)
