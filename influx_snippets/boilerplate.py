#!/usr/bin/env python3
"""
Boilerplate InfluxDB application

Ingests data for application users, downsamples it with a per-user task and
serves the downsampled values back as JSON.

This application illustrates the use of influxdb-client and the facilities of
the database; it does not authenticate requests. Production code should
authenticate the caller and authorize access to the requested user_id.
"""
import logging

from fastapi import FastAPI, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse

from . import config
from .database import InfluxGateway, build_user_point
from .flux import DOWNSAMPLED_LATEST, downsample_task
from .logging_config import setup_logging
from .models import IngestRequest, QueryResponse, TaskCreated, UserRequest, HealthStatus
from .results import tables_to_response
from .routes.system import health_status, influx_http_error, instrument

logger = logging.getLogger(__name__)

APP_NAME = "boilerplate"

# Shared client; "user" in the handlers below is a user of this application,
# not an InfluxDB user.
influx = InfluxGateway()

# Populated at startup; the task API needs the organization ID.
app_state = {
    "organization": None,
}

app = FastAPI(
    title="InfluxDB Boilerplate Application",
    description="Ingest, downsample and query per-user data with InfluxDB",
    version=config.API_VERSION,
)
instrument(app)


@app.on_event("startup")
async def startup_event():
    """Look up the organization; the app cannot create tasks without it"""
    setup_logging(config.LOG_LEVEL, config.LOG_FORMAT)
    organization = await run_in_threadpool(influx.lookup_organization, config.INFLUXDB_ORGANIZATION)
    app_state["organization"] = organization
    logger.info(f"Using organization {organization.name!r} ({organization.id})")


@app.on_event("shutdown")
async def shutdown_event():
    influx.close()


@app.get("/", response_class=HTMLResponse, summary="Welcome", tags=["System Information"])
async def welcome():
    return "<p>Welcome to your first InfluxDB Application</p>"


@app.get("/health", response_model=HealthStatus, summary="Health Check", tags=["System Information"])
def health_check():
    return health_status(influx, APP_NAME)


@app.post("/ingest", summary="Ingest user data", tags=["Data"])
def ingest(request: IngestRequest):
    """
    Write one point for a user.

    POST `{"user_id":"user1", "measurement":"measurement1", "field1":1.0}` to test.

    A bucket is similar to a database, a measurement to a table, and a field and
    its value to a column and value. The user_id becomes a tag so queries can
    find each user's data. View the written data with the Data Explorer in the
    InfluxDB UI.
    """
    point = build_user_point(request.measurement, request.user_id, request.field1)
    try:
        influx.write_point(point)
    except Exception as e:
        raise influx_http_error(e)
    return Response(status_code=200)


@app.post("/query", response_model=QueryResponse, response_model_exclude_none=True,
          summary="Query downsampled user data", tags=["Data"])
def query(request: UserRequest):
    """
    Latest downsampled value of each field for a user, written by the task
    created through /setup.

    POST `{"user_id":"user1"}` to test.
    """
    params = {
        "bucket_name": influx.bucket,
        "user_id": request.user_id,
    }
    try:
        tables = influx.query(DOWNSAMPLED_LATEST, params)
    except Exception as e:
        raise influx_http_error(e)
    return tables_to_response(tables)


@app.post("/setup", response_model=TaskCreated, status_code=201, summary="Set up a user", tags=["Tasks"])
def setup(request: UserRequest):
    """
    Create a task owned by the user that downsamples their data every five
    minutes into the min, max and mean of each field.

    POST `{"user_id":"user1"}` to test.
    """
    flux = downsample_task(influx.bucket, request.user_id)
    name = f"{request.user_id}_task"
    try:
        task = influx.create_task_every(name, flux, "5m", app_state["organization"])
    except Exception as e:
        raise influx_http_error(e)
    return TaskCreated(task_id=task.id)


def main():
    import uvicorn
    uvicorn.run(app, host=config.HTTP_HOST, port=config.HTTP_PORT)


if __name__ == "__main__":
    main()
