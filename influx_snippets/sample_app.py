#!/usr/bin/env python3
"""
Sample InfluxDB application

Writes raw per-user data, serves the last hour of it as JSON, creates a task
that copies zero values into a processed bucket, and shows a live activity
monitor.

This application does not authenticate requests or authorize access to the
requested user_id; a real-world application must.
"""
import asyncio
import logging

from fastapi import FastAPI, HTTPException, Response, WebSocket, WebSocketDisconnect
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse, JSONResponse

from . import config
from .database import InfluxGateway, build_user_point
from .flux import USER_LAST_HOUR, copy_zero_values_task
from .logging_config import setup_logging
from .metrics import INFLUX_ERRORS, TASKS_CREATED
from .models import IngestRequest, QueryResponse, TaskCreated, UserRequest, HealthStatus
from .rest import TasksRestClient
from .results import tables_to_response
from .routes.system import health_status, influx_http_error, instrument
from .websocket import ActivityFeed

logger = logging.getLogger(__name__)

APP_NAME = "sample-app"

# A bucket is where data is stored; permissions can be scoped per bucket too.
RAW_DATA_BUCKET = "raw_data_bucket"
PROCESSED_DATA_BUCKET = "processed_data_bucket"

influx = InfluxGateway(bucket=RAW_DATA_BUCKET)
tasks_client = TasksRestClient()
activity = ActivityFeed()

app = FastAPI(
    title="InfluxDB Sample Application",
    description="Ingest and query raw per-user data, create tasks, monitor activity",
    version=config.API_VERSION,
)
instrument(app)


@app.on_event("startup")
async def startup_event():
    setup_logging(config.LOG_LEVEL, config.LOG_FORMAT)
    await run_in_threadpool(influx.find_or_create_bucket, RAW_DATA_BUCKET)


@app.on_event("shutdown")
async def shutdown_event():
    influx.close()


@app.get("/", response_class=HTMLResponse, summary="Welcome", tags=["System Information"])
async def welcome():
    return "<p>Welcome to your first InfluxDB Application</p>"


@app.get("/health", response_model=HealthStatus, summary="Health Check", tags=["System Information"])
async def health_check():
    return await run_in_threadpool(health_status, influx, APP_NAME)


@app.post("/ingest", summary="Ingest user data", tags=["Data"])
async def ingest(request: IngestRequest):
    """
    Write one point for a user.

    POST `{"user_id":"user1", "measurement":"measurement1", "field1":1.0}` to test.

    You can write any number of tags and fields in a single point, but only one
    measurement.
    """
    point = build_user_point(request.measurement, request.user_id, request.field1)
    try:
        await run_in_threadpool(influx.write_point, point)
    except Exception as e:
        await activity.publish(f"ingest failed for {request.user_id}: {e}")
        raise influx_http_error(e)
    await activity.publish(
        f"ingest {request.measurement} user_id={request.user_id} field1={request.field1}"
    )
    return Response(status_code=200)


@app.post("/query", response_model=QueryResponse, summary="Query user data", tags=["Data"])
async def query(request: UserRequest):
    """
    All data for the user in the last hour, with table metadata.

    POST `{"user_id":"user1"}` to test.
    """
    params = {
        "bucket_name": RAW_DATA_BUCKET,
        "user_id": request.user_id,
    }
    try:
        tables = await run_in_threadpool(influx.query, USER_LAST_HOUR, params)
    except Exception as e:
        await activity.publish(f"query failed for {request.user_id}: {e}")
        raise influx_http_error(e)
    response = tables_to_response(tables, with_metadata=True)
    await activity.publish(f"query user_id={request.user_id} tables={len(response['tables'])}")
    return response


@app.post("/tasks", response_model=TaskCreated, status_code=201, summary="Create a task", tags=["Tasks"])
async def tasks(request: UserRequest):
    """
    Create a task owned by the user that copies their zero values into
    `processed_data_bucket` every minute.

    The returned task_id is what the application stores to manage the task
    later. Upstream errors are returned with InfluxDB's body and status.

    POST `{"user_id":"user1"}` to test.
    """
    try:
        await run_in_threadpool(influx.find_or_create_bucket, PROCESSED_DATA_BUCKET)
    except Exception as e:
        raise influx_http_error(e)

    flux = copy_zero_values_task(request.user_id, RAW_DATA_BUCKET, PROCESSED_DATA_BUCKET)
    try:
        response = await run_in_threadpool(tasks_client.create_task, flux)
    except Exception as e:
        logger.error(f"Error creating task for {request.user_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    if response.status_code != 201:
        INFLUX_ERRORS.labels(status=str(response.status_code)).inc()
        await activity.publish(f"task for {request.user_id} rejected with {response.status_code}")
        return Response(
            content=response.text,
            status_code=response.status_code,
            media_type=response.headers.get("Content-Type")
        )

    try:
        task_id = response.json()["id"]
    except (ValueError, KeyError, TypeError) as e:
        INFLUX_ERRORS.labels(status="500").inc()
        logger.error(f"Task created for {request.user_id} but response had no task id: {e!r}")
        await activity.publish(f"task for {request.user_id} failed: no task id in response")
        raise HTTPException(status_code=500, detail="InfluxDB response did not include a task id")

    TASKS_CREATED.inc()
    await activity.publish(f"task {task_id} created for user_id={request.user_id}")
    return JSONResponse({"task_id": task_id}, status_code=201)


@app.websocket("/ws/activity")
async def websocket_activity(websocket: WebSocket):
    """Live stream of ingest, query and task events"""
    try:
        await activity.connect(websocket)
        # Nothing is expected from the client; this waits for it to go away.
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        activity.disconnect(websocket)
    except asyncio.CancelledError:
        activity.disconnect(websocket)
        raise


@app.get("/monitor", response_class=HTMLResponse, summary="Activity Monitor", tags=["Monitoring"])
async def monitor_page():
    """Simple page showing live activity via WebSocket"""
    return MONITOR_PAGE


MONITOR_PAGE = """
<!DOCTYPE html>
<html>
<head>
    <title>InfluxDB Sample App Monitor</title>
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <style>
        body {
            font-family: 'Courier New', monospace;
            background-color: #1e1e1e;
            color: #d4d4d4;
            margin: 0;
            padding: 20px;
        }
        h1 {
            color: #4ec9b0;
        }
        #status {
            padding: 10px;
            margin-bottom: 20px;
            border-radius: 4px;
            font-weight: bold;
        }
        #status.connected {
            background-color: #1e5128;
            color: #4ec9b0;
        }
        #status.disconnected {
            background-color: #5c1f1f;
            color: #f48771;
        }
        #events {
            background-color: #252526;
            border: 1px solid #3e3e42;
            border-radius: 4px;
            padding: 15px;
            height: 70vh;
            overflow-y: auto;
            font-size: 13px;
            line-height: 1.6;
        }
        .failed {
            color: #f48771;
        }
    </style>
</head>
<body>
    <h1>Sample App Activity</h1>
    <div id="status" class="disconnected">Disconnected</div>
    <div id="events"></div>
    <script>
        const events = document.getElementById('events');
        const status = document.getElementById('status');

        function connect() {
            const protocol = window.location.protocol === 'https:' ? 'wss:' : 'ws:';
            const ws = new WebSocket(protocol + '//' + window.location.host + '/ws/activity');

            ws.onopen = () => {
                status.textContent = 'Connected';
                status.className = 'connected';
            };
            ws.onmessage = (event) => {
                const line = document.createElement('div');
                line.textContent = event.data;
                if (event.data.includes('failed') || event.data.includes('rejected')) {
                    line.className = 'failed';
                }
                events.appendChild(line);
                events.scrollTop = events.scrollHeight;
            };
            ws.onclose = () => {
                status.textContent = 'Disconnected - reconnecting...';
                status.className = 'disconnected';
                setTimeout(connect, 3000);
            };
        }

        connect();
    </script>
</body>
</html>
"""


def main():
    import uvicorn
    uvicorn.run(app, host=config.HTTP_HOST, port=config.HTTP_PORT)


if __name__ == "__main__":
    main()
