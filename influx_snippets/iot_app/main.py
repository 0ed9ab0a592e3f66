#!/usr/bin/env python3
"""
IoT InfluxDB application

A local login system that stores each account's InfluxDB tokens, plus pages to
write random data points and graph recent data. Only one login is active at a
time; this is for demonstration purposes.
"""
import logging
import random
from datetime import datetime, timezone

from fastapi import FastAPI, Form, HTTPException, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse
from influxdb_client import Point

from .. import config
from ..database import InfluxGateway
from ..flux import RECENT_DATA
from ..logging_config import setup_logging
from ..metrics import LOGIN_ATTEMPTS
from ..models import HealthStatus
from ..results import graph_series
from ..routes.system import health_status, instrument
from .logins import LoginError, LoginStore, RegistrationError
from .pages import INDEX_PAGE, LOGIN_PAGE, SIGNUP_PAGE, profile_page
from .session import ActiveSession

logger = logging.getLogger(__name__)

APP_NAME = "iot-app"

# Random field1 values are drawn from [-NUMBER_RANGE/2, NUMBER_RANGE/2)
NUMBER_RANGE = 128

session = ActiveSession()

# Populated at startup
app_state = {
    "logins": None,
    "probe": None,
}

app = FastAPI(
    title="InfluxDB IoT Application",
    description="Local logins holding InfluxDB tokens, random writes and graphing",
    version=config.API_VERSION,
)
instrument(app)


@app.on_event("startup")
async def startup_event():
    setup_logging(config.LOG_LEVEL, config.LOG_FORMAT)

    # Make sure the host URL has a scheme, defaulting to https
    session.host = config.normalize_host_url(session.host)
    app_state["logins"] = LoginStore(config.LOGIN_DATABASE)
    app_state["probe"] = InfluxGateway(url=session.host, token="", org=session.org_id, bucket=session.bucket)
    logger.info(f"IoT app using InfluxDB at {session.host}")


@app.on_event("shutdown")
async def shutdown_event():
    session.logout()
    if app_state["probe"] is not None:
        app_state["probe"].close()


def query_data(client: InfluxGateway):
    """All data in the bucket over the past 100 hours"""
    return client.query(RECENT_DATA, {"bucket_name": client.bucket})


def write_data(client: InfluxGateway):
    """Write one random data point"""
    point = (
        Point("measurement1")
        .tag("tagname1", "tagvalue1")
        .field("field1", random.random() * NUMBER_RANGE - NUMBER_RANGE * 0.5)
        .time(datetime.now(timezone.utc))
    )
    client.write_point(point)


@app.get("/", response_class=HTMLResponse, tags=["Pages"])
async def index():
    return INDEX_PAGE


@app.get("/health", response_model=HealthStatus, summary="Health Check", tags=["System Information"])
def health_check():
    return health_status(session.read_client or app_state["probe"], APP_NAME)


@app.get("/login", response_class=HTMLResponse, tags=["Pages"])
async def login_form():
    return LOGIN_PAGE


@app.post("/login", tags=["Pages"])
def login(email: str = Form(""), password: str = Form("")):
    logger.info(f"Login post, retrieved credentials: email:{email}")
    try:
        user = app_state["logins"].check_credentials(email, password)
    except LoginError as e:
        logger.info(f"Login failed: {e}")
        LOGIN_ATTEMPTS.labels(outcome="failure").inc()
        return PlainTextResponse("Invalid login", status_code=403)

    session.login(user)
    LOGIN_ATTEMPTS.labels(outcome="success").inc()
    logger.info("Login success")
    return RedirectResponse(url="/profile", status_code=303)


@app.get("/signup", response_class=HTMLResponse, tags=["Pages"])
async def signup_form():
    return SIGNUP_PAGE


@app.post("/signup", tags=["Pages"])
def signup(
    email: str = Form(""),
    name: str = Form(""),
    password: str = Form(""),
    readToken: str = Form(""),
    writeToken: str = Form(""),
):
    logger.info(f"Registering new user: email={email}, name={name}")
    try:
        app_state["logins"].register(email, name, password, readToken, writeToken)
    except RegistrationError as e:
        logger.error(f"Failed to register user: {e}")
        return PlainTextResponse("Failed to register user.", status_code=400)
    return RedirectResponse(url="/login", status_code=303)


@app.get("/profile", response_class=HTMLResponse, tags=["Pages"])
async def profile():
    if not session.valid:
        logger.info("Not logged in, redirecting to login page.")
        return RedirectResponse(url="/login", status_code=303)
    return profile_page(session.user.name)


def _require_login():
    if not session.valid:
        raise HTTPException(status_code=401, detail="Not logged in")


@app.api_route("/graph_query_data", methods=["GET", "POST"], tags=["Data"])
async def graph_query_data():
    """First table of the recent data as a Plotly.js trace"""
    _require_login()
    try:
        tables = await run_in_threadpool(query_data, session.read_client)
    except Exception as e:
        logger.error(f"Query failed: {e}")
        return PlainTextResponse(str(e), status_code=500)
    return graph_series(tables)


@app.api_route("/graph_write_data", methods=["GET", "POST"], tags=["Data"])
async def graph_write_data():
    _require_login()
    try:
        await run_in_threadpool(write_data, session.write_client)
    except Exception as e:
        logger.error(f"Write failed: {e}")
        return PlainTextResponse(str(e), status_code=500)
    return Response(status_code=200)


def main():
    import uvicorn
    print(f"Starting server at http://localhost:{config.HTTP_PORT}")
    uvicorn.run(app, host=config.HTTP_HOST, port=config.HTTP_PORT)


if __name__ == "__main__":
    main()
