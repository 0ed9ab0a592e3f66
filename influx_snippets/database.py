"""
Database module
InfluxDB client initialization plus the write, query, bucket and task calls
used by the sample applications
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from influxdb_client import InfluxDBClient, Point
from influxdb_client.client.write_api import SYNCHRONOUS
from influxdb_client.rest import ApiException
from tenacity import retry, stop_after_attempt, wait_exponential

from . import config
from .metrics import INFLUX_ERRORS, POINTS_WRITTEN, QUERIES_EXECUTED, TASKS_CREATED

logger = logging.getLogger(__name__)


def influx_status_code(exc: Exception) -> int:
    """HTTP status reported by the InfluxDB API, or 500 for any other failure"""
    if isinstance(exc, ApiException) and exc.status:
        return int(exc.status)
    return 500


def build_user_point(measurement: str, user_id: str, field1: float,
                     time: Optional[datetime] = None) -> Point:
    """
    Build the point written by the /ingest handlers.

    A point needs at least a measurement, a field and a value. The user_id is
    stored as a tag so queries can find the data of each application user.
    """
    return (
        Point(measurement)
        .tag("user_id", user_id)
        .field("field1", float(field1))
        .time(time or datetime.now(timezone.utc))
    )


class InfluxGateway:
    """Owns an InfluxDB client and the blocking write and query APIs"""

    def __init__(self, url: str = None, token: str = None, org: str = None,
                 bucket: str = None, timeout: int = None):
        self.url = url or config.INFLUXDB_HOST
        self.token = config.INFLUXDB_TOKEN if token is None else token
        self.org = config.INFLUXDB_ORGANIZATION if org is None else org
        self.bucket = config.INFLUXDB_BUCKET if bucket is None else bucket
        timeout = config.INFLUXDB_TIMEOUT if timeout is None else timeout

        self.client = InfluxDBClient(
            url=self.url,
            token=self.token,
            org=self.org,
            timeout=timeout * 1000  # milliseconds
        )
        self.write_api = self.client.write_api(write_options=SYNCHRONOUS)
        self.query_api = self.client.query_api()

    def ping(self) -> bool:
        return self.client.ping()

    @retry(stop=stop_after_attempt(3), wait=wait_exponential(multiplier=1, min=4, max=10), reraise=True)
    def connect(self):
        """Check that InfluxDB is reachable, retrying with backoff"""
        logger.info(f"Connecting to InfluxDB at {self.url}...")
        if not self.ping():
            raise ConnectionError(f"InfluxDB at {self.url} did not answer ping")
        logger.info("Connected to InfluxDB successfully")

    def write_point(self, point: Point, bucket: str = None):
        """Write a single point and wait for InfluxDB to accept it"""
        try:
            self.write_api.write(bucket=bucket or self.bucket, org=self.org, record=point)
        except Exception as e:
            INFLUX_ERRORS.labels(status=str(influx_status_code(e))).inc()
            logger.error(f"Error writing to InfluxDB: {e}")
            raise
        POINTS_WRITTEN.labels(measurement=point._name).inc()

    def query(self, flux: str, params: Optional[Dict[str, Any]] = None) -> List:
        """Run a (parameterized) Flux query and return the parsed tables"""
        QUERIES_EXECUTED.inc()
        try:
            return self.query_api.query(flux, org=self.org, params=params)
        except Exception as e:
            INFLUX_ERRORS.labels(status=str(influx_status_code(e))).inc()
            logger.error(f"Error querying InfluxDB: {e}")
            raise

    def find_or_create_bucket(self, name: str):
        """Return the named bucket, creating it in the organization if it does not exist"""
        buckets_api = self.client.buckets_api()
        bucket = buckets_api.find_bucket_by_name(name)
        if bucket is None:
            logger.info(f"Bucket {name!r} not found, creating it")
            bucket = buckets_api.create_bucket(bucket_name=name, org=self.org)
        return bucket

    def lookup_organization(self, name: str = None):
        """Find the organization by name; the task API needs its ID"""
        name = name or self.org
        orgs = self.client.organizations_api().find_organizations(org=name)
        for org in orgs or []:
            if org.name == name:
                return org
        raise LookupError(f"Failed to lookup organization named {name!r}")

    def create_task_every(self, name: str, flux: str, every: str, organization):
        """Create a task that runs the Flux script on a fixed interval"""
        try:
            task = self.client.tasks_api().create_task_every(name, flux, every, organization)
        except Exception as e:
            INFLUX_ERRORS.labels(status=str(influx_status_code(e))).inc()
            logger.error(f"Error creating task {name!r}: {e}")
            raise
        TASKS_CREATED.inc()
        logger.info(f"Created task {name!r} with id {task.id}")
        return task

    def close(self):
        self.client.close()
