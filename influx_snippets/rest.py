"""
InfluxDB REST API calls made with plain HTTP

In some cases the REST API is simpler to use than the client API. See
https://docs.influxdata.com/influxdb/cloud/api/#operation/PostTasks
"""
from urllib.parse import urljoin

import requests

from . import config


class TasksRestClient:
    """Creates tasks through POST /api/v2/tasks"""

    def __init__(self, host: str = None, token: str = None, org: str = None, timeout: int = None):
        self.host = host or config.INFLUXDB_HOST
        self.token = config.INFLUXDB_TOKEN if token is None else token
        self.org = config.INFLUXDB_ORGANIZATION if org is None else org
        self.timeout = config.INFLUXDB_TIMEOUT if timeout is None else timeout
        self.session = requests.Session()

    def create_task(self, flux: str) -> requests.Response:
        """Post a task script; the caller decides what to do with the response"""
        url = urljoin(self.host, "/api/v2/tasks")
        headers = {"Authorization": f"Token {self.token}"}
        data = {"flux": flux, "org": self.org}
        return self.session.post(url, headers=headers, json=data, timeout=self.timeout)
