"""
Active login session

The IoT app allows a single login at a time. Logging in replaces the read and
write clients with ones built from the account's tokens.
"""
import logging
from typing import Optional

from .. import config
from ..database import InfluxGateway
from .logins import User

logger = logging.getLogger(__name__)


class ActiveSession:
    """The one logged-in user and the InfluxDB clients built from their tokens"""

    def __init__(self, host: str = None, org_id: str = None, bucket: str = None):
        self.host = host or config.INFLUXDB_HOST
        self.org_id = config.INFLUXDB_ORGANIZATION_ID if org_id is None else org_id
        self.bucket = config.INFLUXDB_BUCKET if bucket is None else bucket
        self.user: Optional[User] = None
        self.read_client: Optional[InfluxGateway] = None
        self.write_client: Optional[InfluxGateway] = None

    @property
    def valid(self) -> bool:
        return self.user is not None

    def login(self, user: User):
        self.logout()
        self.user = user
        self.read_client = InfluxGateway(url=self.host, token=user.read_token, org=self.org_id, bucket=self.bucket)
        self.write_client = InfluxGateway(url=self.host, token=user.write_token, org=self.org_id, bucket=self.bucket)
        logger.info(f"Logged in as {user.email}")

    def logout(self):
        for client in (self.read_client, self.write_client):
            if client is not None:
                client.close()
        self.user = None
        self.read_client = None
        self.write_client = None
