"""
WebSocket module
Streams sample app activity (ingests, queries, task creation) to browsers
"""
from typing import List
from collections import deque
from datetime import datetime, timezone
from fastapi import WebSocket
import logging

logger = logging.getLogger(__name__)


class ActivityFeed:
    """Fans activity messages out to connected WebSockets and keeps the last few"""

    def __init__(self, history_size: int = 20):
        self.active_connections: List[WebSocket] = []
        self.history: deque = deque(maxlen=history_size)

    async def connect(self, websocket: WebSocket):
        """Accept the connection and replay recent activity"""
        await websocket.accept()
        self.active_connections.append(websocket)
        logger.info(f"Monitor client connected. Total clients: {len(self.active_connections)}")

        try:
            await websocket.send_text(
                f"{datetime.now(timezone.utc).isoformat()} - Connected - showing last {len(self.history)} events..."
            )
            for message in list(self.history):
                await websocket.send_text(message)
        except Exception as e:
            logger.error(f"Error sending history to monitor client: {e}")
            self.disconnect(websocket)

    def disconnect(self, websocket: WebSocket):
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)
            logger.info(f"Monitor client disconnected. Total clients: {len(self.active_connections)}")

    async def publish(self, event: str):
        """Timestamp an event, keep it in history and send it to every client"""
        message = f"{datetime.now(timezone.utc).isoformat()} - {event}"
        self.history.append(message)

        # Copy list to avoid modification during iteration
        for connection in self.active_connections[:]:
            try:
                await connection.send_text(message)
            except Exception as e:
                logger.error(f"Error sending to monitor client: {e}")
                self.disconnect(connection)
