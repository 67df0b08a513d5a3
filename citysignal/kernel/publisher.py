import logging
from typing import Any, Dict, List, Optional
from citysignal.domain.models import TrafficSnapshot, Weather
from citysignal.kernel.snapshot_builder import SnapshotBuilder

logger = logging.getLogger(__name__)

class SnapshotPublisher:
    """Tracks subscribers and broadcasts traffic and weather updates.

    A subscriber is anything with an async ``send_json`` (a Starlette
    ``WebSocket`` in production). Subscribers that fail a send are dropped.
    """

    def __init__(self, builder: Optional[SnapshotBuilder] = None):
        self.builder = builder or SnapshotBuilder()
        self.connections: List[Any] = []
        self.last_weather: Optional[Weather] = None

    async def connect(self, websocket: Any, snapshot: Optional[TrafficSnapshot] = None):
        """Accept a WebSocket, register it and send it the current state."""
        await websocket.accept()
        await self.subscribe(websocket, snapshot)

    async def subscribe(self, subscriber: Any, snapshot: Optional[TrafficSnapshot] = None):
        self.connections.append(subscriber)
        if snapshot is None:
            return
        for message in (self.builder.weather_payload(snapshot), self.builder.traffic_payload(snapshot)):
            if not await self._send(subscriber, message):
                self.disconnect(subscriber)
                return

    def disconnect(self, subscriber: Any):
        if subscriber in self.connections:
            self.connections.remove(subscriber)

    async def publish(self, snapshot: TrafficSnapshot):
        if snapshot.weather != self.last_weather:
            self.last_weather = snapshot.weather
            await self.broadcast(self.builder.weather_payload(snapshot))
        await self.broadcast(self.builder.traffic_payload(snapshot))

    async def broadcast(self, message: Dict[str, Any]):
        disconnected = []
        for connection in list(self.connections):
            if not await self._send(connection, message):
                disconnected.append(connection)

        for conn in disconnected:
            self.disconnect(conn)

    async def _send(self, subscriber: Any, message: Dict[str, Any]) -> bool:
        try:
            await subscriber.send_json(message)
            return True
        except Exception as e:
            logger.info("Dropping subscriber after failed %s send: %s", message.get("type"), e)
            return False
