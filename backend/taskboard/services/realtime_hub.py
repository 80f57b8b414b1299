"""Room-scoped broadcast hub for team events.

One room per team (``team_<id>``). Connections join rooms explicitly and every
event emitted to a room is pushed to the sockets currently in it. Delivery is
at most once: nothing is queued for clients that are not connected, they
re-fetch history over HTTP instead.
"""

import asyncio
import logging
import threading
from typing import Any, Dict, List, Set

from fastapi import WebSocket
from starlette.requests import HTTPConnection

logger = logging.getLogger(__name__)

NEW_ACTIVITY = "new_activity"
NEW_MESSAGE = "new_message"
ASSIGNEE_STATUS_UPDATED = "assignee_status_updated"


def room_name(team_id: int) -> str:
    return f"team_{team_id}"


class HubConnection:
    """A connected socket and the rooms it has joined.

    Sockets are bound to the event loop that accepted them, so sends coming
    from another loop are handed over to it.
    """

    def __init__(self, websocket: WebSocket, loop: asyncio.AbstractEventLoop):
        self.websocket = websocket
        self.loop = loop
        self.rooms: Set[str] = set()

    async def _on_own_loop(self, coro) -> None:
        if asyncio.get_running_loop() is self.loop:
            await coro
            return
        future = asyncio.run_coroutine_threadsafe(coro, self.loop)
        await asyncio.wrap_future(future)

    async def send(self, frame: Dict[str, Any]) -> None:
        await self._on_own_loop(self.websocket.send_json(frame))

    async def close(self, code: int = 1000) -> None:
        await self._on_own_loop(self.websocket.close(code=code))


class BroadcastHub:
    def __init__(self):
        self._rooms: Dict[str, Set[HubConnection]] = {}
        self._connections: Set[HubConnection] = set()
        self._lock = threading.Lock()
        self.closed = False

    def connect(self, websocket: WebSocket) -> HubConnection:
        conn = HubConnection(websocket, asyncio.get_running_loop())
        with self._lock:
            self._connections.add(conn)
        return conn

    def join(self, conn: HubConnection, team_id: int) -> str:
        room = room_name(team_id)
        with self._lock:
            self._rooms.setdefault(room, set()).add(conn)
            conn.rooms.add(room)
        return room

    def leave(self, conn: HubConnection, team_id: int) -> None:
        self._leave_room(conn, room_name(team_id))

    def _leave_room(self, conn: HubConnection, room: str) -> None:
        with self._lock:
            members = self._rooms.get(room)
            if members is not None:
                members.discard(conn)
                if not members:
                    del self._rooms[room]
            conn.rooms.discard(room)

    def disconnect(self, conn: HubConnection) -> None:
        for room in list(conn.rooms):
            self._leave_room(conn, room)
        with self._lock:
            self._connections.discard(conn)

    def members(self, team_id: int) -> List[HubConnection]:
        with self._lock:
            return list(self._rooms.get(room_name(team_id), ()))

    def room_sizes(self) -> Dict[str, int]:
        with self._lock:
            return {room: len(members) for room, members in self._rooms.items()}

    async def emit(self, team_id: int, event: str, data: Dict[str, Any]) -> int:
        """Send ``event`` to every socket in the team's room. Returns the number delivered."""
        frame = {"event": event, "data": data}
        delivered = 0
        for conn in self.members(team_id):
            try:
                await conn.send(frame)
                delivered += 1
            except Exception as exc:
                logger.warning("[realtime] dropping connection in %s after send failure: %s", room_name(team_id), exc)
                self.disconnect(conn)
        logger.debug("[realtime] %s -> %s delivered to %d client(s)", event, room_name(team_id), delivered)
        return delivered

    async def close(self) -> None:
        with self._lock:
            connections = list(self._connections)
            self._rooms.clear()
            self._connections.clear()
        for conn in connections:
            try:
                await conn.close(code=1001)
            except Exception as exc:
                logger.debug("[realtime] close failed: %s", exc)
        self.closed = True


def get_hub(connection: HTTPConnection) -> BroadcastHub:
    return connection.app.state.hub
