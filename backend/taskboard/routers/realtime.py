"""Realtime team channel.

JSON frames of the form ``{"event": <name>, "data": <payload>}`` over one
WebSocket. Clients send ``join_team`` / ``leave_team`` with a team id and
``send_message`` with ``{teamId, email, message}``; the server pushes
``new_activity``, ``new_message`` and ``assignee_status_updated`` to the rooms
a socket has joined. A socket opened with ``?token=`` chats as the token's
email; anonymous sockets must name a team member as sender.
"""

import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool
from taskboard.database import get_db
from taskboard.middleware.auth_middleware import verify_identity
from taskboard.schemas.user import Identity
from taskboard.services import chat_service
from taskboard.services.realtime_hub import NEW_MESSAGE, BroadcastHub, HubConnection, get_hub
from taskboard.utils.helpers import MAX_ROW_ID

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])

JOINED = "joined"
LEFT = "left"
ERROR = "error"


def _team_id(value) -> int:
    if isinstance(value, dict):
        value = value.get("teamId", value.get("team_id"))
    if isinstance(value, bool):
        raise ValueError("team id must be an integer")
    team_id = int(value)
    if not 1 <= team_id <= MAX_ROW_ID:
        raise ValueError("team id out of range")
    return team_id


async def _send_error(conn: HubConnection, message: str, event: str | None = None) -> None:
    await conn.send({"event": ERROR, "data": {"message": message, "event": event}})


async def _handle_send_message(
    db: Session,
    hub: BroadcastHub,
    conn: HubConnection,
    identity: Identity | None,
    data,
) -> None:
    if not isinstance(data, dict):
        await _send_error(conn, "Invalid message payload", "send_message")
        return
    try:
        team_id = _team_id(data)
    except (TypeError, ValueError):
        await _send_error(conn, "Invalid team id", "send_message")
        return
    sender = identity.email if identity else data.get("email")

    # Persist first; a message that was not stored is never broadcast.
    try:
        chat = await run_in_threadpool(chat_service.post_message, db, team_id, sender, data.get("message"))
    except HTTPException as exc:
        await _send_error(conn, str(exc.detail), "send_message")
        return
    except SQLAlchemyError:
        db.rollback()
        logger.exception("[realtime] failed to store chat message for team %s", team_id)
        await _send_error(conn, "Message could not be sent", "send_message")
        return

    await hub.emit(team_id, NEW_MESSAGE, chat_service.to_event(chat))


@router.websocket("/ws")
async def team_channel(
    websocket: WebSocket,
    token: str | None = Query(None),
    db: Session = Depends(get_db),
    hub: BroadcastHub = Depends(get_hub),
):
    identity = None
    if token:
        try:
            identity = verify_identity(token)
        except HTTPException:
            await websocket.close(code=1008)
            return

    await websocket.accept()
    conn = hub.connect(websocket)
    try:
        while True:
            raw = await websocket.receive_text()
            try:
                frame = json.loads(raw)
            except json.JSONDecodeError:
                await _send_error(conn, "Frames must be JSON")
                continue
            if not isinstance(frame, dict):
                await _send_error(conn, "Frames must be JSON objects")
                continue

            event = frame.get("event")
            data = frame.get("data")
            if event in ("join_team", "leave_team"):
                try:
                    team_id = _team_id(data)
                except (TypeError, ValueError):
                    await _send_error(conn, "Invalid team id", event)
                    continue
                if event == "join_team":
                    room = hub.join(conn, team_id)
                    await conn.send({"event": JOINED, "data": {"teamId": team_id, "room": room}})
                else:
                    hub.leave(conn, team_id)
                    await conn.send({"event": LEFT, "data": {"teamId": team_id}})
            elif event == "send_message":
                await _handle_send_message(db, hub, conn, identity, data)
            else:
                await _send_error(conn, f"Unsupported event: {event}", event)
    except WebSocketDisconnect:
        pass
    finally:
        hub.disconnect(conn)
