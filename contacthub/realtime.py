"""
WebSocket endpoint that subscribes live sessions to their user's channel.

Protocol (JSON text frames):

    client -> {"event": "join", "token": "<bearer token>", "userId": "<optional>"}
    server -> {"event": "joined", "userId": "..."}
    server -> {"event": "error", "detail": "..."}
    server -> {"event": "updateContactList", "data": {...contact...}}
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from fastapi.concurrency import run_in_threadpool

from contacthub.broadcast import Broadcaster
from contacthub.db import DbClient
from contacthub.dependencies import get_broadcaster, get_db_client, get_token_service
from contacthub.errors import InvalidToken
from contacthub.security import TokenService

logger = logging.getLogger(__name__)

JOIN_EVENT = "join"

router = APIRouter()


async def _send_error(websocket: WebSocket, detail: str) -> None:
    await websocket.send_json({"event": "error", "detail": detail})


@router.websocket("/ws")
async def contact_updates(
    websocket: WebSocket,
    broadcaster: Broadcaster = Depends(get_broadcaster),
    tokens: TokenService = Depends(get_token_service),
    db: DbClient = Depends(get_db_client),
):
    await websocket.accept()
    try:
        while True:
            try:
                message = await websocket.receive_json()
            except (ValueError, KeyError):
                # Undecodable text or a binary frame.
                await _send_error(websocket, "Malformed message")
                continue
            if not isinstance(message, dict) or message.get("event") != JOIN_EVENT:
                await _send_error(websocket, "Unsupported event")
                continue

            try:
                user_id = tokens.verify(str(message.get("token") or ""))
            except InvalidToken:
                await _send_error(websocket, "Unauthorized")
                continue
            if await run_in_threadpool(db.get_user, user_id) is None:
                await _send_error(websocket, "Unauthorized")
                continue
            requested = message.get("userId")
            if requested and requested != user_id:
                await _send_error(websocket, "Cannot join another user's channel")
                continue

            await broadcaster.join(user_id, websocket)
            await websocket.send_json({"event": "joined", "userId": user_id})
    except WebSocketDisconnect:
        logger.debug("Realtime connection closed")
    finally:
        await broadcaster.leave(websocket)
