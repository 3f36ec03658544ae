"""
Per-user broadcast channels for live WebSocket sessions.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol

logger = logging.getLogger(__name__)

UPDATE_EVENT = "updateContactList"


class Connection(Protocol):
    """Anything that can receive a JSON message (e.g. a Starlette WebSocket)."""

    async def send_json(self, data: Any) -> None:
        ...


class Broadcaster:
    """Maps user ids to the connections that joined their channel.

    join/leave/publish are the only operations touching the membership table
    and each holds the lock while it reads or mutates it. Deliveries happen
    outside the lock, one connection after another, so events on a channel
    arrive in publish order.
    """

    def __init__(self):
        self._channels: dict[str, set[Connection]] = {}
        self._lock = asyncio.Lock()

    async def join(self, user_id: str, connection: Connection) -> None:
        async with self._lock:
            self._channels.setdefault(user_id, set()).add(connection)
        logger.debug("Connection joined channel %s", user_id)

    async def leave(self, connection: Connection) -> None:
        """Remove ``connection`` from every channel it joined."""
        async with self._lock:
            for user_id in list(self._channels):
                members = self._channels[user_id]
                members.discard(connection)
                if not members:
                    del self._channels[user_id]

    async def subscribers(self, user_id: str) -> int:
        async with self._lock:
            return len(self._channels.get(user_id, ()))

    async def publish(self, user_id: str, payload: dict, event: str = UPDATE_EVENT) -> int:
        """Send ``payload`` to every connection on the channel; return deliveries."""
        async with self._lock:
            members = list(self._channels.get(user_id, ()))
        message = {"event": event, "data": payload}
        delivered = 0
        for connection in members:
            try:
                await connection.send_json(message)
                delivered += 1
            except Exception:
                logger.warning(
                    "Dropping realtime delivery to a connection on channel %s",
                    user_id,
                    exc_info=True,
                )
        return delivered

    async def reset(self) -> None:
        async with self._lock:
            self._channels.clear()
