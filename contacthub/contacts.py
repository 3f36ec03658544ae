"""
Owner-scoped contact lifecycle with activity logging and realtime push.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

from fastapi.concurrency import run_in_threadpool

from contacthub.broadcast import Broadcaster
from contacthub.db import ActivityRecord, ContactRecord, DbClient
from contacthub.errors import ContactNotFound
from contacthub.storage import StorageClient

logger = logging.getLogger(__name__)

CONTACT_ADDED = "Added a new contact"


def parse_tags(raw: Union[str, list[str], None]) -> Optional[list[str]]:
    """Normalize a tag field.

    ``None`` means the field was absent. A list is kept exactly as sent. A
    string is split on commas with items stripped and blank items dropped,
    so an empty string yields an empty list.
    """
    if raw is None:
        return None
    if not isinstance(raw, str):
        return list(raw)
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass
class PhotoUpload:
    data: bytes
    filename: str


class ContactService:
    """Every operation is scoped to the authenticated owner id."""

    def __init__(self, db: DbClient, storage: StorageClient, broadcaster: Broadcaster):
        self._db = db
        self._storage = storage
        self._broadcaster = broadcaster

    async def list_contacts(self, owner_id: str) -> list[ContactRecord]:
        return await run_in_threadpool(self._db.list_contacts, owner_id)

    async def create_contact(
        self,
        owner_id: str,
        *,
        name: str,
        email: str,
        tags: Optional[list[str]] = None,
        photo: Optional[PhotoUpload] = None,
    ) -> ContactRecord:
        photo_url = ""
        if photo is not None:
            photo_url = await run_in_threadpool(
                self._storage.store, photo.data, photo.filename
            )
        contact = await run_in_threadpool(
            self._db.insert_contact,
            owner_id,
            name=name,
            email=email,
            photo=photo_url,
            tags=tags or [],
        )
        logger.info("Created contact %s for user %s", contact.contact_id, owner_id)

        await self._log_activity(owner_id, CONTACT_ADDED, contact.contact_id)
        await self._notify(owner_id, contact)
        return contact

    async def update_contact(
        self,
        contact_id: str,
        owner_id: str,
        *,
        name: str,
        email: str,
        tags: Optional[list[str]] = None,
    ) -> ContactRecord:
        """Overwrite name and email; replace tags only when ``tags`` is not None.

        Contacts owned by someone else are reported as not found.
        """
        contact = await run_in_threadpool(self._db.get_contact, contact_id)
        if contact is None or contact.owner_id != owner_id:
            raise ContactNotFound(contact_id)

        contact.name = name
        contact.email = email
        if tags is not None:
            contact.tags = list(tags)
        await run_in_threadpool(self._db.save_contact, contact)
        logger.info("Updated contact %s for user %s", contact_id, owner_id)

        await self._notify(owner_id, contact)
        return contact

    async def delete_contact(self, contact_id: str, owner_id: str) -> bool:
        """Delete if the caller owns it. Missing contacts are a no-op."""
        deleted = await run_in_threadpool(self._db.delete_contact, contact_id, owner_id)
        if deleted:
            logger.info("Deleted contact %s for user %s", contact_id, owner_id)
        else:
            logger.info(
                "Delete of contact %s by user %s matched nothing", contact_id, owner_id
            )
        return deleted

    async def list_activities(self, owner_id: str) -> list[ActivityRecord]:
        return await run_in_threadpool(self._db.list_activities, owner_id)

    async def _log_activity(self, owner_id: str, action: str, contact_id: str) -> None:
        try:
            await run_in_threadpool(
                self._db.append_activity, owner_id, action, contact_id
            )
        except Exception:
            logger.exception(
                "Failed to record activity %r for contact %s", action, contact_id
            )

    async def _notify(self, owner_id: str, contact: ContactRecord) -> None:
        try:
            await self._broadcaster.publish(owner_id, contact.as_dict())
        except Exception:
            logger.exception(
                "Failed to broadcast change of contact %s", contact.contact_id
            )
