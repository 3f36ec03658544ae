"""
Database abstraction for SQL backends and an in-memory test implementation.
"""

from __future__ import annotations

import threading
import time
import uuid
from dataclasses import dataclass, field, replace
from typing import Dict, Optional, Protocol

from sqlalchemy import (
    JSON,
    Column,
    Float,
    Integer,
    String,
    create_engine,
    func,
    select,
)
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from contacthub.errors import EmailAlreadyRegistered


class DbClient(Protocol):
    """Interface for database access."""

    def create_user(self, name: str, email: str, password_hash: str) -> "UserRecord":
        ...

    def find_user_by_email(self, email: str) -> Optional["UserRecord"]:
        ...

    def get_user(self, user_id: str) -> Optional["UserRecord"]:
        ...

    def list_contacts(self, owner_id: str) -> list["ContactRecord"]:
        ...

    def insert_contact(
        self,
        owner_id: str,
        *,
        name: str,
        email: str,
        photo: str = "",
        tags: list[str] | None = None,
    ) -> "ContactRecord":
        ...

    def get_contact(self, contact_id: str) -> Optional["ContactRecord"]:
        ...

    def save_contact(self, contact: "ContactRecord") -> None:
        ...

    def delete_contact(self, contact_id: str, owner_id: str) -> bool:
        ...

    def append_activity(
        self, owner_id: str, action: str, contact_id: str
    ) -> "ActivityRecord":
        ...

    def list_activities(self, owner_id: str) -> list["ActivityRecord"]:
        ...


@dataclass
class UserRecord:
    user_id: str
    name: str
    email: str
    password_hash: str
    created_at: float = field(default_factory=lambda: time.time())


@dataclass
class ContactRecord:
    contact_id: str
    owner_id: str
    name: str
    email: str
    photo: str = ""
    tags: list[str] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "id": self.contact_id,
            "name": self.name,
            "email": self.email,
            "photo": self.photo,
            "tags": list(self.tags),
            "owner_id": self.owner_id,
        }


@dataclass
class ActivityRecord:
    activity_id: str
    owner_id: str
    action: str
    contact_id: str
    timestamp: float = field(default_factory=lambda: time.time())

    def as_dict(self) -> dict:
        return {
            "id": self.activity_id,
            "owner_id": self.owner_id,
            "action": self.action,
            "contact_id": self.contact_id,
            "timestamp": self.timestamp,
        }


def _copy_contact(contact: ContactRecord) -> ContactRecord:
    return replace(contact, tags=list(contact.tags))


class InMemoryDbClient:
    """Simple in-memory database for development and tests."""

    def __init__(self):
        self.users: Dict[str, UserRecord] = {}
        self.contacts: Dict[str, ContactRecord] = {}
        self.activities: list[ActivityRecord] = []
        self._last_activity_at: Dict[str, float] = {}
        # Route handlers call in from a thread pool.
        self._lock = threading.Lock()

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        with self._lock:
            self.users.clear()
            self.contacts.clear()
            self.activities.clear()
            self._last_activity_at.clear()

    def create_user(self, name: str, email: str, password_hash: str) -> UserRecord:
        with self._lock:
            if any(user.email == email for user in self.users.values()):
                raise EmailAlreadyRegistered(email)
            record = UserRecord(
                user_id=uuid.uuid4().hex,
                name=name,
                email=email,
                password_hash=password_hash,
            )
            self.users[record.user_id] = record
            return record

    def find_user_by_email(self, email: str) -> Optional[UserRecord]:
        for user in list(self.users.values()):
            if user.email == email:
                return user
        return None

    def get_user(self, user_id: str) -> Optional[UserRecord]:
        return self.users.get(user_id)

    def list_contacts(self, owner_id: str) -> list[ContactRecord]:
        with self._lock:
            return [
                _copy_contact(contact)
                for contact in self.contacts.values()
                if contact.owner_id == owner_id
            ]

    def insert_contact(
        self,
        owner_id: str,
        *,
        name: str,
        email: str,
        photo: str = "",
        tags: list[str] | None = None,
    ) -> ContactRecord:
        record = ContactRecord(
            contact_id=uuid.uuid4().hex,
            owner_id=owner_id,
            name=name,
            email=email,
            photo=photo,
            tags=list(tags or []),
        )
        with self._lock:
            self.contacts[record.contact_id] = _copy_contact(record)
        return record

    def get_contact(self, contact_id: str) -> Optional[ContactRecord]:
        with self._lock:
            contact = self.contacts.get(contact_id)
            return _copy_contact(contact) if contact else None

    def save_contact(self, contact: ContactRecord) -> None:
        with self._lock:
            self.contacts[contact.contact_id] = _copy_contact(contact)

    def delete_contact(self, contact_id: str, owner_id: str) -> bool:
        with self._lock:
            contact = self.contacts.get(contact_id)
            if contact is None or contact.owner_id != owner_id:
                return False
            del self.contacts[contact_id]
            return True

    def append_activity(
        self, owner_id: str, action: str, contact_id: str
    ) -> ActivityRecord:
        with self._lock:
            timestamp = max(time.time(), self._last_activity_at.get(owner_id, 0.0))
            self._last_activity_at[owner_id] = timestamp
            record = ActivityRecord(
                activity_id=uuid.uuid4().hex,
                owner_id=owner_id,
                action=action,
                contact_id=contact_id,
                timestamp=timestamp,
            )
            self.activities.append(record)
            return record

    def list_activities(self, owner_id: str) -> list[ActivityRecord]:
        with self._lock:
            return [a for a in self.activities if a.owner_id == owner_id]


class SqlDbClient:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for SqlDbClient")
        engine_kwargs: dict = {"future": True, "pool_pre_ping": True}
        if database_url.startswith("sqlite") and ":memory:" in database_url:
            # A single shared connection keeps the in-memory schema alive.
            engine_kwargs["poolclass"] = StaticPool
            engine_kwargs["connect_args"] = {"check_same_thread": False}
        else:
            engine_kwargs["pool_recycle"] = 1800
        self.engine = create_engine(database_url, **engine_kwargs)
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    def _to_user_record(self, row: "UserRow") -> UserRecord:
        return UserRecord(
            user_id=row.user_id,
            name=row.name,
            email=row.email,
            password_hash=row.password_hash,
            created_at=row.created_at,
        )

    def _to_contact_record(self, row: "ContactRow") -> ContactRecord:
        return ContactRecord(
            contact_id=row.contact_id,
            owner_id=row.owner_id,
            name=row.name,
            email=row.email,
            photo=row.photo or "",
            tags=list(row.tags or []),
        )

    def _to_activity_record(self, row: "ActivityRow") -> ActivityRecord:
        return ActivityRecord(
            activity_id=row.activity_id,
            owner_id=row.owner_id,
            action=row.action,
            contact_id=row.contact_id,
            timestamp=row.timestamp,
        )

    def create_user(self, name: str, email: str, password_hash: str) -> UserRecord:
        with self.Session() as session:
            row = UserRow(
                user_id=uuid.uuid4().hex,
                name=name,
                email=email,
                password_hash=password_hash,
                created_at=time.time(),
            )
            session.add(row)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise EmailAlreadyRegistered(email) from exc
            return self._to_user_record(row)

    def find_user_by_email(self, email: str) -> Optional[UserRecord]:
        with self.Session() as session:
            stmt = select(UserRow).where(UserRow.email == email).limit(1)
            row = session.execute(stmt).scalar_one_or_none()
            return self._to_user_record(row) if row else None

    def get_user(self, user_id: str) -> Optional[UserRecord]:
        with self.Session() as session:
            row = session.get(UserRow, user_id)
            return self._to_user_record(row) if row else None

    def list_contacts(self, owner_id: str) -> list[ContactRecord]:
        with self.Session() as session:
            stmt = select(ContactRow).where(ContactRow.owner_id == owner_id)
            rows = session.execute(stmt).scalars().all()
            return [self._to_contact_record(row) for row in rows]

    def insert_contact(
        self,
        owner_id: str,
        *,
        name: str,
        email: str,
        photo: str = "",
        tags: list[str] | None = None,
    ) -> ContactRecord:
        with self.Session() as session:
            row = ContactRow(
                contact_id=uuid.uuid4().hex,
                owner_id=owner_id,
                name=name,
                email=email,
                photo=photo,
                tags=list(tags or []),
            )
            session.add(row)
            session.commit()
            return self._to_contact_record(row)

    def get_contact(self, contact_id: str) -> Optional[ContactRecord]:
        with self.Session() as session:
            row = session.get(ContactRow, contact_id)
            return self._to_contact_record(row) if row else None

    def save_contact(self, contact: ContactRecord) -> None:
        with self.Session() as session:
            row = session.get(ContactRow, contact.contact_id)
            if row:
                row.name = contact.name
                row.email = contact.email
                row.photo = contact.photo
                row.tags = list(contact.tags)
            else:
                session.add(
                    ContactRow(
                        contact_id=contact.contact_id,
                        owner_id=contact.owner_id,
                        name=contact.name,
                        email=contact.email,
                        photo=contact.photo,
                        tags=list(contact.tags),
                    )
                )
            session.commit()

    def delete_contact(self, contact_id: str, owner_id: str) -> bool:
        with self.Session() as session:
            deleted = (
                session.query(ContactRow)
                .filter(
                    ContactRow.contact_id == contact_id,
                    ContactRow.owner_id == owner_id,
                )
                .delete(synchronize_session=False)
            )
            session.commit()
            return bool(deleted)

    def append_activity(
        self, owner_id: str, action: str, contact_id: str
    ) -> ActivityRecord:
        with self.Session() as session:
            last = session.execute(
                select(func.max(ActivityRow.timestamp)).where(
                    ActivityRow.owner_id == owner_id
                )
            ).scalar()
            row = ActivityRow(
                activity_id=uuid.uuid4().hex,
                owner_id=owner_id,
                action=action,
                contact_id=contact_id,
                timestamp=max(time.time(), last or 0.0),
            )
            session.add(row)
            session.commit()
            return self._to_activity_record(row)

    def list_activities(self, owner_id: str) -> list[ActivityRecord]:
        with self.Session() as session:
            stmt = (
                select(ActivityRow)
                .where(ActivityRow.owner_id == owner_id)
                .order_by(ActivityRow.timestamp.asc(), ActivityRow.seq.asc())
            )
            rows = session.execute(stmt).scalars().all()
            return [self._to_activity_record(row) for row in rows]


Base = declarative_base()


class UserRow(Base):
    __tablename__ = "users"

    user_id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False, unique=True, index=True)
    password_hash = Column(String, nullable=False)
    created_at = Column(Float, nullable=False)


class ContactRow(Base):
    __tablename__ = "contacts"

    contact_id = Column(String, primary_key=True)
    owner_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    photo = Column(String, nullable=False, default="")
    tags = Column(JSON, nullable=False, default=list)


class ActivityRow(Base):
    __tablename__ = "activities"

    seq = Column(Integer, primary_key=True, autoincrement=True)
    activity_id = Column(String, nullable=False, unique=True)
    owner_id = Column(String, nullable=False, index=True)
    action = Column(String, nullable=False)
    contact_id = Column(String, nullable=False)
    timestamp = Column(Float, nullable=False)
