"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

from fastapi import Depends

from contacthub.accounts import AccountService
from contacthub.broadcast import Broadcaster
from contacthub.config import get_settings
from contacthub.contacts import ContactService
from contacthub.db import DbClient, InMemoryDbClient, SqlDbClient
from contacthub.security import TokenService
from contacthub.storage import (
    InMemoryStorageClient,
    LocalDiskStorageClient,
    S3StorageClient,
    StorageClient,
)

_db_client: DbClient | None = None
_storage_client: StorageClient | None = None
_token_service: TokenService | None = None
_broadcaster: Broadcaster | None = None


def get_db_client() -> DbClient:
    """
    Return a singleton DB client so state persists across requests.
    """
    global _db_client
    if _db_client:
        return _db_client

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.database_url:
        _db_client = InMemoryDbClient()
    else:
        _db_client = SqlDbClient(settings.database_url)
    return _db_client


def get_storage_client() -> StorageClient:
    global _storage_client
    if _storage_client:
        return _storage_client

    settings = get_settings()
    if settings.use_in_memory_backends:
        _storage_client = InMemoryStorageClient(url_prefix=settings.upload_url_prefix)
    elif settings.s3_bucket:
        _storage_client = S3StorageClient(
            bucket=settings.s3_bucket,
            region=settings.s3_region or "",
            endpoint=settings.s3_endpoint or "",
            access_key_id=settings.aws_access_key_id or "",
            secret_access_key=settings.aws_secret_access_key or "",
            public_base_url=settings.s3_public_base_url or "",
        )
    else:
        _storage_client = LocalDiskStorageClient(
            directory=settings.upload_dir,
            url_prefix=settings.upload_url_prefix,
        )
    return _storage_client


def get_token_service() -> TokenService:
    global _token_service
    if _token_service:
        return _token_service

    settings = get_settings()
    _token_service = TokenService(
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        ttl_seconds=settings.token_ttl_seconds,
    )
    return _token_service


def get_broadcaster() -> Broadcaster:
    """
    Return the process-wide broadcaster shared by HTTP routes and WebSocket sessions.
    """
    global _broadcaster
    if _broadcaster is None:
        _broadcaster = Broadcaster()
    return _broadcaster


def get_account_service(
    db: DbClient = Depends(get_db_client),
    tokens: TokenService = Depends(get_token_service),
) -> AccountService:
    return AccountService(db, tokens, bcrypt_rounds=get_settings().bcrypt_rounds)


def get_contact_service(
    db: DbClient = Depends(get_db_client),
    storage: StorageClient = Depends(get_storage_client),
    broadcaster: Broadcaster = Depends(get_broadcaster),
) -> ContactService:
    return ContactService(db, storage, broadcaster)
