"""
Photo storage for local disk, S3-compatible buckets and in-memory testing.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import boto3
from botocore.config import Config


def unique_name(original_name: str) -> str:
    """Derive a collision-free object name from the uploaded file name."""
    base = Path(original_name or "upload").name.replace(" ", "_") or "upload"
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}-{base}"


class StorageClient(Protocol):
    """Defines the operations the API needs from file storage."""

    def store(self, data: bytes, original_name: str) -> str:
        ...


@dataclass
class InMemoryStorageClient:
    """Test double for storage interactions."""

    url_prefix: str = "/uploads"
    stored_objects: dict = None

    def __post_init__(self):
        if self.stored_objects is None:
            self.stored_objects = {}

    def store(self, data: bytes, original_name: str) -> str:
        name = unique_name(original_name)
        self.stored_objects[name] = bytes(data)
        return f"{self.url_prefix}/{name}"


@dataclass
class LocalDiskStorageClient:
    """Writes uploads into a directory served by the app under ``url_prefix``."""

    directory: str = "uploads"
    url_prefix: str = "/uploads"

    def store(self, data: bytes, original_name: str) -> str:
        target_dir = Path(self.directory)
        target_dir.mkdir(parents=True, exist_ok=True)
        name = unique_name(original_name)
        (target_dir / name).write_bytes(data)
        return f"{self.url_prefix.rstrip('/')}/{name}"


@dataclass
class S3StorageClient:
    """
    S3-compatible storage client for photo uploads.
    """

    bucket: str
    region: str
    endpoint: str
    access_key_id: str
    secret_access_key: str
    public_base_url: str = ""
    key_prefix: str = "photos"

    def __post_init__(self):
        config = Config(
            s3={"addressing_style": "virtual"},
            signature_version="s3v4",
        )
        self._client = boto3.client(
            "s3",
            endpoint_url=self.endpoint or None,
            region_name=self.region or None,
            aws_access_key_id=self.access_key_id or None,
            aws_secret_access_key=self.secret_access_key or None,
            config=config,
        )

    def _public_url(self, key: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{key}"
        if self.endpoint:
            return f"{self.endpoint.rstrip('/')}/{self.bucket}/{key}"
        return f"https://{self.bucket}.s3.amazonaws.com/{key}"

    def store(self, data: bytes, original_name: str) -> str:
        key = f"{self.key_prefix}/{unique_name(original_name)}"
        self._client.put_object(
            Bucket=self.bucket,
            Key=key,
            Body=data,
            ContentType="application/octet-stream",
        )
        return self._public_url(key)
