"""Partition storage backed by a local directory, MinIO/S3, or memory.

Every backend stores opaque JSON payloads under string keys. A write either
replaces the whole slot or leaves it untouched. Writes that exceed the slot
capacity raise StorageCapacityError so callers can shrink and retry.
"""

from __future__ import annotations

import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

import boto3
from botocore.exceptions import ClientError


class StorageError(Exception):
    """Base exception for partition storage failures."""

    def __init__(self, message: str, key: str | None = None):
        super().__init__(message)
        self.key = key


class PartitionReadError(StorageError):
    """Slot exists but could not be read."""

    pass


class StorageCapacityError(StorageError):
    """Write rejected because the payload is too large for the slot."""

    def __init__(self, message: str, key: str | None = None, size_bytes: int | None = None):
        super().__init__(message, key=key)
        self.size_bytes = size_bytes


class PartitionStore(ABC):
    """Key/value slots for serialized partitions."""

    def __init__(self, max_bytes: int | None = None) -> None:
        self.max_bytes = max_bytes

    @abstractmethod
    def read(self, key: str) -> bytes | None:
        """Return the slot payload, or None when the slot does not exist.

        Raises:
            PartitionReadError: If the slot exists but cannot be read
        """
        ...

    @abstractmethod
    def write(self, key: str, payload: bytes) -> None:
        """Replace the slot payload atomically.

        Raises:
            StorageCapacityError: If the payload is too large
        """
        ...

    @abstractmethod
    def exists(self, key: str) -> bool: ...

    def _check_capacity(self, key: str, payload: bytes) -> None:
        if self.max_bytes is not None and len(payload) > self.max_bytes:
            raise StorageCapacityError(
                f"payload of {len(payload)} bytes exceeds {self.max_bytes} for {key}",
                key=key,
                size_bytes=len(payload),
            )


class InMemoryPartitionStore(PartitionStore):
    """Dict-backed store for tests and embedding."""

    def __init__(self, max_bytes: int | None = None) -> None:
        super().__init__(max_bytes)
        self.slots: dict[str, bytes] = {}

    def read(self, key: str) -> bytes | None:
        return self.slots.get(key)

    def write(self, key: str, payload: bytes) -> None:
        self._check_capacity(key, payload)
        self.slots[key] = bytes(payload)

    def exists(self, key: str) -> bool:
        return key in self.slots


class LocalPartitionStore(PartitionStore):
    """One file per slot under ``root``; writes go through a temp file + rename."""

    def __init__(self, root: str | Path, max_bytes: int | None = None) -> None:
        super().__init__(max_bytes)
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        return self.root / key

    def read(self, key: str) -> bytes | None:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return path.read_bytes()
        except OSError as e:
            raise PartitionReadError(f"cannot read {path}: {e}", key=key) from e

    def write(self, key: str, payload: bytes) -> None:
        self._check_capacity(key, payload)
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def exists(self, key: str) -> bool:
        return self._path(key).exists()


class S3PartitionStore(PartitionStore):
    """S3/MinIO-backed partition store."""

    def __init__(
        self,
        bucket: str | None = None,
        endpoint: str | None = None,
        access_key: str | None = None,
        secret_key: str | None = None,
        region: str = "us-east-1",
        secure: bool | None = None,
        max_bytes: int | None = None,
        client=None,
    ) -> None:
        super().__init__(max_bytes)
        self.bucket = bucket or os.getenv("TRADE_ARCHIVE_BUCKET", "trade-archive")
        self.endpoint = endpoint or os.getenv("MINIO_ENDPOINT", "http://minio:9000")

        if client is not None:
            self.s3 = client
            return

        access_key = access_key or os.getenv("MINIO_ROOT_USER")
        secret_key = secret_key or os.getenv("MINIO_ROOT_PASSWORD")
        use_ssl = secure if secure is not None else self.endpoint.startswith("https")

        self.s3 = boto3.client(
            "s3",
            endpoint_url=self.endpoint,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            region_name=region,
            use_ssl=use_ssl,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def exists(self, key: str) -> bool:
        try:
            self.s3.head_object(Bucket=self.bucket, Key=key)
            return True
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code")
            if code in {"404", "NotFound", "NoSuchKey"}:
                return False
            raise

    def read(self, key: str) -> bytes | None:
        try:
            resp = self.s3.get_object(Bucket=self.bucket, Key=key)
            return resp["Body"].read()
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code")
            if code in {"404", "NotFound", "NoSuchKey"}:
                return None
            raise PartitionReadError(f"cannot read s3://{self.bucket}/{key}: {code}", key=key) from e

    def write(self, key: str, payload: bytes) -> None:
        self._check_capacity(key, payload)
        try:
            self.s3.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=payload,
                ContentType="application/json",
            )
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code")
            if code == "EntityTooLarge":
                raise StorageCapacityError(
                    f"s3 rejected {len(payload)} bytes for {key}",
                    key=key,
                    size_bytes=len(payload),
                ) from e
            raise
