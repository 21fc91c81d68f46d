"""
Storage Module - Black Box Interface

Purpose: Abstract all data persistence
Interface: RecordStore (get(), put(), delete(), all()), StorageModule.record_store()
Hidden: Redis specifics, connection handling, serialization

Can be replaced with any storage backend without affecting other modules.
"""

import json
import logging
from typing import Dict, List, Optional, Protocol

import redis.asyncio as redis

from ..errors import StorageError

logger = logging.getLogger(__name__)

KEY_PREFIX = "examdesk"


class RecordStore(Protocol):
    """Keyed collection of JSON records (one per namespace)."""

    async def get(self, key: str) -> Optional[dict]:
        ...

    async def put(self, key: str, record: dict) -> None:
        ...

    async def delete(self, key: str) -> bool:
        ...

    async def all(self) -> List[dict]:
        ...


class RedisRecordStore:
    """
    Record store backed by a single Redis hash per namespace.

    Every write is one Redis command, so a failed write leaves the previously
    committed record untouched.
    """

    def __init__(self, redis_client, namespace: str):
        """
        Initialize record store.

        Args:
            redis_client: Async Redis client (decode_responses=True)
            namespace: Collection name, e.g. "customers"
        """
        self.redis = redis_client
        self.namespace = namespace
        self.hash_key = f"{KEY_PREFIX}:{namespace}"

    async def get(self, key: str) -> Optional[dict]:
        try:
            data = await self.redis.hget(self.hash_key, key)
        except redis.RedisError as e:
            raise StorageError(f"Failed to read {self.namespace}/{key}: {e}") from e
        if data is None:
            return None
        return json.loads(data)

    async def put(self, key: str, record: dict) -> None:
        try:
            await self.redis.hset(self.hash_key, key, json.dumps(record))
        except redis.RedisError as e:
            raise StorageError(f"Failed to write {self.namespace}/{key}: {e}") from e

    async def delete(self, key: str) -> bool:
        try:
            removed = await self.redis.hdel(self.hash_key, key)
        except redis.RedisError as e:
            raise StorageError(f"Failed to delete {self.namespace}/{key}: {e}") from e
        return removed > 0

    async def all(self) -> List[dict]:
        try:
            values = await self.redis.hvals(self.hash_key)
        except redis.RedisError as e:
            raise StorageError(f"Failed to list {self.namespace}: {e}") from e
        return [json.loads(v) for v in values]


class MemoryRecordStore:
    """In-process record store. State is lost on restart."""

    def __init__(self, namespace: str = "default"):
        self.namespace = namespace
        self._records: Dict[str, str] = {}

    async def get(self, key: str) -> Optional[dict]:
        data = self._records.get(key)
        return json.loads(data) if data is not None else None

    async def put(self, key: str, record: dict) -> None:
        # Stored serialized so callers never share mutable state with the store
        self._records[key] = json.dumps(record)

    async def delete(self, key: str) -> bool:
        return self._records.pop(key, None) is not None

    async def all(self) -> List[dict]:
        return [json.loads(v) for v in self._records.values()]


class StorageModule:
    """Black box storage abstraction."""

    def __init__(
        self,
        backend: str = "redis",
        connection_url: Optional[str] = None,
        password: Optional[str] = None,
    ):
        """
        Initialize storage.

        Args:
            backend: "redis" or "memory"
            connection_url: Redis URL (ignored for the memory backend)
            password: Optional Redis password, passed separately to avoid URL encoding issues
        """
        self.backend = backend
        self.url = connection_url or "redis://localhost:6379/0"
        self.password = password
        self._client = None
        self._memory: Dict[str, MemoryRecordStore] = {}

    async def connect(self) -> Optional[redis.Redis]:
        """Get storage connection (None for the memory backend)."""
        if self.backend != "redis":
            return None
        if not self._client:
            self._client = redis.from_url(
                self.url,
                password=self.password,
                encoding="utf-8",
                decode_responses=True,
            )
            logger.info(f"Connected record store to {self.url}")
        return self._client

    async def ping(self) -> bool:
        """Check that the backend is reachable."""
        if self.backend != "redis":
            return True
        client = await self.connect()
        return bool(await client.ping())

    async def record_store(self, namespace: str) -> RecordStore:
        """Return the record store for a namespace."""
        if self.backend != "redis":
            if namespace not in self._memory:
                self._memory[namespace] = MemoryRecordStore(namespace)
            return self._memory[namespace]
        client = await self.connect()
        return RedisRecordStore(client, namespace)

    async def disconnect(self):
        """Close storage connection."""
        if self._client:
            await self._client.aclose()
            self._client = None


__all__ = ["RecordStore", "RedisRecordStore", "MemoryRecordStore", "StorageModule"]
