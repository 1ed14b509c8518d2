"""Key-value cache clients for NovelHub.

Every client exposes the same small surface: get, set with TTL, delete,
prefix deletion, ping and close. Failures and timeouts never escape a
client: reads degrade to a miss, writes and deletes report ``False``.

Backends:
- RedisCacheClient: redis-py async client over the Redis protocol
- RestCacheClient: Redis commands over HTTPS with a bearer token
- NullCacheClient: inert handle for processes without cache access
"""

from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Awaitable
from typing import TYPE_CHECKING, Any, TypeVar, cast
from urllib.parse import urlsplit

import httpx
import redis.asyncio as redis
from redis.exceptions import RedisError

from novelhub.cache.errors import CacheError, CacheUnavailable
from novelhub.observability.metrics import record_cache_error, record_cache_operation

if TYPE_CHECKING:
    from redis.asyncio import Redis

    from novelhub.config import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT = 1.0
SCAN_BATCH_SIZE = 100
# A prefix delete walks the keyspace in SCAN pages, so it gets a wider bound
PREFIX_DELETE_TIMEOUT = 30.0


def _glob_escape(value: str) -> str:
    """Escape Redis glob metacharacters in a literal prefix."""
    for char in ("\\", "*", "?", "[", "]"):
        value = value.replace(char, f"\\{char}")
    return value


class CacheClient(ABC):
    """Handle to a remote key-value store.

    Subclasses implement the raw ``_``-prefixed operations and raise
    ``CacheUnavailable`` on failure. The public methods bound every call by
    ``timeout`` seconds and absorb failures.
    """

    backend = "abstract"
    enabled = True

    def __init__(self, timeout: float = DEFAULT_TIMEOUT):
        self.timeout = timeout

    async def _guard(
        self,
        operation: str,
        call: Awaitable[T],
        default: T,
        timeout: float | None = None,
    ) -> T:
        timeout = timeout or self.timeout
        start = time.perf_counter()
        try:
            return await asyncio.wait_for(call, timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Cache {operation} timed out after {timeout}s ({self.backend})")
            record_cache_error(operation, self.backend)
            return default
        except CacheError as e:
            logger.warning(f"Cache {operation} failed ({self.backend}): {e}")
            record_cache_error(operation, self.backend)
            return default
        finally:
            record_cache_operation(operation, time.perf_counter() - start, self.backend)

    async def get(self, key: str) -> bytes | None:
        """Get a cached value, or None if absent or the cache is unreachable."""
        return await self._guard("get", self._get(key), None)

    async def set(self, key: str, value: bytes, ttl_seconds: int) -> bool:
        """Store a value with an expiry.

        Entries are never written without a TTL: a non-positive TTL is
        refused.
        """
        if ttl_seconds <= 0:
            logger.error(f"Refusing to cache {key} without a positive TTL ({ttl_seconds})")
            return False
        return await self._guard("set", self._set(key, value, ttl_seconds), False)

    async def delete(self, key: str) -> bool:
        """Delete a key. Deleting an absent key succeeds."""
        return await self._guard("delete", self._delete(key), False)

    async def delete_prefix(self, prefix: str) -> int:
        """Delete every key starting with ``prefix``.

        The walk is bounded by the larger of ``timeout`` and
        ``PREFIX_DELETE_TIMEOUT``. The count is best-effort: if the walk fails
        or times out part way, keys already deleted stay deleted and 0 is
        returned.
        """
        if not prefix:
            raise ValueError("Refusing to delete keys for an empty prefix")
        return await self._guard(
            "delete_prefix",
            self._delete_prefix(prefix),
            0,
            timeout=max(self.timeout, PREFIX_DELETE_TIMEOUT),
        )

    async def ping(self) -> bool:
        """Check connectivity."""
        return await self._guard("ping", self._ping(), False)

    async def close(self) -> None:
        """Release connections."""

    @abstractmethod
    async def _get(self, key: str) -> bytes | None: ...

    @abstractmethod
    async def _set(self, key: str, value: bytes, ttl_seconds: int) -> bool: ...

    @abstractmethod
    async def _delete(self, key: str) -> bool: ...

    @abstractmethod
    async def _delete_prefix(self, prefix: str) -> int: ...

    @abstractmethod
    async def _ping(self) -> bool: ...


class RedisCacheClient(CacheClient):
    """Cache client over the Redis protocol.

    Uses the redis-py async client for connection pooling.
    """

    backend = "redis"

    def __init__(self, client: Redis, timeout: float = DEFAULT_TIMEOUT):
        super().__init__(timeout)
        self.client = client

    @classmethod
    def from_url(
        cls, url: str, token: str | None = None, timeout: float = DEFAULT_TIMEOUT
    ) -> RedisCacheClient:
        """Create a client from a redis:// or rediss:// URL.

        The access token is sent as the connection password.
        """
        client = redis.from_url(  # type: ignore[no-untyped-call]
            url,
            password=token,
            decode_responses=False,  # We're storing bytes
            socket_connect_timeout=timeout,
            socket_timeout=timeout,
        )
        return cls(client, timeout=timeout)

    async def _get(self, key: str) -> bytes | None:
        try:
            return cast(bytes | None, await self.client.get(key))
        except (RedisError, OSError) as e:
            raise CacheUnavailable("get", str(e)) from e

    async def _set(self, key: str, value: bytes, ttl_seconds: int) -> bool:
        try:
            # Single SET ... EX command: the value and its expiry land atomically
            await self.client.set(key, value, ex=ttl_seconds)
        except (RedisError, OSError) as e:
            raise CacheUnavailable("set", str(e)) from e
        return True

    async def _delete(self, key: str) -> bool:
        try:
            await self.client.delete(key)
        except (RedisError, OSError) as e:
            raise CacheUnavailable("delete", str(e)) from e
        return True

    async def _delete_prefix(self, prefix: str) -> int:
        pattern = f"{_glob_escape(prefix)}*"
        deleted = 0
        batch: list[Any] = []
        try:
            # SCAN avoids blocking the server on large keyspaces
            async for key in self.client.scan_iter(match=pattern, count=SCAN_BATCH_SIZE):
                batch.append(key)
                if len(batch) >= SCAN_BATCH_SIZE:
                    deleted += cast(int, await self.client.delete(*batch))
                    batch = []
            if batch:
                deleted += cast(int, await self.client.delete(*batch))
        except (RedisError, OSError) as e:
            raise CacheUnavailable("delete_prefix", str(e)) from e
        return deleted

    async def _ping(self) -> bool:
        try:
            return bool(await cast(Awaitable[bool], self.client.ping()))
        except (RedisError, OSError) as e:
            raise CacheUnavailable("ping", str(e)) from e

    async def close(self) -> None:
        await self.client.aclose()


class RestCacheClient(CacheClient):
    """Cache client speaking Redis commands over HTTPS.

    Each command is POSTed as a JSON array (``["SET", key, value, "EX", 60]``)
    with a bearer token. Replies are JSON objects carrying either a
    ``result`` or an ``error`` field.
    """

    backend = "rest"

    def __init__(self, client: httpx.AsyncClient, timeout: float = DEFAULT_TIMEOUT):
        super().__init__(timeout)
        self.client = client

    @classmethod
    def from_url(cls, url: str, token: str, timeout: float = DEFAULT_TIMEOUT) -> RestCacheClient:
        client = httpx.AsyncClient(
            base_url=url.rstrip("/"),
            headers={"Authorization": f"Bearer {token}"},
            timeout=timeout,
        )
        return cls(client, timeout=timeout)

    async def _command(self, *args: str | int) -> Any:
        operation = str(args[0]).lower()
        try:
            response = await self.client.post("/", json=list(args))
            payload = response.json()
        except httpx.HTTPError as e:
            raise CacheUnavailable(operation, str(e)) from e
        except ValueError as e:
            raise CacheUnavailable(operation, f"invalid reply: {e}") from e

        if not isinstance(payload, dict):
            raise CacheUnavailable(operation, "reply is not a JSON object")
        if "error" in payload:
            raise CacheUnavailable(operation, str(payload["error"]))
        if response.is_error:
            raise CacheUnavailable(operation, f"HTTP {response.status_code}")
        return payload.get("result")

    async def _get(self, key: str) -> bytes | None:
        result = await self._command("GET", key)
        if result is None:
            return None
        if not isinstance(result, str):
            raise CacheUnavailable("get", f"unexpected reply type {type(result).__name__}")
        return result.encode("utf-8")

    async def _set(self, key: str, value: bytes, ttl_seconds: int) -> bool:
        try:
            text = value.decode("utf-8")
        except UnicodeDecodeError as e:
            raise CacheUnavailable("set", "value is not UTF-8 text") from e
        result = await self._command("SET", key, text, "EX", ttl_seconds)
        return bool(result == "OK")

    async def _delete(self, key: str) -> bool:
        await self._command("DEL", key)
        return True

    async def _delete_prefix(self, prefix: str) -> int:
        pattern = f"{_glob_escape(prefix)}*"
        cursor = "0"
        deleted = 0
        while True:
            result = await self._command(
                "SCAN", cursor, "MATCH", pattern, "COUNT", SCAN_BATCH_SIZE
            )
            if not isinstance(result, list) or len(result) != 2:
                raise CacheUnavailable("delete_prefix", "malformed SCAN reply")
            cursor, keys = str(result[0]), result[1]
            if not isinstance(keys, list) or not all(isinstance(k, str) for k in keys):
                raise CacheUnavailable("delete_prefix", "malformed SCAN reply")
            if keys:
                count = await self._command("DEL", *keys)
                if not isinstance(count, int):
                    raise CacheUnavailable("delete_prefix", "malformed DEL reply")
                deleted += count
            if cursor == "0":
                break
        return deleted

    async def _ping(self) -> bool:
        return bool(await self._command("PING") == "PONG")

    async def close(self) -> None:
        await self.client.aclose()


class NullCacheClient(CacheClient):
    """Inert cache handle.

    Used when the process has no server-side network access or no cache
    credentials. Every read is a miss and every write a reported no-op.
    """

    backend = "null"
    enabled = False

    async def get(self, key: str) -> bytes | None:
        return None

    async def set(self, key: str, value: bytes, ttl_seconds: int) -> bool:
        return False

    async def delete(self, key: str) -> bool:
        return False

    async def delete_prefix(self, prefix: str) -> int:
        return 0

    async def ping(self) -> bool:
        return False

    async def _get(self, key: str) -> bytes | None:
        return None

    async def _set(self, key: str, value: bytes, ttl_seconds: int) -> bool:
        return False

    async def _delete(self, key: str) -> bool:
        return False

    async def _delete_prefix(self, prefix: str) -> int:
        return 0

    async def _ping(self) -> bool:
        return False


def create_cache_client(settings: Settings, *, server_context: bool) -> CacheClient:
    """Create the process-wide cache client.

    The hosting process decides whether it runs in a server context. Outside
    one, or when the URL or token is missing, an inert client is returned so
    credentials are never used and serving never depends on the cache.

    Raises:
        ValueError: If the URL scheme is not a supported backend.
    """
    if not server_context:
        logger.info("No server execution context: cache disabled")
        return NullCacheClient()

    url, token = settings.cache_url, settings.cache_token
    if not url or not token:
        logger.warning("Cache URL or token not configured: cache disabled")
        return NullCacheClient()

    scheme = urlsplit(url).scheme
    timeout = settings.cache_timeout_seconds
    if scheme in ("redis", "rediss"):
        client: CacheClient = RedisCacheClient.from_url(url, token, timeout=timeout)
    elif scheme in ("http", "https"):
        client = RestCacheClient.from_url(url, token, timeout=timeout)
    else:
        raise ValueError(f"Unsupported cache URL scheme: {scheme!r}")

    logger.info(f"Cache enabled ({client.backend} backend)")
    return client
