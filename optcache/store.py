"""Record store adapters.

The cache is a generic associative store: each key is the LHS text of a
record and maps to a hash of fields (``result`` plus profile counters).
Only two queries are needed, listing every key and fetching every field of
one key, so any backend offering those can feed the loader.
"""

from __future__ import annotations

import logging
from typing import Mapping

import redis

from optcache.config import REDIS_DB, REDIS_HOST, REDIS_PORT, REDIS_SCAN_COUNT
from optcache.errors import StoreUnavailableError

logger = logging.getLogger(__name__)


class RedisRecordStore:
    """Read-only view of a Redis-backed optimization cache.

    Parameters
    ----------
    host, port, db:
        Connection settings.  Default to the ``OPTCACHE_REDIS_*`` config.
    client:
        An already-built ``redis.Redis`` client; overrides the connection
        settings when given.
    """

    def __init__(
        self,
        host: str = REDIS_HOST,
        port: int = REDIS_PORT,
        db: int = REDIS_DB,
        client: redis.Redis | None = None,
    ) -> None:
        self.host = host
        self.port = port
        self.db = db
        self._client = client or redis.Redis(
            host=host, port=port, db=db, decode_responses=True,
        )

    def ping(self) -> None:
        """Check connectivity once, up front.

        Raises
        ------
        StoreUnavailableError
            If the server cannot be reached.
        """
        try:
            self._client.ping()
        except redis.exceptions.RedisError as exc:
            raise StoreUnavailableError(
                f"cannot reach redis at {self.host}:{self.port}/{self.db}: {exc}"
            ) from exc

    def list_keys(self) -> list[str]:
        """Every key in the database, each listed once.

        SCAN may report a key more than once, so repeats are dropped while
        keeping first-seen order.
        """
        try:
            return list(dict.fromkeys(self._client.scan_iter(count=REDIS_SCAN_COUNT)))
        except (redis.exceptions.RedisError, UnicodeDecodeError) as exc:
            raise StoreUnavailableError(
                f"listing keys on redis at {self.host}:{self.port}/{self.db} failed: {exc}"
            ) from exc

    def get_fields(self, key: str) -> dict[str, str]:
        try:
            return dict(self._client.hgetall(key))
        except redis.exceptions.ResponseError as exc:
            # WRONGTYPE: something other than a hash lives under this key
            logger.debug("Key %r is not a hash (%s); treating as empty", key, exc)
            return {}
        except (redis.exceptions.RedisError, UnicodeDecodeError) as exc:
            raise StoreUnavailableError(
                f"reading key {key!r} from redis at {self.host}:{self.port}/{self.db} failed: {exc}"
            ) from exc


class MemoryRecordStore:
    """Dict-backed store holding ``{key: {field: value}}``."""

    def __init__(self, entries: Mapping[str, Mapping[str, str]] | None = None) -> None:
        self._entries = {k: dict(v) for k, v in (entries or {}).items()}

    def ping(self) -> None:
        return None

    def list_keys(self) -> list[str]:
        return list(self._entries)

    def get_fields(self, key: str) -> dict[str, str]:
        return dict(self._entries.get(key, {}))
