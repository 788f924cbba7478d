"""
TTL-aware key/value store backed by Redis.

Redis evicts each key after its TTL (`SET ... EX`). The entry also carries
its own `expires_at`, checked lazily on lookup against the injected clock,
so expiry is decided the same way whether or not Redis has evicted yet.
`purge_expired()` is an optional sweep for memory hygiene.
"""

import json
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Generic, Iterator, Optional, TypeVar

from redis import Redis

from civicdesk.utils.datetime_utils import utc_now

T = TypeVar("T")


@dataclass(frozen=True)
class TTLEntry(Generic[T]):
    value: T
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

    def dumps(self) -> str:
        return json.dumps({"value": self.value, "expires_at": self.expires_at.isoformat()})

    @classmethod
    def loads(cls, raw: Any) -> "TTLEntry[Any]":
        data = json.loads(raw)
        return cls(value=data["value"], expires_at=datetime.fromisoformat(data["expires_at"]))


class TTLStore(Generic[T]):
    """
    Store shared by every worker pointed at the same Redis database.

    Values must be JSON serialisable. Keys are namespaced by `prefix`.
    """

    def __init__(
        self,
        client: Redis,
        clock: Optional[Callable[[], datetime]] = None,
        prefix: str = "",
    ):
        self.client = client
        self._clock = clock or utc_now
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def put(self, key: str, value: T, ttl_seconds: int) -> TTLEntry[T]:
        entry = TTLEntry(value=value, expires_at=self._clock() + timedelta(seconds=ttl_seconds))
        self.client.set(self._key(key), entry.dumps(), ex=ttl_seconds)
        return entry

    def get(self, key: str) -> Optional[T]:
        raw = self.client.get(self._key(key))
        if raw is None:
            return None
        entry = TTLEntry.loads(raw)
        if entry.is_expired(self._clock()):
            self.client.delete(self._key(key))
            return None
        return entry.value

    def pop(self, key: str) -> Optional[T]:
        """
        Atomically remove and return a live entry. Expired entries are
        removed too but reported as missing.
        """
        raw = self.client.getdel(self._key(key))
        if raw is None:
            return None
        entry = TTLEntry.loads(raw)
        if entry.is_expired(self._clock()):
            return None
        return entry.value

    def _keys(self) -> Iterator[str]:
        return self.client.scan_iter(match=f"{self.prefix}*")

    def purge_expired(self) -> int:
        now = self._clock()
        purged = 0
        for redis_key in self._keys():
            raw = self.client.get(redis_key)
            if raw is not None and TTLEntry.loads(raw).is_expired(now):
                purged += self.client.delete(redis_key)
        return purged

    def __len__(self) -> int:
        return sum(1 for _ in self._keys())
