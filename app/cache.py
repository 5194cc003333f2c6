import logging
import threading
import time
from typing import Any, Awaitable, Callable, Dict, NamedTuple, Optional

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300.0


class CacheEntry(NamedTuple):
    stored_at: float
    value: Any


class TTLCache:
    """Simple TTL-backed key-value cache.

    Parameters
    ----------
    ttl_seconds : float
        Time-to-live in seconds. Items older than this are considered expired.
        Defaults to 5 minutes.
    clock : Callable[[], float]
        Monotonic time source. Defaults to `time.monotonic`.

    Notes
    -----
    - Keys are typed as `str` in this implementation and compared exactly.
    - Operations are O(1) average time, except `clear` which is O(n).
    - Expiration is lazy (on `get`); there is no background reaper.
    - `get` returns the stored object itself, not a copy. Callers that mutate
      a retrieved collection mutate the cached one.
    - A lock guards the entry mapping; it is never held while awaiting a fetch.
    """

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.monotonic):
        self._ttl = ttl_seconds
        self._clock = clock
        self._store: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    @property
    def ttl(self) -> float:
        return self._ttl

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value for `key` if present and not expired.

        Parameters
        ----------
        key : str
            Cache key.

        Returns
        -------
        Optional[Any]
            The stored value, or `None` if the key is missing or the entry expired.

        Notes
        -----
        - Performs lazy eviction: if the entry is stale, it is removed and `None` is returned.
        - An entry exactly `ttl` seconds old is still fresh.
        - Reads do not reset the entry timestamp.
        """

        now = self._clock()
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            if now - entry.stored_at > self._ttl:
                del self._store[key]
                logger.debug("Evicted expired cache entry %r", key)
                return None
            return entry.value

    def set(self, key: str, value: Any) -> None:
        """Insert or replace a value for `key`, timestamped for TTL accounting.

        Parameters
        ----------
        key : str
            Cache key.
        value : Any
            Arbitrary Python object to store.
        """

        now = self._clock()
        with self._lock:
            self._store[key] = CacheEntry(now, value)

    def clear(self) -> None:
        """Remove all entries from the cache.

        Useful for tests or to force a full refresh of cached data.
        """

        with self._lock:
            count = len(self._store)
            self._store.clear()
        logger.debug("Cleared %d cache entries", count)

    async def refresh(self, key: str, fetch: Callable[[], Awaitable[Any]]) -> Any:
        """Fetch a fresh value for `key` and store it, ignoring any live entry.

        Parameters
        ----------
        key : str
            Cache key.
        fetch : Callable[[], Awaitable[Any]]
            Coroutine function producing the new value. Called exactly once.

        Returns
        -------
        Any
            The fetched value, which is also what `get(key)` returns afterwards.

        Raises
        ------
        Exception
            Whatever `fetch` raises, unchanged. The cache is not modified in that case.

        Notes
        -----
        - Concurrent refreshes of the same key are not coalesced: each one calls
          `fetch` and the last `set` wins.
        - No timeout is applied; a hung `fetch` hangs the refresh.
        """

        try:
            value = await fetch()
        except Exception as exc:
            logger.warning("Refresh of %r failed: %s", key, exc)
            raise
        self.set(key, value)
        return value
