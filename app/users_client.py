import logging
from typing import Any, Dict, List, Optional

import httpx

from .cache import TTLCache
from .settings import settings

logger = logging.getLogger(__name__)

USERS_KEY = "users"

_users_cache = TTLCache(settings.cache_ttl_users)


def _same_id(a: Any, b: Any) -> bool:
    # ids from path/form input are strings while stored ids are usually ints
    return str(a) == str(b)


def _next_id(users: List[Dict[str, Any]]) -> int:
    ids = [int(u["id"]) for u in users if str(u.get("id", "")).lstrip("-").isdigit()]
    return max(ids + [0]) + 1


class UsersClient:
    """Async client for the remote users dataset, fronted by a TTL cache.

    Parameters
    ----------
    base_url : Optional[str]
        URL of the users collection. Defaults to `settings.users_api_url`.
    cache : Optional[TTLCache]
        Cache holding the dataset. Defaults to the module-level `_users_cache`.
    transport : Optional[httpx.AsyncBaseTransport]
        Custom transport for `httpx`, mainly for tests.

    Notes
    -----
    - Uses `httpx` with `settings.http_timeout` per request.
    - Create/update/delete only change the cached collection; nothing is written
      back to the remote source.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        cache: Optional[TTLCache] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url or settings.users_api_url
        self.cache = cache if cache is not None else _users_cache
        self._transport = transport

    async def _get_json(self, url: str) -> Any:
        """Perform a GET request and return the parsed JSON payload.

        Raises
        ------
        httpx.HTTPStatusError
            If the response has a 4xx/5xx status code.
        httpx.RequestError
            For transport-level errors (DNS, timeouts, etc.).
        """

        async with httpx.AsyncClient(timeout=settings.http_timeout, transport=self._transport) as client:
            r = await client.get(url)
            r.raise_for_status()
            return r.json()

    async def fetch_users(self) -> List[Dict[str, Any]]:
        """Fetch the users collection from the remote source, bypassing the cache."""

        return await self._get_json(self.base_url)

    async def get_users(self) -> List[Dict[str, Any]]:
        """Return the users collection, served from the cache when fresh.

        Notes
        -----
        - On a miss the collection is fetched and stored.
        - An empty cached list is a hit.
        """

        cached = self.cache.get(USERS_KEY)
        if cached is not None:
            return cached
        logger.info("Users cache miss, fetching %s", self.base_url)
        data = await self.fetch_users()
        self.cache.set(USERS_KEY, data)
        return data

    async def refresh_users(self) -> List[Dict[str, Any]]:
        """Re-fetch the users collection and replace the cached copy.

        Raises
        ------
        httpx.HTTPError
            If the fetch fails. The cached collection is left unchanged.
        ValueError
            If the remote body is not JSON. The cached collection is left unchanged.
        """

        return await self.cache.refresh(USERS_KEY, self.fetch_users)

    async def find_user(self, user_id: Any) -> Optional[Dict[str, Any]]:
        users = await self.get_users()
        return next((u for u in users if _same_id(u.get("id"), user_id)), None)

    async def create_user(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a new record at the front of the users collection.

        The collection is loaded through `get_users` first, so a cold cache is
        filled from the remote source before the record is added. The new id is
        one more than the largest numeric id present (1 for an empty collection).
        """

        users = await self.get_users()
        record = {**data, "id": _next_id(users)}
        users.insert(0, record)
        self.cache.set(USERS_KEY, users)
        return record

    async def update_user(self, user_id: Any, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Merge `data` into the matching record and write the collection back.

        Returns the updated record, or `None` when no record matches.
        """

        users = await self.get_users()
        for index, user in enumerate(users):
            if _same_id(user.get("id"), user_id):
                users[index] = {**user, **data, "id": user.get("id")}
                self.cache.set(USERS_KEY, users)
                return users[index]
        return None

    async def delete_user(self, user_id: Any) -> bool:
        """Replace the cached collection with one lacking the matching record.

        Returns `True` if a record was removed.
        """

        users = await self.get_users()
        remaining = [u for u in users if not _same_id(u.get("id"), user_id)]
        if len(remaining) == len(users):
            return False
        self.cache.set(USERS_KEY, remaining)
        return True
