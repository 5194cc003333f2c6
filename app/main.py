import logging

import httpx
from fastapi import FastAPI, HTTPException, Response, status

from .logging_config import configure_logging
from .schemas import User, UserIn, UsersResponse
from .users_client import UsersClient

configure_logging()
logger = logging.getLogger(__name__)

# a non-JSON upstream body surfaces as ValueError (json.JSONDecodeError)
UPSTREAM_ERRORS = (httpx.HTTPError, ValueError)

app = FastAPI(title="Users Cache Proxy API", version="1.0.0")
client = UsersClient()


@app.get("/health")
async def health():
    """Liveness probe for the service.

    Returns
    -------
    dict
        A fixed payload `{"status": "ok"}` used by orchestrators and uptime checks.
    """

    return {"status": "ok"}


@app.get("/v1/users", response_model=UsersResponse)
async def list_users():
    """List users, served from the in-memory cache while it is fresh.

    Raises
    ------
    HTTPException
        502 if the cache is cold and the remote source cannot be reached or
        does not answer with JSON.
    """

    try:
        items = await client.get_users()
    except UPSTREAM_ERRORS as exc:
        logger.error("Error loading users: %s", exc)
        raise HTTPException(status_code=502, detail="Failed to load data") from exc
    return {"count": len(items), "data": items}


@app.post("/v1/users/refresh", response_model=UsersResponse)
async def refresh_users():
    """Force a re-fetch of the users dataset, even if the cached copy is fresh.

    Raises
    ------
    HTTPException
        502 if the fetch fails. The previously cached data is kept.
    """

    try:
        items = await client.refresh_users()
    except UPSTREAM_ERRORS as exc:
        logger.error("Error refreshing users: %s", exc)
        raise HTTPException(status_code=502, detail=f"Failed to refresh data: {exc}") from exc
    return {"count": len(items), "data": items}


@app.get("/v1/users/{user_id}", response_model=User)
async def get_user(user_id: str):
    """Return a single user from the cached collection.

    Raises
    ------
    HTTPException
        404 if no record has this id, 502 if the collection cannot be loaded.
    """

    try:
        user = await client.find_user(user_id)
    except UPSTREAM_ERRORS as exc:
        logger.error("Error loading users: %s", exc)
        raise HTTPException(status_code=502, detail="Failed to load data") from exc
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@app.post("/v1/users", response_model=User, status_code=status.HTTP_201_CREATED)
async def create_user(payload: UserIn):
    """Add a user at the front of the cached collection.

    Notes
    -----
    - The change lives in the cache only and is lost on refresh or expiry.
    """

    try:
        return await client.create_user(payload.model_dump())
    except UPSTREAM_ERRORS as exc:
        logger.error("Error saving user: %s", exc)
        raise HTTPException(status_code=502, detail="Failed to save data") from exc


@app.put("/v1/users/{user_id}", response_model=User)
async def update_user(user_id: str, payload: UserIn):
    """Replace the editable fields of a cached user.

    Raises
    ------
    HTTPException
        404 if no record has this id, 502 if the collection cannot be loaded.
    """

    try:
        user = await client.update_user(user_id, payload.model_dump())
    except UPSTREAM_ERRORS as exc:
        logger.error("Error saving user: %s", exc)
        raise HTTPException(status_code=502, detail="Failed to save data") from exc
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@app.delete("/v1/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: str):
    """Remove a user from the cached collection.

    Raises
    ------
    HTTPException
        404 if no record has this id, 502 if the collection cannot be loaded.
    """

    try:
        deleted = await client.delete_user(user_id)
    except UPSTREAM_ERRORS as exc:
        logger.error("Error deleting user: %s", exc)
        raise HTTPException(status_code=502, detail="Failed to delete record") from exc
    if not deleted:
        raise HTTPException(status_code=404, detail="User not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.delete("/v1/cache", status_code=status.HTTP_204_NO_CONTENT)
async def clear_cache():
    """Drop every cached dataset; the next read goes to the remote source."""

    client.cache.clear()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
