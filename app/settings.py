from pydantic import BaseModel


class Settings(BaseModel):
    """Immutable runtime configuration for the API.

    Notes
    -----
    - Values here are not read from environment variables by default.
    - TTLs (time-to-live) are expressed in seconds and control how long cached
      responses are considered fresh.
    """

    users_api_url: str = "https://jsonplaceholder.typicode.com/users"
    # TTL (in seconds) for the in-memory users dataset
    cache_ttl_users: float = 5 * 60  # 5 minutes
    http_timeout: float = 20
    log_level: str = "INFO"


settings = Settings()
