import httpx
import pytest

from app.cache import TTLCache
from app.users_client import UsersClient

USERS_URL = "https://example.test/users"


def sample_users():
    return [
        {"id": 1, "name": "Leanne Graham", "email": "leanne@example.com"},
        {"id": 2, "name": "Ervin Howell", "email": "ervin@example.com"},
    ]


class FakeSource:
    """Stands in for the remote users endpoint and counts requests."""

    def __init__(self, payload=None, status_code: int = 200):
        self.payload = payload if payload is not None else sample_users()
        self.status_code = status_code
        self.fail = False
        self.text = None
        self.calls = 0

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        if self.fail:
            raise httpx.ConnectError("network down", request=request)
        if self.text is not None:
            return httpx.Response(self.status_code, text=self.text)
        return httpx.Response(self.status_code, json=self.payload)


@pytest.fixture
def source():
    return FakeSource()


@pytest.fixture
def users_client(source):
    return UsersClient(
        base_url=USERS_URL,
        cache=TTLCache(300),
        transport=httpx.MockTransport(source.handler),
    )
