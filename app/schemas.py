import re
from typing import List

from pydantic import BaseModel, ConfigDict, field_validator

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class User(BaseModel):
    """A record of the users dataset.

    Notes
    -----
    - The remote source returns more fields (address, company, ...); they are kept as-is.
    - `id` is usually an integer but is not coerced, so string ids survive round-trips.
    """

    model_config = ConfigDict(extra="allow")

    id: int | str
    name: str
    email: str
    status: str = "active"


class UsersResponse(BaseModel):
    count: int
    data: List[User]


class UserIn(BaseModel):
    """Payload for creating or updating a user."""

    name: str
    email: str
    status: str = "active"

    @field_validator("name", "email")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field is required")
        return v

    @field_validator("email")
    @classmethod
    def _valid_email(cls, v: str) -> str:
        if not EMAIL_RE.match(v):
            raise ValueError("invalid email address")
        return v
