# cartstate/services/identity_service.py
import uuid
from typing import Protocol

from fastapi import Request, Response

from cartstate.utils.settings import CART_COOKIE_NAME, CART_COOKIE_LIFETIME

USER_ID_HEADER = "X-User-Id"


def _is_uuid(value: str | None) -> bool:
    if not value:
        return False
    try:
        return str(uuid.UUID(value)) == value.lower()
    except ValueError:
        return False


class IdentityResolver(Protocol):
    def current_user_id(self) -> str | None: ...

    def current_anonymous_id(self) -> str: ...


class StaticIdentityResolver:
    """Fixed identity, for tasks and scripts that act on a known cart."""

    def __init__(self, user_id: str | None = None, cookie_id: str | None = None):
        self.user_id = str(user_id) if user_id is not None else None
        self.cookie_id = cookie_id or str(uuid.uuid4())

    def current_user_id(self) -> str | None:
        return self.user_id

    def current_anonymous_id(self) -> str:
        return self.cookie_id


class RequestIdentityResolver:
    """
    Identity of the HTTP caller.

    The user id comes from the upstream auth layer through ``X-User-Id``.
    Guests are tracked by a long-lived cookie that is issued on first use
    and reused afterwards; anything that is not a UUID is replaced.
    """

    def __init__(
        self,
        request: Request,
        response: Response,
        cookie_name: str = CART_COOKIE_NAME,
        cookie_lifetime: int = CART_COOKIE_LIFETIME,
    ):
        self.request = request
        self.response = response
        self.cookie_name = cookie_name
        self.cookie_lifetime = cookie_lifetime
        self._cookie_id: str | None = None

    def current_user_id(self) -> str | None:
        return self.request.headers.get(USER_ID_HEADER) or None

    def current_anonymous_id(self) -> str:
        if self._cookie_id is None:
            cookie_id = self.request.cookies.get(self.cookie_name)
            if not _is_uuid(cookie_id):
                cookie_id = str(uuid.uuid4())
                self.response.set_cookie(
                    key=self.cookie_name,
                    value=cookie_id,
                    max_age=self.cookie_lifetime * 60,
                    httponly=True,
                    samesite="lax",
                )
            self._cookie_id = cookie_id
        return self._cookie_id
