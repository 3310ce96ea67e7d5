from __future__ import annotations

from typing import Optional

import httpx


# "relation does not exist" from Postgres, and PostgREST's schema-cache miss
MISSING_RELATION_CODES = frozenset({"42P01", "PGRST205"})


class TrackerError(Exception):
    """Base class for errors raised by the tracking layer."""


class ConfigurationError(TrackerError):
    """No configuration source yielded a usable endpoint and key."""


class InitializationError(TrackerError):
    """A backend could not be brought up. Fatal, never retried."""


class RemoteQueryError(TrackerError):
    def __init__(self, message: str, code: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code

    def __str__(self) -> str:
        parts = [self.message]
        if self.code:
            parts.append(f"code={self.code}")
        if self.status_code is not None:
            parts.append(f"status={self.status_code}")
        return " ".join(parts)

    @property
    def is_missing_relation(self) -> bool:
        return self.code in MISSING_RELATION_CODES

    @property
    def is_auth_failure(self) -> bool:
        return self.status_code in (401, 403)

    @classmethod
    def from_response(cls, response: httpx.Response) -> "RemoteQueryError":
        code = None
        message = (response.text or "")[:200] or f"HTTP {response.status_code}"
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            code = body.get("code")
            message = body.get("message") or message
        return cls(message, code=code, status_code=response.status_code)
