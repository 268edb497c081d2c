"""Session state for authenticated data-service calls.

Sign-in itself is handled by the host application; the client only
carries the resulting user id and access token.
"""

from __future__ import annotations

import time

from pydantic import BaseModel, ConfigDict, Field

#: Default access token time-to-live in seconds (1 hour, the data
#: service's default JWT expiry).
DEFAULT_SESSION_TTL: float = 3600


class Session(BaseModel):
    """Authenticated user session.

    Parameters
    ----------
    user_id : str
        The authenticated user's ID.
    access_token : str
        Bearer token sent with every request.
    created_at : float
        Monotonic timestamp (``time.monotonic()``) when the session
        was handed to the client. Defaults to *now*.
    ttl : float
        Time-to-live in seconds. After this period the host application
        is expected to hand over a refreshed token.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_default=True,
        str_strip_whitespace=True,
    )

    user_id: str = Field(min_length=1)
    access_token: str = Field(min_length=1)
    created_at: float = Field(default_factory=time.monotonic)
    ttl: float = DEFAULT_SESSION_TTL

    @property
    def is_expired(self) -> bool:
        """Whether the session has exceeded its TTL."""
        return (time.monotonic() - self.created_at) >= self.ttl

    @property
    def age(self) -> float:
        """Seconds since the session was created."""
        return time.monotonic() - self.created_at
