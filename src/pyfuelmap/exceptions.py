"""Custom exception hierarchy for pyfuelmap."""

from __future__ import annotations


class FuelMapError(Exception):
    """Base exception for all pyfuelmap errors."""


class FuelMapConfigError(FuelMapError):
    """Invalid or missing configuration."""


class FuelMapValidationError(FuelMapError):
    """Input rejected locally, before any network call.

    The message is user-facing (e.g. "Please provide both the Brand and
    the Municipality/City.").
    """


class FuelMapCapacityError(FuelMapValidationError):
    """A bounded collection (e.g. favorites) is already full."""

    def __init__(self, message: str, *, capacity: int) -> None:
        self.capacity = capacity
        super().__init__(message)


class FuelMapEligibilityError(FuelMapValidationError):
    """The user may not perform the action right now.

    Raised by the pending-report submission gates: not signed in, an
    outstanding pending report, or too many incorrect-location reports.
    """


class FuelMapTransportError(FuelMapError):
    """HTTP-level failure (network, timeout, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class FuelMapApiError(FuelMapError):
    """The data service rejected the request (application-level error)."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "",
        endpoint: str = "",
        status_code: int | None = None,
    ) -> None:
        self.code = code
        self.endpoint = endpoint
        self.status_code = status_code
        super().__init__(message)


class FuelMapAuthenticationError(FuelMapApiError):
    """Access token missing, expired or rejected by the data service."""


class FuelMapUniqueViolationError(FuelMapApiError):
    """A unique constraint was violated (code ``23505``).

    The service uses unique constraints to reject duplicate votes, so
    callers usually treat this as "already voted" rather than a failure.
    """


class FuelMapStaleRecordError(FuelMapApiError):
    """The requested record no longer exists.

    Raised for point reads that return no row (PostgREST ``PGRST116``)
    and for pending reports that have left the local pending set.
    """
