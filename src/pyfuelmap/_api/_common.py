"""Shared helpers for data-service endpoint modules.

This module centralizes the most repeated patterns:
- building PostgREST filter parameters
- sending a request and mapping error replies to exceptions
- reading exact row counts from ``Content-Range``

It is internal to pyfuelmap and may change at any time.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from pyfuelmap._constants import AUTH_ERROR_CODES, NO_ROWS_CODES, UNIQUE_VIOLATION_CODES
from pyfuelmap._transport import QueryParams, Response, Transport
from pyfuelmap.exceptions import (
    FuelMapApiError,
    FuelMapAuthenticationError,
    FuelMapStaleRecordError,
    FuelMapUniqueViolationError,
)

SINGLE_OBJECT = {"accept": "application/vnd.pgrst.object+json"}
RETURN_MINIMAL = {"prefer": "return=minimal"}


def eq(column: str, value: Any) -> tuple[str, str]:
    return column, f"eq.{value}"


def gte(column: str, value: float) -> tuple[str, str]:
    return column, f"gte.{value!r}"


def lte(column: str, value: float) -> tuple[str, str]:
    return column, f"lte.{value!r}"


def in_(column: str, values: Iterable[str]) -> tuple[str, str]:
    quoted = ",".join(f'"{value}"' for value in values)
    return column, f"in.({quoted})"


def _raise_for_error(*, endpoint: str, response: Response) -> None:
    body = response.body if isinstance(response.body, dict) else {}
    code = str(body.get("code") or "")
    message = str(body.get("message") or body.get("error") or f"HTTP {response.status}")

    if code in UNIQUE_VIOLATION_CODES:
        raise FuelMapUniqueViolationError(
            f"{endpoint} rejected a duplicate: {message}",
            code=code,
            endpoint=endpoint,
            status_code=response.status,
        )
    if code in NO_ROWS_CODES:
        raise FuelMapStaleRecordError(
            f"{endpoint} returned no record: {message}",
            code=code,
            endpoint=endpoint,
            status_code=response.status,
        )
    if code in AUTH_ERROR_CODES or response.status == 401:
        raise FuelMapAuthenticationError(
            f"{endpoint} failed: code={code} message={message}",
            code=code,
            endpoint=endpoint,
            status_code=response.status,
        )
    raise FuelMapApiError(
        f"{endpoint} failed: code={code} message={message}",
        code=code,
        endpoint=endpoint,
        status_code=response.status,
    )


async def request_json(
    transport: Transport,
    method: str,
    path: str,
    *,
    params: QueryParams | None = None,
    json_body: Any = None,
    headers: Mapping[str, str] | None = None,
) -> Any:
    """Send a request and return the decoded body, raising on error replies.

    This is a thin helper for endpoint modules; it intentionally returns
    `Any` since PostgREST returns arrays, objects, scalars or nothing.
    """
    response = await transport.request(method, path, params=params, json_body=json_body, headers=headers)
    if not response.ok:
        _raise_for_error(endpoint=path, response=response)
    return response.body


async def count_rows(transport: Transport, table: str, params: QueryParams) -> int:
    """Return the exact number of rows matching *params*."""
    path = f"/{table}"
    response = await transport.request(
        "HEAD",
        path,
        params=[("select", "id"), *params],
        headers={"prefer": "count=exact"},
    )
    if not response.ok:
        _raise_for_error(endpoint=path, response=response)
    content_range = response.headers.get("content-range", "")
    _, _, total = content_range.partition("/")
    try:
        return int(total)
    except ValueError as exc:
        raise FuelMapApiError(
            f"{path} returned no usable count (Content-Range={content_range!r})",
            code="invalid_count",
            endpoint=path,
            status_code=response.status,
        ) from exc


async def call_rpc(transport: Transport, name: str, params: Mapping[str, Any]) -> Any:
    """Invoke a stored procedure and return its (possibly empty) result."""
    return await request_json(transport, "POST", f"/rpc/{name}", json_body=dict(params))


def as_rows(decoded: Any) -> list[dict[str, Any]]:
    if not isinstance(decoded, list):
        return []
    return [row for row in decoded if isinstance(row, dict)]
