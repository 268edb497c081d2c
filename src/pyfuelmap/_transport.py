"""HTTP transport for the PostgREST data service."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

import aiohttp

from pyfuelmap._constants import REST_PATH, USER_AGENT
from pyfuelmap._redact import redact_for_log, redact_headers
from pyfuelmap.config import FuelMapConfig
from pyfuelmap.exceptions import FuelMapTransportError

_logger = logging.getLogger(__name__)

QueryParams = Sequence[tuple[str, str]]


@dataclass(frozen=True)
class Response:
    """A decoded HTTP response.

    ``body`` is the parsed JSON (``None`` for empty bodies such as
    ``204 No Content`` or ``HEAD`` replies).
    """

    status: int
    body: Any = None
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles while
    keeping the production implementation (`RestTransport`) concrete.
    """

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: QueryParams | None = None,
        json_body: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Response: ...

    async def get_json(self, url: str) -> Any: ...

    def set_access_token(self, token: str | None) -> None: ...


class RestTransport:
    """aiohttp transport that adds the API key and bearer token to every call."""

    def __init__(
        self,
        config: FuelMapConfig,
        http_session: aiohttp.ClientSession,
    ) -> None:
        self._config = config
        self._http = http_session
        self._access_token: str | None = None
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    def set_access_token(self, token: str | None) -> None:
        """Use *token* as the bearer token (``None`` falls back to the anon key)."""
        self._access_token = token

    def _build_headers(self, extra: Mapping[str, str] | None) -> dict[str, str]:
        bearer = self._access_token or self._config.anon_key
        headers: dict[str, str] = {
            "apikey": self._config.anon_key,
            "authorization": f"Bearer {bearer}",
            "accept": "application/json",
            "user-agent": USER_AGENT,
        }
        if extra:
            headers.update(extra)
        return headers

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: QueryParams | None = None,
        json_body: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Response:
        """Send a request to ``{supabase_url}/rest/v1{path}``.

        Non-2xx replies are returned, not raised; mapping application
        error codes is the job of :mod:`pyfuelmap._api._common`.

        Raises
        ------
        FuelMapTransportError
            On network failure, timeout, or a body that is not JSON.
        """
        url = f"{self._config.rest_url}{REST_PATH}{path}"
        request_headers = self._build_headers(headers)
        data: str | None = None
        if json_body is not None:
            data = json.dumps(json_body, separators=(",", ":"))
            request_headers["content-type"] = "application/json"

        if _logger.isEnabledFor(logging.DEBUG):
            _logger.debug(
                "%s %s params=%s headers=%s body=%s",
                method,
                url,
                list(params or []),
                redact_headers(request_headers),
                redact_for_log(json_body),
            )

        try:
            async with self._http.request(
                method,
                url,
                params=list(params) if params else None,
                data=data,
                headers=request_headers,
                timeout=self._timeout,
            ) as resp:
                text = await resp.text()
                status = resp.status
                resp_headers = {k.lower(): v for k, v in resp.headers.items()}
        except TimeoutError as exc:
            raise FuelMapTransportError(f"Request to {path} timed out", endpoint=path) from exc
        except aiohttp.ClientError as exc:
            raise FuelMapTransportError(f"Request to {path} failed: {exc}", endpoint=path) from exc

        body: Any = None
        if text.strip():
            try:
                body = json.loads(text)
            except json.JSONDecodeError as exc:
                raise FuelMapTransportError(
                    f"Invalid JSON from {path}: {text[:200]}",
                    status_code=status,
                    endpoint=path,
                ) from exc

        _logger.debug("%s %s -> %d", method, path, status)
        return Response(status=status, body=body, headers=resp_headers)

    async def get_json(self, url: str) -> Any:
        """GET an absolute URL outside the data service (reference data)."""
        _logger.debug("GET %s", url)
        try:
            async with self._http.get(url, headers={"user-agent": USER_AGENT}, timeout=self._timeout) as resp:
                text = await resp.text()
                if resp.status != 200:
                    raise FuelMapTransportError(
                        f"HTTP {resp.status} from {url}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=url,
                    )
        except FuelMapTransportError:
            raise
        except TimeoutError as exc:
            raise FuelMapTransportError(f"Request to {url} timed out", endpoint=url) from exc
        except aiohttp.ClientError as exc:
            raise FuelMapTransportError(f"Request to {url} failed: {exc}", endpoint=url) from exc

        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise FuelMapTransportError(f"Invalid JSON from {url}: {text[:200]}", endpoint=url) from exc
