"""HTTP client shared by all upstream adapters."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import aiohttp

from kiosk_dashboard.adapters.api_request_logger import log_api_request
from kiosk_dashboard.domain.errors import UpstreamMalformed, UpstreamUnavailable

if TYPE_CHECKING:
    from aiohttp import ClientResponse, ClientSession

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HttpResponse:
    """Status and decoded JSON body (None for empty or non-2xx bodies)."""

    status: int
    body: Any = None
    text: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class JsonHttpClient:
    """Thin JSON client over an aiohttp session.

    Transport failures become ``UpstreamUnavailable``; undecodable 2xx bodies
    become ``UpstreamMalformed``. Timeouts come from the session's ClientTimeout.
    """

    def __init__(self, session: ClientSession, api_name: str) -> None:
        """Initialize with an aiohttp session.

        Args:
            session: Shared aiohttp session.
            api_name: Name of the upstream (for logging).
        """
        self._session = session
        self.api_name = api_name

    async def _read_response(self, response: ClientResponse, url: str) -> HttpResponse:
        if not 200 <= response.status < 300:
            error_text = await response.text()
            logger.warning(
                f"{self.api_name} returned status {response.status} for {url}: "
                f"{error_text[:200] if error_text else '(empty response body)'}"
            )
            return HttpResponse(status=response.status, text=error_text[:500])

        try:
            body = await response.json(content_type=None)
        except ValueError as e:
            raise UpstreamMalformed(f"{self.api_name} returned invalid JSON for {url}") from e
        return HttpResponse(status=response.status, body=body)

    async def request(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        json: Any = None,
        data: dict[str, str] | None = None,
    ) -> HttpResponse:
        """Perform a request without raising on non-2xx statuses.

        Returns:
            The response status and decoded body.

        Raises:
            UpstreamUnavailable: Connection error or timeout.
            UpstreamMalformed: 2xx response whose body is not JSON.
        """
        log_api_request(method, url, params=params, headers=headers)
        try:
            async with self._session.request(
                method, url, params=params, headers=headers, json=json, data=data
            ) as response:
                return await self._read_response(response, url)
        except (aiohttp.ClientError, TimeoutError) as e:
            raise UpstreamUnavailable(f"{self.api_name} request to {url} failed: {e!r}") from e

    async def get_json(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """GET ``url`` and return the decoded JSON body.

        Raises:
            UpstreamUnavailable: Connection error, timeout, or non-2xx status.
            UpstreamMalformed: Body is not JSON.
        """
        response = await self.request("GET", url, params=params, headers=headers)
        if not response.ok:
            raise UpstreamUnavailable(
                f"{self.api_name} returned status {response.status}", status_code=response.status
            )
        return response.body
