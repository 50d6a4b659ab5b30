"""Microsoft Graph API session for Entra ID."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import TracebackType
from typing import Any, ClassVar, Self

import httpx

from .auth import TokenProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GraphClientConfig:
    """Configuration for Microsoft Graph API client."""

    timeout: float = 30.0
    base_url: str = "https://graph.microsoft.com/v1.0"


class GraphApiError(Exception):
    """Raised when a Graph request fails or is answered with an error status."""

    def __init__(
        self,
        status_code: int,
        message: str,
        *,
        code: str | None = None,
        request_id: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.code = code
        self.request_id = request_id

    @property
    def detail(self) -> str:
        """Diagnostic detail for operators."""
        parts = [f"status={self.status_code}" if self.status_code else "no response"]
        if self.code:
            parts.append(f"code={self.code}")
        if self.request_id:
            parts.append(f"request-id={self.request_id}")
        return ", ".join(parts)

    def __str__(self) -> str:
        return f"{self.message} ({self.detail})"

    @classmethod
    def from_response(cls, response: httpx.Response) -> Self:
        """Build from a Graph error payload."""
        code = None
        request_id = response.headers.get("request-id")
        message = response.reason_phrase or f"HTTP {response.status_code}"
        try:
            error = response.json().get("error", {})
        except ValueError:
            error = {}
        if isinstance(error, dict):
            code = error.get("code")
            message = error.get("message") or message
            request_id = error.get("innerError", {}).get("request-id", request_id)
        return cls(response.status_code, message, code=code, request_id=request_id)

    @classmethod
    def from_transport_error(cls, error: httpx.TransportError) -> Self:
        """Build from a network failure; no HTTP status was received."""
        message = str(error) or type(error).__name__
        return cls(0, message, code=type(error).__name__)


class GraphClient:
    """
    Async session for Microsoft Graph API.

    Use as an async context manager: entering signs in and opens the HTTP
    connection pool, leaving always closes it and signs out.
    """

    JSON_HEADERS: ClassVar[dict[str, str]] = {"Content-Type": "application/json"}

    def __init__(
        self,
        token_provider: TokenProvider,
        config: GraphClientConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the Graph client."""
        self._token_provider = token_provider
        self._config = config or GraphClientConfig()
        self._transport = transport
        self._http: httpx.AsyncClient | None = None

    async def __aenter__(self) -> Self:
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    @property
    def is_connected(self) -> bool:
        """Check if the session is open."""
        return self._http is not None

    async def connect(self) -> None:
        """Sign in and open the HTTP client."""
        if self._http is not None:
            return
        # Fail before any request if sign-in is impossible
        self._token_provider.acquire_token()
        self._http = httpx.AsyncClient(
            base_url=self._config.base_url,
            timeout=self._config.timeout,
            transport=self._transport,
        )
        logger.info("Connected to Microsoft Graph")

    async def close(self) -> None:
        """Close the HTTP client and sign out."""
        try:
            if self._http is not None:
                await self._http.aclose()
        finally:
            self._http = None
            self._token_provider.sign_out()
            logger.info("Disconnected from Microsoft Graph")

    async def get_all_pages(self, path: str, params: dict[str, str] | None = None) -> list[dict]:
        """
        Retrieve all pages from a paginated Graph API endpoint.

        Args:
            path: The API endpoint path.
            params: Query parameters of the first request.

        Returns:
            Combined list of all results across pages.
        """
        results: list[dict] = []
        url: str | None = path

        while url:
            data = await self._request("GET", url, params=params)
            results.extend(data.get("value", []))
            url = data.get("@odata.nextLink")
            # nextLink already carries the query
            params = None

        return results

    async def post(self, path: str, body: dict[str, Any]) -> dict[str, Any]:
        """POST a JSON body and return the created resource."""
        return await self._request("POST", path, json=body)

    async def patch(self, path: str, body: dict[str, Any]) -> dict[str, Any]:
        """PATCH a resource with a JSON body."""
        return await self._request("PATCH", path, json=body)

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        if self._http is None:
            msg = "Graph session is not connected"
            raise RuntimeError(msg)

        token = self._token_provider.acquire_token()
        headers = {"Authorization": f"Bearer {token}", **self.JSON_HEADERS}

        logger.debug("%s %s", method, url)
        try:
            response = await self._http.request(method, url, params=params, json=json, headers=headers)
        except httpx.TransportError as e:
            raise GraphApiError.from_transport_error(e) from e

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise GraphApiError.from_response(response) from e

        if response.status_code == httpx.codes.NO_CONTENT or not response.content:
            return {}
        return response.json()
