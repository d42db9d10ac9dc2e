"""Dog catalog API client."""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from dog_matcher.domain.errors import (
    HTTP_UNAUTHORIZED,
    ApiError,
    AuthExpiredError,
    TransportError,
)

QueryParams = Sequence[tuple[str, str]]


class CatalogClient(Protocol):
    """Interface for dog catalog API interactions."""

    async def login(self, name: str, email: str) -> None:
        """Start an authenticated session."""

    async def logout(self) -> None:
        """End the authenticated session."""

    async def get_breeds(self) -> list[str]:
        """Return every breed name known to the catalog."""

    async def search_dogs(self, params: QueryParams) -> dict[str, object]:
        """Return a raw page of dog ids for the given query parameters."""

    async def get_dogs(self, dog_ids: Sequence[str]) -> list[dict[str, object]]:
        """Return raw dog records for the given ids."""

    async def get_match(self, dog_ids: Sequence[str]) -> dict[str, object]:
        """Return the raw match chosen from the given favorite ids."""

    async def get_locations(
        self, zip_codes: Sequence[str]
    ) -> list[dict[str, object]]:
        """Return raw locations for the given ZIP codes."""


def error_from_response(response: httpx.Response, endpoint: str) -> ApiError:
    """Convert a non-2xx response into a typed error.

    Prefers the ``message`` field of a JSON error body and falls back to the
    reason phrase when the body is missing or not JSON.
    """
    message = f"API Error: {response.reason_phrase}"
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        detail = payload.get("message")
        if isinstance(detail, str) and detail:
            message = detail
    if response.status_code == HTTP_UNAUTHORIZED:
        return AuthExpiredError(message, response.status_code, endpoint)
    return ApiError(message, response.status_code, endpoint)


@dataclass
class HttpxCatalogClient(CatalogClient):
    """HTTPX-backed catalog client.

    The auth cookie issued by ``/auth/login`` lives in the client's cookie jar
    and is sent with every later request.
    """

    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, base_url: str, timeout: float = 10.0) -> "HttpxCatalogClient":
        """Create a catalog client with a managed httpx session."""
        return cls(
            http_client=httpx.AsyncClient(
                base_url=base_url,
                headers={"Content-Type": "application/json"},
                timeout=timeout,
            )
        )

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: QueryParams | None = None,
        json: object | None = None,
    ) -> httpx.Response:
        """Send a request and raise a typed error for any failure."""
        try:
            response = await self.http_client.request(
                method, endpoint, params=params, json=json
            )
        except httpx.RequestError as exc:
            raise TransportError(
                f"Network error while accessing {endpoint}: {exc}", endpoint
            ) from exc
        if not response.is_success:
            raise error_from_response(response, endpoint)
        return response

    async def login(self, name: str, email: str) -> None:
        """Authenticate and store the session cookie."""
        await self.request("POST", "/auth/login", json={"name": name, "email": email})

    async def logout(self) -> None:
        """End the session on the server."""
        await self.request("POST", "/auth/logout")

    async def get_breeds(self) -> list[str]:
        """Fetch all breed names."""
        response = await self.request("GET", "/dogs/breeds")
        return _json(response, "/dogs/breeds")

    async def search_dogs(self, params: QueryParams) -> dict[str, object]:
        """Fetch one page of dog ids."""
        response = await self.request("GET", "/dogs/search", params=list(params))
        return _json(response, "/dogs/search")

    async def get_dogs(self, dog_ids: Sequence[str]) -> list[dict[str, object]]:
        """Hydrate dog ids into full records."""
        if not dog_ids:
            return []
        response = await self.request("POST", "/dogs", json=list(dog_ids))
        return _json(response, "/dogs")

    async def get_match(self, dog_ids: Sequence[str]) -> dict[str, object]:
        """Ask the catalog to pick a match among the favorites."""
        response = await self.request("POST", "/dogs/match", json=list(dog_ids))
        return _json(response, "/dogs/match")

    async def get_locations(
        self, zip_codes: Sequence[str]
    ) -> list[dict[str, object]]:
        """Resolve ZIP codes into locations."""
        if not zip_codes:
            return []
        response = await self.request("POST", "/locations", json=list(zip_codes))
        return _json(response, "/locations")

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def _json(response: httpx.Response, endpoint: str) -> Any:
    """Decode a successful response body."""
    try:
        return response.json()
    except ValueError as exc:
        raise ApiError(
            f"Malformed response from {endpoint}", response.status_code, endpoint
        ) from exc
