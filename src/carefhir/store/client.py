"""FHIR R4 REST client with optional OAuth2 token management.

Provides an async HTTP client for a remote FHIR server. Authentication is
optional: a static bearer token, or OAuth2 client credentials with automatic
token refresh.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from ..errors import ResourceNotFoundError, UpstreamError
from ..protocols import SearchParams

logger = logging.getLogger(__name__)

FHIR_JSON = "application/fhir+json"


class FhirClient:
    """Async FHIR client implementing the ResourceStore protocol.

    Args:
        base_url: FHIR service base, e.g. ``http://localhost:8080/fhir``.
        timeout: Per-request timeout in seconds.
        max_pages: Upper bound on Bundle pages followed by a search.
        access_token: Static bearer token, used when no client credentials
            are configured.
        client_id, client_secret, token_url: OAuth2 client credentials.
        transport: Optional httpx transport (used by tests).
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 60.0,
        max_pages: int = 20,
        access_token: str | None = None,
        client_id: str | None = None,
        client_secret: str | None = None,
        token_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._max_pages = max_pages
        self._client_id = client_id
        self._client_secret = client_secret
        self._token_url = token_url
        self._token: str | None = access_token
        self._token_expires: float = float("inf") if access_token else 0
        self._transport = transport

    def _http(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    async def _get_token(self) -> str | None:
        """Get valid token, refreshing if expired. None when auth is not configured."""
        # Check if current token is still valid (with 60s buffer)
        if self._token and time.time() < self._token_expires - 60:
            return self._token
        if not (self._client_id and self._client_secret and self._token_url):
            return self._token

        async with self._http() as client:
            response = await client.post(
                self._token_url,
                data={
                    "grant_type": "client_credentials",
                    "client_id": self._client_id,
                    "client_secret": self._client_secret,
                },
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
            response.raise_for_status()
            data = response.json()

            self._token = data["access_token"]
            # Default to 1 hour if expires_in not provided
            expires_in = data.get("expires_in", 3600)
            self._token_expires = time.time() + expires_in

            return self._token

    async def _headers(self, with_body: bool = False) -> dict[str, str]:
        headers = {"Accept": FHIR_JSON}
        if with_body:
            headers["Content-Type"] = FHIR_JSON
            headers["Prefer"] = "return=representation"
        token = await self._get_token()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _request(
        self,
        method: str,
        url: str,
        resource_type: str,
        resource_id: str | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send one request, translating transport and HTTP errors."""
        try:
            headers = await self._headers(with_body="json" in kwargs)
            async with self._http() as client:
                response = await client.request(method, url, headers=headers, **kwargs)
                response.raise_for_status()
                return response
        except httpx.TimeoutException as e:
            raise UpstreamError(f"Request timed out: {method} {url}") from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status in (404, 410) and resource_id is not None:
                raise ResourceNotFoundError(resource_type, resource_id) from e
            if status == 401:
                raise UpstreamError("Authentication failed - check FHIR credentials", status) from e
            raise UpstreamError(
                f"FHIR server error {status}: {e.response.text[:200]}", status
            ) from e
        except httpx.RequestError as e:
            raise UpstreamError(f"FHIR server unreachable: {type(e).__name__}: {e}") from e

    # ------------------------------------------------------------------
    # ResourceStore API
    # ------------------------------------------------------------------

    async def create(self, resource: dict[str, Any]) -> dict[str, Any]:
        resource_type = resource["resourceType"]
        body = {k: v for k, v in resource.items() if k != "id"}
        response = await self._request(
            "POST", f"{self._base_url}/{resource_type}", resource_type, json=body
        )
        return self._representation(response, body)

    async def read(self, resource_type: str, resource_id: str) -> dict[str, Any]:
        response = await self._request(
            "GET",
            f"{self._base_url}/{resource_type}/{resource_id}",
            resource_type,
            resource_id,
        )
        return response.json()

    async def update(self, resource: dict[str, Any]) -> dict[str, Any]:
        resource_type = resource["resourceType"]
        resource_id = resource["id"]
        response = await self._request(
            "PUT",
            f"{self._base_url}/{resource_type}/{resource_id}",
            resource_type,
            resource_id,
            json=resource,
        )
        return self._representation(response, resource)

    async def delete(self, resource_type: str, resource_id: str) -> None:
        await self._request(
            "DELETE",
            f"{self._base_url}/{resource_type}/{resource_id}",
            resource_type,
            resource_id,
        )

    async def search(
        self,
        resource_type: str,
        params: SearchParams | None = None,
    ) -> list[dict[str, Any]]:
        """Run a FHIR search and collect resources across Bundle pages.

        Follows ``next`` links until exhausted, ``_count`` resources have been
        collected, or ``max_pages`` pages have been read. Entries of other
        resource types (included resources, OperationOutcome) are skipped.
        """
        params = dict(params or {})
        limit = int(params["_count"]) if "_count" in params else None

        resources: list[dict[str, Any]] = []
        url: str | None = f"{self._base_url}/{resource_type}"
        query: SearchParams | None = params
        pages = 0

        while url and pages < self._max_pages:
            response = await self._request("GET", url, resource_type, params=query)
            bundle = response.json()
            pages += 1

            for entry in bundle.get("entry", []):
                resource = entry.get("resource", {})
                if resource.get("resourceType") == resource_type:
                    resources.append(resource)

            if limit is not None and len(resources) >= limit:
                return resources[:limit]

            url = self._next_link(bundle)
            # next links carry their own query string
            query = None

        logger.debug("Search %s %s returned %d resource(s)", resource_type, params, len(resources))
        return resources

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _next_link(bundle: dict[str, Any]) -> str | None:
        for link in bundle.get("link", []):
            if link.get("relation") == "next":
                return link.get("url")
        return None

    @staticmethod
    def _representation(response: httpx.Response, sent: dict[str, Any]) -> dict[str, Any]:
        """Return the resource the server echoed back.

        Servers that ignore ``Prefer: return=representation`` reply with an
        empty body and a ``Location`` header; the id is recovered from it.
        """
        if response.content:
            body = response.json()
            if body.get("resourceType") == sent.get("resourceType"):
                return body
        result = dict(sent)
        location = response.headers.get("Location") or response.headers.get("Content-Location")
        if location:
            # .../Patient/123/_history/1
            parts = location.split("/_history")[0].rstrip("/").split("/")
            result["id"] = parts[-1]
        return result
