"""HTTP client for the remote search webhook."""
import logging
from typing import Any

import httpx

from edusearch.schemas.search import ContentType, SearchQuery

logger = logging.getLogger(__name__)

# The webhook predates the "resource" naming and still calls it "url".
WIRE_CONTENT_TYPES: dict[ContentType, str] = {
    "question": "question",
    "quiz": "quiz",
    "resource": "url",
}


class SearchTransportError(Exception):
    """The round trip to the search endpoint did not yield a usable body."""


def build_payload(query: SearchQuery, send_content_type: bool = True) -> dict[str, str]:
    payload = {"textoBusqueda": query.text}
    if send_content_type:
        payload["tipoDeBusqueda"] = WIRE_CONTENT_TYPES[query.content_type]
    return payload


class RemoteSearchClient:
    def __init__(
        self,
        endpoint_url: str,
        timeout: float = 15.0,
        send_content_type: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._endpoint_url = endpoint_url
        self._timeout = timeout
        self._send_content_type = send_content_type
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def timeout(self) -> float:
        return self._timeout

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                headers={"Content-Type": "application/json"},
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def search(self, query: SearchQuery) -> Any:
        """POST the query and return the decoded JSON body.

        Raises SearchTransportError for connection failures, timeouts,
        non-2xx statuses and bodies that are not JSON.
        """
        payload = build_payload(query, self._send_content_type)
        logger.debug("Posting search %r (%s)", query.text, query.content_type)
        try:
            response = await self._get_client().post(self._endpoint_url, json=payload)
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise SearchTransportError(f"Search endpoint timed out: {exc}") from exc
        except httpx.HTTPStatusError as exc:
            body = exc.response.text[:200] if exc.response.text else "no body"
            raise SearchTransportError(
                f"Search endpoint returned {exc.response.status_code} "
                f"{exc.response.reason_phrase}: {body}"
            ) from exc
        except httpx.HTTPError as exc:
            raise SearchTransportError(
                f"Search endpoint unreachable ({type(exc).__name__}): {exc}"
            ) from exc
        except httpx.InvalidURL as exc:
            raise SearchTransportError(
                f"Search endpoint URL {self._endpoint_url!r} is invalid: {exc}"
            ) from exc

        try:
            return response.json()
        except ValueError as exc:
            raise SearchTransportError(f"Search endpoint returned invalid JSON: {exc}") from exc
