"""
Poem External Service Integrations
==================================

HTTP client for the Jinrishici "poem of the day" API.

One authenticated GET per call, no retries. A failed call is reported to the
caller and the run is abandoned until the next trigger.
"""

import json
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from poem_collector.config import get_settings
from poem_collector.core import FetchDecodeError, FetchTransportError
from poem_collector.poems.application import IPoemFetcher, PoemResponseDTO, normalize_poem
from poem_collector.poems.domain import Poem
from poem_collector.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

JINRISHICI_SENTENCE_URL = "https://v2.jinrishici.com/sentence"
TOKEN_HEADER = "X-User-Token"


def _api_error_details(body: bytes) -> Dict[str, Any]:
    """Pull ``status``/``errCode``/``errMessage`` out of an error body, if any."""
    try:
        payload = json.loads(body)
    except ValueError:
        return {}
    if not isinstance(payload, dict):
        return {}
    return {
        key: payload[key]
        for key in ("status", "errCode", "errMessage")
        if key in payload
    }


class JinrishiciClient(IPoemFetcher):
    """
    Poem API client.

    The underlying ``httpx.AsyncClient`` is created on first use and reused
    until ``close()``.
    """

    def __init__(
        self,
        url: str = JINRISHICI_SENTENCE_URL,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._url = url
        self._timeout = timeout if timeout is not None else get_settings().http_timeout_seconds
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._http_client

    async def fetch(self, token: str) -> Poem:
        """
        Fetch one poem and normalize it.

        Raises:
            FetchTransportError: Connection, DNS or timeout failure
            FetchDecodeError: Body is not the expected JSON shape
        """
        client = await self._get_client()

        try:
            response = await client.get(self._url, headers={TOKEN_HEADER: token})
        except httpx.DecodingError as e:
            raise FetchDecodeError(
                f"Error reading poem body: {e}",
                {"url": self._url}
            ) from e
        except httpx.RequestError as e:
            raise FetchTransportError(
                f"Get poem http request error: {e}",
                {"url": self._url, "error_type": type(e).__name__}
            ) from e

        status_line = f"{response.status_code} {response.reason_phrase}".strip()
        logger.info("Get Poem Status", extra={"status": status_line})

        body = response.content
        try:
            dto = PoemResponseDTO.model_validate_json(body)
        except ValidationError as e:
            details = {"status_code": response.status_code, "error_count": e.error_count()}
            details.update(_api_error_details(body))
            raise FetchDecodeError(
                f"Error analyze poem body: {e.errors()[0]['msg'] if e.errors() else e}",
                details
            ) from e

        return normalize_poem(dto)

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None
