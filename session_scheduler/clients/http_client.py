from __future__ import annotations

import httpx

from session_scheduler.config import Settings
from session_scheduler.core.logging import get_logger

logger = get_logger(__name__)

USER_AGENT = "session-scheduler/1.0.0"


async def _log_response(response: httpx.Response) -> None:
    logger.debug(
        "token_endpoint_response",
        url=str(response.request.url),
        status_code=response.status_code,
    )


def create_http_client(settings: Settings) -> httpx.AsyncClient:
    """HTTP client for background token exchanges with the identity provider."""
    transport = httpx.AsyncHTTPTransport(
        retries=settings.MAX_RETRIES,
        verify=settings.VERIFY_SSL,
    )
    return httpx.AsyncClient(
        transport=transport,
        timeout=httpx.Timeout(settings.REQUEST_TIMEOUT),
        headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
        event_hooks={"response": [_log_response]},
    )


async def close_http_client(client: httpx.AsyncClient) -> None:
    await client.aclose()
