"""httpx GET helpers shared by every HTTP-based strategy."""

import logging

import httpx

from news_curator.extraction.context import ExtractionContext
from news_curator.extraction.errors import ExtractionTimeout, UpstreamHttpError
from news_curator.extraction.identity import ClientIdentity
from news_curator.extraction.timeout import with_timeout

logger = logging.getLogger(__name__)


async def fetch_response(
    url: str,
    context: ExtractionContext,
    *,
    budget: float,
    step: str,
    identity: ClientIdentity | None = None,
    params: dict | None = None,
) -> httpx.Response:
    """GET ``url`` under one client identity within ``budget`` seconds.

    Raises UpstreamHttpError on transport errors and non-2xx responses,
    ExtractionTimeout when the budget is exceeded.
    """
    identity = identity or context.pick_identity()

    async def _request() -> httpx.Response:
        async with httpx.AsyncClient(
            follow_redirects=True,
            timeout=httpx.Timeout(budget),
            transport=context.transport,
        ) as client:
            return await client.get(url, params=params, headers=identity.headers)

    try:
        response = await with_timeout(_request(), budget, step)
    except httpx.TimeoutException as exc:
        raise ExtractionTimeout(f"{step} timed out: {url}") from exc
    except httpx.HTTPError as exc:
        logger.warning("%s request failed: %s (%s)", step, url, exc)
        raise UpstreamHttpError(f"{step} request failed: {exc}") from exc

    if not response.is_success:
        logger.warning("%s returned HTTP %d: %s", step, response.status_code, url)
        raise UpstreamHttpError(
            f"{step} returned HTTP {response.status_code}",
            status_code=response.status_code,
        )
    return response


async def fetch_text(url: str, context: ExtractionContext, **kwargs) -> str:
    """GET ``url`` and return the decoded body. See fetch_response for kwargs."""
    response = await fetch_response(url, context, **kwargs)
    return response.text


async def fetch_json(url: str, context: ExtractionContext, **kwargs) -> dict:
    """GET ``url`` and decode a JSON object body."""
    response = await fetch_response(url, context, **kwargs)
    try:
        data = response.json()
    except ValueError as exc:
        raise UpstreamHttpError(f"{kwargs.get('step', 'request')} returned invalid JSON") from exc
    if not isinstance(data, dict):
        raise UpstreamHttpError(f"{kwargs.get('step', 'request')} returned unexpected JSON")
    return data
