"""
Raw requests to the API server with the retries of the transient failures.

Every request is retried on its own: the server-side errors (HTTP 5xx),
the connection errors, and the timeouts are retried after each of
the configured backoffs, and the last failure escalates to the caller.
The client-side errors (HTTP 4xx) escalate immediately.
"""
import asyncio
from typing import Any, List, Mapping, Optional

import aiohttp

from kwait._cogs.clients import auth, errors
from kwait._cogs.configs import configuration
from kwait._cogs.helpers import typedefs

RETRYABLE_ERRORS = (aiohttp.ClientConnectionError, asyncio.TimeoutError, errors.APIServerError)


def get_backoffs(settings: configuration.Settings) -> List[float]:
    backoffs = settings.networking.error_backoffs
    if backoffs is None:
        return []
    elif isinstance(backoffs, (int, float)):
        return [backoffs]
    else:
        return list(backoffs)


async def request(
        method: str,
        url: str,
        *,
        context: auth.APIContext,
        settings: configuration.Settings,
        payload: Optional[object] = None,
        headers: Optional[Mapping[str, str]] = None,
        logger: typedefs.Logger,
) -> aiohttp.ClientResponse:
    """
    Send a request and return the successful response unread.

    Relative URLs are resolved against the context's server.
    """
    if '://' not in url:
        url = f"{context.server.rstrip('/')}/{url.lstrip('/')}"
    timeout = aiohttp.ClientTimeout(
        total=settings.networking.request_timeout,
        sock_connect=settings.networking.connect_timeout,
    )

    what = f"{method.upper()} {url}"
    backoffs = get_backoffs(settings)
    attempts = len(backoffs) + 1
    for attempt in range(1, attempts + 1):
        try:
            response = await context.session.request(
                method, url, json=payload, headers=headers, timeout=timeout)
            await errors.raise_for_status(response)
        except RETRYABLE_ERRORS as e:
            if attempt == attempts:
                logger.error(f"Request attempt #{attempt}/{attempts} failed; escalating: "
                             f"{what} -> {e!r}")
                raise
            logger.error(f"Request attempt #{attempt}/{attempts} failed; will retry: "
                         f"{what} -> {e!r}")
            await asyncio.sleep(backoffs[attempt - 1])
        else:
            if attempt > 1:
                logger.debug(f"Request attempt #{attempt}/{attempts} succeeded: {what}")
            return response

    raise RuntimeError("No request attempts were made.")  # only for type-checking.


async def call(
        method: str,
        url: str,
        *,
        context: auth.APIContext,
        settings: configuration.Settings,
        payload: Optional[object] = None,
        headers: Optional[Mapping[str, str]] = None,
        logger: typedefs.Logger,
) -> Any:
    """ Send a request and return the decoded JSON body of the response. """
    response = await request(method, url, payload=payload, headers=headers,
                             context=context, settings=settings, logger=logger)
    async with response:
        return await response.json()
