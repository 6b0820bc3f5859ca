"""
Errors of the Kubernetes API as they matter for the configuration helpers.

Only the distinctions that change the helpers' behaviour are made:

* Server-side failures (HTTP 5xx) are retried by the requests.
* Absent configurations (HTTP 404) are reported by the clients to the waiters.
* Everything else (HTTP 4xx) is escalated to the caller as is.

The errors of ``aiohttp`` are chained as the causes. The networking errors
(connection, SSL, timeouts) are not wrapped at all.
"""
import collections.abc
import json
from typing import Any, Optional

import aiohttp


class APIError(Exception):
    """
    The API server has refused the request.

    If the server explains the refusal with a ``Status`` object,
    its ``reason`` and ``message`` are exposed; otherwise, they are ``None``.
    """

    def __init__(
            self,
            status: int,
            *,
            reason: Optional[str] = None,
            message: Optional[str] = None,
    ) -> None:
        super().__init__(f"HTTP {status}: {message or reason or 'no details'}")
        self.status = status
        self.reason = reason
        self.message = message


class APIServerError(APIError):
    pass


class APINotFoundError(APIError):
    pass


def _parse_status(payload: Any) -> Optional[Any]:
    # Other payloads can contain anything, including the secrets. Never expose them.
    if isinstance(payload, collections.abc.Mapping) and payload.get('kind') == 'Status':
        return payload
    return None


async def raise_for_status(response: aiohttp.ClientResponse) -> None:
    """
    Convert a failed response to an `APIError`, keep the successful ones intact.
    """
    if response.status < 400:
        return

    # The body can be read only before aiohttp's own check closes the response.
    try:
        status = _parse_status(await response.json())
    except (json.JSONDecodeError, aiohttp.ContentTypeError, aiohttp.ClientConnectionError):
        status = None

    cls = (APINotFoundError if response.status == 404 else
           APIServerError if response.status >= 500 else
           APIError)
    try:
        response.raise_for_status()
    except aiohttp.ClientResponseError as e:
        raise cls(response.status,
                  reason=status.get('reason') if status else None,
                  message=status.get('message') if status else None) from e
