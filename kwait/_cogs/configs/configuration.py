"""
All configuration flags, options, settings to fine-tune the waiting helpers.

All settings are grouped semantically just for convenience
(instead of a flat mega-object with all the values in it).

The settings are always passed explicitly to the functions that need them.
There are no process-wide globals: every test can use its own polling timing
without affecting the other tests running in the same process.

Some of the settings are flags, some are scalars, some are optional,
some are not (but all of them have reasonable defaults).
"""
import dataclasses
import os
from typing import Iterable, Optional


@dataclasses.dataclass
class PollingSettings:
    """
    Settings for how the resources' states are polled until they converge.
    """

    interval: float = 1.0
    """
    How often (in seconds) the resource is re-fetched while waiting for it
    to reach the desired state. The very first fetch is always immediate.
    """

    timeout: float = 10 * 60
    """
    For how long (in seconds) one wait can last in total before giving up.

    Every phase of a multi-phase wait gets its own fresh budget of this size.
    """


@dataclasses.dataclass
class NetworkingSettings:

    request_timeout: Optional[float] = 5 * 60  # == aiohttp.client.DEFAULT_TIMEOUT
    """
    A timeout for the whole API request (from connecting to reading the body).
    """

    connect_timeout: Optional[float] = None
    """
    A timeout for establishing a connection to the API server.
    """

    error_backoffs: Iterable[float] = (1, 1, 2, 4)
    """
    Backoffs (in seconds) for retrying one API request on temporary errors.

    Only the server-side errors (HTTP 5xx), connection errors and timeouts
    are retried. The client-side errors (HTTP 4xx) are escalated immediately.
    Use an empty collection to disable the retries.

    Mind that these retries are about one HTTP request only. The waiting
    functions never retry the failed fetches: they escalate them as failures.
    """


@dataclasses.dataclass
class ImageSettings:
    """
    Settings for building the container images' paths in the test resources.
    """

    repository: str = dataclasses.field(
        default_factory=lambda: os.environ.get('KO_DOCKER_REPO') or 'ko.local')
    """
    The docker repository where the test images are stored.
    Taken from ``$KO_DOCKER_REPO`` if set, as ``ko`` does.
    """

    tag: str = 'latest'
    """
    The tag of all test images.
    """


@dataclasses.dataclass
class Settings:
    polling: PollingSettings = dataclasses.field(default_factory=PollingSettings)
    networking: NetworkingSettings = dataclasses.field(default_factory=NetworkingSettings)
    images: ImageSettings = dataclasses.field(default_factory=ImageSettings)
