"""
Waiting for the configurations to reach the desired states.

The states are changed by an external controller in the cluster, not by us.
We only observe them: fetch the configuration regularly and check its state
with a predicate -- a plain function of the fetched snapshot, which returns
``True`` when the state is reached, and ``False`` while it is not yet.
If the predicate raises an exception, it is a failure, not a "not yet".

Any failure (in fetching, in the predicate, or a timeout) is terminal
and is reported as soon as it happens. Only the "not yet" results
lead to fetching and checking again.
"""
import asyncio
from typing import Callable, Optional

from typing_extensions import Protocol

from kwait._cogs.aiokits import aiotime
from kwait._cogs.configs import configuration
from kwait._cogs.helpers import typedefs
from kwait._cogs.structs import bodies
from kwait._core.engines import loggers, spans
from kwait._core.intents import configurations

Predicate = Callable[[bodies.Configuration], bool]


class ConfigurationsReader(Protocol):
    async def get(self, name: str) -> bodies.Configuration: ...


class ConfigurationStateError(Exception):
    """
    A configuration did not reach or is not in the desired state.

    The error carries the last observed state of the configuration (if any),
    and the description of the desired state (if known), for diagnostics.
    """

    def __init__(
            self,
            name: str,
            *,
            description: Optional[str] = None,
            last_state: Optional[bodies.Configuration] = None,
            reason: Optional[str] = None,
    ) -> None:
        what = f" ({description})" if description else ""
        why = f": {reason}" if reason else ""
        super().__init__(f"configuration {name!r} is not in desired state{what}, "
                         f"got: {last_state!r}{why}")
        self.name = name
        self.description = description
        self.last_state = last_state
        self.revision_name: Optional[str] = None


class FetchError(ConfigurationStateError):
    """ The configuration could not be fetched. The cause is chained. """


class PredicateError(ConfigurationStateError):
    """ The predicate has failed while checking the state. The cause is chained. """


class WaitTimeoutError(ConfigurationStateError):
    """ The desired state was not reached in time. """


class NotInDesiredStateError(ConfigurationStateError):
    """ The configuration is not in the desired state when checked once. """


def _make_logger(client: ConfigurationsReader, name: str) -> loggers.ObjectLogger:
    return loggers.ObjectLogger(name=name, namespace=getattr(client, 'namespace', None))


async def _fetch_within(
        client: ConfigurationsReader,
        name: str,
        timeout: float,
) -> Optional[bodies.Configuration]:
    """
    Fetch the configuration, or give up and return ``None`` after ``timeout``.

    The fetch's own errors, including its own request timeouts, are re-raised.
    """
    task = asyncio.ensure_future(client.get(name))
    try:
        done, _ = await asyncio.wait([task], timeout=timeout)
    finally:
        if not task.done():
            task.cancel()
            await asyncio.wait([task])
    return task.result() if done else None


async def wait_for_configuration_state(
        client: ConfigurationsReader,
        name: str,
        in_state: Predicate,
        desc: str,
        *,
        settings: configuration.Settings,
        logger: Optional[typedefs.Logger] = None,
) -> None:
    """
    Poll the configuration until ``in_state`` returns ``True`` for it.

    The first check is done immediately, and then every ``polling.interval``
    until ``polling.timeout`` is reached. The last check happens exactly
    at the timeout, so the wait never lasts noticeably longer than that.
    A fetch that hangs is abandoned at the timeout too, but not earlier
    than one interval after it has started.

    ``desc`` describes the desired state. It is used only for diagnostics:
    in the errors, in the logs, and in the emitted span's name.
    """
    if not name:
        raise ValueError("The configuration's name must be specified.")
    logger = logger if logger is not None else _make_logger(client, name)
    interval = settings.polling.interval
    timeout = settings.polling.timeout

    with spans.emitable_span(f"WaitForConfigurationState/{name}/{desc}"):
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        last_state: Optional[bodies.Configuration] = None
        while True:
            try:
                fetched = await _fetch_within(client, name, max(deadline - loop.time(), interval))
            except Exception as e:
                logger.warning(f"Failed to fetch while waiting for {desc}: {e!r}")
                raise FetchError(name, description=desc, last_state=last_state,
                                 reason=f"fetching failed: {e!r}") from e

            if fetched is None:
                logger.warning(f"Gave up waiting for {desc} after {timeout}s: the fetch is too slow.")
                raise WaitTimeoutError(name, description=desc, last_state=last_state,
                                       reason=f"timed out after {timeout}s while fetching")
            last_state = fetched

            try:
                done = in_state(last_state)
            except Exception as e:
                logger.warning(f"Failed to check the state while waiting for {desc}: {e!r}")
                raise PredicateError(name, description=desc, last_state=last_state,
                                     reason=f"checking failed: {e!r}") from e

            if done:
                logger.info(f"Reached the desired state: {desc}")
                return

            remaining = deadline - loop.time()
            if remaining <= 0:
                logger.warning(f"Gave up waiting for {desc} after {timeout}s.")
                raise WaitTimeoutError(name, description=desc, last_state=last_state,
                                       reason=f"timed out after {timeout}s")

            logger.debug(f"Still waiting for {desc}; next check in {min(interval, remaining)}s.")
            await aiotime.sleep([interval, remaining])


async def check_configuration_state(
        client: ConfigurationsReader,
        name: str,
        in_state: Predicate,
        *,
        logger: Optional[typedefs.Logger] = None,
) -> None:
    """
    Verify that the configuration is in the desired state right now.

    This is the non-polling variety of `wait_for_configuration_state`:
    the "not yet" result is a failure, not a reason to check again.
    """
    if not name:
        raise ValueError("The configuration's name must be specified.")
    logger = logger if logger is not None else _make_logger(client, name)
    try:
        cfg = await client.get(name)
    except Exception as e:
        raise FetchError(name, reason=f"fetching failed: {e!r}") from e

    try:
        done = in_state(cfg)
    except Exception as e:
        raise PredicateError(name, last_state=cfg, reason=f"checking failed: {e!r}") from e

    if not done:
        logger.warning("Not in the desired state.")
        raise NotInDesiredStateError(name, last_state=cfg)


async def wait_for_config_latest_revision(
        client: ConfigurationsReader,
        names: configurations.ResourceNames,
        *,
        settings: configuration.Settings,
        logger: Optional[typedefs.Logger] = None,
) -> str:
    """
    Wait for a new revision to be created, and then for the same one to be ready.

    A revision is "new" if it differs from ``names.revision`` (the one known
    before the change; empty if none). Once a new one is detected, the wait
    continues until the configuration reports that very revision as ready,
    not just any ready revision. Both steps have their own timeouts.

    Returns the name of the new ready revision. On failure, the error of the
    step that has failed is raised; if it is the readiness step, the error's
    ``revision_name`` contains the name of the created (but not ready) revision.
    """
    revision_name = ''

    def has_new_revision(cfg: bodies.Configuration) -> bool:
        nonlocal revision_name
        if cfg.status.latest_created_revision_name != names.revision:
            revision_name = cfg.status.latest_created_revision_name
            return True
        return False

    def has_ready_revision(cfg: bodies.Configuration) -> bool:
        return cfg.status.latest_ready_revision_name == revision_name

    await wait_for_configuration_state(client, names.config, has_new_revision,
                                       "ConfigurationUpdatedWithRevision",
                                       settings=settings, logger=logger)
    try:
        await wait_for_configuration_state(client, names.config, has_ready_revision,
                                           "ConfigurationReadyWithRevision",
                                           settings=settings, logger=logger)
    except ConfigurationStateError as e:
        e.revision_name = revision_name
        raise
    return revision_name
