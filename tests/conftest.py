import io
import json
import logging
import re
from unittest.mock import AsyncMock, Mock

import pytest

from kwait._cogs.clients.auth import APIContext
from kwait._cogs.configs.configuration import Settings
from kwait._cogs.structs.credentials import ConnectionInfo
from kwait._cogs.structs.references import CONFIGURATIONS, Resource
from kwait._core.engines.loggers import ObjectTextFormatter
from kwait._core.intents.configurations import ConfigurationsClient

LIBRARY_LOGGERS = ['asyncio', 'aiohttp']


def pytest_configure(config):
    config.addinivalue_line('markers', "e2e: end-to-end tests against a cluster with Knative.")


def pytest_addoption(parser):
    parser.addoption("--only-e2e", action="store_true", help="Run only the end-to-end tests.")
    parser.addoption("--with-e2e", action="store_true", help="Run the end-to-end tests too.")


def pytest_collection_modifyitems(config, items):
    """
    Skip the end-to-end tests (the examples) unless explicitly requested.

    They need a real cluster with Knative Serving, which is rarely available.
    When requested, they go last, as they are the slowest ones.
    """
    e2e = [item for item in items if item.location[0].startswith('examples/')]
    unit = [item for item in items if item not in e2e]
    for item in e2e:
        item.add_marker(pytest.mark.e2e)

    if config.getoption('--only-e2e'):
        items[:] = e2e
    elif config.getoption('--with-e2e'):
        items[:] = unit + e2e
    else:
        skip = pytest.mark.skip(reason="Use --with-e2e/--only-e2e to run against a cluster.")
        for item in e2e:
            item.add_marker(skip)


@pytest.fixture(autouse=True)
def _restore_library_loggers():
    """ Logging configuration changes the libraries' loggers; keep the tests isolated. """
    states = [(logger, logger.propagate, logger.level, logger.handlers[:])
              for logger in map(logging.getLogger, LIBRARY_LOGGERS)]
    yield
    for logger, propagate, level, handlers in states:
        logger.propagate = propagate
        logger.setLevel(level)
        logger.handlers[:] = handlers


@pytest.fixture()
def settings():
    return Settings()


@pytest.fixture()
def resource() -> Resource:
    return CONFIGURATIONS


@pytest.fixture()
def namespace():
    return 'ns'


@pytest.fixture()
def logger():
    return logging.getLogger('kwait.tests')


@pytest.fixture()
def hostname():
    """ A fake API server: `aresponses` intercepts all requests to it. """
    return 'fake-host'


@pytest.fixture()
async def context(hostname):
    async with APIContext(ConnectionInfo(server=f'https://{hostname}')) as context:
        yield context


@pytest.fixture()
def client(context, settings, namespace, logger):
    return ConfigurationsClient(context=context, settings=settings, namespace=namespace,
                                logger=logger)


@pytest.fixture()
def resp_mocker(aresponses):
    """
    Make `aresponses` handlers that record the requests they have served.

    The arguments are those of `Mock`: the response (or the exception)
    is its ``return_value`` or ``side_effect``. The served requests are then
    in the handler's ``call_args_list``, with their decoded JSON (or text)
    bodies stored as ``request.data``::

        handler = resp_mocker(return_value=aiohttp.web.json_response({}))
        aresponses.add(hostname, '/apis/x', 'get', handler)
        ...
        assert handler.call_args_list[0][0][0].data == {...}
    """
    def make_handler(*args, **kwargs):
        responses = Mock(*args, **kwargs)

        async def serve(request):
            try:
                request.data = await request.json()
            except json.JSONDecodeError:
                request.data = await request.text()
            return responses()

        return AsyncMock(side_effect=serve)
    return make_handler


@pytest.fixture()
def logstream(caplog):
    """
    Capture the log output as rendered by our text formatter, prefixes included.

    The records in ``caplog`` are not formatted, so their prefixes are not seen there.
    """
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(ObjectTextFormatter('prefix %(message)s'))
    root = logging.getLogger()
    root.addHandler(handler)
    try:
        with caplog.at_level(logging.DEBUG):
            yield stream
    finally:
        root.removeHandler(handler)


@pytest.fixture()
def assert_logs(caplog):
    """
    Check that the messages matching the patterns are logged in that order.

    Other messages in between are allowed. The ``prohibited`` patterns
    must match none of the messages.
    """
    caplog.set_level(logging.DEBUG)

    def assert_logs_fn(patterns=(), prohibited=()):
        __traceback_hide__ = True
        messages = list(caplog.messages)

        for message in messages:
            for pattern in prohibited:
                if re.search(pattern, message):
                    raise AssertionError(f"Prohibited log pattern found: {message!r} ~ {pattern!r}")

        position = 0
        for pattern in patterns:
            for index in range(position, len(messages)):
                if re.search(pattern, messages[index]):
                    position = index + 1
                    break
            else:
                raise AssertionError(f"Pattern not found in order: {pattern!r}")

    return assert_logs_fn
