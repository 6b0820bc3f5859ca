import functools
import logging

import click.testing
import pytest

from kwait._cogs.configs.configuration import Settings
from kwait._cogs.structs.credentials import ConnectionInfo
from kwait.cli import CLIControls, main


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """ Every CLI command adds its own handler to the root logger. """
    logger = logging.getLogger()
    original_handlers = logger.handlers[:]
    original_level = logger.level
    yield
    logger.handlers[:] = original_handlers
    logger.setLevel(original_level)


@pytest.fixture()
def settings():
    return Settings()


@pytest.fixture()
def controls(settings, hostname):
    return CLIControls(settings=settings, info=ConnectionInfo(server=f'https://{hostname}'))


@pytest.fixture()
def runner():
    runner = click.testing.CliRunner()
    return runner


@pytest.fixture()
def invoke(runner, controls):
    return functools.partial(runner.invoke, main, obj=controls)
