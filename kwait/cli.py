import asyncio
import copy
import dataclasses
import functools
from typing import Any, Awaitable, Callable, Collection, Optional, TypeVar

import click

from kwait._cogs.clients import auth, errors
from kwait._cogs.configs import configuration
from kwait._cogs.structs import credentials
from kwait._core.actions import predicates, waiting
from kwait._core.engines import loggers
from kwait._core.intents import configurations

_T = TypeVar('_T')


@dataclasses.dataclass()
class CLIControls:
    """ Controls, which are impossible to pass via CLI (e.g. in tests). """
    settings: Optional[configuration.Settings] = None
    info: Optional[credentials.ConnectionInfo] = None


class LogFormatParamType(click.Choice):

    def __init__(self) -> None:
        super().__init__(choices=[v.name.lower() for v in loggers.LogFormat])

    def convert(self, value: Any, param: Any, ctx: Any) -> loggers.LogFormat:
        if isinstance(value, loggers.LogFormat):
            return value
        name: str = super().convert(value, param, ctx)
        return loggers.LogFormat[name.upper()]


def logging_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """ A decorator to configure logging in all commands the same way."""
    @click.option('-v', '--verbose', is_flag=True)
    @click.option('-d', '--debug', is_flag=True)
    @click.option('-q', '--quiet', is_flag=True)
    @click.option('--log-format', type=LogFormatParamType(), default='full')
    @click.option('--log-prefix/--no-log-prefix', default=None)
    @functools.wraps(fn)  # to preserve other opts/args
    def wrapper(verbose: bool, quiet: bool, debug: bool,
                log_format: loggers.LogFormat = loggers.LogFormat.FULL,
                log_prefix: Optional[bool] = None,
                *args: Any, **kwargs: Any) -> Any:
        loggers.configure(debug=debug, verbose=verbose, quiet=quiet,
                          log_format=log_format, log_prefix=log_prefix)
        return fn(*args, **kwargs)

    return wrapper


def connection_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """ A decorator to add the cluster & namespace options to all commands. """
    fn = click.option('--kubeconfig', type=str, envvar='KUBECONFIG')(fn)
    fn = click.option('-n', '--namespace', type=str, default=None)(fn)
    return fn


def run_with_client(
        controls: CLIControls,
        *,
        kubeconfig: Optional[str],
        namespace: Optional[str],
        fn: Callable[[configurations.ConfigurationsClient], Awaitable[_T]],
) -> _T:
    """
    Login, run the activity with a ready-to-use client, and report the failures.
    """
    async def _run() -> _T:
        settings = controls.settings if controls.settings is not None else configuration.Settings()
        info = controls.info if controls.info is not None else auth.login_with_kubeconfig(kubeconfig)
        async with auth.APIContext(info) as context:
            client = configurations.ConfigurationsClient(
                context=context,
                settings=settings,
                namespace=namespace,
            )
            return await fn(client)

    try:
        return asyncio.run(_run())
    except (errors.APIError, waiting.ConfigurationStateError, credentials.LoginError) as e:
        raise click.ClickException(str(e)) from e


@click.group(name='kwait', context_settings=dict(
    auto_envvar_prefix='KWAIT',
))
@click.version_option(prog_name='kwait')
def main() -> None:
    pass


@main.command()
@logging_options
@connection_options
@click.option('-r', '--revision', type=str, default='',
              help="The revision known before the change, if any.")
@click.option('-i', '--interval', type=float, default=None)
@click.option('-t', '--timeout', type=float, default=None)
@click.argument('name')
@click.make_pass_decorator(CLIControls, ensure=True)
def wait(
        __controls: CLIControls,
        name: str,
        revision: str,
        interval: Optional[float],
        timeout: Optional[float],
        namespace: Optional[str],
        kubeconfig: Optional[str],
) -> None:
    """ Wait until a new revision of a configuration is created and ready. """
    settings = copy.deepcopy(__controls.settings or configuration.Settings())
    if interval is not None:
        settings.polling.interval = interval
    if timeout is not None:
        settings.polling.timeout = timeout
    controls = dataclasses.replace(__controls, settings=settings)
    names = configurations.ResourceNames(config=name, revision=revision)

    async def fn(client: configurations.ConfigurationsClient) -> str:
        return await waiting.wait_for_config_latest_revision(client, names, settings=settings)

    revision_name = run_with_client(controls, kubeconfig=kubeconfig, namespace=namespace, fn=fn)
    click.echo(revision_name)


@main.command()
@logging_options
@connection_options
@click.argument('name')
@click.make_pass_decorator(CLIControls, ensure=True)
def check(
        __controls: CLIControls,
        name: str,
        namespace: Optional[str],
        kubeconfig: Optional[str],
) -> None:
    """ Check that a configuration has created a revision (without waiting). """
    async def fn(client: configurations.ConfigurationsClient) -> None:
        await waiting.check_configuration_state(
            client, name, predicates.configuration_has_created_revision)

    run_with_client(__controls, kubeconfig=kubeconfig, namespace=namespace, fn=fn)


@main.command()
@logging_options
@connection_options
@click.option('-l', '--label', 'labels', multiple=True, help="A label as KEY=VALUE.")
@click.argument('name')
@click.argument('image')
@click.make_pass_decorator(CLIControls, ensure=True)
def create(
        __controls: CLIControls,
        name: str,
        image: str,
        labels: Collection[str],
        namespace: Optional[str],
        kubeconfig: Optional[str],
) -> None:
    """ Create a configuration with a test image (by its short name). """
    options = []
    for label in labels:
        key, sep, value = label.partition('=')
        if not sep:
            raise click.BadParameter(f"Labels must be KEY=VALUE, got {label!r}.")
        options.append(configurations.with_config_label(key, value))
    names = configurations.ResourceNames(config=name, image=image)

    async def fn(client: configurations.ConfigurationsClient) -> str:
        cfg = await configurations.create_configuration(client, names, *options)
        return cfg.name

    click.echo(run_with_client(__controls, kubeconfig=kubeconfig, namespace=namespace, fn=fn))


@main.command('patch-image')
@logging_options
@connection_options
@click.argument('name')
@click.argument('image_path')
@click.make_pass_decorator(CLIControls, ensure=True)
def patch_image(
        __controls: CLIControls,
        name: str,
        image_path: str,
        namespace: Optional[str],
        kubeconfig: Optional[str],
) -> None:
    """ Patch the container image of a configuration (by its full path). """
    async def fn(client: configurations.ConfigurationsClient) -> str:
        cfg = await client.get(name)
        patched = await configurations.patch_config_image(client, cfg, image_path)
        return patched.name

    click.echo(run_with_client(__controls, kubeconfig=kubeconfig, namespace=namespace, fn=fn))
