"""
Everything to construct, create, and modify the configurations in tests.

The bodies are built as raw dicts, the same as they are sent to the API.
The customisations are done with "options": callables that get the raw body
and modify it in place before it is sent; e.g.::

    names = ResourceNames(config='cfg1', image='helloworld')
    cfg = await create_configuration(client, names, with_config_label('team', 'a'))

Mind that these are the test helpers: they do not implement any reconciliation.
The configurations are then processed by the Knative controller in the cluster.
"""
import copy
import dataclasses
import logging
from typing import Any, Callable, Dict, MutableMapping, Optional

import yaml

from kwait._cogs.clients import auth, creating, fetching, patching
from kwait._cogs.configs import configuration
from kwait._cogs.helpers import typedefs
from kwait._cogs.structs import bodies, patches, references

ConfigOption = Callable[[bodies.RawBody], None]


@dataclasses.dataclass(frozen=True)
class ResourceNames:
    """
    The names of the resources used in one test.

    ``revision`` is the name of the revision known before the change, if any.
    It is used to detect the newly created revisions after the change.
    """
    config: str
    revision: str = ''
    image: str = ''


def image_path(name: str, *, settings: configuration.Settings) -> str:
    """ Build the full image path as pushed by ``ko``: ``repository/name:tag``. """
    return f"{settings.images.repository}/{name}:{settings.images.tag}"


def configuration_spec(image_path: str) -> Dict[str, Any]:
    return {
        'template': {
            'spec': {
                'containers': [{
                    'image': image_path,
                }],
            },
        },
    }


def legacy_configuration_spec(image_path: str) -> Dict[str, Any]:
    """
    The same as `configuration_spec`, but in the deprecated (pre-v1) format.
    Used to check that the controller still accepts the old manifests.
    """
    return {
        'revisionTemplate': {
            'spec': {
                'container': {
                    'image': image_path,
                },
            },
        },
    }


def build_configuration(
        names: ResourceNames,
        *options: ConfigOption,
        settings: configuration.Settings,
        resource: references.Resource = references.CONFIGURATIONS,
) -> bodies.RawBody:
    body: bodies.RawBody = {
        'apiVersion': resource.api_version,
        'kind': resource.kind,
        'metadata': {'name': names.config},
        'spec': configuration_spec(image_path(names.image, settings=settings)),
    }
    for option in options:
        option(body)
    return body


def with_config_label(key: str, value: str) -> ConfigOption:
    def option(body: bodies.RawBody) -> None:
        labels = body.setdefault('metadata', {}).setdefault('labels', {})
        labels[key] = value  # type: ignore
    return option


def with_config_env(name: str, value: str) -> ConfigOption:
    def option(body: bodies.RawBody) -> None:
        container = get_container(body.get('spec', {}))  # type: ignore
        container.setdefault('env', []).append({'name': name, 'value': value})
    return option


def get_container(spec: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    """
    Get the revision template's only container, in the current or legacy format.
    """
    template = spec.get('template') or spec.get('revisionTemplate')
    if not template:
        raise ValueError("The configuration has no revision template.")
    template_spec = template.setdefault('spec', {})
    if template_spec.get('containers'):
        return template_spec['containers'][0]  # type: ignore
    elif template_spec.get('container'):
        return template_spec['container']  # type: ignore
    else:
        raise ValueError("The configuration's revision template has no containers.")


class ConfigurationsClient:
    """
    A client for the configurations in one namespace.

    It gives the read-only snapshots (`Configuration`) of the resources,
    both for the fetched and the created/patched objects.
    """

    def __init__(
            self,
            *,
            context: auth.APIContext,
            settings: configuration.Settings,
            namespace: Optional[str] = None,
            resource: references.Resource = references.CONFIGURATIONS,
            logger: Optional[typedefs.Logger] = None,
    ) -> None:
        super().__init__()
        self.context = context
        self.settings = settings
        self.resource = resource
        self.namespace = references.Namespace(
            namespace or context.default_namespace or 'default')
        self.logger = logger if logger is not None else logging.getLogger('kwait.clients')

    async def get(self, name: str) -> bodies.Configuration:
        raw = await fetching.read_obj(
            context=self.context,
            settings=self.settings,
            resource=self.resource,
            namespace=self.namespace,
            name=name,
            logger=self.logger,
        )
        return bodies.Configuration.parse(raw)

    async def create(self, body: bodies.RawBody) -> bodies.Configuration:
        raw = await creating.create_obj(
            context=self.context,
            settings=self.settings,
            resource=self.resource,
            namespace=self.namespace,
            body=body,
            logger=self.logger,
        )
        return bodies.Configuration.parse(raw)

    async def patch(self, name: str, patch: patches.JSONPatch) -> bodies.Configuration:
        raw = await patching.patch_obj(
            context=self.context,
            settings=self.settings,
            resource=self.resource,
            namespace=self.namespace,
            name=name,
            patch=patch,
            logger=self.logger,
        )
        return bodies.Configuration.parse(raw)


async def create_configuration(
        client: ConfigurationsClient,
        names: ResourceNames,
        *options: ConfigOption,
) -> bodies.Configuration:
    """
    Create a configuration with the name ``names.config``
    that uses the image specified by ``names.image``.
    """
    body = build_configuration(names, *options, settings=client.settings, resource=client.resource)
    client.logger.info(f"Creating a configuration {names.config!r}:\n{yaml.safe_dump(body)}")
    return await client.create(body)


async def patch_config_image(
        client: ConfigurationsClient,
        cfg: bodies.Configuration,
        image_path: str,
) -> bodies.Configuration:
    """
    Patch the existing configuration with a new image path.
    Returns the configuration as patched by the server.
    """
    new_body = copy.deepcopy(cfg.raw)
    get_container(new_body.setdefault('spec', {}))['image'] = image_path  # type: ignore
    patch = patches.make_json_patch(cfg.raw, new_body)
    client.logger.info(f"Patching the image of a configuration {cfg.name!r} to {image_path!r}.")
    return await client.patch(cfg.name, patch)
