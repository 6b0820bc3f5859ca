from kwait._cogs.clients import api, auth
from kwait._cogs.configs import configuration
from kwait._cogs.helpers import typedefs
from kwait._cogs.structs import bodies, patches, references


async def patch_obj(
        *,
        context: auth.APIContext,
        settings: configuration.Settings,
        resource: references.Resource,
        namespace: references.Namespace,
        name: str,
        patch: patches.JSONPatch,
        logger: typedefs.Logger,
) -> bodies.RawBody:
    """
    Apply a JSON patch (RFC 6902) and return the object as patched by the server.

    The patch is applied atomically or not at all: if one of its operations
    does not match the current object, the server refuses the whole patch.
    """
    patched_body: bodies.RawBody = await api.call(
        'patch',
        resource.get_url(namespace=namespace, name=name),
        headers={'Content-Type': 'application/json-patch+json'},
        payload=patch,
        context=context,
        settings=settings,
        logger=logger,
    )
    return patched_body
