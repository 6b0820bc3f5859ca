from kwait._cogs.clients import api, auth
from kwait._cogs.configs import configuration
from kwait._cogs.helpers import typedefs
from kwait._cogs.structs import bodies, references


async def create_obj(
        *,
        context: auth.APIContext,
        settings: configuration.Settings,
        resource: references.Resource,
        namespace: references.Namespace,
        body: bodies.RawBody,
        logger: typedefs.Logger,
) -> bodies.RawBody:
    """
    Create an object in the namespace and return it as stored by the server.

    The namespace in the body's metadata, if present, prevails.
    """
    namespace = body.setdefault('metadata', {}).setdefault('namespace', namespace)
    created_body: bodies.RawBody = await api.call(
        'post',
        resource.get_url(namespace=namespace),
        payload=body,
        context=context,
        settings=settings,
        logger=logger,
    )
    return created_body
