from kwait._cogs.clients import api, auth
from kwait._cogs.configs import configuration
from kwait._cogs.helpers import typedefs
from kwait._cogs.structs import bodies, references


async def read_obj(
        *,
        context: auth.APIContext,
        settings: configuration.Settings,
        resource: references.Resource,
        namespace: references.Namespace,
        name: str,
        logger: typedefs.Logger,
) -> bodies.RawBody:
    """
    Read one object by its name.

    The absent objects are not defaulted to empty bodies: for the waiters,
    a configuration that disappeared is a failure, so HTTP 404 escalates.
    """
    obj: bodies.RawBody = await api.call(
        'get',
        resource.get_url(namespace=namespace, name=name),
        context=context,
        settings=settings,
        logger=logger,
    )
    return obj
