import pytest

from kwait._cogs.structs.bodies import Configuration


def make_cfg(created='', ready='', *, name='cfg', generation=None, observed=None, conditions=()):
    return Configuration.parse({
        'apiVersion': 'serving.knative.dev/v1alpha1',
        'kind': 'Configuration',
        'metadata': {'name': name, 'namespace': 'ns', 'generation': generation},
        'status': {
            'latestCreatedRevisionName': created,
            'latestReadyRevisionName': ready,
            'observedGeneration': observed,
            'conditions': list(conditions),
        },
    })


class FakeConfigurationsClient:
    """
    Returns the fed states one by one on every fetch, and then the last one forever.
    Exceptions among the fed states are raised instead of returning them.
    """

    def __init__(self):
        super().__init__()
        self.items = []
        self.names = []

    @property
    def fetches(self):
        return len(self.names)

    def feed(self, *items):
        self.items.extend(items)

    async def get(self, name):
        self.names.append(name)
        item = self.items[min(len(self.names), len(self.items)) - 1]
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture()
def client():
    return FakeConfigurationsClient()


@pytest.fixture()
def settings(settings):
    settings.polling.interval = 1.0
    settings.polling.timeout = 10.0
    return settings


@pytest.fixture()
def cfg():
    """ A factory of configurations with specific revision names in the status. """
    return make_cfg
