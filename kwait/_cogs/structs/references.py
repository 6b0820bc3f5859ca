import dataclasses
from typing import NewType

# A namespace where the configurations of one test live.
Namespace = NewType('Namespace', str)


@dataclasses.dataclass(frozen=True)
class Resource:
    """
    The API endpoint of a namespaced resource kind, such as Knative's configurations.

    The API version is not fixed: the same helpers work with the older
    ``v1alpha1`` and the newer ``v1`` of Knative Serving, if overridden.
    """
    group: str
    version: str
    plural: str
    kind: str

    @property
    def api_version(self) -> str:
        return f'{self.group}/{self.version}'

    def __repr__(self) -> str:
        return f'{self.plural}.{self.version}.{self.group}'

    def get_url(self, *, namespace: str, name: str = '') -> str:
        """
        Build the server-relative URL of the resource list, or of one object if named.
        """
        if not namespace:
            raise ValueError(f"A namespace is required for {self!r}.")
        url = f'/apis/{self.group}/{self.version}/namespaces/{namespace}/{self.plural}'
        return f'{url}/{name}' if name else url


CONFIGURATIONS = Resource('serving.knative.dev', 'v1alpha1', 'configurations', 'Configuration')
