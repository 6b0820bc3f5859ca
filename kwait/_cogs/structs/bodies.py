"""
All the structures coming from/to the Kubernetes API.

Everything marked "raw" is a plain unwrapped unprocessed data as JSON-decoded
from Kubernetes API, usually as retrieved in the fetching API calls.
For strict type-checking, the raw dicts are detailed to the per-field level
(e.g. `TypedDict` instead of just ``Mapping[Any, Any]``) -- as used here.

The parsed snapshots (`Configuration`, `ConfigurationStatus`, `Condition`)
are immutable: they represent the resource's state at one moment in time,
as it was observed by one fetch. They never change after they are created,
so they can be safely kept as the "last seen" state of a wait.
"""
import dataclasses
import datetime
from typing import Any, List, Mapping, Optional, Tuple

import iso8601
from typing_extensions import TypedDict


class RawMeta(TypedDict, total=False):
    uid: str
    name: str
    namespace: str
    generation: int
    labels: Mapping[str, str]
    annotations: Mapping[str, str]
    resourceVersion: str
    creationTimestamp: str


class RawCondition(TypedDict, total=False):
    type: str
    status: str
    reason: str
    message: str
    lastTransitionTime: str


class RawConfigurationStatus(TypedDict, total=False):
    observedGeneration: int
    latestCreatedRevisionName: str
    latestReadyRevisionName: str
    conditions: List[RawCondition]


class RawBody(TypedDict, total=False):
    apiVersion: str
    kind: str
    metadata: RawMeta
    spec: Mapping[str, Any]
    status: Mapping[str, Any]


@dataclasses.dataclass(frozen=True)
class Condition:
    type: str
    status: str = 'Unknown'
    reason: Optional[str] = None
    message: Optional[str] = None
    last_transition_time: Optional[datetime.datetime] = None

    @property
    def is_true(self) -> bool:
        return self.status == 'True'

    @property
    def is_false(self) -> bool:
        return self.status == 'False'

    @classmethod
    def parse(cls, raw: RawCondition) -> "Condition":
        ltt = raw.get('lastTransitionTime')
        return cls(
            type=raw.get('type', ''),
            status=raw.get('status', 'Unknown'),
            reason=raw.get('reason') or None,
            message=raw.get('message') or None,
            last_transition_time=iso8601.parse_date(ltt) if ltt else None,
        )


@dataclasses.dataclass(frozen=True)
class ConfigurationStatus:
    """
    The observed state of a configuration, as reported by its controller.

    The revision names are empty strings if no revision is created/ready yet.
    """
    latest_created_revision_name: str = ''
    latest_ready_revision_name: str = ''
    observed_generation: Optional[int] = None
    conditions: Tuple[Condition, ...] = ()

    @classmethod
    def parse(cls, raw: Optional[Mapping[str, Any]]) -> "ConfigurationStatus":
        raw = raw or {}
        return cls(
            latest_created_revision_name=raw.get('latestCreatedRevisionName') or '',
            latest_ready_revision_name=raw.get('latestReadyRevisionName') or '',
            observed_generation=raw.get('observedGeneration'),
            conditions=tuple(Condition.parse(c) for c in raw.get('conditions') or []),
        )

    def get_condition(self, type: str) -> Optional[Condition]:
        for condition in self.conditions:
            if condition.type == type:
                return condition
        return None


@dataclasses.dataclass(frozen=True)
class Configuration:
    """
    A read-only snapshot of a configuration as fetched from the API.

    The original raw body is kept for building the patches against it,
    but it must not be modified: make a deep copy first.
    """
    name: str
    namespace: Optional[str]
    generation: Optional[int]
    spec: Mapping[str, Any]
    status: ConfigurationStatus
    raw: RawBody = dataclasses.field(repr=False, compare=False)

    @classmethod
    def parse(cls, raw: RawBody) -> "Configuration":
        meta = raw.get('metadata', {})
        return cls(
            name=meta.get('name', ''),
            namespace=meta.get('namespace'),
            generation=meta.get('generation'),
            spec=raw.get('spec', {}),
            status=ConfigurationStatus.parse(raw.get('status')),
            raw=raw,
        )
