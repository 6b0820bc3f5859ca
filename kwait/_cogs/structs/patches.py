"""
All the structures needed for Kubernetes patching.

The patches are JSON patches (RFC 6902): the lists of operations,
as calculated by comparing the original and the desired bodies.

Only the ``add``, ``replace``, ``remove`` operations are generated.
The lists of different lengths are replaced as a whole; the lists of the same
length are compared item by item (which is typical for the containers).
"""
import collections.abc
from typing import Any, List, Optional

from typing_extensions import Literal, TypedDict

JSONPatchOp = Literal["add", "replace", "remove"]


def _escaped_path(keys: List[str]) -> str:
    """Provides an appropriately escaped path for JSON Patches.

    See https://datatracker.ietf.org/doc/html/rfc6901#section-3 for more details.
    """
    return '/'.join(map(lambda key: key.replace('~', '~0').replace('/', '~1'), keys))


class JSONPatchItem(TypedDict, total=False):
    op: JSONPatchOp
    path: str
    value: Optional[Any]


JSONPatch = List[JSONPatchItem]


def make_json_patch(old: object, new: object) -> JSONPatch:
    """
    Calculate a JSON patch which turns the old body into the new one.
    """
    return _diff(old, new, keys=[''])


def _diff(old: object, new: object, keys: List[str]) -> JSONPatch:
    result: JSONPatch = []
    if isinstance(old, collections.abc.Mapping) and isinstance(new, collections.abc.Mapping):
        for key in old:
            if key not in new:
                result.append(JSONPatchItem(op='remove', path=_escaped_path(keys + [key])))
        for key, val in new.items():
            if key not in old:
                result.append(JSONPatchItem(op='add', path=_escaped_path(keys + [key]), value=val))
            else:
                result.extend(_diff(old[key], val, keys + [key]))
    elif _is_list(old) and _is_list(new) and len(old) == len(new):  # type: ignore
        for idx, (old_item, new_item) in enumerate(zip(old, new)):  # type: ignore
            result.extend(_diff(old_item, new_item, keys + [str(idx)]))
    elif old != new:
        result.append(JSONPatchItem(op='replace', path=_escaped_path(keys), value=new))
    return result


def _is_list(value: object) -> bool:
    return isinstance(value, collections.abc.Sequence) and not isinstance(value, (str, bytes))
