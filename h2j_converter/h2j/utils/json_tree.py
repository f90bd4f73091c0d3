"""
Helpers for assembling JSON trees out of independently resolved leaves.

A template array element is rebuilt one leaf at a time: each leaf becomes a
skeleton (a chain of single-key objects ending in its value) and the
skeletons are grafted onto each other.
"""

from typing import Any, Dict, Sequence


def build_skeleton(keys: Sequence[str], leaf: Any) -> Any:
    """
    Build the minimal nested object holding ``leaf`` under ``keys``.

    Args:
        keys: Property names from the outermost to the innermost level
        leaf: Value stored at the innermost level

    Returns:
        ``{keys[0]: {keys[1]: ... leaf}}``, or ``leaf`` itself for no keys
    """
    node = leaf
    for key in reversed(keys):
        node = {key: node}
    return node


def graft_merge(target: Any, branch: Any) -> Any:
    """
    Merge ``branch`` into ``target``.

    Keys shared by both sides are descended while both values are objects;
    at the first divergence the rest of the branch is grafted under the
    matching point of ``target``. Non-object values in ``branch`` replace
    what ``target`` holds at the same place.

    Args:
        target: Tree receiving the branch (mutated in place when an object)
        branch: Tree to splice in

    Returns:
        The merged tree
    """
    if not isinstance(target, dict) or not isinstance(branch, dict):
        return branch

    for key, value in branch.items():
        existing = target.get(key)
        if isinstance(existing, dict) and isinstance(value, dict):
            graft_merge(existing, value)
        else:
            target[key] = value
    return target


def replace_key(obj: Dict[str, Any], old_key: str, new_key: Any, value: Any) -> None:
    """
    Replace ``old_key`` by ``new_key`` keeping the property's position.

    When ``new_key`` is None the property is removed.
    """
    items = list(obj.items())
    obj.clear()
    for key, current in items:
        if key != old_key:
            obj[key] = current
        elif new_key is not None:
            obj[new_key] = value
