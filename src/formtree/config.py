"""
Pluggable value classification for the field tree.

Node factories ask this module whether a value is a collection (and gets a
FieldCollection) or a leaf (and cannot hold child slots). Everything else is
treated as a container whose slots are reached by item or attribute access.
"""

from typing import Any, Tuple

_DEFAULT_COLLECTION_TYPES: Tuple[type, ...] = (list,)
_DEFAULT_LEAF_TYPES: Tuple[type, ...] = (str, bytes, int, float, complex, bool, type(None))

_collection_types: Tuple[type, ...] = _DEFAULT_COLLECTION_TYPES
_leaf_types: Tuple[type, ...] = _DEFAULT_LEAF_TYPES


def set_collection_types(*types: type) -> None:
    """Set the value types that are materialized as FieldCollection nodes.

    Collection writes always produce a new list, so every type registered here
    must accept being replaced by one.
    """
    global _collection_types
    if not types:
        raise ValueError("At least one collection type is required")
    _collection_types = tuple(types)


def get_collection_types() -> Tuple[type, ...]:
    """Get the value types materialized as FieldCollection nodes."""
    return _collection_types


def set_leaf_types(*types: type) -> None:
    """Set the value types that cannot hold child slots."""
    global _leaf_types
    _leaf_types = tuple(types)


def get_leaf_types() -> Tuple[type, ...]:
    """Get the value types that cannot hold child slots."""
    return _leaf_types


def is_collection(value: Any) -> bool:
    return isinstance(value, _collection_types)


def is_leaf(value: Any) -> bool:
    return isinstance(value, _leaf_types) and not is_collection(value)


def reset_config() -> None:
    """Restore default classification. For testing only."""
    global _collection_types, _leaf_types
    _collection_types = _DEFAULT_COLLECTION_TYPES
    _leaf_types = _DEFAULT_LEAF_TYPES
