"""
Accessors: the read/write capability a field node holds on its slot.

A field node never touches the data object directly. It reads and writes
through exactly one accessor, and the accessor is the only writer of the
data at that slot.

- RootAccessor: owns the whole data object
- SlotAccessor: one key (or attribute) of the parent's value, written in place
- ElementAccessor: one position of a collection, written by replacing the list
- TrackingAccessor: remembers the last list a collection wrote, to spot replacement from above
"""
from abc import ABC, abstractmethod
from collections.abc import Mapping, MutableMapping, MutableSequence, Sequence
from typing import Any, Hashable, Optional

from formtree.exceptions import DetachedFieldError


class Accessor(ABC):
    """Get/set pair bound to one slot of the data object."""

    @property
    def key(self) -> Optional[Hashable]:
        """Key of the slot inside its container (None for the root)."""
        return None

    @abstractmethod
    def get_state(self) -> Any:
        """Read the slot."""

    @abstractmethod
    def set_state(self, value: Any) -> None:
        """Write the slot."""


class RootAccessor(Accessor):
    """Holds the whole data object in a private attribute."""

    def __init__(self, data: Any):
        self._data = data

    def get_state(self) -> Any:
        return self._data

    def set_state(self, value: Any) -> None:
        self._data = value

    def __repr__(self) -> str:
        return f"RootAccessor({type(self._data).__name__})"


def read_slot(container: Any, key: Hashable) -> Any:
    """Read ``key`` from a mapping, sequence, or plain object."""
    if isinstance(container, (Mapping, Sequence)) and not isinstance(container, (str, bytes)):
        return container[key]
    if not isinstance(key, str):
        raise KeyError(key)
    return getattr(container, key)


def write_slot(container: Any, key: Hashable, value: Any) -> None:
    """Write ``key`` of a mutable mapping, mutable sequence, or plain object in place."""
    if isinstance(container, (MutableMapping, MutableSequence)):
        container[key] = value
        return
    if isinstance(container, (Mapping, Sequence)):
        raise TypeError(f"{type(container).__name__} slots are read-only")
    if not isinstance(key, str):
        raise KeyError(key)
    setattr(container, key, value)


class SlotAccessor(Accessor):
    """One slot of the value held by a parent accessor.

    The parent's value is looked up on every access, so a slot keeps working
    after the parent value has been replaced.
    """

    def __init__(self, parent: Accessor, key: Hashable):
        self._parent = parent
        self._key = key

    @property
    def key(self) -> Hashable:
        return self._key

    def get_state(self) -> Any:
        return read_slot(self._parent.get_state(), self._key)

    def set_state(self, value: Any) -> None:
        write_slot(self._parent.get_state(), self._key, value)

    def __repr__(self) -> str:
        return f"SlotAccessor({self._key!r})"


class ElementAccessor(Accessor):
    """One position of a collection's backing list.

    ``index`` is maintained by the owning collection on every structural
    edit. Writes copy the backing list, replace the element and hand the new
    list to the collection accessor.
    """

    def __init__(self, collection: Accessor, index: int):
        self._collection = collection
        self.index: Optional[int] = index

    @property
    def key(self) -> Optional[int]:
        return self.index

    @property
    def attached(self) -> bool:
        return self.index is not None

    def detach(self) -> None:
        self.index = None

    def _require_index(self) -> int:
        if self.index is None:
            raise DetachedFieldError("Collection element was removed from its collection")
        return self.index

    def get_state(self) -> Any:
        return self._collection.get_state()[self._require_index()]

    def set_state(self, value: Any) -> None:
        index = self._require_index()
        items = list(self._collection.get_state())
        items[index] = value
        self._collection.set_state(items)

    def __repr__(self) -> str:
        return f"ElementAccessor(index={self.index!r})"


class TrackingAccessor(Accessor):
    """Wraps a collection's accessor and keeps the list it last wrote.

    When an ancestor replaces the object holding the collection, the slot
    reads a different list than the one written here; ``replaced`` reports it.
    """

    def __init__(self, inner: Accessor):
        self._inner = inner
        self._written = inner.get_state()

    @property
    def key(self) -> Optional[Hashable]:
        return self._inner.key

    @property
    def replaced(self) -> bool:
        return self._inner.get_state() is not self._written

    def adopt(self) -> Any:
        """Accept the current value as the tracked one and return it."""
        self._written = self._inner.get_state()
        return self._written

    def get_state(self) -> Any:
        return self._inner.get_state()

    def set_state(self, value: Any) -> None:
        self._inner.set_state(value)
        self._written = value

    def __repr__(self) -> str:
        return f"TrackingAccessor({self._inner!r})"
