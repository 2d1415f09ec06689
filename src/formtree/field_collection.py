"""
FieldCollection: FieldNode over a list-valued slot.

Keeps one element node per list item. Each element reads and writes the
backing list through an ElementAccessor whose index the collection updates
on every structural edit, so an element follows its item across inserts
and removals.

The backing list is never edited in place: insert, remove, element writes
and ``fields`` assignment all write a new list through the collection's
accessor.
"""
import logging
from typing import Any, Callable, Hashable, Iterable, Iterator, List, Optional, Tuple, TypeVar

from formtree.accessor import Accessor, ElementAccessor, TrackingAccessor
from formtree.config import is_collection
from formtree.exceptions import DetachedFieldError, FieldShapeError
from formtree.field_node import FieldNode, make_field

logger = logging.getLogger(__name__)

V = TypeVar('V')


class FieldCollection(FieldNode[List[V]]):
    """Ordered element nodes mirroring a list value.

    Invariant: ``len(collection.fields) == len(collection.value)`` after
    every operation completes.
    """

    def __init__(self, accessor: Accessor, parent: Optional[FieldNode] = None):
        super().__init__(accessor, parent)
        # All collection reads and writes go through the tracker
        self._backing = TrackingAccessor(accessor)
        self._elements: List[FieldNode] = []
        self._build_elements()
        # Element nodes of the initial items, brought back by reset()
        self._initial_elements: List[FieldNode] = list(self._elements)

    def _capture_initial(self) -> List[V]:
        # Shallow copy: later writes replace the list, they never edit this one
        return list(self._accessor.get_state())

    def __len__(self) -> int:
        return len(self._elements)

    def __iter__(self) -> Iterator[FieldNode]:
        return iter(list(self._elements))

    # ========== ELEMENT BOOKKEEPING ==========

    def _make_element(self, index: int) -> FieldNode:
        element = make_field(ElementAccessor(self._backing, index), parent=self)
        self._wire(element)
        return element

    def _detach(self, element: FieldNode) -> None:
        self._unwire(element)
        element._accessor.detach()

    def _reindex(self) -> None:
        for index, element in enumerate(self._elements):
            element._accessor.index = index

    def _build_elements(self) -> None:
        for element in self._elements:
            self._detach(element)
        count = len(self._backing.get_state())
        self._elements = [self._make_element(index) for index in range(count)]

    def _owns(self, node: FieldNode) -> bool:
        return any(element is node for element in self._elements)

    def _child_items(self) -> List[Tuple[Hashable, FieldNode]]:
        return list(enumerate(self._elements))

    def _child_nodes(self) -> List[FieldNode]:
        return list(self._elements)

    # ========== VALUE ==========

    @property
    def value(self) -> List[V]:
        return self._backing.get_state()

    @value.setter
    def value(self, value: List[V]) -> None:
        self._backing.set_state(value)
        # Element nodes (and their touched/error state) are discarded
        self._build_elements()
        self._touched = True
        self._change.publish(self)

    def update(self, mutate: Callable[[List[V]], None]) -> None:
        """Edit a copy of the list, then replace the value with it."""
        items = list(self._backing.get_state())
        mutate(items)
        self.value = items

    def _restore_initial(self) -> None:
        self._backing.set_state(list(self._initial_value))

        # Keep the initial element nodes; drop only elements added since
        initial_ids = {id(element) for element in self._initial_elements}
        for element in self._elements:
            if id(element) not in initial_ids:
                self._detach(element)
        for element in self._initial_elements:
            if not element._forwarding:
                self._wire(element)
        self._elements = list(self._initial_elements)
        self._reindex()

    def _drop_elements(self) -> None:
        for element in self._elements:
            self._detach(element)
        self._elements = []

    def _resync_collections(self) -> None:
        try:
            replaced = self._backing.replaced
        except (KeyError, AttributeError, IndexError, DetachedFieldError):
            # The new value above no longer has this slot
            logger.debug(f"Slot of {self.path!r} disappeared, dropping its elements")
            self._drop_elements()
            return

        if not replaced:
            super()._resync_collections()
            return

        if is_collection(self._backing.adopt()):
            self._build_elements()
        else:
            self._drop_elements()
        logger.debug(f"Resynced {self.path!r} after its list was replaced: {len(self._elements)} element(s)")

    # ========== ELEMENTS ==========

    @property
    def fields(self) -> List[FieldNode]:
        return list(self._elements)

    @fields.setter
    def fields(self, fields: Iterable[FieldNode]) -> None:
        nodes = list(fields)
        seen = set()
        for node in nodes:
            if not self._owns(node):
                raise ValueError(f"{node!r} is not an element of {self!r}")
            if id(node) in seen:
                raise ValueError(f"{node!r} appears more than once")
            seen.add(id(node))

        # Read through the current indices before they move
        values = [node.value for node in nodes]
        for element in self._elements:
            if id(element) not in seen:
                self._detach(element)

        self._elements = nodes
        self._reindex()
        self._backing.set_state(values)
        logger.debug(f"Replaced fields of {self.path!r}: {len(nodes)} element(s)")
        self.is_touched = True

    def index_of(self, field: FieldNode) -> int:
        """Current position of an element node.

        Raises:
            ValueError: ``field`` is not an element of this collection
        """
        accessor = field._accessor
        if isinstance(accessor, ElementAccessor) and accessor.attached:
            index = accessor.index
            if index < len(self._elements) and self._elements[index] is field:
                return index
        raise ValueError(f"{field!r} is not an element of {self!r}")

    def get_field(self, key: Hashable) -> FieldNode:
        """Element node at position ``key`` (negative positions count from the end)."""
        if not isinstance(key, int) or isinstance(key, bool):
            logger.warning(f"get_field({key!r}) on collection {self.path!r}")
            raise FieldShapeError(f"Collection elements are addressed by integer position, got {key!r}")
        return self._elements[key]

    def get_field_collection(self, key: Hashable) -> 'FieldCollection':
        element = self.get_field(key)
        if not isinstance(element, FieldCollection):
            logger.warning(f"get_field_collection({key!r}) on {type(element.value).__name__} at {element.path!r}")
            raise FieldShapeError(f"Element {element.path!r} holds {type(element.value).__name__}, not a collection")
        return element

    def insert(self, item: V, index: Optional[int] = None) -> FieldNode:
        """Insert ``item`` at ``index``; append when omitted or negative.

        Returns:
            The element node created for ``item``.
        """
        items = list(self._backing.get_state())
        if index is None or index < 0 or index > len(items):
            index = len(items)
        items.insert(index, item)
        self._backing.set_state(items)

        element = self._make_element(index)
        self._elements.insert(index, element)
        self._reindex()

        logger.debug(f"Inserted element at {self.path!r}[{index}], length={len(self._elements)}")
        self.is_touched = True
        return element

    def append(self, item: V) -> FieldNode:
        return self.insert(item)

    def remove(self, index: int) -> Any:
        """Remove the element at ``index``.

        Returns:
            The removed item.
        """
        element = self._elements[index]
        removed = element.value
        del self._elements[index]

        # Remaining elements still point at their old positions here
        values = [remaining.value for remaining in self._elements]
        self._detach(element)
        self._reindex()
        self._backing.set_state(values)

        logger.debug(f"Removed element {index} from {self.path!r}, length={len(self._elements)}")
        self.is_touched = True
        return removed
