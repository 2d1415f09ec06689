"""
FieldNode: reactive handle onto one slot of a form's data object.

A root node wraps the whole data object. Asking a node for a nested slot
(``get_field``) lazily creates a child node, caches it, and wires two
forwarding subscriptions from the child to the parent:

- child change → parent marked touched, parent change published
- child error → parent marked errored, parent error published

Forwarded notifications carry the parent as subject and the node where the
event started as the second argument, so a handler on any ancestor can tell
"I changed" from "a descendant changed".

Clearing errors and untouching never propagate.
"""
from types import MappingProxyType
import logging
from typing import Any, Callable, Dict, Generic, Hashable, Iterable, List, Mapping, Optional, Tuple, TypeVar, TYPE_CHECKING

from formtree.accessor import Accessor, SlotAccessor, read_slot
from formtree.channel import Channel
from formtree.config import is_collection, is_leaf
from formtree.exceptions import FieldShapeError

if TYPE_CHECKING:
    from formtree.field_collection import FieldCollection
    from formtree.snapshot import FieldSnapshot

logger = logging.getLogger(__name__)

V = TypeVar('V')

FieldHandler = Callable[..., Any]
Unsubscribe = Callable[[], None]


def make_field(accessor: Accessor, parent: Optional['FieldNode'] = None) -> 'FieldNode':
    """Create a FieldCollection for collection values, a FieldNode otherwise."""
    from formtree.field_collection import FieldCollection

    if is_collection(accessor.get_state()):
        return FieldCollection(accessor, parent)
    return FieldNode(accessor, parent)


class FieldNode(Generic[V]):
    """
    Value access, touched/error tracking and child materialization for one slot.

    State:
    - _accessor: sole reader/writer of the slot
    - _initial_value: slot value at construction, restored by reset()
    - _touched / _has_errors: independent flags
    - _errors: validation messages (may be empty while errored)
    - _children: key → cached child node, never evicted

    Channels: change, error, validate. Handlers are called with
    ``(subject, origin=None)``.
    """

    def __init__(self, accessor: Accessor, parent: Optional['FieldNode'] = None):
        self._accessor = accessor
        self._parent = parent
        self._initial_value = self._capture_initial()

        self._touched = False
        self._has_errors = False
        self._errors: List[str] = []

        self._children: Dict[Hashable, 'FieldNode'] = {}

        self._change = Channel('change')
        self._error = Channel('error')
        self._validate = Channel('validate')

        # Unsubscribe actions for the parent's forwarding subscriptions on this node
        self._forwarding: List[Unsubscribe] = []

        # Suppresses change forwarding from children while this node resets
        self._in_reset = False

    def _capture_initial(self) -> Any:
        return self._accessor.get_state()

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(path={self.path!r}, touched={self._touched}, "
            f"errored={self._has_errors})"
        )

    # ========== POSITION ==========

    @property
    def key(self) -> Optional[Hashable]:
        """Slot key in the parent (live position for collection elements)."""
        return self._accessor.key

    @property
    def parent(self) -> Optional['FieldNode']:
        return self._parent

    @property
    def path(self) -> str:
        """Dotted path from the root, e.g. ``address.city`` or ``items.0``."""
        parts = []
        node: Optional[FieldNode] = self
        while node is not None and node._parent is not None:
            parts.append(str(node.key))
            node = node._parent
        return '.'.join(reversed(parts))

    # ========== VALUE ==========

    @property
    def value(self) -> V:
        return self._accessor.get_state()

    @value.setter
    def value(self, value: V) -> None:
        self._accessor.set_state(value)
        self._resync_collections()
        self._touched = True
        self._change.publish(self)

    @property
    def initial_value(self) -> V:
        return self._initial_value

    def update(self, mutate: Callable[[V], None]) -> None:
        """Edit the current value in place, then mark touched and notify once."""
        mutate(self._accessor.get_state())
        self._resync_collections()
        self._touched = True
        self._change.publish(self)

    # ========== TOUCHED ==========

    @property
    def is_touched(self) -> bool:
        return self._touched

    @is_touched.setter
    def is_touched(self, touched: bool) -> None:
        if touched:
            # Repeated touches re-notify
            self._touched = True
            self._change.publish(self)
        else:
            self._touched = False

    # ========== ERRORS ==========

    @property
    def errors(self) -> Tuple[str, ...]:
        return tuple(self._errors)

    @property
    def is_errored(self) -> bool:
        return self._has_errors

    @is_errored.setter
    def is_errored(self, errored: bool) -> None:
        if errored:
            self._has_errors = True
            self._error.publish(self)
        else:
            self._has_errors = False
            self._errors = []

    def add_error(self, message: str) -> None:
        """Append an error message and notify."""
        self._errors.append(message)
        self._has_errors = len(self._errors) > 0
        self._error.publish(self)

    def set_errors(self, messages: Iterable[str]) -> None:
        """Replace the error messages.

        An empty list clears this node silently; ancestors stay errored.
        """
        messages = list(messages)
        if messages:
            self._has_errors = True
            self._errors = messages
            self._error.publish(self)
        else:
            self._has_errors = False
            self._errors = []

    # ========== SUBSCRIPTIONS ==========

    def on_change(self, handler: FieldHandler) -> Unsubscribe:
        """Subscribe to value/touch changes of this node or any descendant."""
        return self._change.subscribe(handler)

    def on_error(self, handler: FieldHandler) -> Unsubscribe:
        """Subscribe to errors raised on this node or any descendant."""
        return self._error.subscribe(handler)

    def on_validate(self, handler: FieldHandler) -> Unsubscribe:
        """Subscribe a validator.

        Validators run during validate() and record failures with
        add_error()/set_errors(). Returning exactly False also marks the
        node errored.
        """
        return self._validate.subscribe(handler)

    # ========== CHILDREN ==========

    @property
    def children(self) -> Mapping[Hashable, 'FieldNode']:
        """Read-only view of the materialized children."""
        return MappingProxyType(dict(self._child_items()))

    def _child_items(self) -> List[Tuple[Hashable, 'FieldNode']]:
        return list(self._children.items())

    def _child_nodes(self) -> List['FieldNode']:
        return list(self._children.values())

    def _require_container(self, key: Hashable) -> Any:
        current = self._accessor.get_state()
        if is_leaf(current):
            logger.warning(f"get_field({key!r}) on leaf value at {self.path!r}")
            raise FieldShapeError(
                f"Field {self.path!r} holds {type(current).__name__}, which has no field {key!r}"
            )
        return current

    def get_field(self, key: Hashable) -> 'FieldNode':
        """Get the child node for ``key``, creating and caching it on first use.

        Raises:
            FieldShapeError: this node holds a leaf value
            KeyError / AttributeError: the slot does not exist
        """
        child = self._children.get(key)
        if child is not None:
            return child

        self._require_container(key)
        child = make_field(SlotAccessor(self._accessor, key), parent=self)
        self._wire(child)
        self._children[key] = child
        logger.debug(f"Materialized {type(child).__name__} at {child.path!r}")
        return child

    def get_field_collection(self, key: Hashable) -> 'FieldCollection':
        """Like get_field(), but the slot must hold a collection."""
        from formtree.field_collection import FieldCollection

        if key not in self._children:
            current = self._require_container(key)
            slot_value = read_slot(current, key)
            if not is_collection(slot_value):
                logger.warning(f"get_field_collection({key!r}) on {type(slot_value).__name__} at {self.path!r}")
                raise FieldShapeError(
                    f"Field {key!r} holds {type(slot_value).__name__}, not a collection"
                )

        child = self.get_field(key)
        if not isinstance(child, FieldCollection):
            raise FieldShapeError(f"Field {child.path!r} was materialized as a plain field")
        return child

    def _resync_collections(self) -> None:
        """Rebuild cached collections below whose list was replaced from above."""
        for child in self._child_nodes():
            child._resync_collections()

    def _wire(self, child: 'FieldNode') -> None:
        """Forward the child's change and error notifications to this node."""
        child._forwarding = [
            child.on_change(self._forward_change),
            child.on_error(self._forward_error),
        ]

    def _unwire(self, child: 'FieldNode') -> None:
        for unsubscribe in child._forwarding:
            unsubscribe()
        child._forwarding = []

    def _forward_change(self, subject: 'FieldNode', origin: Optional['FieldNode'] = None) -> None:
        if self._in_reset:
            return
        self._touched = True
        self._change.publish(self, origin if origin is not None else subject)

    def _forward_error(self, subject: 'FieldNode', origin: Optional['FieldNode'] = None) -> None:
        self._has_errors = True
        self._error.publish(self, origin if origin is not None else subject)

    # ========== VALIDATION / RESET ==========

    def validate(self) -> bool:
        """Validate materialized children depth-first, then this node.

        Returns:
            True when this node is not errored after every validator ran.
        """
        for child in self._child_nodes():
            child.validate()

        results = self._validate.publish(self)
        if any(result is False for result in results):
            self.is_errored = True

        valid = not self._has_errors
        logger.debug(f"validate {self.path!r}: valid={valid} errors={self._errors}")
        return valid

    def _restore_initial(self) -> None:
        self._accessor.set_state(self._initial_value)

    def reset(self) -> None:
        """Restore the initial value, reset cached children, clear flags, notify once."""
        self._in_reset = True
        try:
            self._restore_initial()
            for child in self._child_nodes():
                child.reset()
            self._touched = False
            self._has_errors = False
            self._errors = []
        finally:
            self._in_reset = False

        logger.debug(f"Reset {type(self).__name__} at {self.path!r}")
        self._change.publish(self)

    # ========== SNAPSHOT ==========

    def snapshot(self) -> 'FieldSnapshot':
        """Capture this node and its materialized subtree."""
        from formtree.snapshot import FieldSnapshot

        return FieldSnapshot.capture(self)
