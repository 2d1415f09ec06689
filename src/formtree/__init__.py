"""
Reactive field tree for editable form state.

Projects a plain mutable data object (dicts, lists, dataclasses, plain
objects) into a lazily materialized tree of field nodes with value access,
touched/error tracking, validation and change notification for driving a UI.

Key Features:
- Lazy, cached child nodes (the same key always returns the same node)
- Change and error notifications bubble to every ancestor
- Depth-first validation over the materialized subtree
- Reset to construction-time values without rebuilding the tree
- List-valued slots with insert/remove and position-tracking element nodes

Quick Start:
    >>> from formtree import create_form
    >>>
    >>> state = {'name': 'Ada', 'tags': []}
    >>> form = create_form(state)
    >>> unsubscribe = form.on_change(lambda node, origin=None: render(form))
    >>>
    >>> name = form.get_field('name')
    >>> name.value = 'Grace'          # state['name'] == 'Grace', form.is_touched
    >>>
    >>> tags = form.get_field_collection('tags')
    >>> tags.insert('admin')          # state['tags'] == ['admin']
    >>>
    >>> name.on_validate(lambda node, origin=None: node.set_errors(
    ...     [] if node.value else ['Name is required']))
    >>> form.validate()
    True

Architecture:
    Every node reads and writes its slot through one accessor. Children are
    wired to their parent at creation with two forwarding subscriptions:

        child change → parent touched → parent change(parent, origin)
        child error  → parent errored → parent error(parent, origin)

    Untouching and clearing errors stay local to the node.

Modules:
    - field_node: FieldNode and the node factory
    - field_collection: FieldCollection for list-valued slots
    - accessor: root, slot and collection-element accessors
    - channel: synchronous publish/subscribe channel
    - snapshot: immutable snapshots of a subtree
    - config: value classification (collection and leaf types)
    - form: create_form entry point
"""

from formtree.accessor import Accessor, RootAccessor, SlotAccessor, ElementAccessor, TrackingAccessor
from formtree.channel import Channel
from formtree.config import (
    set_collection_types,
    get_collection_types,
    set_leaf_types,
    get_leaf_types,
    is_collection,
    is_leaf,
)
from formtree.exceptions import FormTreeError, FieldShapeError, DetachedFieldError
from formtree.field_node import FieldNode, make_field
from formtree.field_collection import FieldCollection
from formtree.form import create_form
from formtree.snapshot import FieldSnapshot

__all__ = [
    # Entry point
    'create_form',
    # Nodes
    'FieldNode',
    'FieldCollection',
    'make_field',
    # Accessors
    'Accessor',
    'RootAccessor',
    'SlotAccessor',
    'ElementAccessor',
    'TrackingAccessor',
    # Notification
    'Channel',
    # Snapshot
    'FieldSnapshot',
    # Configuration
    'set_collection_types',
    'get_collection_types',
    'set_leaf_types',
    'get_leaf_types',
    'is_collection',
    'is_leaf',
    # Exceptions
    'FormTreeError',
    'FieldShapeError',
    'DetachedFieldError',
]

__version__ = '1.0.0'
__description__ = 'Reactive field tree for editable form state'
