"""
Entry point for building a field tree over a data object.
"""
import logging
from typing import Any

from formtree.accessor import RootAccessor
from formtree.field_node import FieldNode, make_field

logger = logging.getLogger(__name__)


def create_form(data: Any) -> FieldNode:
    """Create the root field node for ``data``.

    ``data`` is edited in place from now on; nothing is copied. Subscribe to
    the returned root with ``on_change``/``on_error`` to observe the form.

    Returns:
        FieldCollection when ``data`` is a collection value, FieldNode otherwise.
    """
    root = make_field(RootAccessor(data))
    logger.debug(f"Created form root {type(root).__name__} over {type(data).__name__}")
    return root
