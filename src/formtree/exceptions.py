"""
Exceptions raised by the field tree.

Validation failures are never exceptions: they are recorded as error
messages on field nodes. The classes here cover misuse only.
"""


class FormTreeError(Exception):
    """Base class for field tree faults."""


class FieldShapeError(FormTreeError, TypeError):
    """Requested field shape does not match the value held in the slot.

    Raised when children are requested from a leaf value, or when a
    collection is requested for a slot that does not hold one.
    """


class DetachedFieldError(FormTreeError, RuntimeError):
    """A collection element node was used after leaving its collection."""
