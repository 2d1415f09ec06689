"""
Immutable snapshots of a field tree.

A snapshot records value and flags of a node and its materialized subtree at
one point in time. Data only, no node references, so snapshots can be kept,
compared and exported.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, List, TYPE_CHECKING
import copy

if TYPE_CHECKING:
    from formtree.field_node import FieldNode


@dataclass(frozen=True)
class FieldSnapshot:
    """Frozen state of one field node and its materialized children."""
    path: str
    value: Any  # Deep copy of the value at capture time
    touched: bool
    errored: bool
    errors: tuple = ()
    children: Dict[Hashable, 'FieldSnapshot'] = field(default_factory=dict)

    @classmethod
    def capture(cls, node: 'FieldNode') -> 'FieldSnapshot':
        return cls(
            path=node.path,
            value=copy.deepcopy(node.value),
            touched=node.is_touched,
            errored=node.is_errored,
            errors=node.errors,
            children={key: cls.capture(child) for key, child in node.children.items()},
        )

    def error_paths(self) -> List[str]:
        """Dotted paths of every errored node in this subtree, parents first."""
        paths = [self.path] if self.errored else []
        for child in self.children.values():
            paths.extend(child.error_paths())
        return paths

    def to_dict(self) -> Dict:
        """Export to a plain dict (JSON-serializable when the values are)."""
        return {
            'path': self.path,
            'value': self.value,
            'touched': self.touched,
            'errored': self.errored,
            'errors': list(self.errors),
            'children': {
                str(key): child.to_dict()
                for key, child in self.children.items()
            },
        }
