"""Pytest configuration and shared fixtures."""
import pytest
from dataclasses import dataclass, field
from typing import List

from formtree import create_form
from formtree.config import reset_config


@dataclass
class Address:
    """Nested object reached by attribute access."""
    street: str = "1 Main St"
    city: str = "Springfield"


@dataclass
class Person:
    """Test form model mixing scalars, a nested object and a list."""
    name: str = "Ada"
    age: int = 36
    address: Address = field(default_factory=Address)
    tags: List[str] = field(default_factory=list)


@pytest.fixture(autouse=True)
def restore_default_config():
    """Restore value classification defaults after each test."""
    yield
    reset_config()


@pytest.fixture
def state():
    """Provide a nested dict form state."""
    return {
        'name': 'Ada',
        'address': {'city': 'London', 'zip': 'N1'},
        'items': ['a', 'b'],
    }


@pytest.fixture
def form(state):
    """Provide a form over the dict state."""
    return create_form(state)


@pytest.fixture
def person():
    """Provide a dataclass form model."""
    return Person()


class Recorder:
    """Callable handler recording (subject, origin) pairs."""

    def __init__(self, result=None):
        self.calls = []
        self.result = result

    def __call__(self, subject, origin=None):
        self.calls.append((subject, origin))
        return self.result

    @property
    def count(self):
        return len(self.calls)


@pytest.fixture
def recorder():
    """Provide a factory for recording handlers."""
    return Recorder
