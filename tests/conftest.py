"""Shared fixtures: small in-memory stand-ins for pykeepass trees."""

from dataclasses import dataclass, field
from typing import Optional

import pytest


@dataclass
class FakeEntry:
    title: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None


@dataclass
class FakeGroup:
    entries: list = field(default_factory=list)
    subgroups: list = field(default_factory=list)


@pytest.fixture
def make_tree():
    """Build a one-level tree from (title, username, password) tuples."""

    def _make(*rows, subgroups=None):
        return FakeGroup(
            entries=[FakeEntry(*row) for row in rows],
            subgroups=list(subgroups or []),
        )

    return _make
