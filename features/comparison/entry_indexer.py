"""Flatten a KeePass group tree into a title-keyed entry index."""

import logging
from typing import Any, Mapping, Optional

logger = logging.getLogger(__name__)

NO_TITLE = "(no title)"

# Entries and groups are duck-typed: anything exposing ``title``,
# ``username`` and ``password`` (entries) or ``entries`` and ``subgroups``
# (groups), such as pykeepass.entry.Entry and pykeepass.group.Group.
Entry = Any
Group = Any
EntryIndex = Mapping[str, Entry]


def field_text(value: Optional[str]) -> str:
    """Collapse a missing field to the empty string."""
    return value or ""


def entry_key(entry: Entry) -> str:
    """Identity used to match an entry across two vaults.

    Missing and empty titles both map to the placeholder, so untitled
    entries from different vaults are matched against each other.
    """
    return entry.title or NO_TITLE


def index_entries(root: Group) -> dict[str, Entry]:
    """Index every entry in the tree by its key.

    Direct entries are visited before subgroups, depth-first. When two
    entries share a key the later one wins; the key keeps the position of
    its first insertion.
    """
    index: dict[str, Entry] = {}
    _index_group(root, index)
    logger.debug("Indexed %d distinct entry keys", len(index))
    return index


def _index_group(group: Group, index: dict[str, Entry]) -> None:
    for entry in group.entries:
        key = entry_key(entry)
        if key in index:
            logger.debug("Duplicate entry title, keeping later one: %s", key)
        index[key] = entry

    for child in group.subgroups:
        _index_group(child, index)


def count_entries(group: Group) -> int:
    """Count entries in this group and all descendant groups."""
    return len(group.entries) + sum(count_entries(g) for g in group.subgroups)
