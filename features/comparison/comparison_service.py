"""Service layer for KeePass database comparison."""

import fnmatch
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from features.vault.vault_service import VaultCredentials, VaultOpenError, VaultService

from .entry_indexer import (
    EntryIndex,
    Group,
    count_entries,
    field_text,
    index_entries,
)

logger = logging.getLogger(__name__)


class DifferenceKind(Enum):
    """How an entry differs between the first and second vault."""

    ONLY_IN_FIRST = "only_in_first"
    ONLY_IN_SECOND = "only_in_second"
    USERNAME_DIFFERS = "username_differs"
    PASSWORD_DIFFERS = "password_differs"


@dataclass(frozen=True)
class Difference:
    """A single reported difference.

    ``username`` is the value shown next to the title: the second vault's
    username for ONLY_IN_SECOND, the first vault's otherwise. ``username1``
    and ``username2`` are only set for USERNAME_DIFFERS. Password values are
    never stored.
    """

    title: str
    username: str
    kind: DifferenceKind
    username1: Optional[str] = None
    username2: Optional[str] = None

    def __post_init__(self) -> None:
        usernames = (self.username1, self.username2)
        if self.kind == DifferenceKind.USERNAME_DIFFERS:
            if None in usernames:
                raise ValueError("USERNAME_DIFFERS needs both usernames")
        elif usernames != (None, None):
            raise ValueError(f"{self.kind.name} carries no usernames")


@dataclass
class ComparisonConfig:
    """Configuration for comparison operation."""

    first: VaultCredentials
    second: VaultCredentials

    @property
    def is_complete(self) -> bool:
        return self.first.is_complete and self.second.is_complete


@dataclass
class ComparisonReport:
    """Differences plus the entry count of each vault."""

    differences: list[Difference] = field(default_factory=list)
    first_entry_count: int = 0
    second_entry_count: int = 0

    def summary(self) -> dict[DifferenceKind, int]:
        """Number of differences of each kind."""
        counts = {kind: 0 for kind in DifferenceKind}
        for difference in self.differences:
            counts[difference.kind] += 1
        return counts

    def status_message(self) -> str:
        return (
            "Successfully compared databases!\n"
            f"Database 1: {self.first_entry_count} entries\n"
            f"Database 2: {self.second_entry_count} entries\n"
            f"Differences found: {len(self.differences)}"
        )


def compare_indexes(first: EntryIndex, second: EntryIndex) -> list[Difference]:
    """Classify every key of two entry indexes.

    Keys of ``first`` are reported in its iteration order, followed by the
    keys found only in ``second`` in its own order. A matched key yields at
    most one difference, and a username mismatch hides a password mismatch.
    """
    differences: list[Difference] = []

    for key, entry1 in first.items():
        username1 = field_text(entry1.username)
        entry2 = second.get(key)

        if entry2 is None:
            differences.append(
                Difference(key, username1, DifferenceKind.ONLY_IN_FIRST)
            )
            continue

        username2 = field_text(entry2.username)
        if username1 != username2:
            differences.append(
                Difference(
                    key,
                    username1,
                    DifferenceKind.USERNAME_DIFFERS,
                    username1=username1,
                    username2=username2,
                )
            )
        elif field_text(entry1.password) != field_text(entry2.password):
            differences.append(
                Difference(key, username1, DifferenceKind.PASSWORD_DIFFERS)
            )

    for key, entry2 in second.items():
        if key not in first:
            differences.append(
                Difference(
                    key, field_text(entry2.username), DifferenceKind.ONLY_IN_SECOND
                )
            )

    return differences


def compare_trees(first_root: Group, second_root: Group) -> ComparisonReport:
    """Index both trees, compare them, and count their entries."""
    first_index = index_entries(first_root)
    second_index = index_entries(second_root)
    report = ComparisonReport(
        differences=compare_indexes(first_index, second_index),
        first_entry_count=count_entries(first_root),
        second_entry_count=count_entries(second_root),
    )
    logger.info(
        "Comparison complete: %d vs %d entries, %d differences",
        report.first_entry_count,
        report.second_entry_count,
        len(report.differences),
    )
    return report


def is_glob_pattern(pattern: str) -> bool:
    return any(c in pattern for c in "*?[")


def filter_differences(
    differences: list[Difference],
    kind: Optional[DifferenceKind] = None,
    pattern: str = "",
) -> list[Difference]:
    """Select differences by kind and by title.

    The title match is case-insensitive: a substring match, or an fnmatch
    glob when the pattern contains wildcards.
    """
    pattern = pattern.strip().lower()
    glob = is_glob_pattern(pattern)

    result = []
    for difference in differences:
        if kind is not None and difference.kind != kind:
            continue
        if pattern:
            title = difference.title.lower()
            if glob:
                if not fnmatch.fnmatchcase(title, pattern):
                    continue
            elif pattern not in title:
                continue
        result.append(difference)
    return result


class ComparisonService:
    """Opens two vaults and compares their entries."""

    def __init__(self) -> None:
        self._first = VaultService()
        self._second = VaultService()
        self._report: Optional[ComparisonReport] = None

    @property
    def is_open(self) -> bool:
        return self._first.is_open and self._second.is_open

    @property
    def report(self) -> Optional[ComparisonReport]:
        return self._report

    def open_vaults(self, config: ComparisonConfig) -> None:
        """Open both vaults, first then second.

        Raises:
            VaultOpenError: with ``which`` set to "first" or "second". No
                vault is left open on failure.
        """
        logger.info(
            "Opening vaults for comparison: %s vs %s",
            config.first.path,
            config.second.path,
        )
        self.close()

        for which, service, credentials in (
            ("first", self._first, config.first),
            ("second", self._second, config.second),
        ):
            try:
                service.open(credentials)
            except VaultOpenError as e:
                e.which = which
                self.close()
                raise

        logger.info("Both vaults opened successfully")

    def compare(self) -> Optional[ComparisonReport]:
        """Compare the opened vaults."""
        if not self.is_open:
            return None

        logger.info("Running vault comparison")
        self._report = compare_trees(self._first.root_group, self._second.root_group)
        return self._report

    def compare_vaults(self, config: ComparisonConfig) -> ComparisonReport:
        """Open both vaults, compare them, and release the decrypted trees."""
        try:
            self.open_vaults(config)
            return self.compare()
        finally:
            self._first.close()
            self._second.close()

    def close(self) -> None:
        """Close both vaults and forget the last report."""
        self._first.close()
        self._second.close()
        self._report = None
