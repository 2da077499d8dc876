"""Vault comparison feature module."""

from .comparison_service import (
    ComparisonConfig,
    ComparisonReport,
    ComparisonService,
    Difference,
    DifferenceKind,
    compare_indexes,
    compare_trees,
    filter_differences,
)
from .entry_indexer import NO_TITLE, count_entries, entry_key, index_entries

__all__ = [
    "ComparisonConfig",
    "ComparisonReport",
    "ComparisonService",
    "Difference",
    "DifferenceKind",
    "NO_TITLE",
    "compare_indexes",
    "compare_trees",
    "count_entries",
    "entry_key",
    "filter_differences",
    "index_entries",
]
