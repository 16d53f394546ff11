# src/notes/__init__.py
from .collection import DEFAULT_MONTH_THRESHOLDS, Cohort, NoteCollection, partition_by_cohort

__all__ = [
    "DEFAULT_MONTH_THRESHOLDS",
    "Cohort",
    "NoteCollection",
    "partition_by_cohort",
]
