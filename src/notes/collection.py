# src/notes/collection.py
"""
Read-only query surface over a fixed set of notes.

Public API
----------
NoteCollection(notes)
    .by_id / .find / .by_loan_status / .by_purpose
    .issued_on / .issued_before / .issued_after
    .issued_at_least_months_ago / .without / .where
partition_by_cohort(collection, month_thresholds, as_of) -> list[Cohort]
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass
from datetime import date

from dateutil.relativedelta import relativedelta

from src.core.errors import NoteNotFoundError
from src.schemas.models import Note

DEFAULT_MONTH_THRESHOLDS: tuple[int, ...] = (8, 4, 1)


class NoteCollection:
    """Immutable, ordered collection of notes. Every filter returns a new collection."""

    __slots__ = ("_notes",)

    def __init__(self, notes: Iterable[Note] = ()) -> None:
        self._notes: tuple[Note, ...] = tuple(notes)

    def __iter__(self) -> Iterator[Note]:
        return iter(self._notes)

    def __len__(self) -> int:
        return len(self._notes)

    def __bool__(self) -> bool:
        return bool(self._notes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NoteCollection):
            return NotImplemented
        return self._notes == other._notes

    def __hash__(self) -> int:
        return hash(self._notes)

    def __repr__(self) -> str:
        return f"NoteCollection({len(self._notes)} notes)"

    @property
    def notes(self) -> tuple[Note, ...]:
        return self._notes

    def note_ids(self) -> frozenset[int]:
        return frozenset(n.note_id for n in self._notes)

    # ---------- Lookup ----------

    def find(self, note_id: int) -> Note | None:
        for n in self._notes:
            if n.note_id == note_id:
                return n
        return None

    def by_id(self, note_id: int) -> Note:
        note = self.find(note_id)
        if note is None:
            raise NoteNotFoundError(f"note {note_id} is not in the collection")
        return note

    # ---------- Filters ----------

    def where(self, predicate: Callable[[Note], bool]) -> NoteCollection:
        return NoteCollection(n for n in self._notes if predicate(n))

    def by_loan_status(self, loan_status: str) -> NoteCollection:
        return self.where(lambda n: n.loan_status == loan_status)

    def by_purpose(self, purpose: str) -> NoteCollection:
        return self.where(lambda n: n.purpose == purpose)

    def issued_on(self, day: date) -> NoteCollection:
        return self.where(lambda n: n.issue_date is not None and n.issue_date == _as_date(day))

    def issued_before(self, day: date) -> NoteCollection:
        return self.where(lambda n: n.issue_date is not None and n.issue_date < _as_date(day))

    def issued_after(self, day: date) -> NoteCollection:
        return self.where(lambda n: n.issue_date is not None and n.issue_date > _as_date(day))

    def issued_at_least_months_ago(self, months: int, as_of: date) -> NoteCollection:
        """Notes whose issue date plus `months` calendar months is on or before `as_of`."""
        cutoff = _as_date(as_of) - relativedelta(months=months)
        return self.where(lambda n: n.issue_date is not None and n.issue_date <= cutoff)

    def without(self, other: Iterable[Note]) -> NoteCollection:
        """Set difference by note id, keeping this collection's order."""
        drop = {n.note_id for n in other}
        return self.where(lambda n: n.note_id not in drop)


def _as_date(day: date) -> date:
    # datetime is a date subclass; compare calendar days only
    return date(day.year, day.month, day.day)


@dataclass(frozen=True)
class Cohort:
    """
    Notes claimed by one age threshold in a partition.

    Attributes:
        index: Position in the threshold list (0 = oldest).
        month_threshold: Every note was issued at least this many months ago.
        notes: Members; disjoint from every other cohort of the same partition.
    """

    index: int
    month_threshold: int
    notes: NoteCollection


def partition_by_cohort(
    collection: NoteCollection,
    month_thresholds: Sequence[int] = DEFAULT_MONTH_THRESHOLDS,
    *,
    as_of: date,
) -> list[Cohort]:
    """
    Split `collection` into disjoint age cohorts, oldest first.

    For each threshold in order, the notes issued at least that many months
    ago are taken from the remaining pool, then removed from it. Notes
    younger than the last threshold (or without an issue date) belong to no
    cohort.

    Raises:
        ValueError: thresholds empty, non-positive, or not strictly decreasing.
    """
    thresholds = list(month_thresholds)
    if not thresholds:
        raise ValueError("month_thresholds must not be empty")
    if any(t <= 0 for t in thresholds):
        raise ValueError(f"month thresholds must be positive, got {thresholds}")
    if any(a <= b for a, b in zip(thresholds, thresholds[1:], strict=False)):
        raise ValueError(f"month thresholds must be strictly decreasing (oldest first), got {thresholds}")

    cohorts: list[Cohort] = []
    pool = collection
    for i, months in enumerate(thresholds):
        members = pool.issued_at_least_months_ago(months, as_of)
        cohorts.append(Cohort(index=i, month_threshold=months, notes=members))
        pool = pool.without(members)
    return cohorts
