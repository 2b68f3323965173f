"""
In-memory schedule grid used by the builder page and the schedule API.

The grid has `columns` semester columns followed by one "bank" column that
holds classes which were selected but not yet dropped into a semester:

    Semester 1 | Semester 2 | ... | Semester N | Selected Classes

Classes are identified by their catalog acronym ("MATH-101"). A class can sit
in at most one column. The serialized document stored on Schedule.data is:

    {"columns": N, "semesters": [["MATH-101", ...], ...], "bank": [...]}
"""

from __future__ import annotations

from decimal import Decimal
from typing import Mapping, Optional

BANK_HEADER = "Selected Classes"
EMPTY_LABEL = "No classes selected"


class ScheduleError(ValueError):
    """Raised for operations the grid cannot perform."""


class UnreadableSchedule(ScheduleError):
    """A saved schedule whose stored document cannot be loaded."""


def normalize_acronym(acr) -> str:
    acr = str(acr or "").strip().upper()
    if not acr:
        raise ScheduleError("A class acronym is required.")
    return acr


class ScheduleBuilder:
    def __init__(self, columns: int = 1, max_columns: Optional[int] = None):
        if columns <= 0:
            raise ScheduleError("A schedule needs at least one semester.")
        if max_columns is not None and columns > max_columns:
            raise ScheduleError(f"A schedule can have at most {max_columns} semesters.")
        self.max_columns = max_columns
        self._semesters: list[list[str]] = [[] for _ in range(columns)]
        self._bank: list[str] = []

    # ------------------------------------------------------------------ grid

    @property
    def columns(self) -> int:
        return len(self._semesters)

    @property
    def bank_index(self) -> int:
        return self.columns

    @property
    def bank(self) -> list[str]:
        return list(self._bank)

    def _column(self, index: int) -> list[str]:
        return self._bank if index == self.bank_index else self._semesters[index]

    def headers(self) -> list[str]:
        return [f"Semester {i}" for i in range(1, self.columns + 1)] + [BANK_HEADER]

    def semesters(self) -> list[list[str]]:
        """The semester columns only; the bank is not part of the plan."""
        return [list(sem) for sem in self._semesters]

    def grid(self) -> list[list[str]]:
        return self.semesters() + [self.bank]

    def classes(self) -> list[str]:
        return [acr for column in self.grid() for acr in column]

    def locate(self, acr) -> Optional[int]:
        acr = normalize_acronym(acr)
        for index, column in enumerate(self.grid()):
            if acr in column:
                return index
        return None

    def is_empty(self, index: int) -> bool:
        self._check_index(index)
        return not self._column(index)

    def _check_index(self, index) -> int:
        if isinstance(index, bool) or not isinstance(index, int):
            raise ScheduleError(f"Column must be an integer, got {index!r}.")
        if not 0 <= index <= self.bank_index:
            raise ScheduleError(
                f"Column {index} is out of range (0..{self.bank_index})."
            )
        return index

    # ------------------------------------------------------------ operations

    def set_columns(self, columns: int) -> bool:
        """
        Resize to `columns` semesters. Non-positive counts are ignored.
        Classes in dropped semesters move to the end of the bank in order.
        """
        if columns <= 0:
            return False
        if self.max_columns is not None and columns > self.max_columns:
            raise ScheduleError(f"A schedule can have at most {self.max_columns} semesters.")
        if columns > self.columns:
            self._semesters.extend([] for _ in range(columns - self.columns))
        else:
            for dropped in self._semesters[columns:]:
                self._bank.extend(dropped)
            del self._semesters[columns:]
        return True

    def add_class(self, acr) -> None:
        acr = normalize_acronym(acr)
        if self.locate(acr) is not None:
            raise ScheduleError(f"{acr} is already in this schedule.")
        self._bank.append(acr)

    def remove_class(self, acr) -> bool:
        index = self.locate(acr)
        if index is None:
            return False
        self._column(index).remove(normalize_acronym(acr))
        return True

    def move_class(self, acr, target: int) -> bool:
        """Drop a class into column `target`; False when it is already there."""
        acr = normalize_acronym(acr)
        self._check_index(target)
        source = self.locate(acr)
        if source is None:
            raise ScheduleError(f"{acr} is not in this schedule.")
        if source == target:
            return False
        self._column(source).remove(acr)
        self._column(target).append(acr)
        return True

    def clear(self) -> None:
        """Send every placed class back to the bank."""
        for sem in self._semesters:
            self._bank.extend(sem)
            sem.clear()

    # ---------------------------------------------------------- persistence

    def to_document(self) -> dict:
        return {
            "columns": self.columns,
            "semesters": self.semesters(),
            "bank": self.bank,
        }

    @classmethod
    def from_document(cls, doc, default_columns: int = 1, max_columns: Optional[int] = None):
        if doc is None:
            return cls(default_columns, max_columns=max_columns)
        if not isinstance(doc, Mapping):
            raise ScheduleError("A schedule document must be an object.")
        if not doc:
            return cls(default_columns, max_columns=max_columns)

        semesters = doc.get("semesters", [])
        bank = doc.get("bank", [])
        if not isinstance(semesters, list) or not all(isinstance(s, list) for s in semesters):
            raise ScheduleError("'semesters' must be a list of lists.")
        if not isinstance(bank, list):
            raise ScheduleError("'bank' must be a list.")

        columns = doc.get("columns", len(semesters) or default_columns)
        if isinstance(columns, bool) or not isinstance(columns, int):
            raise ScheduleError("'columns' must be an integer.")
        if len(semesters) > columns:
            raise ScheduleError("More semesters than columns.")

        builder = cls(columns, max_columns=max_columns)
        for index, sem in enumerate(semesters):
            for acr in sem:
                builder.add_class(acr)
                builder.move_class(acr, index)
        for acr in bank:
            builder.add_class(acr)
        return builder

    # -------------------------------------------------------------- reports

    def export(self, courses: Mapping[str, object]) -> list[list[dict]]:
        """
        Semesters as lists of class objects for the downloadable schedule.json.
        `courses` maps acronym -> Course; unknown acronyms keep only their key.
        """
        out = []
        for sem in self._semesters:
            rows = []
            for acr in sem:
                course = courses.get(acr)
                if course is not None:
                    rows.append(course.as_class_dict())
                else:
                    division, _, number = acr.partition("-")
                    rows.append({"ACR": acr, "DIVISION": division, "NUMBER": number})
            out.append(rows)
        return out

    def units_per_semester(self, courses: Mapping[str, object]) -> list[Decimal]:
        totals = []
        for sem in self._semesters:
            total = Decimal("0")
            for acr in sem:
                course = courses.get(acr)
                if course is not None:
                    total += Decimal(course.units)
            totals.append(total)
        return totals


def builder_for(schedule, max_columns: Optional[int] = None) -> ScheduleBuilder:
    """
    Load the builder for a saved Schedule row.

    The stored document loads as is; `max_columns` bounds later resizes only.
    """
    try:
        builder = ScheduleBuilder.from_document(
            schedule.data, default_columns=schedule.columns or 1
        )
    except ScheduleError as e:
        raise UnreadableSchedule(f"Schedule {schedule.pk} has a corrupt document: {e}") from e
    builder.max_columns = max_columns
    return builder

