"""Data models shared by the scanner, the renderer and the CLI."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from numbers import Integral
from types import MappingProxyType
from typing import Any, Literal, Union

import pandas as pd

NumberLocale = Literal["ru", "en"]
FileStatus = Literal["converted", "skipped", "failed"]

_NUMBER_LOCALES = ("ru", "en")
_FILE_STATUSES = ("converted", "skipped", "failed")


def _to_non_negative_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise TypeError(f"{field_name} must be an integer")
    result = int(value)
    if result < 0:
        raise ValueError(f"{field_name} must be >= 0")
    return result


def _to_bool(value: Any, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise TypeError(f"{field_name} must be a bool")
    return value


def _to_word(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise TypeError(f"{field_name} must be a string")
    word = value.strip()
    if not word:
        raise ValueError(f"{field_name} must not be empty")
    return word


def _to_string_tuple(values: Sequence[Any] | None, field_name: str) -> tuple[str, ...]:
    if values is None:
        return ()
    if isinstance(values, str):
        raise TypeError(f"{field_name} must be a sequence of strings")
    normalized: list[str] = []
    for item in values:
        if not isinstance(item, str):
            raise TypeError(f"{field_name} items must be strings")
        normalized.append(item)
    return tuple(normalized)


# ── Scan configuration ──────────────────────────────────────────


@dataclass(frozen=True)
class ScanOptions:
    """Heuristic switches for reading and rendering a report.

    ``anchor_probe`` off pins every row check to column 1; the other
    switches disable numeric parsing and the time-of-day fix-up.
    """

    anchor_probe: bool = True
    numeric_coercion: bool = True
    time_column_fixup: bool = True
    number_locale: NumberLocale = "ru"
    page_break_word: str = "из"
    time_word: str = "время"
    date_word: str = "дата"

    def __post_init__(self) -> None:
        for name in ("anchor_probe", "numeric_coercion", "time_column_fixup"):
            _to_bool(getattr(self, name), name)
        if self.number_locale not in _NUMBER_LOCALES:
            raise ValueError(
                f"Invalid number locale: {self.number_locale!r}. Use {'/'.join(_NUMBER_LOCALES)}."
            )
        for name in ("page_break_word", "time_word", "date_word"):
            object.__setattr__(self, name, _to_word(getattr(self, name), name))


# ── Segments ────────────────────────────────────────────────────


@dataclass(frozen=True)
class TextLine:
    """One free-text row, taken from the anchor column."""

    content: str


@dataclass(frozen=True)
class Table:
    """A reconstructed data table.

    ``columns`` keeps header order and may repeat a name; every row maps
    only the columns that had a value in the source.
    """

    name: str
    columns: tuple[str, ...] = ()
    rows: tuple[Mapping[str, Any], ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "columns", _to_string_tuple(self.columns, "columns"))
        frozen_rows = []
        for row in self.rows:
            if not isinstance(row, Mapping):
                raise TypeError("rows items must be mappings")
            unknown = set(row) - set(self.columns)
            if unknown:
                raise ValueError(f"rows reference unknown columns: {', '.join(sorted(unknown))}")
            frozen_rows.append(MappingProxyType(dict(row)))
        object.__setattr__(self, "rows", tuple(frozen_rows))

    def to_frame(self) -> pd.DataFrame:
        """Return the rows as a dense object-dtype DataFrame.

        Frame columns are positional (``0..n-1``); a repeated column name
        gets its value only at its first position.
        """
        first_position: dict[str, int] = {}
        for idx, name in enumerate(self.columns):
            first_position.setdefault(name, idx)

        records: list[list[Any]] = []
        for row in self.rows:
            values: list[Any] = [None] * len(self.columns)
            for name, value in row.items():
                values[first_position[name]] = value
            records.append(values)
        return pd.DataFrame(records, columns=range(len(self.columns)), dtype=object)


Segment = Union[TextLine, Table]


# ── Run results ─────────────────────────────────────────────────


@dataclass
class FileResult:
    """Outcome of converting a single report."""

    source: str
    output: str = ""
    status: FileStatus = "converted"
    tables: int = 0
    text_lines: int = 0
    rows: int = 0
    error: str = ""

    def __post_init__(self) -> None:
        if self.status not in _FILE_STATUSES:
            raise ValueError(f"status must be one of {', '.join(_FILE_STATUSES)}")
        self.tables = _to_non_negative_int(self.tables, "tables")
        self.text_lines = _to_non_negative_int(self.text_lines, "text_lines")
        self.rows = _to_non_negative_int(self.rows, "rows")

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "output": self.output,
            "status": self.status,
            "tables": self.tables,
            "text_lines": self.text_lines,
            "rows": self.rows,
            "error": self.error,
        }


@dataclass
class RunSummary:
    """Aggregate of a batch run, in processing order."""

    results: list[FileResult] = field(default_factory=list)

    def _count(self, status: FileStatus) -> int:
        return sum(1 for result in self.results if result.status == status)

    @property
    def converted(self) -> int:
        return self._count("converted")

    @property
    def skipped(self) -> int:
        return self._count("skipped")

    @property
    def failed(self) -> int:
        return self._count("failed")

    def to_dict(self) -> dict[str, Any]:
        return {
            "converted": self.converted,
            "skipped": self.skipped,
            "failed": self.failed,
            "files": [result.to_dict() for result in self.results],
        }
