"""Data tables passed to steps as a header row followed by value rows."""

from __future__ import annotations

from collections.abc import Iterable


class Table:
    """A table whose rows are exposed as column-name to value mappings."""

    def __init__(self) -> None:
        self._columns: list[str] = []
        self._rows: list[dict[str, str]] = []

    @property
    def columns(self) -> tuple[str, ...]:
        return tuple(self._columns)

    def add_column(self, column: str) -> None:
        """Append a column; not allowed once rows exist."""
        if self._rows:
            raise RuntimeError("Cannot alter columns after rows have been added")
        self._columns.append(column)

    def add_row(self, row: Iterable[str]) -> None:
        """Append a row holding exactly one value per column."""
        values = list(row)
        if not self._columns:
            raise RuntimeError("No column defined yet")
        if len(values) != len(self._columns):
            raise ValueError("Row size does not match the number of columns")
        self._rows.append(dict(zip(self._columns, values)))

    def hashes(self) -> list[dict[str, str]]:
        """Rows in insertion order, each as a mapping from column to value."""
        return [dict(row) for row in self._rows]

    def __len__(self) -> int:
        return len(self._rows)