"""Typed view over the raw values returned by a bulk worksheet read.

The API returns ragged rows (trailing blanks are dropped) and may omit
trailing rows entirely.  ``SheetGrid`` hides that behind 1-based accessors
matching spreadsheet coordinates so the header and roster scans read the
same way the worksheet is described to humans.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

from gspread.utils import rowcol_to_a1


def column_letter(column: int) -> str:
    """Return the A1 letters for a 1-based column (``27 -> "AA"``)."""

    return rowcol_to_a1(1, column)[:-1]


def a1_cell(row: int, column: int, worksheet: Optional[str] = None) -> str:
    a1 = rowcol_to_a1(row, column)
    return f"{worksheet}!{a1}" if worksheet else a1


def a1_range(
    first_row: int, first_column: int, last_row: int, last_column: int, worksheet: Optional[str] = None
) -> str:
    a1 = f"{rowcol_to_a1(first_row, first_column)}:{rowcol_to_a1(last_row, last_column)}"
    return f"{worksheet}!{a1}" if worksheet else a1


@dataclass(frozen=True)
class SheetGrid:
    rows: Tuple[Tuple[str, ...], ...]

    @classmethod
    def from_values(cls, values: Optional[Sequence[Sequence[object]]]) -> "SheetGrid":
        return cls(
            tuple(
                tuple("" if cell is None else str(cell) for cell in (row or ()))
                for row in (values or ())
            )
        )

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def column_count(self) -> int:
        return max((len(r) for r in self.rows), default=0)

    def row(self, row: int) -> Tuple[str, ...]:
        if 1 <= row <= len(self.rows):
            return self.rows[row - 1]
        return ()

    def cell_at(self, row: int, column: int) -> str:
        values = self.row(row)
        if 1 <= column <= len(values):
            return values[column - 1]
        return ""

    def iter_cells(self, first_row: int, last_row: int) -> Iterator[Tuple[int, int, str]]:
        """Yield ``(row, column, value)`` top-to-bottom, left-to-right."""

        for row in range(max(first_row, 1), min(last_row, len(self.rows)) + 1):
            for col, value in enumerate(self.rows[row - 1], start=1):
                yield row, col, value

    def find_header_containing(self, needle: str, header_rows: int) -> Optional[Tuple[int, int]]:
        """First ``(row, column)`` within the header block whose text contains *needle*."""

        if not needle:
            return None
        for row, col, value in self.iter_cells(1, header_rows):
            if value and needle in value:
                return row, col
        return None

    def column_is_blank(self, column: int, first_row: int, last_row: int) -> bool:
        return all(
            not self.cell_at(row, column).strip() for row in range(first_row, last_row + 1)
        )

    def first_blank_column(
        self, start_column: int, first_row: int, last_row: int, skip: Sequence[int] = ()
    ) -> int:
        """First column at or after *start_column* blank across the given rows.

        Columns past the populated width are always blank, so this never
        fails to return.
        """

        column = start_column
        while column in skip or not self.column_is_blank(column, first_row, last_row):
            column += 1
        return column

    def find_row_with_value(self, column: int, needle: str, first_row: int) -> Optional[int]:
        """First row at or after *first_row* whose trimmed cell equals trimmed *needle*.

        Rows too short to reach *column* never match.
        """

        target = (needle or "").strip()
        if not target:
            return None
        for row in range(max(first_row, 1), len(self.rows) + 1):
            values = self.rows[row - 1]
            if len(values) < column:
                continue
            if values[column - 1].strip() == target:
                return row
        return None

    def slice_row(self, row: int, first_column: int, last_column: int) -> List[str]:
        return [self.cell_at(row, col) for col in range(first_column, last_column + 1)]
