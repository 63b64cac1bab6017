"""Parsing sheet rows into typed records and projecting them back into rows."""

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Sequence, TypeVar

from tillersync.domain.entities import Item
from tillersync.domain.errors import ValidationError
from tillersync.domain.mapping import Mapping

R = TypeVar("R", bound=Item)

_ROW_COL_PATTERN = re.compile(r"^\(\s*(\d+)\s*,\s*(\d+)\s*\)$")


@dataclass(frozen=True, order=True)
class RowCol:
    """Zero-based cell position below the header row."""

    row: int
    col: int

    @classmethod
    def parse(cls, text: str) -> "RowCol":
        """Parse the ``(row, col)`` form produced by ``str()``."""
        match = _ROW_COL_PATTERN.match(text.strip())
        if match is None:
            raise ValidationError(f"Invalid cell position '{text}': expected '(row, col)'")
        return cls(int(match.group(1)), int(match.group(2)))

    def __str__(self) -> str:
        return f"({self.row}, {self.col})"


@dataclass
class Items(Generic[R]):
    """The records of one sheet together with its header mapping and formulas."""

    mapping: Mapping
    data: list[R] = field(default_factory=list)
    formulas: dict[RowCol, str] = field(default_factory=dict)

    @classmethod
    def parse(
        cls,
        factory: Callable[[], R],
        sheet_rows: Sequence[Sequence[str]],
        formula_rows: Sequence[Sequence[str]] = (),
    ) -> "Items[R]":
        """Build records from a sheet's value rows and its parallel formula rows.

        The first row holds the headers. Every following non-empty row becomes
        a record whose ``original_order`` is its position among the records.
        Columns without a known field land in ``other_fields``. A cell is a
        formula when the formula matrix has a cell at the same position whose
        text differs from the value.

        Args:
            factory: Callable returning an empty record
            sheet_rows: Rendered cell values, header row first
            formula_rows: Cell formulas in the same layout as sheet_rows

        Returns:
            Items holding the parsed records

        Raises:
            ValidationError: If the header row is missing or invalid, a row is
                longer than the header row, or a typed cell does not parse
        """
        if not sheet_rows:
            raise ValidationError("Sheet is empty: a header row is required")

        mapping = Mapping(sheet_rows[0])
        headers = mapping.headers
        data: list[R] = []
        formulas: dict[RowCol, str] = {}

        for sheet_ix, values in enumerate(sheet_rows[1:], start=1):
            if not values:
                continue
            if len(values) > len(headers):
                raise ValidationError(
                    f"A row longer than the headers list was encountered at row {sheet_ix + 1}"
                )
            record_ix = len(data)
            record = factory()
            for col_ix, value in enumerate(values):
                header = headers[col_ix]
                try:
                    record.set_with_header(header, value)
                except ValidationError as e:
                    raise ValidationError(
                        f"Invalid value in column '{header}' at row {sheet_ix + 1}: {e}"
                    ) from e

            formula_row = formula_rows[sheet_ix] if sheet_ix < len(formula_rows) else ()
            for col_ix, formula in enumerate(formula_row[: len(headers)]):
                value = values[col_ix] if col_ix < len(values) else ""
                if formula != value:
                    formulas[RowCol(record_ix, col_ix)] = formula

            record.original_order = record_ix
            data.append(record)

        return cls(mapping=mapping, data=data, formulas=formulas)

    def to_rows(self) -> list[list[str]]:
        """Return the header row followed by one row per record, in mapping order."""
        headers = self.mapping.headers
        rows = [list(headers)]
        for record in self.data:
            rows.append([record.get_with_header(h) for h in headers])
        return rows

    def to_rows_with_formulas(self) -> list[list[str]]:
        """Like to_rows, with formula text placed at each recorded cell."""
        rows = self.to_rows()
        for position, formula in self.formulas.items():
            row_ix = position.row + 1
            if row_ix < len(rows) and position.col < len(rows[row_ix]):
                rows[row_ix][position.col] = formula
        return rows

    def has_original_order_gaps(self) -> bool:
        """True if the known original orders are not exactly 0..n-1."""
        orders = sorted(r.original_order for r in self.data if r.original_order is not None)
        return any(order != ix for ix, order in enumerate(orders))

    def to_dict(self) -> dict[str, Any]:
        return {
            "mapping": list(self.mapping.headers),
            "data": [record.to_dict() for record in self.data],
            "formulas": {str(k): v for k, v in sorted(self.formulas.items())},
        }

    @classmethod
    def from_dict(cls, record_type: Any, payload: dict[str, Any]) -> "Items":
        return cls(
            mapping=Mapping(payload["mapping"]),
            data=[record_type.from_dict(d) for d in payload.get("data", [])],
            formulas={
                RowCol.parse(k): v for k, v in payload.get("formulas", {}).items()
            },
        )

    def __len__(self) -> int:
        return len(self.data)

