"""Header row mapping between sheet headers and snake_case column names."""

import re
from typing import Iterable, Optional

from tillersync.domain.errors import ValidationError

NO_NAME = "no_name"

_COLUMN_PATTERN = re.compile(r"^[a-z][a-z0-9_]*$")


def to_column(header: str) -> str:
    """Derive a column name from a sheet header.

    Spaces become underscores, ``#`` becomes ``number`` and everything that is
    not an ascii letter, digit or underscore is dropped. Headers that do not
    start with a letter get an ``x_`` prefix; an empty header becomes
    ``no_name``.

    Args:
        header: Header text exactly as it appears in the sheet

    Returns:
        Column name such as ``account_number`` for ``Account #``
    """
    if header == "":
        return NO_NAME

    lowered = header.lower()
    replaced = lowered.replace(" ", "_").replace("#", "number")
    column = "".join(
        c for c in replaced if (c.isascii() and c.isalnum()) or c == "_"
    )
    first = replaced[0]
    if not (first.isascii() and first.isalpha()):
        column = f"x_{column}"
    return column


def validate_column(column: str) -> None:
    """Raise ValidationError unless column is a safe snake_case identifier."""
    if not _COLUMN_PATTERN.match(column):
        raise ValidationError(
            f"Invalid column name '{column}': must start with a lowercase letter "
            "and contain only lowercase letters, digits and underscores"
        )


class Mapping:
    """Ordered header to column mapping for one sheet.

    Construction fails if a header repeats or if two headers derive the same
    column name. Instances are not modified after construction.
    """

    def __init__(self, headers: Iterable[str]):
        headers = tuple(headers)
        columns = tuple(to_column(h) for h in headers)
        for column in columns:
            validate_column(column)

        header_index = {h: i for i, h in enumerate(headers)}
        if len(header_index) != len(headers):
            raise ValidationError(f"Encountered a duplicate header in {list(headers)}")

        column_index = {c: i for i, c in enumerate(columns)}
        if len(column_index) != len(columns):
            raise ValidationError(
                "Encountered a duplicate column name (two or more headers resulted "
                f"in the same snake_case conversion) in {list(headers)}"
            )

        self._headers = headers
        self._columns = columns
        self._header_index = header_index
        self._column_index = column_index

    @property
    def headers(self) -> tuple[str, ...]:
        return self._headers

    @property
    def columns(self) -> tuple[str, ...]:
        return self._columns

    def header_index(self, header: str) -> Optional[int]:
        return self._header_index.get(header)

    def column_index(self, column: str) -> Optional[int]:
        return self._column_index.get(column)

    def column_for(self, header: str) -> Optional[str]:
        """Return the column name derived from header, if header is mapped."""
        index = self._header_index.get(header)
        if index is None:
            return None
        return self._columns[index]

    def __len__(self) -> int:
        return len(self._headers)

    def __iter__(self):
        return iter(zip(self._headers, self._columns))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Mapping):
            return NotImplemented
        return self._headers == other._headers

    def __hash__(self) -> int:
        return hash(self._headers)

    def __repr__(self) -> str:
        return f"Mapping({list(self._headers)!r})"
