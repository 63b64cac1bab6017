"""Domain records for the Transactions, Categories and AutoCat sheets.

Each record keeps the columns it knows as typed fields and every other column
in ``other_fields`` under its literal header, so a sheet survives a round trip
through the local store without losing cells.
"""

from dataclasses import dataclass, field, fields, replace
from typing import Any, ClassVar, Optional, Protocol

from tillersync.domain.amount import Amount


class Item(Protocol):
    """A record that can be read from and written to a sheet row by header."""

    original_order: Optional[int]
    other_fields: dict[str, str]

    def set_with_header(self, header: str, value: str) -> None:
        ...

    def get_with_header(self, header: str) -> str:
        ...


def _set_with_header(record: Any, header: str, value: str) -> None:
    name = record.HEADERS.get(header)
    if name is None:
        record.other_fields[header] = value
    elif name in record.AMOUNT_FIELDS:
        setattr(record, name, Amount.parse(value))
    elif name in record.OPTIONAL_AMOUNT_FIELDS:
        setattr(record, name, Amount.parse_optional(value))
    else:
        setattr(record, name, value)


def _get_with_header(record: Any, header: str) -> str:
    name = record.HEADERS.get(header)
    if name is None:
        return record.other_fields.get(header, "")
    value = getattr(record, name)
    if value is None:
        return ""
    return str(value)


def _to_dict(record: Any) -> dict[str, Any]:
    data: dict[str, Any] = {}
    for f in fields(record):
        if f.name == "original_order":
            continue
        value = getattr(record, f.name)
        if isinstance(value, Amount):
            value = str(value)
        elif f.name == "other_fields":
            value = dict(value)
        data[f.name] = value
    if record.original_order is not None:
        data["original_order"] = record.original_order
    return data


def _from_dict(record_type: Any, data: dict[str, Any]) -> Any:
    values: dict[str, Any] = {}
    for f in fields(record_type):
        if f.name not in data:
            continue
        value = data[f.name]
        if f.name in record_type.AMOUNT_FIELDS:
            value = Amount.parse(value)
        elif f.name in record_type.OPTIONAL_AMOUNT_FIELDS:
            value = None if value is None else Amount.parse(value)
        elif f.name == "other_fields":
            value = dict(value)
        values[f.name] = value
    return record_type(**values)


def _apply_updates(record: Any, updates: Any) -> Any:
    changes = {
        f.name: getattr(updates, f.name)
        for f in fields(updates)
        if f.name != "other_fields" and getattr(updates, f.name) is not None
    }
    other_fields = dict(record.other_fields)
    other_fields.update(updates.other_fields)
    return replace(record, other_fields=other_fields, **changes)


@dataclass
class Transaction:
    """A row of the Transactions sheet."""

    HEADERS: ClassVar[dict[str, str]] = {
        "Transaction ID": "transaction_id",
        "Date": "date",
        "Description": "description",
        "Amount": "amount",
        "Account": "account",
        "Account #": "account_number",
        "Institution": "institution",
        "Month": "month",
        "Week": "week",
        "Full Description": "full_description",
        "Account ID": "account_id",
        "Check Number": "check_number",
        "Date Added": "date_added",
        "Merchant Name": "merchant_name",
        "Category Hint": "category_hint",
        "Category": "category",
        "Note": "note",
        "Tags": "tags",
        "Categorized Date": "categorized_date",
        "Statement": "statement",
        "Metadata": "metadata",
        "": "no_name",
    }
    AMOUNT_FIELDS: ClassVar[frozenset[str]] = frozenset({"amount"})
    OPTIONAL_AMOUNT_FIELDS: ClassVar[frozenset[str]] = frozenset()

    transaction_id: str = ""
    date: str = ""
    description: str = ""
    amount: Amount = field(default_factory=Amount)
    account: str = ""
    account_number: str = ""
    institution: str = ""
    month: str = ""
    week: str = ""
    full_description: str = ""
    account_id: str = ""
    check_number: str = ""
    date_added: str = ""
    merchant_name: str = ""
    category_hint: str = ""
    category: str = ""
    note: str = ""
    tags: str = ""
    categorized_date: str = ""
    statement: str = ""
    metadata: str = ""
    no_name: str = ""
    other_fields: dict[str, str] = field(default_factory=dict)
    original_order: Optional[int] = None

    def set_with_header(self, header: str, value: str) -> None:
        _set_with_header(self, header, value)

    def get_with_header(self, header: str) -> str:
        return _get_with_header(self, header)

    def to_dict(self) -> dict[str, Any]:
        return _to_dict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Transaction":
        return _from_dict(cls, data)


@dataclass
class Category:
    """A row of the Categories sheet."""

    HEADERS: ClassVar[dict[str, str]] = {
        "Category": "category",
        "Group": "group",
        "Type": "type",
        "Hide from Reports": "hide_from_reports",
    }
    AMOUNT_FIELDS: ClassVar[frozenset[str]] = frozenset()
    OPTIONAL_AMOUNT_FIELDS: ClassVar[frozenset[str]] = frozenset()

    category: str = ""
    group: str = ""
    type: str = ""
    hide_from_reports: str = ""
    other_fields: dict[str, str] = field(default_factory=dict)
    original_order: Optional[int] = None

    def set_with_header(self, header: str, value: str) -> None:
        _set_with_header(self, header, value)

    def get_with_header(self, header: str) -> str:
        return _get_with_header(self, header)

    def to_dict(self) -> dict[str, Any]:
        return _to_dict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Category":
        return _from_dict(cls, data)


@dataclass
class AutoCat:
    """A row of the AutoCat sheet.

    Filter fields are combined with AND by Tiller's rule engine; ``category``
    and ``description`` are the overrides applied to matching transactions.
    ``id`` is assigned by the local store and is not part of the sheet.
    """

    HEADERS: ClassVar[dict[str, str]] = {
        "Category": "category",
        "Description": "description",
        "Description Contains": "description_contains",
        "Account Contains": "account_contains",
        "Institution Contains": "institution_contains",
        "Amount Min": "amount_min",
        "Amount Max": "amount_max",
        "Amount Equals": "amount_equals",
        "Description Equals": "description_equals",
        "Description Full": "description_full",
        "Full Description Contains": "full_description_contains",
        "Amount Contains": "amount_contains",
    }
    AMOUNT_FIELDS: ClassVar[frozenset[str]] = frozenset()
    OPTIONAL_AMOUNT_FIELDS: ClassVar[frozenset[str]] = frozenset(
        {"amount_min", "amount_max", "amount_equals"}
    )

    id: Optional[int] = field(default=None, compare=False)
    category: str = ""
    description: str = ""
    description_contains: str = ""
    account_contains: str = ""
    institution_contains: str = ""
    amount_min: Optional[Amount] = None
    amount_max: Optional[Amount] = None
    amount_equals: Optional[Amount] = None
    description_equals: str = ""
    description_full: str = ""
    full_description_contains: str = ""
    amount_contains: str = ""
    other_fields: dict[str, str] = field(default_factory=dict)
    original_order: Optional[int] = None

    def set_with_header(self, header: str, value: str) -> None:
        _set_with_header(self, header, value)

    def get_with_header(self, header: str) -> str:
        return _get_with_header(self, header)

    def to_dict(self) -> dict[str, Any]:
        data = _to_dict(self)
        del data["id"]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AutoCat":
        return _from_dict(cls, data)


@dataclass
class TransactionUpdates:
    """Fields to change on one or more transactions; None leaves a field as is."""

    date: Optional[str] = None
    description: Optional[str] = None
    amount: Optional[Amount] = None
    account: Optional[str] = None
    account_number: Optional[str] = None
    institution: Optional[str] = None
    month: Optional[str] = None
    week: Optional[str] = None
    full_description: Optional[str] = None
    account_id: Optional[str] = None
    check_number: Optional[str] = None
    date_added: Optional[str] = None
    merchant_name: Optional[str] = None
    category_hint: Optional[str] = None
    category: Optional[str] = None
    note: Optional[str] = None
    tags: Optional[str] = None
    categorized_date: Optional[str] = None
    statement: Optional[str] = None
    metadata: Optional[str] = None
    no_name: Optional[str] = None
    other_fields: dict[str, str] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return all(
            getattr(self, f.name) is None for f in fields(self) if f.name != "other_fields"
        ) and not self.other_fields

    def apply(self, record: Transaction) -> Transaction:
        """Return a copy of record with these updates merged in."""
        return _apply_updates(record, self)


@dataclass
class CategoryUpdates:
    """Fields to change on one or more categories; setting ``category`` renames."""

    category: Optional[str] = None
    group: Optional[str] = None
    type: Optional[str] = None
    hide_from_reports: Optional[str] = None
    other_fields: dict[str, str] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return all(
            getattr(self, f.name) is None for f in fields(self) if f.name != "other_fields"
        ) and not self.other_fields

    def apply(self, record: Category) -> Category:
        """Return a copy of record with these updates merged in."""
        return _apply_updates(record, self)


@dataclass
class AutoCatUpdates:
    """Fields to change on one or more AutoCat rules."""

    category: Optional[str] = None
    description: Optional[str] = None
    description_contains: Optional[str] = None
    account_contains: Optional[str] = None
    institution_contains: Optional[str] = None
    amount_min: Optional[Amount] = None
    amount_max: Optional[Amount] = None
    amount_equals: Optional[Amount] = None
    description_equals: Optional[str] = None
    description_full: Optional[str] = None
    full_description_contains: Optional[str] = None
    amount_contains: Optional[str] = None
    other_fields: dict[str, str] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return all(
            getattr(self, f.name) is None for f in fields(self) if f.name != "other_fields"
        ) and not self.other_fields

    def apply(self, record: AutoCat) -> AutoCat:
        """Return a copy of record with these updates merged in."""
        return _apply_updates(record, self)


@dataclass
class QueryResult:
    """Column names and rows returned by a read-only query."""

    columns: list[str]
    rows: list[tuple[Any, ...]]

    def records(self) -> list[dict[str, Any]]:
        return [dict(zip(self.columns, row)) for row in self.rows]


@dataclass
class ColumnInfo:
    name: str
    data_type: str
    nullable: bool
    primary_key: bool


@dataclass
class IndexInfo:
    name: str
    columns: list[str]
    unique: bool


@dataclass
class ForeignKeyInfo:
    columns: list[str]
    references_table: str
    references_columns: list[str]


@dataclass
class TableInfo:
    """Description of one table of the local database."""

    name: str
    row_count: int
    columns: list[ColumnInfo] = field(default_factory=list)
    indexes: list[IndexInfo] = field(default_factory=list)
    foreign_keys: list[ForeignKeyInfo] = field(default_factory=list)
