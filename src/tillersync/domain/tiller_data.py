"""The three Tiller sheets held together as one unit of sync."""

from dataclasses import dataclass
from typing import Any

from tillersync.domain.entities import AutoCat, Category, Transaction
from tillersync.domain.items import Items
from tillersync.domain.mapping import Mapping

TRANSACTIONS = "Transactions"
CATEGORIES = "Categories"
AUTO_CAT = "AutoCat"

SHEETS = (TRANSACTIONS, CATEGORIES, AUTO_CAT)

RECORD_TYPES = {
    TRANSACTIONS: Transaction,
    CATEGORIES: Category,
    AUTO_CAT: AutoCat,
}


def default_mapping(sheet: str) -> Mapping:
    """Return the mapping of the known headers of sheet, in Tiller's order."""
    return Mapping(RECORD_TYPES[sheet].HEADERS.keys())


@dataclass
class TillerData:
    """Transactions, categories and AutoCat rules with their mappings and formulas.

    Equality compares headers, records and formulas of all three sheets; it is
    what sync uses to decide whether the remote sheet changed.
    """

    transactions: Items[Transaction]
    categories: Items[Category]
    auto_cats: Items[AutoCat]

    @classmethod
    def parse(
        cls,
        sheets: dict[str, list[list[str]]],
        formulas: dict[str, list[list[str]]],
    ) -> "TillerData":
        """Parse downloaded values and formulas, keyed by sheet name."""
        return cls(
            transactions=Items.parse(Transaction, sheets[TRANSACTIONS], formulas.get(TRANSACTIONS, ())),
            categories=Items.parse(Category, sheets[CATEGORIES], formulas.get(CATEGORIES, ())),
            auto_cats=Items.parse(AutoCat, sheets[AUTO_CAT], formulas.get(AUTO_CAT, ())),
        )

    def sheet(self, name: str) -> Items:
        return {
            TRANSACTIONS: self.transactions,
            CATEGORIES: self.categories,
            AUTO_CAT: self.auto_cats,
        }[name]

    def has_formulas(self) -> bool:
        return any(self.sheet(name).formulas for name in SHEETS)

    def has_original_order_gaps(self) -> bool:
        """True if any sheet lost rows since it was downloaded."""
        return any(self.sheet(name).has_original_order_gaps() for name in SHEETS)

    def to_dict(self) -> dict[str, Any]:
        return {
            "transactions": self.transactions.to_dict(),
            "categories": self.categories.to_dict(),
            "auto_cats": self.auto_cats.to_dict(),
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "TillerData":
        return cls(
            transactions=Items.from_dict(Transaction, payload["transactions"]),
            categories=Items.from_dict(Category, payload["categories"]),
            auto_cats=Items.from_dict(AutoCat, payload["auto_cats"]),
        )
