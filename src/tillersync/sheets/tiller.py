"""Reading and writing the three Tiller tabs through a Sheet."""

import logging
from dataclasses import dataclass

from tillersync.domain.errors import VerificationError
from tillersync.domain.tiller_data import AUTO_CAT, CATEGORIES, SHEETS, TRANSACTIONS, TillerData
from tillersync.sheets.base import Sheet, SheetRange

logger = logging.getLogger(__name__)

_LABELS = {
    TRANSACTIONS: "transactions",
    CATEGORIES: "categories",
    AUTO_CAT: "AutoCat rules",
}


def tab_range(tab: str) -> str:
    return f"{tab}!A1:ZZ"


@dataclass(frozen=True)
class RowCounts:
    """Number of data rows (header excluded) per tab."""

    transactions: int
    categories: int
    auto_cats: int

    @classmethod
    def of(cls, data: TillerData) -> "RowCounts":
        return cls(len(data.transactions), len(data.categories), len(data.auto_cats))

    def for_sheet(self, sheet: str) -> int:
        return {
            TRANSACTIONS: self.transactions,
            CATEGORIES: self.categories,
            AUTO_CAT: self.auto_cats,
        }[sheet]


class TillerClient:
    """Tiller-specific operations on top of a generic Sheet."""

    def __init__(self, sheet: Sheet):
        self.sheet = sheet

    def get_data(self) -> TillerData:
        """Download values and formulas of all three tabs and parse them."""
        values = {}
        formulas = {}
        for tab in SHEETS:
            values[tab], formulas[tab] = self.sheet.get_with_formulas(tab)
            logger.debug("Downloaded %d rows from %s", len(values[tab]), tab)
        return TillerData.parse(values, formulas)

    def clear_and_write_data(self, data: TillerData, preserve_formulas: bool) -> None:
        """Replace the contents of all three tabs with data.

        Every tab is cleared before anything is written. Rows follow each
        tab's mapping, so columns land where they were downloaded from.
        """
        self.sheet.clear([tab_range(tab) for tab in SHEETS])

        ranges = []
        for tab in SHEETS:
            items = data.sheet(tab)
            rows = items.to_rows_with_formulas() if preserve_formulas else items.to_rows()
            ranges.append(SheetRange(tab_range(tab), rows))
        self.sheet.write(ranges)
        logger.info(
            "Wrote %d transactions, %d categories, %d AutoCat rules",
            len(data.transactions),
            len(data.categories),
            len(data.auto_cats),
        )

    def verify_write(self, data: TillerData) -> RowCounts:
        """Re-read every tab and check its row count matches what was written.

        Raises:
            VerificationError: On the first tab whose count differs
        """
        expected = RowCounts.of(data)
        found = {}
        for tab in SHEETS:
            rows = self.sheet.get(tab)
            found[tab] = max(len(rows) - 1, 0)
            if found[tab] != expected.for_sheet(tab):
                raise VerificationError(
                    f"Verification failed: expected {expected.for_sheet(tab)} "
                    f"{_LABELS[tab]}, found {found[tab]}"
                )
        return RowCounts(found[TRANSACTIONS], found[CATEGORIES], found[AUTO_CAT])

    def copy_spreadsheet(self, name: str) -> str:
        return self.sheet.copy(name)
