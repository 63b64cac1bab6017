"""Abstract spreadsheet interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


class SheetError(RuntimeError):
    """Base error raised when the spreadsheet cannot be read or written."""


@dataclass(frozen=True)
class SheetRange:
    """Values to write to an A1 range such as ``Transactions!A1:ZZ``."""

    range: str
    values: list[list[str]]


class Sheet(ABC):
    """A spreadsheet made of named tabs.

    Rows are lists of strings; trailing empty cells may be omitted.
    """

    @abstractmethod
    def get(self, tab: str) -> list[list[str]]:
        """Return the displayed values of every row of tab."""
        pass

    @abstractmethod
    def get_formulas(self, tab: str) -> list[list[str]]:
        """Return tab in the same layout as get, with formula text in formula cells.

        Cells without a formula hold the same text that get returns.
        """
        pass

    def get_with_formulas(self, tab: str) -> tuple[list[list[str]], list[list[str]]]:
        """Return the results of get and get_formulas for tab.

        Implementations that can fetch both in one read override this so the
        two matrices come from the same state of the sheet.
        """
        return self.get(tab), self.get_formulas(tab)

    @abstractmethod
    def clear(self, ranges: list[str]) -> None:
        """Clear every cell in the given A1 ranges."""
        pass

    @abstractmethod
    def write(self, ranges: list[SheetRange]) -> None:
        """Write values to ranges; text starting with '=' is entered as a formula."""
        pass

    @abstractmethod
    def copy(self, name: str) -> str:
        """Copy the whole spreadsheet under a new name. Returns the copy's ID."""
        pass
