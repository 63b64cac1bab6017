"""An in-memory spreadsheet used in testing mode and by the test suite."""

import copy
import csv
import io
import logging
import re
from typing import Any, Optional

from tillersync.domain.tiller_data import AUTO_CAT, CATEGORIES, TRANSACTIONS
from tillersync.sheets.base import Sheet, SheetError, SheetRange

logger = logging.getLogger(__name__)

_RANGE_PATTERN = re.compile(
    r"^(?:'(?P<quoted>(?:[^']|'')+)'|(?P<tab>[^!]+))!(?P<c0>[A-Z]+)(?P<r0>\d+)"
    r"(?::(?P<c1>[A-Z]+)(?P<r1>\d+)?)?$"
)

Grid = list[list[str]]


def _column_number(letters: str) -> int:
    number = 0
    for letter in letters:
        number = number * 26 + (ord(letter) - ord("A") + 1)
    return number - 1


def parse_range(a1: str) -> tuple[str, int, int, Optional[int], Optional[int]]:
    """Split ``Tab!A1:ZZ`` into tab name, start row/col and end row/col (inclusive).

    Rows and columns are zero-based; a missing end is None.
    """
    match = _RANGE_PATTERN.match(a1)
    if match is None:
        raise SheetError(f"Unable to parse range: {a1}")
    tab = match.group("quoted")
    tab = tab.replace("''", "'") if tab is not None else match.group("tab")
    end_col = _column_number(match.group("c1")) if match.group("c1") else None
    end_row = int(match.group("r1")) - 1 if match.group("r1") else None
    return tab, int(match.group("r0")) - 1, _column_number(match.group("c0")), end_row, end_col


def _trim(grid: Grid) -> Grid:
    rows = []
    for row in grid:
        row = list(row)
        while row and row[-1] == "":
            row.pop()
        rows.append(row)
    while rows and not rows[-1]:
        rows.pop()
    return rows


def _set_cell(grid: Grid, row: int, col: int, value: str) -> None:
    while len(grid) <= row:
        grid.append([])
    cells = grid[row]
    while len(cells) <= col:
        cells.append("")
    cells[col] = value


class MemorySheet(Sheet):
    """Spreadsheet held in dictionaries of rows, recording every call.

    Written cells that start with '=' are kept as formulas; their displayed
    value is empty because formulas are never evaluated.
    """

    def __init__(self):
        self.data: dict[str, Grid] = {}
        self.formulas: dict[str, Grid] = {}
        self.copies: dict[str, dict[str, Grid]] = {}
        self.call_history: list[tuple[str, Any]] = []

    @classmethod
    def seeded(cls) -> "MemorySheet":
        """Return a sheet holding sample Tiller data with a formula column."""
        sheet = cls()
        transactions = _load_csv(SEED_TRANSACTIONS)
        sheet.with_sheet(TRANSACTIONS, transactions)
        sheet.with_formulas(TRANSACTIONS, _custom_column_formulas(transactions))
        sheet.with_sheet(CATEGORIES, _load_csv(SEED_CATEGORIES))
        sheet.with_sheet(AUTO_CAT, _load_csv(SEED_AUTO_CAT))
        return sheet

    def with_sheet(self, tab: str, rows: Grid) -> "MemorySheet":
        self.data[tab] = copy.deepcopy(rows)
        return self

    def with_formulas(self, tab: str, rows: Grid) -> "MemorySheet":
        self.formulas[tab] = copy.deepcopy(rows)
        return self

    def clear_history(self) -> None:
        self.call_history.clear()

    def calls(self, method: str) -> list[Any]:
        """Return the arguments of every recorded call to method."""
        return [args for name, args in self.call_history if name == method]

    def get(self, tab: str) -> list[list[str]]:
        rows = _trim(self._tab(tab))
        self.call_history.append(("get", tab))
        return rows

    def get_formulas(self, tab: str) -> list[list[str]]:
        grid = self.formulas.get(tab)
        rows = _trim(grid if grid is not None else self._tab(tab))
        self.call_history.append(("get_formulas", tab))
        return rows

    def clear(self, ranges: list[str]) -> None:
        self.call_history.append(("clear", list(ranges)))
        for a1 in ranges:
            tab, r0, c0, r1, c1 = parse_range(a1)
            for grid in (self._tab(tab), self.formulas.get(tab)):
                if grid is None:
                    continue
                last_row = len(grid) - 1 if r1 is None else min(r1, len(grid) - 1)
                for row in range(r0, last_row + 1):
                    cells = grid[row]
                    last_col = len(cells) - 1 if c1 is None else min(c1, len(cells) - 1)
                    for col in range(c0, last_col + 1):
                        cells[col] = ""

    def write(self, ranges: list[SheetRange]) -> None:
        self.call_history.append(("write", list(ranges)))
        for sheet_range in ranges:
            tab, r0, c0, _, _ = parse_range(sheet_range.range)
            values = self.data.setdefault(tab, [])
            formulas = self.formulas.setdefault(tab, copy.deepcopy(values))
            for row_ix, row in enumerate(sheet_range.values):
                for col_ix, cell in enumerate(row):
                    cell = str(cell)
                    _set_cell(formulas, r0 + row_ix, c0 + col_ix, cell)
                    _set_cell(values, r0 + row_ix, c0 + col_ix, "" if cell.startswith("=") else cell)

    def copy(self, name: str) -> str:
        self.call_history.append(("copy", name))
        self.copies[name] = copy.deepcopy(self.data)
        copy_id = f"memory-copy-{len(self.copies)}"
        logger.info("Copied in-memory sheet to '%s' (%s)", name, copy_id)
        return copy_id

    def _tab(self, tab: str) -> Grid:
        if tab not in self.data:
            raise SheetError(f"Sheet '{tab}' not found")
        return self.data[tab]


def _load_csv(text: str) -> Grid:
    return [row for row in csv.reader(io.StringIO(text.strip() + "\n"))]


def _custom_column_formulas(transactions: Grid) -> Grid:
    header = transactions[0]
    col = header.index("Custom Column")
    rows = [list(header)]
    for sheet_row, row in enumerate(transactions[1:], start=2):
        formula_row = list(row)
        formula_row[col] = f"=ABS(E{sheet_row})"
        rows.append(formula_row)
    return rows


SEED_TRANSACTIONS = """\
,Date,Description,Category,Amount,Account,Account #,Institution,Month,Week,Transaction ID,Account ID,Check Number,Full Description,Date Added,Categorized Date,Custom Column
,10/20/2025,Whole Foods Market,Groceries,-$87.43,Credit Card 1,xxxx1234,Bank A,10/1/25,10/19/25,tx001a2b3c4d5e6f7g8h9i01,acct001a2b3c4d5e6f7g,,WHOLE FOODS MARKET,10/21/25,10/21/2025 9:15:30 AM,87.43
,10/19/2025,Starbucks #2847,Coffee Shops,-$6.75,Credit Card 1,xxxx1234,Bank A,10/1/25,10/19/25,tx001a2b3c4d5e6f7g8h9i02,acct001a2b3c4d5e6f7g,,STARBUCKS #2847,10/20/25,10/20/2025 8:45:12 AM,6.75
,10/18/2025,Shell Gas Station,Gas & Fuel,-$52.30,Credit Card 1,xxxx1234,Bank A,10/1/25,10/12/25,tx001a2b3c4d5e6f7g8h9i03,acct001a2b3c4d5e6f7g,,SHELL GAS STATION,10/19/25,10/19/2025 7:22:45 AM,52.30
,10/17/2025,Chipotle Mexican Grill,Restaurants,-$14.85,Credit Card 1,xxxx1234,Bank A,10/1/25,10/12/25,tx001a2b3c4d5e6f7g8h9i04,acct001a2b3c4d5e6f7g,,CHIPOTLE MEXICAN GRILL,10/18/25,10/18/2025 12:35:20 PM,14.85
,10/16/2025,PG&E Electric,Utilities,"-$1,142.67",Checking 1,xxxx5678,Bank A,10/1/25,10/12/25,tx001a2b3c4d5e6f7g8h9i05,acct002a2b3c4d5e6f7g,,PG&E ELECTRIC,10/17/25,10/17/2025 6:00:00 AM,1142.67
,10/15/2025,Trader Joe's #429,Groceries,-$63.21,Credit Card 1,xxxx1234,Bank A,10/1/25,10/12/25,tx001a2b3c4d5e6f7g8h9i06,acct001a2b3c4d5e6f7g,,TRADER JOE'S #429,10/16/25,10/16/2025 4:18:33 PM,63.21
,10/14/2025,Paycheck,Income,"$2,500.00",Checking 1,xxxx5678,Bank A,10/1/25,10/12/25,tx001a2b3c4d5e6f7g8h9i07,acct002a2b3c4d5e6f7g,,ACME PAYROLL,10/15/25,10/15/2025 9:22:18 AM,2500.00
,10/13/2025,Chevron Gas,Gas & Fuel,-$48.90,Credit Card 1,xxxx1234,Bank A,10/1/25,10/12/25,tx001a2b3c4d5e6f7g8h9i08,acct001a2b3c4d5e6f7g,,CHEVRON GAS,10/14/25,10/14/2025 5:45:09 PM,48.90
"""

SEED_CATEGORIES = """\
Category,Group,Type,Hide From Reports,Jan 2025,Feb 2025
Groceries,Food,Expense,,$0.00,$0.00
Coffee Shops,Food,Expense,,$0.00,$0.00
Gas & Fuel,Auto,Expense,,$0.00,$0.00
Restaurants,Food,Expense,,$0.00,$0.00
Utilities,Home,Expense,,$0.00,$0.00
Income,Income,Income,,$0.00,$0.00
"""

SEED_AUTO_CAT = """\
Category,Description Contains,Account Contains,Institution Contains,Amount Min,Amount Max,Amount Equals,Description Equals,Description,Full Description Contains,Amount Contains
Groceries,Whole Foods,,,,,,,,,
Coffee Shops,Starbucks,,,,,,,,,
Gas & Fuel,Shell,,,$10.00,$100.00,,,,,
"""
