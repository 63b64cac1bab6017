"""Google Sheets implementation of the Sheet interface.

Credentials come from an authorized-user token file (as written by Google's
OAuth installed-app flow); google-auth refreshes the access token when it
expires. Obtaining the token in the first place is not handled here.
"""

import logging
from pathlib import Path
from typing import Any, Sequence

from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from tillersync.sheets.base import Sheet, SheetError, SheetRange

logger = logging.getLogger(__name__)

SCOPES: Sequence[str] = (
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive.file",
)

_GRID_FIELDS = "sheets(data(rowData(values(formattedValue,userEnteredValue))))"


def load_credentials(token_path: Path) -> Credentials:
    """Load user credentials from token_path, refreshing them if expired.

    Raises:
        SheetError: If the token file is missing or cannot be refreshed
    """
    if not token_path.exists():
        raise SheetError(f"Token file not found: {token_path}")
    try:
        credentials = Credentials.from_authorized_user_file(str(token_path), list(SCOPES))
        if credentials.expired and credentials.refresh_token:
            credentials.refresh(Request())
            token_path.write_text(credentials.to_json(), encoding="utf-8")
    except (GoogleAuthError, ValueError) as e:
        raise SheetError(f"Invalid credentials in {token_path}: {e}") from e
    return credentials


def _quote_tab(tab: str) -> str:
    return "'" + tab.replace("'", "''") + "'"


def _to_strings(rows: list[list[Any]]) -> list[list[str]]:
    return [[str(cell) for cell in row] for row in rows]


def _trim_row(row: list[str]) -> list[str]:
    while row and row[-1] == "":
        row.pop()
    return row


class GoogleSheet(Sheet):
    """Spreadsheet accessed through the Sheets v4 and Drive v3 APIs."""

    def __init__(self, spreadsheet_id: str, credentials: Credentials, *, sheets_service=None, drive_service=None):
        self._spreadsheet_id = spreadsheet_id
        self._sheets = sheets_service or build(
            "sheets", "v4", credentials=credentials, cache_discovery=False
        )
        self._drive = drive_service or build(
            "drive", "v3", credentials=credentials, cache_discovery=False
        )

    def _values(self, tab: str, render: str) -> list[list[str]]:
        try:
            response = (
                self._sheets.spreadsheets()
                .values()
                .get(
                    spreadsheetId=self._spreadsheet_id,
                    range=_quote_tab(tab),
                    valueRenderOption=render,
                    dateTimeRenderOption="FORMATTED_STRING",
                    majorDimension="ROWS",
                )
                .execute()
            )
        except HttpError as e:
            raise SheetError(f"Failed to read sheet '{tab}': {e}") from e
        return _to_strings(response.get("values", []))

    def get(self, tab: str) -> list[list[str]]:
        return self._values(tab, "FORMATTED_VALUE")

    def get_formulas(self, tab: str) -> list[list[str]]:
        return self.get_with_formulas(tab)[1]

    def get_with_formulas(self, tab: str) -> tuple[list[list[str]], list[list[str]]]:
        """Read displayed values and formulas of tab in a single request.

        The grid data holds each cell's formatted value and what the user
        entered; entered formulas replace the formatted value in the formula
        matrix.
        """
        try:
            response = (
                self._sheets.spreadsheets()
                .get(
                    spreadsheetId=self._spreadsheet_id,
                    ranges=[_quote_tab(tab)],
                    includeGridData=True,
                    fields=_GRID_FIELDS,
                )
                .execute()
            )
        except HttpError as e:
            raise SheetError(f"Failed to read sheet '{tab}': {e}") from e

        values = []
        formulas = []
        for sheet in response.get("sheets", []):
            for grid in sheet.get("data", []):
                for row_data in grid.get("rowData", []):
                    value_row = []
                    formula_row = []
                    for cell in row_data.get("values", []):
                        shown = str(cell.get("formattedValue", ""))
                        formula = cell.get("userEnteredValue", {}).get("formulaValue")
                        value_row.append(shown)
                        formula_row.append(formula if formula is not None else shown)
                    values.append(_trim_row(value_row))
                    formulas.append(_trim_row(formula_row))
        while formulas and not formulas[-1]:
            formulas.pop()
            values.pop()
        return values, formulas

    def clear(self, ranges: list[str]) -> None:
        try:
            (
                self._sheets.spreadsheets()
                .values()
                .batchClear(spreadsheetId=self._spreadsheet_id, body={"ranges": list(ranges)})
                .execute()
            )
        except HttpError as e:
            raise SheetError(f"Failed to clear ranges {ranges}: {e}") from e

    def write(self, ranges: list[SheetRange]) -> None:
        body = {
            "valueInputOption": "USER_ENTERED",
            "data": [
                {"range": r.range, "majorDimension": "ROWS", "values": r.values}
                for r in ranges
            ],
        }
        try:
            (
                self._sheets.spreadsheets()
                .values()
                .batchUpdate(spreadsheetId=self._spreadsheet_id, body=body)
                .execute()
            )
        except HttpError as e:
            raise SheetError(f"Failed to write ranges: {e}") from e

    def copy(self, name: str) -> str:
        try:
            response = (
                self._drive.files()
                .copy(fileId=self._spreadsheet_id, body={"name": name})
                .execute()
            )
        except HttpError as e:
            raise SheetError(f"Failed to copy spreadsheet to '{name}': {e}") from e
        logger.info("Copied spreadsheet to '%s' (%s)", name, response["id"])
        return response["id"]
