# orderledger/sheets/client.py

from __future__ import annotations

from typing import Any, List, Optional

from googleapiclient.discovery import build
from google.oauth2.service_account import Credentials

from orderledger.config import settings

# valueRenderOption values used by the ledger pipelines
RENDER_UNFORMATTED = "UNFORMATTED_VALUE"
RENDER_FORMATTED = "FORMATTED_VALUE"

# valueInputOption values: formulas evaluated vs. stored literally
INPUT_USER_ENTERED = "USER_ENTERED"
INPUT_RAW = "RAW"


def get_sheets_service():
    """Create and return a Google Sheets API service client."""
    scopes = ["https://www.googleapis.com/auth/spreadsheets"]
    creds = Credentials.from_service_account_file(
        settings.GOOGLE_SERVICE_ACCOUNT_FILE, scopes=scopes
    )
    # cache_discovery=False avoids file system writes in some environments
    return build("sheets", "v4", credentials=creds, cache_discovery=False)


class SheetsClient:
    """Thin wrapper around the Google Sheets API.

    - get_values returns unformatted values by default; pass
      RENDER_FORMATTED to read what the sheet displays.
    - update_values evaluates formulas (USER_ENTERED) by default; pass
      INPUT_RAW to store strings literally.
    """

    def __init__(self, service) -> None:
        self.service = service

    def get_values(
        self,
        spreadsheet_id: str,
        range_: str,
        value_render_option: str = RENDER_UNFORMATTED,
    ) -> List[List[Any]]:
        """Get values from a given spreadsheet and range."""
        resp = (
            self.service.spreadsheets()
            .values()
            .get(
                spreadsheetId=spreadsheet_id,
                range=range_,
                valueRenderOption=value_render_option,
            )
            .execute()
        )
        return resp.get("values", [])

    def update_values(
        self,
        spreadsheet_id: str,
        range_: str,
        values: List[List[Any]],
        value_input_option: str = INPUT_USER_ENTERED,
    ) -> None:
        """Update values in a given spreadsheet and range."""
        body = {"values": values}
        (
            self.service.spreadsheets()
            .values()
            .update(
                spreadsheetId=spreadsheet_id,
                range=range_,
                valueInputOption=value_input_option,
                body=body,
            )
            .execute()
        )

    def clear_values(self, spreadsheet_id: str, range_: str) -> None:
        """Clear values (not formatting) in a given range."""
        (
            self.service.spreadsheets()
            .values()
            .clear(spreadsheetId=spreadsheet_id, range=range_, body={})
            .execute()
        )

    def get_sheet_id(self, spreadsheet_id: str, tab_name: str) -> Optional[int]:
        """Return the numeric sheetId of a tab by title, or None if absent."""
        resp = (
            self.service.spreadsheets()
            .get(spreadsheetId=spreadsheet_id, fields="sheets.properties(title,sheetId)")
            .execute()
        )
        for sheet in resp.get("sheets", []):
            props = sheet.get("properties", {})
            if props.get("title") == tab_name:
                return props.get("sheetId")
        return None

    def batch_update(self, spreadsheet_id: str, requests: list[dict]) -> None:
        """Send a batchUpdate with the provided list of requests."""
        if not requests:
            return
        body = {"requests": requests}
        (
            self.service.spreadsheets()
            .batchUpdate(spreadsheetId=spreadsheet_id, body=body)
            .execute()
        )
