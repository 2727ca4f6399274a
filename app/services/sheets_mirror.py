"""
Best-effort copy of user data into a Google Sheets spreadsheet.

Every tab keeps the user id in column A. Income and expense rows carry the
entry id in their last column and are upserted by it, so replaying a write
updates the existing row instead of adding a duplicate. Budget and goal rows
mirror the store's full-replace semantics: each save rewrites the user's rows
in that tab. The spreadsheet is an export sink: nothing user-facing is ever
served from it.
"""
import json
import logging
import threading
from typing import Iterable, List, Optional

from google.oauth2 import service_account
from googleapiclient.discovery import build

from app.core.config import Settings
from app.schemas.finance import BudgetAllocation, ExpenseEntry, Goal, IncomeEntry, Profile

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]

PROFILES = ("UserProfiles", "H")
INCOME = ("Income", "E")
EXPENSES = ("Expenses", "F")
BUDGET = ("Budget", "D")
GOALS = ("Goals", "E")


def _num(value, cast=float):
    try:
        return cast(value)
    except (TypeError, ValueError):
        return 0


def _cell(row: List, index: int, default=""):
    return row[index] if len(row) > index and row[index] is not None else default


def _blank(value):
    return "" if value is None else value


def _width(tab) -> int:
    return ord(tab[1]) - ord("A") + 1


def _pad(row: List, width: int) -> List:
    return list(row) + [""] * (width - len(row))


class SheetsMirror:
    def __init__(self, spreadsheet_id: str, service):
        self.spreadsheet_id = spreadsheet_id
        self.service = service
        # The discovery client shares one HTTP connection and is not thread safe
        self._lock = threading.RLock()

    @classmethod
    def from_service_account_info(cls, spreadsheet_id: str, info: dict) -> "SheetsMirror":
        credentials = service_account.Credentials.from_service_account_info(info, scopes=SCOPES)
        service = build("sheets", "v4", credentials=credentials, cache_discovery=False)
        return cls(spreadsheet_id, service)

    def close(self) -> None:
        with self._lock:
            self.service.close()

    # Values API

    def _values(self):
        return self.service.spreadsheets().values()

    def _get_values(self, range_: str) -> List[List]:
        with self._lock:
            result = self._values().get(spreadsheetId=self.spreadsheet_id, range=range_).execute()
        return result.get("values", [])

    def _append(self, range_: str, rows: List[List]) -> None:
        with self._lock:
            self._values().append(
                spreadsheetId=self.spreadsheet_id,
                range=range_,
                valueInputOption="RAW",
                insertDataOption="INSERT_ROWS",
                body={"values": rows},
            ).execute()

    def _update(self, range_: str, rows: List[List]) -> None:
        with self._lock:
            self._values().update(
                spreadsheetId=self.spreadsheet_id,
                range=range_,
                valueInputOption="RAW",
                body={"values": rows},
            ).execute()

    def _batch_update(self, data: List[dict]) -> None:
        with self._lock:
            self._values().batchUpdate(
                spreadsheetId=self.spreadsheet_id,
                body={"valueInputOption": "RAW", "data": data},
            ).execute()

    def _clear(self, range_: str) -> None:
        with self._lock:
            self._values().clear(spreadsheetId=self.spreadsheet_id, range=range_, body={}).execute()

    def _upsert_rows(self, tab, rows: List[List], key_index: int) -> None:
        """Overwrite rows whose key column matches, append the rest."""
        if not rows:
            return
        name, last_col = tab
        with self._lock:
            existing = self._get_values(f"{name}!A:{last_col}")
            positions = {}
            for number, row in enumerate(existing, start=1):
                key = _cell(row, key_index)
                if key:
                    positions[key] = number

            updates, appends = [], []
            for row in rows:
                number = positions.get(row[key_index])
                if number:
                    updates.append({"range": f"{name}!A{number}:{last_col}{number}", "values": [row]})
                else:
                    appends.append(row)

            if updates:
                self._batch_update(updates)
            if appends:
                self._append(f"{name}!A:{last_col}", appends)

    def _replace_user_rows(self, tab, user_id: str, rows: List[List]) -> None:
        """
        Make ``rows`` the only rows for ``user_id`` in ``tab``. Rows of other
        users (and the header) keep their relative order; the tab is rewritten
        from the top and any leftover rows at the bottom are cleared.
        """
        name, last_col = tab
        width = _width(tab)
        with self._lock:
            existing = self._get_values(f"{name}!A:{last_col}")
            kept = [row for row in existing if row and _cell(row, 0) != user_id]
            stale = [row for row in existing if row and _cell(row, 0) == user_id]
            if not stale and not rows:
                return
            table = [_pad(row, width) for row in kept + rows]
            if table:
                self._update(f"{name}!A1:{last_col}{len(table)}", table)
            if len(existing) > len(table):
                self._clear(f"{name}!A{len(table) + 1}:{last_col}{len(existing)}")

    # Writes

    def update_user_profile(self, user_id: str, profile: Profile) -> None:
        row = [
            user_id,
            _blank(profile.full_name),
            _blank(profile.age),
            _blank(profile.location),
            _blank(profile.dependents),
            _blank(profile.filing_status),
            _blank(profile.credit_score),
            _blank(profile.credit_band),
        ]
        self._upsert_rows(PROFILES, [row], key_index=0)

    def add_income_entries(self, user_id: str, entries: Iterable[IncomeEntry]) -> None:
        rows = [[user_id, e.source, e.amount, e.frequency, e.id] for e in entries]
        self._upsert_rows(INCOME, rows, key_index=4)

    def add_expense_entries(self, user_id: str, entries: Iterable[ExpenseEntry]) -> None:
        rows = [
            [user_id, e.category, e.amount, e.date.isoformat(), e.description or "", e.id]
            for e in entries
        ]
        self._upsert_rows(EXPENSES, rows, key_index=5)

    def add_budget_entries(self, user_id: str, allocations: Iterable[BudgetAllocation]) -> None:
        """Replaces the user's budget rows."""
        rows = [[user_id, a.category, a.monthly_amount, a.id] for a in allocations]
        self._replace_user_rows(BUDGET, user_id, rows)

    def add_goal_entries(self, user_id: str, goals: Iterable[Goal]) -> None:
        """Replaces the user's goal rows."""
        rows = [[user_id, g.name, g.target_amount, g.target_date.isoformat(), g.id] for g in goals]
        self._replace_user_rows(GOALS, user_id, rows)

    # Read (recovery / export only)

    def _rows_for(self, tab, user_id: str) -> List[List]:
        name, last_col = tab
        return [row for row in self._get_values(f"{name}!A:{last_col}") if _cell(row, 0) == user_id]

    def get_user_financial_data(self, user_id: str) -> Optional[dict]:
        """
        Everything the spreadsheet holds for ``user_id`` as plain dicts, or
        ``None`` when it has no profile row. Malformed numbers read as 0.
        """
        profile_rows = self._rows_for(PROFILES, user_id)
        if not profile_rows:
            logger.info("No spreadsheet profile found for user %s", user_id)
            return None
        p = profile_rows[0]
        credit_score = _cell(p, 6)

        return {
            "user_id": user_id,
            "profile": {
                "full_name": _cell(p, 1),
                "age": _num(_cell(p, 2), int),
                "location": _cell(p, 3),
                "dependents": _num(_cell(p, 4), int),
                "filing_status": _cell(p, 5),
                "credit_score": _num(credit_score, int) if credit_score != "" else None,
                "credit_band": _cell(p, 7) or None,
            },
            "income": [
                {
                    "source": _cell(r, 1),
                    "amount": _num(_cell(r, 2)),
                    "frequency": _cell(r, 3) or "monthly",
                    "id": _cell(r, 4) or None,
                }
                for r in self._rows_for(INCOME, user_id)
            ],
            "expenses": [
                {
                    "category": _cell(r, 1),
                    "amount": _num(_cell(r, 2)),
                    "date": _cell(r, 3),
                    "description": _cell(r, 4),
                    "id": _cell(r, 5) or None,
                }
                for r in self._rows_for(EXPENSES, user_id)
            ],
            "budget": [
                {"category": _cell(r, 1), "monthly_amount": _num(_cell(r, 2)), "id": _cell(r, 3) or None}
                for r in self._rows_for(BUDGET, user_id)
            ],
            "goals": [
                {
                    "name": _cell(r, 1),
                    "target_amount": _num(_cell(r, 2)),
                    "target_date": _cell(r, 3),
                    "id": _cell(r, 4) or None,
                }
                for r in self._rows_for(GOALS, user_id)
            ],
        }


def build_mirror(settings: Settings) -> Optional[SheetsMirror]:
    if not settings.google_sheets_id or not settings.google_service_account_key:
        logger.warning("Google Sheets mirror disabled: GOOGLE_SHEETS_ID or GOOGLE_SERVICE_ACCOUNT_KEY not set")
        return None
    try:
        info = json.loads(settings.google_service_account_key)
        if not isinstance(info, dict):
            raise ValueError("service account key must be a JSON object")
        return SheetsMirror.from_service_account_info(settings.google_sheets_id, info)
    except ValueError as exc:
        # google-auth reports missing fields and unreadable private keys as ValueError
        logger.error("Google Sheets mirror disabled: invalid service account key (%s)", exc)
        return None


def replicate(mirror: Optional[SheetsMirror], method: str, *args) -> None:
    """
    Run one mirror write. Meant to be scheduled as a background task after
    the primary write has been committed; it never raises.
    """
    if mirror is None:
        logger.info("Skipping spreadsheet mirror for %s: not configured", method)
        return
    try:
        getattr(mirror, method)(*args)
        logger.info("Mirrored %s to Google Sheets", method)
    except Exception:
        logger.exception("Error mirroring %s to Google Sheets", method)
