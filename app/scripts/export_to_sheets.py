"""
Export a legacy ``data.json`` store to the spreadsheet layout.

    python -m app.scripts.export_to_sheets data.json          # print tab-separated blocks
    python -m app.scripts.export_to_sheets data.json --push   # write through the mirror
"""
import argparse
from typing import Dict, List

from app.core.config import Settings
from app.repositories.json_repository import JsonRepository
from app.services.sheets_mirror import build_mirror

SHEETS = {
    "UserProfiles": ["UserId", "FullName", "Age", "Location", "Dependents", "FilingStatus", "CreditScore", "CreditBand"],
    "Income": ["UserId", "Source", "Amount", "Frequency", "EntryId"],
    "Expenses": ["UserId", "Category", "Amount", "Date", "Description", "EntryId"],
    "Budget": ["UserId", "Category", "MonthlyAmount", "EntryId"],
    "Goals": ["UserId", "Name", "TargetAmount", "TargetDate", "EntryId"],
}


def _blank(value):
    return "" if value is None else value


def build_sheet_rows(repo: JsonRepository) -> Dict[str, List[List]]:
    """Rows per tab for every user in the store. Zero income and zero budget rows are skipped."""
    raw = repo.dump()
    rows: Dict[str, List[List]] = {name: [] for name in SHEETS}

    for user_id in raw["profiles"]:
        p = repo.get_profile(user_id)
        rows["UserProfiles"].append([
            user_id, _blank(p.full_name), _blank(p.age), _blank(p.location),
            _blank(p.dependents), _blank(p.filing_status), _blank(p.credit_score), _blank(p.credit_band),
        ])
    for user_id in raw["income"]:
        for e in repo.list_income(user_id):
            if e.amount > 0:
                rows["Income"].append([user_id, e.source, e.amount, e.frequency, e.id])
    for user_id in raw["expenses"]:
        for e in repo.list_expenses(user_id):
            rows["Expenses"].append([user_id, e.category, e.amount, e.date.isoformat(), e.description or "", e.id])
    for user_id in raw["budgets"]:
        for b in repo.get_budget(user_id):
            if b.monthly_amount > 0:
                rows["Budget"].append([user_id, b.category, b.monthly_amount, b.id])
    for user_id in raw["goals"]:
        for g in repo.get_goals(user_id):
            rows["Goals"].append([user_id, g.name, g.target_amount, g.target_date.isoformat(), g.id])
    return rows


def print_sheets(rows: Dict[str, List[List]]) -> None:
    print("=== GOOGLE SHEETS DATA MIGRATION ===")
    for name, header in SHEETS.items():
        print(f"\n{name} sheet:")
        print("\t".join(header))
        for row in rows[name]:
            print("\t".join(str(cell) for cell in row))
    print("\n✅ Copy the data above to your Google Sheets tabs")


def push_to_mirror(repo: JsonRepository, mirror) -> int:
    """Write every user's data through the mirror. Returns the number of users pushed."""
    raw = repo.dump()
    user_ids = set(raw["profiles"]) | set(raw["income"]) | set(raw["expenses"]) | set(raw["budgets"]) | set(raw["goals"])
    for user_id in sorted(user_ids):
        profile = repo.get_profile(user_id)
        if profile:
            mirror.update_user_profile(user_id, profile)
        mirror.add_income_entries(user_id, [e for e in repo.list_income(user_id) if e.amount > 0])
        mirror.add_expense_entries(user_id, repo.list_expenses(user_id))
        mirror.add_budget_entries(user_id, [b for b in repo.get_budget(user_id) if b.monthly_amount > 0])
        mirror.add_goal_entries(user_id, repo.get_goals(user_id))
        print(f"✅ Pushed data for user {user_id}")
    return len(user_ids)


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("data_json", help="Path to the data.json store")
    parser.add_argument("--push", action="store_true", help="Write to Google Sheets instead of printing")
    args = parser.parse_args(argv)

    repo = JsonRepository(args.data_json)
    if not args.push:
        print_sheets(build_sheet_rows(repo))
        return 0

    mirror = build_mirror(Settings.from_env())
    if mirror is None:
        print("Google Sheets is not configured (GOOGLE_SHEETS_ID / GOOGLE_SERVICE_ACCOUNT_KEY)")
        return 1
    try:
        count = push_to_mirror(repo, mirror)
    finally:
        mirror.close()
    print(f"🎉 Export completed for {count} users.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
