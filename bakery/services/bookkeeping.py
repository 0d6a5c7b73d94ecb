from __future__ import annotations

from typing import Optional

from bakery.gateway import operation
from bakery.utils import iso_today, safe_div

ENTRY_TYPES = {"income", "expense"}
CATEGORIES = ("primer", "sekunder", "tersier")


def _check(entry_type: str, category: str, description: str) -> None:
    if entry_type not in ENTRY_TYPES:
        raise ValueError("Invalid entry type. Use 'income' or 'expense'.")
    if category not in CATEGORIES:
        raise ValueError("Invalid category. Use 'primer', 'sekunder' or 'tersier'.")
    if not str(description or "").strip():
        raise ValueError("Description is required.")


@operation
def get_bookkeeping_entries(db) -> list[dict]:
    return db.query("SELECT * FROM bookkeeping_entries ORDER BY date DESC, id DESC")


@operation
def add_bookkeeping_entry(db, date: str, entry_type: str, category: str, description: str, amount: float) -> int:
    _check(entry_type, category, description)
    return db.insert(
        "INSERT INTO bookkeeping_entries (date, type, category, description, amount) VALUES (?, ?, ?, ?, ?)",
        (date, entry_type, category, description.strip(), float(amount)),
    )


@operation
def update_bookkeeping_entry(
    db,
    entry_id: int,
    date: str,
    entry_type: str,
    category: str,
    description: str,
    amount: float,
) -> bool:
    _check(entry_type, category, description)
    return db.execute(
        """
        UPDATE bookkeeping_entries SET
            date = ?,
            type = ?,
            category = ?,
            description = ?,
            amount = ?
        WHERE id = ?
        """,
        (date, entry_type, category, description.strip(), float(amount), int(entry_id)),
    )


@operation
def delete_bookkeeping_entry(db, entry_id: int) -> bool:
    return db.execute("DELETE FROM bookkeeping_entries WHERE id = ?", (int(entry_id),))


@operation
def get_bookkeeping_summary(db) -> dict:
    rows = db.query(
        """
        SELECT type, category, COALESCE(SUM(amount), 0) AS total
        FROM bookkeeping_entries
        GROUP BY type, category
        """
    )
    summary = {c: {"income": 0, "expense": 0} for c in CATEGORIES}
    for r in rows:
        summary[r["category"]][r["type"]] = r["total"]

    total_income = sum(v["income"] for v in summary.values())
    total_expense = sum(v["expense"] for v in summary.values())
    return {
        "total_income": total_income,
        "total_expense": total_expense,
        "net_profit": total_income - total_expense,
        "profit_margin": round(safe_div(total_income - total_expense, total_income) * 100, 1),
        **summary,
    }


@operation
def get_bookkeeping_report(db, start_date: str, end_date: Optional[str] = None) -> dict:
    """Entries and totals for an inclusive date range (ISO dates); the range ends today by default."""
    end_date = end_date or iso_today()
    entries = db.query(
        "SELECT * FROM bookkeeping_entries WHERE date >= ? AND date <= ? ORDER BY date, id",
        (start_date, end_date),
    )
    total_income = sum(e["amount"] for e in entries if e["type"] == "income")
    total_expense = sum(e["amount"] for e in entries if e["type"] == "expense")
    return {
        "entries": entries,
        "total_income": total_income,
        "total_expense": total_expense,
        "net_profit": total_income - total_expense,
        "period": {"start": start_date, "end": end_date},
    }
