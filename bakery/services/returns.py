"""Returned goods. Stock only comes back once a return is 'completed'."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from bakery.gateway import operation
from bakery.services.products import move_stock

RETURN_STATUSES = {"pending", "processed", "completed"}
DELIVERY_TYPES = {"store", "individual"}


@dataclass
class ReturnItemInput:
    product_id: int
    quantity: int
    unit_price: float
    total_price: Optional[float] = None

    @property
    def line_total(self) -> float:
        if self.total_price is not None:
            return float(self.total_price)
        return round(float(self.unit_price) * int(self.quantity), 2)


@dataclass
class ReturnInput:
    delivery_type: str
    delivery_id: int
    return_date: str
    reason: str
    total_amount: float
    status: str = "pending"
    return_location: Optional[str] = None


def _params(r: ReturnInput) -> tuple:
    if r.delivery_type not in DELIVERY_TYPES:
        raise ValueError("Invalid delivery type. Use 'store' or 'individual'.")
    if r.status not in RETURN_STATUSES:
        raise ValueError(f"Invalid return status: {r.status!r}.")
    if not str(r.reason or "").strip():
        raise ValueError("Return reason is required.")
    return (
        r.delivery_type,
        int(r.delivery_id),
        r.return_date,
        r.reason.strip(),
        r.return_location,
        r.status,
        float(r.total_amount),
    )


def _insert_items(db, return_id: int, items: list[ReturnItemInput], *, restock: bool) -> None:
    for item in items:
        if not item.product_id or int(item.quantity) <= 0:
            continue
        db.insert(
            """
            INSERT INTO return_items (return_id, product_id, quantity, unit_price, total_price)
            VALUES (?, ?, ?, ?, ?)
            """,
            (int(return_id), int(item.product_id), int(item.quantity), float(item.unit_price), item.line_total),
        )
        if restock:
            move_stock(db, item.product_id, item.quantity, "add")


def _unstock_existing(db, return_id: int) -> None:
    for item in db.query("SELECT product_id, quantity FROM return_items WHERE return_id = ?", (int(return_id),)):
        move_stock(db, item["product_id"], item["quantity"], "subtract")


def _delivery_info(db, r: dict) -> dict:
    if r["delivery_type"] == "store":
        d = db.query_single(
            """
            SELECT sd.id, s.name AS store_name, c.name AS city_name
            FROM store_deliveries sd
            JOIN stores s ON sd.store_id = s.id
            LEFT JOIN cities c ON s.city_id = c.id
            WHERE sd.id = ?
            """,
            (r["delivery_id"],),
        )
        if d:
            r["delivery_info"] = d["store_name"]
            r["city_name"] = d["city_name"]
    else:
        d = db.query_single("SELECT id, customer_name FROM individual_deliveries WHERE id = ?", (r["delivery_id"],))
        if d:
            r["delivery_info"] = d["customer_name"]
    return r


@operation
def get_returns(db) -> list[dict]:
    returns = db.query("SELECT r.* FROM returns r ORDER BY r.return_date DESC, r.id DESC")
    for r in returns:
        r["items"] = db.query(
            """
            SELECT ri.*, p.name AS product_name
            FROM return_items ri
            LEFT JOIN products p ON ri.product_id = p.id
            WHERE ri.return_id = ?
            ORDER BY ri.id
            """,
            (r["id"],),
        )
        r.setdefault("delivery_info", None)
        r.setdefault("city_name", None)
        _delivery_info(db, r)
    return returns


@operation
def add_return(db, ret: ReturnInput, items: list[ReturnItemInput]) -> int:
    params = _params(ret)
    with db.transaction():
        return_id = db.insert(
            """
            INSERT INTO returns (
                delivery_type, delivery_id, return_date,
                reason, return_location, status, total_amount
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            params,
        )
        _insert_items(db, return_id, items, restock=ret.status == "completed")
    return return_id


@operation
def update_return(db, return_id: int, ret: ReturnInput, items: list[ReturnItemInput]) -> bool:
    """Rewrite a return. Stock follows the completed status of the old and new version."""
    params = _params(ret)
    with db.transaction():
        existing = db.query_single("SELECT status FROM returns WHERE id = ?", (int(return_id),))
        if existing and existing["status"] == "completed":
            _unstock_existing(db, return_id)
        db.execute("DELETE FROM return_items WHERE return_id = ?", (int(return_id),))
        db.execute(
            """
            UPDATE returns SET
                delivery_type = ?,
                delivery_id = ?,
                return_date = ?,
                reason = ?,
                return_location = ?,
                status = ?,
                total_amount = ?
            WHERE id = ?
            """,
            (*params, int(return_id)),
        )
        _insert_items(db, return_id, items, restock=ret.status == "completed")
    return True


@operation
def delete_return(db, return_id: int) -> bool:
    with db.transaction():
        existing = db.query_single("SELECT status FROM returns WHERE id = ?", (int(return_id),))
        if existing and existing["status"] == "completed":
            _unstock_existing(db, return_id)
        db.execute("DELETE FROM return_items WHERE return_id = ?", (int(return_id),))
        db.execute("DELETE FROM returns WHERE id = ?", (int(return_id),))
    return True
