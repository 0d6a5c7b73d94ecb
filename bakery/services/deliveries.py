"""Store and individual (walk-in / online) deliveries.

Both kinds share the delivery_items table, told apart by delivery_type.
Delivering an item takes it out of stock; editing a delivery first puts the
old items back, then takes the new ones out. Each add/update/delete runs in
one transaction, so a failing line item leaves no orphaned header behind.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from bakery.gateway import operation
from bakery.services.products import move_stock
from bakery.utils import as_flag

STORE_STATUSES = {"pending", "delivered", "invoiced", "paid", "completed"}
INDIVIDUAL_STATUSES = {"pending", "completed"}
PRICE_MARKUPS = {"normal", "2.5%", "5%", "10%"}


@dataclass
class DeliveryItemInput:
    product_id: int
    quantity: int
    unit_price: float
    total_price: Optional[float] = None
    price_type: str = "base"
    area_price_id: Optional[int] = None

    @property
    def line_total(self) -> float:
        if self.total_price is not None:
            return float(self.total_price)
        return round(float(self.unit_price) * int(self.quantity), 2)


@dataclass
class StoreDeliveryInput:
    store_id: int
    delivery_date: str
    total_amount: float
    status: str = "pending"
    price_markup: str = "normal"
    invoice_date: Optional[str] = None
    billing_date: Optional[str] = None
    discount: float = 0.0
    shipping_cost: float = 0.0
    notes: Optional[str] = None
    show_discount_in_print: bool = True
    show_shipping_in_print: bool = True


@dataclass
class IndividualDeliveryInput:
    customer_name: str
    purchase_date: str
    total_amount: float
    customer_contact: Optional[str] = None
    status: str = "pending"
    price_markup: str = "normal"
    discount: float = 0.0
    shipping_cost: float = 0.0
    notes: Optional[str] = None
    show_discount_in_print: bool = True
    show_shipping_in_print: bool = True


def _check(status: str, markup: str, allowed_status: set[str]) -> None:
    if status not in allowed_status:
        raise ValueError(f"Invalid delivery status: {status!r}.")
    if markup not in PRICE_MARKUPS:
        raise ValueError(f"Invalid price markup: {markup!r}.")


def _items_for(db, delivery_type: str, delivery_id: int) -> list[dict]:
    return db.query(
        """
        SELECT di.*, p.name AS product_name
        FROM delivery_items di
        LEFT JOIN products p ON di.product_id = p.id
        WHERE di.delivery_type = ? AND di.delivery_id = ?
        ORDER BY di.id
        """,
        (delivery_type, int(delivery_id)),
    )


def _insert_items(db, delivery_type: str, delivery_id: int, items: list[DeliveryItemInput]) -> None:
    for item in items:
        if not item.product_id or int(item.quantity) <= 0:
            continue
        db.insert(
            """
            INSERT INTO delivery_items (
                delivery_type, delivery_id, product_id,
                quantity, unit_price, total_price,
                price_type, area_price_id
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                delivery_type,
                int(delivery_id),
                int(item.product_id),
                int(item.quantity),
                float(item.unit_price),
                item.line_total,
                item.price_type,
                item.area_price_id or None,
            ),
        )
        move_stock(db, item.product_id, item.quantity, "subtract")


def _restore_items(db, delivery_type: str, delivery_id: int) -> None:
    for item in db.query(
        "SELECT product_id, quantity FROM delivery_items WHERE delivery_type = ? AND delivery_id = ?",
        (delivery_type, int(delivery_id)),
    ):
        move_stock(db, item["product_id"], item["quantity"], "add")
    db.execute(
        "DELETE FROM delivery_items WHERE delivery_type = ? AND delivery_id = ?",
        (delivery_type, int(delivery_id)),
    )


# ---- store deliveries ----

def _store_params(d: StoreDeliveryInput) -> tuple:
    return (
        int(d.store_id),
        d.delivery_date,
        d.invoice_date,
        d.billing_date,
        d.status,
        d.price_markup,
        float(d.discount),
        float(d.shipping_cost),
        float(d.total_amount),
        d.notes,
        as_flag(d.show_discount_in_print),
        as_flag(d.show_shipping_in_print),
    )


@operation
def get_store_deliveries(db) -> list[dict]:
    deliveries = db.query(
        """
        SELECT sd.*, s.name AS store_name, c.name AS city_name
        FROM store_deliveries sd
        LEFT JOIN stores s ON sd.store_id = s.id
        LEFT JOIN cities c ON s.city_id = c.id
        ORDER BY sd.delivery_date DESC, sd.id DESC
        """
    )
    for d in deliveries:
        d["items"] = _items_for(db, "store", d["id"])
    return deliveries


@operation
def add_store_delivery(db, delivery: StoreDeliveryInput, items: list[DeliveryItemInput]) -> int:
    _check(delivery.status, delivery.price_markup, STORE_STATUSES)
    with db.transaction():
        delivery_id = db.insert(
            """
            INSERT INTO store_deliveries (
                store_id, delivery_date, invoice_date, billing_date,
                status, price_markup, discount, shipping_cost,
                total_amount, notes, show_discount_in_print, show_shipping_in_print
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            _store_params(delivery),
        )
        _insert_items(db, "store", delivery_id, items)
    return delivery_id


@operation
def update_store_delivery(db, delivery_id: int, delivery: StoreDeliveryInput, items: list[DeliveryItemInput]) -> bool:
    _check(delivery.status, delivery.price_markup, STORE_STATUSES)
    with db.transaction():
        _restore_items(db, "store", delivery_id)
        db.execute(
            """
            UPDATE store_deliveries SET
                store_id = ?,
                delivery_date = ?,
                invoice_date = ?,
                billing_date = ?,
                status = ?,
                price_markup = ?,
                discount = ?,
                shipping_cost = ?,
                total_amount = ?,
                notes = ?,
                show_discount_in_print = ?,
                show_shipping_in_print = ?
            WHERE id = ?
            """,
            (*_store_params(delivery), int(delivery_id)),
        )
        _insert_items(db, "store", delivery_id, items)
    return True


@operation
def delete_store_delivery(db, delivery_id: int) -> bool:
    with db.transaction():
        _restore_items(db, "store", delivery_id)
        db.execute("DELETE FROM store_deliveries WHERE id = ?", (int(delivery_id),))
    return True


# ---- individual deliveries ----

def _individual_params(d: IndividualDeliveryInput) -> tuple:
    if not str(d.customer_name or "").strip():
        raise ValueError("Customer name is required.")
    return (
        d.customer_name.strip(),
        d.customer_contact,
        d.purchase_date,
        d.status,
        d.price_markup,
        float(d.discount),
        float(d.shipping_cost),
        float(d.total_amount),
        d.notes,
        as_flag(d.show_discount_in_print),
        as_flag(d.show_shipping_in_print),
    )


@operation
def get_individual_deliveries(db) -> list[dict]:
    deliveries = db.query("SELECT * FROM individual_deliveries ORDER BY purchase_date DESC, id DESC")
    for d in deliveries:
        d["items"] = _items_for(db, "individual", d["id"])
    return deliveries


@operation
def add_individual_delivery(db, delivery: IndividualDeliveryInput, items: list[DeliveryItemInput]) -> int:
    _check(delivery.status, delivery.price_markup, INDIVIDUAL_STATUSES)
    params = _individual_params(delivery)
    with db.transaction():
        delivery_id = db.insert(
            """
            INSERT INTO individual_deliveries (
                customer_name, customer_contact, purchase_date,
                status, price_markup, discount, shipping_cost,
                total_amount, notes, show_discount_in_print, show_shipping_in_print
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            params,
        )
        _insert_items(db, "individual", delivery_id, items)
    return delivery_id


@operation
def update_individual_delivery(
    db,
    delivery_id: int,
    delivery: IndividualDeliveryInput,
    items: list[DeliveryItemInput],
) -> bool:
    _check(delivery.status, delivery.price_markup, INDIVIDUAL_STATUSES)
    params = _individual_params(delivery)
    with db.transaction():
        _restore_items(db, "individual", delivery_id)
        db.execute(
            """
            UPDATE individual_deliveries SET
                customer_name = ?,
                customer_contact = ?,
                purchase_date = ?,
                status = ?,
                price_markup = ?,
                discount = ?,
                shipping_cost = ?,
                total_amount = ?,
                notes = ?,
                show_discount_in_print = ?,
                show_shipping_in_print = ?
            WHERE id = ?
            """,
            (*params, int(delivery_id)),
        )
        _insert_items(db, "individual", delivery_id, items)
    return True


@operation
def delete_individual_delivery(db, delivery_id: int) -> bool:
    with db.transaction():
        _restore_items(db, "individual", delivery_id)
        db.execute("DELETE FROM individual_deliveries WHERE id = ?", (int(delivery_id),))
    return True
