from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from bakery.gateway import operation


@dataclass
class StoreContacts:
    billing_name: Optional[str] = None
    billing_phone: Optional[str] = None
    purchasing_name: Optional[str] = None
    purchasing_phone: Optional[str] = None
    store_name: Optional[str] = None
    store_phone: Optional[str] = None

    def as_params(self) -> tuple:
        return (
            self.billing_name,
            self.billing_phone,
            self.purchasing_name,
            self.purchasing_phone,
            self.store_name,
            self.store_phone,
        )


def _clean_name(name: str, what: str) -> str:
    s = str(name or "").strip()
    if not s:
        raise ValueError(f"{what} name is required.")
    return s


# ---- cities ----

@operation
def get_cities(db) -> list[dict]:
    return db.query(
        """
        SELECT c.*, COUNT(s.id) AS store_count
        FROM cities c
        LEFT JOIN stores s ON c.id = s.city_id
        GROUP BY c.id
        ORDER BY c.name
        """
    )


@operation
def get_city(db, city_id: int) -> Optional[dict]:
    return db.query_single("SELECT * FROM cities WHERE id = ?", (int(city_id),))


@operation
def add_city(db, name: str) -> int:
    return db.insert("INSERT INTO cities (name) VALUES (?)", (_clean_name(name, "City"),))


@operation
def update_city(db, city_id: int, name: str) -> bool:
    return db.execute("UPDATE cities SET name = ? WHERE id = ?", (_clean_name(name, "City"), int(city_id)))


@operation
def delete_city(db, city_id: int) -> bool:
    # Stores keep their city_id; nothing cascades.
    return db.execute("DELETE FROM cities WHERE id = ?", (int(city_id),))


@operation
def get_city_stores(db, city_id: int) -> list[dict]:
    return db.query("SELECT * FROM stores WHERE city_id = ? ORDER BY name", (int(city_id),))


# ---- price areas ----

@operation
def get_price_areas(db) -> list[dict]:
    return db.query("SELECT * FROM price_areas ORDER BY name")


@operation
def add_price_area(db, name: str) -> int:
    return db.insert("INSERT INTO price_areas (name) VALUES (?)", (_clean_name(name, "Price area"),))


@operation
def update_price_area(db, area_id: int, name: str) -> bool:
    return db.execute(
        "UPDATE price_areas SET name = ? WHERE id = ?",
        (_clean_name(name, "Price area"), int(area_id)),
    )


@operation
def delete_price_area(db, area_id: int) -> bool:
    return db.execute("DELETE FROM price_areas WHERE id = ?", (int(area_id),))


# ---- stores ----

@operation
def get_stores(db) -> list[dict]:
    # LEFT JOIN: a store whose city was deleted still shows up, with no city_name.
    return db.query(
        """
        SELECT s.*, c.name AS city_name
        FROM stores s
        LEFT JOIN cities c ON s.city_id = c.id
        ORDER BY s.name
        """
    )


@operation
def get_store(db, store_id: int) -> Optional[dict]:
    return db.query_single(
        """
        SELECT s.*, c.name AS city_name
        FROM stores s
        LEFT JOIN cities c ON s.city_id = c.id
        WHERE s.id = ?
        """,
        (int(store_id),),
    )


@operation
def add_store(db, name: str, address: str, city_id: int, contacts: Optional[StoreContacts] = None) -> int:
    contacts = contacts or StoreContacts()
    return db.insert(
        """
        INSERT INTO stores (
            name, address, city_id,
            contact_billing_name, contact_billing_phone,
            contact_purchasing_name, contact_purchasing_phone,
            contact_store_name, contact_store_phone
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (_clean_name(name, "Store"), str(address or ""), int(city_id), *contacts.as_params()),
    )


@operation
def update_store(
    db,
    store_id: int,
    name: str,
    address: str,
    city_id: int,
    contacts: Optional[StoreContacts] = None,
) -> bool:
    contacts = contacts or StoreContacts()
    return db.execute(
        """
        UPDATE stores SET
            name = ?,
            address = ?,
            city_id = ?,
            contact_billing_name = ?,
            contact_billing_phone = ?,
            contact_purchasing_name = ?,
            contact_purchasing_phone = ?,
            contact_store_name = ?,
            contact_store_phone = ?
        WHERE id = ?
        """,
        (_clean_name(name, "Store"), str(address or ""), int(city_id), *contacts.as_params(), int(store_id)),
    )


@operation
def delete_store(db, store_id: int) -> bool:
    return db.execute("DELETE FROM stores WHERE id = ?", (int(store_id),))
