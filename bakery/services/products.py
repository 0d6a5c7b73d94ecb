from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from bakery.gateway import operation

PIECES_PER_DOZEN = 12

PRODUCT_TYPES = {"reguler", "season"}
PRODUCT_KINDS = {"single", "package"}
STOCK_OPERATIONS = {"add", "subtract"}


@dataclass
class AreaPriceInput:
    price_area_id: int
    price: float


@dataclass
class PackageItemInput:
    product_id: int
    quantity: int


@dataclass
class ProductInput:
    name: str
    packaging: str
    size: str
    type: str = "reguler"
    product_type: str = "single"
    stock_dozen: int = 0
    stock_pcs: int = 0
    minimum_stock: int = 24
    base_price: float = 0.0
    area_prices: list[AreaPriceInput] = field(default_factory=list)
    package_items: list[PackageItemInput] = field(default_factory=list)

    @property
    def total_stock(self) -> int:
        return int(self.stock_dozen) * PIECES_PER_DOZEN + int(self.stock_pcs)


def _validate(product: ProductInput) -> None:
    if not str(product.name or "").strip():
        raise ValueError("Product name is required.")
    if product.type not in PRODUCT_TYPES:
        raise ValueError("Invalid product type. Use 'reguler' or 'season'.")
    if product.product_type not in PRODUCT_KINDS:
        raise ValueError("Invalid product kind. Use 'single' or 'package'.")


def _stock_sql(op: str) -> str:
    if op == "add":
        return "UPDATE products SET stock = stock + ? WHERE id = ?"
    if op == "subtract":
        # Stock never goes negative.
        return "UPDATE products SET stock = MAX(0, stock - ?) WHERE id = ?"
    raise ValueError("Invalid stock operation. Use 'add' or 'subtract'.")


def move_stock(db, product_id: int, quantity: int, op: str) -> None:
    """Add or subtract stock for a product; packages move their components."""
    sql = _stock_sql(op)
    product = db.query_single("SELECT product_type FROM products WHERE id = ?", (int(product_id),))
    if product and product["product_type"] == "package":
        for item in db.query(
            "SELECT product_id, quantity FROM package_items WHERE package_id = ?",
            (int(product_id),),
        ):
            db.execute(sql, (int(item["quantity"]) * int(quantity), int(item["product_id"])))
    else:
        db.execute(sql, (int(quantity), int(product_id)))


def _write_children(db, product_id: int, product: ProductInput) -> None:
    for ap in product.area_prices:
        if ap.price_area_id:
            db.insert(
                "INSERT INTO product_area_prices (product_id, price_area_id, price) VALUES (?, ?, ?)",
                (int(product_id), int(ap.price_area_id), float(ap.price)),
            )
    if product.product_type == "package":
        for item in product.package_items:
            if item.product_id and int(item.quantity) > 0:
                db.insert(
                    "INSERT INTO package_items (package_id, product_id, quantity) VALUES (?, ?, ?)",
                    (int(product_id), int(item.product_id), int(item.quantity)),
                )


def _attach_children(db, product: dict) -> dict:
    product["area_prices"] = db.query(
        """
        SELECT pap.*, pa.name AS area_name
        FROM product_area_prices pap
        JOIN price_areas pa ON pap.price_area_id = pa.id
        WHERE pap.product_id = ?
        ORDER BY pa.name
        """,
        (product["id"],),
    )
    if product["product_type"] == "package":
        product["package_items"] = db.query(
            """
            SELECT pi.*, p.name AS product_name
            FROM package_items pi
            JOIN products p ON pi.product_id = p.id
            WHERE pi.package_id = ?
            """,
            (product["id"],),
        )
    return product


_PRODUCT_SELECT = """
    SELECT p.id, p.name, p.packaging, p.size, p.type, p.product_type,
           p.stock, p.minimum_stock, p.base_price, p.created_at,
           CAST(p.stock / 12 AS INTEGER) AS stock_dozen,
           p.stock % 12 AS stock_pcs,
           COALESCE(h.final_selling_price, p.hpp_price) AS hpp_price
    FROM products p
    LEFT JOIN hpp h ON p.id = h.product_id
"""


@operation
def get_products(db) -> list[dict]:
    return [_attach_children(db, p) for p in db.query(_PRODUCT_SELECT + " ORDER BY p.name")]


@operation
def get_product(db, product_id: int) -> Optional[dict]:
    product = db.query_single(_PRODUCT_SELECT + " WHERE p.id = ?", (int(product_id),))
    return _attach_children(db, product) if product else None


@operation
def add_product(db, product: ProductInput) -> int:
    _validate(product)
    with db.transaction():
        product_id = db.insert(
            """
            INSERT INTO products (
                name, packaging, size, type, product_type,
                stock, minimum_stock, base_price
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                product.name.strip(),
                product.packaging,
                product.size,
                product.type,
                product.product_type,
                product.total_stock,
                int(product.minimum_stock),
                float(product.base_price),
            ),
        )
        _write_children(db, product_id, product)
    return product_id


@operation
def update_product(db, product_id: int, product: ProductInput) -> bool:
    """Overwrite a product; its area prices and package items are replaced."""
    _validate(product)
    with db.transaction():
        db.execute(
            """
            UPDATE products SET
                name = ?,
                packaging = ?,
                size = ?,
                type = ?,
                product_type = ?,
                stock = ?,
                minimum_stock = ?,
                base_price = ?
            WHERE id = ?
            """,
            (
                product.name.strip(),
                product.packaging,
                product.size,
                product.type,
                product.product_type,
                product.total_stock,
                int(product.minimum_stock),
                float(product.base_price),
                int(product_id),
            ),
        )
        db.execute("DELETE FROM product_area_prices WHERE product_id = ?", (int(product_id),))
        if product.product_type == "package":
            db.execute("DELETE FROM package_items WHERE package_id = ?", (int(product_id),))
        _write_children(db, product_id, product)
    return True


@operation
def delete_product(db, product_id: int) -> bool:
    with db.transaction():
        db.execute("DELETE FROM product_area_prices WHERE product_id = ?", (int(product_id),))
        db.execute("DELETE FROM package_items WHERE package_id = ?", (int(product_id),))
        db.execute("DELETE FROM products WHERE id = ?", (int(product_id),))
    return True


@operation
def get_product_area_prices(db, product_id: int) -> list[dict]:
    return db.query(
        """
        SELECT pap.*, pa.name AS area_name
        FROM product_area_prices pap
        LEFT JOIN price_areas pa ON pap.price_area_id = pa.id
        WHERE pap.product_id = ?
        ORDER BY pap.price_area_id
        """,
        (int(product_id),),
    )


@operation
def set_product_area_price(db, product_id: int, area_id: int, price: float) -> int:
    """Upsert the price of a product in a price area; returns the row id."""
    with db.transaction():
        existing = db.query_single(
            "SELECT id FROM product_area_prices WHERE product_id = ? AND price_area_id = ?",
            (int(product_id), int(area_id)),
        )
        if existing:
            db.execute("UPDATE product_area_prices SET price = ? WHERE id = ?", (float(price), existing["id"]))
            return int(existing["id"])
        return db.insert(
            "INSERT INTO product_area_prices (product_id, price_area_id, price) VALUES (?, ?, ?)",
            (int(product_id), int(area_id), float(price)),
        )


@operation
def update_product_stock_by_unit(db, product_id: int, dozen: int, pcs: int, op: str) -> bool:
    total_pieces = int(dozen) * PIECES_PER_DOZEN + int(pcs)
    return db.execute(_stock_sql(op), (total_pieces, int(product_id)))


@operation
def update_package_product_stock(db, package_id: int, quantity: int, op: str) -> bool:
    """Move the stock of every component of a package; the package row itself is not touched."""
    sql = _stock_sql(op)
    with db.transaction():
        for item in db.query(
            "SELECT product_id, quantity FROM package_items WHERE package_id = ?",
            (int(package_id),),
        ):
            db.execute(sql, (int(item["quantity"]) * int(quantity), int(item["product_id"])))
    return True


@operation
def reduce_product_stock(db, product_id: int, amount: int, reason: str, notes: str = "") -> bool:
    if int(amount) <= 0:
        raise ValueError("Reduction amount must be > 0.")
    if not str(reason or "").strip():
        raise ValueError("Reduction reason is required.")
    with db.transaction():
        db.execute(_stock_sql("subtract"), (int(amount), int(product_id)))
        db.insert(
            "INSERT INTO stock_reductions (product_id, amount, reason, notes) VALUES (?, ?, ?, ?)",
            (int(product_id), int(amount), reason.strip(), notes),
        )
    return True


@operation
def get_stock_reductions(db, product_id: int) -> list[dict]:
    return db.query(
        "SELECT * FROM stock_reductions WHERE product_id = ? ORDER BY date DESC, id DESC",
        (int(product_id),),
    )


@operation
def check_package_stock(db, package_id: int, quantity: int) -> bool:
    items = db.query(
        """
        SELECT pi.product_id, pi.quantity, p.stock
        FROM package_items pi
        JOIN products p ON pi.product_id = p.id
        WHERE pi.package_id = ?
        """,
        (int(package_id),),
    )
    return all(int(i["stock"]) >= int(i["quantity"]) * int(quantity) for i in items)
