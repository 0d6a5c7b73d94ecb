"""Raw materials, production runs and product recipes.

A production run consumes raw material stock (never below zero) and adds the
produced quantity to the product's stock. Editing or deleting a run reverses
what it did first.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from bakery.gateway import operation


@dataclass
class RawMaterialInput:
    name: str
    category: str
    unit: str
    stock_quantity: float
    unit_cost: float
    minimum_stock: float
    supplier: Optional[str] = None
    expiry_date: Optional[str] = None


@dataclass
class MaterialUsage:
    raw_material_id: int
    quantity_used: float


@dataclass
class ProductionInput:
    employee_id: int
    product_id: int
    production_date: str
    quantity_produced: int
    notes: Optional[str] = None


@dataclass
class RecipeItem:
    raw_material_id: int
    quantity_needed: float


def _material_params(m: RawMaterialInput) -> tuple:
    if not str(m.name or "").strip():
        raise ValueError("Material name is required.")
    return (
        m.name.strip(),
        m.category,
        m.unit,
        float(m.stock_quantity),
        float(m.unit_cost),
        m.supplier or None,
        float(m.minimum_stock),
        m.expiry_date or None,
    )


@operation
def get_raw_materials(db) -> list[dict]:
    return db.query("SELECT * FROM raw_materials ORDER BY name")


@operation
def add_raw_material(db, material: RawMaterialInput) -> int:
    return db.insert(
        """
        INSERT INTO raw_materials (
            name, category, unit, stock_quantity,
            unit_cost, supplier, minimum_stock, expiry_date
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """,
        _material_params(material),
    )


@operation
def update_raw_material(db, material_id: int, material: RawMaterialInput) -> bool:
    return db.execute(
        """
        UPDATE raw_materials SET
            name = ?,
            category = ?,
            unit = ?,
            stock_quantity = ?,
            unit_cost = ?,
            supplier = ?,
            minimum_stock = ?,
            expiry_date = ?
        WHERE id = ?
        """,
        (*_material_params(material), int(material_id)),
    )


@operation
def delete_raw_material(db, material_id: int) -> bool:
    return db.execute("DELETE FROM raw_materials WHERE id = ?", (int(material_id),))


# ---- production runs ----

def _consume(db, production_id: int, materials: list[MaterialUsage]) -> None:
    for m in materials:
        if not m.raw_material_id or float(m.quantity_used) <= 0:
            continue
        db.insert(
            "INSERT INTO production_materials (production_id, raw_material_id, quantity_used) VALUES (?, ?, ?)",
            (int(production_id), int(m.raw_material_id), float(m.quantity_used)),
        )
        db.execute(
            "UPDATE raw_materials SET stock_quantity = MAX(0, stock_quantity - ?) WHERE id = ?",
            (float(m.quantity_used), int(m.raw_material_id)),
        )


def _reverse(db, production_id: int) -> None:
    run = db.query_single(
        "SELECT product_id, quantity_produced FROM factory_productions WHERE id = ?",
        (int(production_id),),
    )
    for m in db.query(
        "SELECT raw_material_id, quantity_used FROM production_materials WHERE production_id = ?",
        (int(production_id),),
    ):
        db.execute(
            "UPDATE raw_materials SET stock_quantity = stock_quantity + ? WHERE id = ?",
            (m["quantity_used"], m["raw_material_id"]),
        )
    if run:
        db.execute(
            "UPDATE products SET stock = MAX(0, stock - ?) WHERE id = ?",
            (run["quantity_produced"], run["product_id"]),
        )
    db.execute("DELETE FROM production_materials WHERE production_id = ?", (int(production_id),))


def _production_params(p: ProductionInput) -> tuple:
    if int(p.quantity_produced) <= 0:
        raise ValueError("Quantity produced must be > 0.")
    return (int(p.employee_id), int(p.product_id), p.production_date, int(p.quantity_produced), p.notes)


@operation
def get_factory_productions(db) -> list[dict]:
    runs = db.query(
        """
        SELECT fp.*, e.name AS employee_name, p.name AS product_name
        FROM factory_productions fp
        LEFT JOIN employees e ON fp.employee_id = e.id
        LEFT JOIN products p ON fp.product_id = p.id
        ORDER BY fp.production_date DESC, fp.id DESC
        """
    )
    for run in runs:
        run["materials"] = db.query(
            """
            SELECT pm.*, rm.name AS material_name, rm.unit AS material_unit
            FROM production_materials pm
            LEFT JOIN raw_materials rm ON pm.raw_material_id = rm.id
            WHERE pm.production_id = ?
            ORDER BY pm.id
            """,
            (run["id"],),
        )
    return runs


@operation
def add_factory_production(db, production: ProductionInput, materials: list[MaterialUsage]) -> int:
    params = _production_params(production)
    with db.transaction():
        production_id = db.insert(
            """
            INSERT INTO factory_productions (
                employee_id, product_id, production_date, quantity_produced, notes
            ) VALUES (?, ?, ?, ?, ?)
            """,
            params,
        )
        _consume(db, production_id, materials)
        db.execute(
            "UPDATE products SET stock = stock + ? WHERE id = ?",
            (int(production.quantity_produced), int(production.product_id)),
        )
    return production_id


@operation
def update_factory_production(
    db,
    production_id: int,
    production: ProductionInput,
    materials: list[MaterialUsage],
) -> bool:
    params = _production_params(production)
    with db.transaction():
        _reverse(db, production_id)
        db.execute(
            """
            UPDATE factory_productions SET
                employee_id = ?,
                product_id = ?,
                production_date = ?,
                quantity_produced = ?,
                notes = ?
            WHERE id = ?
            """,
            (*params, int(production_id)),
        )
        _consume(db, production_id, materials)
        db.execute(
            "UPDATE products SET stock = stock + ? WHERE id = ?",
            (int(production.quantity_produced), int(production.product_id)),
        )
    return True


@operation
def delete_factory_production(db, production_id: int) -> bool:
    with db.transaction():
        _reverse(db, production_id)
        db.execute("DELETE FROM factory_productions WHERE id = ?", (int(production_id),))
    return True


# ---- recipes ----

@operation
def get_product_recipes(db, product_id: int) -> list[dict]:
    return db.query(
        """
        SELECT pr.*,
               rm.name AS material_name,
               rm.unit AS material_unit,
               rm.stock_quantity AS stock_available,
               rm.unit_cost AS material_cost
        FROM product_recipes pr
        JOIN raw_materials rm ON pr.raw_material_id = rm.id
        WHERE pr.product_id = ?
        ORDER BY pr.id
        """,
        (int(product_id),),
    )


@operation
def save_product_recipe(db, product_id: int, items: list[RecipeItem]) -> bool:
    """Replace the whole recipe of a product."""
    with db.transaction():
        db.execute("DELETE FROM product_recipes WHERE product_id = ?", (int(product_id),))
        for item in items:
            if item.raw_material_id and float(item.quantity_needed) > 0:
                db.insert(
                    "INSERT INTO product_recipes (product_id, raw_material_id, quantity_needed) VALUES (?, ?, ?)",
                    (int(product_id), int(item.raw_material_id), float(item.quantity_needed)),
                )
    return True
