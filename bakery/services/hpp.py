from __future__ import annotations

from dataclasses import dataclass

from bakery.gateway import operation
from bakery.utils import as_flag


@dataclass
class HPPInput:
    product_id: int
    material_cost: float
    overhead_cost: float
    target_profit_percentage: float
    minimum_selling_price: float
    suggested_selling_price: float
    final_selling_price: float
    online_channel_price: float
    fee_channel_online: float = 0.0
    rounding_enabled: bool = True


def _params(h: HPPInput) -> tuple:
    return (
        int(h.product_id),
        float(h.material_cost),
        float(h.overhead_cost),
        float(h.target_profit_percentage),
        float(h.fee_channel_online),
        float(h.minimum_selling_price),
        float(h.suggested_selling_price),
        float(h.final_selling_price),
        float(h.online_channel_price),
        as_flag(h.rounding_enabled),
    )


@operation
def get_hpps(db) -> list[dict]:
    return db.query(
        """
        SELECT h.*, p.name AS product_name
        FROM hpp h
        LEFT JOIN products p ON h.product_id = p.id
        ORDER BY p.name
        """
    )


@operation
def add_hpp(db, hpp: HPPInput) -> int:
    with db.transaction():
        hpp_id = db.insert(
            """
            INSERT INTO hpp (
                product_id, material_cost, overhead_cost,
                target_profit_percentage, fee_channel_online,
                minimum_selling_price, suggested_selling_price,
                final_selling_price, online_channel_price,
                rounding_enabled
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            _params(hpp),
        )
        db.execute(
            "UPDATE products SET hpp_price = ? WHERE id = ?",
            (float(hpp.final_selling_price), int(hpp.product_id)),
        )
    return hpp_id


@operation
def update_hpp(db, hpp_id: int, hpp: HPPInput) -> bool:
    with db.transaction():
        db.execute(
            """
            UPDATE hpp SET
                product_id = ?,
                material_cost = ?,
                overhead_cost = ?,
                target_profit_percentage = ?,
                fee_channel_online = ?,
                minimum_selling_price = ?,
                suggested_selling_price = ?,
                final_selling_price = ?,
                online_channel_price = ?,
                rounding_enabled = ?
            WHERE id = ?
            """,
            (*_params(hpp), int(hpp_id)),
        )
        db.execute(
            "UPDATE products SET hpp_price = ? WHERE id = ?",
            (float(hpp.final_selling_price), int(hpp.product_id)),
        )
    return True


@operation
def delete_hpp(db, hpp_id: int) -> bool:
    with db.transaction():
        row = db.query_single("SELECT product_id FROM hpp WHERE id = ?", (int(hpp_id),))
        db.execute("DELETE FROM hpp WHERE id = ?", (int(hpp_id),))
        if row:
            db.execute("UPDATE products SET hpp_price = NULL WHERE id = ?", (row["product_id"],))
    return True
