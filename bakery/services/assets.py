from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from bakery.gateway import operation

ASSET_CONDITIONS = {"excellent", "good", "fair", "poor", "damaged"}


@dataclass
class AssetInput:
    name: str
    category: str
    purchase_date: str
    purchase_price: float
    useful_life_years: int
    condition: str = "good"
    maintenance_cost_yearly: float = 0.0
    current_value: Optional[float] = None
    location: Optional[str] = None
    notes: Optional[str] = None


def _params(a: AssetInput) -> tuple:
    if not str(a.name or "").strip():
        raise ValueError("Asset name is required.")
    if a.condition not in ASSET_CONDITIONS:
        raise ValueError(f"Invalid asset condition: {a.condition!r}.")
    # An unvalued asset is worth what was paid for it.
    current_value = a.current_value if a.current_value else a.purchase_price
    return (
        a.name.strip(),
        a.category,
        a.purchase_date,
        float(a.purchase_price),
        int(a.useful_life_years),
        float(a.maintenance_cost_yearly),
        float(current_value),
        a.condition,
        a.location,
        a.notes,
    )


@operation
def get_assets(db) -> list[dict]:
    return db.query("SELECT * FROM assets ORDER BY purchase_date DESC, id DESC")


@operation
def add_asset(db, asset: AssetInput) -> int:
    return db.insert(
        """
        INSERT INTO assets (
            name, category, purchase_date, purchase_price,
            useful_life_years, maintenance_cost_yearly, current_value,
            condition, location, notes
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        _params(asset),
    )


@operation
def update_asset(db, asset_id: int, asset: AssetInput) -> bool:
    return db.execute(
        """
        UPDATE assets SET
            name = ?,
            category = ?,
            purchase_date = ?,
            purchase_price = ?,
            useful_life_years = ?,
            maintenance_cost_yearly = ?,
            current_value = ?,
            condition = ?,
            location = ?,
            notes = ?
        WHERE id = ?
        """,
        (*_params(asset), int(asset_id)),
    )


@operation
def delete_asset(db, asset_id: int) -> bool:
    return db.execute("DELETE FROM assets WHERE id = ?", (int(asset_id),))
