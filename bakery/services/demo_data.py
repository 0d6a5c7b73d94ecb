from __future__ import annotations

import random
from datetime import date, timedelta

from bakery.gateway import operation
from bakery.services.deliveries import (
    DeliveryItemInput,
    IndividualDeliveryInput,
    StoreDeliveryInput,
    add_individual_delivery,
    add_store_delivery,
)
from bakery.services.employees import EmployeeInput, add_employee
from bakery.services.factory import RawMaterialInput, add_raw_material
from bakery.services.locations import StoreContacts, add_city, add_price_area, add_store
from bakery.services.products import AreaPriceInput, ProductInput, add_product

DEMO_CITIES = ["Semarang", "Solo", "Yogyakarta"]
DEMO_AREAS = ["Dalam Kota", "Luar Kota"]
DEMO_PRODUCTS = [
    # name, packaging, size, base price
    ("Nastar", "Toples", "500g", 85000),
    ("Kastengel", "Toples", "500g", 90000),
    ("Putri Salju", "Toples", "250g", 55000),
    ("Choco Chip", "Pouch", "200g", 35000),
]
DEMO_MATERIALS = [
    ("Tepung Terigu", "Bahan Utama", "kg", 50, 14000),
    ("Mentega", "Bahan Utama", "kg", 20, 60000),
    ("Gula Halus", "Bahan Utama", "kg", 25, 18000),
    ("Keju Edam", "Topping", "kg", 8, 150000),
]

# Everything except login users and admin settings, children before parents.
WIPE_ORDER = [
    "delivery_items",
    "return_items",
    "returns",
    "store_deliveries",
    "individual_deliveries",
    "production_materials",
    "factory_productions",
    "product_recipes",
    "stock_reductions",
    "hpp",
    "package_items",
    "product_area_prices",
    "products",
    "stores",
    "cities",
    "price_areas",
    "payrolls",
    "employees",
    "raw_materials",
    "bookkeeping_entries",
    "assets",
]


def _demo_birth_date(day: date) -> str:
    return date(1995, day.month, min(day.day, 28)).isoformat()


@operation
def wipe_all(db) -> None:
    with db.transaction():
        for t in WIPE_ORDER:
            db.execute(f"DELETE FROM {t}")
        placeholders = ",".join("?" for _ in WIPE_ORDER)
        db.execute(f"DELETE FROM sqlite_sequence WHERE name IN ({placeholders})", WIPE_ORDER)


@operation
def load_demo_data(db, *, seed: int = 7) -> None:
    rng = random.Random(seed)
    today = date.today()

    with db.transaction():
        city_ids = [add_city(db, name) for name in DEMO_CITIES]
        area_ids = [add_price_area(db, name) for name in DEMO_AREAS]

        store_ids = []
        for i, city_id in enumerate(city_ids):
            store_ids.append(
                add_store(
                    db,
                    f"Toko Kue {DEMO_CITIES[i]}",
                    f"Jl. Pemuda No. {10 + i}",
                    city_id,
                    StoreContacts(billing_name="Bu Sri", billing_phone=f"08120000{i:03d}"),
                )
            )

        product_ids = []
        for name, packaging, size, price in DEMO_PRODUCTS:
            product_ids.append(
                add_product(
                    db,
                    ProductInput(
                        name=name,
                        packaging=packaging,
                        size=size,
                        stock_dozen=rng.randint(4, 10),
                        base_price=price,
                        area_prices=[AreaPriceInput(area_ids[1], price + 5000)],
                    ),
                )
            )

        for name, category, unit, qty, cost in DEMO_MATERIALS:
            add_raw_material(
                db,
                RawMaterialInput(
                    name=name,
                    category=category,
                    unit=unit,
                    stock_quantity=qty,
                    unit_cost=cost,
                    minimum_stock=5,
                    supplier="Toko Bahan Kue Makmur",
                ),
            )

        add_employee(
            db,
            EmployeeInput(
                name="Rina",
                position="Baker",
                base_salary=100000,
                base_overtime=25000,
                contact="0813000111",
                hire_date=(today - timedelta(days=400)).isoformat(),
                birth_date=_demo_birth_date(today + timedelta(days=3)),
            ),
        )

        for i, store_id in enumerate(store_ids):
            product_id = rng.choice(product_ids)
            qty = rng.randint(6, 24)
            price = float(DEMO_PRODUCTS[product_ids.index(product_id)][3])
            add_store_delivery(
                db,
                StoreDeliveryInput(
                    store_id=store_id,
                    delivery_date=(today - timedelta(days=i)).isoformat(),
                    total_amount=qty * price,
                    status="completed" if i == 0 else "pending",
                ),
                [DeliveryItemInput(product_id=product_id, quantity=qty, unit_price=price)],
            )

        add_individual_delivery(
            db,
            IndividualDeliveryInput(
                customer_name="Pak Budi",
                purchase_date=today.isoformat(),
                total_amount=2 * DEMO_PRODUCTS[0][3],
            ),
            [DeliveryItemInput(product_id=product_ids[0], quantity=2, unit_price=DEMO_PRODUCTS[0][3])],
        )
