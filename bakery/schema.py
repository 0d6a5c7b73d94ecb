from __future__ import annotations

import json
import sqlite3

# Parents are declared before children. Foreign keys are documentation only:
# the connection leaves PRAGMA foreign_keys off, so nothing cascades.
SCHEMA_SQL = r"""
-- Login users (PIN based)
CREATE TABLE IF NOT EXISTS users (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  name TEXT NOT NULL,
  role TEXT NOT NULL CHECK (role IN ('admin', 'kasir')),
  pin TEXT NOT NULL,
  created_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS cities (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  name TEXT NOT NULL,
  created_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS price_areas (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  name TEXT NOT NULL,
  created_at TEXT DEFAULT CURRENT_TIMESTAMP
);

-- Stores (wholesale customers)
CREATE TABLE IF NOT EXISTS stores (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  name TEXT NOT NULL,
  address TEXT NOT NULL,
  city_id INTEGER NOT NULL,
  contact_billing_name TEXT,
  contact_billing_phone TEXT,
  contact_purchasing_name TEXT,
  contact_purchasing_phone TEXT,
  contact_store_name TEXT,
  contact_store_phone TEXT,
  created_at TEXT DEFAULT CURRENT_TIMESTAMP,
  FOREIGN KEY (city_id) REFERENCES cities(id)
);

-- Products; stock is kept in pieces (12 pieces = 1 dozen)
CREATE TABLE IF NOT EXISTS products (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  name TEXT NOT NULL,
  packaging TEXT NOT NULL,
  size TEXT NOT NULL,
  type TEXT NOT NULL CHECK (type IN ('reguler', 'season')),
  product_type TEXT NOT NULL CHECK (product_type IN ('single', 'package')),
  stock INTEGER NOT NULL DEFAULT 0,
  minimum_stock INTEGER NOT NULL DEFAULT 24,
  base_price REAL NOT NULL,
  hpp_price REAL,
  created_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS product_area_prices (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  product_id INTEGER NOT NULL,
  price_area_id INTEGER NOT NULL,
  price REAL NOT NULL,
  created_at TEXT DEFAULT CURRENT_TIMESTAMP,
  FOREIGN KEY (product_id) REFERENCES products(id),
  FOREIGN KEY (price_area_id) REFERENCES price_areas(id),
  UNIQUE (product_id, price_area_id)
);

-- Components of a 'package' product
CREATE TABLE IF NOT EXISTS package_items (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  package_id INTEGER NOT NULL,
  product_id INTEGER NOT NULL,
  quantity INTEGER NOT NULL,
  created_at TEXT DEFAULT CURRENT_TIMESTAMP,
  FOREIGN KEY (package_id) REFERENCES products(id),
  FOREIGN KEY (product_id) REFERENCES products(id),
  UNIQUE (package_id, product_id)
);

CREATE TABLE IF NOT EXISTS store_deliveries (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  store_id INTEGER NOT NULL,
  delivery_date TEXT NOT NULL,
  invoice_date TEXT,
  billing_date TEXT,
  status TEXT NOT NULL CHECK (status IN ('pending', 'delivered', 'invoiced', 'paid', 'completed')),
  price_markup TEXT NOT NULL CHECK (price_markup IN ('normal', '2.5%', '5%', '10%')),
  discount REAL NOT NULL DEFAULT 0,
  shipping_cost REAL NOT NULL DEFAULT 0,
  total_amount REAL NOT NULL,
  notes TEXT,
  show_discount_in_print INTEGER DEFAULT 1,
  show_shipping_in_print INTEGER DEFAULT 1,
  created_at TEXT DEFAULT CURRENT_TIMESTAMP,
  FOREIGN KEY (store_id) REFERENCES stores(id)
);

CREATE TABLE IF NOT EXISTS individual_deliveries (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  customer_name TEXT NOT NULL,
  customer_contact TEXT,
  purchase_date TEXT NOT NULL,
  status TEXT NOT NULL CHECK (status IN ('pending', 'completed')),
  price_markup TEXT NOT NULL CHECK (price_markup IN ('normal', '2.5%', '5%', '10%')),
  discount REAL NOT NULL DEFAULT 0,
  shipping_cost REAL NOT NULL DEFAULT 0,
  total_amount REAL NOT NULL,
  notes TEXT,
  show_discount_in_print INTEGER DEFAULT 1,
  show_shipping_in_print INTEGER DEFAULT 1,
  created_at TEXT DEFAULT CURRENT_TIMESTAMP
);

-- Line items shared by both delivery kinds (delivery_type selects the header table)
CREATE TABLE IF NOT EXISTS delivery_items (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  delivery_type TEXT NOT NULL CHECK (delivery_type IN ('store', 'individual')),
  delivery_id INTEGER NOT NULL,
  product_id INTEGER NOT NULL,
  quantity INTEGER NOT NULL,
  unit_price REAL NOT NULL,
  total_price REAL NOT NULL,
  price_type TEXT NOT NULL CHECK (price_type IN ('base', 'area')),
  area_price_id INTEGER,
  created_at TEXT DEFAULT CURRENT_TIMESTAMP,
  FOREIGN KEY (product_id) REFERENCES products(id),
  FOREIGN KEY (area_price_id) REFERENCES price_areas(id),
  UNIQUE (delivery_type, delivery_id, product_id)
);

CREATE TABLE IF NOT EXISTS returns (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  delivery_type TEXT NOT NULL CHECK (delivery_type IN ('store', 'individual')),
  delivery_id INTEGER NOT NULL,
  return_date TEXT NOT NULL,
  reason TEXT NOT NULL,
  return_location TEXT,
  status TEXT NOT NULL CHECK (status IN ('pending', 'processed', 'completed')),
  total_amount REAL NOT NULL,
  created_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS return_items (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  return_id INTEGER NOT NULL,
  product_id INTEGER NOT NULL,
  quantity INTEGER NOT NULL,
  unit_price REAL NOT NULL,
  total_price REAL NOT NULL,
  created_at TEXT DEFAULT CURRENT_TIMESTAMP,
  FOREIGN KEY (return_id) REFERENCES returns(id),
  FOREIGN KEY (product_id) REFERENCES products(id),
  UNIQUE (return_id, product_id)
);

CREATE TABLE IF NOT EXISTS employees (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  name TEXT NOT NULL,
  position TEXT NOT NULL,
  base_salary REAL NOT NULL,
  base_overtime REAL NOT NULL,
  contact TEXT NOT NULL,
  address TEXT,
  hire_date TEXT NOT NULL,
  birth_date TEXT,
  status TEXT NOT NULL DEFAULT 'active' CHECK (status IN ('active', 'inactive')),
  created_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS payrolls (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  employee_id INTEGER NOT NULL,
  period TEXT NOT NULL,                  -- YYYY-MM
  attendance_days INTEGER NOT NULL,
  overtime_days INTEGER NOT NULL,
  base_salary REAL NOT NULL,
  base_overtime REAL NOT NULL,
  additional_amount REAL NOT NULL DEFAULT 0,
  additional_description TEXT,
  additional_show_in_print INTEGER DEFAULT 1,
  deduction_amount REAL NOT NULL DEFAULT 0,
  deduction_description TEXT,
  deduction_show_in_print INTEGER DEFAULT 1,
  total_salary REAL NOT NULL,
  created_at TEXT DEFAULT CURRENT_TIMESTAMP,
  FOREIGN KEY (employee_id) REFERENCES employees(id)
);

CREATE TABLE IF NOT EXISTS raw_materials (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  name TEXT NOT NULL,
  category TEXT NOT NULL,
  unit TEXT NOT NULL,
  stock_quantity REAL NOT NULL,
  unit_cost REAL NOT NULL,
  supplier TEXT,
  minimum_stock REAL NOT NULL,
  expiry_date TEXT,
  created_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS factory_productions (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  employee_id INTEGER NOT NULL,
  product_id INTEGER NOT NULL,
  production_date TEXT NOT NULL,
  quantity_produced INTEGER NOT NULL,
  notes TEXT,
  created_at TEXT DEFAULT CURRENT_TIMESTAMP,
  FOREIGN KEY (employee_id) REFERENCES employees(id),
  FOREIGN KEY (product_id) REFERENCES products(id)
);

CREATE TABLE IF NOT EXISTS production_materials (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  production_id INTEGER NOT NULL,
  raw_material_id INTEGER NOT NULL,
  quantity_used REAL NOT NULL,
  created_at TEXT DEFAULT CURRENT_TIMESTAMP,
  FOREIGN KEY (production_id) REFERENCES factory_productions(id),
  FOREIGN KEY (raw_material_id) REFERENCES raw_materials(id),
  UNIQUE (production_id, raw_material_id)
);

CREATE TABLE IF NOT EXISTS stock_reductions (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  product_id INTEGER NOT NULL,
  amount INTEGER NOT NULL,
  reason TEXT NOT NULL,
  notes TEXT,
  date TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
  FOREIGN KEY (product_id) REFERENCES products(id)
);

CREATE TABLE IF NOT EXISTS product_recipes (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  product_id INTEGER NOT NULL,
  raw_material_id INTEGER NOT NULL,
  quantity_needed REAL NOT NULL,
  created_at TEXT DEFAULT CURRENT_TIMESTAMP,
  FOREIGN KEY (product_id) REFERENCES products(id),
  FOREIGN KEY (raw_material_id) REFERENCES raw_materials(id),
  UNIQUE (product_id, raw_material_id)
);

-- HPP (Harga Pokok Produksi): one cost-pricing record per product
CREATE TABLE IF NOT EXISTS hpp (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  product_id INTEGER NOT NULL,
  material_cost REAL NOT NULL,
  overhead_cost REAL NOT NULL,
  target_profit_percentage REAL NOT NULL,
  fee_channel_online REAL NOT NULL DEFAULT 0,
  minimum_selling_price REAL NOT NULL,
  suggested_selling_price REAL NOT NULL,
  final_selling_price REAL NOT NULL,
  online_channel_price REAL NOT NULL,
  rounding_enabled INTEGER DEFAULT 1,
  created_at TEXT DEFAULT CURRENT_TIMESTAMP,
  FOREIGN KEY (product_id) REFERENCES products(id),
  UNIQUE (product_id)
);

CREATE TABLE IF NOT EXISTS bookkeeping_entries (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  date TEXT NOT NULL,
  type TEXT NOT NULL CHECK (type IN ('income', 'expense')),
  category TEXT NOT NULL CHECK (category IN ('primer', 'sekunder', 'tersier')),
  description TEXT NOT NULL,
  amount REAL NOT NULL,
  is_auto INTEGER DEFAULT 0,
  created_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS assets (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  name TEXT NOT NULL,
  category TEXT NOT NULL,
  purchase_date TEXT NOT NULL,
  purchase_price REAL NOT NULL,
  useful_life_years INTEGER NOT NULL,
  maintenance_cost_yearly REAL NOT NULL DEFAULT 0,
  current_value REAL,
  condition TEXT NOT NULL CHECK (condition IN ('excellent', 'good', 'fair', 'poor', 'damaged')),
  location TEXT,
  notes TEXT,
  created_at TEXT DEFAULT CURRENT_TIMESTAMP
);

-- Singleton settings row; list/dict columns hold JSON text
CREATE TABLE IF NOT EXISTS admin_settings (
  id INTEGER PRIMARY KEY DEFAULT 1,
  pin TEXT NOT NULL DEFAULT '123456',
  locked_menus TEXT DEFAULT '[]',
  hidden_menus TEXT DEFAULT '[]',
  menu_pins TEXT DEFAULT '{}',
  profile TEXT DEFAULT '{"name": "Admin", "email": "admin@example.com"}',
  users TEXT DEFAULT '[]',
  created_at TEXT DEFAULT CURRENT_TIMESTAMP,
  updated_at TEXT DEFAULT CURRENT_TIMESTAMP,
  CHECK (id = 1)
);
"""

TABLES = [
    "users",
    "cities",
    "price_areas",
    "stores",
    "products",
    "product_area_prices",
    "package_items",
    "store_deliveries",
    "individual_deliveries",
    "delivery_items",
    "returns",
    "return_items",
    "employees",
    "payrolls",
    "raw_materials",
    "factory_productions",
    "production_materials",
    "stock_reductions",
    "product_recipes",
    "hpp",
    "bookkeeping_entries",
    "assets",
    "admin_settings",
]

DEFAULT_PIN = "123456"

DEFAULT_USERS = [
    ("Admin", "admin", "123456"),
    ("Kasir", "kasir", "654321"),
]

DEFAULT_SETTINGS_USERS = [
    {"id": 1, "name": "Admin", "role": "admin", "pin": "123456", "created_at": "2025-07-01T00:00:00.000Z"},
    {"id": 2, "name": "Kasir", "role": "kasir", "pin": "654321", "created_at": "2025-07-01T00:00:00.000Z"},
]


def _count(conn: sqlite3.Connection, table: str) -> int:
    return int(conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0])


def bootstrap_schema(conn: sqlite3.Connection) -> None:
    """Create every table and seed default users/settings into empty tables.

    Safe to run again on a populated database: tables are created with
    IF NOT EXISTS and seeds only go into tables that have no rows.
    """
    conn.executescript(SCHEMA_SQL)

    if _count(conn, "users") == 0:
        conn.executemany(
            "INSERT INTO users (name, role, pin) VALUES (?, ?, ?)",
            DEFAULT_USERS,
        )

    if _count(conn, "admin_settings") == 0:
        conn.execute(
            "INSERT INTO admin_settings (id, pin, users) VALUES (1, ?, ?)",
            (DEFAULT_PIN, json.dumps(DEFAULT_SETTINGS_USERS)),
        )
