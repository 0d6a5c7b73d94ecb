"""PIN login and the admin_settings singleton.

PINs are compared as plain text against the stored values, the same way they
are entered on the login screen. They are not hashed.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Optional

from bakery.gateway import operation

_JSON_COLUMNS = {
    "locked_menus": "[]",
    "hidden_menus": "[]",
    "menu_pins": "{}",
    "profile": "{}",
    "users": "[]",
}


@dataclass
class AdminSettingsInput:
    pin: str
    locked_menus: list[str] = field(default_factory=list)
    hidden_menus: list[str] = field(default_factory=list)
    menu_pins: dict[str, str] = field(default_factory=dict)
    profile: dict[str, Any] = field(default_factory=dict)
    users: list[dict[str, Any]] = field(default_factory=list)


def _decode(raw: Optional[str], default: str):
    return json.loads(raw or default)


@operation
def login(db, pin: str) -> dict:
    user = db.query_single("SELECT * FROM users WHERE pin = ?", (str(pin),))
    if user:
        return {"success": True, "role": user["role"]}
    return {"success": False}


@operation
def verify_pin(db, pin: str) -> bool:
    settings = db.query_single("SELECT pin FROM admin_settings WHERE id = 1")
    return bool(settings) and settings["pin"] == str(pin)


@operation
def verify_menu_pin(db, menu_id: str, pin: str) -> bool:
    settings = db.query_single("SELECT menu_pins FROM admin_settings WHERE id = 1")
    if not settings or not settings["menu_pins"]:
        return False
    menu_pins = json.loads(settings["menu_pins"])
    return menu_pins.get(menu_id) == str(pin)


@operation
def get_admin_settings(db) -> dict:
    settings = db.query_single("SELECT * FROM admin_settings WHERE id = 1")
    if not settings:
        return {}
    out = dict(settings)
    for col, default in _JSON_COLUMNS.items():
        out[col] = _decode(settings.get(col), default)
    return out


@operation
def update_admin_settings(db, settings: AdminSettingsInput) -> bool:
    if not str(settings.pin or "").strip():
        raise ValueError("Admin PIN is required.")
    db.execute(
        """
        UPDATE admin_settings
        SET pin = ?,
            locked_menus = ?,
            hidden_menus = ?,
            menu_pins = ?,
            profile = ?,
            users = ?,
            updated_at = CURRENT_TIMESTAMP
        WHERE id = 1
        """,
        (
            str(settings.pin),
            json.dumps(list(settings.locked_menus)),
            json.dumps(list(settings.hidden_menus)),
            json.dumps(dict(settings.menu_pins)),
            json.dumps(dict(settings.profile)),
            json.dumps(list(settings.users)),
        ),
    )
    return True
