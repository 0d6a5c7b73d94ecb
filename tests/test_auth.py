"""Tests for PIN login and admin settings."""

import pytest

from bakery.services.auth import AdminSettingsInput


class TestLogin:
    """Tests for login with the seeded users."""

    def test_seeded_users(self, db):
        users = db.query("SELECT name, role, pin FROM users ORDER BY id")
        assert users == [
            {"name": "Admin", "role": "admin", "pin": "123456"},
            {"name": "Kasir", "role": "kasir", "pin": "654321"},
        ]

    def test_admin_pin(self, api):
        assert api.login("123456") == {"success": True, "role": "admin"}

    def test_kasir_pin(self, api):
        assert api.login("654321") == {"success": True, "role": "kasir"}

    def test_wrong_pin(self, api):
        assert api.login("000000") == {"success": False}

    def test_login_on_cold_database(self, lazy_api):
        assert lazy_api.login("123456")["success"] is True


class TestAdminSettings:
    """Tests for the admin_settings singleton."""

    def test_defaults_are_decoded(self, api):
        settings = api.get_admin_settings()
        assert settings["pin"] == "123456"
        assert settings["locked_menus"] == []
        assert settings["menu_pins"] == {}
        assert settings["profile"]["name"] == "Admin"
        assert [u["role"] for u in settings["users"]] == ["admin", "kasir"]

    def test_verify_pin(self, api):
        assert api.verify_pin("123456") is True
        assert api.verify_pin("111111") is False

    def test_update_and_menu_pin(self, api):
        api.update_admin_settings(
            AdminSettingsInput(
                pin="999999",
                locked_menus=["bookkeeping"],
                menu_pins={"bookkeeping": "4321"},
                profile={"name": "Risna"},
            )
        )
        settings = api.get_admin_settings()
        assert settings["pin"] == "999999"
        assert settings["locked_menus"] == ["bookkeeping"]
        assert settings["profile"] == {"name": "Risna"}
        assert api.verify_pin("999999") is True
        assert api.verify_menu_pin("bookkeeping", "4321") is True
        assert api.verify_menu_pin("bookkeeping", "0000") is False
        assert api.verify_menu_pin("payroll", "4321") is False

    def test_empty_pin_rejected(self, api):
        with pytest.raises(ValueError):
            api.update_admin_settings(AdminSettingsInput(pin="  "))
