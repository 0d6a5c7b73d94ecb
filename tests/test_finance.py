"""Tests for HPP pricing, bookkeeping and assets."""

from datetime import date, timedelta

import pytest

from bakery.services.assets import AssetInput
from bakery.services.hpp import HPPInput
from bakery.services.products import ProductInput


def _hpp(product_id, final_price):
    return HPPInput(
        product_id=product_id,
        material_cost=40000,
        overhead_cost=10000,
        target_profit_percentage=30,
        minimum_selling_price=60000,
        suggested_selling_price=65000,
        final_selling_price=final_price,
        online_channel_price=final_price + 5000,
        fee_channel_online=5,
    )


class TestHPP:
    """Tests for HPP records and the product hpp_price they maintain."""

    def test_crud_keeps_product_in_sync(self, api, db):
        product_id = api.add_product(ProductInput("Nastar", "Toples", "500g", base_price=85000))

        hpp_id = api.add_hpp(_hpp(product_id, 70000))
        assert api.get_hpps()[0]["product_name"] == "Nastar"
        assert db.query_single("SELECT hpp_price FROM products WHERE id = ?", (product_id,))["hpp_price"] == 70000

        api.update_hpp(hpp_id, _hpp(product_id, 72500))
        assert db.query_single("SELECT hpp_price FROM products WHERE id = ?", (product_id,))["hpp_price"] == 72500

        api.delete_hpp(hpp_id)
        assert api.get_hpps() == []
        assert db.query_single("SELECT hpp_price FROM products WHERE id = ?", (product_id,))["hpp_price"] is None

    def test_one_record_per_product(self, api):
        from bakery.errors import QueryError

        product_id = api.add_product(ProductInput("Nastar", "Toples", "500g", base_price=85000))
        api.add_hpp(_hpp(product_id, 70000))
        with pytest.raises(QueryError):
            api.add_hpp(_hpp(product_id, 71000))
        assert api.get_product(product_id)["hpp_price"] == 70000


class TestBookkeeping:
    """Tests for bookkeeping entries and summaries."""

    def test_summary(self, api):
        api.add_bookkeeping_entry("2025-07-01", "income", "primer", "Penjualan toko", 500000)
        api.add_bookkeeping_entry("2025-07-02", "expense", "primer", "Tepung", 120000)
        api.add_bookkeeping_entry("2025-07-03", "expense", "tersier", "Listrik", 80000)

        summary = api.get_bookkeeping_summary()
        assert summary["total_income"] == 500000
        assert summary["total_expense"] == 200000
        assert summary["net_profit"] == 300000
        assert summary["profit_margin"] == 60.0
        assert summary["primer"] == {"income": 500000, "expense": 120000}
        assert summary["sekunder"] == {"income": 0, "expense": 0}

    def test_report_range_is_inclusive(self, api):
        api.add_bookkeeping_entry("2025-06-30", "income", "primer", "Juni", 1)
        api.add_bookkeeping_entry("2025-07-01", "income", "primer", "Awal Juli", 100)
        api.add_bookkeeping_entry("2025-07-31", "expense", "sekunder", "Akhir Juli", 40)

        report = api.get_bookkeeping_report("2025-07-01", "2025-07-31")
        assert [e["description"] for e in report["entries"]] == ["Awal Juli", "Akhir Juli"]
        assert report["net_profit"] == 60
        assert report["period"] == {"start": "2025-07-01", "end": "2025-07-31"}

    def test_summary_without_income_has_zero_margin(self, api):
        api.add_bookkeeping_entry("2025-07-02", "expense", "primer", "Tepung", 120000)
        summary = api.get_bookkeeping_summary()
        assert summary["net_profit"] == -120000
        assert summary["profit_margin"] == 0.0

    def test_report_ends_today_by_default(self, api):
        today = date.today()
        api.add_bookkeeping_entry(today.isoformat(), "income", "primer", "Hari ini", 10)
        api.add_bookkeeping_entry((today + timedelta(days=1)).isoformat(), "income", "primer", "Besok", 20)

        report = api.get_bookkeeping_report("2000-01-01")
        assert [e["description"] for e in report["entries"]] == ["Hari ini"]
        assert report["period"]["end"] == today.isoformat()

    def test_update_and_delete(self, api):
        entry_id = api.add_bookkeeping_entry("2025-07-01", "income", "primer", "Salah", 1)
        api.update_bookkeeping_entry(entry_id, "2025-07-01", "expense", "sekunder", "Benar", 2)
        entry = api.get_bookkeeping_entries()[0]
        assert (entry["type"], entry["category"], entry["description"], entry["amount"]) == (
            "expense",
            "sekunder",
            "Benar",
            2,
        )
        api.delete_bookkeeping_entry(entry_id)
        assert api.get_bookkeeping_entries() == []

    def test_validation(self, api):
        with pytest.raises(ValueError):
            api.add_bookkeeping_entry("2025-07-01", "gift", "primer", "x", 1)
        with pytest.raises(ValueError):
            api.add_bookkeeping_entry("2025-07-01", "income", "lainnya", "x", 1)
        with pytest.raises(ValueError):
            api.add_bookkeeping_entry("2025-07-01", "income", "primer", "", 1)


class TestAssets:
    """Tests for asset records."""

    def test_current_value_defaults_to_purchase_price(self, api):
        api.add_asset(AssetInput("Oven", "Peralatan", "2024-01-01", 12000000, 5))
        asset = api.get_assets()[0]
        assert asset["current_value"] == 12000000
        assert asset["condition"] == "good"

    def test_update_and_delete(self, api):
        asset_id = api.add_asset(AssetInput("Mixer", "Peralatan", "2024-01-01", 3000000, 3))
        api.update_asset(asset_id, AssetInput("Mixer", "Peralatan", "2024-01-01", 3000000, 3, condition="fair", current_value=2000000))
        asset = api.get_assets()[0]
        assert (asset["condition"], asset["current_value"]) == ("fair", 2000000)
        api.delete_asset(asset_id)
        assert api.get_assets() == []

    def test_invalid_condition(self, api):
        with pytest.raises(ValueError):
            api.add_asset(AssetInput("Oven", "Peralatan", "2024-01-01", 1, 1, condition="broken"))
