"""Tests for returns."""

import pytest

from bakery.services.deliveries import DeliveryItemInput, IndividualDeliveryInput, StoreDeliveryInput
from bakery.services.products import ProductInput
from bakery.services.returns import ReturnInput, ReturnItemInput


@pytest.fixture
def delivered(api):
    city_id = api.add_city("Solo")
    store_id = api.add_store("Toko Solo", "Jl. Slamet Riyadi", city_id)
    product_id = api.add_product(ProductInput("Nastar", "Toples", "500g", stock_dozen=2, base_price=85000))
    delivery_id = api.add_store_delivery(
        StoreDeliveryInput(store_id, "2025-07-01", 0), [DeliveryItemInput(product_id, 12, 7000)]
    )
    return delivery_id, product_id


def _stock(api, product_id):
    return api.get_product(product_id)["stock"]


def _ret(delivery_id, status="pending", delivery_type="store"):
    return ReturnInput(delivery_type, delivery_id, "2025-07-05", "crushed in transit", 14000, status=status)


class TestReturns:
    """Tests for return operations."""

    def test_pending_return_does_not_restock(self, api, delivered):
        delivery_id, product_id = delivered
        api.add_return(_ret(delivery_id), [ReturnItemInput(product_id, 2, 7000)])
        assert _stock(api, product_id) == 12

    def test_completed_return_restocks(self, api, delivered):
        delivery_id, product_id = delivered
        api.add_return(_ret(delivery_id, "completed"), [ReturnItemInput(product_id, 2, 7000)])
        assert _stock(api, product_id) == 14

    def test_listing_includes_delivery_info(self, api, delivered):
        delivery_id, product_id = delivered
        api.add_return(_ret(delivery_id), [ReturnItemInput(product_id, 2, 7000)])
        ret = api.get_returns()[0]
        assert ret["delivery_info"] == "Toko Solo"
        assert ret["city_name"] == "Solo"
        assert ret["items"][0]["product_name"] == "Nastar"
        assert ret["items"][0]["total_price"] == 14000

    def test_individual_delivery_info(self, api, delivered):
        _, product_id = delivered
        order_id = api.add_individual_delivery(
            IndividualDeliveryInput("Pak Budi", "2025-07-01", 0), [DeliveryItemInput(product_id, 1, 7000)]
        )
        api.add_return(_ret(order_id, delivery_type="individual"), [])
        ret = api.get_returns()[0]
        assert ret["delivery_info"] == "Pak Budi"
        assert ret["city_name"] is None

    def test_completing_on_update_restocks(self, api, delivered):
        delivery_id, product_id = delivered
        return_id = api.add_return(_ret(delivery_id), [ReturnItemInput(product_id, 2, 7000)])
        api.update_return(return_id, _ret(delivery_id, "completed"), [ReturnItemInput(product_id, 3, 7000)])
        assert _stock(api, product_id) == 15

    def test_update_of_completed_return_does_not_double_count(self, api, delivered):
        delivery_id, product_id = delivered
        return_id = api.add_return(_ret(delivery_id, "completed"), [ReturnItemInput(product_id, 2, 7000)])
        api.update_return(return_id, _ret(delivery_id, "completed"), [ReturnItemInput(product_id, 3, 7000)])
        assert _stock(api, product_id) == 15

    def test_delete_completed_return_takes_stock_back(self, api, delivered):
        delivery_id, product_id = delivered
        return_id = api.add_return(_ret(delivery_id, "completed"), [ReturnItemInput(product_id, 2, 7000)])
        api.delete_return(return_id)
        assert _stock(api, product_id) == 12
        assert api.get_returns() == []

    def test_validation(self, api, delivered):
        delivery_id, _ = delivered
        with pytest.raises(ValueError):
            api.add_return(_ret(delivery_id, status="lost"), [])
        with pytest.raises(ValueError):
            api.add_return(_ret(delivery_id, delivery_type="online"), [])
