"""Application tests for cancellation and admin status changes."""

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from storefront.cart.items import AddToCart
from storefront.order.cancellation import CancelOrder
from storefront.order.order import Order
from storefront.order.placement import place_order_from_cart
from storefront.order.status import ChangeOrderStatus
from storefront.shared.exceptions import ErrorCode, NotFound


@pytest.fixture()
def placed_order(register_user, add_address, create_product):
    user_id = register_user()
    add_address(user_id)
    current_domain.process(AddToCart(user_id=user_id, product_id=create_product(), quantity=1), asynchronous=False)
    return user_id, place_order_from_cart(user_id)


def _set_status(order_id, status):
    current_domain.process(ChangeOrderStatus(order_id=order_id, status=status), asynchronous=False)


def _load(order_id):
    return current_domain.repository_for(Order).get(order_id)


class TestCancelOrder:
    def test_owner_can_cancel(self, placed_order):
        user_id, order_id = placed_order
        current_domain.process(CancelOrder(order_id=order_id, user_id=user_id), asynchronous=False)
        order = _load(order_id)
        assert order.status == "CANCELED"
        assert [e.status for e in order.history()] == ["PENDING", "CANCELED"]
        assert [e.sequence for e in order.history()] == [1, 2]

    def test_other_users_get_not_found(self, placed_order, register_user):
        _, order_id = placed_order
        intruder_id = register_user(name="John", email="john@example.com")
        with pytest.raises(NotFound) as exc:
            current_domain.process(CancelOrder(order_id=order_id, user_id=intruder_id), asynchronous=False)
        assert exc.value.error_code == ErrorCode.ORDER_NOT_FOUND
        assert _load(order_id).status == "PENDING"

    def test_unknown_order(self, placed_order):
        user_id, _ = placed_order
        with pytest.raises(NotFound):
            current_domain.process(CancelOrder(order_id="missing", user_id=user_id), asynchronous=False)

    def test_delivered_order_cannot_be_canceled(self, placed_order):
        user_id, order_id = placed_order
        for status in ("ACCEPTED", "OUT_FOR_DELIVERY", "DELIVERED"):
            _set_status(order_id, status)

        with pytest.raises(ValidationError) as exc:
            current_domain.process(CancelOrder(order_id=order_id, user_id=user_id), asynchronous=False)
        assert exc.value.messages["status"] == ["Cannot cancel order with status: DELIVERED"]
        assert len(_load(order_id).history()) == 4

    def test_second_cancel_is_rejected(self, placed_order):
        user_id, order_id = placed_order
        current_domain.process(CancelOrder(order_id=order_id, user_id=user_id), asynchronous=False)
        with pytest.raises(ValidationError):
            current_domain.process(CancelOrder(order_id=order_id, user_id=user_id), asynchronous=False)
        assert len(_load(order_id).history()) == 2


class TestChangeOrderStatus:
    def test_progression_is_recorded(self, placed_order):
        _, order_id = placed_order
        _set_status(order_id, "ACCEPTED")
        _set_status(order_id, "OUT_FOR_DELIVERY")
        order = _load(order_id)
        assert order.status == "OUT_FOR_DELIVERY"
        assert [e.status for e in order.history()] == ["PENDING", "ACCEPTED", "OUT_FOR_DELIVERY"]

    def test_illegal_transition(self, placed_order):
        _, order_id = placed_order
        with pytest.raises(ValidationError):
            _set_status(order_id, "DELIVERED")
        assert _load(order_id).status == "PENDING"

    def test_unknown_status(self, placed_order):
        _, order_id = placed_order
        with pytest.raises(ValidationError):
            _set_status(order_id, "LOST")

    def test_unknown_order(self):
        with pytest.raises(NotFound):
            _set_status("missing", "ACCEPTED")

    def test_current_status_follows_interleaved_appends(self, placed_order):
        user_id, order_id = placed_order
        _set_status(order_id, "ACCEPTED")
        current_domain.process(CancelOrder(order_id=order_id, user_id=user_id), asynchronous=False)
        order = _load(order_id)
        assert order.current_status().value == "CANCELED"
        assert [e.sequence for e in order.history()] == [1, 2, 3]


class TestListing:
    def test_orders_for_user_newest_first(self, placed_order, create_product):
        user_id, first_id = placed_order
        current_domain.process(AddToCart(user_id=user_id, product_id=create_product(), quantity=1), asynchronous=False)
        second_id = place_order_from_cart(user_id)
        orders = current_domain.repository_for(Order).for_user(user_id)
        assert [o.id for o in orders] == [second_id, first_id]

    def test_admin_page_filters_by_status(self, placed_order):
        user_id, order_id = placed_order
        page = current_domain.repository_for(Order).page(status="PENDING")
        assert page.total == 1
        current_domain.process(CancelOrder(order_id=order_id, user_id=user_id), asynchronous=False)
        assert current_domain.repository_for(Order).page(status="PENDING").total == 0
        assert current_domain.repository_for(Order).page(status="CANCELED").total == 1
