"""Shared BDD fixtures and step definitions for shopping and order status."""

import json

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then, when
from storefront.cart.items import AddToCart, get_cart
from storefront.order.cancellation import CancelOrder
from storefront.order.order import Order
from storefront.order.placement import place_order_from_cart
from storefront.order.status import ChangeOrderStatus
from storefront.product.management import CreateProduct
from storefront.shared.exceptions import StorefrontError
from storefront.user.addresses import AddAddress
from storefront.user.authentication import hash_password
from storefront.user.registration import RegisterUser


@pytest.fixture()
def world():
    """Mutable scenario state shared between steps."""
    return {"user_id": None, "products": {}, "order_id": None, "error": None}


def _capture(world, action):
    try:
        return action()
    except StorefrontError as exc:
        world["error"] = exc.message
    except ValidationError as exc:
        world["error"] = next(iter(exc.messages.values()))[0]
    return None


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a shopper "{email}" with an address in "{city}"'))
def shopper_with_address(world, email, city):
    user_id = current_domain.process(
        RegisterUser(name="Shopper", email=email, password_hash=hash_password("s3cret-pass")),
        asynchronous=False,
    )
    current_domain.process(
        AddAddress(user_id=user_id, line_one="12 Baker Street", city=city, country="IN", pincode="411001"),
        asynchronous=False,
    )
    world["user_id"] = user_id


@given(parsers.cfparse('the catalog has "{name}" priced {price}'))
def catalog_has_product(world, name, price):
    command = CreateProduct(name=name, description=f"{name} from the catalog", price=price, tags=json.dumps([]))
    world["products"][name] = current_domain.process(command, asynchronous=False)


# ---------------------------------------------------------------------------
# Steps usable as Given or When
# ---------------------------------------------------------------------------
@given(parsers.cfparse('the shopper adds {quantity:d} "{name}" to the cart'))
@when(parsers.cfparse('the shopper adds {quantity:d} "{name}" to the cart'))
def shopper_adds_to_cart(world, quantity, name):
    command = AddToCart(user_id=world["user_id"], product_id=world["products"][name], quantity=quantity)
    current_domain.process(command, asynchronous=False)


@given("the shopper places an order")
@when("the shopper places an order")
def shopper_places_order(world):
    world["order_id"] = _capture(world, lambda: place_order_from_cart(world["user_id"]))


@given(parsers.cfparse('an administrator moves the order to "{status}"'))
@when(parsers.cfparse('an administrator moves the order to "{status}"'))
def admin_moves_order(world, status):
    command = ChangeOrderStatus(order_id=world["order_id"], status=status)
    _capture(world, lambda: current_domain.process(command, asynchronous=False))


@when("the shopper cancels the order")
def shopper_cancels_order(world):
    command = CancelOrder(order_id=world["order_id"], user_id=world["user_id"])
    _capture(world, lambda: current_domain.process(command, asynchronous=False))


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the cart total is {total}"))
def cart_total_is(world, total):
    assert str(get_cart(world["user_id"]).total) == total


@then(parsers.cfparse("the cart has {count:d} line"))
def cart_has_one_line(world, count):
    assert len(get_cart(world["user_id"]).lines) == count


@then(parsers.cfparse("the cart has {count:d} lines"))
def cart_has_lines(world, count):
    assert len(get_cart(world["user_id"]).lines) == count


@then(parsers.cfparse('the "{name}" line has quantity {quantity:d}'))
def line_has_quantity(world, name, quantity):
    line = next(line for line in get_cart(world["user_id"]).lines if line.product.name == name)
    assert line.item.quantity == quantity


@then(parsers.cfparse('the order is "{status}" with net amount {amount}'))
def order_is(world, status, amount):
    order = current_domain.repository_for(Order).get(world["order_id"])
    assert order.current_status().value == status
    assert order.net_amount == amount


@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(world, status):
    order = current_domain.repository_for(Order).get(world["order_id"])
    assert order.current_status().value == status
    assert order.status == status


@then(parsers.cfparse('the order history is "{statuses}"'))
def order_history_is(world, statuses):
    order = current_domain.repository_for(Order).get(world["order_id"])
    assert [e.status for e in order.history()] == [s.strip() for s in statuses.split(",")]


@then(parsers.cfparse('the request is rejected with "{message}"'))
def request_rejected(world, message):
    assert world["error"] == message


@then(parsers.cfparse("the shopper has {count:d} orders"))
def shopper_has_orders(world, count):
    assert len(current_domain.repository_for(Order).for_user(world["user_id"])) == count
