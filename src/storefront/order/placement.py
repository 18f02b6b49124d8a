"""Order placement: turn the caller's cart into an order.

`PlaceOrder` writes the whole order (header, lines and the initial PENDING
status event) with a single repository add inside the handler's unit of work.
The cart is only cleared afterwards, by a separate `ClearCart` command, so a
failed placement leaves the cart exactly as it was.
"""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.cart.items import ClearCart
from storefront.domain import storefront
from storefront.order.order import Order
from storefront.product.product import Product
from storefront.shared.exceptions import BadRequest, ErrorCode, NotFound
from storefront.user.user import User
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Order")
class PlaceOrder:
    user_id = Identifier(required=True)


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        cart = current_domain.repository_for(ShoppingCart).for_user(command.user_id)
        if cart is None or not cart.items:
            raise BadRequest("Cart is empty")

        user = current_domain.repository_for(User).get(command.user_id)
        address = user.shipping_address()
        if address is None:
            raise NotFound("Shipping address not found", ErrorCode.ADDRESS_NOT_FOUND)

        products = current_domain.repository_for(Product)
        lines_data = []
        for item in cart.items:
            product = products.get(item.product_id)
            lines_data.append(
                {
                    "product_id": str(item.product_id),
                    "quantity": item.quantity,
                    "product_name": product.name,
                    "unit_price": product.price,
                }
            )

        order = Order.place(
            user_id=command.user_id,
            address=address.formatted(),
            lines_data=lines_data,
        )
        current_domain.repository_for(Order).add(order)

        logger.info(
            "order_placed",
            order_id=str(order.id),
            user_id=str(command.user_id),
            net_amount=order.net_amount,
            line_count=len(lines_data),
        )
        return str(order.id)


def place_order_from_cart(user_id) -> str:
    """Place an order from the user's cart, then empty the cart.

    Returns the new order's id. Nothing is cleared if placement raises.
    """
    order_id = current_domain.process(PlaceOrder(user_id=user_id), asynchronous=False)
    current_domain.process(ClearCart(user_id=user_id), asynchronous=False)
    return order_id
