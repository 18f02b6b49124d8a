"""Order cancellation by its owner."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order
from storefront.shared.exceptions import ErrorCode, NotFound
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    user_id = Identifier(required=True)


def order_owned_by(order_id, user_id) -> Order:
    """Load an order, treating someone else's order the same as a missing one."""
    try:
        order = current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError:
        raise NotFound("Order not found", ErrorCode.ORDER_NOT_FOUND) from None
    if str(order.user_id) != str(user_id):
        raise NotFound("Order not found", ErrorCode.ORDER_NOT_FOUND)
    return order


@storefront.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        order = order_owned_by(command.order_id, command.user_id)
        order.cancel()
        current_domain.repository_for(Order).add(order)
        logger.info("order_canceled", order_id=str(order.id), user_id=str(command.user_id))
