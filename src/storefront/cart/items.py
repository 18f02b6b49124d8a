"""Cart item management: commands, handler and the cart read model."""

from dataclasses import dataclass
from decimal import Decimal

from protean import handle
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from storefront.cart.cart import CartItem, ShoppingCart
from storefront.domain import storefront
from storefront.product.product import Product
from storefront.shared.exceptions import ErrorCode, NotFound
from storefront.shared.money import ZERO, line_total, quantize
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

MAX_WRITE_ATTEMPTS = 3


@storefront.command(part_of="ShoppingCart")
class AddToCart:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@storefront.command(part_of="ShoppingCart")
class UpdateCartQuantity:
    user_id = Identifier(required=True)
    item_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@storefront.command(part_of="ShoppingCart")
class RemoveFromCart:
    user_id = Identifier(required=True)
    item_id = Identifier(required=True)


@storefront.command(part_of="ShoppingCart")
class ClearCart:
    user_id = Identifier(required=True)


def _cart_of(user_id) -> ShoppingCart:
    cart = current_domain.repository_for(ShoppingCart).for_user(user_id)
    if cart is None:
        raise NotFound("Cart item not found", ErrorCode.CART_ITEM_NOT_FOUND)
    return cart


@storefront.command_handler(part_of=ShoppingCart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        try:
            current_domain.repository_for(Product).get(command.product_id)
        except ObjectNotFoundError:
            raise NotFound("Product not found", ErrorCode.PRODUCT_NOT_FOUND) from None

        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.for_user(command.user_id) or ShoppingCart.create(user_id=command.user_id)
        item = cart.add_item(product_id=command.product_id, quantity=command.quantity)
        repo.add(cart)
        return str(item.id)

    @handle(UpdateCartQuantity)
    def update_cart_quantity(self, command):
        cart = _cart_of(command.user_id)
        cart.update_item_quantity(item_id=command.item_id, new_quantity=command.quantity)
        current_domain.repository_for(ShoppingCart).add(cart)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        cart = _cart_of(command.user_id)
        cart.remove_item(item_id=command.item_id)
        current_domain.repository_for(ShoppingCart).add(cart)

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.for_user(command.user_id)
        if cart is None or not cart.items:
            return
        cart.clear()
        repo.add(cart)


def add_item_to_cart(user_id, product_id, quantity: int) -> str:
    """Process `AddToCart`, replaying it against a freshly loaded cart when a
    concurrent write to the same cart committed first.

    Each attempt is its own Unit of Work, so a lost race leaves nothing behind.
    Gives up with `ExpectedVersionError` after `MAX_WRITE_ATTEMPTS`.
    """
    for attempt in range(1, MAX_WRITE_ATTEMPTS + 1):
        try:
            command = AddToCart(user_id=user_id, product_id=product_id, quantity=quantity)
            return current_domain.process(command, asynchronous=False)
        except ExpectedVersionError:
            if attempt == MAX_WRITE_ATTEMPTS:
                raise
            logger.info("cart_write_conflict", user_id=str(user_id), attempt=attempt)


# -------------------------------------------------------------------
# Read model
# -------------------------------------------------------------------
@dataclass(frozen=True)
class CartLine:
    item: CartItem
    product: Product

    @property
    def amount(self) -> Decimal:
        return line_total(self.item.quantity, self.product.price)


@dataclass(frozen=True)
class CartContents:
    lines: list[CartLine]
    total: Decimal


def cart_line(user_id, item_id) -> CartLine:
    """One line of the user's cart with its product attached."""
    item = _cart_of(user_id).find_item(item_id)
    product = current_domain.repository_for(Product).get(item.product_id)
    return CartLine(item=item, product=product)


def get_cart(user_id) -> CartContents:
    """All lines newest first, with `total = sum(quantity x price)` in exact decimals."""
    cart = current_domain.repository_for(ShoppingCart).for_user(user_id)
    if cart is None:
        return CartContents(lines=[], total=ZERO)

    products = current_domain.repository_for(Product)
    lines = [CartLine(item=item, product=products.get(item.product_id)) for item in cart.lines_newest_first()]
    total = quantize(sum((line.amount for line in lines), ZERO))
    return CartContents(lines=lines, total=total)
