"""Catalog management: admin commands, handler and read queries."""

import json

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.cart.cart import CartItem
from storefront.domain import storefront
from storefront.order.order import OrderLine
from storefront.product.product import Product
from storefront.shared.exceptions import BadRequest, ErrorCode, NotFound
from storefront.shared.query import fetch_all
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Product")
class CreateProduct:
    name: String(required=True, max_length=255)
    description: Text(required=True)
    price: String(required=True, max_length=32)
    tags: Text()  # JSON array of strings


@storefront.command(part_of="Product")
class UpdateProduct:
    """Change any subset of a product's fields."""

    product_id: Identifier(required=True)
    name: String(max_length=255)
    description: Text()
    price: String(max_length=32)
    tags: Text()


@storefront.command(part_of="Product")
class DeleteProduct:
    product_id: Identifier(required=True)


def _tags(raw):
    return json.loads(raw) if raw is not None else None


def get_product(product_id) -> Product:
    try:
        return current_domain.repository_for(Product).get(product_id)
    except ObjectNotFoundError:
        raise NotFound("Product not found", ErrorCode.PRODUCT_NOT_FOUND) from None


@storefront.command_handler(part_of=Product)
class ManageProductHandler:
    @handle(CreateProduct)
    def create_product(self, command):
        product = Product.create(
            name=command.name,
            description=command.description,
            price=command.price,
            tags=_tags(command.tags),
        )
        current_domain.repository_for(Product).add(product)
        return str(product.id)

    @handle(UpdateProduct)
    def update_product(self, command):
        product = get_product(command.product_id)
        product.update(
            name=command.name,
            description=command.description,
            price=command.price,
            tags=_tags(command.tags),
        )
        current_domain.repository_for(Product).add(product)

    @handle(DeleteProduct)
    def delete_product(self, command):
        product = get_product(command.product_id)

        # Cart lines and order lines keep pointing at the product, so it must outlive them
        for entity_cls in (CartItem, OrderLine):
            dao = current_domain.repository_for(entity_cls)._dao
            if dao.query.filter(product_id=str(product.id)).limit(1).all().items:
                raise BadRequest("Product is referenced by carts or orders and cannot be deleted")

        current_domain.repository_for(Product)._dao.delete(product)
        logger.info("product_deleted", product_id=str(product.id))


# -------------------------------------------------------------------
# Queries
# -------------------------------------------------------------------
def list_products(skip: int = 0, take: int = 10):
    """A page of products, newest first, as a Protean ResultSet."""
    dao = current_domain.repository_for(Product)._dao
    return dao.query.order_by("-created_at").offset(skip).limit(take).all()


def search_products(term: str) -> list[Product]:
    dao = current_domain.repository_for(Product)._dao
    return [p for p in fetch_all(dao.query.order_by("-created_at")) if p.matches(term)]
