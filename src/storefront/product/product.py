"""Product aggregate: the catalog entry a cart line or order line points at."""

import json
from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, String, Text

from storefront.domain import storefront
from storefront.shared.money import format_amount, quantize, to_decimal


def normalize_tags(tags) -> list[str]:
    """Strip, drop blanks and collapse duplicates, keeping first-seen order."""
    seen = []
    for tag in tags or []:
        tag = str(tag).strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


@storefront.aggregate
class Product:
    name = String(required=True, max_length=255)
    description = Text(required=True)
    price = String(required=True, max_length=32)  # Decimal text, e.g. "10.00"
    tags = Text()  # JSON array of strings
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def price_must_be_a_non_negative_amount(self):
        try:
            amount = to_decimal(self.price)
        except ValueError:
            raise ValidationError({"price": ["Price must be a decimal amount"]}) from None
        if amount < 0:
            raise ValidationError({"price": ["Price cannot be negative"]})

    @classmethod
    def create(cls, name, description, price, tags=None):
        from storefront.product.events import ProductCreated

        now = datetime.now(UTC)
        product = cls(
            name=name,
            description=description,
            price=_canonical_price(price),
            tags=json.dumps(normalize_tags(tags)),
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductCreated(
                product_id=str(product.id),
                name=name,
                price=product.price,
                created_at=now,
            )
        )
        return product

    def update(self, name=None, description=None, price=None, tags=None):
        """Partial update; arguments left as None keep their current value."""
        from storefront.product.events import ProductUpdated

        if name is not None:
            self.name = name
        if description is not None:
            self.description = description
        if price is not None:
            self.price = _canonical_price(price)
        if tags is not None:
            self.tags = json.dumps(normalize_tags(tags))
        self.updated_at = datetime.now(UTC)

        self.raise_(
            ProductUpdated(
                product_id=str(self.id),
                name=self.name,
                price=self.price,
                updated_at=self.updated_at,
            )
        )

    def tag_list(self) -> list[str]:
        return json.loads(self.tags) if self.tags else []

    def matches(self, term: str) -> bool:
        """Case-insensitive match of `term` against name, description and tags."""
        needle = term.strip().lower()
        if not needle:
            return True
        haystack = [self.name or "", self.description or "", *self.tag_list()]
        return any(needle in value.lower() for value in haystack)


def _canonical_price(price) -> str:
    try:
        amount = to_decimal(price)
    except ValueError:
        raise ValidationError({"price": ["Price must be a decimal amount"]}) from None
    if amount != quantize(amount):
        raise ValidationError({"price": ["Price can have at most 2 decimal places"]})
    return format_amount(amount)
