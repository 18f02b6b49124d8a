"""Repository for the Order aggregate."""

from storefront.domain import storefront
from storefront.order.order import Order
from storefront.shared.query import fetch_all

ADMIN_PAGE_SIZE = 10


@storefront.repository(part_of=Order)
class OrderRepository:
    def for_user(self, user_id) -> list[Order]:
        """The user's orders, newest first."""
        return fetch_all(self._dao.query.filter(user_id=str(user_id)).order_by("-created_at"))

    def page(self, status: str | None = None, skip: int = 0, take: int = ADMIN_PAGE_SIZE):
        """Orders newest first, optionally by current status, as a ResultSet."""
        query = self._dao.query
        if status:
            query = query.filter(status=status)
        return query.order_by("-created_at").offset(skip).limit(take).all()
