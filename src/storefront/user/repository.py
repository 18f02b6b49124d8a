"""Repository for the User aggregate."""

from storefront.domain import storefront
from storefront.user.user import User


@storefront.repository(part_of=User)
class UserRepository:
    def find_by_email(self, email: str) -> User | None:
        """Find a user by email address, compared case-insensitively."""
        results = self._dao.query.filter(email=normalize_email(email)).all().items
        return results[0] if results else None

    def page(self, skip: int = 0, take: int = 10):
        """Users newest first, as a Protean ResultSet (`items`, `total`)."""
        return self._dao.query.order_by("-created_at").offset(skip).limit(take).all()


def normalize_email(email: str) -> str:
    return email.strip().lower()
