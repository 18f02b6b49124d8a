"""User aggregate root with its Address entity.

A user owns an address book and two pointers into it: the default shipping
address, used when an order is placed, and the default billing address. Both
pointers are kept inside the aggregate so they can never reference an address
that belongs to somebody else or no longer exists.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, String

from storefront.domain import storefront
from storefront.shared.exceptions import ErrorCode, NotFound


class UserRole(Enum):
    USER = "USER"
    ADMIN = "ADMIN"


@storefront.entity(part_of="User")
class Address:
    """A postal address in a user's address book."""

    line_one: String(required=True, max_length=255)
    line_two: String(max_length=255)
    city: String(required=True, max_length=100)
    country: String(required=True, max_length=100)
    pincode: String(required=True, min_length=6, max_length=6)
    created_at: DateTime()

    def formatted(self) -> str:
        """Single-line snapshot used on orders: `line_one[, line_two], city, country - pincode`."""
        parts = [self.line_one]
        if self.line_two:
            parts.append(self.line_two)
        parts.extend([self.city, self.country])
        return f"{', '.join(parts)} - {self.pincode}"


@storefront.aggregate
class User:
    """A registered account, either a shopper or an administrator."""

    name: String(required=True, max_length=100)
    email: String(required=True, max_length=254, unique=True)
    password_hash: String(required=True, max_length=255)
    role: String(choices=UserRole, default=UserRole.USER.value)
    default_shipping_address_id: Identifier()
    default_billing_address_id: Identifier()
    addresses: HasMany(Address)
    created_at: DateTime()

    @invariant.post
    def default_addresses_must_be_owned(self):
        owned = {str(a.id) for a in self.addresses}
        for field in ("default_shipping_address_id", "default_billing_address_id"):
            value = getattr(self, field)
            if value and str(value) not in owned:
                raise ValidationError({field: ["Address does not belong to user"]})

    @classmethod
    def register(cls, name, email, password_hash):
        from storefront.user.events import UserRegistered

        now = datetime.now(UTC)
        user = cls(
            name=name,
            email=email,
            password_hash=password_hash,
            role=UserRole.USER.value,
            created_at=now,
        )
        user.raise_(
            UserRegistered(
                user_id=str(user.id),
                name=name,
                email=email,
                registered_at=now,
            )
        )
        return user

    # -------------------------------------------------------------------
    # Address book
    # -------------------------------------------------------------------
    def find_address(self, address_id):
        """Owned address with `address_id`, or NotFound."""
        address = next((a for a in self.addresses if str(a.id) == str(address_id)), None)
        if address is None:
            raise NotFound("Address not found", ErrorCode.ADDRESS_NOT_FOUND)
        return address

    def add_address(self, line_one, city, country, pincode, line_two=None):
        from storefront.user.events import AddressAdded

        address = Address(
            line_one=line_one,
            line_two=line_two,
            city=city,
            country=country,
            pincode=pincode,
            created_at=datetime.now(UTC),
        )

        with atomic_change(self):
            self.add_addresses(address)
            # Shipping and billing defaults are filled independently
            if not self.default_shipping_address_id:
                self.default_shipping_address_id = address.id
            if not self.default_billing_address_id:
                self.default_billing_address_id = address.id

        self.raise_(
            AddressAdded(
                user_id=str(self.id),
                address_id=str(address.id),
                line_one=line_one,
                line_two=line_two,
                city=city,
                country=country,
                pincode=pincode,
            )
        )
        return address

    def remove_address(self, address_id):
        from storefront.user.events import AddressRemoved

        address = self.find_address(address_id)

        with atomic_change(self):
            if str(self.default_shipping_address_id) == str(address.id):
                self.default_shipping_address_id = None
            if str(self.default_billing_address_id) == str(address.id):
                self.default_billing_address_id = None
            self.remove_addresses(address)

        self.raise_(AddressRemoved(user_id=str(self.id), address_id=str(address_id)))

    def update_profile(self, name=None, shipping_address_id=None, billing_address_id=None):
        """Change the name and/or the default address pointers. `None` leaves a value as is."""
        from storefront.user.events import DefaultAddressesChanged

        if shipping_address_id is not None:
            shipping_address_id = self.find_address(shipping_address_id).id
        if billing_address_id is not None:
            billing_address_id = self.find_address(billing_address_id).id

        if name is not None:
            self.name = name
        if shipping_address_id is None and billing_address_id is None:
            return

        with atomic_change(self):
            if shipping_address_id is not None:
                self.default_shipping_address_id = shipping_address_id
            if billing_address_id is not None:
                self.default_billing_address_id = billing_address_id

        self.raise_(
            DefaultAddressesChanged(
                user_id=str(self.id),
                default_shipping_address_id=(
                    str(self.default_shipping_address_id) if self.default_shipping_address_id else None
                ),
                default_billing_address_id=(
                    str(self.default_billing_address_id) if self.default_billing_address_id else None
                ),
            )
        )

    def shipping_address(self):
        """The default shipping address, or None when unset or dangling."""
        if not self.default_shipping_address_id:
            return None
        return next(
            (a for a in self.addresses if str(a.id) == str(self.default_shipping_address_id)),
            None,
        )

    # -------------------------------------------------------------------
    # Roles
    # -------------------------------------------------------------------
    def change_role(self, role):
        from storefront.user.events import UserRoleChanged

        try:
            new_role = UserRole(role)
        except ValueError:
            raise ValidationError({"role": [f"Invalid role: {role}"]}) from None

        previous_role = self.role
        self.role = new_role.value
        self.raise_(
            UserRoleChanged(
                user_id=str(self.id),
                previous_role=previous_role,
                new_role=new_role.value,
            )
        )
