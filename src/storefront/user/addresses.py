"""Address book management: commands and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.user.user import User


@storefront.command(part_of="User")
class AddAddress:
    """Add an address to the user's address book."""

    user_id: Identifier(required=True)
    line_one: String(required=True, max_length=255)
    line_two: String(max_length=255)
    city: String(required=True, max_length=100)
    country: String(required=True, max_length=100)
    pincode: String(required=True, min_length=6, max_length=6)


@storefront.command(part_of="User")
class RemoveAddress:
    user_id: Identifier(required=True)
    address_id: Identifier(required=True)


@storefront.command(part_of="User")
class UpdateUserDefaults:
    """Rename the user and/or repoint the default shipping and billing addresses."""

    user_id: Identifier(required=True)
    name: String(max_length=100)
    default_shipping_address_id: Identifier()
    default_billing_address_id: Identifier()


@storefront.command_handler(part_of=User)
class ManageAddressesHandler:
    @handle(AddAddress)
    def add_address(self, command):
        repo = current_domain.repository_for(User)
        user = repo.get(command.user_id)
        address = user.add_address(
            line_one=command.line_one,
            line_two=command.line_two,
            city=command.city,
            country=command.country,
            pincode=command.pincode,
        )
        repo.add(user)
        return str(address.id)

    @handle(RemoveAddress)
    def remove_address(self, command):
        repo = current_domain.repository_for(User)
        user = repo.get(command.user_id)
        user.remove_address(command.address_id)
        repo.add(user)

    @handle(UpdateUserDefaults)
    def update_user_defaults(self, command):
        repo = current_domain.repository_for(User)
        user = repo.get(command.user_id)
        user.update_profile(
            name=command.name,
            shipping_address_id=command.default_shipping_address_id,
            billing_address_id=command.default_billing_address_id,
        )
        repo.add(user)
