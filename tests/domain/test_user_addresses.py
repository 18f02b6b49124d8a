"""Tests for the User aggregate's address book and default pointers."""

import pytest
from protean.exceptions import ValidationError
from storefront.shared.exceptions import NotFound
from storefront.user.events import AddressAdded, AddressRemoved, DefaultAddressesChanged, UserRegistered
from storefront.user.user import Address, User, UserRole


def _make_user():
    return User.register(name="Jane Doe", email="jane@example.com", password_hash="hashed")


def _add(user, line_one="12 Baker Street", **overrides):
    fields = {"city": "Pune", "country": "IN", "pincode": "411001"}
    fields.update(overrides)
    return user.add_address(line_one=line_one, **fields)


class TestRegistration:
    def test_defaults(self):
        user = _make_user()
        assert user.role == UserRole.USER.value
        assert user.default_shipping_address_id is None
        assert user.default_billing_address_id is None
        assert user.created_at is not None

    def test_raises_event(self):
        user = _make_user()
        events = [e for e in user._events if isinstance(e, UserRegistered)]
        assert len(events) == 1
        assert events[0].email == "jane@example.com"


class TestAddAddress:
    def test_first_address_becomes_both_defaults(self):
        user = _make_user()
        address = _add(user)
        assert user.default_shipping_address_id == address.id
        assert user.default_billing_address_id == address.id

    def test_later_addresses_leave_defaults_alone(self):
        user = _make_user()
        first = _add(user)
        _add(user, line_one="7 Park Lane")
        assert user.default_shipping_address_id == first.id
        assert user.default_billing_address_id == first.id

    def test_defaults_refilled_after_removal(self):
        user = _make_user()
        first = _add(user)
        user.remove_address(first.id)
        second = _add(user, line_one="7 Park Lane")
        assert user.default_shipping_address_id == second.id
        assert user.default_billing_address_id == second.id

    def test_raises_event(self):
        user = _make_user()
        address = _add(user)
        events = [e for e in user._events if isinstance(e, AddressAdded)]
        assert len(events) == 1
        assert events[0].address_id == address.id

    def test_pincode_must_have_six_characters(self):
        user = _make_user()
        with pytest.raises(ValidationError):
            _add(user, pincode="123")


class TestRemoveAddress:
    def test_removing_a_default_clears_the_pointers(self):
        user = _make_user()
        address = _add(user)
        user.remove_address(address.id)
        assert len(user.addresses) == 0
        assert user.default_shipping_address_id is None
        assert user.default_billing_address_id is None

    def test_removing_a_non_default_keeps_pointers(self):
        user = _make_user()
        first = _add(user)
        second = _add(user, line_one="7 Park Lane")
        user.remove_address(second.id)
        assert user.default_shipping_address_id == first.id

    def test_unknown_address_is_not_found(self):
        user = _make_user()
        with pytest.raises(NotFound):
            user.remove_address("missing")

    def test_raises_event(self):
        user = _make_user()
        address = _add(user)
        user.remove_address(address.id)
        assert any(isinstance(e, AddressRemoved) for e in user._events)


class TestUpdateProfile:
    def test_repoints_shipping_only(self):
        user = _make_user()
        first = _add(user)
        second = _add(user, line_one="7 Park Lane")
        user.update_profile(shipping_address_id=second.id)
        assert user.default_shipping_address_id == second.id
        assert user.default_billing_address_id == first.id

    def test_renames(self):
        user = _make_user()
        user.update_profile(name="Janet Doe")
        assert user.name == "Janet Doe"

    def test_address_of_someone_else_is_not_found(self):
        user = _make_user()
        other = User.register(name="John", email="john@example.com", password_hash="hashed")
        foreign = _add(other)
        with pytest.raises(NotFound):
            user.update_profile(billing_address_id=foreign.id)

    def test_raises_event_when_pointers_change(self):
        user = _make_user()
        _add(user)
        second = _add(user, line_one="7 Park Lane")
        user.update_profile(billing_address_id=second.id)
        events = [e for e in user._events if isinstance(e, DefaultAddressesChanged)]
        assert events[-1].default_billing_address_id == second.id

    def test_default_must_be_owned(self):
        user = _make_user()
        with pytest.raises(ValidationError):
            user.default_shipping_address_id = "not-an-owned-address"


class TestAddressFormatting:
    def test_with_second_line(self):
        address = Address(line_one="12 Baker Street", line_two="Flat 2", city="Pune", country="IN", pincode="411001")
        assert address.formatted() == "12 Baker Street, Flat 2, Pune, IN - 411001"

    def test_without_second_line(self):
        address = Address(line_one="12 Baker Street", city="Pune", country="IN", pincode="411001")
        assert address.formatted() == "12 Baker Street, Pune, IN - 411001"


class TestRoles:
    def test_change_role(self):
        user = _make_user()
        user.change_role("ADMIN")
        assert user.role == UserRole.ADMIN.value

    def test_unknown_role_rejected(self):
        user = _make_user()
        with pytest.raises(ValidationError):
            user.change_role("SUPERUSER")
