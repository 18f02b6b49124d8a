import os
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Pytest hook to run before collecting tests.

    Fetch and activate the domain by pushing the associated domain_context. The activated domain can then be referred to elsewhere as `current_domain`
    """
    os.environ["PROTEAN_ENV"] = session.config.option.env

    from storefront.domain import storefront

    storefront.init()
    storefront.domain_context().push()


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)


@pytest.fixture(scope="session", autouse=True)
def setup_db(request):
    from storefront.domain import storefront
    from storefront.utils.db import drop_db, setup_db

    setup_db(storefront)

    yield

    drop_db(storefront)


@pytest.fixture(autouse=True)
def run_around_tests():
    """Fixture to automatically cleanup infrastructure after every test"""
    yield

    from protean import current_domain

    # Clear all databases
    for _, provider in current_domain.providers.items():
        provider._data_reset()

    # Drain event stores
    current_domain.event_store.store._data_reset()


# ---------------------------------------------------------------------------
# Shared builders
# ---------------------------------------------------------------------------
@pytest.fixture()
def register_user():
    """Register a user through the domain and return their id."""
    from protean import current_domain
    from storefront.user.authentication import hash_password
    from storefront.user.registration import RegisterUser

    def _register(name="Jane Doe", email="jane@example.com", password="s3cret-pass"):
        command = RegisterUser(name=name, email=email, password_hash=hash_password(password))
        return current_domain.process(command, asynchronous=False)

    return _register


@pytest.fixture()
def create_product():
    """Create a product through the domain and return its id."""
    import json

    from protean import current_domain
    from storefront.product.management import CreateProduct

    def _create(name="Mug", price="10.00", description="Stoneware mug", tags=None):
        command = CreateProduct(name=name, description=description, price=price, tags=json.dumps(tags or []))
        return current_domain.process(command, asynchronous=False)

    return _create


@pytest.fixture()
def add_address():
    """Add an address to a user's book and return the address id."""
    from protean import current_domain
    from storefront.user.addresses import AddAddress

    def _add(user_id, line_one="12 Baker Street", line_two=None, city="Pune", country="IN", pincode="411001"):
        command = AddAddress(
            user_id=user_id,
            line_one=line_one,
            line_two=line_two,
            city=city,
            country=country,
            pincode=pincode,
        )
        return current_domain.process(command, asynchronous=False)

    return _add
