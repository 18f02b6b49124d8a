import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from protean import current_domain
from storefront.api import register_exception_handlers, routers
from storefront.user.roles import ChangeUserRole


@pytest.fixture()
def client():
    app = FastAPI()
    for router in routers:
        app.include_router(router)
    register_exception_handlers(app)
    return TestClient(app)


def _signup_and_login(client, name="Jane Doe", email="jane@example.com", password="s3cret-pass"):
    """Create an account over HTTP and return (user_id, auth headers)."""
    response = client.post("/api/auth/signup", json={"name": name, "email": email, "password": password})
    assert response.status_code == 201
    user_id = response.json()["user"]["id"]

    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200
    return user_id, {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture()
def signup(client):
    def _signup(**kwargs):
        return _signup_and_login(client, **kwargs)

    return _signup


@pytest.fixture()
def shopper(client):
    return _signup_and_login(client)


@pytest.fixture()
def admin(client):
    user_id, headers = _signup_and_login(client, name="Ada Admin", email="admin@example.com")
    current_domain.process(ChangeUserRole(user_id=user_id, role="ADMIN"), asynchronous=False)
    return user_id, headers


@pytest.fixture()
def product_factory(client, admin):
    """Helper: create a product as admin and return its JSON."""
    _, headers = admin

    def _create(name="Mug", price="10.00", description="Stoneware mug", tags=None):
        response = client.post(
            "/api/products",
            json={"name": name, "description": description, "price": price, "tags": tags or []},
            headers=headers,
        )
        assert response.status_code == 201
        return response.json()["product"]

    return _create
