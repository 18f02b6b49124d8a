"""FastAPI endpoints for the Storefront.

Mutations build a command and hand it to `current_domain.process`; reads go
straight to repositories. Failures propagate as exceptions and are rendered
by `storefront.api.errors`.
"""

import json

from fastapi import APIRouter, Depends, Query
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.api.schemas import (
    AddressListResponse,
    AddressOut,
    AddressRequest,
    AddressResponse,
    AddToCartRequest,
    AdminOrderListResponse,
    CartItemOut,
    CartItemResponse,
    CartResponse,
    ChangeQuantityRequest,
    ChangeRoleRequest,
    ChangeStatusRequest,
    CreateProductRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    OrderListResponse,
    OrderOut,
    OrderResponse,
    ProductListResponse,
    ProductOut,
    ProductResponse,
    SignupRequest,
    UpdateProductRequest,
    UpdateUserRequest,
    UserListResponse,
    UserOut,
    UserResponse,
)
from storefront.api.security import AuthenticatedContext, current_user, require_admin
from storefront.cart.items import (
    RemoveFromCart,
    UpdateCartQuantity,
    add_item_to_cart,
    cart_line,
    get_cart,
)
from storefront.order.cancellation import CancelOrder, order_owned_by
from storefront.order.order import Order
from storefront.order.placement import place_order_from_cart
from storefront.order.repository import ADMIN_PAGE_SIZE
from storefront.order.status import ChangeOrderStatus
from storefront.product.management import (
    CreateProduct,
    DeleteProduct,
    UpdateProduct,
    get_product,
    list_products,
    search_products,
)
from storefront.shared.exceptions import ErrorCode, NotFound
from storefront.user.addresses import AddAddress, RemoveAddress, UpdateUserDefaults
from storefront.user.authentication import authenticate, hash_password
from storefront.user.registration import RegisterUser
from storefront.user.roles import ChangeUserRole
from storefront.user.user import User

auth_router = APIRouter(prefix="/api/auth", tags=["auth"])
product_router = APIRouter(prefix="/api/products", tags=["products"])
cart_router = APIRouter(prefix="/api/carts", tags=["carts"])
order_router = APIRouter(prefix="/api/orders", tags=["orders"])
user_router = APIRouter(prefix="/api/users", tags=["users"])


def _load_user(user_id) -> User:
    try:
        return current_domain.repository_for(User).get(user_id)
    except ObjectNotFoundError:
        raise NotFound("User not found", ErrorCode.USER_NOT_FOUND) from None


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------
@auth_router.post("/signup", status_code=201, response_model=UserResponse)
async def signup(body: SignupRequest) -> UserResponse:
    command = RegisterUser(
        name=body.name,
        email=body.email,
        password_hash=hash_password(body.password),
    )
    user_id = current_domain.process(command, asynchronous=False)
    return UserResponse(user=UserOut.of(_load_user(user_id)))


@auth_router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest) -> LoginResponse:
    user, token = authenticate(body.email, body.password)
    return LoginResponse(user=UserOut.of(user), token=token)


@auth_router.get("/me", response_model=UserResponse)
async def me(context: AuthenticatedContext = Depends(current_user)) -> UserResponse:
    return UserResponse(user=UserOut.of(_load_user(context.user_id)))


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------
@product_router.post("", status_code=201, response_model=ProductResponse)
async def create_product(
    body: CreateProductRequest,
    context: AuthenticatedContext = Depends(require_admin),
) -> ProductResponse:
    command = CreateProduct(
        name=body.name,
        description=body.description,
        price=str(body.price),
        tags=json.dumps(body.tags),
    )
    product_id = current_domain.process(command, asynchronous=False)
    return ProductResponse(product=ProductOut.of(get_product(product_id)))


@product_router.get("", response_model=ProductListResponse)
async def list_all_products(
    skip: int = Query(0, ge=0),
    take: int = Query(10, ge=1, le=100),
) -> ProductListResponse:
    products = list_products(skip=skip, take=take).items
    return ProductListResponse(count=len(products), products=[ProductOut.of(p) for p in products])


@product_router.get("/search", response_model=ProductListResponse)
async def search(q: str = Query("", max_length=255)) -> ProductListResponse:
    products = search_products(q)
    return ProductListResponse(count=len(products), products=[ProductOut.of(p) for p in products])


@product_router.get("/{product_id}", response_model=ProductResponse)
async def get_product_by_id(product_id: str) -> ProductResponse:
    return ProductResponse(product=ProductOut.of(get_product(product_id)))


@product_router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: str,
    body: UpdateProductRequest,
    context: AuthenticatedContext = Depends(require_admin),
) -> ProductResponse:
    command = UpdateProduct(
        product_id=product_id,
        name=body.name,
        description=body.description,
        price=str(body.price) if body.price is not None else None,
        tags=json.dumps(body.tags) if body.tags is not None else None,
    )
    current_domain.process(command, asynchronous=False)
    return ProductResponse(product=ProductOut.of(get_product(product_id)))


@product_router.delete("/{product_id}", response_model=MessageResponse)
async def delete_product(
    product_id: str,
    context: AuthenticatedContext = Depends(require_admin),
) -> MessageResponse:
    current_domain.process(DeleteProduct(product_id=product_id), asynchronous=False)
    return MessageResponse(message="Product deleted")


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
@cart_router.post("", status_code=201, response_model=CartItemResponse)
async def add_to_cart(
    body: AddToCartRequest,
    context: AuthenticatedContext = Depends(current_user),
) -> CartItemResponse:
    item_id = add_item_to_cart(context.user_id, body.product_id, body.quantity)
    return CartItemResponse(cart_item=CartItemOut.of(cart_line(context.user_id, item_id)))


@cart_router.get("", response_model=CartResponse)
async def view_cart(context: AuthenticatedContext = Depends(current_user)) -> CartResponse:
    contents = get_cart(context.user_id)
    return CartResponse(
        count=len(contents.lines),
        total_amount=str(contents.total),
        cart_items=[CartItemOut.of(line) for line in contents.lines],
    )


@cart_router.put("/{item_id}", response_model=CartItemResponse)
async def change_quantity(
    item_id: str,
    body: ChangeQuantityRequest,
    context: AuthenticatedContext = Depends(current_user),
) -> CartItemResponse:
    command = UpdateCartQuantity(user_id=context.user_id, item_id=item_id, quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    return CartItemResponse(cart_item=CartItemOut.of(cart_line(context.user_id, item_id)))


@cart_router.delete("/{item_id}", response_model=MessageResponse)
async def remove_from_cart(
    item_id: str,
    context: AuthenticatedContext = Depends(current_user),
) -> MessageResponse:
    current_domain.process(RemoveFromCart(user_id=context.user_id, item_id=item_id), asynchronous=False)
    return MessageResponse(message="Item removed from cart")


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
@order_router.post("", status_code=201, response_model=OrderResponse)
async def place_order(context: AuthenticatedContext = Depends(current_user)) -> OrderResponse:
    order_id = place_order_from_cart(context.user_id)
    order = current_domain.repository_for(Order).get(order_id)
    return OrderResponse(order=OrderOut.of(order))


@order_router.get("", response_model=OrderListResponse)
async def list_my_orders(context: AuthenticatedContext = Depends(current_user)) -> OrderListResponse:
    orders = current_domain.repository_for(Order).for_user(context.user_id)
    return OrderListResponse(count=len(orders), orders=[OrderOut.of(o) for o in orders])


@order_router.get("/admin/all", response_model=AdminOrderListResponse)
async def list_all_orders(
    status: str | None = Query(None),
    skip: int = Query(0, ge=0),
    context: AuthenticatedContext = Depends(require_admin),
) -> AdminOrderListResponse:
    page = current_domain.repository_for(Order).page(status=status, skip=skip, take=ADMIN_PAGE_SIZE)
    return AdminOrderListResponse(
        count=len(page.items),
        total_count=page.total,
        skip=skip,
        orders=[OrderOut.of(o) for o in page.items],
    )


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, context: AuthenticatedContext = Depends(current_user)) -> OrderResponse:
    if context.is_admin:
        try:
            order = current_domain.repository_for(Order).get(order_id)
        except ObjectNotFoundError:
            raise NotFound("Order not found", ErrorCode.ORDER_NOT_FOUND) from None
    else:
        order = order_owned_by(order_id, context.user_id)
    return OrderResponse(order=OrderOut.of(order))


@order_router.put("/{order_id}/cancel", response_model=MessageResponse)
async def cancel_order(order_id: str, context: AuthenticatedContext = Depends(current_user)) -> MessageResponse:
    current_domain.process(CancelOrder(order_id=order_id, user_id=context.user_id), asynchronous=False)
    return MessageResponse(message="Order canceled")


@order_router.put("/{order_id}/status", response_model=OrderResponse)
async def change_order_status(
    order_id: str,
    body: ChangeStatusRequest,
    context: AuthenticatedContext = Depends(require_admin),
) -> OrderResponse:
    current_domain.process(ChangeOrderStatus(order_id=order_id, status=body.status), asynchronous=False)
    order = current_domain.repository_for(Order).get(order_id)
    return OrderResponse(order=OrderOut.of(order))


# ---------------------------------------------------------------------------
# Users and addresses
# ---------------------------------------------------------------------------
@user_router.post("/address", status_code=201, response_model=AddressResponse)
async def add_address(body: AddressRequest, context: AuthenticatedContext = Depends(current_user)) -> AddressResponse:
    command = AddAddress(
        user_id=context.user_id,
        line_one=body.line_one,
        line_two=body.line_two,
        city=body.city,
        country=body.country,
        pincode=body.pincode,
    )
    address_id = current_domain.process(command, asynchronous=False)
    address = _load_user(context.user_id).find_address(address_id)
    return AddressResponse(address=AddressOut.of(address))


@user_router.get("/address", response_model=AddressListResponse)
async def list_addresses(context: AuthenticatedContext = Depends(current_user)) -> AddressListResponse:
    user = _load_user(context.user_id)
    addresses = sorted(user.addresses, key=lambda a: a.created_at, reverse=True)
    return AddressListResponse(count=len(addresses), addresses=[AddressOut.of(a) for a in addresses])


@user_router.delete("/address/{address_id}", response_model=MessageResponse)
async def delete_address(address_id: str, context: AuthenticatedContext = Depends(current_user)) -> MessageResponse:
    current_domain.process(RemoveAddress(user_id=context.user_id, address_id=address_id), asynchronous=False)
    return MessageResponse(message="Address deleted")


@user_router.put("", response_model=UserResponse)
async def update_user(body: UpdateUserRequest, context: AuthenticatedContext = Depends(current_user)) -> UserResponse:
    command = UpdateUserDefaults(
        user_id=context.user_id,
        name=body.name,
        default_shipping_address_id=body.default_shipping_address,
        default_billing_address_id=body.default_billing_address,
    )
    current_domain.process(command, asynchronous=False)
    return UserResponse(user=UserOut.of(_load_user(context.user_id)))


@user_router.get("", response_model=UserListResponse)
async def list_users(
    skip: int = Query(0, ge=0),
    context: AuthenticatedContext = Depends(require_admin),
) -> UserListResponse:
    page = current_domain.repository_for(User).page(skip=skip)
    return UserListResponse(count=len(page.items), total_count=page.total, users=[UserOut.of(u) for u in page.items])


@user_router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: str, context: AuthenticatedContext = Depends(require_admin)) -> UserResponse:
    return UserResponse(user=UserOut.of(_load_user(user_id)))


@user_router.put("/{user_id}/role", response_model=UserResponse)
async def change_role(
    user_id: str,
    body: ChangeRoleRequest,
    context: AuthenticatedContext = Depends(require_admin),
) -> UserResponse:
    current_domain.process(ChangeUserRole(user_id=user_id, role=body.role), asynchronous=False)
    return UserResponse(user=UserOut.of(_load_user(user_id)))
