"""Pydantic request/response schemas for the Storefront API.

JSON keys are camelCase on the wire; attributes stay snake_case in Python.
Amounts travel as decimal strings ("25.50").
"""

from __future__ import annotations

import json
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Request Schemas ---


class SignupRequest(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={"examples": [{"name": "Jane Doe", "email": "jane@example.com", "password": "s3cret-pass"}]},
    )

    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)


class AddressRequest(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {"lineOne": "12 Baker Street", "lineTwo": "Flat 2", "city": "Pune", "country": "IN", "pincode": "411001"}
            ]
        },
    )

    line_one: str = Field(..., min_length=1, max_length=255)
    line_two: str | None = Field(None, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    country: str = Field(..., min_length=1, max_length=100)
    pincode: str = Field(..., min_length=6, max_length=6)


class UpdateUserRequest(CamelModel):
    name: str | None = Field(None, min_length=2, max_length=100)
    default_shipping_address: str | None = None
    default_billing_address: str | None = None


class ChangeRoleRequest(CamelModel):
    role: str = Field(..., pattern="^(USER|ADMIN)$")


class CreateProductRequest(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [{"name": "Mug", "description": "Stoneware mug", "price": "10.00", "tags": ["kitchen"]}]
        },
    )

    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    tags: list[str] = Field(default_factory=list)


class UpdateProductRequest(CamelModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, min_length=1)
    price: Decimal | None = Field(None, ge=0, max_digits=12, decimal_places=2)
    tags: list[str] | None = None


class AddToCartRequest(CamelModel):
    product_id: str
    quantity: int = Field(..., gt=0)


class ChangeQuantityRequest(CamelModel):
    quantity: int = Field(..., gt=0)


class ChangeStatusRequest(CamelModel):
    status: str = Field(..., min_length=1, max_length=32)


# --- Response Schemas ---


class MessageResponse(CamelModel):
    success: bool = True
    message: str


class AddressOut(CamelModel):
    id: str
    line_one: str
    line_two: str | None = None
    city: str
    country: str
    pincode: str
    created_at: datetime | None = None

    @classmethod
    def of(cls, address) -> AddressOut:
        return cls(
            id=str(address.id),
            line_one=address.line_one,
            line_two=address.line_two,
            city=address.city,
            country=address.country,
            pincode=address.pincode,
            created_at=address.created_at,
        )


class UserOut(CamelModel):
    id: str
    name: str
    email: str
    role: str
    default_shipping_address: str | None = None
    default_billing_address: str | None = None
    created_at: datetime | None = None

    @classmethod
    def of(cls, user) -> UserOut:
        return cls(
            id=str(user.id),
            name=user.name,
            email=user.email,
            role=user.role,
            default_shipping_address=(
                str(user.default_shipping_address_id) if user.default_shipping_address_id else None
            ),
            default_billing_address=str(user.default_billing_address_id) if user.default_billing_address_id else None,
            created_at=user.created_at,
        )


class UserResponse(CamelModel):
    success: bool = True
    user: UserOut


class LoginResponse(CamelModel):
    success: bool = True
    user: UserOut
    token: str


class UserListResponse(CamelModel):
    success: bool = True
    count: int
    total_count: int
    users: list[UserOut]


class AddressResponse(CamelModel):
    success: bool = True
    address: AddressOut


class AddressListResponse(CamelModel):
    success: bool = True
    count: int
    addresses: list[AddressOut]


class ProductOut(CamelModel):
    id: str
    name: str
    description: str
    price: str
    tags: list[str]
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def of(cls, product) -> ProductOut:
        return cls(
            id=str(product.id),
            name=product.name,
            description=product.description,
            price=product.price,
            tags=json.loads(product.tags) if product.tags else [],
            created_at=product.created_at,
            updated_at=product.updated_at,
        )


class ProductResponse(CamelModel):
    success: bool = True
    product: ProductOut


class ProductListResponse(CamelModel):
    success: bool = True
    count: int
    products: list[ProductOut]


class CartItemOut(CamelModel):
    id: str
    product_id: str
    quantity: int
    created_at: datetime | None = None
    updated_at: datetime | None = None
    product: ProductOut

    @classmethod
    def of(cls, line) -> CartItemOut:
        return cls(
            id=str(line.item.id),
            product_id=str(line.item.product_id),
            quantity=line.item.quantity,
            created_at=line.item.added_at,
            updated_at=line.item.updated_at,
            product=ProductOut.of(line.product),
        )


class CartItemResponse(CamelModel):
    success: bool = True
    cart_item: CartItemOut


class CartResponse(CamelModel):
    success: bool = True
    count: int
    total_amount: str
    cart_items: list[CartItemOut]


class OrderLineOut(CamelModel):
    id: str
    product_id: str
    product_name: str
    unit_price: str
    quantity: int


class OrderEventOut(CamelModel):
    id: str
    status: str
    sequence: int
    created_at: datetime


class OrderOut(CamelModel):
    id: str
    user_id: str
    net_amount: str
    address: str
    status: str
    created_at: datetime | None = None
    products: list[OrderLineOut]
    events: list[OrderEventOut]

    @classmethod
    def of(cls, order) -> OrderOut:
        return cls(
            id=str(order.id),
            user_id=str(order.user_id),
            net_amount=order.net_amount,
            address=order.address,
            status=order.current_status().value,
            created_at=order.created_at,
            products=[
                OrderLineOut(
                    id=str(line.id),
                    product_id=str(line.product_id),
                    product_name=line.product_name,
                    unit_price=line.unit_price,
                    quantity=line.quantity,
                )
                for line in order.lines
            ],
            events=[
                OrderEventOut(id=str(e.id), status=e.status, sequence=e.sequence, created_at=e.created_at)
                for e in order.history()
            ],
        )


class OrderResponse(CamelModel):
    success: bool = True
    order: OrderOut


class OrderListResponse(CamelModel):
    success: bool = True
    count: int
    orders: list[OrderOut]


class AdminOrderListResponse(CamelModel):
    success: bool = True
    count: int
    total_count: int
    skip: int
    orders: list[OrderOut]
