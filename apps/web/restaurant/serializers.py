"""
Pydantic schemas for restaurant, menu and order API payloads.

These schemas define the public API contract.
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Literal

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    PlainSerializer,
)

IMAGE_URL_MAX_LENGTH = 200


def _check_url_length(url: HttpUrl) -> HttpUrl:
    if len(str(url)) > IMAGE_URL_MAX_LENGTH:
        msg = f"URL must be at most {IMAGE_URL_MAX_LENGTH} characters"
        raise ValueError(msg)
    return url


# An http(s) URL that dumps as a plain string
ImageUrl = Annotated[
    HttpUrl,
    AfterValidator(_check_url_length),
    PlainSerializer(str, return_type=str),
]

# =============================================================================
# Restaurants
# =============================================================================


class RestaurantSchema(BaseModel):
    """A restaurant in the catalog."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_id: int
    name: str
    cuisine: str
    rating: Decimal
    delivery_time: str
    address: str
    phone: str
    is_active: bool
    created_at: datetime


class RestaurantCreateRequest(BaseModel):
    """
    Request body for POST /api/restaurants.

    owner_id is only honoured for admins creating on an owner's behalf.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, max_length=200)
    cuisine: str = Field(..., min_length=1, max_length=100)
    delivery_time: str = Field(..., min_length=1, max_length=50)
    address: str = Field(default="", max_length=1000)
    phone: str = Field(default="", max_length=20)
    owner_id: int | None = None


class RestaurantUpdateRequest(BaseModel):
    """Request body for PUT /api/restaurants/{id}. Ownership is not editable."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, min_length=1, max_length=200)
    cuisine: str | None = Field(default=None, min_length=1, max_length=100)
    delivery_time: str | None = Field(default=None, min_length=1, max_length=50)
    address: str | None = Field(default=None, max_length=1000)
    phone: str | None = Field(default=None, max_length=20)
    rating: Decimal | None = Field(
        default=None, ge=0, le=5, max_digits=2, decimal_places=1
    )
    is_active: bool | None = None


class RestaurantListResponse(BaseModel):
    """Response for GET /api/restaurants."""

    restaurants: list[RestaurantSchema]


# =============================================================================
# Menu
# =============================================================================


class MenuItemSchema(BaseModel):
    """A menu item."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    restaurant_id: int
    name: str
    description: str
    price: Decimal
    category: str
    image_url: str
    is_available: bool


class MenuItemCreateRequest(BaseModel):
    """Request body for POST /api/menu-items."""

    model_config = ConfigDict(extra="forbid")

    restaurant_id: int
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="", max_length=2000)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    category: str = Field(default="", max_length=100)
    image_url: ImageUrl | Literal[""] = ""


class MenuItemUpdateRequest(BaseModel):
    """Request body for PUT /api/menu-items/{id}. The restaurant is not editable."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    price: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    category: str | None = Field(default=None, max_length=100)
    image_url: ImageUrl | Literal[""] | None = None
    is_available: bool | None = None


class MenuResponse(BaseModel):
    """Response for GET /api/restaurants/{id}/menu."""

    restaurant_id: int
    items: list[MenuItemSchema]


# =============================================================================
# Orders
# =============================================================================


class OrderItemCreateSchema(BaseModel):
    """A single item in an order creation request."""

    menu_item_id: int
    quantity: int = Field(default=1, ge=1, le=99)


class OrderCreateRequest(BaseModel):
    """Request body for POST /api/orders."""

    restaurant_id: int
    items: list[OrderItemCreateSchema] = Field(..., min_length=1)
    delivery_address: str = Field(default="", max_length=500)


class OrderItemSchema(BaseModel):
    """A line item in an order response."""

    model_config = ConfigDict(from_attributes=True)

    menu_item_id: int | None
    name: str
    price: Decimal
    quantity: int


class OrderSchema(BaseModel):
    """An order."""

    id: int
    customer_id: int
    restaurant_id: int
    restaurant_name: str
    items: list[OrderItemSchema]
    total_amount: Decimal
    status: str
    payment_status: str
    delivery_address: str
    created_at: datetime
    updated_at: datetime


class OrderListResponse(BaseModel):
    """Response for order listings."""

    orders: list[OrderSchema]


class OrderStatusUpdateRequest(BaseModel):
    """Request body for PATCH /api/orders/{id}/status."""

    status: Literal["Pending", "Preparing", "Delivered", "Cancelled"]


class PaymentStatusUpdateRequest(BaseModel):
    """Request body for PATCH /api/orders/{id}/payment."""

    payment_status: Literal["Pending", "Paid"]
