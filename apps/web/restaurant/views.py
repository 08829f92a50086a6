"""
Restaurant, menu and order API views.

Every view resolves ownership through ``ownership`` and asks the single
``authorize`` decision point before reading or writing; none of them
re-implement role checks.
"""

import logging
from decimal import Decimal
from typing import Any

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import QuerySet
from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods

from apps.web.core.decorators import (
    idempotency_key_supported,
    principal_required,
    require_principal,
)
from apps.web.core.exceptions import RequestValidationError, ResourceNotFound
from apps.web.core.policy import Action, Resource, authorize
from apps.web.core.serializers import ValidationErrorDetail, parse_body
from apps.web.restaurant.lifecycle import record_payment, transition
from apps.web.restaurant.models import (
    MenuItem,
    Order,
    OrderItem,
    OrderStatus,
    PaymentStatus,
    Restaurant,
)
from apps.web.restaurant.ownership import (
    ResourceKind,
    get_order,
    order_resource,
    resolve_owner,
)
from apps.web.restaurant.serializers import (
    MenuItemCreateRequest,
    MenuItemSchema,
    MenuItemUpdateRequest,
    MenuResponse,
    OrderCreateRequest,
    OrderItemCreateSchema,
    OrderItemSchema,
    OrderListResponse,
    OrderSchema,
    OrderStatusUpdateRequest,
    PaymentStatusUpdateRequest,
    RestaurantCreateRequest,
    RestaurantListResponse,
    RestaurantSchema,
    RestaurantUpdateRequest,
)

logger = logging.getLogger(__name__)

User = get_user_model()


def _order_schema(order: Order) -> OrderSchema:
    """Serialize an Order model with its line items."""
    return OrderSchema(
        id=order.pk,
        customer_id=order.customer_id,
        restaurant_id=order.restaurant_id,
        restaurant_name=order.restaurant.name,
        items=[OrderItemSchema.model_validate(item) for item in order.items.all()],
        total_amount=order.total_amount,
        status=order.status,
        payment_status=order.payment_status,
        delivery_address=order.delivery_address,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


def _serialize_order(order: Order) -> dict[str, Any]:
    return _order_schema(order).model_dump(mode="json")


def _order_list(queryset: QuerySet[Order]) -> JsonResponse:
    orders = queryset.select_related("restaurant").prefetch_related("items")
    response = OrderListResponse(orders=[_order_schema(order) for order in orders])
    return JsonResponse(response.model_dump(mode="json"))


def _get_restaurant(request: HttpRequest, restaurant_id: int) -> Restaurant:
    """Fetch a restaurant visible to the requester or raise ResourceNotFound."""
    principal = getattr(request, "principal", None)
    try:
        return Restaurant.objects.visible_to(principal).get(pk=restaurant_id)
    except Restaurant.DoesNotExist as exc:
        raise ResourceNotFound(f"Restaurant {restaurant_id} not found") from exc


# =============================================================================
# Restaurants
# =============================================================================


@csrf_exempt
@require_http_methods(["GET", "POST"])
def restaurant_collection(request: HttpRequest) -> JsonResponse:
    """
    GET /api/restaurants - list the catalog (active restaurants, plus an
    owner's own hidden ones).

    POST /api/restaurants - create a restaurant owned by the requester, or
    by ``owner_id`` when an admin creates it on an owner's behalf.
    """
    if request.method == "POST":
        return _create_restaurant(request)

    principal = getattr(request, "principal", None)
    authorize(principal, Action.READ_RESTAURANT).enforce()

    restaurants = Restaurant.objects.visible_to(principal)
    response = RestaurantListResponse(
        restaurants=[RestaurantSchema.model_validate(r) for r in restaurants]
    )
    return JsonResponse(response.model_dump(mode="json"))


def _create_restaurant(request: HttpRequest) -> JsonResponse:
    principal = require_principal(request)
    payload = parse_body(request, RestaurantCreateRequest)

    owner_id = principal.id
    if payload.owner_id is not None and principal.is_admin:
        owner_id = payload.owner_id
        owner_role = (
            User.objects.filter(pk=owner_id).values_list("role", flat=True).first()
        )
        if owner_role not in (User.Role.OWNER, User.Role.ADMIN):
            raise RequestValidationError(
                "Validation error",
                details=[
                    ValidationErrorDetail(
                        field="owner_id",
                        message="Restaurants can only be owned by owner accounts",
                    ).model_dump()
                ],
            )

    # The new restaurant will belong to owner_id
    authorize(principal, Action.WRITE_RESTAURANT, Resource(owner_id=owner_id)).enforce()

    restaurant = Restaurant.objects.create(
        owner_id=owner_id,
        name=payload.name,
        cuisine=payload.cuisine,
        delivery_time=payload.delivery_time,
        address=payload.address,
        phone=payload.phone,
    )
    logger.info("Restaurant %s created for owner %s", restaurant.pk, owner_id)

    return JsonResponse(
        RestaurantSchema.model_validate(restaurant).model_dump(mode="json"),
        status=201,
    )


@csrf_exempt
@require_http_methods(["GET", "PUT"])
def restaurant_detail(request: HttpRequest, restaurant_id: int) -> JsonResponse:
    """
    GET /api/restaurants/{id} - restaurant details. Inactive restaurants are
    only visible to their owner and admins.

    PUT /api/restaurants/{id} - update catalog fields. Owner or admin.
    """
    if request.method == "PUT":
        return _update_restaurant(request, restaurant_id)

    authorize(getattr(request, "principal", None), Action.READ_RESTAURANT).enforce()
    restaurant = _get_restaurant(request, restaurant_id)
    return JsonResponse(RestaurantSchema.model_validate(restaurant).model_dump(mode="json"))


def _update_restaurant(request: HttpRequest, restaurant_id: int) -> JsonResponse:
    principal = require_principal(request)
    owner_id = resolve_owner(ResourceKind.RESTAURANT, restaurant_id)
    authorize(principal, Action.WRITE_RESTAURANT, Resource(owner_id=owner_id)).enforce()

    payload = parse_body(request, RestaurantUpdateRequest)
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)

    restaurant = Restaurant.objects.get(pk=restaurant_id)
    for field, value in changes.items():
        setattr(restaurant, field, value)
    if changes:
        restaurant.save(update_fields=[*changes, "updated_at"])
        logger.info("Restaurant %s updated: %s", restaurant.pk, ", ".join(changes))
        restaurant.refresh_from_db()

    return JsonResponse(RestaurantSchema.model_validate(restaurant).model_dump(mode="json"))


# =============================================================================
# Menu
# =============================================================================


@require_GET
def restaurant_menu(request: HttpRequest, restaurant_id: int) -> JsonResponse:
    """
    GET /api/restaurants/{id}/menu

    Available items for the public; all items for the owner and admins.
    """
    principal = getattr(request, "principal", None)
    authorize(principal, Action.READ_MENU).enforce()

    restaurant = _get_restaurant(request, restaurant_id)
    items = MenuItem.objects.visible_to(principal, restaurant)

    response = MenuResponse(
        restaurant_id=restaurant.pk,
        items=[MenuItemSchema.model_validate(item) for item in items],
    )
    return JsonResponse(response.model_dump(mode="json"))


@csrf_exempt
@require_http_methods(["POST"])
@principal_required
def create_menu_item(request: HttpRequest) -> JsonResponse:
    """
    POST /api/menu-items

    Add an item to a restaurant's menu. Owner of that restaurant or admin.

    Request body: MenuItemCreateRequest schema
    Response: MenuItemSchema (201)
    """
    principal = require_principal(request)
    payload = parse_body(request, MenuItemCreateRequest)

    owner_id = resolve_owner(ResourceKind.RESTAURANT, payload.restaurant_id)
    authorize(principal, Action.WRITE_MENU, Resource(owner_id=owner_id)).enforce()

    item = MenuItem.objects.create(**payload.model_dump())
    logger.info("Menu item %s added to restaurant %s", item.pk, item.restaurant_id)

    return JsonResponse(
        MenuItemSchema.model_validate(item).model_dump(mode="json"), status=201
    )


@csrf_exempt
@require_http_methods(["PUT", "DELETE"])
@principal_required
def menu_item_detail(request: HttpRequest, menu_item_id: int) -> JsonResponse:
    """
    PUT /api/menu-items/{id} - update an item (WriteMenu).
    DELETE /api/menu-items/{id} - remove an item (DeleteMenu).

    Ownership is checked against the item's restaurant.
    """
    principal = require_principal(request)
    owner_id = resolve_owner(ResourceKind.MENU_ITEM, menu_item_id)

    if request.method == "DELETE":
        authorize(principal, Action.DELETE_MENU, Resource(owner_id=owner_id)).enforce()
        MenuItem.objects.filter(pk=menu_item_id).delete()
        logger.info("Menu item %s deleted", menu_item_id)
        return JsonResponse({"message": "Menu item deleted successfully"})

    authorize(principal, Action.WRITE_MENU, Resource(owner_id=owner_id)).enforce()
    payload = parse_body(request, MenuItemUpdateRequest)
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)

    item = MenuItem.objects.get(pk=menu_item_id)
    for field, value in changes.items():
        setattr(item, field, value)
    if changes:
        item.save(update_fields=[*changes, "updated_at"])
        item.refresh_from_db()

    return JsonResponse(MenuItemSchema.model_validate(item).model_dump(mode="json"))


# =============================================================================
# Orders
# =============================================================================


def _validate_order_items(
    restaurant: Restaurant, items: list[OrderItemCreateSchema]
) -> tuple[list[dict[str, str]], list[tuple[MenuItem, int]]]:
    """
    Check every requested item belongs to the restaurant and is available.

    Returns:
        Tuple of (errors, validated (menu_item, quantity) pairs)
    """
    errors: list[dict[str, str]] = []
    validated: list[tuple[MenuItem, int]] = []

    menu = MenuItem.objects.filter(
        restaurant=restaurant,
        pk__in=[item.menu_item_id for item in items],
    ).in_bulk()

    for idx, item in enumerate(items):
        menu_item = menu.get(item.menu_item_id)
        if menu_item is None:
            errors.append(
                ValidationErrorDetail(
                    field=f"items.{idx}.menu_item_id",
                    message=f"Menu item {item.menu_item_id} not found",
                ).model_dump()
            )
        elif not menu_item.is_available:
            errors.append(
                ValidationErrorDetail(
                    field=f"items.{idx}.menu_item_id",
                    message=f"'{menu_item.name}' is currently unavailable",
                ).model_dump()
            )
        else:
            validated.append((menu_item, item.quantity))

    return errors, validated


@csrf_exempt
@require_http_methods(["POST"])
@principal_required
@idempotency_key_supported
def create_order(request: HttpRequest) -> JsonResponse:
    """
    POST /api/orders

    Place an order with one restaurant. Customers only.

    Names and prices are copied from the menu and the total is computed
    here; client-sent prices are ignored.

    Request body: OrderCreateRequest schema
    Response: OrderSchema (201) or validation error (400)
    """
    principal = require_principal(request)
    authorize(principal, Action.CREATE_ORDER).enforce()

    payload = parse_body(request, OrderCreateRequest)

    try:
        restaurant = Restaurant.objects.get(pk=payload.restaurant_id)
    except Restaurant.DoesNotExist as exc:
        raise ResourceNotFound(f"Restaurant {payload.restaurant_id} not found") from exc

    if not restaurant.is_active:
        raise RequestValidationError(
            "Validation error",
            details=[
                ValidationErrorDetail(
                    field="restaurant_id",
                    message="Restaurant is not accepting orders",
                ).model_dump()
            ],
        )

    errors, validated_items = _validate_order_items(restaurant, payload.items)
    if errors:
        raise RequestValidationError("Validation error", details=errors)

    total = sum(
        (menu_item.price * quantity for menu_item, quantity in validated_items),
        Decimal("0.00"),
    )

    with transaction.atomic():
        order = Order.objects.create(
            customer_id=principal.id,
            restaurant=restaurant,
            total_amount=total,
            status=OrderStatus.PENDING,
            payment_status=PaymentStatus.PENDING,
            delivery_address=payload.delivery_address,
        )
        OrderItem.objects.bulk_create(
            OrderItem(
                order=order,
                menu_item=menu_item,
                name=menu_item.name,
                price=menu_item.price,
                quantity=quantity,
            )
            for menu_item, quantity in validated_items
        )

    logger.info(
        "Order %s placed by customer %s with restaurant %s (total %s)",
        order.pk,
        principal.id,
        restaurant.pk,
        total,
    )

    return JsonResponse(_serialize_order(order), status=201)


@require_GET
@principal_required
def my_orders(request: HttpRequest) -> JsonResponse:
    """
    GET /api/orders/my-orders

    The requesting customer's orders, newest first.
    """
    principal = require_principal(request)
    authorize(
        principal, Action.READ_OWN_ORDERS, Resource(customer_id=principal.id)
    ).enforce()

    return _order_list(Order.objects.filter(customer_id=principal.id))


@require_GET
@principal_required
def order_detail(request: HttpRequest, order_id: int) -> JsonResponse:
    """
    GET /api/orders/{id}

    Readable by the customer who placed it, the restaurant's owner, and admins.
    """
    principal = require_principal(request)
    order = get_order(order_id)
    resource = order_resource(order)

    decision = authorize(principal, Action.READ_OWN_ORDERS, resource)
    if not decision:
        decision = authorize(principal, Action.READ_RESTAURANT_ORDERS, resource)
    decision.enforce()

    return JsonResponse(_serialize_order(order))


@require_GET
@principal_required
def restaurant_orders(request: HttpRequest, restaurant_id: int) -> JsonResponse:
    """
    GET /api/orders/restaurant/{id}

    All orders placed with a restaurant. Owner of the restaurant or admin.
    """
    principal = require_principal(request)
    owner_id = resolve_owner(ResourceKind.RESTAURANT, restaurant_id)
    authorize(
        principal, Action.READ_RESTAURANT_ORDERS, Resource(owner_id=owner_id)
    ).enforce()

    return _order_list(Order.objects.filter(restaurant_id=restaurant_id))


@csrf_exempt
@require_http_methods(["PATCH"])
@principal_required
def update_order_status(request: HttpRequest, order_id: int) -> JsonResponse:
    """
    PATCH /api/orders/{id}/status

    Move an order through its lifecycle. Owner of the restaurant or admin.

    Request body: OrderStatusUpdateRequest schema
    Response: OrderSchema (200), 403, 404 or 409 for an invalid transition
    """
    principal = require_principal(request)
    payload = parse_body(request, OrderStatusUpdateRequest)

    # Lock order and restaurant so the ownership read and the write see the
    # same owner.
    with transaction.atomic():
        order = get_order(order_id, for_update=True)
        previous = order.status
        transition(order, payload.status, principal)
        if order.status != previous:
            order.save(update_fields=["status", "updated_at"])

    return JsonResponse(_serialize_order(order))


@csrf_exempt
@require_http_methods(["PATCH"])
@principal_required
def update_payment_status(request: HttpRequest, order_id: int) -> JsonResponse:
    """
    PATCH /api/orders/{id}/payment

    Record payment for an order. Owner of the restaurant or admin.

    Request body: PaymentStatusUpdateRequest schema
    Response: OrderSchema (200), 403, 404 or 409 for an invalid transition
    """
    principal = require_principal(request)
    payload = parse_body(request, PaymentStatusUpdateRequest)

    with transaction.atomic():
        order = get_order(order_id, for_update=True)
        previous = order.payment_status
        record_payment(order, payload.payment_status, principal)
        if order.payment_status != previous:
            order.save(update_fields=["payment_status", "updated_at"])

    return JsonResponse(_serialize_order(order))


@require_GET
@principal_required
def admin_orders(request: HttpRequest) -> JsonResponse:
    """
    GET /api/admin/orders

    Every order on the platform. Admin only.
    """
    authorize(require_principal(request), Action.ADMIN_READ_ALL).enforce()
    return _order_list(Order.objects.all())
