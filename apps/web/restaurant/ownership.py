"""
Ownership resolution - the storage side of authorization.

Every check that needs to know who owns a menu item or an order goes
through these lookups, which walk one hop to the parent restaurant.
"""

from enum import Enum

from apps.web.core.exceptions import ResourceNotFound
from apps.web.core.policy import Resource
from apps.web.restaurant.models import MenuItem, Order, Restaurant


class ResourceKind(str, Enum):
    """Kinds of resource that have an owning restaurant."""

    RESTAURANT = "restaurant"
    MENU_ITEM = "menu_item"
    ORDER = "order"


def get_restaurant_owner(restaurant_id: int) -> int:
    """
    Owner id of a restaurant.

    Raises:
        ResourceNotFound: If the restaurant does not exist
    """
    owner_id = (
        Restaurant.objects.filter(pk=restaurant_id)
        .values_list("owner_id", flat=True)
        .first()
    )
    if owner_id is None:
        raise ResourceNotFound(f"Restaurant {restaurant_id} not found")
    return owner_id


def get_menu_item_restaurant(menu_item_id: int) -> int:
    """
    Restaurant id a menu item belongs to.

    Raises:
        ResourceNotFound: If the menu item does not exist
    """
    restaurant_id = (
        MenuItem.objects.filter(pk=menu_item_id)
        .values_list("restaurant_id", flat=True)
        .first()
    )
    if restaurant_id is None:
        raise ResourceNotFound(f"Menu item {menu_item_id} not found")
    return restaurant_id


def get_order(order_id: int, *, for_update: bool = False) -> Order:
    """
    Load an order together with its restaurant.

    Args:
        order_id: Order primary key
        for_update: Lock the order and restaurant rows until the enclosing
            transaction ends

    Raises:
        ResourceNotFound: If the order does not exist
    """
    queryset = Order.objects.select_related("restaurant")
    if for_update:
        queryset = queryset.select_for_update()
    try:
        return queryset.get(pk=order_id)
    except Order.DoesNotExist as exc:
        raise ResourceNotFound(f"Order {order_id} not found") from exc


def resolve_owner(kind: ResourceKind, resource_id: int) -> int:
    """
    Owner id of the restaurant behind any restaurant-scoped resource.

    Raises:
        ResourceNotFound: If the resource or its restaurant does not exist
    """
    if kind is ResourceKind.RESTAURANT:
        return get_restaurant_owner(resource_id)
    if kind is ResourceKind.MENU_ITEM:
        return get_restaurant_owner(get_menu_item_restaurant(resource_id))
    if kind is ResourceKind.ORDER:
        return get_order(resource_id).restaurant.owner_id
    msg = f"Unknown resource kind: {kind}"
    raise ValueError(msg)


def order_resource(order: Order) -> Resource:
    """Ownership snapshot of a loaded order."""
    return Resource(owner_id=order.restaurant.owner_id, customer_id=order.customer_id)
