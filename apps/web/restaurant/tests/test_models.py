"""Tests for restaurant models."""

from datetime import timedelta
from decimal import Decimal

from django.db.models import ProtectedError

import pytest

from apps.web.restaurant.models import (
    MenuItem,
    Order,
    OrderItem,
    OrderStatus,
    PaymentStatus,
    Restaurant,
)

from .factories import (
    MenuItemFactory,
    OrderFactory,
    OrderItemFactory,
    RestaurantFactory,
)


@pytest.mark.django_db
class TestRestaurant:
    """Tests for Restaurant model."""

    def test_create_restaurant(self) -> None:
        restaurant = RestaurantFactory(name="Tony's Pizza")

        assert restaurant.pk is not None
        assert restaurant.owner.role == "owner"
        assert restaurant.is_active is True
        assert str(restaurant) == "Tony's Pizza"

    def test_restaurants_ordered_by_name(self) -> None:
        RestaurantFactory(name="Zorba")
        RestaurantFactory(name="Alfredo")

        names = list(Restaurant.objects.values_list("name", flat=True))

        assert names == ["Alfredo", "Zorba"]


@pytest.mark.django_db
class TestMenuItem:
    """Tests for MenuItem model."""

    def test_create_menu_item(self) -> None:
        item = MenuItemFactory(name="Margherita", price=Decimal("14.50"))

        assert item.pk is not None
        assert item.price == Decimal("14.50")
        assert item.restaurant.menu_items.get() == item

    def test_menu_items_cascade_with_restaurant(self) -> None:
        item = MenuItemFactory()
        item.restaurant.delete()

        assert not MenuItem.objects.filter(pk=item.pk).exists()


@pytest.mark.django_db
class TestOrder:
    """Tests for Order model."""

    def test_defaults(self) -> None:
        order = OrderFactory()

        assert order.status == OrderStatus.PENDING
        assert order.payment_status == PaymentStatus.PENDING

    def test_restaurant_cannot_change_after_creation(self) -> None:
        """An order stays with the restaurant it was placed with."""
        order = OrderFactory()
        order = Order.objects.get(pk=order.pk)
        order.restaurant = RestaurantFactory()

        with pytest.raises(ValueError, match="restaurant cannot be changed"):
            order.save()

    def test_restaurant_cannot_change_on_created_instance(self) -> None:
        """The guard also holds for the instance create() returned."""
        original = RestaurantFactory()
        order = Order.objects.create(
            customer=OrderFactory().customer,
            restaurant=original,
            total_amount=Decimal("10.00"),
        )
        order.restaurant = RestaurantFactory()

        with pytest.raises(ValueError, match="restaurant cannot be changed"):
            order.save()

        order.refresh_from_db()
        assert order.restaurant_id == original.pk

    def test_status_change_still_saves(self) -> None:
        order = Order.objects.get(pk=OrderFactory().pk)
        order.status = OrderStatus.PREPARING
        order.save()

        order.refresh_from_db()
        assert order.status == OrderStatus.PREPARING

    def test_restaurant_with_orders_is_protected(self) -> None:
        order = OrderFactory()

        with pytest.raises(ProtectedError):
            order.restaurant.delete()

    def test_orders_newest_first(self) -> None:
        first = OrderFactory()
        second = OrderFactory()
        Order.objects.filter(pk=first.pk).update(
            created_at=second.created_at - timedelta(hours=1)
        )

        assert list(Order.objects.all()) == [second, first]


@pytest.mark.django_db
class TestOrderItem:
    """Tests for OrderItem model."""

    def test_line_total(self) -> None:
        item = OrderItemFactory(price=Decimal("12.99"), quantity=3)

        assert item.line_total == Decimal("38.97")

    def test_snapshot_survives_menu_item_deletion(self) -> None:
        """Deleting a menu item keeps past order lines intact."""
        item = OrderItemFactory()
        name, price = item.name, item.price

        item.menu_item.delete()
        item = OrderItem.objects.get(pk=item.pk)

        assert item.menu_item is None
        assert item.name == name
        assert item.price == price
