"""
Restaurant models - Restaurants, menu items, and orders.

Ownership flows from Restaurant.owner: a menu item belongs to whoever owns
its restaurant, and so do the orders placed with that restaurant.
"""

from decimal import Decimal
from typing import Any

from django.conf import settings
from django.db import models

from apps.web.core.models import TimestampedModel
from apps.web.restaurant.managers import MenuItemQuerySet, RestaurantQuerySet


class Restaurant(TimestampedModel):
    """
    A restaurant listed in the catalog.

    Hidden from the public catalog while is_active is False; its owner and
    admins can still see and manage it.
    """

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="restaurants",
    )
    name = models.CharField(max_length=200)
    cuisine = models.CharField(max_length=100)
    rating = models.DecimalField(
        max_digits=2,
        decimal_places=1,
        default=Decimal("0.0"),
        help_text="Average rating, 0.0 to 5.0",
    )
    delivery_time = models.CharField(
        max_length=50,
        help_text='Display estimate (e.g., "30-40 min")',
    )
    address = models.TextField(blank=True)
    phone = models.CharField(max_length=20, blank=True)
    is_active = models.BooleanField(default=True)

    objects = RestaurantQuerySet.as_manager()

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(
                fields=["owner", "is_active"], name="restaurant_owner_active_idx"
            ),
        ]

    def __str__(self) -> str:
        return self.name


class MenuItem(TimestampedModel):
    """
    Individual menu item.

    Unavailable items are hidden from the public menu.
    """

    restaurant = models.ForeignKey(
        Restaurant,
        on_delete=models.CASCADE,
        related_name="menu_items",
    )
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2)
    category = models.CharField(max_length=100, blank=True)
    image_url = models.URLField(blank=True)
    is_available = models.BooleanField(default=True)

    objects = MenuItemQuerySet.as_manager()

    class Meta:
        ordering = ["category", "name"]
        indexes = [
            models.Index(
                fields=["restaurant", "is_available"], name="menuitem_restaurant_avail_idx"
            ),
        ]

    def __str__(self) -> str:
        return self.name


class OrderStatus(models.TextChoices):
    """Order lifecycle status."""

    PENDING = "Pending", "Pending"
    PREPARING = "Preparing", "Preparing"
    DELIVERED = "Delivered", "Delivered"
    CANCELLED = "Cancelled", "Cancelled"


class PaymentStatus(models.TextChoices):
    """Payment status."""

    PENDING = "Pending", "Pending"
    PAID = "Paid", "Paid"


class Order(TimestampedModel):
    """
    Customer order placed with one restaurant.

    The restaurant never changes after creation; only status and
    payment_status do.
    """

    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders",
    )
    restaurant = models.ForeignKey(
        Restaurant,
        on_delete=models.PROTECT,
        related_name="orders",
    )
    total_amount = models.DecimalField(max_digits=10, decimal_places=2)
    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )
    delivery_address = models.TextField(blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(
                fields=["customer", "created_at"], name="order_customer_created_idx"
            ),
            models.Index(
                fields=["restaurant", "created_at"], name="order_restaurant_created_idx"
            ),
            models.Index(fields=["status"], name="order_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Order {self.pk} - {self.status}"

    @classmethod
    def from_db(cls, db: Any, field_names: Any, values: Any) -> "Order":
        instance: Order = super().from_db(db, field_names, values)
        instance._loaded_restaurant_id = instance.__dict__.get("restaurant_id")
        return instance

    def save(self, *args: Any, **kwargs: Any) -> None:
        loaded = getattr(self, "_loaded_restaurant_id", None)
        if loaded is not None and loaded != self.restaurant_id:
            msg = "An order's restaurant cannot be changed"
            raise ValueError(msg)
        super().save(*args, **kwargs)
        self._loaded_restaurant_id = self.restaurant_id


class OrderItem(models.Model):
    """
    Line item in an order.

    Stores a snapshot of the menu item's name and price at order time, so
    the order survives later menu edits or deletion.
    """

    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name="items",
    )
    menu_item = models.ForeignKey(
        MenuItem,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_items",
    )
    name = models.CharField(max_length=200)
    price = models.DecimalField(max_digits=10, decimal_places=2)
    quantity = models.PositiveIntegerField(default=1)

    class Meta:
        ordering = ["pk"]

    def __str__(self) -> str:
        return f"{self.quantity}x {self.name}"

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity
