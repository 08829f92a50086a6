"""Admin registration for restaurant models."""

from django.contrib import admin

from apps.web.restaurant.models import MenuItem, Order, OrderItem, Restaurant


class MenuItemInline(admin.TabularInline):
    """Inline for items on a restaurant's menu."""

    model = MenuItem
    extra = 0
    fields = ["name", "category", "price", "is_available"]


class OrderItemInline(admin.TabularInline):
    """Inline for items within an order."""

    model = OrderItem
    extra = 0
    fields = ["name", "quantity", "price"]
    readonly_fields = ["name", "quantity", "price"]


@admin.register(Restaurant)
class RestaurantAdmin(admin.ModelAdmin):
    """Admin for restaurants."""

    list_display = ["name", "owner", "cuisine", "rating", "is_active"]
    list_filter = ["is_active", "cuisine"]
    search_fields = ["name", "owner__email"]
    inlines = [MenuItemInline]
    readonly_fields = ["created_at", "updated_at"]

    fieldsets = [
        (None, {"fields": ["owner", "name", "cuisine", "is_active"]}),
        ("Listing", {"fields": ["rating", "delivery_time", "address", "phone"]}),
        ("Timestamps", {"fields": ["created_at", "updated_at"]}),
    ]


@admin.register(MenuItem)
class MenuItemAdmin(admin.ModelAdmin):
    """Admin for menu items."""

    list_display = ["name", "restaurant", "category", "price", "is_available"]
    list_filter = ["is_available", "restaurant"]
    search_fields = ["name", "description", "restaurant__name"]
    readonly_fields = ["created_at", "updated_at"]


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """Admin for orders."""

    list_display = [
        "pk",
        "customer",
        "restaurant",
        "status",
        "total_amount",
        "payment_status",
        "created_at",
    ]
    list_filter = ["status", "payment_status", "restaurant"]
    search_fields = ["customer__email", "restaurant__name"]
    inlines = [OrderItemInline]
    date_hierarchy = "created_at"

    def get_readonly_fields(self, request, obj=None):  # type: ignore[no-untyped-def]
        # The restaurant is fixed once the order exists.
        readonly = ["created_at", "updated_at", "total_amount"]
        if obj is not None:
            readonly += ["customer", "restaurant"]
        return readonly
