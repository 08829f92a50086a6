"""
URL routing for restaurant, menu and order API endpoints.

Catalog reads are public; everything else needs a bearer token.
"""

from django.urls import path

from apps.web.restaurant import views

app_name = "restaurant"

urlpatterns = [
    # Restaurant endpoints
    path("restaurants", views.restaurant_collection, name="restaurant_list"),
    path(
        "restaurants/<int:restaurant_id>",
        views.restaurant_detail,
        name="restaurant_detail",
    ),
    path(
        "restaurants/<int:restaurant_id>/menu",
        views.restaurant_menu,
        name="restaurant_menu",
    ),
    # Menu item endpoints
    path("menu-items", views.create_menu_item, name="menu_item_create"),
    path(
        "menu-items/<int:menu_item_id>",
        views.menu_item_detail,
        name="menu_item_detail",
    ),
    # Order endpoints
    path("orders", views.create_order, name="order_create"),
    path("orders/my-orders", views.my_orders, name="my_orders"),
    path(
        "orders/restaurant/<int:restaurant_id>",
        views.restaurant_orders,
        name="restaurant_orders",
    ),
    path("orders/<int:order_id>", views.order_detail, name="order_detail"),
    path(
        "orders/<int:order_id>/status",
        views.update_order_status,
        name="order_status",
    ),
    path(
        "orders/<int:order_id>/payment",
        views.update_payment_status,
        name="order_payment",
    ),
    # Admin endpoints
    path("admin/orders", views.admin_orders, name="admin_orders"),
]
