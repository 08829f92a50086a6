"""
URL routing for account endpoints.
"""

from django.urls import path

from apps.web.core import views

app_name = "core"

urlpatterns = [
    path("auth/register", views.register, name="register"),
    path("auth/login", views.login, name="login"),
    path("auth/me", views.me, name="me"),
    path("admin/users", views.admin_users, name="admin_users"),
]
