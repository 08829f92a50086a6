"""
Catalog visibility querysets.

Inactive restaurants and unavailable menu items are hidden from the public
catalog, but stay visible to the restaurant's owner and to admins.

SECURITY: Catalog views must read through visible_to(), never raw querysets.
"""

from typing import TYPE_CHECKING, TypeVar

from django.db import models

if TYPE_CHECKING:
    from apps.web.core.identity import Principal

    from .models import MenuItem, Restaurant

_R = TypeVar("_R", bound="Restaurant")
_M = TypeVar("_M", bound="MenuItem")


class RestaurantQuerySet(models.QuerySet[_R]):
    """Restaurants filtered by catalog visibility."""

    def visible_to(self, principal: "Principal | None") -> models.QuerySet[_R]:
        """
        Restaurants the principal may see.

        Args:
            principal: Requesting principal, or None for anonymous reads

        Returns:
            All restaurants for admins; active ones plus their own for owners;
            active ones for everyone else
        """
        if principal is not None and principal.is_admin:
            return self.all()
        if principal is not None and principal.is_owner:
            return self.filter(models.Q(is_active=True) | models.Q(owner_id=principal.id))
        return self.filter(is_active=True)


class MenuItemQuerySet(models.QuerySet[_M]):
    """Menu items filtered by catalog visibility."""

    def visible_to(
        self, principal: "Principal | None", restaurant: "Restaurant"
    ) -> models.QuerySet[_M]:
        """
        Menu items of ``restaurant`` the principal may see.

        Owners of the restaurant and admins see unavailable items too.
        """
        items = self.filter(restaurant=restaurant)
        if principal is not None and (
            principal.is_admin
            or (principal.is_owner and principal.id == restaurant.owner_id)
        ):
            return items
        return items.filter(is_available=True)
