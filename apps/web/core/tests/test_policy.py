"""Tests for the authorization policy."""

import pytest

from apps.web.core.exceptions import NotResourceOwner, RoleNotPermitted, Unauthenticated
from apps.web.core.identity import Principal
from apps.web.core.policy import Action, Decision, DenyReason, Resource, authorize

CUSTOMER = Principal(id=1, role="customer")
OWNER = Principal(id=2, role="owner")
OTHER_OWNER = Principal(id=3, role="owner")
ADMIN = Principal(id=4, role="admin")

OWNED = Resource(owner_id=OWNER.id)
FOREIGN = Resource(owner_id=99)

WRITE_ACTIONS = [Action.WRITE_RESTAURANT, Action.WRITE_MENU, Action.DELETE_MENU]


class TestAdminRule:
    """Admins may do everything except place orders."""

    @pytest.mark.parametrize(
        "action", [a for a in Action if a is not Action.CREATE_ORDER]
    )
    @pytest.mark.parametrize("resource", [OWNED, FOREIGN, Resource()])
    def test_admin_allowed_everything_but_ordering(self, action, resource):
        assert authorize(ADMIN, action, resource).allowed

    def test_admin_cannot_create_order(self):
        decision = authorize(ADMIN, Action.CREATE_ORDER)

        assert decision == Decision.deny(
            Action.CREATE_ORDER, DenyReason.ROLE_NOT_PERMITTED
        )


class TestCatalogRule:
    """Catalog reads are open to everyone."""

    @pytest.mark.parametrize("action", [Action.READ_RESTAURANT, Action.READ_MENU])
    @pytest.mark.parametrize("principal", [None, CUSTOMER, OWNER, OTHER_OWNER])
    def test_catalog_reads_allowed(self, action, principal):
        assert authorize(principal, action, FOREIGN).allowed


class TestOwnerWriteRule:
    """Restaurant and menu writes need the restaurant's owner."""

    @pytest.mark.parametrize("action", WRITE_ACTIONS)
    def test_owner_of_restaurant_allowed(self, action):
        assert authorize(OWNER, action, OWNED).allowed

    @pytest.mark.parametrize("action", WRITE_ACTIONS)
    def test_other_owner_denied(self, action):
        decision = authorize(OTHER_OWNER, action, OWNED)

        assert not decision
        assert decision.reason is DenyReason.NOT_RESOURCE_OWNER

    @pytest.mark.parametrize("action", WRITE_ACTIONS)
    @pytest.mark.parametrize(
        "resource", [OWNED, FOREIGN, Resource(owner_id=CUSTOMER.id), Resource()]
    )
    def test_customer_always_denied(self, action, resource):
        assert not authorize(CUSTOMER, action, resource).allowed

    @pytest.mark.parametrize("owner_id", [1, 2, 3, 99])
    def test_write_allowed_iff_ids_match(self, owner_id):
        decision = authorize(OWNER, Action.WRITE_RESTAURANT, Resource(owner_id=owner_id))

        assert decision.allowed is (owner_id == OWNER.id)

    def test_unresolved_owner_denied(self):
        assert not authorize(OWNER, Action.WRITE_MENU, Resource()).allowed


class TestOrderRules:
    """Ordering and order reads."""

    def test_customer_can_create_order(self):
        assert authorize(CUSTOMER, Action.CREATE_ORDER).allowed

    def test_owner_cannot_create_order(self):
        decision = authorize(OWNER, Action.CREATE_ORDER)

        assert decision.reason is DenyReason.ROLE_NOT_PERMITTED

    def test_customer_reads_own_orders(self):
        resource = Resource(owner_id=OWNER.id, customer_id=CUSTOMER.id)

        assert authorize(CUSTOMER, Action.READ_OWN_ORDERS, resource).allowed

    def test_customer_cannot_read_other_customers_orders(self):
        resource = Resource(owner_id=OWNER.id, customer_id=55)
        decision = authorize(CUSTOMER, Action.READ_OWN_ORDERS, resource)

        assert decision.reason is DenyReason.NOT_RESOURCE_OWNER

    def test_owner_cannot_read_orders_as_customer(self):
        resource = Resource(owner_id=OWNER.id, customer_id=OWNER.id)
        decision = authorize(OWNER, Action.READ_OWN_ORDERS, resource)

        assert decision.reason is DenyReason.ROLE_NOT_PERMITTED

    @pytest.mark.parametrize(
        "action", [Action.READ_RESTAURANT_ORDERS, Action.UPDATE_ORDER_STATUS]
    )
    def test_restaurant_owner_allowed(self, action):
        assert authorize(OWNER, action, OWNED).allowed

    @pytest.mark.parametrize(
        "action", [Action.READ_RESTAURANT_ORDERS, Action.UPDATE_ORDER_STATUS]
    )
    @pytest.mark.parametrize("principal", [OTHER_OWNER, CUSTOMER])
    def test_others_are_not_resource_owner(self, action, principal):
        decision = authorize(principal, action, OWNED)

        assert decision.reason is DenyReason.NOT_RESOURCE_OWNER


class TestDefaultRule:
    """Anything not matched is denied by role."""

    @pytest.mark.parametrize("principal", [CUSTOMER, OWNER])
    def test_admin_read_all_denied(self, principal):
        decision = authorize(principal, Action.ADMIN_READ_ALL)

        assert decision.reason is DenyReason.ROLE_NOT_PERMITTED


class TestAnonymous:
    """Requests without a principal."""

    @pytest.mark.parametrize(
        "action",
        [a for a in Action if a not in (Action.READ_RESTAURANT, Action.READ_MENU)],
    )
    def test_non_catalog_actions_raise_unauthenticated(self, action):
        with pytest.raises(Unauthenticated):
            authorize(None, action, OWNED)


class TestDecisionEnforce:
    """Decision.enforce maps deny reasons to errors."""

    def test_allow_does_not_raise(self):
        Decision.allow(Action.WRITE_MENU).enforce()

    def test_not_resource_owner(self):
        with pytest.raises(NotResourceOwner) as exc_info:
            Decision.deny(Action.WRITE_MENU, DenyReason.NOT_RESOURCE_OWNER).enforce()

        assert exc_info.value.status_code == 403

    def test_role_not_permitted(self):
        with pytest.raises(RoleNotPermitted) as exc_info:
            Decision.deny(Action.ADMIN_READ_ALL, DenyReason.ROLE_NOT_PERMITTED).enforce()

        assert exc_info.value.status_code == 403

    def test_deny_without_reason_still_raises(self):
        decision = Decision(action=Action.ADMIN_READ_ALL, allowed=False, reason=None)

        with pytest.raises(RoleNotPermitted):
            decision.enforce()
