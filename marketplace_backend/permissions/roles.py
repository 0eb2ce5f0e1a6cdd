# permissions/roles.py

from __future__ import annotations

from typing import Optional

from rest_framework.permissions import BasePermission


# =========================================================
# ROLE CONSTANTS (MARKETPLACE PARTICIPANTS)
# =========================================================
ROLE_ADMIN = "admin"
ROLE_CUSTOMER = "customer"
ROLE_CHEF = "chef"
ROLE_DELIVERY = "delivery"

ALL_ROLES = {
    ROLE_ADMIN,
    ROLE_CUSTOMER,
    ROLE_CHEF,
    ROLE_DELIVERY,
}

# Roles that receive money through the settlement ledger.
EARNING_ROLES = {
    ROLE_CHEF,
    ROLE_DELIVERY,
}


# =========================================================
# CAPABILITIES (THE REAL PERMISSION LANGUAGE)
# =========================================================
# Views protect capabilities, not raw roles.
CAP_ORDERS_PLACE = "orders.place"
CAP_ORDERS_CANCEL = "orders.cancel"
CAP_ORDERS_ADVANCE = "orders.advance"
CAP_ORDERS_ASSIGN_DELIVERY = "orders.assign_delivery"
CAP_ORDERS_TIP = "orders.tip"
CAP_ORDERS_VIEW = "orders.view"
CAP_ORDERS_VIEW_ALL = "orders.view_all"          # not restricted to own orders

CAP_EARNINGS_VIEW = "earnings.view"
CAP_EARNINGS_VIEW_ALL = "earnings.view_all"      # any recipient's ledger/summary

CAP_PAYOUTS_VIEW = "payouts.view"
CAP_PAYOUTS_MANAGE = "payouts.manage"            # generate, process, complete/fail, retry

ALL_CAPABILITIES = {
    CAP_ORDERS_PLACE,
    CAP_ORDERS_CANCEL,
    CAP_ORDERS_ADVANCE,
    CAP_ORDERS_ASSIGN_DELIVERY,
    CAP_ORDERS_TIP,
    CAP_ORDERS_VIEW,
    CAP_ORDERS_VIEW_ALL,
    CAP_EARNINGS_VIEW,
    CAP_EARNINGS_VIEW_ALL,
    CAP_PAYOUTS_VIEW,
    CAP_PAYOUTS_MANAGE,
}


# =========================================================
# ROLE → CAPABILITY MAP (DEFAULT)
# =========================================================
ROLE_CAPABILITIES: dict[str, set[str]] = {
    ROLE_ADMIN: {
        # admin can do everything
        *ALL_CAPABILITIES,
    },
    ROLE_CUSTOMER: {
        CAP_ORDERS_PLACE,
        CAP_ORDERS_CANCEL,
        CAP_ORDERS_TIP,
        CAP_ORDERS_VIEW,
    },
    ROLE_CHEF: {
        CAP_ORDERS_VIEW,
        CAP_ORDERS_ADVANCE,
        CAP_ORDERS_ASSIGN_DELIVERY,
        CAP_EARNINGS_VIEW,
        CAP_PAYOUTS_VIEW,
    },
    ROLE_DELIVERY: {
        CAP_ORDERS_VIEW,
        CAP_ORDERS_ADVANCE,
        CAP_EARNINGS_VIEW,
        CAP_PAYOUTS_VIEW,
    },
}


# =========================================================
# Helpers
# =========================================================
def get_user_role(user) -> Optional[str]:
    """
    Resolve a user's marketplace role.

    Order of precedence:
    1) superuser -> admin
    2) user.role attribute (custom user model)
    3) first Django group whose name is a known role
    """
    if not user or not getattr(user, "is_authenticated", False):
        return None

    if getattr(user, "is_superuser", False):
        return ROLE_ADMIN

    role = getattr(user, "role", None)
    if role in ALL_ROLES:
        return role

    groups = getattr(user, "groups", None)
    if groups is not None:
        for name in groups.values_list("name", flat=True):
            if name in ALL_ROLES:
                return name

    return None


def effective_capabilities_for(request, user) -> set[str]:
    role = get_user_role(user)
    return set(ROLE_CAPABILITIES.get(role, set()))


def user_has_capability(request, user, capability: str) -> bool:
    return capability in effective_capabilities_for(request, user)


# =========================================================
# Base Role Permission (Internal Use)
# =========================================================
class BaseRolePermission(BasePermission):
    """
    Base permission for role-based access control.

    Subclasses must define:
    - allowed_roles (set)
    """

    allowed_roles: set[str] = set()

    def has_permission(self, request, view):
        user = request.user

        if not user or not user.is_authenticated:
            return False

        user_role = get_user_role(user)
        if not user_role:
            return False

        return user_role in self.allowed_roles


# =========================================================
# Capability Permissions
# =========================================================
class HasCapability(BasePermission):
    """
    Require a specific capability.

    Usage:
        permission_classes = [IsAuthenticated, HasCapability]
        view.required_capability = CAP_ORDERS_CANCEL
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        required = getattr(view, "required_capability", None)
        if not required:
            # If not set, deny-by-default to avoid accidental open endpoints
            return False

        caps = effective_capabilities_for(request, user)
        return required in caps


class HasAnyCapability(BasePermission):
    """
    Require ANY capability from a list.

    Usage:
        view.required_any_capabilities = {CAP_EARNINGS_VIEW, CAP_EARNINGS_VIEW_ALL}
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        required = getattr(view, "required_any_capabilities", None)
        if not required:
            return False

        caps = effective_capabilities_for(request, user)
        return any(cap in caps for cap in set(required))


# =========================================================
# Role Permissions
# =========================================================
class IsAdmin(BaseRolePermission):
    allowed_roles = {ROLE_ADMIN}


class IsEarningRecipient(BaseRolePermission):
    allowed_roles = EARNING_ROLES
