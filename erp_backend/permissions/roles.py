# permissions/roles.py

from __future__ import annotations

from typing import Optional

from rest_framework.permissions import BasePermission


# =========================================================
# ROLE CONSTANTS (STAFF JOB ROLES)
# =========================================================
# They describe what the staff member does, not who the business is.
ROLE_ADMIN = "admin"
ROLE_MANAGER = "manager"  # back-office operator (collections, invoicing)
ROLE_CASHIER = "cashier"  # front desk: takes payments, cannot void
ROLE_VIEWER = "viewer"

# =========================================================
# CAPABILITIES (THE REAL PERMISSION LANGUAGE)
# =========================================================
# Views should protect capabilities, not raw roles.
CAP_RECEIPTS_VIEW = "receipts.view"
CAP_RECEIPTS_CREATE = "receipts.create"
CAP_RECEIPTS_VOID = "receipts.void"

CAP_CUSTOMERS_VIEW_ACCOUNT = "customers.view_account"

CAP_REPORTS_VIEW_COLLECTIONS = "reports.view_collections"

ALL_CAPABILITIES = {
    CAP_RECEIPTS_VIEW,
    CAP_RECEIPTS_CREATE,
    CAP_RECEIPTS_VOID,
    CAP_CUSTOMERS_VIEW_ACCOUNT,
    CAP_REPORTS_VIEW_COLLECTIONS,
}


# =========================================================
# ROLE → CAPABILITY MAP (DEFAULT)
# =========================================================
ROLE_CAPABILITIES: dict[str, set[str]] = {
    ROLE_ADMIN: {
        *ALL_CAPABILITIES,
    },
    ROLE_MANAGER: {
        CAP_RECEIPTS_VIEW,
        CAP_RECEIPTS_CREATE,
        CAP_RECEIPTS_VOID,
        CAP_CUSTOMERS_VIEW_ACCOUNT,
        CAP_REPORTS_VIEW_COLLECTIONS,
    },
    ROLE_CASHIER: {
        CAP_RECEIPTS_VIEW,
        CAP_RECEIPTS_CREATE,
    },
    ROLE_VIEWER: {
        CAP_RECEIPTS_VIEW,
    },
}


# =========================================================
# Helpers
# =========================================================
def get_user_role(user) -> Optional[str]:
    return getattr(user, "role", None)


def effective_capabilities_for(request, user) -> set[str]:
    """
    Capabilities granted by the user's role. Superusers get everything.
    """
    if getattr(user, "is_superuser", False):
        return set(ALL_CAPABILITIES)

    role = get_user_role(user)
    return set(ROLE_CAPABILITIES.get(role, set()))


# =========================================================
# Capability Permissions
# =========================================================
class HasCapability(BasePermission):
    """
    Require a specific capability.

    Usage:
        permission_classes = [IsAuthenticated, HasCapability]
        view.required_capability = CAP_RECEIPTS_VOID
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        required = getattr(view, "required_capability", None)
        if not required:
            # deny-by-default
            return False

        caps = effective_capabilities_for(request, user)
        return required in caps

