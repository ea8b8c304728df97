# users/admin.py

"""
USERS ADMIN

Staff accounts for the receivables backend. Roles drive capabilities
(permissions/roles.py); the change page shows what a role can do.
"""

from __future__ import annotations

from django.contrib import admin
from django.contrib.auth import get_user_model
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

from permissions.roles import ROLE_CAPABILITIES

User = get_user_model()


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    ordering = ("email",)
    list_display = ("email", "username", "role", "is_staff", "is_active", "is_superuser")
    list_filter = ("role", "is_staff", "is_active", "is_superuser")
    readonly_fields = ("capabilities", "created_at", "updated_at", "last_login")
    search_fields = ("email", "username", "first_name", "last_name")

    fieldsets = (
        (None, {"fields": ("email", "password")}),
        ("Profile", {"fields": ("username", "first_name", "last_name", "role", "capabilities")}),
        (
            "Permissions",
            {
                "fields": (
                    "is_active",
                    "is_staff",
                    "is_superuser",
                    "groups",
                    "user_permissions",
                )
            },
        ),
    )

    @admin.display(description="Capabilities")
    def capabilities(self, obj):
        if obj.is_superuser:
            return "all"
        return ", ".join(sorted(ROLE_CAPABILITIES.get(obj.role, set()))) or "-"

    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": (
                    "email",
                    "password1",
                    "password2",
                    "role",
                    "is_staff",
                    "is_active",
                ),
            },
        ),
    )
