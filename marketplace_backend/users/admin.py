# users/admin.py

"""
USERS ADMIN

Chefs, delivery partners and admins are created and assigned roles here.
The user id is read-only: it is the recipient id stamped on orders,
ledger entries and payout records.
"""

from __future__ import annotations

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

from users.models import User


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    ordering = ("email",)
    list_display = ("email", "role", "id", "is_active", "is_staff")
    list_filter = ("role", "is_active", "is_staff")
    search_fields = ("email", "first_name", "last_name", "id")
    readonly_fields = ("id", "created_at", "last_login")

    fieldsets = (
        (None, {"fields": ("id", "email", "password")}),
        ("Marketplace", {"fields": ("first_name", "last_name", "role")}),
        ("Access", {"fields": ("is_active", "is_staff", "is_superuser", "groups")}),
        ("Activity", {"fields": ("created_at", "last_login")}),
    )

    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": ("email", "role", "password1", "password2"),
            },
        ),
    )
