"""
Django admin configuration for authentication models.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from authentication.models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Admin for the email-login User with a display name."""

    list_display = (
        "email",
        "name",
        "is_online",
        "is_active",
        "is_staff",
        "date_joined",
    )
    list_filter = (
        "is_online",
        "is_active",
        "is_staff",
        "is_superuser",
    )
    search_fields = ("email", "name")
    ordering = ("name",)

    fieldsets = (
        (None, {"fields": ("email", "name", "password")}),
        ("Chat", {"fields": ("avatar", "is_online")}),
        (
            "Status",
            {"fields": ("is_active", "is_staff", "is_superuser")},
        ),
        (
            "Permissions",
            {"fields": ("groups", "user_permissions")},
        ),
        (
            "Important dates",
            {"fields": ("date_joined", "last_login")},
        ),
    )

    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": ("email", "name", "password1", "password2"),
            },
        ),
    )

    readonly_fields = ("date_joined", "last_login")
