"""Admin registrations for core models."""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import Address, AuthToken, User


@admin.register(User)
class UserAdmin(BaseUserAdmin):  # type: ignore[type-arg]
    list_display = ["username", "email", "role", "is_staff", "is_active"]
    list_filter = ["is_staff", "is_active", "role"]
    search_fields = ["username", "email", "phone"]
    fieldsets = (
        *BaseUserAdmin.fieldsets,  # type: ignore[misc]
        ("Marketplace", {"fields": ("role", "phone")}),
    )
    add_fieldsets = (
        *BaseUserAdmin.add_fieldsets,
        ("Marketplace", {"fields": ("role", "phone")}),
    )


@admin.register(AuthToken)
class AuthTokenAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["user", "is_active", "created_at", "last_used_at"]
    list_filter = ["is_active"]
    search_fields = ["user__username", "user__email"]
    raw_id_fields = ["user"]
    readonly_fields = ["key", "created_at", "last_used_at"]


@admin.register(Address)
class AddressAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["user", "label", "city", "is_default", "created_at"]
    list_filter = ["is_default", "city"]
    search_fields = ["user__username", "address", "pincode"]
    raw_id_fields = ["user"]
    readonly_fields = ["created_at", "updated_at"]
