"""Admin registration for restaurant models."""

from django.contrib import admin

from apps.web.restaurant.models import (
    CustomizationGroup,
    CustomizationOption,
    MenuCategory,
    MenuItem,
    Order,
    OrderItem,
    Restaurant,
)


class MenuCategoryInline(admin.TabularInline):
    """Inline for categories within a restaurant."""

    model = MenuCategory
    extra = 0
    fields = ["name", "description", "display_order"]


class MenuItemInline(admin.TabularInline):
    """Inline for items within a category."""

    model = MenuItem
    extra = 0
    fields = ["name", "price", "is_veg", "is_available", "display_order"]


class CustomizationGroupInline(admin.TabularInline):
    """Inline for customization groups within an item."""

    model = CustomizationGroup
    extra = 0
    fields = ["name", "kind", "required", "display_order"]


class CustomizationOptionInline(admin.TabularInline):
    """Inline for options within a customization group."""

    model = CustomizationOption
    extra = 0
    fields = ["name", "price", "display_order"]


class OrderItemInline(admin.TabularInline):
    """Inline for items within an order."""

    model = OrderItem
    extra = 0
    fields = ["item_name", "quantity", "unit_price", "customizations", "line_total"]
    readonly_fields = fields


@admin.register(Restaurant)
class RestaurantAdmin(admin.ModelAdmin):
    """Admin for restaurants."""

    list_display = ["name", "owner", "cuisine", "delivery_fee", "is_active"]
    list_filter = ["is_active", "cuisine"]
    search_fields = ["name", "owner__username", "owner__email"]
    raw_id_fields = ["owner"]
    inlines = [MenuCategoryInline]
    readonly_fields = ["created_at", "updated_at"]


@admin.register(MenuCategory)
class MenuCategoryAdmin(admin.ModelAdmin):
    """Admin for menu categories."""

    list_display = ["name", "restaurant", "display_order"]
    list_filter = ["restaurant"]
    search_fields = ["name", "restaurant__name"]
    inlines = [MenuItemInline]
    readonly_fields = ["created_at", "updated_at"]


@admin.register(MenuItem)
class MenuItemAdmin(admin.ModelAdmin):
    """Admin for menu items."""

    list_display = ["name", "category", "price", "is_veg", "is_popular", "is_available"]
    list_filter = ["is_available", "is_veg", "is_popular", "category__restaurant"]
    search_fields = ["name", "description"]
    inlines = [CustomizationGroupInline]
    readonly_fields = ["created_at", "updated_at"]

    fieldsets = [
        (None, {"fields": ["category", "name", "description", "price"]}),
        ("Media", {"fields": ["image_url"]}),
        ("Labels", {"fields": ["is_veg", "is_popular"]}),
        ("Availability", {"fields": ["is_available", "display_order"]}),
        ("Timestamps", {"fields": ["created_at", "updated_at"]}),
    ]


@admin.register(CustomizationGroup)
class CustomizationGroupAdmin(admin.ModelAdmin):
    """Admin for customization groups."""

    list_display = ["name", "item", "kind", "required"]
    list_filter = ["kind", "required", "item__category__restaurant"]
    search_fields = ["name", "item__name"]
    inlines = [CustomizationOptionInline]
    readonly_fields = ["created_at", "updated_at"]


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """Admin for orders."""

    list_display = [
        "order_number",
        "customer",
        "restaurant",
        "status",
        "total",
        "payment_method",
        "payment_status",
        "placed_at",
    ]
    list_filter = ["status", "payment_method", "payment_status", "restaurant"]
    search_fields = ["order_number", "customer__username", "customer__email"]
    raw_id_fields = ["customer", "address"]
    inlines = [OrderItemInline]
    # Status changes go through the lifecycle manager only
    readonly_fields = [
        "status",
        "created_at",
        "updated_at",
        "placed_at",
        "confirmed_at",
        "prepared_at",
        "picked_up_at",
        "delivered_at",
        "cancelled_at",
    ]
    date_hierarchy = "placed_at"

    fieldsets = [
        (None, {"fields": ["order_number", "customer", "restaurant", "address"]}),
        ("Fulfillment", {"fields": ["status", "delivery_instructions"]}),
        (
            "Pricing",
            {"fields": ["subtotal", "delivery_fee", "tax", "discount", "total"]},
        ),
        ("Payment", {"fields": ["payment_method", "payment_status"]}),
        (
            "Timestamps",
            {
                "fields": [
                    "placed_at",
                    "confirmed_at",
                    "prepared_at",
                    "picked_up_at",
                    "delivered_at",
                    "cancelled_at",
                    "created_at",
                    "updated_at",
                ]
            },
        ),
    ]
