"""
Restaurant models - Restaurants, menus, customizations, and orders.

Menu data belongs to a restaurant, which belongs to its owner.
Orders belong to one restaurant and are read-only to the placing customer.
"""

from django.conf import settings
from django.db import models
from django.utils import timezone

from platter_schemas import TERMINAL_STATUSES
from platter_schemas import OrderStatus as OrderStatusEnum

from apps.web.core.models import TimestampedModel


class Restaurant(TimestampedModel):
    """
    A restaurant on the marketplace.

    The owner is the only user allowed to move its orders through
    fulfillment.
    """

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="restaurants",
    )
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    cuisine = models.CharField(max_length=100, blank=True)
    address = models.TextField(blank=True)
    image_url = models.URLField(blank=True)

    delivery_fee = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=0,
    )
    delivery_time = models.PositiveIntegerField(
        default=30,
        help_text="Estimated delivery time in minutes",
    )
    is_active = models.BooleanField(
        default=True,
        help_text="Inactive restaurants do not accept orders",
    )

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["owner"], name="restaurant_owner_idx"),
            models.Index(fields=["is_active"], name="restaurant_active_idx"),
        ]

    def __str__(self) -> str:
        return self.name


class MenuCategory(TimestampedModel):
    """
    Category within a restaurant's menu (e.g., Pizza, Sides, Desserts).
    """

    restaurant = models.ForeignKey(
        Restaurant,
        on_delete=models.CASCADE,
        related_name="categories",
    )
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    display_order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["display_order", "name"]
        verbose_name_plural = "menu categories"
        indexes = [
            models.Index(fields=["restaurant", "display_order"], name="menucategory_order_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.restaurant.name} > {self.name}"


class MenuItem(TimestampedModel):
    """
    Individual menu item.

    Tracks availability and dietary labelling.
    """

    category = models.ForeignKey(
        MenuCategory,
        on_delete=models.CASCADE,
        related_name="items",
    )
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2)
    image_url = models.URLField(blank=True)

    is_veg = models.BooleanField(default=True)
    is_popular = models.BooleanField(default=False)
    is_available = models.BooleanField(
        default=True,
        help_text="False = temporarily unavailable",
    )

    display_order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["display_order", "name"]
        indexes = [
            models.Index(fields=["category", "is_available"], name="menuitem_available_idx"),
        ]

    def __str__(self) -> str:
        return self.name

    @property
    def restaurant(self) -> Restaurant:
        return self.category.restaurant


class CustomizationKind(models.TextChoices):
    """How many options a customization group accepts."""

    SINGLE = "single", "Single choice"
    MULTI = "multi", "Multiple choice"


class CustomizationGroup(TimestampedModel):
    """
    Group of options for a menu item (e.g., "Size", "Extra Toppings").

    Single-choice groups take exactly one option; multi-choice groups take
    any number. Required groups must be chosen when ordering.
    """

    item = models.ForeignKey(
        MenuItem,
        on_delete=models.CASCADE,
        related_name="customization_groups",
    )
    name = models.CharField(max_length=200)
    kind = models.CharField(
        max_length=10,
        choices=CustomizationKind.choices,
        default=CustomizationKind.SINGLE,
    )
    required = models.BooleanField(default=False)
    display_order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["display_order", "name"]
        constraints = [
            models.UniqueConstraint(
                fields=["item", "name"],
                name="unique_customization_group_name_per_item",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.item.name} > {self.name}"


class CustomizationOption(TimestampedModel):
    """
    Individual option within a customization group.

    The price is added to the item price when selected.
    """

    group = models.ForeignKey(
        CustomizationGroup,
        on_delete=models.CASCADE,
        related_name="options",
    )
    name = models.CharField(max_length=200)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=0,
        help_text="Price added when selected",
    )
    display_order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["display_order", "name"]

    def __str__(self) -> str:
        if self.price:
            return f"{self.name} (+{self.price})"
        return self.name


class OrderStatus(models.TextChoices):
    """Order fulfillment status."""

    PENDING = "PENDING", "Pending"
    CONFIRMED = "CONFIRMED", "Confirmed"
    PREPARING = "PREPARING", "Preparing"
    READY_FOR_PICKUP = "READY_FOR_PICKUP", "Ready for pickup"
    OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY", "Out for delivery"
    DELIVERED = "DELIVERED", "Delivered"
    CANCELLED = "CANCELLED", "Cancelled"


class PaymentMethod(models.TextChoices):
    """How the customer intends to pay."""

    CASH = "CASH", "Cash on delivery"
    CARD = "CARD", "Card"
    UPI = "UPI", "UPI"


class PaymentStatus(models.TextChoices):
    """Payment processing status."""

    PENDING = "PENDING", "Pending"
    PAID = "PAID", "Paid"
    FAILED = "FAILED", "Failed"
    REFUNDED = "REFUNDED", "Refunded"


class OrderQuerySet(models.QuerySet["Order"]):
    """Ownership-scoped order queries."""

    def for_customer(self, user: object) -> "OrderQuerySet":
        """Orders placed by the user."""
        return self.filter(customer=user)

    def for_owner(self, user: object) -> "OrderQuerySet":
        """Orders of restaurants owned by the user."""
        return self.filter(restaurant__owner=user)

    def visible_to(self, user: object) -> "OrderQuerySet":
        """Orders the user placed or fulfills."""
        return self.filter(
            models.Q(customer=user) | models.Q(restaurant__owner=user)
        )


class Order(TimestampedModel):
    """
    Customer order for a single restaurant.

    Status only moves through the lifecycle manager; DELIVERED and
    CANCELLED orders are immutable.
    """

    order_number = models.CharField(
        max_length=40,
        unique=True,
        help_text="Customer-facing order number",
    )
    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="orders",
    )
    restaurant = models.ForeignKey(
        Restaurant,
        on_delete=models.PROTECT,
        related_name="orders",
    )
    address = models.ForeignKey(
        "core.Address",
        on_delete=models.PROTECT,
        related_name="orders",
    )

    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )
    delivery_instructions = models.TextField(blank=True)

    # Pricing
    subtotal = models.DecimalField(max_digits=10, decimal_places=2)
    delivery_fee = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    tax = models.DecimalField(max_digits=10, decimal_places=2)
    discount = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    total = models.DecimalField(max_digits=10, decimal_places=2)

    # Payment
    payment_method = models.CharField(
        max_length=10,
        choices=PaymentMethod.choices,
        default=PaymentMethod.CASH,
    )
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )

    # Lifecycle timestamps
    placed_at = models.DateTimeField(default=timezone.now)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    prepared_at = models.DateTimeField(null=True, blank=True)
    picked_up_at = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    objects = OrderQuerySet.as_manager()

    class Meta:
        ordering = ["-placed_at"]
        indexes = [
            models.Index(fields=["customer", "placed_at"], name="order_customer_placed_idx"),
            models.Index(fields=["restaurant", "status"], name="order_restaurant_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Order {self.order_number} - {self.restaurant.name}"

    @property
    def is_terminal(self) -> bool:
        return OrderStatusEnum(self.status) in TERMINAL_STATUSES


class OrderItem(TimestampedModel):
    """
    Line item in an order.

    Stores a snapshot of the item and its customizations at order time.
    """

    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name="items",
    )
    menu_item = models.ForeignKey(
        MenuItem,
        on_delete=models.PROTECT,
        related_name="order_items",
    )

    # Snapshot of item at order time
    item_name = models.CharField(max_length=200)
    quantity = models.PositiveIntegerField(default=1)
    unit_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text="Item price plus selected option prices",
    )
    customizations = models.JSONField(
        default=dict,
        blank=True,
        help_text="Selected options by group, with order-time prices",
    )
    line_total = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text="unit_price * quantity",
    )

    class Meta:
        ordering = ["pk"]

    def __str__(self) -> str:
        return f"{self.quantity}x {self.item_name}"
