"""
Orders models - Order state machine, participants and audit trail.
Orders are never deleted; they are kept for history.
"""
from django.db import models
from django.core.validators import MinValueValidator, RegexValidator
from decimal import Decimal
from apps.accounts.models import User
from common.currencies import Currency


order_code_regex = RegexValidator(
    regex=r'^[A-Z0-9]{8}$',
    message="Order code must be 8 uppercase letters or digits"
)


class Order(models.Model):
    """
    A proposed asset-for-payment trade, shared by its public code.
    Mutated only through the state machine.
    """

    class Status(models.TextChoices):
        ACTIVE = 'active', 'Active'
        PAID = 'paid', 'Paid'
        TRANSFERRED = 'transferred', 'Transferred'
        COMPLETED = 'completed', 'Completed'
        CANCELLED = 'cancelled', 'Cancelled'

    class AssetType(models.TextChoices):
        GIFT = 'gift', 'NFT Gift'
        USERNAME = 'username', 'NFT Username'
        NUMBER = 'number', 'NFT Number'

    class PaymentMethod(models.TextChoices):
        WALLET = 'wallet', 'Crypto Wallet'
        CARD = 'card', 'Bank Card'
        STARS = 'stars', 'Stars'

    code = models.CharField(
        max_length=8,
        unique=True,
        editable=False,
        validators=[order_code_regex]
    )

    # Relations
    seller = models.ForeignKey(
        User,
        on_delete=models.PROTECT,  # Don't delete users with orders
        related_name='sales'
    )
    buyer = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='purchases'
    )

    # Deal terms
    type = models.CharField(max_length=10, choices=AssetType.choices)
    payment_method = models.CharField(max_length=10, choices=PaymentMethod.choices)
    amount = models.DecimalField(
        max_digits=20,
        decimal_places=8,
        validators=[MinValueValidator(Decimal('0.00000001'))]
    )
    currency = models.CharField(max_length=5, choices=Currency.choices)
    description = models.TextField(max_length=1000)
    seller_requisites = models.CharField(
        max_length=255,
        help_text="Where the buyer sends payment; shape depends on payment method"
    )

    # State
    status = models.CharField(
        max_length=12,
        choices=Status.choices,
        default=Status.ACTIVE,
        db_index=True
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']
        verbose_name = 'Order'
        verbose_name_plural = 'Orders'
        indexes = [
            models.Index(fields=['status', '-created_at'], name='order_status_created_idx'),
        ]

    def __str__(self):
        return f"Order #{self.code} - {self.status}"

    def is_buyer(self, user):
        """Check if user is the bound buyer."""
        return self.buyer_id is not None and self.buyer_id == user.pk

    def is_seller(self, user):
        """Check if user is the seller."""
        return self.seller_id == user.pk


class OrderParticipant(models.Model):
    """
    Binding of a user to an order in a role.
    Unique per (order, user), so nobody can join twice or hold both roles.
    """

    class Role(models.TextChoices):
        SELLER = 'seller', 'Seller'
        BUYER = 'buyer', 'Buyer'

    order = models.ForeignKey(
        Order,
        on_delete=models.PROTECT,
        related_name='participants'
    )
    user = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        related_name='participations'
    )
    role = models.CharField(max_length=10, choices=Role.choices)
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['joined_at']
        verbose_name = 'Order Participant'
        verbose_name_plural = 'Order Participants'
        constraints = [
            models.UniqueConstraint(
                fields=['order', 'user'],
                name='unique_order_participant'
            ),
        ]

    def __str__(self):
        return f"{self.order.code}: {self.user_id} as {self.role}"


class OrderStateLog(models.Model):
    """
    Audit trail for order state transitions.
    Logs every applied status change with the user who drove it.
    """
    order = models.ForeignKey(
        Order,
        on_delete=models.PROTECT,
        related_name='state_logs'
    )
    from_status = models.CharField(max_length=12)
    to_status = models.CharField(max_length=12)
    changed_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        help_text="User who triggered the change"
    )
    reason = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ['-created_at', '-id']
        verbose_name = 'Order State Log'
        verbose_name_plural = 'Order State Logs'
        indexes = [
            models.Index(fields=['order', '-created_at'], name='orderlog_order_created_idx'),
        ]

    def __str__(self):
        return f"{self.order.code}: {self.from_status} -> {self.to_status}"
