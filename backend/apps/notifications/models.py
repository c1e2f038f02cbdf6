"""
Notification model - append-only log of order events per user.
"""
from django.db import models
from apps.accounts.models import User


class Notification(models.Model):
    """
    Event informing a user about an order-state change.
    Only the read flag is ever mutated.
    """

    class Type(models.TextChoices):
        BUYER_JOINED = 'buyer_joined', 'Buyer Joined'
        PAYMENT_CONFIRMED = 'payment_confirmed', 'Payment Confirmed'
        ASSET_TRANSFERRED = 'asset_transferred', 'Asset Transferred'
        ORDER_COMPLETED = 'order_completed', 'Order Completed'
        ORDER_CANCELLED = 'order_cancelled', 'Order Cancelled'

    user = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        related_name='notifications'
    )
    order = models.ForeignKey(
        'orders.Order',
        on_delete=models.PROTECT,
        related_name='notifications'
    )
    type = models.CharField(max_length=20, choices=Type.choices)
    message = models.TextField(max_length=500)
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ['-created_at', '-id']
        verbose_name = 'Notification'
        verbose_name_plural = 'Notifications'
        indexes = [
            models.Index(fields=['user', '-created_at'], name='notif_user_created_idx'),
            models.Index(fields=['user', 'is_read'], name='notif_user_read_idx'),
        ]

    def __str__(self):
        return f"{self.type} for {self.user_id} (order {self.order_id})"
