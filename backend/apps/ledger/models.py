"""
Ledger models - traded volume per participant per completed order.
"""
from django.db import models
from apps.accounts.models import User
from common.currencies import Currency


class VolumeEntry(models.Model):
    """
    One row per participant per completed order.
    Rows are never updated or merged; totals are summed at read time.
    """
    user = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        related_name='volume_entries'
    )
    order = models.ForeignKey(
        'orders.Order',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='volume_entries',
        help_text="Completed order this volume comes from"
    )
    currency = models.CharField(max_length=5, choices=Currency.choices)
    amount = models.DecimalField(max_digits=20, decimal_places=8)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'Volume Entry'
        verbose_name_plural = 'Volume Entries'
        constraints = [
            models.UniqueConstraint(
                fields=['order', 'user'],
                name='unique_volume_per_order_participant'
            ),
        ]
        indexes = [
            models.Index(fields=['user', 'currency'], name='volume_user_currency_idx'),
        ]

    def __str__(self):
        return f"{self.user_id}: {self.amount} {self.currency}"
