"""
Ledger service - completed-deal counters, traded volumes and platform stats.
"""
import logging
from decimal import Decimal
from typing import Dict
from django.db import transaction
from django.db.models import F, Sum
from apps.accounts.models import User
from apps.ledger.models import VolumeEntry
from apps.orders.models import Order

logger = logging.getLogger('ledger')


class LedgerService:
    """
    Statistics for user profiles and the landing page.
    Writes happen only as part of an order completion.
    """

    @staticmethod
    @transaction.atomic
    def record_completion(order: Order) -> None:
        """
        Count a completed order for every bound participant.

        Increments completed_deals and appends one VolumeEntry per
        participant. Must run inside the transaction that moved the order
        to COMPLETED, so the two can never diverge.

        Args:
            order: Order that has just been completed
        """
        participant_ids = [order.seller_id]
        if order.buyer_id:
            participant_ids.append(order.buyer_id)

        User.objects.filter(pk__in=participant_ids).update(
            completed_deals=F('completed_deals') + 1
        )

        VolumeEntry.objects.bulk_create([
            VolumeEntry(
                user_id=user_id,
                order=order,
                currency=order.currency,
                amount=order.amount
            )
            for user_id in participant_ids
        ])

        logger.info(
            f"Recorded completion of order {order.code}: "
            f"{order.amount} {order.currency} for {len(participant_ids)} participant(s)"
        )

    @staticmethod
    def volumes_by_currency(user: User) -> Dict[str, Decimal]:
        """
        Sum every volume entry of the user per currency.

        Returns:
            Mapping of currency code to total traded amount
        """
        rows = (
            VolumeEntry.objects.filter(user=user)
            .values('currency')
            .annotate(total=Sum('amount'))
            .order_by('currency')
        )
        return {row['currency']: row['total'] for row in rows}

    @staticmethod
    def platform_stats() -> Dict[str, int]:
        """Counters shown on the landing page."""
        return {
            'completedDeals': Order.objects.filter(status=Order.Status.COMPLETED).count(),
            'totalUsers': User.objects.count(),
            'activeOrders': Order.objects.filter(status=Order.Status.ACTIVE).count(),
        }
