"""
Notification service - best-effort enqueue and polling reads.
"""
import logging
from typing import List, Optional
from django.conf import settings
from django.db import DatabaseError, transaction
from apps.accounts.models import User
from apps.notifications.models import Notification
from apps.orders.models import Order

logger = logging.getLogger('notifications')


class NotificationService:
    """
    Append-only per-user event queue.
    The queue does no scheduling; clients poll fetch_recent.
    """

    @staticmethod
    def enqueue(
        recipient_id: int,
        order: Order,
        notification_type: str,
        message: str
    ) -> Optional[Notification]:
        """
        Append a notification without ever failing the caller.

        Runs in its own savepoint, so a storage failure is rolled back on
        its own and the surrounding order transition still commits.

        Args:
            recipient_id: User to notify
            order: Order the event belongs to
            notification_type: Notification.Type value
            message: Human-readable text

        Returns:
            Created notification, or None if it could not be stored
        """
        try:
            with transaction.atomic():
                return Notification.objects.create(
                    user_id=recipient_id,
                    order=order,
                    type=notification_type,
                    message=message
                )
        except DatabaseError as e:
            logger.error(
                f"Failed to enqueue {notification_type} for user {recipient_id} "
                f"on order {order.code}: {str(e)}"
            )
            return None

    @staticmethod
    def fetch_recent(user: User, limit: Optional[int] = None) -> List[Notification]:
        """Most recent notifications of the user, newest first."""
        if limit is None:
            limit = settings.MARKETPLACE['NOTIFICATIONS_LIMIT']
        return list(
            Notification.objects.filter(user=user)
            .select_related('order')
            .order_by('-created_at', '-id')[:limit]
        )

    @staticmethod
    def mark_read(notification_id: int) -> None:
        """
        Mark a notification as read.
        Already-read and unknown ids are accepted silently.
        """
        Notification.objects.filter(pk=notification_id, is_read=False).update(is_read=True)

    @staticmethod
    def unread_count(user: User) -> int:
        return Notification.objects.filter(user=user, is_read=False).count()
