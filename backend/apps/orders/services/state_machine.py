"""
Order state machine service.
Handles ALL status transitions with validation, role checks and side effects.
"""
import logging
from typing import Optional, Tuple
from django.db import transaction
from apps.orders.models import Order, OrderStateLog
from apps.orders.services.participant_registry import ParticipantRegistry
from apps.accounts.models import User
from apps.ledger.services.ledger_service import LedgerService
from apps.notifications.models import Notification
from apps.notifications.services.notification_service import NotificationService
from common.exceptions import InvalidStatus, InvalidTransition, NotParticipant

logger = logging.getLogger('orders')


class StateMachine:
    """
    Order state machine with strict transition rules.
    Every transition re-reads the order under a row lock, so repeated or
    concurrent requests cannot apply the same side effects twice.
    """

    # Valid state transitions
    TRANSITIONS = {
        Order.Status.ACTIVE: [Order.Status.PAID, Order.Status.CANCELLED],
        Order.Status.PAID: [Order.Status.TRANSFERRED, Order.Status.COMPLETED],
        Order.Status.TRANSFERRED: [Order.Status.COMPLETED],
        Order.Status.COMPLETED: [],  # Terminal state
        Order.Status.CANCELLED: [],  # Terminal state
    }

    # Roles allowed to drive the order into each state
    STATE_PERMISSIONS = {
        Order.Status.PAID: ['buyer', 'admin'],  # Buyer claims payment
        Order.Status.TRANSFERRED: ['seller', 'admin'],  # Seller hands over the asset
        Order.Status.COMPLETED: ['buyer', 'admin'],  # Buyer confirms receipt
        Order.Status.CANCELLED: ['buyer', 'seller', 'admin'],
    }

    @classmethod
    def validate_status(cls, status: str) -> str:
        """
        Raises:
            InvalidStatus: If status is not one of Order.Status
        """
        if status not in Order.Status.values:
            raise InvalidStatus(f"Invalid status: {status}")
        return status

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        """Check if transition is valid."""
        return to_status in cls.TRANSITIONS.get(from_status, [])

    @classmethod
    def validate_user_can_transition(
        cls,
        order: Order,
        user: User,
        to_status: str
    ) -> None:
        """
        Validate that user has permission to make this status transition.

        Raises:
            InvalidTransition: If nobody may drive an order into to_status
            NotParticipant: If user cannot make this transition
        """
        allowed_roles = cls.STATE_PERMISSIONS.get(to_status)

        if not allowed_roles:
            raise InvalidTransition(f"Orders cannot be moved to {to_status}")

        if ParticipantRegistry.role_of(order, user) in allowed_roles:
            return
        if 'admin' in allowed_roles and user.is_staff:
            return

        raise NotParticipant(
            f"You do not have permission to move order #{order.code} to {to_status}"
        )

    @classmethod
    @transaction.atomic
    def transition(
        cls,
        order: Order,
        to_status: str,
        user: Optional[User] = None,
        reason: str = ""
    ) -> Tuple[Order, bool]:
        """
        Transition order to a new status and apply its side effects.

        Security:
        - Rejects unknown statuses before touching the database
        - Uses select_for_update to prevent race conditions
        - Checks the caller's role (None means a system action)
        - Logs all transitions with audit trail

        Args:
            order: Order instance
            to_status: Target status
            user: User making the change (None for system)
            reason: Reason for transition

        Returns:
            (order, changed) where changed is False if the order already
            had the target status and nothing was applied

        Raises:
            InvalidStatus: If to_status is not a known status
            NotParticipant: If user may not drive this transition
            InvalidTransition: If the transition is not allowed from the current status
        """
        cls.validate_status(to_status)

        # Lock the row to prevent race conditions
        locked_order = Order.objects.select_for_update().get(pk=order.pk)

        # The initial status has no permitted roles; the table check rejects it
        if user is not None and to_status in cls.STATE_PERMISSIONS:
            cls.validate_user_can_transition(locked_order, user, to_status)

        # Repeating a transition that already happened is a no-op
        if locked_order.status == to_status:
            logger.info(f"Order {locked_order.code} already {to_status}, nothing to apply")
            return locked_order, False

        if not cls.can_transition(locked_order.status, to_status):
            raise InvalidTransition(
                f"Cannot transition from {locked_order.status} to {to_status}"
            )

        if to_status == Order.Status.PAID and locked_order.buyer_id is None:
            raise InvalidTransition("Cannot mark an order as paid before a buyer joins")

        old_status = locked_order.status
        locked_order.status = to_status
        locked_order.save(update_fields=['status', 'updated_at'])

        OrderStateLog.objects.create(
            order=locked_order,
            from_status=old_status,
            to_status=to_status,
            changed_by=user,
            reason=reason
        )

        cls._apply_side_effects(locked_order, user)

        logger.info(
            f"Order {locked_order.code}: {old_status} -> {to_status} "
            f"by {user.external_id if user else 'system'}"
        )
        return locked_order, True

    @classmethod
    def _apply_side_effects(cls, order: Order, user: Optional[User]) -> None:
        """Notifications and ledger updates that follow a status change."""
        code = order.code

        if order.status == Order.Status.PAID:
            NotificationService.enqueue(
                order.seller_id,
                order,
                Notification.Type.PAYMENT_CONFIRMED,
                f"The buyer confirmed payment for order #{code}"
            )

        elif order.status == Order.Status.TRANSFERRED:
            if order.buyer_id:
                NotificationService.enqueue(
                    order.buyer_id,
                    order,
                    Notification.Type.ASSET_TRANSFERRED,
                    f"The seller transferred the asset for order #{code}. Please check that you received it."
                )

        elif order.status == Order.Status.COMPLETED:
            LedgerService.record_completion(order)
            for participant_id in cls._participant_ids(order):
                NotificationService.enqueue(
                    participant_id,
                    order,
                    Notification.Type.ORDER_COMPLETED,
                    f"Order #{code} has been completed successfully"
                )

        elif order.status == Order.Status.CANCELLED:
            for participant_id in cls._participant_ids(order):
                if user is not None and participant_id == user.pk:
                    continue
                NotificationService.enqueue(
                    participant_id,
                    order,
                    Notification.Type.ORDER_CANCELLED,
                    f"Order #{code} has been cancelled"
                )

    @staticmethod
    def _participant_ids(order: Order) -> list:
        ids = [order.seller_id]
        if order.buyer_id:
            ids.append(order.buyer_id)
        return ids
