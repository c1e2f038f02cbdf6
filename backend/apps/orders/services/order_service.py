"""
Order service - main business logic for order management.
Orchestrates code generation, the participant registry and the state machine.
"""
import logging
import secrets
import string
from decimal import Decimal
from typing import List, Optional, Tuple
from django.conf import settings
from django.db import IntegrityError, transaction
from apps.orders.models import Order
from apps.orders.services.participant_registry import ParticipantRegistry
from apps.orders.services.state_machine import StateMachine
from apps.notifications.models import Notification
from apps.notifications.services.notification_service import NotificationService
from apps.accounts.models import User
from common.exceptions import (
    AlreadyJoined,
    CodeExhausted,
    OrderNotActive,
    OrderNotFound,
    SelfTrade,
    ValidationError,
)

logger = logging.getLogger('orders')


class OrderService:
    """
    Main service for order operations.
    Coordinates order storage, buyer joining and status changes.
    """

    CODE_ALPHABET = string.ascii_uppercase + string.digits

    # Largest value a BigAutoField primary key can hold
    MAX_ORDER_ID = 2 ** 63 - 1

    @classmethod
    def generate_code(cls) -> str:
        """Random uppercase alphanumeric order code."""
        length = settings.MARKETPLACE['ORDER_CODE_LENGTH']
        return ''.join(secrets.choice(cls.CODE_ALPHABET) for _ in range(length))

    @classmethod
    @transaction.atomic
    def create_order(
        cls,
        seller: User,
        type: str,
        payment_method: str,
        amount: Decimal,
        currency: str,
        description: str,
        seller_requisites: str
    ) -> Order:
        """
        Create a new order with a unique public code.

        Codes are user-facing and must never collide: each attempt checks
        the code against existing orders and the unique constraint rejects
        a concurrent duplicate. Gives up after ORDER_CODE_MAX_ATTEMPTS.

        Args:
            seller: User creating the order
            type: Order.AssetType value
            payment_method: Order.PaymentMethod value
            amount: Positive price
            currency: Currency of the price
            description: Free-text description of the asset
            seller_requisites: Where the buyer should send the payment

        Returns:
            Created order in ACTIVE state with the seller registered

        Raises:
            ValidationError: If the description is too long
            CodeExhausted: If no unique code was found
        """
        description_max_length = Order._meta.get_field('description').max_length
        if len(description) > description_max_length:
            raise ValidationError(
                f"Description must be at most {description_max_length} characters"
            )

        max_attempts = settings.MARKETPLACE['ORDER_CODE_MAX_ATTEMPTS']

        for attempt in range(1, max_attempts + 1):
            code = cls.generate_code()

            if Order.objects.filter(code=code).exists():
                logger.warning(f"Order code collision on attempt {attempt}: {code}")
                continue

            try:
                with transaction.atomic():
                    order = Order.objects.create(
                        code=code,
                        seller=seller,
                        type=type,
                        payment_method=payment_method,
                        amount=amount,
                        currency=currency,
                        description=description,
                        seller_requisites=seller_requisites,
                        status=Order.Status.ACTIVE
                    )
            except IntegrityError:
                # Same code inserted concurrently
                logger.warning(f"Order code {code} taken concurrently on attempt {attempt}")
                continue

            ParticipantRegistry.add_seller(order)

            logger.info(
                f"Order {order.code} created by {seller.external_id}: "
                f"{order.type} for {order.amount} {order.currency}"
            )
            return order

        logger.error(f"Could not generate a unique order code after {max_attempts} attempts")
        raise CodeExhausted()

    @classmethod
    def lookup(cls, identifier) -> Order:
        """
        Find an order by public code or internal id.

        Raises:
            OrderNotFound: If neither matches
        """
        identifier = str(identifier).strip()

        order = Order.objects.select_related('seller', 'buyer').filter(
            code=identifier.upper()
        ).first()

        if order is None and cls._is_order_id(identifier):
            order = Order.objects.select_related('seller', 'buyer').filter(
                pk=int(identifier)
            ).first()

        if order is None:
            raise OrderNotFound()
        return order

    @classmethod
    def _is_order_id(cls, identifier: str) -> bool:
        """ASCII digits within the primary key range."""
        if not (identifier.isascii() and identifier.isdigit()):
            return False
        if len(identifier) > len(str(cls.MAX_ORDER_ID)):
            return False
        return int(identifier) <= cls.MAX_ORDER_ID

    @staticmethod
    def list_for_user(user: User, limit: Optional[int] = None) -> List[Order]:
        """Orders where the user is seller or buyer, newest first."""
        if limit is None:
            limit = settings.MARKETPLACE['USER_ORDERS_LIMIT']
        return list(
            Order.objects.filter(participants__user=user)
            .select_related('seller', 'buyer')
            .distinct()
            .order_by('-created_at', '-id')[:limit]
        )

    @staticmethod
    def list_public(status: str = Order.Status.ACTIVE, limit: Optional[int] = None) -> List[Order]:
        """
        Public order listing filtered by status, newest first.
        The limit is clamped to 1..PUBLIC_ORDERS_MAX_LIMIT.
        """
        StateMachine.validate_status(status)

        if limit is None:
            limit = settings.MARKETPLACE['PUBLIC_ORDERS_LIMIT']
        limit = max(1, min(int(limit), settings.MARKETPLACE['PUBLIC_ORDERS_MAX_LIMIT']))

        return list(
            Order.objects.filter(status=status)
            .select_related('seller', 'buyer')
            .order_by('-created_at', '-id')[:limit]
        )

    @classmethod
    @transaction.atomic
    def join_order(cls, identifier, buyer: User) -> Tuple[Order, bool]:
        """
        Bind a buyer to an active order.

        Security:
        - Prevents self-purchase, whatever the order status
        - Locks the order row; a buyer that loses the race is rolled back
        - Never overwrites an already bound buyer

        Args:
            identifier: Order code or id
            buyer: User joining as buyer

        Returns:
            (order, joined) where joined is False for a repeat join by the
            already bound buyer

        Raises:
            OrderNotFound: If the order does not exist
            SelfTrade: If the buyer is the seller
            OrderNotActive: If the order is no longer active
            AlreadyJoined: If another buyer is already bound
        """
        order = cls.lookup(identifier)
        locked_order = Order.objects.select_for_update().get(pk=order.pk)

        if locked_order.is_seller(buyer):
            raise SelfTrade()

        if locked_order.is_buyer(buyer):
            return locked_order, False

        if locked_order.status != Order.Status.ACTIVE:
            raise OrderNotActive()

        if locked_order.buyer_id is not None:
            raise AlreadyJoined()

        ParticipantRegistry.add_buyer(locked_order, buyer)

        if not ParticipantRegistry.bind_buyer(locked_order, buyer):
            raise AlreadyJoined()

        locked_order.refresh_from_db()

        NotificationService.enqueue(
            locked_order.seller_id,
            locked_order,
            Notification.Type.BUYER_JOINED,
            f"A buyer joined order #{locked_order.code}"
        )

        logger.info(f"Buyer {buyer.external_id} joined order {locked_order.code}")
        return locked_order, True

    @classmethod
    def change_status(
        cls,
        identifier,
        to_status: str,
        user: User,
        reason: str = ""
    ) -> Tuple[Order, bool]:
        """
        Drive an order through the state machine on behalf of a user.

        Raises:
            InvalidStatus: Checked before the order is looked up
            OrderNotFound: If the order does not exist
        """
        StateMachine.validate_status(to_status)
        order = cls.lookup(identifier)
        return StateMachine.transition(
            order=order,
            to_status=to_status,
            user=user,
            reason=reason
        )
