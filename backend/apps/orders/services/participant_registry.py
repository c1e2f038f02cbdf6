"""
Participant registry - who is bound to an order, and in which role.
"""
from django.utils import timezone
from apps.accounts.models import User
from apps.orders.models import Order, OrderParticipant

ROLE_NONE = 'none'


class ParticipantRegistry:
    """
    Exactly one seller per order (set at creation), at most one buyer
    (set once, first writer wins), never the same user in both roles.
    """

    @staticmethod
    def add_seller(order: Order) -> OrderParticipant:
        """Register the order's seller. Called once, when the order is created."""
        return OrderParticipant.objects.create(
            order=order,
            user_id=order.seller_id,
            role=OrderParticipant.Role.SELLER
        )

    @staticmethod
    def add_buyer(order: Order, user: User) -> bool:
        """
        Insert the buyer participation.
        A repeat insert for the same user is a no-op.

        Returns:
            True if a new participation row was created
        """
        _, created = OrderParticipant.objects.get_or_create(
            order=order,
            user=user,
            defaults={'role': OrderParticipant.Role.BUYER}
        )
        return created

    @staticmethod
    def bind_buyer(order: Order, user: User) -> bool:
        """
        Set order.buyer only if no buyer is bound yet.

        The conditional UPDATE is the storage-level guard: of two concurrent
        callers exactly one sees a changed row.

        Returns:
            True if this call bound the buyer
        """
        updated = Order.objects.filter(
            pk=order.pk,
            buyer__isnull=True
        ).update(buyer=user, updated_at=timezone.now())
        return updated == 1

    @staticmethod
    def role_of(order: Order, user: User) -> str:
        """Return 'seller', 'buyer' or 'none'."""
        if order.is_seller(user):
            return OrderParticipant.Role.SELLER
        if order.is_buyer(user):
            return OrderParticipant.Role.BUYER
        return ROLE_NONE
