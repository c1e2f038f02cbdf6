"""
Order serializers.
Handles API input/output for order operations.
"""
from decimal import Decimal
from rest_framework import serializers
from apps.orders.models import Order, OrderStateLog
from common.currencies import Currency, FIAT_CURRENCIES


# Currency family each payment method settles in
PAYMENT_METHOD_CURRENCIES = {
    Order.PaymentMethod.WALLET: (Currency.TON,),
    Order.PaymentMethod.STARS: (Currency.STARS,),
    Order.PaymentMethod.CARD: FIAT_CURRENCIES,
}


class OrderStateLogSerializer(serializers.ModelSerializer):
    """Serializer for order status change logs."""
    changed_by_external_id = serializers.CharField(source='changed_by.external_id', read_only=True)

    class Meta:
        model = OrderStateLog
        fields = [
            'id', 'from_status', 'to_status', 'changed_by_external_id',
            'reason', 'created_at'
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Serializer for order output."""
    seller_external_id = serializers.CharField(source='seller.external_id', read_only=True)
    buyer_external_id = serializers.CharField(source='buyer.external_id', read_only=True, default=None)

    class Meta:
        model = Order
        fields = [
            'id', 'code', 'seller_id', 'seller_external_id', 'buyer_id',
            'buyer_external_id', 'type', 'payment_method', 'amount', 'currency',
            'description', 'seller_requisites', 'status', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class OrderDetailSerializer(OrderSerializer):
    """Serializer for a single order, including its status history."""
    state_logs = OrderStateLogSerializer(many=True, read_only=True)

    class Meta(OrderSerializer.Meta):
        fields = OrderSerializer.Meta.fields + ['state_logs']
        read_only_fields = fields


class CreateOrderSerializer(serializers.Serializer):
    """Serializer for creating a new order."""
    seller_external_id = serializers.CharField(max_length=64)
    type = serializers.ChoiceField(choices=Order.AssetType.choices)
    payment_method = serializers.ChoiceField(choices=Order.PaymentMethod.choices)
    amount = serializers.DecimalField(
        max_digits=20,
        decimal_places=8,
        min_value=Decimal('0.00000001')
    )
    currency = serializers.ChoiceField(choices=Currency.choices)
    description = serializers.CharField(max_length=1000)
    seller_requisites = serializers.CharField(max_length=255)

    def validate(self, attrs):
        """Validate that the currency matches the payment method."""
        allowed = PAYMENT_METHOD_CURRENCIES[attrs['payment_method']]
        if attrs['currency'] not in allowed:
            raise serializers.ValidationError({
                "currency": f"Payment method {attrs['payment_method']} only accepts "
                            f"{', '.join(allowed)}"
            })
        return attrs


class JoinOrderSerializer(serializers.Serializer):
    """Serializer for joining an order as buyer."""
    buyer_external_id = serializers.CharField(max_length=64)


class UpdateStatusSerializer(serializers.Serializer):
    """
    Serializer for status changes.
    The status value itself is checked by the state machine, which
    reports unknown values as invalid_status.
    """
    status = serializers.CharField(max_length=20)
    user_external_id = serializers.CharField(max_length=64)
    reason = serializers.CharField(max_length=500, required=False, allow_blank=True)


class PublicOrderQuerySerializer(serializers.Serializer):
    """Query parameters of the public order listing."""
    status = serializers.CharField(required=False, default=Order.Status.ACTIVE)
    limit = serializers.IntegerField(required=False, min_value=1)
