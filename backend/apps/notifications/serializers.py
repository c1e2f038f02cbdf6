"""
Notification serializers.
"""
from rest_framework import serializers
from apps.notifications.models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    """Serializer for polled notifications."""
    order_code = serializers.CharField(source='order.code', read_only=True)
    read = serializers.BooleanField(source='is_read', read_only=True)

    class Meta:
        model = Notification
        fields = [
            'id', 'user_id', 'order_id', 'order_code', 'type',
            'message', 'read', 'created_at'
        ]
        read_only_fields = fields
