"""
Notification views.
Clients poll these endpoints; nothing is pushed.
"""
from drf_spectacular.utils import extend_schema
from rest_framework.decorators import api_view, throttle_classes
from rest_framework.response import Response
from apps.accounts.services.identity_service import IdentityService
from apps.notifications.serializers import NotificationSerializer
from apps.notifications.services.notification_service import NotificationService
from common.throttling import PollingThrottle


@extend_schema(tags=['Notifications'], responses=NotificationSerializer(many=True))
@api_view(["GET"])
@throttle_classes([PollingThrottle])
def user_notifications(request, external_id):
    """
    Most recent notifications of a user (at most 50), newest first.
    """
    user = IdentityService.get_by_external_id(external_id)
    notifications = NotificationService.fetch_recent(user)
    return Response(NotificationSerializer(notifications, many=True).data)


@extend_schema(tags=['Notifications'])
@api_view(["GET"])
@throttle_classes([PollingThrottle])
def unread_count(request, external_id):
    """
    Number of unread notifications, for the badge in the client.
    """
    user = IdentityService.get_by_external_id(external_id)
    return Response({"unread": NotificationService.unread_count(user)})


@extend_schema(tags=['Notifications'])
@api_view(["PUT"])
def mark_read(request, notification_id):
    """
    Mark a notification as read.
    Always succeeds, also for unknown or already read notifications.
    """
    NotificationService.mark_read(notification_id)
    return Response({"success": True})
