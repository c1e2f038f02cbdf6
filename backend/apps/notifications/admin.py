"""
Notification admin configuration.
"""
from django.contrib import admin
from apps.notifications.models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ['id', 'user', 'order', 'type', 'is_read', 'created_at']
    list_filter = ['type', 'is_read', 'created_at']
    search_fields = ['user__external_id', 'order__code', 'message']
    readonly_fields = ['user', 'order', 'type', 'message', 'created_at']

    def has_add_permission(self, request):
        return False
