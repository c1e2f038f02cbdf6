"""
Ledger admin configuration.
Volume entries are append-only and cannot be edited here.
"""
from django.contrib import admin
from apps.ledger.models import VolumeEntry


@admin.register(VolumeEntry)
class VolumeEntryAdmin(admin.ModelAdmin):
    list_display = ['id', 'user', 'order', 'currency', 'amount', 'created_at']
    list_filter = ['currency', 'created_at']
    search_fields = ['user__external_id', 'order__code']
    readonly_fields = ['user', 'order', 'currency', 'amount', 'created_at']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
