"""
Order admin configuration.
Orders are changed only through the state machine, so the admin is read-only.
"""
from django.contrib import admin
from apps.orders.models import Order, OrderParticipant, OrderStateLog


class OrderParticipantInline(admin.TabularInline):
    model = OrderParticipant
    extra = 0
    readonly_fields = ['user', 'role', 'joined_at']
    can_delete = False


class OrderStateLogInline(admin.TabularInline):
    model = OrderStateLog
    extra = 0
    readonly_fields = ['from_status', 'to_status', 'changed_by', 'reason', 'created_at']
    can_delete = False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ['code', 'seller', 'buyer', 'type', 'status', 'amount', 'currency', 'created_at']
    list_filter = ['status', 'type', 'payment_method', 'currency', 'created_at']
    search_fields = ['code', 'seller__external_id', 'buyer__external_id', 'seller__username']
    readonly_fields = [
        'code', 'seller', 'buyer', 'type', 'payment_method', 'amount',
        'currency', 'description', 'seller_requisites', 'status',
        'created_at', 'updated_at'
    ]
    inlines = [OrderParticipantInline, OrderStateLogInline]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
