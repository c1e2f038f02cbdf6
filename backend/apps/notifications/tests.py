"""
Tests for notification polling endpoints.
"""
from decimal import Decimal
from django.test import TestCase
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework import status
from apps.notifications.models import Notification
from apps.notifications.services.notification_service import NotificationService
from apps.orders.services.order_service import OrderService

User = get_user_model()


class NotificationAPITestCase(TestCase):
    """Test notification listing, unread counter and read marking."""

    def setUp(self):
        self.client = APIClient()
        self.seller = User.objects.create_user(external_id='1001', username='alice')
        self.buyer = User.objects.create_user(external_id='2002', username='bob')
        self.order = OrderService.create_order(
            seller=self.seller,
            type='username',
            payment_method='wallet',
            amount=Decimal('120'),
            currency='TON',
            description='@durov',
            seller_requisites='UQBx...'
        )

    def test_join_notifies_seller(self):
        OrderService.join_order(self.order.code, self.buyer)

        response = self.client.get('/api/users/1001/notifications')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['type'], Notification.Type.BUYER_JOINED)
        self.assertEqual(response.data[0]['order_code'], self.order.code)
        self.assertFalse(response.data[0]['read'])

    def test_list_is_capped_and_newest_first(self):
        for i in range(55):
            NotificationService.enqueue(
                self.seller.pk, self.order, Notification.Type.BUYER_JOINED, f"event {i}"
            )

        response = self.client.get('/api/users/1001/notifications')

        self.assertEqual(len(response.data), 50)
        self.assertEqual(response.data[0]['message'], 'event 54')

    def test_fetch_recent_loads_orders_in_one_query(self):
        for i in range(5):
            NotificationService.enqueue(
                self.seller.pk, self.order, Notification.Type.BUYER_JOINED, f"event {i}"
            )

        with self.assertNumQueries(1):
            notifications = NotificationService.fetch_recent(self.seller)
            codes = [notification.order.code for notification in notifications]

        self.assertEqual(codes, [self.order.code] * 5)

    def test_list_unknown_user(self):
        response = self.client.get('/api/users/ghost/notifications')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_mark_read_and_unread_count(self):
        first = NotificationService.enqueue(
            self.seller.pk, self.order, Notification.Type.BUYER_JOINED, 'joined'
        )
        NotificationService.enqueue(
            self.seller.pk, self.order, Notification.Type.PAYMENT_CONFIRMED, 'paid'
        )

        response = self.client.get('/api/users/1001/notifications/unread')
        self.assertEqual(response.data['unread'], 2)

        response = self.client.put(f'/api/notifications/{first.pk}/read')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])

        first.refresh_from_db()
        self.assertTrue(first.is_read)
        response = self.client.get('/api/users/1001/notifications/unread')
        self.assertEqual(response.data['unread'], 1)

    def test_mark_read_is_idempotent(self):
        notification = NotificationService.enqueue(
            self.seller.pk, self.order, Notification.Type.BUYER_JOINED, 'joined'
        )

        self.client.put(f'/api/notifications/{notification.pk}/read')
        response = self.client.put(f'/api/notifications/{notification.pk}/read')
        missing = self.client.put('/api/notifications/999999/read')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(missing.status_code, status.HTTP_200_OK)
