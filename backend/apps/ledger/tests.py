"""
Tests for completion accounting and platform statistics.
"""
from decimal import Decimal
from django.db import IntegrityError, transaction
from django.test import TestCase
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework import status
from apps.ledger.models import VolumeEntry
from apps.ledger.services.ledger_service import LedgerService
from apps.orders.models import Order
from apps.orders.services.order_service import OrderService
from apps.orders.services.state_machine import StateMachine

User = get_user_model()


class LedgerTestCase(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.seller = User.objects.create_user(external_id='1001', username='alice')
        self.buyer = User.objects.create_user(external_id='2002', username='bob')

    def complete_order(self, amount, currency, payment_method):
        order = OrderService.create_order(
            seller=self.seller,
            type='number',
            payment_method=payment_method,
            amount=Decimal(amount),
            currency=currency,
            description='+888 0000 0000',
            seller_requisites='requisites'
        )
        OrderService.join_order(order.code, self.buyer)
        StateMachine.transition(order, Order.Status.PAID, user=self.buyer)
        StateMachine.transition(order, Order.Status.COMPLETED, user=self.buyer)
        return order

    def test_volumes_summed_per_currency(self):
        self.complete_order('10', 'USD', 'card')
        self.complete_order('5', 'USD', 'card')
        self.complete_order('250', 'STARS', 'stars')

        volumes = LedgerService.volumes_by_currency(self.seller)

        self.assertEqual(volumes['USD'], Decimal('15'))
        self.assertEqual(volumes['STARS'], Decimal('250'))
        self.assertEqual(LedgerService.volumes_by_currency(self.buyer), volumes)

        self.seller.refresh_from_db()
        self.assertEqual(self.seller.completed_deals, 3)

    def test_one_volume_entry_per_participant(self):
        order = self.complete_order('10', 'USD', 'card')

        with self.assertRaises(IntegrityError), transaction.atomic():
            VolumeEntry.objects.create(user=self.seller, order=order, currency='USD', amount=Decimal('10'))

    def test_stats_endpoint(self):
        self.complete_order('10', 'EUR', 'card')
        OrderService.create_order(
            seller=self.seller,
            type='gift',
            payment_method='wallet',
            amount=Decimal('3'),
            currency='TON',
            description='Homemade Cake',
            seller_requisites='UQBx...'
        )

        response = self.client.get('/api/stats')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {
            'completedDeals': 1,
            'totalUsers': 2,
            'activeOrders': 1,
        })
