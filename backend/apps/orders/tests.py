"""
Tests for the orders app.
Covers the endpoints, the order service and the state machine.
"""
import re
from decimal import Decimal
from unittest.mock import patch
from django.db import DatabaseError
from django.test import TestCase
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework import status
from apps.ledger.models import VolumeEntry
from apps.notifications.models import Notification
from apps.orders.models import Order, OrderParticipant, OrderStateLog
from apps.orders.services.order_service import OrderService
from apps.orders.services.participant_registry import ParticipantRegistry, ROLE_NONE
from apps.orders.services.state_machine import StateMachine
from common.exceptions import (
    AlreadyJoined,
    CodeExhausted,
    InvalidTransition,
    NotParticipant,
    OrderNotActive,
    OrderNotFound,
    SelfTrade,
    ValidationError,
)

User = get_user_model()

CODE_PATTERN = re.compile(r'^[A-Z0-9]{8}$')


def make_order(seller, **overrides):
    data = {
        'seller': seller,
        'type': Order.AssetType.GIFT,
        'payment_method': Order.PaymentMethod.CARD,
        'amount': Decimal('15.00'),
        'currency': 'USD',
        'description': 'Plush Pepe #112',
        'seller_requisites': '4111 1111 1111 1111',
    }
    data.update(overrides)
    return OrderService.create_order(**data)


class OrderAPITestCase(TestCase):
    """Test Order API endpoints."""

    def setUp(self):
        self.client = APIClient()

        self.seller = User.objects.create_user(external_id='1001', username='alice')
        self.buyer = User.objects.create_user(external_id='2002', username='bob')
        self.stranger = User.objects.create_user(external_id='3003', username='carol')

        self.order_data = {
            'seller_external_id': '1001',
            'type': 'gift',
            'payment_method': 'card',
            'amount': '15.00',
            'currency': 'USD',
            'description': 'Plush Pepe #112',
            'seller_requisites': '4111 1111 1111 1111',
        }

    def create_order(self, **overrides):
        data = dict(self.order_data, **overrides)
        response = self.client.post('/api/orders', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        return response.data

    def join(self, code, external_id):
        return self.client.post(
            f'/api/orders/{code}/join',
            {'buyer_external_id': external_id},
            format='json'
        )

    def set_status(self, code, new_status, external_id):
        return self.client.put(
            f'/api/orders/{code}/status',
            {'status': new_status, 'user_external_id': external_id},
            format='json'
        )

    def test_create_order_success(self):
        data = self.create_order()

        self.assertRegex(data['code'], CODE_PATTERN)
        self.assertEqual(data['status'], Order.Status.ACTIVE)
        self.assertEqual(data['seller_external_id'], '1001')
        self.assertIsNone(data['buyer_id'])
        self.assertEqual(Decimal(data['amount']), Decimal('15.00'))

        order = Order.objects.get(code=data['code'])
        self.assertEqual(
            ParticipantRegistry.role_of(order, self.seller),
            OrderParticipant.Role.SELLER
        )

    def test_create_order_currency_must_match_payment_method(self):
        response = self.client.post(
            '/api/orders',
            dict(self.order_data, payment_method='wallet', currency='USD'),
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['kind'], 'validation_error')
        self.assertIn('currency', response.data['fields'])
        self.assertEqual(Order.objects.count(), 0)

    def test_create_order_rejects_non_positive_amount(self):
        response = self.client.post(
            '/api/orders',
            dict(self.order_data, amount='0'),
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_order_unknown_seller(self):
        response = self.client.post(
            '/api/orders',
            dict(self.order_data, seller_external_id='404404'),
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['code'], 'user_not_found')

    def test_order_detail_by_code_and_id(self):
        data = self.create_order()

        by_code = self.client.get(f"/api/orders/{data['code'].lower()}")
        by_id = self.client.get(f"/api/orders/{data['id']}")

        self.assertEqual(by_code.status_code, status.HTTP_200_OK)
        self.assertEqual(by_id.status_code, status.HTTP_200_OK)
        self.assertEqual(by_code.data['id'], by_id.data['id'])
        self.assertEqual(by_code.data['state_logs'], [])

    def test_order_detail_viewer_role(self):
        code = self.create_order()['code']
        self.join(code, '2002')

        plain = self.client.get(f'/api/orders/{code}')
        as_seller = self.client.get(f'/api/orders/{code}', {'viewer': '1001'})
        as_buyer = self.client.get(f'/api/orders/{code}', {'viewer': '2002'})
        as_stranger = self.client.get(f'/api/orders/{code}', {'viewer': '3003'})
        as_unknown = self.client.get(f'/api/orders/{code}', {'viewer': 'ghost'})

        self.assertNotIn('role', plain.data)
        self.assertEqual(as_seller.data['role'], 'seller')
        self.assertEqual(as_buyer.data['role'], 'buyer')
        self.assertEqual(as_stranger.data['role'], 'none')
        self.assertEqual(as_unknown.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(as_unknown.data['code'], 'user_not_found')

    def test_order_detail_oversized_id(self):
        response = self.client.get('/api/orders/99999999999999999999999')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['code'], 'order_not_found')

    def test_create_order_rejects_long_description(self):
        response = self.client.post(
            '/api/orders',
            dict(self.order_data, description='x' * 1001),
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('description', response.data['fields'])
        self.assertEqual(Order.objects.count(), 0)

    def test_order_detail_not_found(self):
        response = self.client.get('/api/orders/ZZZZ9999')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['kind'], 'not_found')
        self.assertEqual(response.data['code'], 'order_not_found')

    def test_full_trade_flow(self):
        """active -> joined -> paid -> transferred -> completed."""
        code = self.create_order()['code']

        response = self.join(code, '2002')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['order']['buyer_external_id'], '2002')

        response = self.set_status(code, 'paid', '2002')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['order']['status'], 'paid')

        response = self.set_status(code, 'transferred', '1001')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.set_status(code, 'completed', '2002')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['changed'])

        self.seller.refresh_from_db()
        self.buyer.refresh_from_db()
        self.assertEqual(self.seller.completed_deals, 1)
        self.assertEqual(self.buyer.completed_deals, 1)

        profile = self.client.get('/api/users/2002')
        self.assertEqual(Decimal(profile.data['volumes']['USD']), Decimal('15'))

        stats = self.client.get('/api/stats')
        self.assertEqual(stats.data['completedDeals'], 1)
        self.assertEqual(stats.data['activeOrders'], 0)

        detail = self.client.get(f'/api/orders/{code}')
        self.assertEqual(
            [log['to_status'] for log in detail.data['state_logs']],
            ['completed', 'transferred', 'paid']
        )

    def test_repeated_completion_is_noop(self):
        code = self.create_order()['code']
        self.join(code, '2002')
        self.set_status(code, 'paid', '2002')
        self.set_status(code, 'completed', '2002')

        response = self.set_status(code, 'completed', '2002')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['changed'])
        self.buyer.refresh_from_db()
        self.assertEqual(self.buyer.completed_deals, 1)
        self.assertEqual(VolumeEntry.objects.count(), 2)

    def test_repeat_join_by_same_buyer(self):
        code = self.create_order()['code']

        first = self.join(code, '2002')
        second = self.join(code, '2002')

        self.assertEqual(first.status_code, status.HTTP_200_OK)
        self.assertEqual(second.status_code, status.HTTP_200_OK)
        self.assertEqual(second.data['message'], 'You have already joined this order')
        self.assertEqual(OrderParticipant.objects.filter(order__code=code).count(), 2)
        self.assertEqual(
            Notification.objects.filter(type=Notification.Type.BUYER_JOINED).count(),
            1
        )

    def test_seller_cannot_join_own_order(self):
        code = self.create_order()['code']

        response = self.join(code, '1001')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'self_trade')

    def test_self_trade_rejected_after_cancellation(self):
        code = self.create_order()['code']
        self.set_status(code, 'cancelled', '1001')

        response = self.join(code, '1001')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'self_trade')

    def test_second_buyer_conflict(self):
        code = self.create_order()['code']
        self.join(code, '2002')

        response = self.join(code, '3003')

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['code'], 'already_joined')
        order = Order.objects.get(code=code)
        self.assertEqual(order.buyer, self.buyer)
        self.assertEqual(ParticipantRegistry.role_of(order, self.stranger), ROLE_NONE)

    def test_join_inactive_order(self):
        code = self.create_order()['code']
        self.set_status(code, 'cancelled', '1001')

        response = self.join(code, '2002')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['code'], 'order_not_active')

    def test_join_unknown_order(self):
        response = self.join('NOPE0000', '2002')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_invalid_status_value(self):
        code = self.create_order()['code']

        response = self.set_status(code, 'shipped', '1001')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'invalid_status')
        self.assertEqual(Order.objects.get(code=code).status, Order.Status.ACTIVE)

    def test_stranger_cannot_change_status(self):
        code = self.create_order()['code']
        self.join(code, '2002')

        response = self.set_status(code, 'cancelled', '3003')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['code'], 'not_participant')

    def test_seller_cannot_confirm_payment(self):
        code = self.create_order()['code']
        self.join(code, '2002')

        response = self.set_status(code, 'paid', '1001')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_invalid_transition(self):
        code = self.create_order()['code']
        self.set_status(code, 'cancelled', '1001')

        response = self.set_status(code, 'cancelled', '1001')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['changed'])

        response = self.set_status(code, 'transferred', '1001')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['code'], 'invalid_transition')

    def test_paid_order_cannot_return_to_active(self):
        code = self.create_order()['code']
        self.join(code, '2002')
        self.set_status(code, 'paid', '2002')

        response = self.set_status(code, 'active', '1001')

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['code'], 'invalid_transition')
        self.assertEqual(Order.objects.get(code=code).status, Order.Status.PAID)

    def test_active_order_resent_active_is_noop(self):
        code = self.create_order()['code']

        response = self.set_status(code, 'active', '1001')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['changed'])
        self.assertFalse(OrderStateLog.objects.filter(order__code=code).exists())

    def test_status_change_on_missing_order(self):
        response = self.set_status('NOPE0000', 'paid', '2002')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_user_orders_newest_first(self):
        first = self.create_order()
        second = self.create_order(description='Durov Cap')
        self.join(first['code'], '2002')

        seller_orders = self.client.get('/api/users/1001/orders')
        buyer_orders = self.client.get('/api/users/2002/orders')
        stranger_orders = self.client.get('/api/users/3003/orders')

        self.assertEqual(
            [o['id'] for o in seller_orders.data],
            [second['id'], first['id']]
        )
        self.assertEqual([o['id'] for o in buyer_orders.data], [first['id']])
        self.assertEqual(stranger_orders.data, [])

    def test_user_orders_unknown_user(self):
        response = self.client.get('/api/users/404404/orders')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_public_listing(self):
        active = self.create_order()
        cancelled = self.create_order()
        self.set_status(cancelled['code'], 'cancelled', '1001')

        response = self.client.get('/api/orders')
        self.assertEqual([o['id'] for o in response.data], [active['id']])

        response = self.client.get('/api/orders', {'status': 'cancelled'})
        self.assertEqual([o['id'] for o in response.data], [cancelled['id']])

        response = self.client.get('/api/orders', {'status': 'bogus'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'invalid_status')

    def test_public_listing_limit(self):
        for _ in range(3):
            self.create_order()

        response = self.client.get('/api/orders', {'limit': 2})

        self.assertEqual(len(response.data), 2)


class OrderServiceTestCase(TestCase):
    """Test code generation and joining at the service level."""

    def setUp(self):
        self.seller = User.objects.create_user(external_id='1001', username='alice')
        self.buyer = User.objects.create_user(external_id='2002', username='bob')

    def test_generated_codes(self):
        codes = {OrderService.generate_code() for _ in range(200)}

        self.assertTrue(all(CODE_PATTERN.match(code) for code in codes))
        self.assertGreater(len(codes), 190)

    def test_code_collision_is_retried(self):
        with patch.object(OrderService, 'generate_code', return_value='AAAA1111'):
            make_order(self.seller)

        with patch.object(OrderService, 'generate_code', side_effect=['AAAA1111', 'BBBB2222']):
            order = make_order(self.seller)

        self.assertEqual(order.code, 'BBBB2222')

    def test_code_exhausted(self):
        with patch.object(OrderService, 'generate_code', return_value='AAAA1111'):
            make_order(self.seller)
            with self.assertRaises(CodeExhausted):
                make_order(self.seller)

        self.assertEqual(Order.objects.count(), 1)

    def test_long_description_is_rejected(self):
        with self.assertRaises(ValidationError):
            make_order(self.seller, description='x' * 1001)

        order = make_order(self.seller, description='x' * 1000)
        self.assertEqual(len(order.description), 1000)
        self.assertEqual(Order.objects.count(), 1)

    def test_lookup_ignores_ids_outside_key_range(self):
        for identifier in ['99999999999999999999999', '9' * 5000, '١٢']:
            with self.assertRaises(OrderNotFound):
                OrderService.lookup(identifier)

    def test_join_returns_flag(self):
        order = make_order(self.seller)

        _, joined = OrderService.join_order(order.code, self.buyer)
        _, joined_again = OrderService.join_order(order.code, self.buyer)

        self.assertTrue(joined)
        self.assertFalse(joined_again)

    def test_join_errors(self):
        order = make_order(self.seller)

        with self.assertRaises(SelfTrade):
            OrderService.join_order(order.code, self.seller)

        OrderService.join_order(order.code, self.buyer)
        other = User.objects.create_user(external_id='3003', username='carol')
        with self.assertRaises(AlreadyJoined):
            OrderService.join_order(order.code, other)

        cancelled = make_order(self.seller)
        StateMachine.transition(cancelled, Order.Status.CANCELLED, user=self.seller)
        with self.assertRaises(OrderNotActive):
            OrderService.join_order(cancelled.code, self.buyer)

    def test_bind_buyer_is_first_writer_wins(self):
        order = make_order(self.seller)
        other = User.objects.create_user(external_id='3003', username='carol')

        self.assertTrue(ParticipantRegistry.bind_buyer(order, self.buyer))
        self.assertFalse(ParticipantRegistry.bind_buyer(order, other))

        order.refresh_from_db()
        self.assertEqual(order.buyer, self.buyer)

    def test_notification_failure_does_not_fail_join(self):
        order = make_order(self.seller)

        with patch.object(Notification.objects, 'create', side_effect=DatabaseError('disk full')):
            order, joined = OrderService.join_order(order.code, self.buyer)

        self.assertTrue(joined)
        self.assertEqual(order.buyer, self.buyer)
        self.assertEqual(Notification.objects.count(), 0)


class StateMachineTestCase(TestCase):
    """Test transitions, role checks and side effects."""

    def setUp(self):
        self.seller = User.objects.create_user(external_id='1001', username='alice')
        self.buyer = User.objects.create_user(external_id='2002', username='bob')
        self.admin = User.objects.create_user(external_id='9000', username='support', is_staff=True)
        self.order = make_order(self.seller)

    def test_transition_table(self):
        self.assertTrue(StateMachine.can_transition('active', 'paid'))
        self.assertTrue(StateMachine.can_transition('active', 'cancelled'))
        self.assertTrue(StateMachine.can_transition('paid', 'completed'))
        self.assertFalse(StateMachine.can_transition('paid', 'cancelled'))
        self.assertFalse(StateMachine.can_transition('completed', 'active'))
        self.assertFalse(StateMachine.can_transition('cancelled', 'paid'))

    def test_nobody_may_request_initial_status(self):
        with self.assertRaises(InvalidTransition):
            StateMachine.validate_user_can_transition(self.order, self.seller, Order.Status.ACTIVE)

        with self.assertRaises(InvalidTransition):
            StateMachine.validate_user_can_transition(self.order, self.admin, Order.Status.ACTIVE)

    def test_paid_requires_buyer(self):
        with self.assertRaises(InvalidTransition):
            StateMachine.transition(self.order, Order.Status.PAID, user=self.admin)

        with self.assertRaises(NotParticipant):
            StateMachine.transition(self.order, Order.Status.PAID, user=self.buyer)

    def test_staff_may_drive_transitions(self):
        OrderService.join_order(self.order.code, self.buyer)

        order, changed = StateMachine.transition(self.order, Order.Status.PAID, user=self.admin)

        self.assertTrue(changed)
        self.assertEqual(order.status, Order.Status.PAID)

    def test_transition_is_logged(self):
        StateMachine.transition(self.order, Order.Status.CANCELLED, user=self.seller, reason='changed my mind')

        log = OrderStateLog.objects.get(order=self.order)
        self.assertEqual(log.from_status, Order.Status.ACTIVE)
        self.assertEqual(log.to_status, Order.Status.CANCELLED)
        self.assertEqual(log.changed_by, self.seller)
        self.assertEqual(log.reason, 'changed my mind')

    def test_notifications_follow_transitions(self):
        OrderService.join_order(self.order.code, self.buyer)
        StateMachine.transition(self.order, Order.Status.PAID, user=self.buyer)
        StateMachine.transition(self.order, Order.Status.TRANSFERRED, user=self.seller)
        StateMachine.transition(self.order, Order.Status.COMPLETED, user=self.buyer)

        seller_types = list(
            Notification.objects.filter(user=self.seller).order_by('id').values_list('type', flat=True)
        )
        buyer_types = list(
            Notification.objects.filter(user=self.buyer).order_by('id').values_list('type', flat=True)
        )

        self.assertEqual(seller_types, ['buyer_joined', 'payment_confirmed', 'order_completed'])
        self.assertEqual(buyer_types, ['asset_transferred', 'order_completed'])

    def test_cancel_notifies_counterparty_only(self):
        OrderService.join_order(self.order.code, self.buyer)
        Notification.objects.all().delete()

        StateMachine.transition(self.order, Order.Status.CANCELLED, user=self.seller)

        self.assertFalse(Notification.objects.filter(user=self.seller).exists())
        self.assertEqual(
            Notification.objects.get(user=self.buyer).type,
            Notification.Type.ORDER_CANCELLED
        )
