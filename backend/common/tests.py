"""
Tests for the error envelope and the activity logging middleware.
"""
from unittest.mock import patch
from django.db import DatabaseError
from django.test import TestCase
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework import status
from apps.orders.services.order_service import OrderService

User = get_user_model()


class ErrorEnvelopeTestCase(TestCase):

    def setUp(self):
        self.client = APIClient()

    def test_marketplace_error_shape(self):
        response = self.client.get('/api/users/ghost')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(set(response.data), {'error', 'kind', 'code'})
        self.assertEqual(response.data['kind'], 'not_found')

    def test_database_error_becomes_storage_error(self):
        with patch.object(OrderService, 'lookup', side_effect=DatabaseError('database is locked')):
            response = self.client.get('/api/orders/ABCD1234')

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data['kind'], 'storage_error')
        self.assertNotIn('locked', response.data['error'])

    def test_method_not_allowed(self):
        response = self.client.delete('/api/stats')

        self.assertEqual(response.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)
        self.assertEqual(response.data['kind'], 'validation_error')


class TradeActivityLoggingTestCase(TestCase):

    def setUp(self):
        self.client = APIClient()

    def test_successful_write_logged_at_info(self):
        with self.assertLogs('security', level='INFO') as logs:
            self.client.post('/api/users', {'external_id': '1001', 'username': 'alice'}, format='json')

        self.assertIn('POST /api/users -> 201', logs.output[0])
        self.assertTrue(logs.output[0].startswith('INFO'))

    def test_rejected_write_logged_at_warning(self):
        with self.assertLogs('security', level='WARNING') as logs:
            self.client.post('/api/orders/NOPE0000/join', {'buyer_external_id': '1'}, format='json')

        self.assertIn('-> 404', logs.output[-1])

    def test_reads_are_not_logged(self):
        User.objects.create_user(external_id='1001', username='alice')

        with patch('common.middleware.logger') as logger:
            self.client.get('/api/users/1001')

        logger.info.assert_not_called()
        logger.warning.assert_not_called()
