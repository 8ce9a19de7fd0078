"""
Test suite for Parties module
Tests: Customers, credit balance and limits, credit payments, auto debit
"""
from unittest import mock
from django.test import TestCase, override_settings
from rest_framework import status
from decimal import Decimal
import requests
from shopdesk.core.exceptions import BusinessRuleError
from shopdesk.core.models import AuditLog
from shopdesk.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from shopdesk.parties import services
from shopdesk.parties.models import (
    Customer, CreditTransaction, PaymentMethod, AutoDebitConfig, AutoDebitTransaction
)

RAZORPAY_SETTINGS = {
    'RAZORPAY_KEY_ID': 'rzp_test_key',
    'RAZORPAY_KEY_SECRET': 'secret',
    'RAZORPAY_API_URL': 'https://api.razorpay.test/v1/',
}


def owe(customer, amount, status='completed'):
    return CreditTransaction.objects.create(customer=customer, amount=Decimal(amount), status=status)


class CreditRuleTests(TestCase):
    """Test the credit balance and limit rules"""

    def setUp(self):
        self.customer = TestDataFactory.create_customer(credit_limit=Decimal('1000.00'))

    def test_balance_ignores_failed_entries(self):
        owe(self.customer, '300.00')
        owe(self.customer, '200.00', status='pending')
        owe(self.customer, '500.00', status='failed')
        owe(self.customer, '-100.00')
        self.assertEqual(self.customer.get_credit_balance(), Decimal('400.00'))
        self.assertEqual(self.customer.get_available_credit(), Decimal('600.00'))

    def test_credit_purchase_within_limit(self):
        owe(self.customer, '900.00')
        self.assertTrue(services.can_make_credit_purchase(self.customer, '100.00'))
        self.assertFalse(services.can_make_credit_purchase(self.customer, '100.01'))

    def test_no_credit_without_limit(self):
        customer = TestDataFactory.create_customer()
        self.assertFalse(services.can_make_credit_purchase(customer, '1.00'))

    def test_payment_must_be_positive(self):
        with self.assertRaises(BusinessRuleError):
            services.record_credit_payment(self.customer, '0')

    def test_find_or_create_customer_by_name(self):
        existing = TestDataFactory.create_customer(name='Ravi Kumar')
        self.assertEqual(services.find_or_create_customer_by_name(' ravi kumar '), existing)
        created = services.find_or_create_customer_by_name('New Walk-in')
        self.assertEqual(created.name, 'New Walk-in')
        self.assertEqual(Customer.objects.count(), 3)


class CustomerAPITests(TestCase):
    """Test customer endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user(role='sales', page_access=['pos', 'customers'])
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_sales_user_can_create_customer(self):
        response = self.client.post('/api/v1/customers/', {
            'name': 'Asha', 'phone': '9876543210', 'credit_limit': '500.00'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['credit_balance'], '0.00')
        self.assertEqual(response.data['created_by'], self.user.id)

    def test_negative_credit_limit(self):
        response = self.client.post('/api/v1/customers/', {'name': 'Bad', 'credit_limit': '-1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_search(self):
        TestDataFactory.create_customer(name='Meena Stores', phone='9000000001')
        TestDataFactory.create_customer(name='Other')
        response = self.client.get('/api/v1/customers/', {'search': '9000000001'})
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['name'], 'Meena Stores')

    def test_delete_requires_admin(self):
        customer = TestDataFactory.create_customer()
        response = self.client.delete(f'/api/v1/customers/{customer.id}/delete/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        admin_client = AuthenticatedAPIClient()
        admin_client.authenticate_user(TestDataFactory.create_admin())
        response = admin_client.delete(f'/api/v1/customers/{customer.id}/delete/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertTrue(AuditLog.objects.filter(action='delete', model_name='Customer').exists())

    def test_credit_payment(self):
        customer = TestDataFactory.create_customer(credit_limit=Decimal('1000.00'))
        owe(customer, '250.00')
        response = self.client.post(f'/api/v1/customers/{customer.id}/credit-payment/', {
            'amount': '100.00', 'description': 'Cash'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['amount'], '-100.00')
        self.assertTrue(AuditLog.objects.filter(action='credit_payment').exists())

        response = self.client.get(f'/api/v1/customers/{customer.id}/credit/')
        self.assertEqual(response.data['credit_balance'], Decimal('150.00'))
        self.assertEqual(response.data['available_credit'], Decimal('850.00'))
        self.assertFalse(response.data['auto_debit_due'])

    def test_zero_ledger_entry_rejected(self):
        customer = TestDataFactory.create_customer()
        response = self.client.post(f'/api/v1/customers/{customer.id}/credit-transactions/', {
            'amount': '0'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


@override_settings(**RAZORPAY_SETTINGS)
class AutoDebitTests(TestCase):
    """Test the auto debit flow against a mocked Razorpay"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_admin())
        self.customer = TestDataFactory.create_customer(credit_limit=Decimal('5000.00'))
        self.method = PaymentMethod.objects.create(
            customer=self.customer, method_type='card', razorpay_token='token_abc', is_primary=True
        )
        self.config = AutoDebitConfig.objects.create(
            customer=self.customer, payment_method=self.method,
            trigger_amount=Decimal('1000.00'), debit_amount=Decimal('800.00'),
        )

    def _response(self, status_code, payload):
        response = mock.Mock()
        response.status_code = status_code
        response.json.return_value = payload
        return response

    def test_below_trigger_skips(self):
        owe(self.customer, '500.00')
        with mock.patch('shopdesk.parties.services.requests.post') as post:
            response = self.client.post(f'/api/v1/customers/{self.customer.id}/auto-debit/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        post.assert_not_called()
        self.assertFalse(AutoDebitTransaction.objects.exists())

    def test_captured_payment_reduces_balance(self):
        owe(self.customer, '1200.00')
        self.assertTrue(services.check_auto_debit_trigger(self.customer))
        with mock.patch('shopdesk.parties.services.requests.post') as post:
            post.return_value = self._response(200, {'id': 'pay_123', 'status': 'captured'})
            response = self.client.post(f'/api/v1/customers/{self.customer.id}/auto-debit/')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'success')
        self.assertEqual(response.data['razorpay_payment_id'], 'pay_123')
        payload = post.call_args.kwargs['json']
        self.assertEqual(payload['amount'], 80000)
        self.assertEqual(payload['token'], 'token_abc')
        self.assertEqual(self.customer.get_credit_balance(), Decimal('400.00'))
        self.assertTrue(AuditLog.objects.filter(action='auto_debit').exists())

    def test_upstream_error_is_recorded(self):
        owe(self.customer, '1200.00')
        with mock.patch('shopdesk.parties.services.requests.post') as post:
            post.return_value = self._response(400, {'error': {'description': 'Card declined'}})
            auto_debit = services.process_auto_debit(self.customer)
        self.assertEqual(auto_debit.status, 'failed')
        self.assertEqual(auto_debit.error_message, 'Card declined')
        self.assertEqual(self.customer.get_credit_balance(), Decimal('1200.00'))

    def test_network_error_is_recorded(self):
        owe(self.customer, '1200.00')
        with mock.patch('shopdesk.parties.services.requests.post',
                        side_effect=requests.exceptions.ConnectionError('timed out')):
            auto_debit = services.process_auto_debit(self.customer)
        self.assertEqual(auto_debit.status, 'failed')
        self.assertIn('timed out', auto_debit.error_message)

    @override_settings(RAZORPAY_KEY_ID='')
    def test_missing_credentials(self):
        owe(self.customer, '1200.00')
        response = self.client.post(f'/api/v1/customers/{self.customer.id}/auto-debit/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_single_enabled_config_per_customer(self):
        response = self.client.post('/api/v1/auto-debit/configs/', {
            'customer': self.customer.id, 'payment_method': self.method.id,
            'trigger_amount': '2000.00', 'debit_amount': '1000.00',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('customer', response.data)

    def test_payment_method_of_other_customer(self):
        other = TestDataFactory.create_customer()
        self.config.delete()
        response = self.client.post('/api/v1/auto-debit/configs/', {
            'customer': other.id, 'payment_method': self.method.id,
            'trigger_amount': '2000.00', 'debit_amount': '1000.00',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('payment_method', response.data)
