"""
Test suite for Finance module
Tests: Expense categories, expenses, credit ledger and daily takings
"""
from io import StringIO
from django.core.management import call_command
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from decimal import Decimal
from datetime import timedelta
from shopdesk.core.exceptions import BusinessRuleError
from shopdesk.core.models import AuditLog
from shopdesk.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from shopdesk.finance import services
from shopdesk.finance.models import ExpenseCategory, Expense, Credit, DEFAULT_EXPENSE_CATEGORIES


class ExpenseCategoryTests(TestCase):
    """Test expense categories"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user(role='lead', page_access=['expenses']))

    def test_defaults_created_on_first_list(self):
        response = self.client.get('/api/v1/expense-categories/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), len(DEFAULT_EXPENSE_CATEGORIES))

    def test_ensure_defaults_is_idempotent(self):
        self.assertEqual(services.ensure_default_categories(), len(DEFAULT_EXPENSE_CATEGORIES))
        self.assertEqual(services.ensure_default_categories(), 0)

    def test_command_adds_categories(self):
        out = StringIO()
        call_command('add_expense_categories', stdout=out)
        self.assertIn('Added', out.getvalue())
        self.assertTrue(ExpenseCategory.objects.filter(value='rent').exists())

    def test_used_category_cannot_be_deleted(self):
        category = ExpenseCategory.objects.create(value='rent', label='Rent')
        Expense.objects.create(amount=Decimal('100.00'), category=category)
        client = AuthenticatedAPIClient()
        client.authenticate_user(TestDataFactory.create_admin())
        response = client.delete(f'/api/v1/expense-categories/{category.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('error', response.data)


class ExpenseTests(TestCase):
    """Test expense recording and summaries"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)
        self.store = TestDataFactory.create_store()
        services.ensure_default_categories()

    def test_create_expense(self):
        response = self.client.post('/api/v1/expenses/', {
            'store': self.store.id, 'amount': '2500.00', 'category': 'rent', 'description': 'October rent'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['category_label'], 'Rent')
        self.assertEqual(response.data['created_by'], self.admin.id)

    def test_amount_must_be_positive(self):
        response = self.client.post('/api/v1/expenses/', {'amount': '0', 'category': 'rent'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('amount', response.data)

    def test_unknown_category(self):
        response = self.client.post('/api/v1/expenses/', {'amount': '10', 'category': 'holiday'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_summary_by_category(self):
        rent = ExpenseCategory.objects.get(value='rent')
        utilities = ExpenseCategory.objects.get(value='utilities')
        Expense.objects.create(amount=Decimal('1000.00'), category=rent, store=self.store)
        Expense.objects.create(amount=Decimal('150.00'), category=utilities, store=self.store)
        Expense.objects.create(amount=Decimal('50.00'), category=utilities, store=self.store)
        Expense.objects.create(amount=Decimal('999.00'), category=rent,
                               expense_date=timezone.localdate() - timedelta(days=40))

        today = timezone.localdate().isoformat()
        response = self.client.get('/api/v1/expenses/summary/', {'date_from': today, 'date_to': today})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_amount'], Decimal('1200.00'))
        self.assertEqual(response.data['count'], 3)
        self.assertEqual(response.data['by_category'][0]['category'], 'rent')
        self.assertEqual(response.data['by_category'][1]['count'], 2)

    def test_delete_is_audited(self):
        expense = Expense.objects.create(amount=Decimal('75.00'), category=ExpenseCategory.objects.get(value='other'))
        response = self.client.delete(f'/api/v1/expenses/{expense.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertTrue(AuditLog.objects.filter(model_name='Expense', action='delete').exists())

    def test_view_only_user_cannot_record(self):
        client = AuthenticatedAPIClient()
        client.authenticate_user(TestDataFactory.create_user(page_access=['expenses']))
        response = client.post('/api/v1/expenses/', {'amount': '10', 'category': 'rent'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class CreditLedgerTests(TestCase):
    """Test the credit ledger and daily takings"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_admin())
        self.store = TestDataFactory.create_store()

    def test_summary_balance(self):
        Credit.objects.create(store=self.store, amount=Decimal('500.00'), credit_type='given')
        Credit.objects.create(store=self.store, amount=Decimal('800.00'), credit_type='received')
        Credit.objects.create(store=self.store, amount=Decimal('999.00'), credit_type='cash')
        response = self.client.get('/api/v1/credits/summary/')
        self.assertEqual(response.data['total_given'], Decimal('500.00'))
        self.assertEqual(response.data['total_received'], Decimal('800.00'))
        self.assertEqual(response.data['balance'], Decimal('300.00'))

    def test_credit_endpoint_rejects_daily_types(self):
        response = self.client.post('/api/v1/credits/', {
            'store': self.store.id, 'amount': '100.00', 'credit_type': 'cash'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('credit_type', response.data)

    def test_list_hides_daily_rows(self):
        Credit.objects.create(store=self.store, amount=Decimal('10.00'), credit_type='given')
        Credit.objects.create(store=self.store, amount=Decimal('20.00'), credit_type='cash')
        response = self.client.get('/api/v1/credits/')
        self.assertEqual(len(response.data), 1)
        response = self.client.get('/api/v1/credits/', {'credit_type': 'cash'})
        self.assertEqual(len(response.data), 1)

    def test_daily_financials_replace_the_day(self):
        today = timezone.localdate().isoformat()
        payload = {'store': self.store.id, 'date': today, 'cash_amount': '1200.00', 'online_amount': '300.00'}
        response = self.client.post('/api/v1/credits/daily/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['cash_amount'], Decimal('1200.00'))

        payload['cash_amount'] = '1500.00'
        self.client.post('/api/v1/credits/daily/', payload, format='json')
        self.assertEqual(Credit.objects.filter(store=self.store, credit_type='cash').count(), 1)

        response = self.client.get('/api/v1/credits/daily/', {'store_id': self.store.id})
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['cash_amount'], Decimal('1500.00'))
        self.assertEqual(response.data[0]['online_amount'], Decimal('300.00'))

    def test_daily_financials_need_store(self):
        with self.assertRaises(BusinessRuleError):
            services.save_daily_financials(None, timezone.localdate(), cash=Decimal('1.00'))
