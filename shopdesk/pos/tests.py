"""
Test suite for POS module
Tests: Checkout, bill numbers, credit sales, split payments, bill edits, cancellation,
settlement, receipts and the cash drawer
"""
from unittest import mock
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework import status
import requests
from decimal import Decimal
from shopdesk.core.exceptions import BusinessRuleError
from shopdesk.core.models import AuditLog
from shopdesk.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from shopdesk.inventory.models import StockEntry
from shopdesk.parties.models import CreditTransaction, PaymentMethod, AutoDebitConfig, AutoDebitTransaction
from shopdesk.pos import services
from shopdesk.pos.models import Bill, DayClosing, denominations_total


class CheckoutServiceTests(TestCase):
    """Test checkout rules at the service level"""

    def setUp(self):
        self.cashier = TestDataFactory.create_user(username='ravi', role='sales', page_access=['pos'], code='ravi')
        self.store = TestDataFactory.create_store(name='Main Street')
        self.product = TestDataFactory.create_product(price=Decimal('40.00'), store=self.store)

    def test_bill_number_format(self):
        bill = services.checkout(self.store, self.cashier, [{'product': self.product, 'quantity': Decimal('1')}])
        today = timezone.localdate().strftime('%Y%m%d')
        self.assertEqual(bill.bill_number, f'MAIN-RAVI-{today}-0001')
        second = services.checkout(self.store, self.cashier, [{'product': self.product, 'quantity': Decimal('1')}])
        self.assertEqual(second.bill_number, f'MAIN-RAVI-{today}-0002')

    def test_total_and_stock_out(self):
        TestDataFactory.create_stock_entry(self.product, self.store, opening_stock=10)
        bill = services.checkout(self.store, self.cashier, [
            {'product': self.product, 'quantity': Decimal('2')},
            {'product': self.product, 'quantity': Decimal('1'), 'unit_price': Decimal('35.00')},
        ])
        self.assertEqual(bill.total_amount, Decimal('115.00'))
        self.assertEqual(bill.payment_status, 'completed')
        entry = StockEntry.objects.get(product=self.product, store=self.store)
        self.assertEqual(entry.actual_stock, Decimal('7'))
        self.assertEqual(entry.closing_stock, Decimal('7'))

    def test_oversell_blocked_for_tracked_products(self):
        TestDataFactory.create_stock_entry(self.product, self.store, opening_stock=2)
        with self.assertRaises(BusinessRuleError) as ctx:
            services.checkout(self.store, self.cashier, [
                {'product': self.product, 'quantity': Decimal('2')},
                {'product': self.product, 'quantity': Decimal('1')},
            ])
        self.assertIn('Insufficient stock', str(ctx.exception))
        self.assertFalse(Bill.objects.exists())

    def test_untracked_product_sells_freely(self):
        bill = services.checkout(self.store, self.cashier, [{'product': self.product, 'quantity': Decimal('5')}])
        self.assertEqual(bill.total_amount, Decimal('200.00'))
        # The zero row left by the first sale does not start tracking the product
        services.checkout(self.store, self.cashier, [{'product': self.product, 'quantity': Decimal('3')}])
        self.assertEqual(Bill.objects.count(), 2)

    def test_edit_cannot_oversell(self):
        TestDataFactory.create_stock_entry(self.product, self.store, opening_stock=5)
        bill = services.checkout(self.store, self.cashier, [{'product': self.product, 'quantity': Decimal('1')}])
        with self.assertRaises(BusinessRuleError) as ctx:
            services.update_bill_items(bill, [{'product': self.product, 'quantity': Decimal('50')}])
        self.assertIn('Insufficient stock', str(ctx.exception))
        entry = StockEntry.objects.get(product=self.product, store=self.store)
        self.assertEqual(entry.actual_stock, Decimal('4'))

        bill = services.update_bill_items(bill, [{'product': self.product, 'quantity': Decimal('5')}])
        self.assertEqual(bill.total_amount, Decimal('200.00'))
        entry.refresh_from_db()
        self.assertEqual(entry.actual_stock, Decimal('0'))

    def test_edit_credit_bill_respects_limit(self):
        customer = TestDataFactory.create_customer(credit_limit=Decimal('100.00'))
        bill = services.checkout(self.store, self.cashier, [{'product': self.product, 'quantity': Decimal('1')}],
                                 payment_method='credit', customer=customer)
        with self.assertRaises(BusinessRuleError) as ctx:
            services.update_bill_items(bill, [{'product': self.product, 'quantity': Decimal('3')}])
        self.assertIn('Credit limit exceeded', str(ctx.exception))
        self.assertEqual(customer.get_credit_balance(), Decimal('40.00'))

        services.update_bill_items(bill, [{'product': self.product, 'quantity': Decimal('2')}])
        self.assertEqual(customer.get_credit_balance(), Decimal('80.00'))

    def test_empty_cart(self):
        with self.assertRaises(BusinessRuleError):
            services.checkout(self.store, self.cashier, [])

    def test_credit_sale_books_ledger_entry(self):
        customer = TestDataFactory.create_customer(credit_limit=Decimal('100.00'))
        bill = services.checkout(self.store, self.cashier, [{'product': self.product, 'quantity': Decimal('2')}],
                                 payment_method='credit', customer=customer)
        self.assertEqual(bill.payment_status, 'pending')
        entry = CreditTransaction.objects.get(bill=bill)
        self.assertEqual(entry.amount, Decimal('80.00'))
        self.assertEqual(customer.get_credit_balance(), Decimal('80.00'))

    def test_credit_limit_exceeded(self):
        customer = TestDataFactory.create_customer(credit_limit=Decimal('50.00'))
        with self.assertRaises(BusinessRuleError) as ctx:
            services.checkout(self.store, self.cashier, [{'product': self.product, 'quantity': Decimal('2')}],
                              payment_method='credit', customer=customer)
        self.assertIn('Credit limit exceeded', str(ctx.exception))

    def test_credit_requires_customer(self):
        with self.assertRaises(BusinessRuleError):
            services.checkout(self.store, self.cashier, [{'product': self.product, 'quantity': Decimal('1')}],
                              payment_method='credit')

    def test_pending_bill_creates_named_customer(self):
        bill = services.checkout(self.store, self.cashier, [{'product': self.product, 'quantity': Decimal('1')}],
                                 payment_method='pending', customer_name='Table 4')
        self.assertEqual(bill.customer.name, 'Table 4')
        self.assertEqual(bill.payment_status, 'pending')

    def test_split_must_match_total(self):
        items = [{'product': self.product, 'quantity': Decimal('2')}]
        with self.assertRaises(BusinessRuleError):
            services.checkout(self.store, self.cashier, items, payment_method='split',
                              payment_breakdown={'cash': Decimal('50.00'), 'upi': Decimal('20.00')})
        bill = services.checkout(self.store, self.cashier, items, payment_method='split',
                                 payment_breakdown={'cash': Decimal('50.00'), 'upi': Decimal('30.00')})
        self.assertEqual(bill.payment_breakdown, {'cash': '50.00', 'upi': '30.00'})

    def test_split_rejects_credit_part(self):
        with self.assertRaises(BusinessRuleError):
            services.checkout(self.store, self.cashier, [{'product': self.product, 'quantity': Decimal('1')}],
                              payment_method='split', payment_breakdown={'credit': Decimal('40.00')})


class BillLifecycleTests(TestCase):
    """Test editing, cancelling and settling bills through the API"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)
        self.store = TestDataFactory.create_store(name='Cafe')
        self.product = TestDataFactory.create_product(name='Masala Chai', price=Decimal('20.00'), store=self.store)
        TestDataFactory.create_stock_entry(self.product, self.store, opening_stock=10)

    def _checkout(self, quantity='2', **extra):
        payload = {
            'store_id': self.store.id,
            'items': [{'product_id': self.product.id, 'quantity': quantity}],
        }
        payload.update(extra)
        return self.client.post('/api/v1/pos/checkout/', payload, format='json')

    def _entry(self):
        return StockEntry.objects.get(product=self.product, store=self.store)

    def test_checkout_endpoint(self):
        response = self._checkout('3')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['total_amount'], '60.00')
        self.assertEqual(response.data['items_count'], 1)
        self.assertEqual(response.data['items'][0]['product_name'], 'Masala Chai')
        log = AuditLog.objects.get(action='bill_checkout')
        self.assertEqual(log.object_reference, response.data['bill_number'])

    def test_checkout_insufficient_stock(self):
        response = self._checkout('11')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('Insufficient stock', response.data['error'])

    def test_checkout_requires_pos_edit(self):
        client = AuthenticatedAPIClient()
        client.authenticate_user(TestDataFactory.create_user(page_access=['pos']))
        response = client.post('/api/v1/pos/checkout/', {
            'store_id': self.store.id, 'items': [{'product_id': self.product.id, 'quantity': '1'}]
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_update_items_rebalances_stock(self):
        bill_id = self._checkout('2').data['id']
        self.assertEqual(self._entry().actual_stock, Decimal('8'))

        response = self.client.put(f'/api/v1/bills/{bill_id}/items/', {
            'items': [{'product_id': self.product.id, 'quantity': '5'}]
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_amount'], '100.00')
        self.assertEqual(self._entry().actual_stock, Decimal('5'))
        self.assertTrue(AuditLog.objects.filter(action='bill_update').exists())

    def test_cancel_returns_stock_and_voids_credit(self):
        customer = TestDataFactory.create_customer(credit_limit=Decimal('500.00'))
        bill_id = self._checkout('4', payment_method='credit', customer_id=customer.id).data['id']
        self.assertEqual(customer.get_credit_balance(), Decimal('80.00'))

        response = self.client.post(f'/api/v1/bills/{bill_id}/cancel/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['payment_status'], 'cancelled')
        self.assertEqual(self._entry().actual_stock, Decimal('10'))
        self.assertEqual(customer.get_credit_balance(), Decimal('0.00'))

        response = self.client.post(f'/api/v1/bills/{bill_id}/cancel/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_cancelled_bill_cannot_be_edited(self):
        bill_id = self._checkout('1').data['id']
        self.client.post(f'/api/v1/bills/{bill_id}/cancel/')
        response = self.client.put(f'/api/v1/bills/{bill_id}/items/', {
            'items': [{'product_id': self.product.id, 'quantity': '1'}]
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_settle_credit_bill(self):
        customer = TestDataFactory.create_customer(credit_limit=Decimal('500.00'))
        bill_id = self._checkout('2', payment_method='credit', customer_id=customer.id).data['id']

        response = self.client.post(f'/api/v1/bills/{bill_id}/settle/', {'payment_method': 'upi'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['payment_status'], 'completed')
        self.assertEqual(response.data['payment_method'], 'credit')
        self.assertEqual(response.data['payment_breakdown'], {'settled_with': 'upi'})
        self.assertEqual(customer.get_credit_balance(), Decimal('0.00'))

        response = self.client.post(f'/api/v1/bills/{bill_id}/settle/', {'payment_method': 'cash'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_settle_pending_bill_takes_method(self):
        bill_id = self._checkout('1', payment_method='pending', customer_name='Table 2').data['id']
        response = self.client.post(f'/api/v1/bills/{bill_id}/settle/', {'payment_method': 'card'}, format='json')
        self.assertEqual(response.data['payment_method'], 'card')

    def test_bill_list_filters(self):
        self._checkout('1')
        self._checkout('1', payment_method='card')
        response = self.client.get('/api/v1/bills/', {'payment_method': 'card'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)

    def test_receipt(self):
        bill = self._checkout('2').data
        response = self.client.get(f"/api/v1/bills/{bill['id']}/receipt/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        text = response.content.decode()
        self.assertIn(bill['bill_number'], text)
        self.assertIn('Masala Chai', text)
        self.assertIn('40.00', text)


class CashDrawerTests(TestCase):
    """Test denomination counts and day closing"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)
        self.store = TestDataFactory.create_store()
        self.product = TestDataFactory.create_product(price=Decimal('100.00'), store=self.store)

    def test_denominations_total(self):
        self.assertEqual(denominations_total({'500': 2, '100': 3, '0.5': 4}), Decimal('1302.00'))

    def test_denomination_count_upserts(self):
        payload = {'store': self.store.id, 'denominations': {'500': 1}, 'terminal_id': 'T1'}
        response = self.client.post('/api/v1/pos/denominations/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['total_amount'], '500.00')

        payload['denominations'] = {'500': 2}
        response = self.client.post('/api/v1/pos/denominations/', payload, format='json')
        self.assertEqual(response.data['total_amount'], '1000.00')
        response = self.client.get('/api/v1/pos/denominations/', {'store_id': self.store.id})
        self.assertEqual(len(response.data), 1)

    def test_invalid_denomination(self):
        response = self.client.post('/api/v1/pos/denominations/', {
            'store': self.store.id, 'denominations': {'abc': 1}
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_day_closing_variance(self):
        services.checkout(self.store, self.admin, [{'product': self.product, 'quantity': Decimal('8')}])
        services.checkout(self.store, self.admin, [{'product': self.product, 'quantity': Decimal('3')}],
                          payment_method='split',
                          payment_breakdown={'cash': Decimal('200.00'), 'card': Decimal('100.00')})
        services.checkout(self.store, self.admin, [{'product': self.product, 'quantity': Decimal('1')}],
                          payment_method='upi')
        self.assertEqual(services.cash_sales_for_day(self.store, timezone.localdate()), Decimal('1000.00'))

        response = self.client.post('/api/v1/pos/day-closings/', {
            'store': self.store.id,
            'opening_denominations': {'500': 2},
            'closing_denominations': {'500': 4, '100': 1},
            'total_change_given': '50.00',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['expected_cash'], '1950.00')
        self.assertEqual(response.data['variance_amount'], '150.00')
        self.assertTrue(AuditLog.objects.filter(action='day_closing').exists())

    def test_day_closed_once(self):
        services.close_day(self.store, self.admin, {'100': 1}, {'100': 1})
        with self.assertRaises(BusinessRuleError):
            services.close_day(self.store, self.admin, {'100': 1}, {'100': 1})
        self.assertEqual(DayClosing.objects.count(), 1)


@override_settings(RAZORPAY_KEY_ID='rzp_test_key', RAZORPAY_KEY_SECRET='secret',
                   RAZORPAY_API_URL='https://api.razorpay.test/v1/')
class CreditSaleAutoDebitTests(TestCase):
    """Test the auto debit attempted after a credit sale"""

    def setUp(self):
        self.cashier = TestDataFactory.create_user(role='sales', page_access=['pos'])
        self.store = TestDataFactory.create_store()
        self.product = TestDataFactory.create_product(price=Decimal('40.00'), store=self.store)
        self.customer = TestDataFactory.create_customer(credit_limit=Decimal('5000.00'))
        method = PaymentMethod.objects.create(customer=self.customer, method_type='upi',
                                              razorpay_token='token_upi', is_primary=True)
        AutoDebitConfig.objects.create(customer=self.customer, payment_method=method,
                                       trigger_amount=Decimal('100.00'), debit_amount=Decimal('100.00'))

    def _credit_sale(self, quantity):
        return services.checkout(self.store, self.cashier, [{'product': self.product, 'quantity': Decimal(quantity)}],
                                 payment_method='credit', customer=self.customer)

    def test_below_trigger_no_debit(self):
        with mock.patch('shopdesk.parties.services.requests.post') as post:
            self._credit_sale('2')
        post.assert_not_called()
        self.assertEqual(self.customer.get_credit_balance(), Decimal('80.00'))

    def test_trigger_reached_debits_customer(self):
        captured = mock.Mock(status_code=200)
        captured.json.return_value = {'id': 'pay_789', 'status': 'captured'}
        with mock.patch('shopdesk.parties.services.requests.post', return_value=captured):
            bill = self._credit_sale('3')

        auto_debit = AutoDebitTransaction.objects.get()
        self.assertEqual(auto_debit.status, 'success')
        self.assertEqual(auto_debit.trigger_balance, Decimal('120.00'))
        self.assertEqual(self.customer.get_credit_balance(), Decimal('20.00'))
        self.assertEqual(bill.payment_status, 'pending')

    def test_failed_debit_keeps_bill(self):
        with mock.patch('shopdesk.parties.services.requests.post',
                        side_effect=requests.exceptions.ConnectionError('gateway down')):
            bill = self._credit_sale('3')

        self.assertTrue(Bill.objects.filter(pk=bill.pk).exists())
        self.assertEqual(AutoDebitTransaction.objects.get().status, 'failed')
        self.assertEqual(self.customer.get_credit_balance(), Decimal('120.00'))

    @override_settings(RAZORPAY_KEY_ID='')
    def test_missing_credentials_keep_bill(self):
        bill = self._credit_sale('3')
        self.assertTrue(Bill.objects.filter(pk=bill.pk).exists())
        self.assertFalse(AutoDebitTransaction.objects.exists())
        self.assertEqual(CreditTransaction.objects.get(bill=bill).amount, Decimal('120.00'))
