"""
Test suite for Reports module
Tests: Dashboard summary, sales by product, stock report, shift performance and payroll summary
"""
from django.core.cache import cache
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from decimal import Decimal
from datetime import timedelta
from shopdesk.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from shopdesk.finance.models import Credit, Expense, ExpenseCategory
from shopdesk.hrms.models import Payslip
from shopdesk.inventory import services as inventory_services
from shopdesk.inventory.models import Loss, LowStockAlert
from shopdesk.pos import services as pos_services
from shopdesk.reports import services


class DashboardTests(TestCase):
    """Test the dashboard figures"""

    def setUp(self):
        cache.clear()
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)
        self.store = TestDataFactory.create_store()
        self.product = TestDataFactory.create_product(price=Decimal('100.00'), cost_price=Decimal('60.00'),
                                                      store=self.store)
        self.customer = TestDataFactory.create_customer(credit_limit=Decimal('1000.00'))
        self.today = timezone.localdate()

    def _sell(self, quantity='1', **extra):
        items = [{'product': self.product, 'quantity': Decimal(quantity), 'unit_price': extra.pop('unit_price', None)}]
        return pos_services.checkout(self.store, self.admin, items, **extra)

    def _ring_up_day(self):
        self._sell('2')
        self._sell(payment_method='card')
        self._sell(payment_method='split', payment_breakdown={'cash': Decimal('50.00'), 'upi': Decimal('50.00')})
        self._sell(payment_method='credit', customer=self.customer)
        settled = self._sell(payment_method='credit', customer=self.customer)
        pos_services.settle_bill(settled, 'upi', user=self.admin)
        self._sell(unit_price=Decimal('40.00'))
        pos_services.cancel_bill(self._sell(), user=self.admin)

        Credit.objects.create(store=self.store, amount=Decimal('30.00'), credit_type='given')
        Credit.objects.create(store=self.store, amount=Decimal('100.00'), credit_type='received')
        category = ExpenseCategory.objects.create(value='rent', label='Rent')
        Expense.objects.create(store=self.store, amount=Decimal('500.00'), category=category)

    def test_dashboard_summary(self):
        self._ring_up_day()
        summary = services.dashboard_summary(self.today, self.today, self.store.id)

        self.assertEqual(summary['total_sales'], 6)
        self.assertEqual(summary['total_products'], Decimal('7'))
        self.assertEqual(summary['total_revenue'], Decimal('640.00'))
        self.assertEqual(summary['cash_amount'], Decimal('290.00'))
        self.assertEqual(summary['card_amount'], Decimal('100.00'))
        self.assertEqual(summary['online_amount'], Decimal('150.00'))
        self.assertEqual(summary['gross_profit'], Decimal('240.00'))
        self.assertEqual(summary['total_loss'], Decimal('20.00'))
        self.assertEqual(summary['credit_given'], Decimal('30.00'))
        self.assertEqual(summary['credit_received'], Decimal('100.00'))
        self.assertEqual(summary['credit_balance'], Decimal('70.00'))
        self.assertEqual(summary['net_profit'], Decimal('310.00'))
        self.assertEqual(summary['total_expenses'], Decimal('500.00'))

    def test_payment_split_for_pending_credit(self):
        bill = self._sell(payment_method='credit', customer=self.customer)
        self.assertEqual(services.payment_split(bill), {})

    def test_cost_change_refreshes_cached_summary(self):
        self._sell()
        summary = services.dashboard_summary(self.today, self.today, self.store.id)
        self.assertEqual(summary['gross_profit'], Decimal('40.00'))

        with self.captureOnCommitCallbacks(execute=True):
            self.product.cost_price = Decimal('80.00')
            self.product.save()
        summary = services.dashboard_summary(self.today, self.today, self.store.id)
        self.assertEqual(summary['gross_profit'], Decimal('20.00'))

    def test_dashboard_endpoint(self):
        self._sell('3')
        response = self.client.get('/api/v1/reports/dashboard/', {'store_id': self.store.id})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_revenue'], Decimal('300.00'))
        self.assertEqual(response.data['period']['from'], self.today.isoformat())

    def test_other_store_is_excluded(self):
        self._sell('3')
        other = TestDataFactory.create_store()
        summary = services.dashboard_summary(self.today, self.today, other.id)
        self.assertEqual(summary['total_sales'], 0)

    def test_invalid_period(self):
        response = self.client.get('/api/v1/reports/dashboard/', {
            'date_from': self.today.isoformat(),
            'date_to': (self.today - timedelta(days=1)).isoformat(),
        })
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_sales_by_product(self):
        cheap = TestDataFactory.create_product(price=Decimal('10.00'), store=self.store)
        self._sell('2')
        pos_services.checkout(self.store, self.admin, [{'product': cheap, 'quantity': Decimal('5')}])
        response = self.client.get('/api/v1/reports/sales-by-product/')
        products = response.data['products']
        self.assertEqual(len(products), 2)
        self.assertEqual(products[0]['product__id'], self.product.id)
        self.assertEqual(products[0]['total_revenue'], Decimal('200.00'))
        self.assertEqual(products[1]['total_quantity'], Decimal('5'))

    def test_dashboard_page_required(self):
        client = AuthenticatedAPIClient()
        client.authenticate_user(TestDataFactory.create_user(page_access=['pos']))
        response = client.get('/api/v1/reports/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class StockReportTests(TestCase):
    """Test stock and shift reports"""

    def setUp(self):
        cache.clear()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_admin())
        self.store = TestDataFactory.create_store()
        self.shift = TestDataFactory.create_shift(store=self.store)
        self.product = TestDataFactory.create_product(price=Decimal('10.00'), cost_price=Decimal('6.00'),
                                                      store=self.store)
        self.today = timezone.localdate()
        entry = TestDataFactory.create_stock_entry(self.product, self.store, opening_stock=20, shift=self.shift)
        entry.closing_stock = Decimal('12')
        entry.actual_stock = Decimal('10')
        entry.save()
        Loss.objects.create(product=self.product, store=self.store, shift=self.shift, loss_type='damage',
                            quantity_lost=Decimal('1'), loss_date=self.today)

    def test_stock_report(self):
        response = self.client.get('/api/v1/reports/stock/', {'store_id': self.store.id})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['summary']['units_sold'], Decimal('8'))
        self.assertEqual(response.data['summary']['sales_amount'], Decimal('80.00'))
        self.assertEqual(response.data['summary']['product_loss'], Decimal('12.00'))
        self.assertEqual(response.data['products'][0]['profit'], Decimal('32.00'))
        self.assertEqual(response.data['recorded_losses'], Decimal('1'))

    def test_shift_performance(self):
        response = self.client.get(f'/api/v1/reports/shifts/{self.shift.id}/performance/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_sales'], Decimal('80.00'))
        self.assertEqual(response.data['total_variance'], Decimal('2'))
        self.assertEqual(response.data['total_losses'], Decimal('1'))
        self.assertEqual(response.data['products_count'], 1)

    def test_resolving_alert_refreshes_cached_report(self):
        alert = LowStockAlert.objects.create(product=self.product, store=self.store,
                                             current_stock=Decimal('1'), minimum_threshold=Decimal('5'))
        report = services.stock_report(self.today, self.today, self.store.id)
        self.assertEqual(report['open_low_stock_alerts'], 1)

        with self.captureOnCommitCallbacks(execute=True):
            inventory_services.resolve_low_stock_alert(alert)
        report = services.stock_report(self.today, self.today, self.store.id)
        self.assertEqual(report['open_low_stock_alerts'], 0)


class PayrollSummaryTests(TestCase):
    """Test the payroll report"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user(page_access=['hrms']))

    def test_payroll_summary(self):
        Payslip.objects.create(employee=TestDataFactory.create_employee(), month=3, year=2024,
                               gross_salary=Decimal('1000.00'), net_salary=Decimal('900.00'),
                               other_deductions=Decimal('100.00'), is_final=True)
        Payslip.objects.create(employee=TestDataFactory.create_employee(), month=3, year=2024,
                               gross_salary=Decimal('500.00'), net_salary=Decimal('500.00'))
        response = self.client.get('/api/v1/reports/payroll/', {'month': 3, 'year': 2024})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['employees'], 2)
        self.assertEqual(response.data['total_gross'], Decimal('1500.00'))
        self.assertEqual(response.data['total_deductions'], Decimal('100.00'))
        self.assertEqual(response.data['total_net'], Decimal('1400.00'))
        self.assertEqual(response.data['final'], 1)
        self.assertEqual(response.data['draft'], 1)

    def test_invalid_month(self):
        response = self.client.get('/api/v1/reports/payroll/', {'month': 13})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
