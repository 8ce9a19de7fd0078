"""
Test suite for Inventory module
Tests: Daily stock sheet, availability, bill adjustments, stock requests, losses and low stock alerts
"""
import io
import openpyxl
from django.core.cache import cache
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase
from rest_framework import status
from decimal import Decimal
from datetime import date, datetime, timedelta
from django.utils import timezone
from shopdesk.core.exceptions import BusinessRuleError
from shopdesk.core.models import AuditLog
from shopdesk.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from shopdesk.catalog.models import ReorderPoint
from shopdesk.inventory import services
from shopdesk.inventory.models import StockEntry, StockRequest, StockMovement, Loss, LowStockAlert


class StockEntryModelTests(TestCase):
    """Test the row metrics of a stock sheet row"""

    def setUp(self):
        self.store = TestDataFactory.create_store()
        self.product = TestDataFactory.create_product(price=Decimal('50.00'), cost_price=Decimal('30.00'))

    def test_row_metrics(self):
        entry = TestDataFactory.create_stock_entry(self.product, self.store, opening_stock=10, stock_added=5)
        entry.closing_stock = Decimal('7')
        entry.actual_stock = Decimal('5')
        entry.save()
        self.assertEqual(entry.units_sold, Decimal('3'))
        self.assertEqual(entry.sales_amount, Decimal('150.00'))
        self.assertEqual(entry.profit, Decimal('60.00'))
        self.assertEqual(entry.variance, Decimal('2'))
        self.assertEqual(entry.product_loss, Decimal('60.00'))

    def test_no_loss_without_count(self):
        entry = TestDataFactory.create_stock_entry(self.product, self.store)
        entry.actual_stock = None
        self.assertEqual(entry.variance, Decimal('0'))
        self.assertEqual(entry.product_loss, Decimal('0.00'))


class StockServiceTests(TestCase):
    """Test stock sheet services"""

    def setUp(self):
        cache.clear()
        self.store = TestDataFactory.create_store()
        self.product = TestDataFactory.create_product(store=self.store)
        self.today = timezone.localdate()

    def test_opening_carries_over_from_yesterday_count(self):
        yesterday = TestDataFactory.create_stock_entry(self.product, self.store, opening_stock=20,
                                                       stock_date=self.today - timedelta(days=1))
        yesterday.actual_stock = Decimal('12')
        yesterday.save()
        entry = services.create_stock_entry(self.product, self.store, stock_added=Decimal('3'))
        self.assertEqual(entry.opening_stock, Decimal('12'))
        self.assertEqual(entry.closing_stock, Decimal('15'))
        self.assertEqual(entry.actual_stock, Decimal('15'))

    def test_duplicate_entry_rejected(self):
        services.create_stock_entry(self.product, self.store, opening_stock=5)
        with self.assertRaises(BusinessRuleError):
            services.create_stock_entry(self.product, self.store, opening_stock=5)

    def test_negative_quantities_rejected(self):
        with self.assertRaises(BusinessRuleError):
            services.create_stock_entry(self.product, self.store, opening_stock=Decimal('-1'))

    def test_sale_adjustment_floors_at_zero(self):
        TestDataFactory.create_stock_entry(self.product, self.store, opening_stock=2)
        services.adjust_stock_for_bill([(self.product, Decimal('5'))], self.store, 'sale')
        entry = StockEntry.objects.get(product=self.product, store=self.store, stock_date=self.today)
        self.assertEqual(entry.closing_stock, Decimal('0'))
        self.assertEqual(entry.actual_stock, Decimal('0'))

    def test_return_adjustment_adds_back(self):
        TestDataFactory.create_stock_entry(self.product, self.store, opening_stock=4)
        services.adjust_stock_for_bill([(self.product, Decimal('1.5'))], self.store, 'return')
        entry = StockEntry.objects.get(product=self.product, store=self.store, stock_date=self.today)
        self.assertEqual(entry.closing_stock, Decimal('5.5'))

    def test_unknown_adjustment_kind(self):
        with self.assertRaises(ValueError):
            services.adjust_stock_for_bill([], self.store, 'gift')

    def test_available_for_sale_prefers_count(self):
        entry = TestDataFactory.create_stock_entry(self.product, self.store, opening_stock=10, stock_added=2)
        self.assertEqual(services.available_for_sale(self.product, self.store), Decimal('12'))
        entry.actual_stock = Decimal('7')
        entry.save()
        self.assertEqual(services.available_for_sale(self.product, self.store), Decimal('7'))

    def test_set_actual_stock_creates_row(self):
        entry = services.set_actual_stock(self.product, self.store, '8')
        self.assertEqual(entry.actual_stock, Decimal('8'))
        self.assertEqual(entry.opening_stock, Decimal('0'))


class StockRequestTests(TestCase):
    """Test moving stock between stores"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user(role='lead', page_access=['stock-movements'])
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.source = TestDataFactory.create_store(name='Source')
        self.target = TestDataFactory.create_store(name='Target')
        self.product = TestDataFactory.create_product()

    def _create_request(self, quantity='4'):
        response = self.client.post('/api/v1/stock-requests/', {
            'product': self.product.id,
            'requesting_store': self.target.id,
            'fulfilling_store': self.source.id,
            'requested_quantity': quantity,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        return response.data['id']

    def test_approve_moves_stock(self):
        TestDataFactory.create_stock_entry(self.product, self.source, opening_stock=10)
        request_id = self._create_request('4')

        response = self.client.post(f'/api/v1/stock-requests/{request_id}/approve/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'approved')

        source = StockEntry.objects.get(product=self.product, store=self.source)
        target = StockEntry.objects.get(product=self.product, store=self.target)
        self.assertEqual(source.actual_stock, Decimal('6'))
        self.assertEqual(target.actual_stock, Decimal('4'))
        movement = StockMovement.objects.get(stock_request_id=request_id)
        self.assertEqual(movement.quantity, Decimal('4'))
        self.assertTrue(AuditLog.objects.filter(action='stock_request_approve').exists())

    def test_approve_insufficient_stock(self):
        TestDataFactory.create_stock_entry(self.product, self.source, opening_stock=2)
        request_id = self._create_request('4')
        response = self.client.post(f'/api/v1/stock-requests/{request_id}/approve/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('Insufficient stock', response.data['error'])
        self.assertEqual(StockRequest.objects.get(pk=request_id).status, 'pending')

    def test_reject_then_approve_fails(self):
        request_id = self._create_request()
        response = self.client.post(f'/api/v1/stock-requests/{request_id}/reject/', {'notes': 'No stock'},
                                    format='json')
        self.assertEqual(response.data['status'], 'rejected')
        response = self.client.post(f'/api/v1/stock-requests/{request_id}/approve/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_incoming_filter(self):
        self._create_request()
        response = self.client.get(f'/api/v1/stock-requests/?store_id={self.source.id}&direction=incoming')
        self.assertEqual(len(response.data), 1)
        response = self.client.get(f'/api/v1/stock-requests/?store_id={self.source.id}&direction=outgoing')
        self.assertEqual(len(response.data), 0)


class StockSheetAPITests(TestCase):
    """Test stock sheet and loss endpoints"""

    def setUp(self):
        cache.clear()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_admin())
        self.store = TestDataFactory.create_store()
        self.product = TestDataFactory.create_product(store=self.store, price=Decimal('10.00'),
                                                      cost_price=Decimal('4.00'))

    def test_create_and_summary(self):
        response = self.client.post('/api/v1/stocks/', {
            'product': self.product.id, 'store': self.store.id, 'opening_stock': '10', 'stock_added': '5'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['closing_stock'], '15.000')

        entry = StockEntry.objects.get(pk=response.data['id'])
        entry.closing_stock = Decimal('8')
        entry.save()

        response = self.client.get(f'/api/v1/stocks/summary/?store_id={self.store.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['units_sold'], Decimal('2'))

    def test_batch_create_is_atomic(self):
        other = TestDataFactory.create_product(store=self.store)
        TestDataFactory.create_stock_entry(other, self.store)
        response = self.client.post('/api/v1/stocks/batch/', {
            'store': self.store.id,
            'items': [
                {'product': self.product.id, 'opening_stock': '3'},
                {'product': other.id, 'opening_stock': '3'},
            ],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(StockEntry.objects.filter(product=self.product).exists())

    def test_export_csv(self):
        TestDataFactory.create_stock_entry(self.product, self.store)
        response = self.client.get('/api/v1/stocks/export/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'text/csv')
        self.assertIn(self.product.name, response.content.decode())

    def test_correction_cannot_move_row(self):
        today = timezone.localdate()
        yesterday = TestDataFactory.create_stock_entry(self.product, self.store,
                                                       stock_date=today - timedelta(days=1))
        TestDataFactory.create_stock_entry(self.product, self.store)

        response = self.client.patch(f'/api/v1/stocks/{yesterday.id}/', {'stock_date': today.isoformat()},
                                     format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('stock_date', response.data)

        response = self.client.patch(f'/api/v1/stocks/{yesterday.id}/', {
            'product': self.product.id, 'stock_added': '2'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['closing_stock'], '12.000')
        self.assertEqual(response.data['stock_date'], (today - timedelta(days=1)).isoformat())

    def test_record_loss(self):
        response = self.client.post('/api/v1/losses/', {
            'product': self.product.id, 'store': self.store.id, 'loss_type': 'damage', 'quantity_lost': '2'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['loss_value'], '8.00')

        response = self.client.get('/api/v1/losses/summary/')
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['by_type']['damage']['value'], Decimal('8.00'))
        self.assertEqual(Loss.objects.count(), 1)

    def test_low_stock_alerts(self):
        ReorderPoint.objects.create(product=self.product, store=self.store, minimum_stock=Decimal('5'))
        TestDataFactory.create_stock_entry(self.product, self.store, opening_stock=2)

        response = self.client.post('/api/v1/low-stock-alerts/generate/', {'store_id': self.store.id},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(len(response.data), 1)

        # An open alert is not duplicated
        self.assertEqual(services.generate_low_stock_alerts(self.store), [])

        alert = LowStockAlert.objects.get()
        response = self.client.post(f'/api/v1/low-stock-alerts/{alert.id}/resolve/')
        self.assertTrue(response.data['is_resolved'])
        response = self.client.post(f'/api/v1/low-stock-alerts/{alert.id}/resolve/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class StockImportTests(TestCase):
    """Test bulk stock import from spreadsheets"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_admin())
        self.store = TestDataFactory.create_store(name='Main Street', code='MAIN')
        self.tea = TestDataFactory.create_product(name='Masala Chai', store=self.store)
        self.coffee = TestDataFactory.create_product(name='Filter Coffee', store=self.store)

    def _xlsx(self, rows):
        workbook = openpyxl.Workbook()
        sheet = workbook.active
        sheet.append(['Shop', 'Product', 'Date', 'Opening Stock', 'Stock Added', 'Closing Stock', 'Actual Stock'])
        for row in rows:
            sheet.append(row)
        buffer = io.BytesIO()
        workbook.save(buffer)
        return SimpleUploadedFile('stock.xlsx', buffer.getvalue(),
                                  content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet')

    def test_import_xlsx(self):
        upload = self._xlsx([
            ['main street', 'masala chai', datetime(2024, 3, 4), 10, 5, 8, 7],
            ['MAIN', 'Filter Coffee', '2024-03-04', 8, None, None, None],
            ['Main Street', 'Samosa', '2024-03-04', 4, None, None, None],
        ])
        response = self.client.post('/api/v1/stocks/import/', {'file': upload}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['created'], 2)
        self.assertEqual(response.data['skipped'], [{'row': 4, 'error': 'Unknown product "Samosa"'}])

        tea = StockEntry.objects.get(product=self.tea, stock_date=date(2024, 3, 4))
        self.assertEqual(tea.closing_stock, Decimal('8'))
        self.assertEqual(tea.actual_stock, Decimal('7'))
        self.assertEqual(tea.units_sold, Decimal('2'))
        self.assertEqual(tea.stock_added, Decimal('5'))
        coffee = StockEntry.objects.get(product=self.coffee)
        self.assertEqual(coffee.closing_stock, Decimal('8'))

    def test_import_csv(self):
        content = 'Shop,Product,Date,Opening Stock,Closing Stock\nMain Street,Masala Chai,03/04/2024,6,2\n'
        upload = SimpleUploadedFile('stock.csv', content.encode(), content_type='text/csv')
        response = self.client.post('/api/v1/stocks/import/', {'file': upload}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        entry = StockEntry.objects.get(product=self.tea)
        self.assertEqual(entry.stock_date, date(2024, 3, 4))
        self.assertEqual(entry.actual_stock, Decimal('2'))

    def test_duplicate_row_aborts_import(self):
        TestDataFactory.create_stock_entry(self.coffee, self.store, stock_date=date(2024, 3, 4))
        upload = self._xlsx([
            ['Main Street', 'Masala Chai', '2024-03-04', 10, None, None, None],
            ['Main Street', 'Filter Coffee', '2024-03-04', 10, None, None, None],
        ])
        response = self.client.post('/api/v1/stocks/import/', {'file': upload}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(StockEntry.objects.filter(product=self.tea).exists())

    def test_rejects_other_formats(self):
        upload = SimpleUploadedFile('stock.txt', b'nothing', content_type='text/plain')
        response = self.client.post('/api/v1/stocks/import/', {'file': upload}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_template_download(self):
        response = self.client.get('/api/v1/stocks/import/template/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        workbook = openpyxl.load_workbook(io.BytesIO(response.content))
        self.assertEqual(workbook.active['A1'].value, 'Shop')
