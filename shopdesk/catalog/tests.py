"""
Test suite for Catalog module
Tests: Products, store assignment, reorder points and delete protection
"""
from django.test import TestCase
from rest_framework import status
from decimal import Decimal
from shopdesk.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from shopdesk.core.models import AuditLog
from shopdesk.catalog.models import Product, ProductShop
from shopdesk.inventory.models import StockEntry
from shopdesk.pos.services import checkout


class ProductAPITests(TestCase):
    """Test product endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user(role='lead', page_access=['products', 'stocks'])
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.store = TestDataFactory.create_store()

    def test_create_product(self):
        response = self.client.post('/api/v1/products/', {
            'name': 'Masala Tea', 'sku': '', 'category': 'Beverages', 'price': '20.00', 'cost_price': '8.00'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['margin'], '12.00')
        self.assertIsNone(Product.objects.get(name='Masala Tea').sku)

    def test_negative_price_rejected(self):
        response = self.client.post('/api/v1/products/', {'name': 'Bad', 'price': '-1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('price', response.data)

    def test_search_matches_every_word(self):
        TestDataFactory.create_product(name='Veg Sandwich', category='Snacks')
        TestDataFactory.create_product(name='Veg Burger', category='Snacks')
        response = self.client.get('/api/v1/products/', {'search': 'veg sand'})
        self.assertEqual([p['name'] for p in response.data], ['Veg Sandwich'])

    def test_filter_by_store(self):
        assigned = TestDataFactory.create_product(name='Coffee', store=self.store)
        TestDataFactory.create_product(name='Juice')
        response = self.client.get(f'/api/v1/products/?store={self.store.id}')
        self.assertEqual([p['id'] for p in response.data], [assigned.id])
        self.assertEqual(response.data[0]['store_ids'], [self.store.id])

    def test_price_change_is_audited(self):
        product = TestDataFactory.create_product(price=Decimal('10.00'))
        response = self.client.patch(f'/api/v1/products/{product.id}/', {'price': '12.50'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        log = AuditLog.objects.get(model_name='Product', action='update')
        self.assertEqual(log.changes['price'], {'old': '10.00', 'new': '12.50'})

    def test_lead_cannot_delete(self):
        product = TestDataFactory.create_product()
        response = self.client.delete(f'/api/v1/products/{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_delete_assigned_product_is_blocked(self):
        admin_client = AuthenticatedAPIClient()
        admin_client.authenticate_user(TestDataFactory.create_admin())
        product = TestDataFactory.create_product(store=self.store)
        response = admin_client.delete(f'/api/v1/products/{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('assigned', response.data['error'])

        ProductShop.objects.filter(product=product).delete()
        response = admin_client.delete(f'/api/v1/products/{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

    def test_delete_guards_run_in_order(self):
        admin = TestDataFactory.create_admin()
        admin_client = AuthenticatedAPIClient()
        admin_client.authenticate_user(admin)
        product = TestDataFactory.create_product(store=self.store)
        TestDataFactory.create_stock_entry(product, self.store, opening_stock=5)
        checkout(self.store, admin, [{'product': product, 'quantity': Decimal('1')}])

        response = admin_client.delete(f'/api/v1/products/{product.id}/')
        self.assertIn('assigned to one or more stores', response.data['error'])

        ProductShop.objects.filter(product=product).delete()
        response = admin_client.delete(f'/api/v1/products/{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('has stock entries', response.data['error'])

        StockEntry.objects.filter(product=product).delete()
        response = admin_client.delete(f'/api/v1/products/{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('has sales history', response.data['error'])
        self.assertTrue(Product.objects.filter(pk=product.pk).exists())

    def test_categories(self):
        TestDataFactory.create_product(category='Snacks')
        TestDataFactory.create_product(category='Snacks')
        TestDataFactory.create_product(category='Beverages')
        response = self.client.get('/api/v1/products/categories/')
        self.assertEqual(response.data, ['Beverages', 'Snacks'])


class StoreAssignmentTests(TestCase):
    """Test assigning products to stores"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_admin())
        self.store = TestDataFactory.create_store()

    def test_assign_products(self):
        first = TestDataFactory.create_product()
        second = TestDataFactory.create_product()
        response = self.client.post(f'/api/v1/stores/{self.store.id}/products/', {
            'product_ids': [first.id, second.id]
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(len(response.data), 2)

        # Assigning again is a no-op
        self.client.post(f'/api/v1/stores/{self.store.id}/products/', {'product_ids': [first.id]}, format='json')
        self.assertEqual(ProductShop.objects.filter(store=self.store).count(), 2)

    def test_assign_unknown_product(self):
        response = self.client.post(f'/api/v1/stores/{self.store.id}/products/', {
            'product_ids': [999999]
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_remove_assignment(self):
        product = TestDataFactory.create_product(store=self.store)
        response = self.client.delete(f'/api/v1/stores/{self.store.id}/products/{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(ProductShop.objects.filter(product=product).exists())

    def test_reorder_point(self):
        product = TestDataFactory.create_product(store=self.store)
        response = self.client.post('/api/v1/reorder-points/', {
            'product': product.id, 'store': self.store.id, 'minimum_stock': '5', 'reorder_quantity': '20'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['product_name'], product.name)
