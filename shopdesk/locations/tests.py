"""
Test suite for Locations module
Tests: Store CRUD, geo-fence helpers and delete protection
"""
from django.test import TestCase
from rest_framework import status
from decimal import Decimal
from shopdesk.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from shopdesk.locations.models import Store, haversine_distance


class StoreModelTests(TestCase):
    """Test Store geo helpers"""

    def test_haversine_distance(self):
        # One degree of latitude is roughly 111 km
        distance = haversine_distance(12.0, 77.0, 13.0, 77.0)
        self.assertAlmostEqual(distance / 1000, 111.19, places=1)

    def test_store_without_location_accepts_any_point(self):
        store = TestDataFactory.create_store()
        self.assertFalse(store.has_location())
        self.assertTrue(store.is_within_geo_fence(Decimal('10.0'), Decimal('10.0')))

    def test_geo_fence(self):
        store = TestDataFactory.create_store(latitude=Decimal('12.971600'), longitude=Decimal('77.594600'),
                                             geo_fence_radius=200)
        self.assertTrue(store.is_within_geo_fence(Decimal('12.972000'), Decimal('77.594600')))
        self.assertFalse(store.is_within_geo_fence(Decimal('12.990000'), Decimal('77.594600')))


class StoreAPITests(TestCase):
    """Test store endpoints"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_create_store_uppercases_code(self):
        response = self.client.post('/api/v1/stores/', {
            'name': 'Main Street', 'code': 'main1', 'shop_type': 'restaurant'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['code'], 'MAIN1')

    def test_list_filters(self):
        TestDataFactory.create_store(name='Alpha')
        closed = TestDataFactory.create_store(name='Beta')
        closed.is_active = False
        closed.save()
        response = self.client.get('/api/v1/stores/?active=true')
        self.assertEqual([store['name'] for store in response.data], ['Alpha'])
        response = self.client.get('/api/v1/stores/?search=bet')
        self.assertEqual(len(response.data), 1)

    def test_view_only_user_cannot_create(self):
        client = AuthenticatedAPIClient()
        client.authenticate_user(TestDataFactory.create_user(page_access=['shops']))
        self.assertEqual(client.get('/api/v1/stores/').status_code, status.HTTP_200_OK)
        response = client.post('/api/v1/stores/', {'name': 'X', 'code': 'X'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_delete_store_with_stock_is_blocked(self):
        store = TestDataFactory.create_store()
        product = TestDataFactory.create_product(store=store)
        TestDataFactory.create_stock_entry(product, store)
        response = self.client.delete(f'/api/v1/stores/{store.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('stock entries', response.data['error'])

    def test_delete_empty_store(self):
        store = TestDataFactory.create_store()
        response = self.client.delete(f'/api/v1/stores/{store.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Store.objects.filter(pk=store.id).exists())
