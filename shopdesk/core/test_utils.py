"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from shopdesk.locations.models import Store
from shopdesk.catalog.models import Product, ProductShop
from shopdesk.inventory.models import StockEntry
from shopdesk.parties.models import Customer
from shopdesk.hrms.models import Employee, Shift
from decimal import Decimal
from datetime import time
from django.utils import timezone
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', role='user', page_access=None,
                    page_permissions=None, is_superuser=False, **extra):
        """Create a test user"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        user = User.objects.create_user(
            username=username,
            email=email,
            password=password,
            role=role,
            page_access=page_access if page_access is not None else ['dashboard'],
            page_permissions=page_permissions or {},
            is_superuser=is_superuser,
            **extra
        )
        return user

    @staticmethod
    def create_admin(username=None):
        """Create a user with the admin role"""
        return TestDataFactory.create_user(username=username, role='admin')

    @staticmethod
    def create_store(name=None, code=None, latitude=None, longitude=None, geo_fence_radius=100):
        """Create a test store"""
        if not name:
            name = f'Store_{TestDataFactory.random_string(6)}'
        if not code:
            code = f'ST{TestDataFactory.random_string(6).upper()}'
        return Store.objects.create(
            name=name,
            code=code,
            address=f'Test Address {name}',
            phone='1234567890',
            latitude=latitude,
            longitude=longitude,
            geo_fence_radius=geo_fence_radius,
        )

    @staticmethod
    def create_product(name=None, price=Decimal('50.00'), cost_price=Decimal('30.00'), store=None, **extra):
        """Create a test product, optionally assigned to a store"""
        if not name:
            name = f'Product_{TestDataFactory.random_string(6)}'
        product = Product.objects.create(
            name=name,
            sku=f'SKU_{TestDataFactory.random_string(8)}',
            price=price,
            cost_price=cost_price,
            **extra
        )
        if store is not None:
            ProductShop.objects.create(product=product, store=store)
        return product

    @staticmethod
    def create_stock_entry(product, store, opening_stock=Decimal('10'), stock_added=Decimal('0'),
                           stock_date=None, **extra):
        """Create a stock sheet row with closing = opening + added"""
        opening_stock = Decimal(str(opening_stock))
        stock_added = Decimal(str(stock_added))
        return StockEntry.objects.create(
            product=product,
            store=store,
            stock_date=stock_date or timezone.localdate(),
            opening_stock=opening_stock,
            stock_added=stock_added,
            closing_stock=opening_stock + stock_added,
            **extra
        )

    @staticmethod
    def create_customer(name=None, phone=None, credit_limit=Decimal('0.00')):
        """Create a test customer"""
        if not name:
            name = f'Customer_{TestDataFactory.random_string(6)}'
        if not phone:
            phone = f'9{random.randint(100000000, 999999999)}'
        return Customer.objects.create(
            name=name,
            phone=phone,
            credit_limit=credit_limit,
        )

    @staticmethod
    def create_employee(first_name=None, hourly_rate=Decimal('100.00'), user=None, **extra):
        """Create a test employee"""
        if not first_name:
            first_name = f'Emp{TestDataFactory.random_string(6)}'
        return Employee.objects.create(
            first_name=first_name,
            last_name='Test',
            email=f'{first_name.lower()}@staff.test',
            hourly_rate=hourly_rate,
            user=user,
            **extra
        )

    @staticmethod
    def create_shift(name='Morning', start=time(9, 0), end=time(17, 0), break_duration=60, store=None, **extra):
        """Create a test shift"""
        return Shift.objects.create(
            shift_name=name,
            start_time=start,
            end_time=end,
            break_duration=break_duration,
            store=store,
            **extra
        )


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
