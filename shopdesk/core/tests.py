"""
Test suite for Core module
Tests: Authentication, page permissions, user management, settings and audit logs
"""
from django.core.cache import cache
from django.test import TestCase
from rest_framework import status
from shopdesk.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from shopdesk.core.models import AuditLog, Setting, User
from shopdesk.core.pages import has_page_permission, effective_permissions
from shopdesk.core.cache_utils import cached_query, invalidate_cache_pattern
from shopdesk.core.utils import create_audit_log, parse_date_param
from decimal import Decimal


class PagePermissionTests(TestCase):
    """Test the page access rules"""

    def test_admin_has_every_permission(self):
        admin = TestDataFactory.create_admin()
        self.assertTrue(has_page_permission(admin, 'users', 'delete'))
        self.assertTrue(has_page_permission(admin, 'hrms', 'edit'))

    def test_superuser_has_every_permission(self):
        user = TestDataFactory.create_user(is_superuser=True, page_access=[])
        self.assertTrue(has_page_permission(user, 'settings', 'edit'))

    def test_page_access_grants_view_only(self):
        user = TestDataFactory.create_user(page_access=['products'])
        self.assertTrue(has_page_permission(user, 'products', 'view'))
        self.assertFalse(has_page_permission(user, 'products', 'edit'))
        self.assertFalse(has_page_permission(user, 'stocks', 'view'))

    def test_lead_gets_edit_on_granted_pages(self):
        user = TestDataFactory.create_user(role='lead', page_access=['products'])
        self.assertTrue(has_page_permission(user, 'products', 'edit'))
        self.assertFalse(has_page_permission(user, 'products', 'delete'))

    def test_sales_can_ring_up_sales(self):
        user = TestDataFactory.create_user(role='sales', page_access=['pos', 'products'])
        self.assertTrue(has_page_permission(user, 'pos', 'edit'))
        self.assertFalse(has_page_permission(user, 'products', 'edit'))

    def test_granular_permissions_override_page_access(self):
        user = TestDataFactory.create_user(
            page_access=['products'],
            page_permissions={'products': {'view': True, 'edit': True, 'delete': False}},
        )
        self.assertTrue(has_page_permission(user, 'products', 'edit'))
        self.assertFalse(has_page_permission(user, 'products', 'delete'))

    def test_granular_permissions_can_revoke_view(self):
        user = TestDataFactory.create_user(page_access=['bills'], page_permissions={'bills': {'view': False}})
        self.assertFalse(has_page_permission(user, 'bills', 'view'))

    def test_unsupported_action_is_denied(self):
        user = TestDataFactory.create_user(page_access=['dashboard'],
                                           page_permissions={'dashboard': {'view': True, 'edit': True}})
        self.assertFalse(has_page_permission(user, 'dashboard', 'edit'))

    def test_effective_permissions_lists_visible_pages(self):
        user = TestDataFactory.create_user(page_access=['dashboard', 'pos'], role='sales')
        permissions = effective_permissions(user)
        self.assertEqual(set(permissions), {'dashboard', 'pos'})
        self.assertTrue(permissions['pos']['edit'])


class AuthTests(TestCase):
    """Test registration, login and the current user endpoint"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()

    def test_register_creates_basic_user(self):
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'newcashier',
            'email': 'newcashier@test.com',
            'password': 'Str0ng-pass-123',
            'password_confirm': 'Str0ng-pass-123',
            'role': 'admin',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn('access', response.data)
        user = User.objects.get(username='newcashier')
        self.assertEqual(user.role, 'user')
        self.assertEqual(user.page_access, ['dashboard'])

    def test_register_password_mismatch(self):
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'mismatch',
            'password': 'Str0ng-pass-123',
            'password_confirm': 'Other-pass-456',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_login_returns_tokens_and_user(self):
        TestDataFactory.create_user(username='cashier1', password='testpass123', page_access=['pos'])
        response = self.client.post('/api/v1/auth/login/', {
            'username': 'cashier1', 'password': 'testpass123'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('refresh', response.data)
        self.assertEqual(response.data['user']['username'], 'cashier1')
        self.assertIn('pos', response.data['user']['permissions'])

    def test_login_wrong_password(self):
        TestDataFactory.create_user(username='cashier2', password='testpass123')
        response = self.client.post('/api/v1/auth/login/', {
            'username': 'cashier2', 'password': 'wrong'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_requires_authentication(self):
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_returns_permissions(self):
        user = TestDataFactory.create_user(page_access=['dashboard', 'bills'])
        self.client.authenticate_user(user)
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['is_admin'])
        self.assertEqual(response.data['permissions']['bills'], {'view': True, 'edit': False, 'delete': False})

    def test_page_registry(self):
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.get('/api/v1/pages/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        ids = [page['id'] for page in response.data]
        self.assertIn('hrms', ids)
        self.assertIn('pos', ids)


class UserManagementTests(TestCase):
    """Test admin-only user endpoints"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_non_admin_cannot_list_users(self):
        client = AuthenticatedAPIClient()
        client.authenticate_user(TestDataFactory.create_user(page_access=['users']))
        response = client.get('/api/v1/users/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_create_user(self):
        response = self.client.post('/api/v1/users/', {
            'username': 'lead1',
            'email': 'lead1@test.com',
            'password': 'Str0ng-pass-123',
            'password_confirm': 'Str0ng-pass-123',
            'role': 'lead',
            'page_access': ['dashboard', 'stocks'],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['role'], 'lead')
        self.assertTrue(AuditLog.objects.filter(action='create', model_name='User').exists())

    def test_create_user_rejects_unknown_page(self):
        response = self.client.post('/api/v1/users/', {
            'username': 'bad',
            'password': 'Str0ng-pass-123',
            'password_confirm': 'Str0ng-pass-123',
            'page_access': ['nowhere'],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('page_access', response.data)

    def test_update_page_access(self):
        user = TestDataFactory.create_user()
        response = self.client.put(f'/api/v1/users/{user.id}/page-access/', {
            'page_access': ['dashboard', 'pos', 'customers'],
            'page_permissions': {'customers': {'view': True, 'edit': True}},
            'role': 'sales',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        user.refresh_from_db()
        self.assertEqual(user.role, 'sales')
        self.assertEqual(user.page_access, ['dashboard', 'pos', 'customers'])
        log = AuditLog.objects.get(action='permission_change')
        self.assertEqual(log.changes['before']['role'], 'user')

    def test_page_access_rejects_unknown_action(self):
        user = TestDataFactory.create_user()
        response = self.client.put(f'/api/v1/users/{user.id}/page-access/', {
            'page_access': ['pos'],
            'page_permissions': {'pos': {'approve': True}},
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_admin_cannot_delete_self(self):
        response = self.client.delete(f'/api/v1/users/{self.admin.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_user(self):
        user = TestDataFactory.create_user()
        response = self.client.delete(f'/api/v1/users/{user.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(User.objects.filter(pk=user.id).exists())


class SettingAndAuditTests(TestCase):
    """Test settings and audit log endpoints"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_create_and_read_setting(self):
        response = self.client.post('/api/v1/settings/', {
            'key': 'overtime_multiplier', 'value': '2.0'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Setting.get_value('overtime_multiplier'), '2.0')
        self.assertEqual(Setting.get_value('missing', 'fallback'), 'fallback')

    def test_non_admin_sees_only_own_audit_logs(self):
        user = TestDataFactory.create_user()
        create_audit_log(user=user, action='update', model_name='Product', object_id='1')
        create_audit_log(user=self.admin, action='delete', model_name='Product', object_id='2')

        client = AuthenticatedAPIClient()
        client.authenticate_user(user)
        response = client.get('/api/v1/audit-logs/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

        response = self.client.get('/api/v1/audit-logs/?action=delete')
        self.assertEqual(len(response.data), 1)

    def test_audit_log_skipped_without_object_id(self):
        self.assertIsNone(create_audit_log(user=self.admin, action='update', model_name='Product'))


class UtilsTests(TestCase):
    """Test helpers shared by the apps"""

    def setUp(self):
        cache.clear()

    def test_parse_date_param(self):
        self.assertEqual(parse_date_param('2024-03-05').isoformat(), '2024-03-05')
        self.assertIsNone(parse_date_param('05/03/2024'))
        self.assertIsNone(parse_date_param(None))

    def test_cached_query_and_invalidation(self):
        calls = []

        @cached_query(cache_ttl=60, key_prefix='unit_test_report')
        def report(value):
            calls.append(value)
            return {'value': value}

        self.assertEqual(report(1), {'value': 1})
        self.assertEqual(report(1), {'value': 1})
        self.assertEqual(len(calls), 1)

        invalidate_cache_pattern('unit_test_report')
        report(1)
        self.assertEqual(len(calls), 2)
