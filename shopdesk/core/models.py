from django.contrib.auth.models import AbstractUser
from django.db import models


def default_page_access():
    return ['dashboard']


class User(AbstractUser):
    """Extended user model with role and page access"""
    ROLE_CHOICES = [
        ('admin', 'Admin'),
        ('user', 'User'),
        ('sales', 'Sales'),
        ('lead', 'Lead'),
    ]

    phone = models.CharField(max_length=20, blank=True, null=True)
    full_name = models.CharField(max_length=200, blank=True)
    code = models.CharField(max_length=50, blank=True, help_text="Short staff code used on bill numbers")
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default='user')
    page_access = models.JSONField(default=default_page_access, blank=True)
    page_permissions = models.JSONField(default=dict, blank=True, help_text="{page: {view, edit, delete}}")
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'users'

    @property
    def display_name(self):
        return self.full_name or self.get_full_name() or self.username

    @property
    def is_admin_role(self):
        return self.role == 'admin' or self.is_superuser


class Setting(models.Model):
    """System settings"""
    key = models.CharField(max_length=100, unique=True)
    value = models.TextField()
    description = models.TextField(blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.key

    class Meta:
        db_table = 'settings'

    @classmethod
    def get_value(cls, key, default=None):
        setting = cls.objects.filter(key=key).first()
        return setting.value if setting else default


class AuditLog(models.Model):
    """Audit log for critical operations"""
    ACTION_CHOICES = [
        ('create', 'Create'),
        ('update', 'Update'),
        ('delete', 'Delete'),
        ('permission_change', 'Permission Change'),
        ('bill_checkout', 'Bill Checkout'),
        ('bill_update', 'Bill Updated'),
        ('bill_cancel', 'Bill Cancelled'),
        ('bill_settle', 'Bill Settled'),
        ('stock_adjust', 'Stock Adjustment'),
        ('stock_request_approve', 'Stock Request Approved'),
        ('stock_request_reject', 'Stock Request Rejected'),
        ('credit_payment', 'Credit Payment'),
        ('auto_debit', 'Auto Debit'),
        ('leave_approve', 'Leave Approved'),
        ('leave_reject', 'Leave Rejected'),
        ('payslip_generate', 'Payslip Generated'),
        ('payslip_finalize', 'Payslip Finalized'),
        ('day_closing', 'Day Closing'),
    ]

    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='audit_logs')
    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    model_name = models.CharField(max_length=100)
    object_id = models.CharField(max_length=100)
    object_name = models.CharField(max_length=255, blank=True, null=True, help_text="Human-readable name of the object (e.g., product name, bill number)")
    object_reference = models.CharField(max_length=255, blank=True, null=True, help_text="Reference identifier (e.g., bill number, request id)")
    changes = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='idx_audit_created'),
            models.Index(fields=['action'], name='idx_audit_action'),
            models.Index(fields=['model_name'], name='idx_audit_model'),
            models.Index(fields=['object_reference'], name='idx_audit_reference'),
        ]
