from django.conf import settings
from django.db import models
from django.utils import timezone
from decimal import Decimal


DEFAULT_EXPENSE_CATEGORIES = [
    ('rent', 'Rent'),
    ('utilities', 'Utilities'),
    ('inventory', 'Inventory'),
    ('salaries', 'Salaries'),
    ('marketing', 'Marketing'),
    ('equipment', 'Equipment'),
    ('maintenance', 'Maintenance'),
    ('transportation', 'Transportation'),
    ('taxes', 'Taxes'),
    ('insurance', 'Insurance'),
    ('office_supplies', 'Office Supplies'),
    ('other', 'Other'),
]


class ExpenseCategory(models.Model):
    value = models.SlugField(max_length=50, unique=True)
    label = models.CharField(max_length=100)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.label

    class Meta:
        db_table = 'expense_categories'
        ordering = ['label']
        verbose_name_plural = 'expense categories'


class Expense(models.Model):
    """Shop expenses"""
    PAYMENT_METHOD_CHOICES = [
        ('cash', 'Cash'),
        ('card', 'Card'),
        ('upi', 'UPI'),
        ('bank_transfer', 'Bank Transfer'),
        ('other', 'Other'),
    ]

    store = models.ForeignKey('locations.Store', on_delete=models.SET_NULL, null=True, blank=True, related_name='expenses')
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    category = models.ForeignKey(ExpenseCategory, on_delete=models.PROTECT, related_name='expenses')
    description = models.TextField(blank=True)
    expense_date = models.DateField(default=timezone.localdate)
    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHOD_CHOICES, default='cash')
    receipt_url = models.URLField(max_length=500, blank=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='expenses')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.category.label}: {self.amount} on {self.expense_date}"

    class Meta:
        db_table = 'expenses'
        ordering = ['-expense_date', '-created_at']
        indexes = [
            models.Index(fields=['store', 'expense_date'], name='idx_expense_store_date'),
        ]


class Credit(models.Model):
    """
    Store money ledger. ``given``/``received`` are credit entries; the
    ``cash``/``card``/``online``/``discount`` rows hold a store's daily takings.
    """
    CREDIT_TYPE_CHOICES = [
        ('given', 'Given'),
        ('received', 'Received'),
        ('cash', 'Cash'),
        ('card', 'Card'),
        ('online', 'Online'),
        ('discount', 'Discount'),
    ]
    DAILY_TYPES = ('cash', 'card', 'online', 'discount')

    store = models.ForeignKey('locations.Store', on_delete=models.SET_NULL, null=True, blank=True, related_name='credits')
    amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    credit_type = models.CharField(max_length=20, choices=CREDIT_TYPE_CHOICES)
    credit_date = models.DateField(default=timezone.localdate)
    description = models.TextField(blank=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='credits')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.get_credit_type_display()} {self.amount} on {self.credit_date}"

    class Meta:
        db_table = 'credits'
        ordering = ['-credit_date', '-created_at']
        indexes = [
            models.Index(fields=['store', 'credit_date', 'credit_type'], name='idx_credit_store_date_type'),
        ]
