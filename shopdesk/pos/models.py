from django.conf import settings
from django.db import models
from django.utils import timezone
from decimal import Decimal


def denominations_total(denominations):
    """Sum of note value x count for a ``{"500": 2, "100": 3}`` mapping"""
    total = Decimal('0.00')
    for note, count in (denominations or {}).items():
        total += Decimal(str(note)) * int(count or 0)
    return total


class Bill(models.Model):
    """POS bills"""
    PAYMENT_METHOD_CHOICES = [
        ('cash', 'Cash'),
        ('card', 'Card'),
        ('upi', 'UPI'),
        ('credit', 'Credit'),
        ('pending', 'Pending'),
        ('split', 'Split'),
    ]

    PAYMENT_STATUS_CHOICES = [
        ('completed', 'Completed'),
        ('pending', 'Pending'),
        ('cancelled', 'Cancelled'),
    ]

    bill_number = models.CharField(max_length=100, unique=True)
    store = models.ForeignKey('locations.Store', on_delete=models.PROTECT, related_name='bills')
    customer = models.ForeignKey('parties.Customer', on_delete=models.PROTECT, null=True, blank=True, related_name='bills')
    bill_date = models.DateTimeField(default=timezone.now)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHOD_CHOICES, default='cash')
    payment_status = models.CharField(max_length=20, choices=PAYMENT_STATUS_CHOICES, default='completed')
    payment_breakdown = models.JSONField(default=dict, blank=True, help_text='Split payments, e.g. {"cash": 100, "upi": 50}')
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name='bills')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.bill_number

    class Meta:
        db_table = 'bills'
        ordering = ['-bill_date']
        indexes = [
            models.Index(fields=['store', 'bill_date'], name='idx_bill_store_date'),
            models.Index(fields=['payment_status'], name='idx_bill_status'),
            models.Index(fields=['created_by', 'bill_date'], name='idx_bill_user_date'),
        ]


class BillItem(models.Model):
    """Bill line items; product_name is kept so receipts survive renames"""
    bill = models.ForeignKey(Bill, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey('catalog.Product', on_delete=models.PROTECT, related_name='bill_items')
    product_name = models.CharField(max_length=200)
    quantity = models.DecimalField(max_digits=10, decimal_places=3)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    total_price = models.DecimalField(max_digits=12, decimal_places=2)

    def __str__(self):
        return f"{self.product_name} x {self.quantity}"

    class Meta:
        db_table = 'bill_items'
        ordering = ['id']
        indexes = [
            models.Index(fields=['bill', 'product'], name='idx_billitem_bill_product'),
        ]


class DenominationCount(models.Model):
    """Cash drawer count for a store terminal on a day"""
    store = models.ForeignKey('locations.Store', on_delete=models.CASCADE, related_name='denomination_counts')
    count_date = models.DateField(default=timezone.localdate)
    terminal_id = models.CharField(max_length=50, blank=True)
    denominations = models.JSONField(default=dict, blank=True)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    counted_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='denomination_counts')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def save(self, *args, **kwargs):
        self.total_amount = denominations_total(self.denominations)
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.store.name} {self.count_date}: {self.total_amount}"

    class Meta:
        db_table = 'store_denominations'
        ordering = ['-count_date']
        unique_together = ['store', 'count_date', 'terminal_id']


class DayClosing(models.Model):
    """End of day cash reconciliation for a store"""
    store = models.ForeignKey('locations.Store', on_delete=models.CASCADE, related_name='day_closings')
    closing_date = models.DateField(default=timezone.localdate)
    opening_denominations = models.JSONField(default=dict, blank=True)
    closing_denominations = models.JSONField(default=dict, blank=True)
    total_cash_sales = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total_change_given = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    variance_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    notes = models.TextField(blank=True)
    closed_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name='day_closings')
    closed_at = models.DateTimeField(default=timezone.now)
    created_at = models.DateTimeField(auto_now_add=True)

    @property
    def opening_total(self):
        return denominations_total(self.opening_denominations)

    @property
    def closing_total(self):
        return denominations_total(self.closing_denominations)

    @property
    def expected_cash(self):
        return self.opening_total + self.total_cash_sales - self.total_change_given

    def __str__(self):
        return f"{self.store.name} closing {self.closing_date}"

    class Meta:
        db_table = 'store_day_closing'
        ordering = ['-closing_date']
        unique_together = ['store', 'closing_date']
