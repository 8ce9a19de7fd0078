from django.conf import settings
from django.db import models
from django.utils import timezone
from decimal import Decimal

ZERO_QTY = Decimal('0.000')


class StockEntry(models.Model):
    """
    Daily stock sheet row for one product in one store.

    closing_stock is the book figure (opening + added - sold) and
    actual_stock the physically counted figure; their difference is the
    day's unexplained loss.
    """
    product = models.ForeignKey('catalog.Product', on_delete=models.PROTECT, related_name='stock_entries')
    store = models.ForeignKey('locations.Store', on_delete=models.PROTECT, related_name='stock_entries')
    stock_date = models.DateField(default=timezone.localdate)
    opening_stock = models.DecimalField(max_digits=10, decimal_places=3, default=ZERO_QTY)
    stock_added = models.DecimalField(max_digits=10, decimal_places=3, default=ZERO_QTY)
    closing_stock = models.DecimalField(max_digits=10, decimal_places=3, default=ZERO_QTY)
    actual_stock = models.DecimalField(max_digits=10, decimal_places=3, null=True, blank=True)
    operator_name = models.CharField(max_length=200, blank=True)
    shift = models.ForeignKey('hrms.Shift', on_delete=models.SET_NULL, null=True, blank=True, related_name='stock_entries')
    cash_received = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    online_received = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='stock_entries')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'stocks'
        ordering = ['-stock_date', 'product__name']
        unique_together = ['product', 'store', 'stock_date']
        indexes = [
            models.Index(fields=['store', 'stock_date'], name='idx_stock_store_date'),
            models.Index(fields=['product', 'stock_date'], name='idx_stock_product_date'),
        ]

    def __str__(self):
        return f"{self.product.name} @ {self.store.name} on {self.stock_date}"

    # Row metrics
    @property
    def units_sold(self):
        return self.opening_stock - self.closing_stock

    @property
    def sales_amount(self):
        return self.units_sold * self.product.price

    @property
    def profit(self):
        return self.units_sold * (self.product.price - self.product.cost_price)

    @property
    def variance(self):
        if self.actual_stock is None:
            return ZERO_QTY
        return self.closing_stock - self.actual_stock

    @property
    def product_loss(self):
        if self.actual_stock is None:
            return Decimal('0.00')
        return max(ZERO_QTY, self.variance) * self.product.cost_price


class StockRequest(models.Model):
    """A store asking another store for stock"""
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('approved', 'Approved'),
        ('rejected', 'Rejected'),
    ]

    product = models.ForeignKey('catalog.Product', on_delete=models.CASCADE, related_name='stock_requests')
    requesting_store = models.ForeignKey('locations.Store', on_delete=models.CASCADE, related_name='outgoing_stock_requests')
    fulfilling_store = models.ForeignKey('locations.Store', on_delete=models.CASCADE, related_name='incoming_stock_requests')
    requested_quantity = models.DecimalField(max_digits=10, decimal_places=3)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    request_date = models.DateTimeField(default=timezone.now)
    response_date = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='stock_requests')
    responded_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='responded_stock_requests')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'stock_requests'
        ordering = ['-request_date']
        indexes = [
            models.Index(fields=['status'], name='idx_stock_request_status'),
        ]

    def __str__(self):
        return f"Request #{self.pk}: {self.requested_quantity} x {self.product.name}"


class StockMovement(models.Model):
    """Ledger of stock moved between stores"""
    MOVEMENT_TYPE_CHOICES = [
        ('transfer', 'Transfer'),
        ('adjustment', 'Adjustment'),
    ]
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('completed', 'Completed'),
        ('cancelled', 'Cancelled'),
    ]

    product = models.ForeignKey('catalog.Product', on_delete=models.CASCADE, related_name='stock_movements')
    from_store = models.ForeignKey('locations.Store', on_delete=models.SET_NULL, null=True, blank=True, related_name='outgoing_movements')
    to_store = models.ForeignKey('locations.Store', on_delete=models.SET_NULL, null=True, blank=True, related_name='incoming_movements')
    quantity = models.DecimalField(max_digits=10, decimal_places=3)
    movement_type = models.CharField(max_length=20, choices=MOVEMENT_TYPE_CHOICES, default='transfer')
    movement_date = models.DateField(default=timezone.localdate)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='completed')
    stock_request = models.ForeignKey(StockRequest, on_delete=models.SET_NULL, null=True, blank=True, related_name='movements')
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='stock_movements')
    approved_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='approved_stock_movements')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'stock_movements'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.movement_type} {self.quantity} x {self.product.name}"


class Loss(models.Model):
    """Recorded stock loss (theft, damage, expiry...)"""
    LOSS_TYPE_CHOICES = [
        ('theft', 'Theft'),
        ('damage', 'Damage'),
        ('expiry', 'Expiry'),
        ('spillage', 'Spillage'),
        ('breakage', 'Breakage'),
        ('other', 'Other'),
    ]

    product = models.ForeignKey('catalog.Product', on_delete=models.CASCADE, related_name='losses')
    store = models.ForeignKey('locations.Store', on_delete=models.CASCADE, related_name='losses')
    shift = models.ForeignKey('hrms.Shift', on_delete=models.SET_NULL, null=True, blank=True, related_name='losses')
    loss_type = models.CharField(max_length=20, choices=LOSS_TYPE_CHOICES)
    quantity_lost = models.DecimalField(max_digits=10, decimal_places=3)
    reason = models.TextField(blank=True)
    operator_name = models.CharField(max_length=200, blank=True)
    loss_date = models.DateField(default=timezone.localdate)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='recorded_losses')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'losses'
        ordering = ['-loss_date', '-created_at']

    def __str__(self):
        return f"{self.get_loss_type_display()}: {self.quantity_lost} x {self.product.name}"

    @property
    def loss_value(self):
        return self.quantity_lost * self.product.cost_price


class LowStockAlert(models.Model):
    product = models.ForeignKey('catalog.Product', on_delete=models.CASCADE, related_name='low_stock_alerts')
    store = models.ForeignKey('locations.Store', on_delete=models.CASCADE, related_name='low_stock_alerts')
    current_stock = models.DecimalField(max_digits=10, decimal_places=3)
    minimum_threshold = models.DecimalField(max_digits=10, decimal_places=3)
    alert_date = models.DateField(default=timezone.localdate)
    is_resolved = models.BooleanField(default=False)
    resolved_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'low_stock_alerts'
        ordering = ['is_resolved', '-alert_date']

    def __str__(self):
        return f"Low stock: {self.product.name} @ {self.store.name}"
