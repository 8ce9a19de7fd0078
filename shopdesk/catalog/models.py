from django.conf import settings
from django.db import models
from decimal import Decimal


class Product(models.Model):
    """Sellable product/menu item"""
    name = models.CharField(max_length=255)
    sku = models.CharField(max_length=100, unique=True, null=True, blank=True)
    category = models.CharField(max_length=100, blank=True)
    description = models.TextField(blank=True)
    price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    cost_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    quantity = models.DecimalField(max_digits=10, decimal_places=3, default=Decimal('0.000'), help_text="Default stock quantity for new entries")
    is_active = models.BooleanField(default=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='created_products')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'products'
        ordering = ['name']
        indexes = [
            models.Index(fields=['category'], name='idx_product_category'),
            models.Index(fields=['name'], name='idx_product_name'),
        ]

    @property
    def margin(self):
        return self.price - self.cost_price

    def delete_blocker(self):
        """Return the reason this product cannot be deleted, or None"""
        if self.store_assignments.exists():
            return f'Cannot delete "{self.name}" because it is assigned to one or more stores. Please remove it from all stores first.'
        if self.stock_entries.exists():
            return f'Cannot delete "{self.name}" because it has stock entries. Please remove all stock entries first.'
        if self.bill_items.exists():
            return f'Cannot delete "{self.name}" because it has sales history. Products with sales records cannot be deleted.'
        return None


class ProductShop(models.Model):
    """Product assigned to (sold in) a store"""
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='store_assignments')
    store = models.ForeignKey('locations.Store', on_delete=models.CASCADE, related_name='product_assignments')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.product.name} @ {self.store.name}"

    class Meta:
        db_table = 'product_shops'
        unique_together = ['product', 'store']


class ReorderPoint(models.Model):
    """Minimum stock level per product and store"""
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='reorder_points')
    store = models.ForeignKey('locations.Store', on_delete=models.CASCADE, related_name='reorder_points')
    minimum_stock = models.DecimalField(max_digits=10, decimal_places=3, default=Decimal('0.000'))
    reorder_quantity = models.DecimalField(max_digits=10, decimal_places=3, default=Decimal('0.000'))
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.product.name} @ {self.store.name} (min {self.minimum_stock})"

    class Meta:
        db_table = 'reorder_points'
        unique_together = ['product', 'store']
