from django.contrib import admin
from .models import Product, ProductShop, ReorderPoint


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['name', 'sku', 'category', 'price', 'cost_price', 'is_active', 'created_at']
    list_filter = ['category', 'is_active']
    search_fields = ['name', 'sku', 'category']
    ordering = ['name']


@admin.register(ProductShop)
class ProductShopAdmin(admin.ModelAdmin):
    list_display = ['product', 'store', 'created_at']
    list_filter = ['store']
    search_fields = ['product__name', 'store__name']


@admin.register(ReorderPoint)
class ReorderPointAdmin(admin.ModelAdmin):
    list_display = ['product', 'store', 'minimum_stock', 'reorder_quantity']
    list_filter = ['store']
    search_fields = ['product__name']
