from django.contrib import admin
from .models import StockEntry, StockRequest, StockMovement, Loss, LowStockAlert


@admin.register(StockEntry)
class StockEntryAdmin(admin.ModelAdmin):
    list_display = ['stock_date', 'product', 'store', 'opening_stock', 'stock_added', 'closing_stock', 'actual_stock']
    list_filter = ['store', 'stock_date']
    search_fields = ['product__name', 'store__name', 'operator_name']
    ordering = ['-stock_date']


@admin.register(StockRequest)
class StockRequestAdmin(admin.ModelAdmin):
    list_display = ['id', 'product', 'requesting_store', 'fulfilling_store', 'requested_quantity', 'status', 'request_date']
    list_filter = ['status', 'request_date']
    search_fields = ['product__name']
    readonly_fields = ['response_date', 'responded_by']


@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    list_display = ['movement_date', 'product', 'from_store', 'to_store', 'quantity', 'movement_type', 'status']
    list_filter = ['movement_type', 'status']
    search_fields = ['product__name']


@admin.register(Loss)
class LossAdmin(admin.ModelAdmin):
    list_display = ['loss_date', 'product', 'store', 'loss_type', 'quantity_lost', 'operator_name']
    list_filter = ['loss_type', 'store']
    search_fields = ['product__name', 'reason']


@admin.register(LowStockAlert)
class LowStockAlertAdmin(admin.ModelAdmin):
    list_display = ['alert_date', 'product', 'store', 'current_stock', 'minimum_threshold', 'is_resolved']
    list_filter = ['is_resolved', 'store']
