from django.contrib import admin
from .models import Bill, BillItem, DenominationCount, DayClosing


class BillItemInline(admin.TabularInline):
    model = BillItem
    extra = 0
    readonly_fields = ['product', 'product_name', 'quantity', 'unit_price', 'total_price']


@admin.register(Bill)
class BillAdmin(admin.ModelAdmin):
    list_display = ['bill_number', 'store', 'customer', 'bill_date', 'total_amount', 'payment_method', 'payment_status']
    list_filter = ['payment_method', 'payment_status', 'store', 'bill_date']
    search_fields = ['bill_number', 'customer__name']
    readonly_fields = ['bill_number', 'created_at', 'updated_at']
    inlines = [BillItemInline]


@admin.register(DenominationCount)
class DenominationCountAdmin(admin.ModelAdmin):
    list_display = ['store', 'count_date', 'terminal_id', 'total_amount', 'counted_by']
    list_filter = ['store', 'count_date']
    readonly_fields = ['total_amount']


@admin.register(DayClosing)
class DayClosingAdmin(admin.ModelAdmin):
    list_display = ['store', 'closing_date', 'total_cash_sales', 'total_change_given', 'variance_amount', 'closed_by']
    list_filter = ['store', 'closing_date']
    readonly_fields = ['variance_amount', 'closed_at']
