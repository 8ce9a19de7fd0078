from django.contrib import admin
from .models import Customer, CreditTransaction, PaymentMethod, AutoDebitConfig, AutoDebitTransaction


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ['name', 'phone', 'email', 'credit_limit', 'is_active', 'created_at']
    list_filter = ['is_active', 'created_at']
    search_fields = ['name', 'phone', 'email']
    ordering = ['name']


@admin.register(CreditTransaction)
class CreditTransactionAdmin(admin.ModelAdmin):
    list_display = ['customer', 'amount', 'status', 'bill', 'transaction_date']
    list_filter = ['status', 'transaction_date']
    search_fields = ['customer__name', 'description']
    ordering = ['-transaction_date']


@admin.register(PaymentMethod)
class PaymentMethodAdmin(admin.ModelAdmin):
    list_display = ['customer', 'method_type', 'display_name', 'is_primary', 'is_active']
    list_filter = ['method_type', 'is_active']
    search_fields = ['customer__name']


@admin.register(AutoDebitConfig)
class AutoDebitConfigAdmin(admin.ModelAdmin):
    list_display = ['customer', 'payment_method', 'trigger_amount', 'debit_amount', 'is_enabled']
    list_filter = ['is_enabled']
    search_fields = ['customer__name']


@admin.register(AutoDebitTransaction)
class AutoDebitTransactionAdmin(admin.ModelAdmin):
    list_display = ['customer', 'amount', 'trigger_balance', 'status', 'razorpay_payment_id', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['customer__name', 'razorpay_payment_id']
    readonly_fields = ['razorpay_payment_id', 'error_message']
