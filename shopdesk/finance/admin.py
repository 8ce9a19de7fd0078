from django.contrib import admin
from .models import ExpenseCategory, Expense, Credit


@admin.register(ExpenseCategory)
class ExpenseCategoryAdmin(admin.ModelAdmin):
    list_display = ['value', 'label']
    search_fields = ['value', 'label']


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display = ['expense_date', 'store', 'category', 'amount', 'payment_method', 'created_by']
    list_filter = ['category', 'store', 'payment_method']
    search_fields = ['description']
    date_hierarchy = 'expense_date'


@admin.register(Credit)
class CreditAdmin(admin.ModelAdmin):
    list_display = ['credit_date', 'store', 'credit_type', 'amount']
    list_filter = ['credit_type', 'store']
    date_hierarchy = 'credit_date'
