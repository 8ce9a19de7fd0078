from django.urls import path
from .views import (
    customer_list_create, customer_detail, customer_delete,
    customer_credit_balance, customer_credit_transactions, customer_credit_payment,
    payment_method_list_create, payment_method_detail,
    auto_debit_config_list_create, auto_debit_config_detail,
    auto_debit_transaction_list, auto_debit_trigger,
)

urlpatterns = [
    path('customers/', customer_list_create, name='customer-list-create'),
    path('customers/<int:pk>/', customer_detail, name='customer-detail'),
    path('customers/<int:pk>/delete/', customer_delete, name='customer-delete'),
    path('customers/<int:pk>/credit/', customer_credit_balance, name='customer-credit-balance'),
    path('customers/<int:pk>/credit-transactions/', customer_credit_transactions, name='customer-credit-transactions'),
    path('customers/<int:pk>/credit-payment/', customer_credit_payment, name='customer-credit-payment'),
    path('customers/<int:pk>/auto-debit/', auto_debit_trigger, name='customer-auto-debit'),

    path('payment-methods/', payment_method_list_create, name='payment-method-list-create'),
    path('payment-methods/<int:pk>/', payment_method_detail, name='payment-method-detail'),
    path('auto-debit/configs/', auto_debit_config_list_create, name='auto-debit-config-list-create'),
    path('auto-debit/configs/<int:pk>/', auto_debit_config_detail, name='auto-debit-config-detail'),
    path('auto-debit/transactions/', auto_debit_transaction_list, name='auto-debit-transaction-list'),
]
