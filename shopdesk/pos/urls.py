from django.urls import path
from .views import (
    checkout, bill_list, bill_detail, bill_items_update, bill_cancel, bill_settle, bill_receipt,
    denomination_list_create, day_closing_list_create, day_closing_detail,
)

urlpatterns = [
    path('pos/checkout/', checkout, name='pos-checkout'),
    path('bills/', bill_list, name='bill-list'),
    path('bills/<int:pk>/', bill_detail, name='bill-detail'),
    path('bills/<int:pk>/items/', bill_items_update, name='bill-items-update'),
    path('bills/<int:pk>/cancel/', bill_cancel, name='bill-cancel'),
    path('bills/<int:pk>/settle/', bill_settle, name='bill-settle'),
    path('bills/<int:pk>/receipt/', bill_receipt, name='bill-receipt'),
    path('pos/denominations/', denomination_list_create, name='denomination-list-create'),
    path('pos/day-closings/', day_closing_list_create, name='day-closing-list-create'),
    path('pos/day-closings/<int:pk>/', day_closing_detail, name='day-closing-detail'),
]
