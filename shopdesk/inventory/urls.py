from django.urls import path
from .views import (
    stock_entry_list_create, stock_entry_batch_create, stock_entry_detail, stock_entry_export,
    stock_entry_summary, stock_actual_update, stock_available, stock_entry_import, stock_import_template,
    stock_request_list_create, stock_request_detail, stock_request_approve, stock_request_reject,
    stock_movement_list,
    loss_list_create, loss_detail, loss_summary,
    low_stock_alert_list, low_stock_alert_generate, low_stock_alert_resolve,
)

urlpatterns = [
    path('stocks/', stock_entry_list_create, name='stock-entry-list-create'),
    path('stocks/batch/', stock_entry_batch_create, name='stock-entry-batch-create'),
    path('stocks/import/', stock_entry_import, name='stock-entry-import'),
    path('stocks/import/template/', stock_import_template, name='stock-import-template'),
    path('stocks/export/', stock_entry_export, name='stock-entry-export'),
    path('stocks/summary/', stock_entry_summary, name='stock-entry-summary'),
    path('stocks/actual/', stock_actual_update, name='stock-actual-update'),
    path('stocks/<int:pk>/', stock_entry_detail, name='stock-entry-detail'),
    path('stores/<int:store_id>/available-stock/', stock_available, name='stock-available'),

    path('stock-requests/', stock_request_list_create, name='stock-request-list-create'),
    path('stock-requests/<int:pk>/', stock_request_detail, name='stock-request-detail'),
    path('stock-requests/<int:pk>/approve/', stock_request_approve, name='stock-request-approve'),
    path('stock-requests/<int:pk>/reject/', stock_request_reject, name='stock-request-reject'),
    path('stock-movements/', stock_movement_list, name='stock-movement-list'),

    path('losses/', loss_list_create, name='loss-list-create'),
    path('losses/summary/', loss_summary, name='loss-summary'),
    path('losses/<int:pk>/', loss_detail, name='loss-detail'),

    path('low-stock-alerts/', low_stock_alert_list, name='low-stock-alert-list'),
    path('low-stock-alerts/generate/', low_stock_alert_generate, name='low-stock-alert-generate'),
    path('low-stock-alerts/<int:pk>/resolve/', low_stock_alert_resolve, name='low-stock-alert-resolve'),
]
