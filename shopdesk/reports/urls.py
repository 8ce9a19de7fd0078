from django.urls import path
from . import views

urlpatterns = [
    path('reports/dashboard/', views.dashboard_summary, name='dashboard-summary'),
    path('reports/sales-by-product/', views.sales_by_product, name='sales-by-product'),
    path('reports/stock/', views.stock_report, name='stock-report'),
    path('reports/shifts/<int:pk>/performance/', views.shift_performance, name='shift-performance'),
    path('reports/payroll/', views.payroll_summary, name='payroll-summary'),
]
