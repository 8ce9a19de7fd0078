from django.urls import path
from .views import (
    expense_category_list_create, expense_category_detail,
    expense_list_create, expense_detail, expense_summary,
    credit_list_create, credit_detail, credit_summary, daily_financials,
)

urlpatterns = [
    path('expense-categories/', expense_category_list_create, name='expense-category-list-create'),
    path('expense-categories/<int:pk>/', expense_category_detail, name='expense-category-detail'),
    path('expenses/', expense_list_create, name='expense-list-create'),
    path('expenses/summary/', expense_summary, name='expense-summary'),
    path('expenses/<int:pk>/', expense_detail, name='expense-detail'),
    path('credits/', credit_list_create, name='credit-list-create'),
    path('credits/summary/', credit_summary, name='credit-summary'),
    path('credits/daily/', daily_financials, name='daily-financials'),
    path('credits/<int:pk>/', credit_detail, name='credit-detail'),
]
