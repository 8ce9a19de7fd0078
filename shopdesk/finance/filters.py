import django_filters
from .models import Expense, Credit


class ExpenseFilter(django_filters.FilterSet):
    date_from = django_filters.DateFilter(field_name='expense_date', lookup_expr='gte')
    date_to = django_filters.DateFilter(field_name='expense_date', lookup_expr='lte')
    store_id = django_filters.NumberFilter(field_name='store_id')
    category = django_filters.CharFilter(field_name='category__value')
    payment_method = django_filters.CharFilter(field_name='payment_method')
    search = django_filters.CharFilter(field_name='description', lookup_expr='icontains')

    class Meta:
        model = Expense
        fields = ['date_from', 'date_to', 'store_id', 'category', 'payment_method', 'search']


class CreditFilter(django_filters.FilterSet):
    date_from = django_filters.DateFilter(field_name='credit_date', lookup_expr='gte')
    date_to = django_filters.DateFilter(field_name='credit_date', lookup_expr='lte')
    store_id = django_filters.NumberFilter(field_name='store_id')
    credit_type = django_filters.CharFilter(field_name='credit_type')

    class Meta:
        model = Credit
        fields = ['date_from', 'date_to', 'store_id', 'credit_type']
