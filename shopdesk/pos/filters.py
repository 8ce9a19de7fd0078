import django_filters
from .models import Bill


class BillFilter(django_filters.FilterSet):
    """Filters for bill history"""
    date_from = django_filters.DateFilter(field_name='bill_date', lookup_expr='date__gte')
    date_to = django_filters.DateFilter(field_name='bill_date', lookup_expr='date__lte')
    store_id = django_filters.NumberFilter(field_name='store_id')
    customer_id = django_filters.NumberFilter(field_name='customer_id')
    payment_method = django_filters.CharFilter(field_name='payment_method')
    status = django_filters.CharFilter(field_name='payment_status')
    search = django_filters.CharFilter(field_name='bill_number', lookup_expr='icontains')

    class Meta:
        model = Bill
        fields = ['date_from', 'date_to', 'store_id', 'customer_id', 'payment_method', 'status', 'search']
