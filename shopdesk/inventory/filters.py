import django_filters
from django.db.models import Q
from .models import StockEntry, StockMovement, Loss


class StockEntryFilter(django_filters.FilterSet):
    """Filters for the daily stock sheet list"""
    date_from = django_filters.DateFilter(field_name='stock_date', lookup_expr='gte')
    date_to = django_filters.DateFilter(field_name='stock_date', lookup_expr='lte')
    store_id = django_filters.NumberFilter(field_name='store_id')
    product_id = django_filters.NumberFilter(field_name='product_id')
    shift_id = django_filters.NumberFilter(field_name='shift_id')
    search = django_filters.CharFilter(method='filter_search', label='Search')

    class Meta:
        model = StockEntry
        fields = ['date_from', 'date_to', 'store_id', 'product_id', 'shift_id', 'search']

    def filter_search(self, queryset, name, value):
        if not value or not value.strip():
            return queryset
        value = value.strip()
        return queryset.filter(
            Q(product__name__icontains=value) |
            Q(store__name__icontains=value) |
            Q(operator_name__icontains=value)
        )


class StockMovementFilter(django_filters.FilterSet):
    date_from = django_filters.DateFilter(field_name='movement_date', lookup_expr='gte')
    date_to = django_filters.DateFilter(field_name='movement_date', lookup_expr='lte')
    product_id = django_filters.NumberFilter(field_name='product_id')
    store_id = django_filters.NumberFilter(method='filter_store', label='From or to store')
    movement_type = django_filters.CharFilter(field_name='movement_type')

    class Meta:
        model = StockMovement
        fields = ['date_from', 'date_to', 'product_id', 'store_id', 'movement_type']

    def filter_store(self, queryset, name, value):
        return queryset.filter(Q(from_store_id=value) | Q(to_store_id=value))


class LossFilter(django_filters.FilterSet):
    date_from = django_filters.DateFilter(field_name='loss_date', lookup_expr='gte')
    date_to = django_filters.DateFilter(field_name='loss_date', lookup_expr='lte')
    store_id = django_filters.NumberFilter(field_name='store_id')
    product_id = django_filters.NumberFilter(field_name='product_id')
    loss_type = django_filters.CharFilter(field_name='loss_type')

    class Meta:
        model = Loss
        fields = ['date_from', 'date_to', 'store_id', 'product_id', 'loss_type']
