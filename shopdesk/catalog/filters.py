import django_filters
from django.db.models import Q
from .models import Product


class ProductFilter(django_filters.FilterSet):
    """Filter for Product model using django-filter"""

    search = django_filters.CharFilter(method='filter_search', label='Search')
    category = django_filters.CharFilter(field_name='category', lookup_expr='iexact')
    active = django_filters.CharFilter(method='filter_active', label='Active')
    store = django_filters.NumberFilter(method='filter_store', label='Assigned to store')
    min_price = django_filters.NumberFilter(field_name='price', lookup_expr='gte')
    max_price = django_filters.NumberFilter(field_name='price', lookup_expr='lte')

    class Meta:
        model = Product
        fields = ['search', 'category', 'active', 'store', 'min_price', 'max_price']

    def filter_search(self, queryset, name, value):
        """Match every word against name, SKU or category"""
        if not value or not value.strip():
            return queryset
        for word in value.split():
            queryset = queryset.filter(
                Q(name__icontains=word) | Q(sku__icontains=word) | Q(category__icontains=word)
            )
        return queryset

    def filter_active(self, queryset, name, value):
        if value is None or value == '':
            return queryset
        return queryset.filter(is_active=value.lower() in ('1', 'true', 'yes'))

    def filter_store(self, queryset, name, value):
        if not value:
            return queryset
        return queryset.filter(store_assignments__store_id=value).distinct()
