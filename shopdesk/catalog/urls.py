from django.urls import path
from .views import (
    product_list_create, product_detail, product_categories,
    store_products, store_product_remove,
    reorder_point_list_create, reorder_point_detail,
)

urlpatterns = [
    path('products/', product_list_create, name='product-list-create'),
    path('products/categories/', product_categories, name='product-categories'),
    path('products/<int:pk>/', product_detail, name='product-detail'),
    path('stores/<int:store_id>/products/', store_products, name='store-products'),
    path('stores/<int:store_id>/products/<int:product_id>/', store_product_remove, name='store-product-remove'),
    path('reorder-points/', reorder_point_list_create, name='reorder-point-list-create'),
    path('reorder-points/<int:pk>/', reorder_point_detail, name='reorder-point-detail'),
]
