import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from shopdesk.core.permissions import page_permission
from shopdesk.core.utils import create_audit_log
from shopdesk.locations.models import Store
from .filters import ProductFilter
from .models import Product, ProductShop, ReorderPoint
from .serializers import ProductSerializer, ProductShopSerializer, ReorderPointSerializer

logger = logging.getLogger(__name__)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, page_permission('products')])
def product_list_create(request):
    """List products (search/category/store filters) or create a product"""
    if request.method == 'GET':
        queryset = Product.objects.prefetch_related('store_assignments')
        products = ProductFilter(request.query_params, queryset=queryset).qs
        serializer = ProductSerializer(products, many=True)
        return Response(serializer.data)
    else:
        serializer = ProductSerializer(data=request.data)
        if serializer.is_valid():
            product = serializer.save(created_by=request.user)
            logger.info(f"Product '{product.name}' created by {request.user.username}")
            return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, page_permission('products')])
def product_detail(request, pk):
    """Retrieve, update or delete a product"""
    product = get_object_or_404(Product, pk=pk)

    if request.method == 'GET':
        return Response(ProductSerializer(product).data)
    elif request.method in ('PUT', 'PATCH'):
        old_price = product.price
        serializer = ProductSerializer(product, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            product = serializer.save()
            if product.price != old_price:
                create_audit_log(request=request, action='update', model_name='Product',
                                 object_id=product.id, object_name=product.name,
                                 changes={'price': {'old': str(old_price), 'new': str(product.price)}})
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        blocker = product.delete_blocker()
        if blocker:
            return Response({'error': blocker}, status=status.HTTP_400_BAD_REQUEST)
        create_audit_log(request=request, action='delete', model_name='Product',
                         object_id=product.id, object_name=product.name)
        product.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def product_categories(request):
    """Distinct product categories"""
    categories = (Product.objects.exclude(category='')
                  .order_by('category').values_list('category', flat=True).distinct())
    return Response(list(categories))


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, page_permission('products')])
def store_products(request, store_id):
    """List products assigned to a store, or assign products to it"""
    store = get_object_or_404(Store, pk=store_id)

    if request.method == 'GET':
        assignments = ProductShop.objects.filter(store=store).select_related('product', 'store')
        return Response(ProductShopSerializer(assignments, many=True).data)

    product_ids = request.data.get('product_ids')
    if not isinstance(product_ids, list) or not product_ids:
        return Response({'error': 'product_ids must be a non-empty list'}, status=status.HTTP_400_BAD_REQUEST)

    products = Product.objects.filter(pk__in=product_ids)
    found_ids = set(products.values_list('id', flat=True))
    missing = [pid for pid in product_ids if pid not in found_ids]
    if missing:
        return Response({'error': f'Products not found: {missing}'}, status=status.HTTP_400_BAD_REQUEST)

    created = 0
    for product in products:
        _, was_created = ProductShop.objects.get_or_create(product=product, store=store)
        created += int(was_created)
    logger.info(f"Assigned {created} products to store {store.name}")
    assignments = ProductShop.objects.filter(store=store).select_related('product', 'store')
    return Response(ProductShopSerializer(assignments, many=True).data, status=status.HTTP_201_CREATED)


@api_view(['DELETE'])
@permission_classes([IsAuthenticated, page_permission('products')])
def store_product_remove(request, store_id, product_id):
    """Unassign a product from a store"""
    assignment = get_object_or_404(ProductShop, store_id=store_id, product_id=product_id)
    assignment.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, page_permission('stocks')])
def reorder_point_list_create(request):
    """List or create reorder points"""
    if request.method == 'GET':
        points = ReorderPoint.objects.select_related('product', 'store')
        store_id = request.query_params.get('store_id')
        if store_id:
            points = points.filter(store_id=store_id)
        return Response(ReorderPointSerializer(points, many=True).data)
    serializer = ReorderPointSerializer(data=request.data)
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, page_permission('stocks')])
def reorder_point_detail(request, pk):
    point = get_object_or_404(ReorderPoint, pk=pk)
    if request.method == 'GET':
        return Response(ReorderPointSerializer(point).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = ReorderPointSerializer(point, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    point.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)
