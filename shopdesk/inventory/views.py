import csv
import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Q
from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from django.utils import timezone
from shopdesk.catalog.models import Product
from shopdesk.core.permissions import page_permission
from shopdesk.core.utils import create_audit_log
from shopdesk.locations.models import Store
from .filters import StockEntryFilter, StockMovementFilter, LossFilter
from .models import StockEntry, StockRequest, StockMovement, Loss, LowStockAlert
from .serializers import (
    StockEntrySerializer, StockEntryCreateSerializer, BatchStockEntrySerializer, ActualStockSerializer,
    StockRequestSerializer, StockMovementSerializer, LossSerializer, LowStockAlertSerializer
)
from . import importers, services

logger = logging.getLogger(__name__)

SORT_FIELDS = {
    'stock_date': lambda entry: entry.stock_date,
    'units_sold': lambda entry: entry.units_sold,
    'sales_amount': lambda entry: entry.sales_amount,
    'profit': lambda entry: entry.profit,
    'product_loss': lambda entry: entry.product_loss,
}


def filtered_stock_entries(request):
    """Apply query filters and sorting (?sort=profit&order=asc) to the stock sheet"""
    queryset = StockEntry.objects.select_related('product', 'store', 'shift')
    entries = list(StockEntryFilter(request.query_params, queryset=queryset).qs)

    sort = request.query_params.get('sort', 'stock_date')
    key = SORT_FIELDS.get(sort, SORT_FIELDS['stock_date'])
    descending = request.query_params.get('order', 'desc') != 'asc'
    entries.sort(key=key, reverse=descending)
    return entries


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, page_permission('stocks')])
def stock_entry_list_create(request):
    """List stock sheet rows with filters or create a row"""
    if request.method == 'GET':
        entries = filtered_stock_entries(request)
        return Response(StockEntrySerializer(entries, many=True).data)

    serializer = StockEntryCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = dict(serializer.validated_data)
    entry = services.create_stock_entry(
        data.pop('product'), data.pop('store'),
        stock_date=data.pop('stock_date', None),
        opening_stock=data.pop('opening_stock', None),
        stock_added=data.pop('stock_added'),
        actual_stock=data.pop('actual_stock', None),
        user=request.user,
        **data
    )
    return Response(StockEntrySerializer(entry).data, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated, page_permission('stocks')])
def stock_entry_batch_create(request):
    """Create stock rows for several products of one store"""
    serializer = BatchStockEntrySerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    entries = services.batch_create_stock_entries(
        data['store'], data['items'],
        stock_date=data.get('stock_date'),
        user=request.user,
        operator_name=data.get('operator_name', ''),
    )
    logger.info(f"User {request.user.username} created {len(entries)} stock entries for {data['store'].name}")
    return Response(StockEntrySerializer(entries, many=True).data, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated, page_permission('stocks')])
def stock_entry_import(request):
    """Bulk import stock rows from an uploaded .xlsx or .csv sheet (field: file)"""
    upload = request.FILES.get('file')
    if upload is None:
        return Response({'error': 'file is required'}, status=status.HTTP_400_BAD_REQUEST)
    rows = importers.read_stock_rows(upload)
    entries, skipped = importers.import_stock_rows(rows, user=request.user)
    logger.info(f"User {request.user.username} imported {len(entries)} stock entries from {upload.name}")
    return Response({
        'created': len(entries),
        'skipped': skipped,
        'entries': StockEntrySerializer(entries, many=True).data,
    }, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, page_permission('stocks')])
def stock_import_template(request):
    response = HttpResponse(
        importers.stock_template(),
        content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
    )
    response['Content-Disposition'] = 'attachment; filename="stock-import-template.xlsx"'
    return response


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, page_permission('stocks')])
def stock_entry_detail(request, pk):
    """Retrieve, correct or delete a stock sheet row"""
    entry = get_object_or_404(StockEntry.objects.select_related('product', 'store'), pk=pk)

    if request.method == 'GET':
        return Response(StockEntrySerializer(entry).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = StockEntrySerializer(entry, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            create_audit_log(request=request, action='stock_adjust', model_name='StockEntry',
                             object_id=entry.id, object_name=entry.product.name,
                             changes={key: str(value) for key, value in request.data.items()})
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        entry.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated, page_permission('stocks')])
def stock_entry_export(request):
    """Export the filtered stock sheet as CSV"""
    entries = filtered_stock_entries(request)
    response = HttpResponse(content_type='text/csv')
    filename = f"stock-report-{timezone.localdate().isoformat()}.csv"
    response['Content-Disposition'] = f'attachment; filename="{filename}"'

    writer = csv.writer(response)
    writer.writerow(['Date', 'Product', 'Store', 'Opening', 'Added', 'Closing', 'Actual',
                     'Sold', 'Sales', 'Profit', 'Loss', 'Operator'])
    for entry in entries:
        writer.writerow([
            entry.stock_date.isoformat(), entry.product.name, entry.store.name,
            entry.opening_stock, entry.stock_added, entry.closing_stock,
            '' if entry.actual_stock is None else entry.actual_stock,
            entry.units_sold, entry.sales_amount, entry.profit, entry.product_loss,
            entry.operator_name,
        ])
    return response


@api_view(['GET'])
@permission_classes([IsAuthenticated, page_permission('stocks')])
def stock_entry_summary(request):
    """Totals of sold units, sales, profit and loss over the filtered stock sheet"""
    return Response(services.stock_summary(filtered_stock_entries(request)))


@api_view(['POST'])
@permission_classes([IsAuthenticated, page_permission('pos')])
def stock_actual_update(request):
    """Record today's counted stock for a product in a store"""
    serializer = ActualStockSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    entry = services.set_actual_stock(data['product'], data['store'], data['actual_stock'], user=request.user)
    create_audit_log(request=request, action='stock_adjust', model_name='StockEntry',
                     object_id=entry.id, object_name=entry.product.name,
                     changes={'actual_stock': str(data['actual_stock'])})
    return Response(StockEntrySerializer(entry).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, page_permission('pos')])
def stock_available(request, store_id):
    """Stock available for sale today for every product assigned to a store"""
    store = get_object_or_404(Store, pk=store_id)
    products = Product.objects.filter(store_assignments__store=store, is_active=True)
    product_id = request.query_params.get('product_id')
    if product_id:
        products = products.filter(pk=product_id)
    return Response([
        {
            'product': product.id,
            'product_name': product.name,
            'price': product.price,
            'available': services.available_for_sale(product, store),
        }
        for product in products
    ])


# Stock requests
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, page_permission('stock-movements')])
def stock_request_list_create(request):
    """
    List stock requests or create one.
    ?store_id=&direction=incoming lists requests the store must fulfil,
    direction=outgoing the ones it raised.
    """
    if request.method == 'GET':
        queryset = StockRequest.objects.select_related('product', 'requesting_store', 'fulfilling_store')
        store_id = request.query_params.get('store_id')
        direction = request.query_params.get('direction')
        if store_id and direction == 'incoming':
            queryset = queryset.filter(fulfilling_store_id=store_id)
        elif store_id and direction == 'outgoing':
            queryset = queryset.filter(requesting_store_id=store_id)
        elif store_id:
            queryset = queryset.filter(Q(requesting_store_id=store_id) | Q(fulfilling_store_id=store_id))
        request_status = request.query_params.get('status')
        if request_status:
            queryset = queryset.filter(status=request_status)
        return Response(StockRequestSerializer(queryset.order_by('-request_date'), many=True).data)

    serializer = StockRequestSerializer(data=request.data)
    if serializer.is_valid():
        stock_request = serializer.save(created_by=request.user)
        logger.info(f"Stock request {stock_request.id} created by {request.user.username}")
        return Response(StockRequestSerializer(stock_request).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET'])
@permission_classes([IsAuthenticated, page_permission('stock-movements')])
def stock_request_detail(request, pk):
    stock_request = get_object_or_404(StockRequest, pk=pk)
    return Response(StockRequestSerializer(stock_request).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, page_permission('stock-movements')])
def stock_request_approve(request, pk):
    """Approve a pending request, moving the stock between stores"""
    get_object_or_404(StockRequest, pk=pk)
    stock_request = services.approve_stock_request(pk, user=request.user)
    create_audit_log(request=request, action='stock_request_approve', model_name='StockRequest',
                     object_id=stock_request.id, object_name=stock_request.product.name,
                     object_reference=f"REQ-{stock_request.id}",
                     changes={'quantity': str(stock_request.requested_quantity)})
    return Response(StockRequestSerializer(stock_request).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, page_permission('stock-movements')])
def stock_request_reject(request, pk):
    get_object_or_404(StockRequest, pk=pk)
    stock_request = services.reject_stock_request(pk, user=request.user, notes=request.data.get('notes', ''))
    create_audit_log(request=request, action='stock_request_reject', model_name='StockRequest',
                     object_id=stock_request.id, object_reference=f"REQ-{stock_request.id}")
    return Response(StockRequestSerializer(stock_request).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, page_permission('stock-movements')])
def stock_movement_list(request):
    queryset = StockMovement.objects.select_related('product', 'from_store', 'to_store')
    movements = StockMovementFilter(request.query_params, queryset=queryset).qs
    return Response(StockMovementSerializer(movements, many=True).data)


# Losses
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, page_permission('stocks')])
def loss_list_create(request):
    if request.method == 'GET':
        queryset = Loss.objects.select_related('product', 'store')
        losses = LossFilter(request.query_params, queryset=queryset).qs
        return Response(LossSerializer(losses, many=True).data)

    serializer = LossSerializer(data=request.data)
    if serializer.is_valid():
        loss = serializer.save(created_by=request.user)
        logger.info(f"Loss recorded: {loss}")
        return Response(LossSerializer(loss).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated, page_permission('stocks')])
def loss_detail(request, pk):
    loss = get_object_or_404(Loss, pk=pk)
    if request.method == 'GET':
        return Response(LossSerializer(loss).data)
    loss.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated, page_permission('stocks')])
def loss_summary(request):
    queryset = Loss.objects.select_related('product')
    losses = LossFilter(request.query_params, queryset=queryset).qs
    return Response(services.loss_summary(losses))


# Low stock alerts
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def low_stock_alert_list(request):
    alerts = LowStockAlert.objects.select_related('product', 'store')
    store_id = request.query_params.get('store_id')
    if store_id:
        alerts = alerts.filter(store_id=store_id)
    if request.query_params.get('include_resolved') not in ('1', 'true'):
        alerts = alerts.filter(is_resolved=False)
    return Response(LowStockAlertSerializer(alerts, many=True).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, page_permission('stocks')])
def low_stock_alert_generate(request):
    store = None
    store_id = request.data.get('store_id')
    if store_id:
        store = get_object_or_404(Store, pk=store_id)
    alerts = services.generate_low_stock_alerts(store)
    return Response(LowStockAlertSerializer(alerts, many=True).data, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated, page_permission('stocks')])
def low_stock_alert_resolve(request, pk):
    alert = get_object_or_404(LowStockAlert, pk=pk)
    services.resolve_low_stock_alert(alert)
    return Response(LowStockAlertSerializer(alert).data)
