import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from shopdesk.core.permissions import page_permission
from shopdesk.core.utils import create_audit_log, parse_date_param
from .filters import BillFilter
from .models import Bill, DenominationCount, DayClosing
from .serializers import (
    BillSerializer, CheckoutSerializer, BillItemsUpdateSerializer, SettleBillSerializer,
    DenominationCountSerializer, DayClosingSerializer
)
from . import services

logger = logging.getLogger(__name__)


def _bills_queryset():
    return Bill.objects.select_related('store', 'customer', 'created_by').prefetch_related('items')


@api_view(['POST'])
@permission_classes([IsAuthenticated, page_permission('pos')])
def checkout(request):
    """Ring up a sale: create the bill, its items, credit entry and stock movement"""
    serializer = CheckoutSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data

    bill = services.checkout(
        data['store'], request.user, data['items'],
        payment_method=data['payment_method'],
        customer=data.get('customer'),
        customer_name=data.get('customer_name'),
        payment_breakdown=data.get('payment_breakdown'),
        notes=data.get('notes', ''),
    )

    create_audit_log(
        request=request,
        action='bill_checkout',
        model_name='Bill',
        object_id=str(bill.id),
        object_name=f"Bill {bill.bill_number}",
        object_reference=bill.bill_number,
        changes={
            'total_amount': str(bill.total_amount),
            'payment_method': bill.payment_method,
            'payment_status': bill.payment_status,
            'store': bill.store.name,
            'customer': bill.customer.name if bill.customer else None,
            'items': len(data['items']),
        }
    )
    return Response(BillSerializer(_bills_queryset().get(pk=bill.pk)).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, page_permission('bills')])
def bill_list(request):
    """Bill history with filters (?date_from, date_to, store_id, payment_method, status, customer_id, search)"""
    bills = BillFilter(request.query_params, queryset=_bills_queryset()).qs

    from django.core.paginator import Paginator
    page = int(request.query_params.get('page', 1))
    limit = int(request.query_params.get('limit', 50))
    paginator = Paginator(bills, limit)
    page_obj = paginator.get_page(page)

    serializer = BillSerializer(page_obj, many=True)
    return Response({
        'results': serializer.data,
        'count': paginator.count,
        'next': page_obj.next_page_number() if page_obj.has_next() else None,
        'previous': page_obj.previous_page_number() if page_obj.has_previous() else None,
        'page': page_obj.number,
        'page_size': limit,
        'total_pages': paginator.num_pages,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated, page_permission('bills')])
def bill_detail(request, pk):
    bill = get_object_or_404(_bills_queryset(), pk=pk)
    return Response(BillSerializer(bill).data)


@api_view(['PUT'])
@permission_classes([IsAuthenticated, page_permission('bills')])
def bill_items_update(request, pk):
    """Replace the items of a bill and rebalance stock"""
    bill = get_object_or_404(Bill, pk=pk)
    serializer = BillItemsUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    old_total = bill.total_amount
    bill = services.update_bill_items(
        bill, serializer.validated_data['items'], user=request.user,
        payment_breakdown=serializer.validated_data.get('payment_breakdown'),
    )
    create_audit_log(
        request=request,
        action='bill_update',
        model_name='Bill',
        object_id=str(bill.id),
        object_name=f"Bill {bill.bill_number}",
        object_reference=bill.bill_number,
        changes={'total_amount': {'old': str(old_total), 'new': str(bill.total_amount)}}
    )
    return Response(BillSerializer(_bills_queryset().get(pk=bill.pk)).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, page_permission('bills')])
def bill_cancel(request, pk):
    """Cancel a bill: stock comes back and any credit entry is voided"""
    bill = get_object_or_404(Bill, pk=pk)
    bill = services.cancel_bill(bill, user=request.user)
    create_audit_log(
        request=request,
        action='bill_cancel',
        model_name='Bill',
        object_id=str(bill.id),
        object_name=f"Bill {bill.bill_number}",
        object_reference=bill.bill_number,
        changes={'payment_status': 'cancelled', 'total_amount': str(bill.total_amount)}
    )
    return Response(BillSerializer(_bills_queryset().get(pk=bill.pk)).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, page_permission('bills')])
def bill_settle(request, pk):
    bill = get_object_or_404(Bill, pk=pk)
    serializer = SettleBillSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    bill = services.settle_bill(bill, serializer.validated_data['payment_method'], user=request.user)
    create_audit_log(
        request=request,
        action='bill_settle',
        model_name='Bill',
        object_id=str(bill.id),
        object_name=f"Bill {bill.bill_number}",
        object_reference=bill.bill_number,
        changes={'settled_with': serializer.validated_data['payment_method']}
    )
    return Response(BillSerializer(_bills_queryset().get(pk=bill.pk)).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, page_permission('bills')])
def bill_receipt(request, pk):
    """Plain text receipt"""
    bill = get_object_or_404(_bills_queryset(), pk=pk)
    response = HttpResponse(services.render_receipt(bill), content_type='text/plain; charset=utf-8')
    response['Content-Disposition'] = f'inline; filename="{bill.bill_number}.txt"'
    return response


# Cash drawer
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, page_permission('pos')])
def denomination_list_create(request):
    if request.method == 'GET':
        counts = DenominationCount.objects.select_related('store')
        store_id = request.query_params.get('store_id')
        if store_id:
            counts = counts.filter(store_id=store_id)
        count_date = parse_date_param(request.query_params.get('date'))
        if count_date:
            counts = counts.filter(count_date=count_date)
        return Response(DenominationCountSerializer(counts, many=True).data)

    serializer = DenominationCountSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    count = services.save_denomination_count(
        data['store'], data.get('denominations', {}), user=request.user,
        count_date=data.get('count_date'), terminal_id=data.get('terminal_id', ''),
    )
    return Response(DenominationCountSerializer(count).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, page_permission('pos')])
def day_closing_list_create(request):
    if request.method == 'GET':
        closings = DayClosing.objects.select_related('store', 'closed_by')
        store_id = request.query_params.get('store_id')
        if store_id:
            closings = closings.filter(store_id=store_id)
        date_from = parse_date_param(request.query_params.get('date_from'))
        date_to = parse_date_param(request.query_params.get('date_to'))
        if date_from:
            closings = closings.filter(closing_date__gte=date_from)
        if date_to:
            closings = closings.filter(closing_date__lte=date_to)
        return Response(DayClosingSerializer(closings, many=True).data)

    serializer = DayClosingSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    closing = services.close_day(
        data['store'], request.user,
        data.get('opening_denominations', {}),
        data.get('closing_denominations', {}),
        closing_date=data.get('closing_date'),
        total_cash_sales=data.get('total_cash_sales'),
        total_change_given=data.get('total_change_given'),
        notes=data.get('notes', ''),
    )
    create_audit_log(
        request=request,
        action='day_closing',
        model_name='DayClosing',
        object_id=str(closing.id),
        object_name=f"{closing.store.name} {closing.closing_date}",
        changes={'variance_amount': str(closing.variance_amount)}
    )
    return Response(DayClosingSerializer(closing).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, page_permission('pos')])
def day_closing_detail(request, pk):
    closing = get_object_or_404(DayClosing, pk=pk)
    return Response(DayClosingSerializer(closing).data)
