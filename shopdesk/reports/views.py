import logging
from datetime import timedelta
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from django.utils import timezone
from shopdesk.core.permissions import page_permission
from shopdesk.core.utils import parse_date_param
from shopdesk.hrms.models import Shift
from . import services

logger = logging.getLogger(__name__)


def _period(request, default_days=0):
    """date_from/date_to query params, defaulting to the last ``default_days`` days up to today"""
    today = timezone.localdate()
    date_from = parse_date_param(request.query_params.get('date_from')) or today - timedelta(days=default_days)
    date_to = parse_date_param(request.query_params.get('date_to')) or today
    return date_from, date_to


def _store_id(request):
    store_id = request.query_params.get('store_id') or request.query_params.get('store')
    return int(store_id) if store_id and store_id.isdigit() else None


@api_view(['GET'])
@permission_classes([IsAuthenticated, page_permission('dashboard')])
def dashboard_summary(request):
    """Dashboard figures (?date_from, date_to, store_id); defaults to today"""
    date_from, date_to = _period(request)
    if date_from > date_to:
        return Response({'error': 'date_from must be on or before date_to'}, status=status.HTTP_400_BAD_REQUEST)
    logger.info(f"User {request.user.username} requested dashboard summary ({date_from}..{date_to})")
    return Response(services.dashboard_summary(date_from, date_to, _store_id(request)))


@api_view(['GET'])
@permission_classes([IsAuthenticated, page_permission('dashboard')])
def sales_by_product(request):
    """Top selling products (?date_from, date_to, store_id, limit); defaults to the last 30 days"""
    date_from, date_to = _period(request, default_days=30)
    limit = int(request.query_params.get('limit', 10))
    return Response({
        'period': {'from': date_from.isoformat(), 'to': date_to.isoformat()},
        'products': services.sales_by_product(date_from, date_to, _store_id(request), limit=limit),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated, page_permission('stocks')])
def stock_report(request):
    date_from, date_to = _period(request)
    return Response(services.stock_report(date_from, date_to, _store_id(request)))


@api_view(['GET'])
@permission_classes([IsAuthenticated, page_permission('stocks')])
def shift_performance(request, pk):
    shift = get_object_or_404(Shift, pk=pk)
    on_date = parse_date_param(request.query_params.get('date')) or timezone.localdate()
    return Response(services.shift_performance(shift, on_date))


@api_view(['GET'])
@permission_classes([IsAuthenticated, page_permission('hrms')])
def payroll_summary(request):
    today = timezone.localdate()
    try:
        month = int(request.query_params.get('month', today.month))
        year = int(request.query_params.get('year', today.year))
    except ValueError:
        return Response({'error': 'month and year must be numbers'}, status=status.HTTP_400_BAD_REQUEST)
    if not 1 <= month <= 12:
        return Response({'error': 'Month must be between 1 and 12.'}, status=status.HTTP_400_BAD_REQUEST)
    return Response(services.payroll_summary(month, year))
