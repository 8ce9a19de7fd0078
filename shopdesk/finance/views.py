import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from shopdesk.core.permissions import page_permission
from shopdesk.core.utils import create_audit_log
from .filters import ExpenseFilter, CreditFilter
from .models import ExpenseCategory, Expense, Credit
from .serializers import ExpenseCategorySerializer, ExpenseSerializer, CreditSerializer, DailyFinancialSerializer
from . import services

logger = logging.getLogger(__name__)


# Expense categories
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, page_permission('expenses')])
def expense_category_list_create(request):
    if request.method == 'GET':
        if not ExpenseCategory.objects.exists():
            services.ensure_default_categories()
        return Response(ExpenseCategorySerializer(ExpenseCategory.objects.all(), many=True).data)
    serializer = ExpenseCategorySerializer(data=request.data)
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, page_permission('expenses')])
def expense_category_detail(request, pk):
    category = get_object_or_404(ExpenseCategory, pk=pk)
    if request.method == 'DELETE':
        blocker = services.category_delete_blocker(category)
        if blocker:
            return Response({'error': blocker}, status=status.HTTP_400_BAD_REQUEST)
        category.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = ExpenseCategorySerializer(category, data=request.data, partial=request.method == 'PATCH')
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


# Expenses
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, page_permission('expenses')])
def expense_list_create(request):
    """List expenses (?date_from, date_to, store_id, category) or record one"""
    if request.method == 'GET':
        queryset = Expense.objects.select_related('store', 'category')
        expenses = ExpenseFilter(request.query_params, queryset=queryset).qs
        return Response(ExpenseSerializer(expenses, many=True).data)

    serializer = ExpenseSerializer(data=request.data)
    if serializer.is_valid():
        expense = serializer.save(created_by=request.user)
        logger.info(f"Expense {expense.id} of {expense.amount} recorded by {request.user.username}")
        return Response(ExpenseSerializer(expense).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, page_permission('expenses')])
def expense_detail(request, pk):
    expense = get_object_or_404(Expense, pk=pk)

    if request.method == 'GET':
        return Response(ExpenseSerializer(expense).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = ExpenseSerializer(expense, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:
        create_audit_log(request=request, action='delete', model_name='Expense', object_id=str(expense.id),
                         object_name=str(expense), changes={'amount': str(expense.amount)})
        expense.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated, page_permission('expenses')])
def expense_summary(request):
    """Totals of the filtered expenses, broken down by category"""
    expenses = ExpenseFilter(request.query_params, queryset=Expense.objects.all()).qs
    return Response(services.expense_summary(expenses))


# Credits
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, page_permission('credits')])
def credit_list_create(request):
    if request.method == 'GET':
        queryset = Credit.objects.select_related('store')
        credits = CreditFilter(request.query_params, queryset=queryset).qs
        if 'credit_type' not in request.query_params:
            credits = credits.filter(credit_type__in=('given', 'received'))
        return Response(CreditSerializer(credits, many=True).data)

    serializer = CreditSerializer(data=request.data)
    if serializer.is_valid():
        credit = serializer.save(created_by=request.user)
        return Response(CreditSerializer(credit).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, page_permission('credits')])
def credit_detail(request, pk):
    credit = get_object_or_404(Credit, pk=pk)

    if request.method == 'GET':
        return Response(CreditSerializer(credit).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = CreditSerializer(credit, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:
        credit.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated, page_permission('credits')])
def credit_summary(request):
    credits = CreditFilter(request.query_params, queryset=Credit.objects.all()).qs
    return Response(services.credit_summary(credits))


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, page_permission('credits')])
def daily_financials(request):
    """Daily cash/card/online/discount takings per store; POST replaces a day"""
    if request.method == 'GET':
        credits = CreditFilter(request.query_params, queryset=Credit.objects.all()).qs
        return Response(services.daily_financials(credits))

    serializer = DailyFinancialSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    services.save_daily_financials(
        data['store'], data['date'],
        cash=data['cash_amount'], card=data['card_amount'],
        online=data['online_amount'], discount=data['discount_amount'],
        user=request.user,
    )
    rows = Credit.objects.filter(store=data['store'], credit_date=data['date'])
    return Response(services.daily_financials(rows)[0], status=status.HTTP_201_CREATED)
