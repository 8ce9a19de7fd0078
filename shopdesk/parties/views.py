import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Q
from django.shortcuts import get_object_or_404
from shopdesk.core.permissions import page_permission, IsAdminRole
from shopdesk.core.utils import create_audit_log
from .models import Customer, CreditTransaction, PaymentMethod, AutoDebitConfig, AutoDebitTransaction
from .serializers import (
    CustomerSerializer, CreditTransactionSerializer, CreditPaymentSerializer,
    PaymentMethodSerializer, AutoDebitConfigSerializer, AutoDebitTransactionSerializer
)
from . import services

logger = logging.getLogger(__name__)


# Customer views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, page_permission('customers')])
def customer_list_create(request):
    """List all customers or create a new customer"""
    if request.method == 'GET':
        customers = Customer.objects.all()
        search = request.query_params.get('search', '').strip()
        if search:
            customers = customers.filter(
                Q(name__icontains=search) | Q(phone__icontains=search) | Q(email__icontains=search)
            )
        active = request.query_params.get('active')
        if active is not None:
            customers = customers.filter(is_active=active.lower() in ('1', 'true', 'yes'))
        serializer = CustomerSerializer(customers, many=True)
        return Response(serializer.data)
    else:
        serializer = CustomerSerializer(data=request.data)
        if serializer.is_valid():
            customer = serializer.save(created_by=request.user)
            logger.info(f"Customer '{customer.name}' created by {request.user.username}")
            return Response(CustomerSerializer(customer).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsAuthenticated, page_permission('customers')])
def customer_detail(request, pk):
    """Retrieve or update a customer"""
    customer = get_object_or_404(Customer, pk=pk)

    if request.method == 'GET':
        return Response(CustomerSerializer(customer).data)
    serializer = CustomerSerializer(customer, data=request.data, partial=request.method == 'PATCH')
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['DELETE'])
@permission_classes([IsAuthenticated, IsAdminRole])
def customer_delete(request, pk):
    """Delete a customer (admin only, and only without bills)"""
    customer = get_object_or_404(Customer, pk=pk)
    blocker = services.customer_delete_blocker(customer)
    if blocker:
        return Response({'error': blocker}, status=status.HTTP_400_BAD_REQUEST)
    create_audit_log(request=request, action='delete', model_name='Customer',
                     object_id=customer.id, object_name=customer.name)
    customer.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated, page_permission('customers')])
def customer_credit_balance(request, pk):
    """Outstanding balance, limit and available credit for a customer"""
    customer = get_object_or_404(Customer, pk=pk)
    return Response({
        'customer': customer.id,
        'credit_limit': customer.credit_limit,
        'credit_balance': customer.get_credit_balance(),
        'available_credit': customer.get_available_credit(),
        'auto_debit_due': services.check_auto_debit_trigger(customer),
    })


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, page_permission('customers')])
def customer_credit_transactions(request, pk):
    """A customer's credit ledger, or record a manual ledger entry"""
    customer = get_object_or_404(Customer, pk=pk)
    if request.method == 'GET':
        entries = customer.credit_transactions.select_related('bill')
        tx_status = request.query_params.get('status')
        if tx_status:
            entries = entries.filter(status=tx_status)
        return Response(CreditTransactionSerializer(entries, many=True).data)

    data = request.data.copy()
    data['customer'] = customer.id
    serializer = CreditTransactionSerializer(data=data)
    if serializer.is_valid():
        entry = serializer.save(created_by=request.user)
        return Response(CreditTransactionSerializer(entry).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['POST'])
@permission_classes([IsAuthenticated, page_permission('customers')])
def customer_credit_payment(request, pk):
    """Record a payment against a customer's outstanding credit"""
    customer = get_object_or_404(Customer, pk=pk)
    serializer = CreditPaymentSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    entry = services.record_credit_payment(
        customer, serializer.validated_data['amount'], user=request.user,
        description=serializer.validated_data['description'],
    )
    create_audit_log(request=request, action='credit_payment', model_name='Customer',
                     object_id=customer.id, object_name=customer.name,
                     changes={'amount': str(serializer.validated_data['amount'])})
    return Response(CreditTransactionSerializer(entry).data, status=status.HTTP_201_CREATED)


# Payment methods
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, page_permission('customers')])
def payment_method_list_create(request):
    if request.method == 'GET':
        methods = PaymentMethod.objects.all()
        customer_id = request.query_params.get('customer_id')
        if customer_id:
            methods = methods.filter(customer_id=customer_id)
        return Response(PaymentMethodSerializer(methods, many=True).data)
    serializer = PaymentMethodSerializer(data=request.data)
    if serializer.is_valid():
        method = serializer.save()
        if method.is_primary:
            PaymentMethod.objects.filter(customer=method.customer).exclude(pk=method.pk).update(is_primary=False)
        return Response(PaymentMethodSerializer(method).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, page_permission('customers')])
def payment_method_detail(request, pk):
    method = get_object_or_404(PaymentMethod, pk=pk)
    if request.method == 'GET':
        return Response(PaymentMethodSerializer(method).data)
    elif request.method == 'PATCH':
        serializer = PaymentMethodSerializer(method, data=request.data, partial=True)
        if serializer.is_valid():
            method = serializer.save()
            if method.is_primary:
                PaymentMethod.objects.filter(customer=method.customer).exclude(pk=method.pk).update(is_primary=False)
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    method.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


# Auto debit
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, page_permission('customers')])
def auto_debit_config_list_create(request):
    if request.method == 'GET':
        configs = AutoDebitConfig.objects.select_related('customer')
        customer_id = request.query_params.get('customer_id')
        if customer_id:
            configs = configs.filter(customer_id=customer_id)
        return Response(AutoDebitConfigSerializer(configs, many=True).data)
    serializer = AutoDebitConfigSerializer(data=request.data)
    if serializer.is_valid():
        config = serializer.save(created_by=request.user)
        logger.info(f"Auto debit config {config.id} created for customer {config.customer_id}")
        return Response(AutoDebitConfigSerializer(config).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, page_permission('customers')])
def auto_debit_config_detail(request, pk):
    config = get_object_or_404(AutoDebitConfig, pk=pk)
    if request.method == 'GET':
        return Response(AutoDebitConfigSerializer(config).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = AutoDebitConfigSerializer(config, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    config.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated, page_permission('customers')])
def auto_debit_transaction_list(request):
    transactions = AutoDebitTransaction.objects.select_related('customer')
    customer_id = request.query_params.get('customer_id')
    if customer_id:
        transactions = transactions.filter(customer_id=customer_id)
    tx_status = request.query_params.get('status')
    if tx_status:
        transactions = transactions.filter(status=tx_status)
    return Response(AutoDebitTransactionSerializer(transactions, many=True).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, page_permission('customers')])
def auto_debit_trigger(request, pk):
    """Manually run auto debit for a customer"""
    customer = get_object_or_404(Customer, pk=pk)
    auto_debit = services.process_auto_debit(customer)
    if auto_debit is None:
        return Response({'message': 'Balance is below the auto debit trigger amount'}, status=status.HTTP_200_OK)
    create_audit_log(request=request, action='auto_debit', model_name='Customer',
                     object_id=customer.id, object_name=customer.name,
                     changes={'status': auto_debit.status, 'amount': str(auto_debit.amount)})
    return Response(AutoDebitTransactionSerializer(auto_debit).data, status=status.HTTP_201_CREATED)
