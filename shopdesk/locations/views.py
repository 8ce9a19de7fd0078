import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Q
from django.shortcuts import get_object_or_404
from shopdesk.core.permissions import page_permission
from shopdesk.core.utils import create_audit_log
from .models import Store
from .serializers import StoreSerializer

logger = logging.getLogger('shopdesk.locations')


def store_delete_blocker(store):
    """Return the reason a store cannot be deleted, or None"""
    if store.bills.exists():
        return f'Cannot delete "{store.name}" because it has bills. Deactivate the store instead.'
    if store.stock_entries.exists():
        return f'Cannot delete "{store.name}" because it has stock entries. Deactivate the store instead.'
    if store.attendance_records.exists():
        return f'Cannot delete "{store.name}" because it has attendance records. Deactivate the store instead.'
    return None


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, page_permission('shops')])
def store_list_create(request):
    """List stores or create a new store"""
    if request.method == 'GET':
        stores = Store.objects.select_related('manager')
        active = request.query_params.get('active')
        if active is not None:
            stores = stores.filter(is_active=active.lower() in ('1', 'true', 'yes'))
        shop_type = request.query_params.get('shop_type')
        if shop_type:
            stores = stores.filter(shop_type=shop_type)
        search = request.query_params.get('search')
        if search:
            stores = stores.filter(Q(name__icontains=search) | Q(code__icontains=search))
        serializer = StoreSerializer(stores, many=True)
        return Response(serializer.data)
    else:
        serializer = StoreSerializer(data=request.data)
        if serializer.is_valid():
            store = serializer.save()
            logger.info(f"Store '{store.name}' created by {request.user.username}")
            create_audit_log(request=request, action='create', model_name='Store',
                             object_id=store.id, object_name=store.name)
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        logger.warning(f"Store creation validation failed: {serializer.errors}")
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, page_permission('shops')])
def store_detail(request, pk):
    """Retrieve, update or delete a store"""
    store = get_object_or_404(Store, pk=pk)

    if request.method == 'GET':
        serializer = StoreSerializer(store)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = StoreSerializer(store, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            logger.info(f"Store {pk} updated by {request.user.username}")
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        blocker = store_delete_blocker(store)
        if blocker:
            logger.warning(f"Refused to delete store {pk}: {blocker}")
            return Response({'error': blocker}, status=status.HTTP_400_BAD_REQUEST)
        create_audit_log(request=request, action='delete', model_name='Store',
                         object_id=store.id, object_name=store.name)
        store.delete()
        logger.info(f"Store {pk} deleted by {request.user.username}")
        return Response(status=status.HTTP_204_NO_CONTENT)
