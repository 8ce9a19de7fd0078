from decimal import Decimal
from rest_framework import serializers
from shopdesk.catalog.models import Product
from shopdesk.hrms.models import Shift
from shopdesk.locations.models import Store
from .models import StockEntry, StockRequest, StockMovement, Loss, LowStockAlert


class StockEntrySerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    store_name = serializers.CharField(source='store.name', read_only=True)
    shift_name = serializers.CharField(source='shift.shift_name', read_only=True, default=None)
    units_sold = serializers.DecimalField(max_digits=12, decimal_places=3, read_only=True)
    sales_amount = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    profit = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    product_loss = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = StockEntry
        fields = ['id', 'product', 'product_name', 'store', 'store_name', 'stock_date',
                  'opening_stock', 'stock_added', 'closing_stock', 'actual_stock',
                  'units_sold', 'sales_amount', 'profit', 'product_loss',
                  'operator_name', 'shift', 'shift_name', 'cash_received', 'online_received',
                  'created_by', 'created_at', 'updated_at']
        read_only_fields = ['product', 'store', 'stock_date', 'closing_stock', 'created_by', 'created_at', 'updated_at']
        validators = []

    def validate(self, attrs):
        # A row is keyed by product, store and date; corrections only touch quantities
        if self.instance is not None:
            current = {
                'product': str(self.instance.product_id),
                'store': str(self.instance.store_id),
                'stock_date': self.instance.stock_date.isoformat(),
            }
            changed = {
                field: 'Cannot be changed on an existing stock entry.'
                for field, value in current.items()
                if field in self.initial_data and str(self.initial_data[field]) != value
            }
            if changed:
                raise serializers.ValidationError(changed)
        return attrs

    def update(self, instance, validated_data):
        # Keep sales already booked against closing_stock when the sheet is corrected
        delta = (validated_data.get('opening_stock', instance.opening_stock) - instance.opening_stock
                 + validated_data.get('stock_added', instance.stock_added) - instance.stock_added)
        instance = super().update(instance, validated_data)
        if delta:
            instance.closing_stock = instance.closing_stock + delta
            instance.save(update_fields=['closing_stock', 'updated_at'])
        return instance


class StockEntryCreateSerializer(serializers.Serializer):
    product = serializers.PrimaryKeyRelatedField(queryset=Product.objects.all())
    store = serializers.PrimaryKeyRelatedField(queryset=Store.objects.all())
    stock_date = serializers.DateField(required=False)
    opening_stock = serializers.DecimalField(max_digits=10, decimal_places=3, required=False, allow_null=True, min_value=Decimal('0'))
    stock_added = serializers.DecimalField(max_digits=10, decimal_places=3, required=False, default=Decimal('0'), min_value=Decimal('0'))
    actual_stock = serializers.DecimalField(max_digits=10, decimal_places=3, required=False, allow_null=True, min_value=Decimal('0'))
    operator_name = serializers.CharField(required=False, allow_blank=True, default='')
    shift = serializers.PrimaryKeyRelatedField(queryset=Shift.objects.all(), required=False, allow_null=True)
    cash_received = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, default=Decimal('0.00'))
    online_received = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, default=Decimal('0.00'))


class BatchStockItemSerializer(serializers.Serializer):
    product = serializers.PrimaryKeyRelatedField(queryset=Product.objects.all())
    opening_stock = serializers.DecimalField(max_digits=10, decimal_places=3, required=False, allow_null=True, min_value=Decimal('0'))
    stock_added = serializers.DecimalField(max_digits=10, decimal_places=3, required=False, default=Decimal('0'), min_value=Decimal('0'))


class BatchStockEntrySerializer(serializers.Serializer):
    store = serializers.PrimaryKeyRelatedField(queryset=Store.objects.all())
    stock_date = serializers.DateField(required=False)
    operator_name = serializers.CharField(required=False, allow_blank=True, default='')
    items = BatchStockItemSerializer(many=True)

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError("At least one product is required")
        product_ids = [item['product'].id for item in value]
        if len(product_ids) != len(set(product_ids)):
            raise serializers.ValidationError("Each product can only appear once")
        return value


class ActualStockSerializer(serializers.Serializer):
    product = serializers.PrimaryKeyRelatedField(queryset=Product.objects.all())
    store = serializers.PrimaryKeyRelatedField(queryset=Store.objects.all())
    actual_stock = serializers.DecimalField(max_digits=10, decimal_places=3, min_value=Decimal('0'))


class StockRequestSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    requesting_store_name = serializers.CharField(source='requesting_store.name', read_only=True)
    fulfilling_store_name = serializers.CharField(source='fulfilling_store.name', read_only=True)

    class Meta:
        model = StockRequest
        fields = ['id', 'product', 'product_name', 'requesting_store', 'requesting_store_name',
                  'fulfilling_store', 'fulfilling_store_name', 'requested_quantity', 'status',
                  'request_date', 'response_date', 'notes', 'created_by', 'responded_by',
                  'created_at', 'updated_at']
        read_only_fields = ['status', 'request_date', 'response_date', 'created_by', 'responded_by',
                            'created_at', 'updated_at']

    def validate_requested_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError("Requested quantity must be greater than zero")
        return value

    def validate(self, attrs):
        requesting = attrs.get('requesting_store', getattr(self.instance, 'requesting_store', None))
        fulfilling = attrs.get('fulfilling_store', getattr(self.instance, 'fulfilling_store', None))
        if requesting and fulfilling and requesting.pk == fulfilling.pk:
            raise serializers.ValidationError({'fulfilling_store': "Requesting and fulfilling stores must be different"})
        return attrs


class StockMovementSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    from_store_name = serializers.CharField(source='from_store.name', read_only=True, default=None)
    to_store_name = serializers.CharField(source='to_store.name', read_only=True, default=None)

    class Meta:
        model = StockMovement
        fields = ['id', 'product', 'product_name', 'from_store', 'from_store_name', 'to_store',
                  'to_store_name', 'quantity', 'movement_type', 'movement_date', 'status',
                  'stock_request', 'notes', 'created_by', 'approved_by', 'created_at']


class LossSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    store_name = serializers.CharField(source='store.name', read_only=True)
    loss_value = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = Loss
        fields = ['id', 'product', 'product_name', 'store', 'store_name', 'shift', 'loss_type',
                  'quantity_lost', 'loss_value', 'reason', 'operator_name', 'loss_date',
                  'created_by', 'created_at']
        read_only_fields = ['created_by', 'created_at']

    def validate_quantity_lost(self, value):
        if value <= 0:
            raise serializers.ValidationError("Quantity lost must be greater than zero")
        return value


class LowStockAlertSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    store_name = serializers.CharField(source='store.name', read_only=True)

    class Meta:
        model = LowStockAlert
        fields = ['id', 'product', 'product_name', 'store', 'store_name', 'current_stock',
                  'minimum_threshold', 'alert_date', 'is_resolved', 'resolved_at', 'created_at']
