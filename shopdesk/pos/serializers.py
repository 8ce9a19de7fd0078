from rest_framework import serializers
from shopdesk.catalog.models import Product
from shopdesk.locations.models import Store
from shopdesk.parties.models import Customer
from .models import Bill, BillItem, DenominationCount, DayClosing


class BillItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = BillItem
        fields = ['id', 'product', 'product_name', 'quantity', 'unit_price', 'total_price']


class BillSerializer(serializers.ModelSerializer):
    items = BillItemSerializer(many=True, read_only=True)
    store_name = serializers.CharField(source='store.name', read_only=True)
    customer_name = serializers.CharField(source='customer.name', read_only=True, default=None)
    customer_phone = serializers.CharField(source='customer.phone', read_only=True, default=None)
    created_by_name = serializers.SerializerMethodField()
    items_count = serializers.SerializerMethodField()

    class Meta:
        model = Bill
        fields = ['id', 'bill_number', 'store', 'store_name', 'customer', 'customer_name', 'customer_phone',
                  'bill_date', 'total_amount', 'payment_method', 'payment_status', 'payment_breakdown',
                  'notes', 'items', 'items_count', 'created_by', 'created_by_name', 'created_at', 'updated_at']
        read_only_fields = fields

    def get_created_by_name(self, obj):
        return obj.created_by.display_name if obj.created_by else None

    def get_items_count(self, obj):
        return len(obj.items.all())


class CheckoutItemSerializer(serializers.Serializer):
    product_id = serializers.PrimaryKeyRelatedField(queryset=Product.objects.all(), source='product')
    quantity = serializers.DecimalField(max_digits=10, decimal_places=3)
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True)

    def validate_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError("Quantity must be greater than zero")
        return value

    def validate_unit_price(self, value):
        if value is not None and value < 0:
            raise serializers.ValidationError("Unit price cannot be negative")
        return value


class CheckoutSerializer(serializers.Serializer):
    store_id = serializers.PrimaryKeyRelatedField(queryset=Store.objects.all(), source='store')
    items = CheckoutItemSerializer(many=True)
    payment_method = serializers.ChoiceField(choices=Bill.PAYMENT_METHOD_CHOICES, default='cash')
    customer_id = serializers.PrimaryKeyRelatedField(queryset=Customer.objects.all(), source='customer',
                                                     required=False, allow_null=True)
    customer_name = serializers.CharField(required=False, allow_blank=True, default='')
    payment_breakdown = serializers.DictField(child=serializers.DecimalField(max_digits=12, decimal_places=2),
                                              required=False, default=dict)
    notes = serializers.CharField(required=False, allow_blank=True, default='')

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError("Cart is empty")
        return value


class BillItemsUpdateSerializer(serializers.Serializer):
    items = CheckoutItemSerializer(many=True)
    payment_breakdown = serializers.DictField(child=serializers.DecimalField(max_digits=12, decimal_places=2),
                                              required=False)

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError("A bill must have at least one item")
        return value


class SettleBillSerializer(serializers.Serializer):
    payment_method = serializers.ChoiceField(choices=[('cash', 'Cash'), ('card', 'Card'), ('upi', 'UPI')])


def validate_denominations(value):
    if not isinstance(value, dict):
        raise serializers.ValidationError("Denominations must be an object of note: count")
    for note, count in value.items():
        try:
            note_value = float(note)
            count = int(count)
        except (TypeError, ValueError):
            raise serializers.ValidationError(f"Invalid denomination entry: {note}")
        if note_value <= 0 or count < 0:
            raise serializers.ValidationError(f"Invalid denomination entry: {note}")
    return {str(note): int(count) for note, count in value.items()}


class DenominationCountSerializer(serializers.ModelSerializer):
    store_name = serializers.CharField(source='store.name', read_only=True)

    class Meta:
        model = DenominationCount
        fields = ['id', 'store', 'store_name', 'count_date', 'terminal_id', 'denominations', 'total_amount',
                  'counted_by', 'created_at', 'updated_at']
        read_only_fields = ['total_amount', 'counted_by', 'created_at', 'updated_at']
        # Upserted by (store, count_date, terminal_id) in the view
        validators = []

    def validate_denominations(self, value):
        return validate_denominations(value)


class DayClosingSerializer(serializers.ModelSerializer):
    store_name = serializers.CharField(source='store.name', read_only=True)
    opening_total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    closing_total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    expected_cash = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    closed_by_name = serializers.SerializerMethodField()

    class Meta:
        model = DayClosing
        fields = ['id', 'store', 'store_name', 'closing_date', 'opening_denominations', 'closing_denominations',
                  'opening_total', 'closing_total', 'total_cash_sales', 'total_change_given', 'expected_cash',
                  'variance_amount', 'notes', 'closed_by', 'closed_by_name', 'closed_at']
        read_only_fields = ['variance_amount', 'closed_by', 'closed_at']
        validators = []
        extra_kwargs = {'total_cash_sales': {'required': False}}

    def get_closed_by_name(self, obj):
        return obj.closed_by.display_name if obj.closed_by else None

    def validate_opening_denominations(self, value):
        return validate_denominations(value)

    def validate_closing_denominations(self, value):
        return validate_denominations(value)
