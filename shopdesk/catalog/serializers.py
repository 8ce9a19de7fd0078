from rest_framework import serializers
from .models import Product, ProductShop, ReorderPoint


class ProductSerializer(serializers.ModelSerializer):
    margin = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    store_ids = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = ['id', 'name', 'sku', 'category', 'description', 'price', 'cost_price', 'margin',
                  'quantity', 'is_active', 'store_ids', 'created_by', 'created_at', 'updated_at']
        read_only_fields = ['created_by', 'created_at', 'updated_at']

    def get_store_ids(self, obj):
        return [assignment.store_id for assignment in obj.store_assignments.all()]

    def validate_sku(self, value):
        # Blank SKUs are stored as NULL so the unique index ignores them
        if not value or not value.strip():
            return None
        return value.strip()

    def validate_price(self, value):
        if value < 0:
            raise serializers.ValidationError("Price cannot be negative")
        return value

    def validate_cost_price(self, value):
        if value < 0:
            raise serializers.ValidationError("Cost price cannot be negative")
        return value


class ProductShopSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    store_name = serializers.CharField(source='store.name', read_only=True)

    class Meta:
        model = ProductShop
        fields = ['id', 'product', 'product_name', 'store', 'store_name', 'created_at']


class ReorderPointSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    store_name = serializers.CharField(source='store.name', read_only=True)

    class Meta:
        model = ReorderPoint
        fields = ['id', 'product', 'product_name', 'store', 'store_name', 'minimum_stock',
                  'reorder_quantity', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']
