from rest_framework import serializers
from .models import Store


class StoreSerializer(serializers.ModelSerializer):
    manager_name = serializers.CharField(source='manager.display_name', read_only=True, default=None)

    class Meta:
        model = Store
        fields = ['id', 'name', 'code', 'shop_type', 'address', 'phone', 'email',
                  'latitude', 'longitude', 'geo_fence_radius', 'manager', 'manager_name',
                  'is_active', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate_code(self, value):
        return value.strip().upper()
