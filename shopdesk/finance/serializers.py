from rest_framework import serializers
from shopdesk.locations.models import Store
from .models import ExpenseCategory, Expense, Credit


class ExpenseCategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = ExpenseCategory
        fields = ['id', 'value', 'label', 'created_at']
        read_only_fields = ['created_at']


class ExpenseSerializer(serializers.ModelSerializer):
    category = serializers.SlugRelatedField(slug_field='value', queryset=ExpenseCategory.objects.all())
    category_label = serializers.CharField(source='category.label', read_only=True)
    store_name = serializers.CharField(source='store.name', read_only=True, default=None)

    class Meta:
        model = Expense
        fields = ['id', 'store', 'store_name', 'amount', 'category', 'category_label', 'description',
                  'expense_date', 'payment_method', 'receipt_url', 'created_by', 'created_at', 'updated_at']
        read_only_fields = ['created_by', 'created_at', 'updated_at']

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError("Amount must be greater than zero")
        return value


class CreditSerializer(serializers.ModelSerializer):
    store_name = serializers.CharField(source='store.name', read_only=True, default=None)

    class Meta:
        model = Credit
        fields = ['id', 'store', 'store_name', 'amount', 'credit_type', 'credit_date', 'description',
                  'created_by', 'created_at']
        read_only_fields = ['created_by', 'created_at']

    def validate_credit_type(self, value):
        if value not in ('given', 'received'):
            raise serializers.ValidationError("Use the daily financials endpoint for cash, card, online and discount entries")
        return value

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError("Amount must be greater than zero")
        return value


class DailyFinancialSerializer(serializers.Serializer):
    store = serializers.PrimaryKeyRelatedField(queryset=Store.objects.all())
    date = serializers.DateField()
    cash_amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, default=0)
    card_amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, default=0)
    online_amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, default=0)
    discount_amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, default=0)
