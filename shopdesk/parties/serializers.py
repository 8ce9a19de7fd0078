from rest_framework import serializers
from .models import Customer, CreditTransaction, PaymentMethod, AutoDebitConfig, AutoDebitTransaction


class CustomerSerializer(serializers.ModelSerializer):
    credit_balance = serializers.SerializerMethodField()
    available_credit = serializers.SerializerMethodField()

    class Meta:
        model = Customer
        fields = ['id', 'name', 'phone', 'email', 'address', 'credit_limit', 'credit_balance',
                  'available_credit', 'is_active', 'created_by', 'created_at', 'updated_at']
        read_only_fields = ['created_by', 'created_at', 'updated_at']

    def get_credit_balance(self, obj):
        return str(obj.get_credit_balance())

    def get_available_credit(self, obj):
        return str(obj.get_available_credit())

    def validate_credit_limit(self, value):
        if value < 0:
            raise serializers.ValidationError("Credit limit cannot be negative")
        return value


class CreditTransactionSerializer(serializers.ModelSerializer):
    customer_name = serializers.CharField(source='customer.name', read_only=True)
    bill_number = serializers.CharField(source='bill.bill_number', read_only=True, default=None)

    class Meta:
        model = CreditTransaction
        fields = ['id', 'customer', 'customer_name', 'amount', 'description', 'status',
                  'transaction_date', 'bill', 'bill_number', 'created_by']
        read_only_fields = ['transaction_date', 'created_by']

    def validate_amount(self, value):
        if value == 0:
            raise serializers.ValidationError("Amount cannot be zero")
        return value


class CreditPaymentSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    description = serializers.CharField(required=False, allow_blank=True, default='')


class PaymentMethodSerializer(serializers.ModelSerializer):
    class Meta:
        model = PaymentMethod
        fields = ['id', 'customer', 'method_type', 'razorpay_token', 'display_name', 'is_primary',
                  'is_active', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']
        extra_kwargs = {'razorpay_token': {'write_only': True}}


class AutoDebitConfigSerializer(serializers.ModelSerializer):
    customer_name = serializers.CharField(source='customer.name', read_only=True)

    class Meta:
        model = AutoDebitConfig
        fields = ['id', 'customer', 'customer_name', 'payment_method', 'trigger_amount', 'debit_amount',
                  'is_enabled', 'created_by', 'created_at', 'updated_at']
        read_only_fields = ['created_by', 'created_at', 'updated_at']

    def validate(self, attrs):
        customer = attrs.get('customer', getattr(self.instance, 'customer', None))
        payment_method = attrs.get('payment_method', getattr(self.instance, 'payment_method', None))
        trigger_amount = attrs.get('trigger_amount', getattr(self.instance, 'trigger_amount', None))
        debit_amount = attrs.get('debit_amount', getattr(self.instance, 'debit_amount', None))
        is_enabled = attrs.get('is_enabled', getattr(self.instance, 'is_enabled', True))

        if payment_method and customer and payment_method.customer_id != customer.id:
            raise serializers.ValidationError({'payment_method': "Payment method belongs to another customer"})
        if trigger_amount is not None and trigger_amount <= 0:
            raise serializers.ValidationError({'trigger_amount': "Trigger amount must be greater than zero"})
        if debit_amount is not None and debit_amount <= 0:
            raise serializers.ValidationError({'debit_amount': "Debit amount must be greater than zero"})
        if is_enabled and customer:
            others = AutoDebitConfig.objects.filter(customer=customer, is_enabled=True)
            if self.instance is not None:
                others = others.exclude(pk=self.instance.pk)
            if others.exists():
                raise serializers.ValidationError({'customer': "Customer already has an enabled auto debit configuration"})
        return attrs


class AutoDebitTransactionSerializer(serializers.ModelSerializer):
    customer_name = serializers.CharField(source='customer.name', read_only=True)

    class Meta:
        model = AutoDebitTransaction
        fields = ['id', 'config', 'customer', 'customer_name', 'amount', 'trigger_balance', 'status',
                  'razorpay_payment_id', 'error_message', 'created_at', 'updated_at']
