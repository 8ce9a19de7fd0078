from django.conf import settings
from django.db import models
from django.db.models import Sum
from decimal import Decimal


class Customer(models.Model):
    """Customers (credit sales are tracked against them)"""
    name = models.CharField(max_length=200)
    phone = models.CharField(max_length=20, blank=True)
    email = models.EmailField(blank=True)
    address = models.TextField(blank=True)
    credit_limit = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    is_active = models.BooleanField(default=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='created_customers')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'customers'
        ordering = ['name']
        indexes = [
            models.Index(fields=['name'], name='idx_customer_name'),
            models.Index(fields=['phone'], name='idx_customer_phone'),
        ]

    def get_credit_balance(self):
        """Outstanding credit: positive entries are owed, negative entries are payments"""
        total = self.credit_transactions.exclude(status='failed').aggregate(total=Sum('amount'))['total']
        return total or Decimal('0.00')

    def get_available_credit(self):
        return max(Decimal('0.00'), self.credit_limit - self.get_credit_balance())


class CreditTransaction(models.Model):
    """Customer credit ledger entry"""
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('completed', 'Completed'),
        ('failed', 'Failed'),
    ]

    customer = models.ForeignKey(Customer, on_delete=models.CASCADE, related_name='credit_transactions')
    amount = models.DecimalField(max_digits=12, decimal_places=2, help_text="Positive = owed by customer, negative = paid")
    description = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    transaction_date = models.DateTimeField(auto_now_add=True)
    bill = models.ForeignKey('pos.Bill', on_delete=models.SET_NULL, null=True, blank=True, related_name='credit_transactions')
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='credit_transactions')

    def __str__(self):
        return f"{self.customer.name}: {self.amount}"

    class Meta:
        db_table = 'credit_transactions'
        ordering = ['-transaction_date']
        indexes = [
            models.Index(fields=['customer', 'status'], name='idx_credit_tx_customer'),
        ]


class PaymentMethod(models.Model):
    """Tokenised customer payment method used for auto-debit"""
    METHOD_TYPE_CHOICES = [
        ('card', 'Card'),
        ('upi', 'UPI'),
        ('emandate', 'E-Mandate'),
    ]

    customer = models.ForeignKey(Customer, on_delete=models.CASCADE, related_name='payment_methods')
    method_type = models.CharField(max_length=20, choices=METHOD_TYPE_CHOICES)
    razorpay_token = models.CharField(max_length=255)
    display_name = models.CharField(max_length=100, blank=True, help_text="e.g. VISA **** 4242")
    is_primary = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.customer.name} {self.get_method_type_display()}"

    class Meta:
        db_table = 'customer_payment_methods'


class AutoDebitConfig(models.Model):
    """Debit ``debit_amount`` once a customer's balance reaches ``trigger_amount``"""
    customer = models.ForeignKey(Customer, on_delete=models.CASCADE, related_name='auto_debit_configs')
    payment_method = models.ForeignKey(PaymentMethod, on_delete=models.CASCADE, related_name='auto_debit_configs')
    trigger_amount = models.DecimalField(max_digits=12, decimal_places=2)
    debit_amount = models.DecimalField(max_digits=12, decimal_places=2)
    is_enabled = models.BooleanField(default=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='auto_debit_configs')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Auto debit {self.debit_amount} for {self.customer.name} at {self.trigger_amount}"

    class Meta:
        db_table = 'auto_debit_configs'


class AutoDebitTransaction(models.Model):
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('success', 'Success'),
        ('failed', 'Failed'),
    ]

    config = models.ForeignKey(AutoDebitConfig, on_delete=models.SET_NULL, null=True, related_name='transactions')
    customer = models.ForeignKey(Customer, on_delete=models.CASCADE, related_name='auto_debit_transactions')
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    trigger_balance = models.DecimalField(max_digits=12, decimal_places=2)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    razorpay_payment_id = models.CharField(max_length=100, blank=True)
    error_message = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Auto debit #{self.pk} {self.status}"

    class Meta:
        db_table = 'auto_debit_transactions'
        ordering = ['-created_at']
