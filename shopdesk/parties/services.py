"""
Customer credit rules and Razorpay auto-debit.
"""
import logging
from decimal import Decimal

import requests
from django.conf import settings
from django.db import transaction

from shopdesk.core.exceptions import BusinessRuleError
from .models import Customer, CreditTransaction, AutoDebitConfig, AutoDebitTransaction

logger = logging.getLogger(__name__)


def get_customer_credit_balance(customer):
    return customer.get_credit_balance()


def can_make_credit_purchase(customer, amount):
    """A credit sale must keep the outstanding balance within the credit limit"""
    amount = Decimal(str(amount))
    if customer.credit_limit <= 0:
        return False
    return customer.get_credit_balance() + amount <= customer.credit_limit


def record_credit_payment(customer, amount, user=None, description='', bill=None):
    """Customer paid towards their balance"""
    amount = Decimal(str(amount))
    if amount <= 0:
        raise BusinessRuleError('Payment amount must be greater than zero.')
    entry = CreditTransaction.objects.create(
        customer=customer,
        amount=-amount,
        description=description or 'Credit payment',
        status='completed',
        created_by=user,
        bill=bill,
    )
    logger.info(f"Recorded credit payment of {amount} for customer {customer.id}")
    return entry


def get_enabled_config(customer):
    return (AutoDebitConfig.objects.select_related('payment_method')
            .filter(customer=customer, is_enabled=True).first())


def check_auto_debit_trigger(customer):
    """True when an enabled config exists and the balance has reached its trigger"""
    config = get_enabled_config(customer)
    if config is None:
        return False
    return customer.get_credit_balance() >= config.trigger_amount


def _create_razorpay_payment(config, auto_debit):
    """POST a recurring payment to Razorpay and return the decoded response"""
    payload = {
        'amount': int((config.debit_amount * 100).to_integral_value()),
        'currency': 'INR',
        'receipt': f'auto_debit_{auto_debit.id}',
        'method': config.payment_method.method_type,
        'token': config.payment_method.razorpay_token,
        'customer_id': str(config.customer_id),
        'recurring': '1',
        'description': f'Auto debit for {config.customer.name}',
    }
    response = requests.post(
        f"{settings.RAZORPAY_API_URL.rstrip('/')}/payments",
        json=payload,
        auth=(settings.RAZORPAY_KEY_ID, settings.RAZORPAY_KEY_SECRET),
        timeout=settings.RAZORPAY_TIMEOUT,
    )
    data = response.json()
    if response.status_code >= 400:
        error = data.get('error', {}) if isinstance(data, dict) else {}
        raise requests.exceptions.HTTPError(error.get('description') or f'HTTP {response.status_code}')
    return data


def process_auto_debit(customer):
    """
    Charge the customer's saved payment method.

    Returns the AutoDebitTransaction, or None when nothing had to be debited.
    Upstream failures are stored on the transaction rather than raised.
    """
    if not settings.RAZORPAY_KEY_ID or not settings.RAZORPAY_KEY_SECRET:
        raise BusinessRuleError('Razorpay credentials are not configured.')

    config = get_enabled_config(customer)
    if config is None:
        raise BusinessRuleError('Auto debit is not enabled for this customer.')

    balance = customer.get_credit_balance()
    if balance < config.trigger_amount:
        logger.info(f"Auto debit skipped for customer {customer.id}: balance {balance} below trigger {config.trigger_amount}")
        return None

    auto_debit = AutoDebitTransaction.objects.create(
        config=config,
        customer=customer,
        amount=config.debit_amount,
        trigger_balance=balance,
        status='pending',
    )

    try:
        payment = _create_razorpay_payment(config, auto_debit)
    except (requests.exceptions.RequestException, ValueError) as e:
        auto_debit.status = 'failed'
        auto_debit.error_message = str(e) or 'Payment request failed'
        auto_debit.save(update_fields=['status', 'error_message', 'updated_at'])
        logger.error(f"Auto debit {auto_debit.id} for customer {customer.id} failed: {auto_debit.error_message}")
        return auto_debit

    if payment.get('status') == 'captured':
        with transaction.atomic():
            auto_debit.status = 'success'
            auto_debit.razorpay_payment_id = payment.get('id', '')
            auto_debit.save(update_fields=['status', 'razorpay_payment_id', 'updated_at'])
            CreditTransaction.objects.create(
                customer=customer,
                amount=-config.debit_amount,
                description=f"Auto debit payment - {auto_debit.razorpay_payment_id}",
                status='completed',
            )
        logger.info(f"Auto debit {auto_debit.id} captured for customer {customer.id}")
    else:
        auto_debit.status = 'failed'
        auto_debit.razorpay_payment_id = payment.get('id', '')
        auto_debit.error_message = payment.get('error_description') or f"Payment status: {payment.get('status')}"
        auto_debit.save(update_fields=['status', 'razorpay_payment_id', 'error_message', 'updated_at'])
        logger.warning(f"Auto debit {auto_debit.id} not captured: {auto_debit.error_message}")
    return auto_debit


def customer_delete_blocker(customer):
    if customer.bills.exists():
        return f'Cannot delete "{customer.name}" because they have bills.'
    return None


def find_or_create_customer_by_name(name, user=None):
    """Pending bills may name a walk-in customer; reuse an existing record when one matches"""
    name = name.strip()
    customer = Customer.objects.filter(name__iexact=name).first()
    if customer is None:
        customer = Customer.objects.create(name=name, phone='', created_by=user)
        logger.info(f"Created customer '{name}' for pending bill")
    return customer
