"""
Billing: checkout, bill edits, cancellation, settlement and the cash drawer.

Every function that touches more than one row runs inside
``transaction.atomic`` and raises ``BusinessRuleError`` to abort.
"""
import logging
from collections import OrderedDict
from decimal import Decimal

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from shopdesk.core.exceptions import BusinessRuleError
from shopdesk.inventory import services as inventory_services
from shopdesk.parties import services as credit_services
from shopdesk.parties.models import CreditTransaction
from .models import Bill, BillItem, DayClosing, DenominationCount, denominations_total

logger = logging.getLogger(__name__)

SPLIT_METHODS = ('cash', 'card', 'upi', 'online')
SETTLE_METHODS = ('cash', 'card', 'upi')
MONEY = Decimal('0.01')


def generate_bill_number(store, user):
    """
    STORE-SALE-YYYYMMDD-NNNN: four letter store and salesperson prefixes,
    today's date and the salesperson's running bill count for the day.
    """
    today = timezone.localdate()
    store_prefix = ((store.name if store else '') or 'STORE').replace(' ', '')[:4].upper() or 'STORE'
    staff_name = (user.code or user.display_name) if user else ''
    staff_prefix = (staff_name or 'USER').replace(' ', '')[:4].upper() or 'USER'

    count = Bill.objects.filter(created_by=user, bill_date__date=today).count() + 1
    while True:
        bill_number = f"{store_prefix}-{staff_prefix}-{today.strftime('%Y%m%d')}-{count:04d}"
        if not Bill.objects.filter(bill_number=bill_number).exists():
            return bill_number
        count += 1


def _merge_quantities(items):
    merged = OrderedDict()
    for item in items:
        product = item['product']
        if product.pk in merged:
            merged[product.pk] = (product, merged[product.pk][1] + item['quantity'])
        else:
            merged[product.pk] = (product, item['quantity'])
    return list(merged.values())


def _check_stock(store, items):
    """Tracked products (those with a stock sheet in this store) cannot be oversold"""
    today = timezone.localdate()
    for product, quantity in _merge_quantities(items):
        if not inventory_services.is_tracked(product, store, today):
            continue
        available = inventory_services.available_for_sale(product, store, today)
        if quantity > available:
            raise BusinessRuleError(
                f"Insufficient stock for {product.name}. "
                f"Available: {available.normalize():f}, Required: {quantity.normalize():f}"
            )


def _build_items(bill, items):
    total = Decimal('0.00')
    for item in items:
        product = item['product']
        quantity = Decimal(str(item['quantity']))
        if quantity <= 0:
            raise BusinessRuleError(f"Quantity for {product.name} must be greater than zero.")
        unit_price = item.get('unit_price')
        unit_price = product.price if unit_price is None else Decimal(str(unit_price))
        line_total = (quantity * unit_price).quantize(MONEY)
        BillItem.objects.create(
            bill=bill,
            product=product,
            product_name=product.name,
            quantity=quantity,
            unit_price=unit_price,
            total_price=line_total,
        )
        total += line_total
    return total


def _validate_breakdown(breakdown, total):
    if not breakdown:
        raise BusinessRuleError('Split payments need a payment breakdown.')
    unknown = [method for method in breakdown if method not in SPLIT_METHODS]
    if unknown:
        raise BusinessRuleError(f"Unknown split payment method: {', '.join(unknown)}")
    paid = sum((Decimal(str(amount)) for amount in breakdown.values()), Decimal('0.00'))
    if paid.quantize(MONEY) != total.quantize(MONEY):
        raise BusinessRuleError(f"Split payment amounts ({paid:.2f}) must equal the bill total ({total:.2f}).")
    return {method: str(Decimal(str(amount)).quantize(MONEY)) for method, amount in breakdown.items()}


def _bill_total(items):
    return sum(
        ((Decimal(str(item['quantity'])) * (item['product'].price if item.get('unit_price') is None
                                            else Decimal(str(item['unit_price'])))).quantize(MONEY)
         for item in items),
        Decimal('0.00'),
    )


def checkout(store, user, items, payment_method='cash', customer=None, customer_name=None,
             payment_breakdown=None, notes=''):
    """
    Create a bill with its items, book the credit entry and take the stock out.

    items: list of dicts ``{'product': Product, 'quantity': Decimal, 'unit_price': Decimal|None}``.
    """
    if not items:
        raise BusinessRuleError('Cart is empty')
    if payment_method not in dict(Bill.PAYMENT_METHOD_CHOICES):
        raise BusinessRuleError(f"Unsupported payment method: {payment_method}")

    with transaction.atomic():
        if payment_method == 'pending' and customer is None and customer_name and customer_name.strip():
            customer = credit_services.find_or_create_customer_by_name(customer_name, user=user)

        total = _bill_total(items)
        if payment_method == 'credit':
            if customer is None:
                raise BusinessRuleError('Please select a customer for credit payment')
            if not credit_services.can_make_credit_purchase(customer, total):
                raise BusinessRuleError(
                    f"Credit limit exceeded for {customer.name}. "
                    f"Available credit: {customer.get_available_credit():.2f}, Bill total: {total:.2f}"
                )

        breakdown = {}
        if payment_method == 'split':
            breakdown = _validate_breakdown(payment_breakdown, total)

        _check_stock(store, [dict(item, quantity=Decimal(str(item['quantity']))) for item in items])

        bill = Bill.objects.create(
            bill_number=generate_bill_number(store, user),
            store=store,
            customer=customer,
            payment_method=payment_method,
            payment_status='pending' if payment_method in ('credit', 'pending') else 'completed',
            payment_breakdown=breakdown,
            notes=notes or '',
            created_by=user,
        )
        bill.total_amount = _build_items(bill, items)
        bill.save(update_fields=['total_amount', 'updated_at'])

        if payment_method == 'credit':
            CreditTransaction.objects.create(
                customer=customer,
                amount=bill.total_amount,
                description=f"Credit sale - Bill #{bill.bill_number}",
                status='pending',
                bill=bill,
                created_by=user,
            )

        inventory_services.adjust_stock_for_bill(
            [(item.product, item.quantity) for item in bill.items.select_related('product')],
            store, kind='sale',
        )

    logger.info(f"Bill {bill.bill_number} created at {store.name}: {bill.total_amount} via {payment_method}")

    if payment_method == 'credit' and credit_services.check_auto_debit_trigger(customer):
        try:
            credit_services.process_auto_debit(customer)
        except BusinessRuleError as e:
            logger.warning(f"Auto debit after bill {bill.bill_number} not attempted: {e}")

    return bill


def update_bill_items(bill, items, user=None, payment_breakdown=None):
    """Replace a bill's items: old quantities go back to stock and the new ones come out"""
    if not items:
        raise BusinessRuleError('A bill must have at least one item.')

    with transaction.atomic():
        bill = Bill.objects.select_for_update().get(pk=bill.pk)
        if bill.payment_status == 'cancelled':
            raise BusinessRuleError('Cancelled bills cannot be edited.')

        if bill.payment_method == 'credit' and bill.customer is not None:
            increase = _bill_total(items) - bill.total_amount
            # The bill's own pending entry is already in the balance
            if increase > 0 and not credit_services.can_make_credit_purchase(bill.customer, increase):
                raise BusinessRuleError(
                    f"Credit limit exceeded for {bill.customer.name}. "
                    f"Available credit: {bill.customer.get_available_credit():.2f}, Additional: {increase:.2f}"
                )

        old_items = [(item.product, item.quantity) for item in bill.items.select_related('product')]
        inventory_services.adjust_stock_for_bill(old_items, bill.store, kind='return')
        bill.items.all().delete()

        _check_stock(bill.store, [dict(item, quantity=Decimal(str(item['quantity']))) for item in items])
        bill.total_amount = _build_items(bill, items)
        fields = ['total_amount', 'updated_at']
        if bill.payment_method == 'split':
            bill.payment_breakdown = _validate_breakdown(payment_breakdown or bill.payment_breakdown, bill.total_amount)
            fields.append('payment_breakdown')
        bill.save(update_fields=fields)

        inventory_services.adjust_stock_for_bill(
            [(item.product, item.quantity) for item in bill.items.select_related('product')],
            bill.store, kind='sale',
        )

        if bill.payment_method == 'credit':
            bill.credit_transactions.filter(status='pending', amount__gt=0).update(amount=bill.total_amount)

    logger.info(f"Bill {bill.bill_number} items updated; new total {bill.total_amount}")
    return bill


def cancel_bill(bill, user=None):
    with transaction.atomic():
        bill = Bill.objects.select_for_update().get(pk=bill.pk)
        if bill.payment_status == 'cancelled':
            raise BusinessRuleError('Bill is already cancelled.')

        inventory_services.adjust_stock_for_bill(
            [(item.product, item.quantity) for item in bill.items.select_related('product')],
            bill.store, kind='return',
        )
        bill.payment_status = 'cancelled'
        bill.save(update_fields=['payment_status', 'updated_at'])
        bill.credit_transactions.filter(amount__gt=0).exclude(status='failed').update(status='failed')

    logger.info(f"Bill {bill.bill_number} cancelled")
    return bill


def settle_bill(bill, payment_method, user=None):
    """Collect payment for a pending or credit bill"""
    if payment_method not in SETTLE_METHODS:
        raise BusinessRuleError(f"Bills can only be settled with {', '.join(SETTLE_METHODS)}.")

    with transaction.atomic():
        bill = Bill.objects.select_for_update().get(pk=bill.pk)
        if bill.payment_status != 'pending':
            raise BusinessRuleError(f"Only pending bills can be settled (bill is {bill.payment_status}).")

        if bill.payment_method == 'credit':
            if bill.customer is not None:
                credit_services.record_credit_payment(
                    bill.customer, bill.total_amount, user=user,
                    description=f"Payment for Bill #{bill.bill_number}", bill=bill,
                )
            bill.payment_breakdown = {'settled_with': payment_method}
        else:
            bill.payment_method = payment_method
        bill.payment_status = 'completed'
        bill.save(update_fields=['payment_method', 'payment_status', 'payment_breakdown', 'updated_at'])

    logger.info(f"Bill {bill.bill_number} settled via {payment_method}")
    return bill


def render_receipt(bill, width=40):
    """Plain text receipt for thermal printers"""
    store = bill.store
    lines = [store.name.center(width)]
    if store.address:
        lines.append(store.address[:width].center(width))
    if store.phone:
        lines.append(f"Ph: {store.phone}".center(width))
    lines.append('-' * width)
    lines.append(f"Bill: {bill.bill_number}")
    lines.append(f"Date: {timezone.localtime(bill.bill_date).strftime('%d-%m-%Y %H:%M')}")
    if bill.customer:
        lines.append(f"Customer: {bill.customer.name}")
    if bill.created_by:
        lines.append(f"Cashier: {bill.created_by.display_name}")
    lines.append('-' * width)

    for item in bill.items.all():
        lines.append(item.product_name[:width])
        qty = f"{item.quantity.normalize():f} x {item.unit_price:.2f}"
        amount = f"{item.total_price:.2f}"
        lines.append(f"  {qty}".ljust(width - len(amount)) + amount)

    lines.append('-' * width)
    total = f"{bill.total_amount:.2f}"
    lines.append('TOTAL'.ljust(width - len(total)) + total)
    if bill.payment_method == 'split':
        for method, amount in bill.payment_breakdown.items():
            amount = f"{Decimal(str(amount)):.2f}"
            lines.append(f"  {method.upper()}".ljust(width - len(amount)) + amount)
    else:
        lines.append(f"Paid by: {bill.get_payment_method_display()}")
    if bill.payment_status != 'completed':
        lines.append(f"Status: {bill.get_payment_status_display().upper()}")
    lines.append('=' * width)
    lines.append('Thank you! Visit again'.center(width))
    return '\n'.join(lines) + '\n'


def cash_sales_for_day(store, on_date):
    """Cash taken on a day: cash bills plus the cash part of split bills"""
    bills = Bill.objects.filter(store=store, bill_date__date=on_date).exclude(payment_status='cancelled')
    total = bills.filter(payment_method='cash').aggregate(total=Sum('total_amount'))['total'] or Decimal('0.00')
    for breakdown in bills.filter(payment_method='split').values_list('payment_breakdown', flat=True):
        total += Decimal(str((breakdown or {}).get('cash', 0)))
    return total


def save_denomination_count(store, denominations, user=None, count_date=None, terminal_id=''):
    """Upsert the drawer count for a store terminal on a day"""
    count, created = DenominationCount.objects.get_or_create(
        store=store,
        count_date=count_date or timezone.localdate(),
        terminal_id=terminal_id or '',
        defaults={'denominations': denominations, 'counted_by': user},
    )
    if not created:
        count.denominations = denominations
        count.counted_by = user
        count.save()
    return count


def close_day(store, user, opening_denominations, closing_denominations, closing_date=None,
              total_cash_sales=None, total_change_given=Decimal('0.00'), notes=''):
    """
    Reconcile the drawer. Variance is what was counted at close minus what
    should be there (opening float + cash sales - change given).
    """
    closing_date = closing_date or timezone.localdate()
    if DayClosing.objects.filter(store=store, closing_date=closing_date).exists():
        raise BusinessRuleError(f"Day already closed for {store.name} on {closing_date}.")

    if total_cash_sales is None:
        total_cash_sales = cash_sales_for_day(store, closing_date)
    total_change_given = Decimal(str(total_change_given or 0))

    expected = denominations_total(opening_denominations) + total_cash_sales - total_change_given
    closing = DayClosing.objects.create(
        store=store,
        closing_date=closing_date,
        opening_denominations=opening_denominations or {},
        closing_denominations=closing_denominations or {},
        total_cash_sales=total_cash_sales,
        total_change_given=total_change_given,
        variance_amount=denominations_total(closing_denominations) - expected,
        notes=notes or '',
        closed_by=user,
    )
    if closing.variance_amount:
        logger.warning(f"Day closing for {store.name} on {closing_date} has variance {closing.variance_amount}")
    else:
        logger.info(f"Day closed for {store.name} on {closing_date}")
    return closing
