"""
Report aggregations behind the dashboard and analytics pages.
"""
import logging
from decimal import Decimal

from django.db.models import Sum, Count, DecimalField

from shopdesk.core.cache_utils import (
    cached_query, DASHBOARD_CACHE_TTL, DASHBOARD_PREFIX, STOCK_REPORT_CACHE_TTL, STOCK_REPORT_PREFIX
)
from shopdesk.finance.models import Credit, Expense
from shopdesk.hrms.models import Payslip
from shopdesk.hrms.services import payroll_totals
from shopdesk.inventory.models import StockEntry, Loss, LowStockAlert
from shopdesk.inventory.services import stock_summary, losses_for_shift
from shopdesk.pos.models import Bill, BillItem

logger = logging.getLogger(__name__)

ZERO = Decimal('0.00')

# Bill payment method -> dashboard bucket
PAYMENT_BUCKETS = {
    'cash': 'cash_amount',
    'card': 'card_amount',
    'upi': 'online_amount',
    'online': 'online_amount',
}


def _sales_bills(date_from, date_to, store_id=None):
    bills = Bill.objects.exclude(payment_status='cancelled').filter(
        bill_date__date__gte=date_from,
        bill_date__date__lte=date_to,
    )
    if store_id:
        bills = bills.filter(store_id=store_id)
    return bills


def payment_split(bill):
    """Amount of a bill per dashboard bucket"""
    if bill.payment_method == 'split':
        split = {}
        for method, amount in (bill.payment_breakdown or {}).items():
            bucket = PAYMENT_BUCKETS.get(method)
            if bucket:
                split[bucket] = split.get(bucket, ZERO) + Decimal(str(amount))
        return split
    if bill.payment_method == 'credit':
        # Credit bills count once they are settled
        method = (bill.payment_breakdown or {}).get('settled_with')
        if bill.payment_status == 'completed' and method in PAYMENT_BUCKETS:
            return {PAYMENT_BUCKETS[method]: bill.total_amount}
        return {}
    bucket = PAYMENT_BUCKETS.get(bill.payment_method)
    if bucket and bill.payment_status == 'completed':
        return {bucket: bill.total_amount}
    return {}


@cached_query(cache_ttl=DASHBOARD_CACHE_TTL, key_prefix=DASHBOARD_PREFIX)
def dashboard_summary(date_from, date_to, store_id=None):
    """
    Sales, payment, credit, profit and expense figures for a period.

    Cancelled bills are left out. Profit is taken per item from the
    product's current cost price; items sold below cost count as loss.
    """
    bills = _sales_bills(date_from, date_to, store_id)

    summary = {
        'total_sales': 0,
        'total_products': Decimal('0.000'),
        'total_revenue': ZERO,
        'cash_amount': ZERO,
        'card_amount': ZERO,
        'online_amount': ZERO,
    }
    for bill in bills:
        summary['total_sales'] += 1
        summary['total_revenue'] += bill.total_amount
        for bucket, amount in payment_split(bill).items():
            summary[bucket] += amount

    gross_profit = ZERO
    total_loss = ZERO
    items = BillItem.objects.filter(bill__in=bills).select_related('product')
    for item in items:
        summary['total_products'] += item.quantity
        margin = (item.unit_price - item.product.cost_price) * item.quantity
        if margin >= 0:
            gross_profit += margin
        else:
            total_loss += -margin

    credits = Credit.objects.filter(credit_date__gte=date_from, credit_date__lte=date_to,
                                    credit_type__in=('given', 'received'))
    expenses = Expense.objects.filter(expense_date__gte=date_from, expense_date__lte=date_to)
    if store_id:
        credits = credits.filter(store_id=store_id)
        expenses = expenses.filter(store_id=store_id)
    credit_totals = dict(credits.values_list('credit_type').annotate(total=Sum('amount')).order_by())
    credit_given = credit_totals.get('given') or ZERO
    credit_received = credit_totals.get('received') or ZERO

    summary.update({
        'credit_given': credit_given,
        'credit_received': credit_received,
        'credit_balance': credit_received - credit_given,
        'gross_profit': gross_profit.quantize(ZERO),
        'total_loss': total_loss.quantize(ZERO),
        'net_profit': (gross_profit - credit_given + credit_received).quantize(ZERO),
        'total_expenses': expenses.aggregate(total=Sum('amount'))['total'] or ZERO,
        'period': {'from': date_from.isoformat(), 'to': date_to.isoformat()},
        'store_id': store_id,
    })
    logger.info(f"Dashboard summary computed for {date_from}..{date_to} store={store_id}: "
                f"{summary['total_sales']} bills")
    return summary


@cached_query(cache_ttl=STOCK_REPORT_CACHE_TTL, key_prefix=STOCK_REPORT_PREFIX)
def stock_report(date_from, date_to, store_id=None):
    entries = StockEntry.objects.select_related('product', 'store').filter(
        stock_date__gte=date_from, stock_date__lte=date_to,
    )
    losses = Loss.objects.filter(loss_date__gte=date_from, loss_date__lte=date_to)
    alerts = LowStockAlert.objects.filter(is_resolved=False)
    if store_id:
        entries = entries.filter(store_id=store_id)
        losses = losses.filter(store_id=store_id)
        alerts = alerts.filter(store_id=store_id)

    products = {}
    for entry in entries:
        row = products.setdefault(entry.product_id, {
            'product_id': entry.product_id,
            'product_name': entry.product.name,
            'units_sold': Decimal('0.000'),
            'sales_amount': ZERO,
            'profit': ZERO,
            'product_loss': ZERO,
        })
        row['units_sold'] += entry.units_sold
        row['sales_amount'] += entry.sales_amount
        row['profit'] += entry.profit
        row['product_loss'] += entry.product_loss

    return {
        'period': {'from': date_from.isoformat(), 'to': date_to.isoformat()},
        'summary': stock_summary(entries),
        'products': sorted(products.values(), key=lambda row: row['sales_amount'], reverse=True),
        'recorded_losses': losses.aggregate(total=Sum('quantity_lost'))['total'] or Decimal('0.000'),
        'open_low_stock_alerts': alerts.count(),
    }


def shift_performance(shift, on_date):
    """Sales, losses and stock variance booked against a shift on a day"""
    entries = StockEntry.objects.select_related('product').filter(shift=shift, stock_date=on_date)
    total_sales = ZERO
    total_variance = Decimal('0.000')
    for entry in entries:
        total_sales += entry.sales_amount
        total_variance += entry.variance
    total_losses = losses_for_shift(shift, on_date).aggregate(total=Sum('quantity_lost'))['total']
    return {
        'shift_id': shift.id,
        'shift_name': shift.shift_name,
        'date': on_date.isoformat(),
        'total_sales': total_sales,
        'total_losses': total_losses or Decimal('0.000'),
        'total_variance': total_variance,
        'products_count': entries.count(),
    }


def sales_by_product(date_from, date_to, store_id=None, limit=10):
    """Top selling products by revenue"""
    bills = _sales_bills(date_from, date_to, store_id)
    rows = BillItem.objects.filter(bill__in=bills).values(
        'product__id',
        'product__name',
    ).annotate(
        total_quantity=Sum('quantity', output_field=DecimalField()),
        total_revenue=Sum('total_price', output_field=DecimalField()),
        bill_count=Count('bill', distinct=True),
    ).order_by('-total_revenue')[:limit]
    return list(rows)


def payroll_summary(month, year):
    payslips = Payslip.objects.select_related('employee').filter(month=month, year=year)
    totals = payroll_totals(payslips)
    totals.update({
        'month': month,
        'year': year,
        'final': payslips.filter(is_final=True).count(),
        'draft': payslips.filter(is_final=False).count(),
    })
    return totals
