"""
Stock bookkeeping.

All functions work on the daily StockEntry sheet: one row per product,
store and date. Sales and returns move today's closing/actual figures,
transfers move stock between two stores' rows.
"""
import logging
from datetime import timedelta
from decimal import Decimal

from django.db import transaction
from django.db.models import Q, Sum
from django.utils import timezone

from shopdesk.core.exceptions import BusinessRuleError
from shopdesk.catalog.models import ReorderPoint
from shopdesk.pos.models import BillItem
from .models import StockEntry, StockRequest, StockMovement, LowStockAlert, Loss, ZERO_QTY

logger = logging.getLogger(__name__)


def _qty(value):
    return Decimal(str(value))


def previous_day_entry(product, store, stock_date):
    return StockEntry.objects.filter(
        product=product, store=store, stock_date=stock_date - timedelta(days=1)
    ).first()


def default_opening_stock(product, store, stock_date):
    """Opening stock carries over from the previous day's counted (else book) figure"""
    previous = previous_day_entry(product, store, stock_date)
    if previous is None:
        return ZERO_QTY
    if previous.actual_stock is not None:
        return previous.actual_stock
    return previous.closing_stock


def create_stock_entry(product, store, stock_date=None, opening_stock=None, stock_added=ZERO_QTY,
                       actual_stock=None, user=None, **extra):
    """
    Create the stock sheet row for (product, store, date).

    closing_stock = opening_stock + stock_added; actual_stock defaults to the
    closing figure.
    """
    stock_date = stock_date or timezone.localdate()
    if StockEntry.objects.filter(product=product, store=store, stock_date=stock_date).exists():
        raise BusinessRuleError(
            f'Stock entry for "{product.name}" at {store.name} on {stock_date} already exists.'
        )
    if opening_stock is None:
        opening_stock = default_opening_stock(product, store, stock_date)
    opening_stock = _qty(opening_stock)
    stock_added = _qty(stock_added)
    if opening_stock < 0 or stock_added < 0:
        raise BusinessRuleError('Stock quantities cannot be negative.')

    closing_stock = opening_stock + stock_added
    entry = StockEntry.objects.create(
        product=product,
        store=store,
        stock_date=stock_date,
        opening_stock=opening_stock,
        stock_added=stock_added,
        closing_stock=closing_stock,
        actual_stock=closing_stock if actual_stock is None else _qty(actual_stock),
        created_by=user,
        **extra
    )
    logger.info(f"Created stock entry {entry.id} for {product.name} @ {store.name} ({stock_date})")
    return entry


def batch_create_stock_entries(store, items, stock_date=None, user=None, **extra):
    """
    Create entries for many products of one store in a single transaction.
    items: iterable of dicts with product, opening_stock (optional), stock_added.
    """
    with transaction.atomic():
        return [
            create_stock_entry(
                item['product'], store, stock_date=stock_date,
                opening_stock=item.get('opening_stock'),
                stock_added=item.get('stock_added', ZERO_QTY),
                actual_stock=item.get('actual_stock'),
                user=user, **extra
            )
            for item in items
        ]


def set_actual_stock(product, store, quantity, user=None):
    """Record today's physically counted stock"""
    today = timezone.localdate()
    quantity = _qty(quantity)
    with transaction.atomic():
        entry = (StockEntry.objects.select_for_update()
                 .filter(product=product, store=store, stock_date=today).first())
        if entry is None:
            entry = StockEntry.objects.create(
                product=product, store=store, stock_date=today,
                opening_stock=ZERO_QTY, closing_stock=ZERO_QTY,
                actual_stock=quantity, created_by=user,
            )
        else:
            entry.actual_stock = quantity
            entry.save(update_fields=['actual_stock', 'updated_at'])
    logger.info(f"Actual stock for {product.name} @ {store.name} set to {quantity}")
    return entry


def adjust_stock_for_bill(items, store, kind='sale'):
    """
    Apply a bill's items to today's stock rows.

    items: iterable of (product, quantity). ``kind`` is 'sale' (stock goes
    out, floored at zero) or 'return' (stock comes back). Must run inside
    the caller's transaction.
    """
    if kind not in ('sale', 'return'):
        raise ValueError(f"Unknown stock adjustment kind: {kind}")
    today = timezone.localdate()

    for product, quantity in items:
        quantity = _qty(quantity)
        entry = (StockEntry.objects.select_for_update()
                 .filter(product=product, store=store, stock_date=today).first())
        if entry is None:
            if kind == 'sale':
                StockEntry.objects.create(
                    product=product, store=store, stock_date=today,
                    opening_stock=ZERO_QTY, closing_stock=ZERO_QTY, actual_stock=ZERO_QTY,
                )
            else:
                StockEntry.objects.create(
                    product=product, store=store, stock_date=today,
                    opening_stock=quantity, stock_added=quantity,
                    closing_stock=quantity, actual_stock=quantity,
                )
            continue

        current_actual = entry.actual_stock if entry.actual_stock is not None else entry.closing_stock
        if kind == 'sale':
            entry.actual_stock = max(ZERO_QTY, current_actual - quantity)
            entry.closing_stock = max(ZERO_QTY, entry.closing_stock - quantity)
        else:
            entry.actual_stock = current_actual + quantity
            entry.closing_stock = entry.closing_stock + quantity
        entry.save(update_fields=['actual_stock', 'closing_stock', 'updated_at'])

    logger.debug(f"Adjusted stock at {store.name} for {kind}")


def sold_quantity(product, store, on_date):
    """Units of a product on non-cancelled bills of a store for a day"""
    total = BillItem.objects.filter(
        product=product,
        bill__store=store,
        bill__bill_date__date=on_date,
    ).exclude(bill__payment_status='cancelled').aggregate(total=Sum('quantity'))['total']
    return total or ZERO_QTY


def is_tracked(product, store, on_date=None):
    """
    Whether the store keeps a stock sheet for the product. Zero rows left
    behind by sales of untracked products do not count.
    """
    on_date = on_date or timezone.localdate()
    return StockEntry.objects.filter(
        product=product, store=store, stock_date__lte=on_date,
    ).filter(Q(opening_stock__gt=0) | Q(stock_added__gt=0)).exists()


def available_for_sale(product, store, on_date=None):
    """
    Stock the POS may still sell today.

    The counted figure wins when recorded; otherwise expected closing is
    opening (yesterday's count, else today's opening) + added - sold.
    """
    on_date = on_date or timezone.localdate()
    today_entry = StockEntry.objects.filter(product=product, store=store, stock_date=on_date).first()
    yesterday_entry = previous_day_entry(product, store, on_date)

    if yesterday_entry is not None and yesterday_entry.actual_stock is not None:
        opening = yesterday_entry.actual_stock
    elif today_entry is not None:
        opening = today_entry.opening_stock
    else:
        opening = ZERO_QTY

    added = today_entry.stock_added if today_entry else ZERO_QTY
    expected = max(ZERO_QTY, opening + added - sold_quantity(product, store, on_date))

    if today_entry is not None and today_entry.actual_stock is not None:
        return max(ZERO_QTY, today_entry.actual_stock)
    return expected


def stock_summary(entries):
    """Totals of the row metrics over a set of stock entries"""
    summary = {
        'entries': 0,
        'units_sold': ZERO_QTY,
        'sales_amount': Decimal('0.00'),
        'profit': Decimal('0.00'),
        'product_loss': Decimal('0.00'),
        'cash_received': Decimal('0.00'),
        'online_received': Decimal('0.00'),
    }
    for entry in entries:
        summary['entries'] += 1
        summary['units_sold'] += entry.units_sold
        summary['sales_amount'] += entry.sales_amount
        summary['profit'] += entry.profit
        summary['product_loss'] += entry.product_loss
        summary['cash_received'] += entry.cash_received
        summary['online_received'] += entry.online_received
    return summary


def approve_stock_request(request_id, user=None):
    """
    Move the requested quantity from the fulfilling store's row for today to
    the requesting store's row and mark the request approved.
    """
    today = timezone.localdate()
    with transaction.atomic():
        stock_request = (StockRequest.objects.select_for_update()
                         .select_related('product', 'requesting_store', 'fulfilling_store')
                         .get(pk=request_id))
        if stock_request.status != 'pending':
            raise BusinessRuleError(f'Only pending requests can be approved (status: {stock_request.status}).')

        quantity = stock_request.requested_quantity
        product = stock_request.product

        source = (StockEntry.objects.select_for_update()
                  .filter(product=product, store=stock_request.fulfilling_store, stock_date=today).first())
        available = (source.actual_stock or ZERO_QTY) if source else ZERO_QTY
        if source is None or available < quantity:
            raise BusinessRuleError(
                f'Insufficient stock in fulfilling store. Available: {available.normalize():f}, '
                f'Requested: {quantity.normalize():f}'
            )
        source.actual_stock = available - quantity
        source.closing_stock = source.closing_stock - quantity
        source.save(update_fields=['actual_stock', 'closing_stock', 'updated_at'])

        target = (StockEntry.objects.select_for_update()
                  .filter(product=product, store=stock_request.requesting_store, stock_date=today).first())
        if target is None:
            StockEntry.objects.create(
                product=product, store=stock_request.requesting_store, stock_date=today,
                opening_stock=quantity, stock_added=quantity,
                closing_stock=quantity, actual_stock=quantity, created_by=user,
            )
        else:
            target.actual_stock = (target.actual_stock or ZERO_QTY) + quantity
            target.closing_stock = target.closing_stock + quantity
            target.stock_added = target.stock_added + quantity
            target.save(update_fields=['actual_stock', 'closing_stock', 'stock_added', 'updated_at'])

        stock_request.status = 'approved'
        stock_request.response_date = timezone.now()
        stock_request.responded_by = user
        stock_request.save(update_fields=['status', 'response_date', 'responded_by', 'updated_at'])

        StockMovement.objects.create(
            product=product,
            from_store=stock_request.fulfilling_store,
            to_store=stock_request.requesting_store,
            quantity=quantity,
            movement_type='transfer',
            status='completed',
            stock_request=stock_request,
            created_by=stock_request.created_by,
            approved_by=user,
            notes=stock_request.notes,
        )

    logger.info(f"Stock request {request_id} approved: {quantity} x {product.name} "
                f"from {stock_request.fulfilling_store.name} to {stock_request.requesting_store.name}")
    return stock_request


def reject_stock_request(request_id, user=None, notes=''):
    with transaction.atomic():
        stock_request = StockRequest.objects.select_for_update().get(pk=request_id)
        if stock_request.status != 'pending':
            raise BusinessRuleError(f'Only pending requests can be rejected (status: {stock_request.status}).')
        stock_request.status = 'rejected'
        stock_request.response_date = timezone.now()
        stock_request.responded_by = user
        if notes:
            stock_request.notes = f"{stock_request.notes}\n{notes}".strip()
        stock_request.save(update_fields=['status', 'response_date', 'responded_by', 'notes', 'updated_at'])
    logger.info(f"Stock request {request_id} rejected")
    return stock_request


def loss_summary(losses):
    """Count, quantity and cost value of losses with a per-type breakdown"""
    summary = {
        'count': 0,
        'total_quantity': ZERO_QTY,
        'total_value': Decimal('0.00'),
        'by_type': {},
    }
    for loss in losses:
        summary['count'] += 1
        summary['total_quantity'] += loss.quantity_lost
        summary['total_value'] += loss.loss_value
        bucket = summary['by_type'].setdefault(loss.loss_type, {'count': 0, 'quantity': ZERO_QTY, 'value': Decimal('0.00')})
        bucket['count'] += 1
        bucket['quantity'] += loss.quantity_lost
        bucket['value'] += loss.loss_value
    return summary


def generate_low_stock_alerts(store=None):
    """Raise an alert for every reorder point whose available stock is under the minimum"""
    points = ReorderPoint.objects.select_related('product', 'store')
    if store is not None:
        points = points.filter(store=store)

    created = []
    for point in points:
        current = available_for_sale(point.product, point.store)
        if current >= point.minimum_stock:
            continue
        if LowStockAlert.objects.filter(product=point.product, store=point.store, is_resolved=False).exists():
            continue
        created.append(LowStockAlert.objects.create(
            product=point.product,
            store=point.store,
            current_stock=current,
            minimum_threshold=point.minimum_stock,
        ))
    if created:
        logger.info(f"Created {len(created)} low stock alerts")
    return created


def resolve_low_stock_alert(alert):
    if alert.is_resolved:
        raise BusinessRuleError('Alert is already resolved.')
    alert.is_resolved = True
    alert.resolved_at = timezone.now()
    alert.save(update_fields=['is_resolved', 'resolved_at'])
    return alert


def losses_for_shift(shift, on_date):
    return Loss.objects.filter(shift=shift, loss_date=on_date)
