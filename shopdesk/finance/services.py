"""
Expense and credit ledger bookkeeping.
"""
import logging
from collections import OrderedDict
from decimal import Decimal

from django.db import transaction
from django.db.models import Count, Sum

from shopdesk.core.exceptions import BusinessRuleError
from .models import Credit, ExpenseCategory, DEFAULT_EXPENSE_CATEGORIES

logger = logging.getLogger(__name__)

ZERO = Decimal('0.00')


def ensure_default_categories():
    """Create any missing default categories; returns how many were added"""
    created = 0
    for value, label in DEFAULT_EXPENSE_CATEGORIES:
        _, was_created = ExpenseCategory.objects.get_or_create(value=value, defaults={'label': label})
        created += int(was_created)
    return created


def category_delete_blocker(category):
    if category.expenses.exists():
        return f'Cannot delete category "{category.label}" because it is used by existing expenses.'
    return None


def expense_summary(expenses):
    """Total, count and per category breakdown of an expense queryset"""
    totals = expenses.aggregate(total=Sum('amount'), count=Count('id'))
    by_category = (expenses.values('category__value', 'category__label')
                   .annotate(total=Sum('amount'), count=Count('id'))
                   .order_by('-total'))
    return {
        'total_amount': totals['total'] or ZERO,
        'count': totals['count'],
        'by_category': [
            {
                'category': row['category__value'],
                'label': row['category__label'],
                'total': row['total'],
                'count': row['count'],
            }
            for row in by_category
        ],
    }


def credit_summary(credits):
    """Given vs received; balance is received minus given"""
    rows = dict(credits.filter(credit_type__in=('given', 'received'))
                .values_list('credit_type').annotate(total=Sum('amount')).order_by())
    given = rows.get('given') or ZERO
    received = rows.get('received') or ZERO
    return {
        'total_given': given,
        'total_received': received,
        'balance': received - given,
    }


def save_daily_financials(store, on_date, cash=ZERO, card=ZERO, online=ZERO, discount=ZERO, user=None):
    """Replace a store's daily takings rows for a date"""
    if store is None:
        raise BusinessRuleError('Select a store to save daily financials.')
    amounts = OrderedDict([('cash', cash), ('card', card), ('online', online), ('discount', discount)])
    for credit_type, amount in amounts.items():
        if Decimal(str(amount or 0)) < 0:
            raise BusinessRuleError(f'{credit_type.title()} amount cannot be negative.')

    with transaction.atomic():
        Credit.objects.filter(store=store, credit_date=on_date, credit_type__in=Credit.DAILY_TYPES).delete()
        rows = [
            Credit.objects.create(
                store=store,
                credit_date=on_date,
                credit_type=credit_type,
                amount=Decimal(str(amount or 0)),
                description=f'Daily {credit_type} entry',
                created_by=user,
            )
            for credit_type, amount in amounts.items()
        ]
    logger.info(f"Saved daily financials for {store.name} on {on_date}")
    return rows


def daily_financials(credits):
    """Group daily takings rows per (date, store)"""
    grouped = OrderedDict()
    rows = (credits.filter(credit_type__in=Credit.DAILY_TYPES)
            .select_related('store').order_by('-credit_date', 'store__name'))
    for row in rows:
        key = (row.credit_date, row.store_id)
        if key not in grouped:
            grouped[key] = {
                'date': row.credit_date,
                'store': row.store_id,
                'store_name': row.store.name if row.store else None,
                'cash_amount': ZERO,
                'card_amount': ZERO,
                'online_amount': ZERO,
                'discount_amount': ZERO,
            }
        grouped[key][f'{row.credit_type}_amount'] += row.amount
    return list(grouped.values())
