"""
Cache invalidation signals
Invalidate report caches when the rows they aggregate change
"""
from django.db import transaction
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging

from .cache_utils import invalidate_dashboard_cache, invalidate_stock_cache

logger = logging.getLogger(__name__)

# Product covers cost_price, which dashboard margins read
DASHBOARD_MODELS = {'Bill', 'BillItem', 'Credit', 'CreditTransaction', 'Expense', 'Product'}
# LowStockAlert covers the open alert count on the stock report
STOCK_MODELS = {'StockEntry', 'Loss', 'LowStockAlert'}


@receiver([post_save, post_delete])
def invalidate_report_caches(sender, instance, **kwargs):
    """Invalidate dashboard/stock caches after the enclosing transaction commits"""
    model_name = sender.__name__
    try:
        if model_name in DASHBOARD_MODELS:
            transaction.on_commit(invalidate_dashboard_cache)
        if model_name in STOCK_MODELS:
            transaction.on_commit(invalidate_stock_cache)
    except Exception as e:
        logger.warning(f"Error in invalidate_report_caches signal for {model_name}: {e}")
