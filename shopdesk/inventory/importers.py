"""
Bulk stock sheet import from .xlsx or .csv uploads.

Expected columns (case and spacing are ignored): Shop, Product, Date,
Opening Stock, and optionally Stock Added, Closing Stock, Actual Stock.
Shops match on name or code, products on name.
"""
import csv
import io
import logging
import zipfile
from collections import OrderedDict
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

import openpyxl
from openpyxl.utils.datetime import from_excel
from openpyxl.utils.exceptions import InvalidFileException
from django.db import transaction
from django.utils import timezone

from shopdesk.catalog.models import Product
from shopdesk.core.exceptions import BusinessRuleError
from shopdesk.locations.models import Store
from .models import ZERO_QTY
from .services import batch_create_stock_entries

logger = logging.getLogger(__name__)

TEMPLATE_HEADERS = ['Shop', 'Product', 'Date', 'Opening Stock', 'Stock Added', 'Closing Stock', 'Actual Stock']

COLUMN_ALIASES = {
    'shop': 'shop',
    'store': 'shop',
    'product': 'product',
    'date': 'date',
    'stock_date': 'date',
    'opening_stock': 'opening_stock',
    'stock_added': 'stock_added',
    'added_stock': 'stock_added',
    'closing_stock': 'closing_stock',
    'actual_stock': 'actual_stock',
}

DATE_FORMATS = ('%Y-%m-%d', '%m/%d/%Y', '%d-%m-%Y')


def _column(header):
    key = str(header or '').strip().lower().replace(' ', '_')
    return COLUMN_ALIASES.get(key)


def _rows_from_xlsx(upload):
    workbook = openpyxl.load_workbook(upload, read_only=True, data_only=True)
    worksheet = workbook.worksheets[0]
    rows = worksheet.iter_rows(values_only=True)
    headers = [_column(cell) for cell in next(rows, ())]
    for values in rows:
        yield {header: value for header, value in zip(headers, values) if header}
    workbook.close()


def _rows_from_csv(upload):
    reader = csv.reader(io.StringIO(upload.read().decode('utf-8-sig')))
    headers = [_column(cell) for cell in next(reader, [])]
    for values in reader:
        yield {header: value for header, value in zip(headers, values) if header}


def read_stock_rows(upload):
    """Rows of an uploaded sheet as dicts keyed by canonical column name"""
    name = (getattr(upload, 'name', '') or '').lower()
    if name.endswith('.xlsx'):
        try:
            rows = list(_rows_from_xlsx(upload))
        except (OSError, KeyError, ValueError, zipfile.BadZipFile, InvalidFileException) as e:
            raise BusinessRuleError(f"Could not read the Excel file: {e}")
    elif name.endswith('.csv'):
        try:
            rows = list(_rows_from_csv(upload))
        except (UnicodeDecodeError, csv.Error) as e:
            raise BusinessRuleError(f"Could not read the CSV file: {e}")
    else:
        raise BusinessRuleError('Upload an .xlsx or .csv file.')
    return [row for row in rows if any(value not in (None, '') for value in row.values())]


def _parse_date(value):
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)):
        return from_excel(value).date()
    text = str(value or '').strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"Invalid date: {text or 'missing'}")


def _parse_qty(value, field, required=False):
    if value in (None, ''):
        if required:
            raise ValueError(f"{field.replace('_', ' ').capitalize()} is required")
        return None
    try:
        quantity = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError(f"Invalid {field.replace('_', ' ')}: {value}")
    if quantity < 0:
        raise ValueError(f"{field.replace('_', ' ').capitalize()} cannot be negative")
    return quantity


def _lookup_maps():
    stores = {}
    for store in Store.objects.all():
        stores[store.name.strip().lower()] = store
        if store.code:
            stores[store.code.strip().lower()] = store
    products = {product.name.strip().lower(): product for product in Product.objects.all()}
    return stores, products


def import_stock_rows(rows, user=None):
    """
    Create stock sheet rows from parsed upload rows.

    Rows that cannot be resolved are skipped and reported. Valid rows are
    created per (store, date) through ``batch_create_stock_entries`` in one
    transaction, so a duplicate entry aborts the whole import.
    """
    stores, products = _lookup_maps()
    groups = OrderedDict()
    closing_figures = []
    skipped = []

    for number, row in enumerate(rows, start=2):
        shop_name = str(row.get('shop') or '').strip()
        product_name = str(row.get('product') or '').strip()
        store = stores.get(shop_name.lower())
        product = products.get(product_name.lower())
        if store is None:
            skipped.append({'row': number, 'error': f'Unknown shop "{shop_name}"'})
            continue
        if product is None:
            skipped.append({'row': number, 'error': f'Unknown product "{product_name}"'})
            continue
        try:
            stock_date = _parse_date(row.get('date'))
            item = {
                'product': product,
                'opening_stock': _parse_qty(row.get('opening_stock'), 'opening_stock', required=True),
                'stock_added': _parse_qty(row.get('stock_added'), 'stock_added') or ZERO_QTY,
                'actual_stock': _parse_qty(row.get('actual_stock'), 'actual_stock'),
            }
            closing = _parse_qty(row.get('closing_stock'), 'closing_stock')
        except ValueError as e:
            skipped.append({'row': number, 'error': str(e)})
            continue
        groups.setdefault((store, stock_date), []).append(item)
        if closing is not None:
            closing_figures.append((product, store, stock_date, closing, item['actual_stock'] is None))

    if not groups:
        raise BusinessRuleError('No valid rows to import.')

    created = []
    with transaction.atomic():
        for (store, stock_date), items in groups.items():
            created.extend(batch_create_stock_entries(store, items, stock_date=stock_date, user=user))
        entries = {(entry.product_id, entry.store_id, entry.stock_date): entry for entry in created}
        # Closing figures from the sheet keep the units already sold that day
        for product, store, stock_date, closing, count_missing in closing_figures:
            entry = entries[(product.id, store.id, stock_date)]
            entry.closing_stock = closing
            if count_missing:
                entry.actual_stock = closing
            entry.save(update_fields=['closing_stock', 'actual_stock', 'updated_at'])

    logger.info(f"Imported {len(created)} stock entries ({len(skipped)} rows skipped)")
    return created, skipped


def stock_template():
    """Import workbook with the header row and one example row"""
    workbook = openpyxl.Workbook()
    worksheet = workbook.active
    worksheet.title = 'Stock'
    worksheet.append(TEMPLATE_HEADERS)
    worksheet.append(['Main Street', 'Masala Chai', timezone.localdate().isoformat(), 10, 5, 12, 12])
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()
