"""
Page registry and page-level access checks.

A page is a screen of the back office (products, bills, hrms...). Users are
granted pages through ``page_access`` and optionally fine grained
view/edit/delete flags through ``page_permissions``.
"""

ACTIONS = ('view', 'edit', 'delete')

# Counter staff can ring up sales and add customers on pages they were granted
SALES_EDIT_PAGES = ('pos', 'customers')

PAGES = {
    'dashboard': {'name': 'Dashboard', 'category': 'Core', 'actions': ('view',)},
    'products': {'name': 'Products', 'category': 'Inventory', 'actions': ('view', 'edit', 'delete')},
    'stocks': {'name': 'Stock Management', 'category': 'Inventory', 'actions': ('view', 'edit', 'delete')},
    'stock-movements': {'name': 'Stock Movements', 'category': 'Inventory', 'actions': ('view', 'edit')},
    'pos': {'name': 'Point of Sale', 'category': 'Sales', 'actions': ('view', 'edit')},
    'customers': {'name': 'Customers', 'category': 'Sales', 'actions': ('view', 'edit', 'delete')},
    'bills': {'name': 'Bills', 'category': 'Sales', 'actions': ('view', 'edit', 'delete')},
    'expenses': {'name': 'Expenses', 'category': 'Finance', 'actions': ('view', 'edit', 'delete')},
    'credits': {'name': 'Credits', 'category': 'Finance', 'actions': ('view', 'edit', 'delete')},
    'shops': {'name': 'Shops', 'category': 'Management', 'actions': ('view', 'edit', 'delete')},
    'hrms': {'name': 'HR Management', 'category': 'HR', 'actions': ('view', 'edit', 'delete')},
    'users': {'name': 'User Management', 'category': 'Admin', 'actions': ('view', 'edit', 'delete')},
    'settings': {'name': 'Settings', 'category': 'Admin', 'actions': ('view', 'edit')},
}


def is_valid_page(page):
    return page in PAGES


def has_page_permission(user, page, action='view'):
    """
    Check whether ``user`` may perform ``action`` on ``page``.

    Admins always pass. An explicit entry in ``page_permissions`` wins;
    otherwise having the page in ``page_access`` grants view, and leads
    also get edit on their pages.
    """
    if not user or not user.is_authenticated:
        return False
    if user.is_superuser or user.role == 'admin':
        return True
    if page not in PAGES or action not in PAGES[page]['actions']:
        return False

    granular = (user.page_permissions or {}).get(page)
    if granular is not None:
        return bool(granular.get(action, False))

    if page not in (user.page_access or []):
        return False
    if action == 'view':
        return True
    if action == 'edit' and user.role == 'lead':
        return True
    if action == 'edit' and user.role == 'sales' and page in SALES_EDIT_PAGES:
        return True
    return False


def effective_permissions(user):
    """Map every page the user can see to its allowed actions"""
    result = {}
    for page, meta in PAGES.items():
        allowed = {action: has_page_permission(user, page, action) for action in meta['actions']}
        if allowed.get('view'):
            result[page] = allowed
    return result
