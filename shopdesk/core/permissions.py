from rest_framework.permissions import BasePermission, SAFE_METHODS

from .pages import has_page_permission


METHOD_ACTIONS = {
    'POST': 'edit',
    'PUT': 'edit',
    'PATCH': 'edit',
    'DELETE': 'delete',
}


def page_permission(page):
    """
    Build a DRF permission class guarding one page.

    Usage:
        @permission_classes([IsAuthenticated, page_permission('products')])
    """
    class HasPageAccess(BasePermission):
        message = f"You do not have access to the {page} page."

        def has_permission(self, request, view):
            if request.method in SAFE_METHODS:
                action = 'view'
            else:
                action = METHOD_ACTIONS.get(request.method, 'edit')
            return has_page_permission(request.user, page, action)

    HasPageAccess.__name__ = f"HasPageAccess_{page.replace('-', '_')}"
    return HasPageAccess


class IsAdminRole(BasePermission):
    """Admin role or Django superuser"""
    message = "Admin access required."

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and (user.is_superuser or user.role == 'admin'))
