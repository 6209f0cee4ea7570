from rest_framework.permissions import BasePermission

from membership.models import Member
from membership.services.access_service import can_access_tab


class IsMember(BasePermission):
    """Any logged-in member, admins included."""

    message = "Please log in."

    def has_permission(self, request, view):
        return isinstance(request.user, Member)


class IsAdminMember(IsMember):
    message = "Admin access required."

    def has_permission(self, request, view):
        return super().has_permission(request, view) and request.user.is_admin


class IsMasterAdmin(IsMember):
    message = "Only the master admin can do this."

    def has_permission(self, request, view):
        return super().has_permission(request, view) and request.user.is_master_admin


class HasTabAccess(IsAdminMember):
    """
    Admin who can open at least one of the view's `required_tabs`.

    Views may narrow the tabs per HTTP method with `required_tabs_by_method`.
    """

    message = "You do not have access to this section."

    def has_permission(self, request, view):
        if not super().has_permission(request, view):
            return False
        by_method = getattr(view, "required_tabs_by_method", {})
        tabs = by_method.get(request.method, getattr(view, "required_tabs", ()))
        if not tabs:
            return True
        return any(can_access_tab(request.user, tab) for tab in tabs)
