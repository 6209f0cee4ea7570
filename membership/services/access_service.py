"""
Role gate: console selection, tab visibility and member scoping.
"""

from django.conf import settings

from membership.models import Member, Role

VIEW_ADMIN = "ADMIN"
VIEW_USER = "USER"

TAB_USER_APPROVALS = "User Approvals"
TAB_USERS_OVERVIEW = "Users Overview"
TAB_USERS_DATA = "Users Data"
TAB_PAYMENT_MGMT = "Payment Mgmt"
TAB_PAYMENT_SUBS = "Payment Subs"
TAB_BENEFITS = "Benefits"
TAB_NOTIFICATIONS = "Notifications"
TAB_MESSAGES = "Messages"
TAB_IMPORT_USERS = "Import Users"
TAB_ADMIN_ASSIGN = "Admin Assign"
TAB_REG_QUESTIONS = "Reg Questions"
TAB_NEW_YEAR = "New Year"
TAB_NEWS = "News"
TAB_SPONSORS = "Sponsors"

SHARED_ADMIN_TABS = (
    TAB_USER_APPROVALS,
    TAB_USERS_OVERVIEW,
    TAB_USERS_DATA,
    TAB_PAYMENT_MGMT,
    TAB_PAYMENT_SUBS,
    TAB_BENEFITS,
    TAB_NOTIFICATIONS,
    TAB_MESSAGES,
)
TOP_ADMIN_TABS = (TAB_IMPORT_USERS, TAB_ADMIN_ASSIGN, TAB_REG_QUESTIONS, TAB_NEW_YEAR)
CONTENT_TABS = (TAB_NEWS, TAB_SPONSORS)
ALL_ADMIN_TABS = SHARED_ADMIN_TABS + TOP_ADMIN_TABS + CONTENT_TABS


def view_mode(member: Member) -> str:
    return VIEW_USER if member.role == Role.USER else VIEW_ADMIN


def visible_tabs(member: Member) -> list:
    """Admin console tabs `member` may open, in display order."""
    if member.role == Role.USER:
        return []
    if member.role == Role.MASTER_ADMIN:
        return list(ALL_ADMIN_TABS)

    tabs = list(SHARED_ADMIN_TABS)
    if member.role == Role.CUSTOM_ADMIN and member.permissions:
        granted = set(member.permissions)
        tabs = [tab for tab in tabs if tab in granted]
    return tabs


def can_access_tab(member: Member, tab: str) -> bool:
    return tab in visible_tabs(member)


def scoped_mandalams(member: Member):
    """
    Mandalams an admin is limited to, or None for no limit.

    Regional admins fall back to their own mandalam when nothing is assigned;
    custom admins are only limited when mandalams were assigned to them.
    """
    if member.role == Role.MANDALAM_ADMIN:
        return list(member.assigned_mandalams or [member.mandalam])
    if member.role == Role.CUSTOM_ADMIN and member.assigned_mandalams:
        return list(member.assigned_mandalams)
    return None


def visible_members(member: Member):
    """Members `member` may see in list views. Master admin records are never listed."""
    members = Member.objects.exclude(role=Role.MASTER_ADMIN)
    if member.role == Role.USER:
        return members.filter(pk=member.pk)
    regions = scoped_mandalams(member)
    if regions is None:
        return members
    return members.filter(mandalam__in=regions)


def can_manage_member(actor: Member, target: Member) -> bool:
    if not actor.is_admin:
        return False
    if actor.is_master_admin:
        return True
    if target.role == Role.MASTER_ADMIN:
        return False
    regions = scoped_mandalams(actor)
    return regions is None or target.mandalam in regions


def can_switch_view(member: Member) -> bool:
    """Assigned admins may browse the member console; the system administrator may not."""
    return member.is_admin and member.pk != settings.BOOTSTRAP_ADMIN_ID
