"""
Tests for console selection, tab visibility and member scoping.
"""

import pytest

from membership.models import Role
from membership.services.access_service import (
    ALL_ADMIN_TABS,
    SHARED_ADMIN_TABS,
    TAB_IMPORT_USERS,
    VIEW_ADMIN,
    VIEW_USER,
    can_access_tab,
    can_manage_member,
    can_switch_view,
    scoped_mandalams,
    view_mode,
    visible_members,
    visible_tabs,
)


@pytest.mark.django_db
class TestTabs:
    def test_member_has_no_admin_console(self, create_member):
        member = create_member()

        assert view_mode(member) == VIEW_USER
        assert visible_tabs(member) == []
        assert can_switch_view(member) is False

    def test_master_admin_sees_everything(self, master_admin):
        assert view_mode(master_admin) == VIEW_ADMIN
        assert visible_tabs(master_admin) == list(ALL_ADMIN_TABS)

    def test_system_administrator_cannot_switch_view(self, master_admin, create_member):
        other_master = create_member(role=Role.MASTER_ADMIN)

        assert can_switch_view(master_admin) is False
        assert can_switch_view(other_master) is True

    def test_mandalam_admin_gets_shared_tabs(self, mandalam_admin):
        assert visible_tabs(mandalam_admin) == list(SHARED_ADMIN_TABS)
        assert can_access_tab(mandalam_admin, TAB_IMPORT_USERS) is False

    def test_custom_admin_limited_to_granted_tabs(self, custom_admin):
        assert visible_tabs(custom_admin) == ["User Approvals", "Payment Mgmt"]
        assert can_access_tab(custom_admin, "Messages") is False

    def test_custom_admin_without_grants_gets_shared_tabs(self, create_member):
        admin = create_member(role=Role.CUSTOM_ADMIN, permissions=[])

        assert visible_tabs(admin) == list(SHARED_ADMIN_TABS)

    def test_custom_admin_cannot_be_granted_top_tabs(self, create_member):
        admin = create_member(role=Role.CUSTOM_ADMIN, permissions=[TAB_IMPORT_USERS, "Benefits"])

        assert visible_tabs(admin) == ["Benefits"]


@pytest.mark.django_db
class TestScoping:
    def test_mandalam_admin_falls_back_to_own_mandalam(self, create_member):
        admin = create_member(role=Role.MANDALAM_ADMIN, mandalam="Mahe", assigned_mandalams=[])

        assert scoped_mandalams(admin) == ["Mahe"]

    def test_custom_admin_unscoped_without_assignment(self, create_member):
        admin = create_member(role=Role.CUSTOM_ADMIN, assigned_mandalams=[])

        assert scoped_mandalams(admin) is None

    def test_custom_admin_sees_only_assigned_mandalams(self, custom_admin, create_member):
        local = create_member(mandalam="Vatakara")
        remote = create_member(mandalam="Nadapuram")

        visible = set(visible_members(custom_admin).values_list("pk", flat=True))

        assert local.pk in visible
        assert remote.pk not in visible
        assert can_manage_member(custom_admin, local) is True
        assert can_manage_member(custom_admin, remote) is False

    def test_master_admin_never_listed(self, master_admin, create_member):
        member = create_member()

        visible = list(visible_members(master_admin))

        assert member in visible
        assert master_admin not in visible

    def test_member_sees_only_self(self, create_member):
        member = create_member()
        create_member()

        assert list(visible_members(member)) == [member]

    def test_regional_admin_cannot_manage_master(self, mandalam_admin, master_admin):
        assert can_manage_member(mandalam_admin, master_admin) is False

    def test_member_manages_nobody(self, create_member):
        member = create_member()

        assert can_manage_member(member, member) is False
