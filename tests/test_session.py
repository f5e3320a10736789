"""Tests for the session object and permissions."""

from dataclasses import fields

import pytest

from taskview.errors import SessionError
from taskview.models import User
from taskview.session import GRANTS, Permissions, Session, permissions_for

ADMIN_USER = User(id="u1", name="Ada", email="ada@example.com", role="admin")
REGULAR_USER = User(id="u2", name="Ben", email="ben@example.com", role="user")


class TestSession:
    """Test suite for the Session lifecycle."""

    def test_new_session_is_signed_out(self):
        session = Session()
        assert not session.is_authenticated
        assert session.profile is None
        assert session.role is None
        assert session.auth_headers() == {}

    def test_login(self):
        session = Session()
        session.login("tok-123", REGULAR_USER)

        assert session.is_authenticated
        assert session.profile == REGULAR_USER
        assert session.role == "user"
        assert session.auth_headers() == {"Authorization": "Bearer tok-123"}

    def test_logout_clears_state(self):
        session = Session()
        session.login("tok-123", REGULAR_USER)

        session.logout()

        assert not session.is_authenticated
        assert session.profile is None
        assert session.permissions == Permissions()

    def test_logout_when_signed_out_is_noop(self):
        session = Session()
        session.logout()
        assert not session.is_authenticated

    def test_double_login_rejected(self):
        session = Session()
        session.login("tok-1", REGULAR_USER)

        with pytest.raises(SessionError):
            session.login("tok-2", ADMIN_USER)

        assert session.token == "tok-1"

    def test_login_after_logout(self):
        session = Session()
        session.login("tok-1", REGULAR_USER)
        session.logout()
        session.login("tok-2", ADMIN_USER)
        assert session.role == "admin"

    def test_empty_token_rejected(self):
        with pytest.raises(SessionError):
            Session().login("", REGULAR_USER)

    def test_sessions_are_independent(self):
        first, second = Session(), Session()
        first.login("tok-1", REGULAR_USER)
        assert not second.is_authenticated


class TestPermissions:
    """Test suite for role permissions."""

    def test_every_flag_has_a_grant(self):
        assert {f.name for f in fields(Permissions)} == set(GRANTS)

    def test_admin_has_everything(self):
        permissions = permissions_for("admin")
        assert all(getattr(permissions, f.name) for f in fields(Permissions))

    def test_user_permissions(self):
        permissions = permissions_for("user")

        assert permissions.can_view_dashboard
        assert permissions.can_create_project
        assert permissions.can_create_ticket
        assert not permissions.can_update_project
        assert not permissions.can_approve_page
        assert not permissions.can_manage_users
        assert not permissions.can_access_admin_panel

    @pytest.mark.parametrize("role", [None, "", "guest"])
    def test_no_or_unknown_role(self, role):
        permissions = permissions_for(role)
        assert not any(getattr(permissions, f.name) for f in fields(Permissions))

    def test_session_permissions_follow_role(self):
        session = Session()
        session.login("tok", ADMIN_USER)
        assert session.permissions.can_manage_users
