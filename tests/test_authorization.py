"""Tests for the authorization gate."""

import uuid

import pytest

from src.models.account import Role
from src.services.authorization import AccessDecision, authorize, check_access
from src.services.errors import ForbiddenError, UnauthenticatedError
from src.services.session_issuer import SessionContext


def _session(role: Role) -> SessionContext:
    return SessionContext(key="key", account_id=uuid.uuid4(), username="someone", role=role)


class TestCheckAccess:
    def test_no_session_is_unauthenticated(self):
        assert check_access(None) is AccessDecision.UNAUTHENTICATED
        assert check_access(None, Role.ARTIST) is AccessDecision.UNAUTHENTICATED

    @pytest.mark.parametrize("role", list(Role))
    def test_any_session_passes_without_required_role(self, role):
        assert check_access(_session(role)) is AccessDecision.ALLOW

    def test_matching_role_is_allowed(self):
        assert check_access(_session(Role.ARTIST), Role.ARTIST) is AccessDecision.ALLOW

    @pytest.mark.parametrize("role", [Role.FAN, Role.ADMIN])
    def test_roles_do_not_inherit(self, role):
        assert check_access(_session(role), Role.ARTIST) is AccessDecision.FORBIDDEN


class TestAuthorize:
    def test_returns_session(self):
        session = _session(Role.ADMIN)
        assert authorize(session, Role.ADMIN) is session

    def test_unauthenticated(self):
        with pytest.raises(UnauthenticatedError) as exc_info:
            authorize(None, Role.ADMIN)
        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "Login required"

    def test_forbidden_names_required_role(self):
        with pytest.raises(ForbiddenError) as exc_info:
            authorize(_session(Role.FAN), Role.ARTIST)
        assert exc_info.value.status_code == 403
        assert exc_info.value.message == "Artist only"
