"""Unit tests for RouteGuard."""

import pytest

from resilience.config import RouteSettings
from resilience.domain.service import RouteGuard
from resilience.domain.value import RouteDecision


@pytest.fixture
def guard():
    return RouteGuard(RouteSettings())


class TestDecide:
    """Tests for the four-row decision table."""

    @pytest.mark.parametrize(
        "path,session_valid,expected",
        [
            ("/login", False, RouteDecision.SERVE),
            ("/workouts", False, RouteDecision.REDIRECT_TO_LOGIN),
            ("/login", True, RouteDecision.REDIRECT_TO_HOME),
            ("/workouts", True, RouteDecision.SERVE),
            ("/", False, RouteDecision.REDIRECT_TO_LOGIN),
            ("/", True, RouteDecision.SERVE),
            ("/login/help", False, RouteDecision.SERVE),
            ("/login/help", True, RouteDecision.REDIRECT_TO_HOME),
        ],
    )
    def test_decision_table(self, guard, path, session_valid, expected):
        assert guard.decide(path, session_valid) == expected

    def test_redirect_targets(self, guard):
        assert guard.redirect_path(RouteDecision.REDIRECT_TO_LOGIN) == "/login"
        assert guard.redirect_path(RouteDecision.REDIRECT_TO_HOME) == "/"
        assert guard.redirect_path(RouteDecision.SERVE) is None

    def test_custom_routes(self):
        guard = RouteGuard(RouteSettings(login_path="/entrar", home_path="/inicio"))

        decision = guard.decide("/entrar", session_valid=True)

        assert guard.redirect_path(decision) == "/inicio"


class TestBypass:
    """Tests for paths served without a session check."""

    @pytest.mark.parametrize(
        "path",
        [
            "/auth/callback",
            "/auth/callback?code=abc",
            "/static/app.css",
            "/favicon.ico",
            "/public/logo.svg",
            "/health",
            "/auth/login",
            "/auth/me",
        ],
    )
    def test_bypassed_paths(self, guard, path):
        assert guard.bypasses_session_check(path) is True

    @pytest.mark.parametrize(
        "path", ["/", "/login", "/workouts", "/api/auth/signout", "/profile"]
    )
    def test_guarded_paths(self, guard, path):
        assert guard.bypasses_session_check(path) is False
