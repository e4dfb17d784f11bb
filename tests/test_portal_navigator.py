# tests/test_portal_navigator.py

"""
Tests for the portal navigator: the guard is re-run on navigation,
tenant fetches and session changes.
"""

from unittest.mock import Mock

from conftest import FakeAuth, auth_session, auth_user
from core.errors import TenantNotFound
from core.session_provider import SessionProvider
from models.enums import OutcomeKind
from models.tenant import TenantState
from services.portal_navigator import PortalNavigator


def make_navigator(resolved, session=None):
    auth = FakeAuth(session)
    loader = Mock(return_value=resolved)
    outcomes = []
    navigator = PortalNavigator(SessionProvider(auth), tenant_loader=loader, on_outcome=outcomes.append)
    return navigator, auth, loader, outcomes


def test_open_anonymous_back_office(resolved):
    navigator, _, loader, outcomes = make_navigator(resolved)

    outcome = navigator.open("/acme/agency/dashboard")

    loader.assert_called_once_with("acme")
    assert outcome.location == "/acme/agency/auth"
    # Loader first while the agency is fetched
    assert outcomes[0].outcome == OutcomeKind.show_loading
    assert outcomes[-1] == outcome


def test_navigation_within_same_agency_does_not_refetch(resolved):
    navigator, _, loader, _ = make_navigator(resolved)
    navigator.open("/acme")

    navigator.navigate("/acme/properties/3")
    navigator.navigate("/acme/agency/auth")

    loader.assert_called_once_with("acme")
    assert navigator.outcome.is_render


def test_slug_change_refetches(resolved):
    navigator, _, loader, _ = make_navigator(resolved)
    navigator.open("/acme")

    loader.return_value = TenantState.failed(TenantNotFound("ghost"))
    outcome = navigator.navigate("/ghost")

    assert loader.call_count == 2
    loader.assert_called_with("ghost")
    assert outcome.location == "/404"


def test_session_change_reevaluates(resolved):
    navigator, auth, _, outcomes = make_navigator(resolved)
    navigator.open("/acme/agency/dashboard")
    assert navigator.outcome.location == "/acme/agency/auth"

    auth.emit("SIGNED_IN", auth_session(auth_user("U1", "contact@acme.test", role="AGENCY")))

    assert navigator.outcome.is_render
    assert outcomes[-1].is_render


def test_sign_out_event_sends_owner_back_to_sign_in(resolved):
    session = auth_session(auth_user("U1", "contact@acme.test", role="AGENCY"))
    navigator, auth, _, _ = make_navigator(resolved, session)
    assert navigator.open("/acme/agency/dashboard").is_render

    auth.emit("SIGNED_OUT")

    assert navigator.outcome.location == "/acme/agency/auth"


def test_refetch_tenant_reloads_current_slug(resolved):
    navigator, _, loader, _ = make_navigator(resolved)
    navigator.open("/acme")

    navigator.refetch_tenant()

    assert loader.call_count == 2


def test_admin_paths_skip_tenant_lookup(resolved):
    navigator, _, loader, _ = make_navigator(resolved)

    outcome = navigator.open("/admin/agencies")

    loader.assert_not_called()
    assert outcome.location == "/admin/auth"


def test_root_path_renders(resolved):
    navigator, _, loader, _ = make_navigator(resolved)

    assert navigator.open("/").is_render
    loader.assert_not_called()


def test_not_found_page_renders_without_lookup(resolved):
    navigator, _, loader, _ = make_navigator(resolved)
    navigator.open("/ghost")

    outcome = navigator.navigate("/404")

    assert outcome.is_render
    loader.assert_called_once_with("ghost")


def test_open_on_not_found_page(resolved):
    navigator, _, loader, _ = make_navigator(resolved)

    assert navigator.open("/404").is_render
    loader.assert_not_called()


def test_failing_outcome_listener_is_contained(resolved):
    navigator = PortalNavigator(
        SessionProvider(FakeAuth()),
        tenant_loader=Mock(return_value=resolved),
        on_outcome=Mock(side_effect=RuntimeError("render failed")),
    )

    assert navigator.open("/acme").is_render


def test_close_releases_session_subscription(resolved):
    navigator, auth, _, outcomes = make_navigator(resolved)
    with navigator:
        navigator.open("/acme/agency/dashboard")
    count = len(outcomes)

    auth.emit("SIGNED_IN", auth_session())

    auth.subscription.unsubscribe.assert_called_once()
    assert len(outcomes) == count
