# services/portal_navigator.py

"""
Mount point for the agency portal in a Python client.

The navigator owns the current path, the tenant state for the slug in
that path, and a SessionProvider. It re-runs the guard on every
navigation, tenant (re)fetch and session change, and hands each outcome
to `on_outcome`.
"""

from typing import Callable, Optional

from core.guard import evaluate, evaluate_admin
from core.logging_config import logger
from core.route_classifier import is_admin_path, slug_from_path
from core.session_provider import SessionProvider
from core.tenant_resolver import resolve_tenant
from models.guard import GuardOutcome
from models.identity import SessionState
from models.tenant import TenantState


TenantLoader = Callable[[str], TenantState]
OutcomeListener = Callable[[GuardOutcome], None]


class PortalNavigator:
    def __init__(
        self,
        session_provider: SessionProvider,
        tenant_loader: TenantLoader = resolve_tenant,
        on_outcome: Optional[OutcomeListener] = None,
    ):
        self._session = session_provider
        self._load_tenant = tenant_loader
        self._on_outcome = on_outcome
        self._path = "/"
        self._slug: Optional[str] = None
        self._tenant_state = TenantState.loading()
        self._outcome: Optional[GuardOutcome] = None
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def path(self) -> str:
        return self._path

    @property
    def tenant_state(self) -> TenantState:
        return self._tenant_state

    @property
    def outcome(self) -> Optional[GuardOutcome]:
        return self._outcome

    # ------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------
    def open(self, path: str) -> GuardOutcome:
        if self._unsubscribe is None:
            self._unsubscribe = self._session.subscribe(self._on_session_change)
        self._session.start()
        return self.navigate(path)

    def close(self):
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._session.close()

    def __enter__(self) -> "PortalNavigator":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    # ------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------
    def navigate(self, path: str) -> GuardOutcome:
        self._path = path or "/"
        slug = slug_from_path(self._path)

        if slug is not None and slug != self._slug:
            self._slug = slug
            return self.refetch_tenant()

        self._slug = slug
        return self._evaluate()

    def refetch_tenant(self) -> GuardOutcome:
        if self._slug is None:
            return self._evaluate()

        self._tenant_state = TenantState.loading()
        self._evaluate()

        self._tenant_state = self._load_tenant(self._slug)
        return self._evaluate()

    def _on_session_change(self, state: SessionState):
        # Nothing is mounted until the first navigation
        if self._outcome is not None:
            self._evaluate()

    # ------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------
    def _evaluate(self) -> GuardOutcome:
        session_state = self._session.state

        if is_admin_path(self._path):
            outcome = evaluate_admin(session_state, self._path)
        elif self._slug is None:
            # Platform landing page
            outcome = GuardOutcome.render()
        else:
            outcome = evaluate(self._tenant_state, session_state, self._path)

        self._outcome = outcome
        if self._on_outcome is not None:
            try:
                self._on_outcome(outcome)
            except Exception as e:
                logger.error(f"Outcome listener failed for {self._path}: {e}", exc_info=True)
        return outcome
