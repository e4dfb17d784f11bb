# core/session_provider.py

"""
Observable session state over a Supabase auth client.

The provider starts in `loading`, then settles on `present` or `absent`
from the initial get_session() read, and follows every auth event after
that. Listeners are called on each state change.
"""

from threading import Lock
from typing import Any, Callable, List, Optional

from core.errors import SessionFetchFailed, extract_supabase_error
from core.logging_config import logger
from models.identity import SessionState


SessionListener = Callable[[SessionState], None]

# Events after which no session may be trusted, whatever payload they carry
SIGNED_OUT_EVENTS = {"SIGNED_OUT", "USER_DELETED"}


class SessionProvider:
    """
    Holds the current session for one auth client.

    Usage:
        with SessionProvider(client.auth) as provider:
            unsubscribe = provider.subscribe(on_change)
            ...
    """

    def __init__(self, auth_client: Any):
        self._auth = auth_client
        self._state = SessionState.loading()
        self._listeners: List[SessionListener] = []
        self._subscription = None
        self._event_seen = False
        self._started = False
        self._closed = False
        self._lock = Lock()
        self.last_error: Optional[SessionFetchFailed] = None

    @property
    def state(self) -> SessionState:
        with self._lock:
            return self._state

    # ------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------
    def start(self) -> SessionState:
        """
        Subscribe to auth events, then read the persisted session.
        The subscription comes first so a sign-out racing the initial
        read always wins over the (stale) persisted session.
        """
        with self._lock:
            if self._started or self._closed:
                return self._state
            self._started = True

        self._subscription = self._auth.on_auth_state_change(self._on_auth_event)

        session = None
        try:
            session = self._auth.get_session()
        except Exception as e:
            self.last_error = SessionFetchFailed(extract_supabase_error(e))
            logger.error(f"Error getting initial session: {self.last_error}")

        with self._lock:
            if self._event_seen or self._closed:
                logger.info("Initial session discarded: an auth event arrived first")
                return self._state

        if session is None:
            logger.info("Initial session state: no session")
            self._clear_local_credentials()
        else:
            logger.info("Initial session state: active")

        self._set_state(SessionState.from_session(session), initial=True)
        return self.state

    def close(self):
        """Unsubscribe from the auth event stream. Safe to call twice."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            subscription, self._subscription = self._subscription, None
            self._listeners.clear()

        if subscription is not None:
            logger.info("Cleaning up auth subscription")
            subscription.unsubscribe()

    def __enter__(self) -> "SessionProvider":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    # ------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------
    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------
    def sign_out(self):
        try:
            self._auth.sign_out()
        except Exception as e:
            logger.error(f"Logout error: {extract_supabase_error(e)}")
            raise
        self._set_state(SessionState.absent())

    # ------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------
    def _clear_local_credentials(self):
        # Drops any token left in the client's storage so a dead session
        # cannot be resumed silently.
        try:
            self._auth.sign_out()
        except Exception as e:
            logger.warning(f"Could not clear local credentials: {extract_supabase_error(e)}")

    def _on_auth_event(self, event: Any, session: Any):
        event_name = str(getattr(event, "value", event))

        with self._lock:
            self._event_seen = True
            if self._closed:
                return

        logger.info(f"Auth state change: {event_name}")

        if event_name in SIGNED_OUT_EVENTS:
            self._set_state(SessionState.absent())
        else:
            self._set_state(SessionState.from_session(session))

    def _set_state(self, new_state: SessionState, initial: bool = False):
        with self._lock:
            # An event landing after the check in start() still wins
            if initial and (self._event_seen or self._closed):
                return
            if self._state == new_state:
                return
            self._state = new_state
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(new_state)
            except Exception as e:
                logger.error(f"Session listener failed: {e}", exc_info=True)
