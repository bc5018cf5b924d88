# dhanji/core/session.py
import logging
from typing import Any, Callable, List, Optional

from supabase import Client

from dhanji.core.models import UserProfile, UserSettings
from dhanji.core.notifications import Notifier

logger = logging.getLogger(__name__)

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"
INITIAL_SESSION = "INITIAL_SESSION"

Listener = Callable[[str, Optional[UserProfile]], None]


def profile_from_auth_user(auth_user: Any) -> UserProfile:
    """Maps a Supabase auth user onto a profile with default settings."""
    metadata = getattr(auth_user, "user_metadata", None) or {}
    return UserProfile(
        id=auth_user.id,
        name=metadata.get("name") or "User",
        email=getattr(auth_user, "email", None) or "",
        avatar=metadata.get("avatar_url") or "",
        settings=UserSettings(),
    )


class AuthSession:
    """
    The signed-in state of one application instance.

    Built once by the composition root and handed to whoever needs it.
    Listeners registered with `subscribe` are called with (event, user)
    whenever the signed-in user changes, whether the change came from this
    object (login/logout) or from the Supabase client (token expiry, sign
    out elsewhere).
    """

    def __init__(self, supabase_client: Client, notifier: Optional[Notifier] = None):
        self._client = supabase_client
        self.notifier = notifier
        self.user: Optional[UserProfile] = None
        self.is_loading = True
        self.error: Optional[str] = None
        self._listeners: List[Listener] = []
        self._auth_subscription = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def user_id(self) -> Optional[str]:
        return self.user.id if self.user else None

    def start(self) -> Optional[UserProfile]:
        """Listens to the backend's auth events, then picks up any existing session."""
        self._auth_subscription = self._client.auth.on_auth_state_change(self._on_auth_state_change)
        return self.restore()

    def close(self) -> None:
        if self._auth_subscription is not None:
            self._auth_subscription.unsubscribe()
            self._auth_subscription = None

    def restore(self) -> Optional[UserProfile]:
        try:
            current = self._client.auth.get_session()
        except Exception as e:
            logger.warning("Could not restore the auth session: %s", e)
            current = None
        self._apply(INITIAL_SESSION, current)
        self.is_loading = False
        return self.user

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _on_auth_state_change(self, event: Any, session: Any) -> None:
        self._apply(getattr(event, "value", str(event)), session)

    def _apply(self, event: str, session: Any) -> None:
        auth_user = getattr(session, "user", None) if session is not None else None
        new_user = profile_from_auth_user(auth_user) if auth_user is not None else None
        if (new_user and new_user.id) == (self.user and self.user.id):
            return
        self.user = new_user
        logger.info("Auth state changed: %s (user=%s)", event, self.user_id)
        for listener in list(self._listeners):
            listener(event, self.user)

    def _fail(self, title: str, e: Exception) -> bool:
        self.error = getattr(e, "message", None) or str(e)
        logger.error("%s: %s", title, self.error)
        if self.notifier is not None:
            self.notifier.error(title, self.error)
        return False

    def _notify(self, title: str, description: str) -> None:
        if self.notifier is not None:
            self.notifier.notify(title, description)

    def login(self, email: str, password: str) -> bool:
        self.is_loading = True
        self.error = None
        try:
            response = self._client.auth.sign_in_with_password({"email": email, "password": password})
        except Exception as e:
            return self._fail("Login Failed", e)
        finally:
            self.is_loading = False
        self._apply(SIGNED_IN, getattr(response, "session", None))
        self._notify("Login Successful", "You've been successfully logged in.")
        return True

    def signup(self, name: str, email: str, password: str) -> bool:
        self.is_loading = True
        self.error = None
        try:
            response = self._client.auth.sign_up({
                "email": email,
                "password": password,
                "options": {"data": {"name": name}},
            })
        except Exception as e:
            return self._fail("Registration Failed", e)
        finally:
            self.is_loading = False
        # with email confirmation on, the session stays empty until the link is followed
        self._apply(SIGNED_IN, getattr(response, "session", None))
        self._notify("Account Created", "Your account has been successfully created.")
        return True

    def verify_otp(self, otp: str) -> bool:
        # Supabase confirms sign-ups through the emailed link
        return True

    def logout(self) -> bool:
        self.is_loading = True
        try:
            self._client.auth.sign_out()
        except Exception as e:
            return self._fail("Logout Failed", e)
        finally:
            self.is_loading = False
        self._apply(SIGNED_OUT, None)
        self._notify("Logged Out", "You've been successfully logged out.")
        return True
