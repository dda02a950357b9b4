import base64
import json
import logging
from threading import Lock
from typing import Any, Callable, Dict, List, Optional

import requests

from marketplace.errors import AuthError

logger = logging.getLogger(__name__)

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1"
REQUEST_TIMEOUT_SECONDS = 10

IdentityListener = Callable[[Optional[str]], None]


def _b64urldecode(value: str) -> bytes:
    padding = "=" * ((4 - len(value) % 4) % 4)
    return base64.urlsafe_b64decode((value + padding).encode("utf-8"))


def user_id_from_id_token(id_token: str) -> Optional[str]:
    """Read the uid claim of a Firebase ID token without verifying it.

    The token was just issued to us by the auth provider, so the claims are
    only used to learn our own identity.
    """
    try:
        payload_part = id_token.split(".")[1]
        claims = json.loads(_b64urldecode(payload_part))
    except (IndexError, ValueError):
        return None
    if not isinstance(claims, dict):
        return None
    user_id = claims.get("user_id") or claims.get("sub")
    return str(user_id) if user_id else None


class FirebaseAuthClient:
    """Firebase Auth session over the Identity Toolkit REST API."""

    def __init__(self, firebase_config: Dict[str, Any]) -> None:
        self._api_key = str(firebase_config.get("apiKey") or "").strip()
        self._lock = Lock()
        self._listeners: List[IdentityListener] = []
        self.user_id: Optional[str] = None

    def add_listener(self, listener: IdentityListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)
            current = self.user_id
        listener(current)

        def remove() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return remove

    def sign_in_with_custom_token(self, token: str) -> str:
        payload = self._post("accounts:signInWithCustomToken", {"token": token, "returnSecureToken": True})
        return self._set_user(payload)

    def sign_in_anonymously(self) -> str:
        payload = self._post("accounts:signUp", {"returnSecureToken": True})
        return self._set_user(payload)

    def _set_user(self, payload: Dict[str, Any]) -> str:
        id_token = str(payload.get("idToken") or "")
        user_id = payload.get("localId") or user_id_from_id_token(id_token)
        if not user_id:
            raise AuthError("Sign-in response did not include a user id")
        self._notify(str(user_id))
        return str(user_id)

    def _notify(self, user_id: Optional[str]) -> None:
        with self._lock:
            self.user_id = user_id
            listeners = list(self._listeners)
        for listener in listeners:
            listener(user_id)

    def _post(self, method: str, body: Dict[str, Any]) -> Dict[str, Any]:
        if not self._api_key:
            raise AuthError("Firebase configuration is missing apiKey")
        try:
            response = requests.post(
                f"{IDENTITY_TOOLKIT_URL}/{method}",
                params={"key": self._api_key},
                json=body,
                timeout=REQUEST_TIMEOUT_SECONDS,
            )
        except requests.RequestException as exc:
            raise AuthError(f"Auth request failed: {exc}") from exc
        try:
            payload = response.json()
        except ValueError:
            payload = {}
        if response.status_code != 200:
            error = payload.get("error") if isinstance(payload, dict) else None
            message = error.get("message") if isinstance(error, dict) else None
            raise AuthError(message or f"Auth request failed with HTTP {response.status_code}")
        if not isinstance(payload, dict):
            raise AuthError("Auth response was not a JSON object")
        return payload


class IdentityBootstrap:
    """Signs in once at startup and tracks the identity the provider reports.

    ``on_change(ready, user_id)`` is called on every identity-change event and
    when a failed sign-in forces the ready flag.
    """

    def __init__(
        self,
        auth_client: Any,
        initial_token: Optional[str],
        on_change: Callable[[bool, Optional[str]], None],
        on_error: Callable[[str], None],
    ) -> None:
        self._auth = auth_client
        self._initial_token = initial_token
        self._on_change = on_change
        self._on_error = on_error
        self._remove_listener: Optional[Callable[[], None]] = None
        self._started = False
        self.ready = False
        self.user_id: Optional[str] = None

    def start(self) -> None:
        if self._started:
            return
        self._started = True
        try:
            self._remove_listener = self._auth.add_listener(self._handle_identity)
            if self._initial_token:
                self._auth.sign_in_with_custom_token(self._initial_token)
            else:
                self._auth.sign_in_anonymously()
        except AuthError as exc:
            logger.warning("Sign-in failed: %s", exc)
            self._on_error(f"Could not sign in: {exc}")
            if not self.ready:
                self.ready = True
                self._on_change(self.ready, self.user_id)

    def close(self) -> None:
        if self._remove_listener is not None:
            self._remove_listener()
            self._remove_listener = None

    def _handle_identity(self, user_id: Optional[str]) -> None:
        self.user_id = user_id or None
        self.ready = True
        logger.info("Identity changed: %s", "signed in" if self.user_id else "signed out")
        self._on_change(self.ready, self.user_id)
