"""In-process stand-ins for the auth provider and the listings collection.

Used with ``MARKETPLACE_BACKEND=memory``; nothing is persisted.
"""

from datetime import datetime, timezone
from threading import Lock
from typing import Any, Callable, Dict, List, Optional, Tuple
from uuid import uuid4

from marketplace.errors import AuthError
from marketplace.models import Listing
from marketplace.services.identity import IdentityListener
from marketplace.services.listing_store import ErrorHandler, SnapshotHandler, decode_listing


class LocalAuthClient:
    def __init__(self) -> None:
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
        # The token doubles as the uid, as with the auth emulator.
        if not token.strip():
            raise AuthError("Custom token is empty")
        self._notify(token.strip())
        return token.strip()

    def sign_in_anonymously(self) -> str:
        user_id = f"anon_{uuid4().hex[:12]}"
        self._notify(user_id)
        return user_id

    def sign_out(self) -> None:
        self._notify(None)

    def _notify(self, user_id: Optional[str]) -> None:
        with self._lock:
            self.user_id = user_id
            listeners = list(self._listeners)
        for listener in listeners:
            listener(user_id)


class InMemoryListingStore:
    def __init__(self, path: str = "memory") -> None:
        self.path = path
        self._lock = Lock()
        self._documents: Dict[str, Dict[str, Any]] = {}
        self._subscribers: Dict[int, Tuple[SnapshotHandler, ErrorHandler]] = {}
        self._next_subscriber = 0

    @property
    def available(self) -> bool:
        return True

    def subscribe(self, on_snapshot: SnapshotHandler, on_error: ErrorHandler) -> Callable[[], None]:
        with self._lock:
            key = self._next_subscriber
            self._next_subscriber += 1
            self._subscribers[key] = (on_snapshot, on_error)
            snapshot = self._snapshot()
        on_snapshot(snapshot)

        def unsubscribe() -> None:
            with self._lock:
                self._subscribers.pop(key, None)

        return unsubscribe

    def add(self, fields: Dict[str, Any]) -> str:
        doc_id = uuid4().hex[:20]
        document = dict(fields)
        document["createdAt"] = datetime.now(timezone.utc)
        with self._lock:
            self._documents[doc_id] = document
            snapshot = self._snapshot()
            handlers = [handler for handler, _ in self._subscribers.values()]
        for handler in handlers:
            handler(snapshot)
        return doc_id

    def _snapshot(self) -> List[Listing]:
        return [decode_listing(doc_id, data) for doc_id, data in self._documents.items()]
