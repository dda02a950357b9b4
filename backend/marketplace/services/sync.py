import logging
from typing import Any, Callable, List, Optional

from marketplace.errors import ListingStoreError
from marketplace.models import Listing

logger = logging.getLogger(__name__)


class LiveCollectionSync:
    """Keeps one live subscription to the listings collection.

    The subscription exists only while auth is ready and an identity is
    present. Every subscription gets a generation number; snapshots and
    errors from a released generation are dropped, so nothing is delivered
    after ``release()`` returns.
    """

    def __init__(
        self,
        store: Any,
        lock: Any,
        on_mirror: Callable[[List[Listing]], None],
        on_error: Callable[[str], None],
    ) -> None:
        self._store = store
        self._lock = lock
        self._on_mirror = on_mirror
        self._on_error = on_error
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._generation = 0
        self.status = "idle"
        self.loading = False

    @property
    def active(self) -> bool:
        return self._unsubscribe is not None

    def reconcile(self, auth_ready: bool, user_id: Optional[str]) -> None:
        with self._lock:
            if auth_ready and user_id:
                self._activate()
                return
            self.release()
            if auth_ready:
                if self.status != "awaiting_identity":
                    logger.info("Auth is ready without an identity; waiting before subscribing to listings")
                self.status = "awaiting_identity"

    def release(self) -> None:
        with self._lock:
            self._generation += 1
            unsubscribe, self._unsubscribe = self._unsubscribe, None
            self.loading = False
            if self.status in {"loading", "live", "failed"}:
                self.status = "idle"
        if unsubscribe is not None:
            unsubscribe()
            logger.info("Listings subscription released")

    def _activate(self) -> None:
        if self._unsubscribe is not None or self.status == "failed":
            return
        self._generation += 1
        generation = self._generation
        self.loading = True
        self.status = "loading"
        try:
            unsubscribe = self._store.subscribe(
                lambda listings: self._handle_snapshot(generation, listings),
                lambda exc: self._handle_error(generation, exc),
            )
        except ListingStoreError as exc:
            self._handle_error(generation, exc)
            return
        if generation == self._generation:
            self._unsubscribe = unsubscribe
            logger.info("Listings subscription opened")
        else:
            unsubscribe()

    def _handle_snapshot(self, generation: int, listings: List[Listing]) -> None:
        with self._lock:
            if generation != self._generation:
                return
            self.loading = False
            self.status = "live"
            self._on_mirror(list(listings))

    def _handle_error(self, generation: int, exc: Exception) -> None:
        with self._lock:
            if generation != self._generation:
                return
            logger.error("Listings subscription failed: %s", exc)
            self._generation += 1
            unsubscribe, self._unsubscribe = self._unsubscribe, None
            self.loading = False
            self.status = "failed"
            self._on_error(f"Could not load services: {exc}")
        if unsubscribe is not None:
            unsubscribe()
