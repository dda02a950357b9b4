import logging
from threading import Lock, RLock
from typing import Any, List, Optional

from marketplace.config import Settings
from marketplace.errors import ListingStoreError, ListingValidationError
from marketplace.models import (
    AppScreen,
    Listing,
    ListingFilters,
    ListingForm,
    ListingFormUpdate,
    ReadinessReport,
    ViewName,
)
from marketplace.services.identity import FirebaseAuthClient, IdentityBootstrap
from marketplace.services.listing_store import FirestoreListingStore
from marketplace.services.local_backend import InMemoryListingStore, LocalAuthClient
from marketplace.services.notifications import NotificationOverlay
from marketplace.services.submission import ListingSubmission
from marketplace.services.sync import LiveCollectionSync
from marketplace.views import AppState, render_screen

logger = logging.getLogger(__name__)

SUBMIT_SUCCESS_TEXT = "Service registered successfully!"


class MarketplaceSession:
    """The single UI session: identity, listing mirror and view state.

    All state changes happen under one re-entrant lock, whether they come
    from a request handler or from a store/auth callback thread. Network
    calls for sign-in and submission run outside the lock.
    """

    def __init__(self, auth_client: Any, store: Any, initial_token: Optional[str] = None) -> None:
        self._lock = RLock()
        self._start_lock = Lock()
        self._started = False
        self.view: ViewName = "home"
        self.form = ListingForm()
        self.filters = ListingFilters()
        self.mirror: List[Listing] = []
        self.submitting = False
        self.overlay = NotificationOverlay()
        self.submission = ListingSubmission(store)
        self.sync = LiveCollectionSync(
            store,
            self._lock,
            on_mirror=self._replace_mirror,
            on_error=self._notify_error,
        )
        self.identity = IdentityBootstrap(
            auth_client,
            initial_token,
            on_change=self._identity_changed,
            on_error=self._notify_error,
        )

    def ensure_started(self) -> None:
        if self._started:
            return
        with self._start_lock:
            if self._started:
                return
            self._started = True
            logger.info("Starting marketplace session")
            self.identity.start()

    def close(self) -> None:
        self.identity.close()
        self.sync.release()

    def navigate(self, view: ViewName) -> AppScreen:
        with self._lock:
            self.view = view
            return self.screen()

    def update_form(self, update: ListingFormUpdate) -> AppScreen:
        with self._lock:
            changes = update.model_dump(exclude_none=True)
            self.form = self.form.model_copy(update=changes)
            return self.screen()

    def submit(self) -> AppScreen:
        with self._lock:
            if self.submitting:
                return self.screen()
            try:
                document = self.submission.prepare(self.form, self.identity.user_id)
            except ListingValidationError as exc:
                self.overlay.error(str(exc))
                return self.screen()
            self.submitting = True

        try:
            listing_id = self.submission.send(document)
        except ListingStoreError as exc:
            logger.warning("Listing submission failed: %s", exc)
            with self._lock:
                self.submitting = False
                self.overlay.error(f"Could not register the service: {exc}")
                return self.screen()

        logger.info("Listing %s registered", listing_id)
        with self._lock:
            self.form = ListingForm()
            self.submitting = False
            self.overlay.success(SUBMIT_SUCCESS_TEXT)
            self.view = "services"
            return self.screen()

    def update_filters(self, filters: ListingFilters) -> AppScreen:
        with self._lock:
            self.filters = filters
            return self.screen()

    def clear_filters(self) -> AppScreen:
        return self.update_filters(ListingFilters())

    def dismiss_notification(self) -> AppScreen:
        with self._lock:
            self.overlay.dismiss()
            return self.screen()

    def state(self) -> AppState:
        with self._lock:
            return AppState(
                view=self.view,
                user_id=self.identity.user_id,
                auth_ready=self.identity.ready,
                sync_status=self.sync.status,
                mirror=tuple(self.mirror),
                form=self.form,
                filters=self.filters,
                submitting=self.submitting,
                notification=self.overlay.current,
            )

    def screen(self) -> AppScreen:
        return render_screen(self.state())

    def readiness(self) -> ReadinessReport:
        with self._lock:
            return ReadinessReport(
                status="ready" if self.identity.ready else "starting",
                auth_ready=self.identity.ready,
                signed_in=bool(self.identity.user_id),
                sync_status=self.sync.status,  # type: ignore[arg-type]
                listing_count=len(self.mirror),
            )

    def _identity_changed(self, ready: bool, user_id: Optional[str]) -> None:
        with self._lock:
            self.sync.reconcile(ready, user_id)

    def _replace_mirror(self, listings: List[Listing]) -> None:
        with self._lock:
            self.mirror = listings

    def _notify_error(self, text: str) -> None:
        with self._lock:
            self.overlay.error(text)


def build_session(settings: Settings) -> MarketplaceSession:
    if settings.backend == "memory":
        logger.info("Using the in-memory backend")
        return MarketplaceSession(LocalAuthClient(), InMemoryListingStore(settings.collection_path), settings.initial_auth_token)
    store = FirestoreListingStore(
        settings.collection_path,
        settings.firebase_config,
        credentials_path=settings.credentials_path,
    )
    return MarketplaceSession(FirebaseAuthClient(settings.firebase_config), store, settings.initial_auth_token)
