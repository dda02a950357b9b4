import logging
from datetime import datetime
from threading import Event, Lock, Thread, local
from typing import Any, Callable, Dict, List, Optional

import firebase_admin
from firebase_admin import credentials, firestore

from marketplace.errors import ListingStoreError
from marketplace.models import Listing, ListingForm

logger = logging.getLogger(__name__)

FIREBASE_APP_NAME = "marketplace"

SnapshotHandler = Callable[[List[Listing]], None]
ErrorHandler = Callable[[Exception], None]


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def encode_listing(form: ListingForm, owner_id: str) -> Dict[str, Any]:
    return {
        "name": form.name,
        "serviceType": form.service_type,
        "description": form.description,
        "location": form.location,
        "contact": form.contact,
        "ownerId": owner_id,
    }


def decode_listing(doc_id: str, data: Dict[str, Any]) -> Listing:
    created_at = data.get("createdAt")
    owner_id = data.get("ownerId")
    return Listing(
        id=doc_id,
        name=_text(data.get("name")),
        service_type=_text(data.get("serviceType")),
        description=_text(data.get("description")),
        location=_text(data.get("location")),
        contact=_text(data.get("contact")),
        owner_id=str(owner_id) if owner_id else None,
        created_at=created_at if isinstance(created_at, datetime) else None,
    )


class FirestoreListingStore:
    """The shared listings collection in Cloud Firestore.

    Initialization is attempted once; after a failure the store reports
    itself unavailable and every call raises the recorded error.
    """

    def __init__(
        self,
        path: str,
        firebase_config: Dict[str, Any],
        credentials_path: Optional[str] = None,
    ) -> None:
        self.path = path
        self._firebase_config = firebase_config
        self._credentials_path = credentials_path
        self._lock = Lock()
        self._collection = None
        self._init_error: Optional[ListingStoreError] = None

    @property
    def available(self) -> bool:
        return self._init_error is None

    def _ensure_collection(self):
        if self._collection is not None:
            return self._collection
        with self._lock:
            if self._collection is not None:
                return self._collection
            if self._init_error is not None:
                raise self._init_error
            options: Dict[str, Any] = {}
            project_id = self._firebase_config.get("projectId")
            if project_id:
                options["projectId"] = project_id
            try:
                if self._credentials_path:
                    cred = credentials.Certificate(self._credentials_path)
                else:
                    cred = credentials.ApplicationDefault()
                try:
                    app = firebase_admin.get_app(FIREBASE_APP_NAME)
                except ValueError:
                    app = firebase_admin.initialize_app(cred, options, name=FIREBASE_APP_NAME)
                client = firestore.client(app)
            except Exception as exc:
                logger.exception("Firestore initialization failed")
                self._init_error = ListingStoreError(f"Could not connect to the listing store: {exc}")
                raise self._init_error from exc
            self._collection = client.collection(self.path)
            logger.info("Firestore listing store initialized at %s", self.path)
            return self._collection

    def subscribe(self, on_snapshot: SnapshotHandler, on_error: ErrorHandler) -> Callable[[], None]:
        collection = self._ensure_collection()
        closing = Event()
        # Set while a watch callback runs; closing the watch from its own
        # thread would make it join itself.
        in_callback = local()

        def handle(docs, changes, read_time) -> None:
            in_callback.active = True
            try:
                try:
                    listings = [decode_listing(doc.id, doc.to_dict() or {}) for doc in docs]
                except Exception as exc:
                    logger.exception("Could not decode listings snapshot")
                    on_error(ListingStoreError(f"Could not read listings: {exc}"))
                    return
                on_snapshot(listings)
            finally:
                in_callback.active = False

        def stream_done(future) -> None:
            if closing.is_set():
                return
            try:
                reason = future.exception()
            except Exception as exc:
                reason = exc
            logger.error("Listings stream ended: %s", reason)
            in_callback.active = True
            try:
                on_error(ListingStoreError(f"Listings stream ended: {reason or 'closed by server'}"))
            finally:
                in_callback.active = False

        try:
            watch = collection.on_snapshot(handle)
        except Exception as exc:
            raise ListingStoreError(f"Could not subscribe to listings: {exc}") from exc

        # Watch has no error callback; the RPC finishing is the only signal
        # that the listener is gone.
        rpc = getattr(watch, "_rpc", None)
        if rpc is not None:
            rpc.add_done_callback(stream_done)
        else:
            logger.warning("Listings watch exposes no stream; stream failures will go unreported")

        def unsubscribe() -> None:
            closing.set()
            if getattr(in_callback, "active", False):
                Thread(target=watch.unsubscribe, name="listings-unsubscribe", daemon=True).start()
            else:
                watch.unsubscribe()

        return unsubscribe

    def add(self, fields: Dict[str, Any]) -> str:
        collection = self._ensure_collection()
        document = dict(fields)
        document["createdAt"] = firestore.SERVER_TIMESTAMP
        try:
            _, ref = collection.add(document)
        except Exception as exc:
            raise ListingStoreError(str(exc)) from exc
        return ref.id
