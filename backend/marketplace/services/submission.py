from typing import Any, Dict, Optional

from marketplace.errors import ListingValidationError
from marketplace.models import ListingForm
from marketplace.services.listing_store import encode_listing

FIELD_LABELS = {
    "name": "name",
    "service_type": "service type",
    "description": "description",
    "location": "location",
    "contact": "contact",
}


class ListingSubmission:
    def __init__(self, store: Optional[Any]) -> None:
        self._store = store

    def prepare(self, form: ListingForm, user_id: Optional[str]) -> Dict[str, Any]:
        if self._store is None or not self._store.available:
            raise ListingValidationError("The listing store is unavailable; try again later.")
        if not user_id:
            raise ListingValidationError("You must be signed in to register a service.")
        missing = form.missing_fields()
        if missing:
            labels = ", ".join(FIELD_LABELS[name] for name in missing)
            raise ListingValidationError(f"Please fill in all fields: {labels}.")
        return encode_listing(form, owner_id=user_id)

    def send(self, document: Dict[str, Any]) -> str:
        assert self._store is not None
        return self._store.add(document)
