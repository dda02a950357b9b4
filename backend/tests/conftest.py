import os
import sys
from threading import RLock

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from marketplace.errors import ListingStoreError
from marketplace.models import Listing
from marketplace.services.local_backend import InMemoryListingStore, LocalAuthClient
from marketplace.services.session import MarketplaceSession


class ManualStore:
    """Listing store whose snapshots and errors are pushed by the test."""

    def __init__(self, add_error=None):
        self.handlers = []
        self.added = []
        self.unsubscribed = 0
        self.add_error = add_error
        self.available = True

    def subscribe(self, on_snapshot, on_error):
        self.handlers.append((on_snapshot, on_error))

        def unsubscribe():
            self.unsubscribed += 1

        return unsubscribe

    def push(self, listings, index=-1):
        self.handlers[index][0](listings)

    def fail(self, message, index=-1):
        self.handlers[index][1](ListingStoreError(message))

    def add(self, fields):
        if self.add_error:
            raise ListingStoreError(self.add_error)
        self.added.append(fields)
        return f"doc_{len(self.added)}"


def make_listing(listing_id, name, service_type, location, description="", owner_id="someone"):
    return Listing(
        id=listing_id,
        name=name,
        service_type=service_type,
        description=description,
        location=location,
        contact="555-0100",
        owner_id=owner_id,
    )


@pytest.fixture
def manual_store():
    return ManualStore()


@pytest.fixture
def memory_session():
    session = MarketplaceSession(LocalAuthClient(), InMemoryListingStore(), initial_token="user_1")
    session.ensure_started()
    yield session
    session.close()


@pytest.fixture
def lock():
    return RLock()
