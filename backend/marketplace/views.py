"""Screen rendering.

Every function here is a pure function of an :class:`AppState` snapshot; none
of them touch the network or mutate the session.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

from marketplace.models import (
    AppScreen,
    HomeView,
    Listing,
    ListingCard,
    ListingFilters,
    ListingForm,
    Notification,
    RegisterView,
    ServicesView,
    ViewName,
)
from marketplace.services.catalog import filter_listings, option_values

HOME_TITLE = "Community Marketplace"
HOME_TAGLINE = "Find and offer services in your neighborhood."

PLACEHOLDERS = {
    "loading": "Loading services...",
    "awaiting_identity": "Sign-in is required to see the listings. Reload the page to try again.",
    "empty": "No services registered yet. Be the first!",
    "no_matches": "No services match your search.",
}


@dataclass(frozen=True)
class AppState:
    view: ViewName = "home"
    user_id: Optional[str] = None
    auth_ready: bool = False
    sync_status: str = "idle"
    mirror: Tuple[Listing, ...] = ()
    form: ListingForm = field(default_factory=ListingForm)
    filters: ListingFilters = field(default_factory=ListingFilters)
    submitting: bool = False
    notification: Optional[Notification] = None


def render_home(state: AppState) -> HomeView:
    return HomeView(title=HOME_TITLE, tagline=HOME_TAGLINE, listing_count=len(state.mirror))


def render_register(state: AppState) -> RegisterView:
    return RegisterView(
        form=state.form,
        submitting=state.submitting,
        can_submit=bool(state.user_id) and not state.submitting,
        missing_fields=state.form.missing_fields(),
    )


def _services_status(state: AppState, shown: int) -> str:
    if state.sync_status == "loading" or (state.sync_status == "idle" and not state.auth_ready):
        return "loading"
    if not state.mirror:
        if state.sync_status == "awaiting_identity":
            return "awaiting_identity"
        return "empty"
    if not shown:
        return "no_matches"
    return "ready"


def render_services(state: AppState) -> ServicesView:
    filters = state.filters
    shown = filter_listings(state.mirror, filters.search, filters.category, filters.location)
    status = _services_status(state, len(shown))
    cards = []
    if status == "ready":
        cards = [
            ListingCard(listing=listing, is_own=bool(state.user_id) and listing.owner_id == state.user_id)
            for listing in shown
        ]
    return ServicesView(
        status=status,  # type: ignore[arg-type]
        placeholder=PLACEHOLDERS.get(status),
        filters=filters,
        category_options=option_values(state.mirror, "service_type"),
        location_options=option_values(state.mirror, "location"),
        cards=cards,
        total_count=len(state.mirror),
        shown_count=len(cards),
    )


def render_screen(state: AppState) -> AppScreen:
    screen = AppScreen(
        view=state.view,
        user_id=state.user_id,
        auth_ready=state.auth_ready,
        notification=state.notification,
    )
    if state.view == "home":
        screen.home = render_home(state)
    elif state.view == "register":
        screen.register = render_register(state)
    else:
        screen.services = render_services(state)
    return screen
