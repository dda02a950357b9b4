from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

ViewName = Literal["home", "register", "services"]
NotificationKind = Literal["success", "error"]
ServicesStatus = Literal["loading", "awaiting_identity", "empty", "no_matches", "ready"]

FORM_FIELDS = ("name", "service_type", "description", "location", "contact")


class Listing(BaseModel):
    id: str
    name: str = ""
    service_type: str = ""
    description: str = ""
    location: str = ""
    contact: str = ""
    owner_id: Optional[str] = None
    created_at: Optional[datetime] = None


class ListingForm(BaseModel):
    name: str = ""
    service_type: str = ""
    description: str = ""
    location: str = ""
    contact: str = ""

    def missing_fields(self) -> list[str]:
        return [name for name in FORM_FIELDS if not getattr(self, name).strip()]


class ListingFormUpdate(BaseModel):
    name: Optional[str] = None
    service_type: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    contact: Optional[str] = None


class ListingFilters(BaseModel):
    search: str = ""
    category: str = ""
    location: str = ""


class Notification(BaseModel):
    text: str
    kind: NotificationKind


class NavigateRequest(BaseModel):
    view: ViewName


class ListingCard(BaseModel):
    listing: Listing
    is_own: bool = False


class HomeView(BaseModel):
    title: str
    tagline: str
    listing_count: int


class RegisterView(BaseModel):
    form: ListingForm
    submitting: bool
    can_submit: bool
    missing_fields: list[str] = Field(default_factory=list)


class ServicesView(BaseModel):
    status: ServicesStatus
    placeholder: Optional[str] = None
    filters: ListingFilters
    category_options: list[str] = Field(default_factory=list)
    location_options: list[str] = Field(default_factory=list)
    cards: list[ListingCard] = Field(default_factory=list)
    total_count: int = 0
    shown_count: int = 0


class AppScreen(BaseModel):
    view: ViewName
    user_id: Optional[str] = None
    auth_ready: bool
    notification: Optional[Notification] = None
    home: Optional[HomeView] = None
    register: Optional[RegisterView] = None
    services: Optional[ServicesView] = None


class ReadinessReport(BaseModel):
    status: Literal["ready", "starting"]
    auth_ready: bool
    signed_in: bool
    sync_status: Literal["idle", "loading", "live", "failed", "awaiting_identity"]
    listing_count: int
