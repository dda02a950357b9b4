from fastapi import APIRouter, Depends

from marketplace.dependencies import get_session
from marketplace.models import AppScreen, ListingFilters, ListingFormUpdate, NavigateRequest
from marketplace.services.session import MarketplaceSession

router = APIRouter(tags=["marketplace"])


@router.get("/screen", response_model=AppScreen)
def get_screen(session: MarketplaceSession = Depends(get_session)):
    return session.screen()


@router.post("/navigate", response_model=AppScreen)
def navigate(payload: NavigateRequest, session: MarketplaceSession = Depends(get_session)):
    return session.navigate(payload.view)


@router.patch("/register/form", response_model=AppScreen)
def update_form(payload: ListingFormUpdate, session: MarketplaceSession = Depends(get_session)):
    return session.update_form(payload)


@router.post("/register/submit", response_model=AppScreen)
def submit_listing(session: MarketplaceSession = Depends(get_session)):
    return session.submit()


@router.put("/services/filters", response_model=AppScreen)
def update_filters(payload: ListingFilters, session: MarketplaceSession = Depends(get_session)):
    return session.update_filters(payload)


@router.delete("/services/filters", response_model=AppScreen)
def clear_filters(session: MarketplaceSession = Depends(get_session)):
    return session.clear_filters()


@router.post("/notification/dismiss", response_model=AppScreen)
def dismiss_notification(session: MarketplaceSession = Depends(get_session)):
    return session.dismiss_notification()
