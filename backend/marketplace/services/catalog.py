from typing import Iterable, List

from marketplace.models import Listing


def _contains(value: str, needle: str) -> bool:
    return needle in (value or "").lower()


def filter_listings(
    listings: Iterable[Listing],
    search: str = "",
    category: str = "",
    location: str = "",
) -> List[Listing]:
    query = (search or "").lower()
    category_query = (category or "").lower()
    location_query = (location or "").lower()

    result: List[Listing] = []
    for listing in listings:
        if query and not (
            _contains(listing.name, query)
            or _contains(listing.description, query)
            or _contains(listing.service_type, query)
        ):
            continue
        if category_query and not _contains(listing.service_type, category_query):
            continue
        if location_query and not _contains(listing.location, location_query):
            continue
        result.append(listing)
    return result


def option_values(listings: Iterable[Listing], field: str) -> List[str]:
    """Distinct non-empty values of ``field``, in ascending order."""
    return sorted({value for value in (getattr(listing, field) for listing in listings) if value})
