class MarketplaceError(Exception):
    """Base class for failures surfaced to the user as a notification."""


class AuthError(MarketplaceError):
    pass


class ListingStoreError(MarketplaceError):
    pass


class ListingValidationError(MarketplaceError):
    pass
