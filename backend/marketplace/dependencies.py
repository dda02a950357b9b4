from marketplace.config import Settings
from marketplace.services.session import MarketplaceSession, build_session

settings = Settings.from_env()
marketplace_session = build_session(settings)


def get_session() -> MarketplaceSession:
    marketplace_session.ensure_started()
    return marketplace_session
