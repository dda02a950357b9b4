import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.trustedhost import TrustedHostMiddleware

from marketplace.dependencies import get_session, marketplace_session, settings
from marketplace.logging_config import setup_logging
from marketplace.models import ReadinessReport
from marketplace.routers import marketplace
from marketplace.services.session import MarketplaceSession

setup_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Marketplace starting (backend=%s, app_id=%s)", settings.backend, settings.app_id)
    yield
    marketplace_session.close()
    logger.info("Marketplace stopped")


app = FastAPI(title="Community Marketplace", version="0.1.0", lifespan=lifespan)

allow_any_origin = len(settings.cors_origins) == 1 and settings.cors_origins[0] == "*"

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    # Browsers reject wildcard CORS with credentials enabled.
    allow_credentials=not allow_any_origin,
    allow_methods=["*"],
    allow_headers=["*"],
)

if not (len(settings.trusted_hosts) == 1 and settings.trusted_hosts[0] == "*"):
    app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.trusted_hosts)

app.include_router(marketplace.router)

web_dir = Path(__file__).parent / "web"
app.mount("/web", StaticFiles(directory=web_dir, html=True), name="web")


@app.get("/")
def root_redirect():
    return RedirectResponse(url="/web/")


@app.get("/web")
def web_root_redirect():
    return RedirectResponse(url="/web/")


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/ready", response_model=ReadinessReport)
def ready(session: MarketplaceSession = Depends(get_session)):
    return session.readiness()
