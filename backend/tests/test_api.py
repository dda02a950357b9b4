import pytest
from fastapi.testclient import TestClient

from marketplace.dependencies import get_session
from marketplace.main import app
from marketplace.services.identity import FirebaseAuthClient
from marketplace.services.local_backend import InMemoryListingStore
from marketplace.services.session import MarketplaceSession


@pytest.fixture
def client(memory_session):
    app.dependency_overrides[get_session] = lambda: memory_session
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health_ok(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_ready_reports_session(client):
    payload = client.get("/ready").json()
    assert payload["auth_ready"] is True
    assert payload["signed_in"] is True
    assert payload["sync_status"] == "live"


def test_home_is_the_initial_screen(client):
    payload = client.get("/screen").json()
    assert payload["view"] == "home"
    assert payload["home"]["listing_count"] == 0
    assert payload["user_id"] == "user_1"


def test_unknown_view_is_rejected(client):
    response = client.post("/navigate", json={"view": "admin"})
    assert response.status_code == 422


def test_register_then_browse_flow(client):
    assert client.post("/navigate", json={"view": "register"}).json()["view"] == "register"

    form = client.patch(
        "/register/form",
        json={"name": "Bea Elétrica", "service_type": "Eletricista", "location": "Norte"},
    ).json()
    assert form["register"]["missing_fields"] == ["description", "contact"]

    incomplete = client.post("/register/submit").json()
    assert incomplete["view"] == "register"
    assert incomplete["notification"]["kind"] == "error"

    client.patch("/register/form", json={"description": "Instalações", "contact": "9999-0000"})
    done = client.post("/register/submit").json()
    assert done["view"] == "services"
    assert done["notification"] == {"text": "Service registered successfully!", "kind": "success"}
    assert done["services"]["location_options"] == ["Norte"]
    assert done["services"]["cards"][0]["listing"]["service_type"] == "Eletricista"

    filtered = client.put("/services/filters", json={"search": "", "category": "", "location": "sul"}).json()
    assert filtered["services"]["status"] == "no_matches"
    assert filtered["services"]["placeholder"] == "No services match your search."

    cleared = client.delete("/services/filters").json()
    assert cleared["services"]["shown_count"] == 1

    dismissed = client.post("/notification/dismiss").json()
    assert dismissed["notification"] is None


def test_failed_bootstrap_keeps_ui_usable():
    session = MarketplaceSession(FirebaseAuthClient({}), InMemoryListingStore())
    session.ensure_started()
    app.dependency_overrides[get_session] = lambda: session
    try:
        client = TestClient(app)
        payload = client.post("/navigate", json={"view": "services"}).json()
    finally:
        app.dependency_overrides.clear()

    assert payload["auth_ready"] is True
    assert payload["notification"]["kind"] == "error"
    assert payload["services"]["status"] == "awaiting_identity"


def test_web_shell_is_served(client):
    response = client.get("/web/")
    assert response.status_code == 200
    assert "Community Marketplace" in response.text
    # Filters survive leaving and re-entering the browse view.
    assert "search.value = services.filters.search" in response.text
