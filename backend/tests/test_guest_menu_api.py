"""HTTP tests for the QR-gated guest menu."""

import logging

import pytest
from fastapi.testclient import TestClient

from smart_restaurant.api.deps import get_popularity_scorer
from smart_restaurant.core.config import get_qr_token_config
from smart_restaurant.core.qr_token import QrTokenIssuer
from smart_restaurant.core.rate_limit import limiter
from smart_restaurant.main import app
from smart_restaurant.models import MenuItem, MenuItemStatus

API = "/api/v1"


class ExplodingScorer:
    def scores(self, restaurant_id, days_back=30):
        raise ConnectionError("ranking backend down")


@pytest.fixture
def menu(catalog, restaurant, other_restaurant):
    starters = catalog.category(restaurant, "Starters", display_order=1)
    mains = catalog.category(restaurant, "Mains", display_order=2)
    catalog.item(starters, "Bruschetta", price="6.00", chef=True)
    catalog.item(starters, "Olives", price="4.00")
    catalog.item(mains, "Carbonara", price="14.00")
    catalog.item(mains, "Retired Dish", price="9.00", deleted=True)
    catalog.item(mains, "Off Menu", price="9.00", status=MenuItemStatus.UNAVAILABLE)
    foreign = catalog.category(other_restaurant, "Foreign Mains")
    catalog.item(foreign, "Foreign Stew", price="11.00")
    return {"starters": starters, "mains": mains, "foreign": foreign}


def names(body):
    return [item["name"] for group in body["items"] for item in group["menuItems"]]


class TestGuestMenuAccess:

    def test_missing_token(self, client: TestClient, menu):
        res = client.get(f"{API}/menu")
        assert res.status_code == 401
        assert res.json() == {"detail": "QR token is required", "error": "token_missing"}
        assert res.headers["WWW-Authenticate"] == "QR-Token"

    def test_invalid_token(self, client: TestClient, menu):
        res = client.get(f"{API}/menu", params={"token": "definitely.not.valid"})
        assert res.status_code == 401
        assert res.json() == {"detail": "This QR code is no longer valid", "error": "token_invalid"}

    def test_rejected_token_logged_once(self, client: TestClient, menu, caplog):
        with caplog.at_level(logging.INFO):
            client.get(f"{API}/menu", params={"token": "definitely.not.valid"})
        rejected = [r for r in caplog.records if "token rejected" in r.getMessage()]
        assert len(rejected) == 1
        assert rejected[0].name == "smart_restaurant.core.qr_token"

    def test_expired_token(self, client: TestClient, menu, expired_guest_token):
        res = client.get(f"{API}/menu", params={"token": expired_guest_token})
        assert res.status_code == 401
        assert res.json()["error"] == "token_invalid"

    def test_token_checked_before_parameters(self, client: TestClient, menu):
        res = client.get(f"{API}/menu", params={"limit": 1000})
        assert res.status_code == 401

    def test_valid_token(self, client: TestClient, menu, guest_token):
        res = client.get(f"{API}/menu", params={"token": guest_token})
        assert res.status_code == 200
        body = res.json()
        assert body["pagination"] == {"page": 1, "limit": 20, "total": 3, "totalPages": 1}
        assert sorted(names(body)) == ["Bruschetta", "Carbonara", "Olives"]

    def test_client_restaurant_id_is_ignored(self, client: TestClient, menu, guest_token, other_restaurant):
        res = client.get(f"{API}/menu", params={
            "token": guest_token,
            "restaurantId": str(other_restaurant.id),
            "search": "Stew",
        })
        assert res.status_code == 200
        assert names(res.json()) == []

    def test_token_of_other_restaurant_sees_only_its_menu(self, client: TestClient, db_session, catalog,
                                                           menu, other_restaurant):
        table = catalog.table(other_restaurant, number="F1")
        token = QrTokenIssuer(db_session, get_qr_token_config()).issue(table.id).token
        res = client.get(f"{API}/menu", params={"token": token})
        assert res.status_code == 200
        assert names(res.json()) == ["Foreign Stew"]


class TestGuestMenuQuery:

    def test_group_shape(self, client: TestClient, menu, guest_token):
        res = client.get(f"{API}/menu", params={"token": guest_token, "sortBy": "price"})
        groups = res.json()["items"]
        # Olives (4), Bruschetta (6), Carbonara (14)
        assert [g["name"] for g in groups] == ["Starters", "Mains"]
        starters = groups[0]
        assert set(starters) >= {"id", "name", "displayOrder", "status", "menuItems"}
        item = starters["menuItems"][0]
        assert item["name"] == "Olives"
        assert item["price"] == 4.0
        assert "category" not in item
        assert item["categoryId"] == str(menu["starters"].id)

    def test_sort_and_page(self, client: TestClient, menu, guest_token):
        res = client.get(f"{API}/menu", params={
            "token": guest_token, "sortBy": "price", "sortOrder": "desc", "limit": 2, "page": 2,
        })
        assert res.status_code == 200
        body = res.json()
        assert names(body) == ["Olives"]
        assert body["pagination"]["totalPages"] == 2

    def test_chef_recommended(self, client: TestClient, menu, guest_token):
        res = client.get(f"{API}/menu", params={"token": guest_token, "chefRecommended": "true"})
        assert names(res.json()) == ["Bruschetta"]

    def test_category_filter(self, client: TestClient, menu, guest_token):
        res = client.get(f"{API}/menu", params={"token": guest_token, "categoryId": str(menu["mains"].id)})
        assert names(res.json()) == ["Carbonara"]

    def test_popularity_sort(self, client: TestClient, catalog, restaurant, menu, guest_token, db_session):
        carbonara = db_session.query(MenuItem).filter(MenuItem.name == "Carbonara").one()
        catalog.order(restaurant, [(carbonara, 5)])
        res = client.get(f"{API}/menu", params={
            "token": guest_token, "sortBy": "popularity", "sortOrder": "desc",
        })
        assert res.status_code == 200
        first = res.json()["items"][0]["menuItems"][0]
        assert first["name"] == "Carbonara"
        assert first["popularity"] == 5.0

    @pytest.mark.parametrize("params", [
        {"limit": 101},
        {"limit": 0},
        {"page": 0},
        {"sortBy": "createdAt"},
        {"sortBy": "calories"},
        {"sortOrder": "sideways"},
        {"categoryId": "not-a-uuid"},
    ])
    def test_invalid_parameters(self, client: TestClient, menu, guest_token, params):
        res = client.get(f"{API}/menu", params={"token": guest_token, **params})
        assert res.status_code == 400
        body = res.json()
        assert body["error"] == "validation_error"
        assert body["fields"]

    def test_scoring_failure(self, client: TestClient, menu, guest_token):
        app.dependency_overrides[get_popularity_scorer] = lambda: ExplodingScorer()
        res = client.get(f"{API}/menu", params={"token": guest_token, "sortBy": "popularity"})
        assert res.status_code == 500
        assert res.json()["error"] == "scoring_failure"
        assert "items" not in res.json()

    def test_default_sort_never_calls_scorer(self, client: TestClient, menu, guest_token):
        app.dependency_overrides[get_popularity_scorer] = lambda: ExplodingScorer()
        res = client.get(f"{API}/menu", params={"token": guest_token})
        assert res.status_code == 200
        assert names(res.json()) == ["Bruschetta", "Olives", "Carbonara"]


class TestGuestRateLimit:

    @pytest.fixture
    def enabled_limiter(self, client: TestClient):
        limiter.reset()
        limiter.enabled = True
        yield limiter
        limiter.enabled = False
        limiter.reset()

    def test_rate_limited_response_envelope(self, client: TestClient, menu, guest_token, enabled_limiter):
        for _ in range(60):
            assert client.get(f"{API}/menu", params={"token": guest_token}).status_code == 200

        res = client.get(f"{API}/menu", params={"token": guest_token})
        assert res.status_code == 429
        body = res.json()
        assert body["error"] == "rate_limited"
        assert body["detail"].startswith("Rate limit exceeded")
