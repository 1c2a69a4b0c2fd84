"""HTTP tests for table management and QR codes."""

import io
import uuid
import zipfile
from urllib.parse import parse_qs, urlparse

import pytest
from fastapi.testclient import TestClient

from smart_restaurant.models import OrderStatus, Table

API = "/api/v1"
TABLES = f"{API}/admin/tables"


@pytest.fixture
def created_table(client: TestClient, auth_headers):
    res = client.post(TABLES, headers=auth_headers, json={
        "tableNumber": "A1", "capacity": 4, "location": "Patio",
    })
    assert res.status_code == 201
    return res.json()


class TestTableCrud:

    def test_create_issues_token(self, client: TestClient, created_table):
        assert created_table["tableNumber"] == "A1"
        assert created_table["status"] == "available"
        assert created_table["qrToken"]
        assert created_table["qrTokenCreatedAt"]

        url = urlparse(created_table["qrUrl"])
        assert url.path == "/menu"
        query = parse_qs(url.query)
        assert query["table"] == [created_table["id"]]
        assert query["token"] == [created_table["qrToken"]]

    def test_created_token_opens_guest_menu(self, client: TestClient, created_table):
        res = client.get(f"{API}/menu", params={"token": created_table["qrToken"]})
        assert res.status_code == 200

    def test_duplicate_table_number(self, client: TestClient, auth_headers, created_table):
        res = client.post(TABLES, headers=auth_headers, json={"tableNumber": "A1"})
        assert res.status_code == 409
        assert res.json()["detail"] == "Table number already exists"

    @pytest.mark.parametrize("payload", [
        {"tableNumber": "B1", "capacity": 0},
        {"tableNumber": "B1", "capacity": 21},
        {"tableNumber": ""},
        {"capacity": 4},
    ])
    def test_invalid_table(self, client: TestClient, auth_headers, payload):
        res = client.post(TABLES, headers=auth_headers, json=payload)
        assert res.status_code == 400
        assert res.json()["error"] == "validation_error"

    def test_list_hides_tokens(self, client: TestClient, auth_headers, created_table):
        client.post(TABLES, headers=auth_headers, json={"tableNumber": "B2", "capacity": 8, "location": "Bar"})
        res = client.get(TABLES, headers=auth_headers)
        assert res.status_code == 200
        assert res.headers["Cache-Control"] == "no-store"
        body = res.json()
        assert body["total"] == 2
        assert all("qrToken" not in t for t in body["items"])

        res = client.get(TABLES, headers=auth_headers, params={"sortBy": "capacity", "sortOrder": "desc"})
        assert [t["tableNumber"] for t in res.json()["items"]] == ["B2", "A1"]

        res = client.get(TABLES, headers=auth_headers, params={"location": "Bar"})
        assert [t["tableNumber"] for t in res.json()["items"]] == ["B2"]

    def test_locations(self, client: TestClient, auth_headers, created_table):
        client.post(TABLES, headers=auth_headers, json={"tableNumber": "B2", "location": "Bar"})
        client.post(TABLES, headers=auth_headers, json={"tableNumber": "B3", "location": "Bar"})
        res = client.get(f"{TABLES}/locations", headers=auth_headers)
        assert res.json() == {"locations": ["Bar", "Patio"]}

    def test_get_and_update(self, client: TestClient, auth_headers, created_table):
        res = client.get(f"{TABLES}/{created_table['id']}", headers=auth_headers)
        assert res.status_code == 200
        assert res.json()["hasActiveOrders"] is False
        assert res.json()["qrToken"] == created_table["qrToken"]

        res = client.put(f"{TABLES}/{created_table['id']}", headers=auth_headers,
                         json={"capacity": 6, "location": None})
        assert res.status_code == 200
        assert res.json()["capacity"] == 6
        assert res.json()["location"] is None

    def test_other_restaurant_table_is_not_found(self, client: TestClient, auth_headers, catalog, other_restaurant):
        table = catalog.table(other_restaurant, number="X1")
        res = client.get(f"{TABLES}/{table.id}", headers=auth_headers)
        assert res.status_code == 404
        res = client.post(f"{TABLES}/{table.id}/qr/generate", headers=auth_headers)
        assert res.status_code == 404

    def test_unknown_table(self, client: TestClient, auth_headers):
        res = client.get(f"{TABLES}/{uuid.uuid4()}", headers=auth_headers)
        assert res.status_code == 404


class TestTableStatus:

    def test_deactivate_refused_with_open_orders(self, client: TestClient, auth_headers, db_session,
                                                 catalog, restaurant, created_table):
        table = db_session.get(Table, uuid.UUID(created_table["id"]))
        catalog.order(restaurant, [], table=table, status=OrderStatus.ACTIVE)

        res = client.patch(f"{TABLES}/{created_table['id']}/status", headers=auth_headers,
                           json={"status": "inactive"})
        assert res.status_code == 400
        assert res.json()["activeOrderCount"] == 1

        res = client.get(f"{TABLES}/{created_table['id']}", headers=auth_headers)
        assert res.json()["hasActiveOrders"] is True

    def test_deactivate_free_table(self, client: TestClient, auth_headers, created_table):
        res = client.patch(f"{TABLES}/{created_table['id']}/status", headers=auth_headers,
                           json={"status": "inactive"})
        assert res.status_code == 200
        assert res.json()["status"] == "inactive"

    def test_unknown_status(self, client: TestClient, auth_headers, created_table):
        res = client.patch(f"{TABLES}/{created_table['id']}/status", headers=auth_headers,
                           json={"status": "broken"})
        assert res.status_code == 400


class TestQrCodes:

    def test_regenerate_keeps_old_token_working(self, client: TestClient, auth_headers, created_table):
        res = client.post(f"{TABLES}/{created_table['id']}/qr/generate", headers=auth_headers)
        assert res.status_code == 200
        payload = res.json()
        assert payload["tableId"] == created_table["id"]
        assert payload["tableNumber"] == "A1"
        assert payload["token"] in payload["qrUrl"]

        for token in (created_table["qrToken"], payload["token"]):
            assert client.get(f"{API}/menu", params={"token": token}).status_code == 200

        res = client.get(f"{TABLES}/{created_table['id']}", headers=auth_headers)
        assert res.json()["qrToken"] == payload["token"]

    def test_regenerate_all(self, client: TestClient, auth_headers, created_table):
        client.post(TABLES, headers=auth_headers, json={"tableNumber": "B2"})
        res = client.post(f"{TABLES}/qr/regenerate-all", headers=auth_headers)
        assert res.status_code == 200
        body = res.json()
        assert body["count"] == 2
        assert [t["tableNumber"] for t in body["tables"]] == ["A1", "B2"]

    def test_download_png(self, client: TestClient, auth_headers, created_table):
        res = client.get(f"{TABLES}/{created_table['id']}/qr/download", headers=auth_headers)
        assert res.status_code == 200
        assert res.headers["content-type"] == "image/png"
        assert res.content.startswith(b"\x89PNG")
        assert 'filename="table-A1-qr.png"' in res.headers["content-disposition"]

    def test_download_svg(self, client: TestClient, auth_headers, created_table):
        res = client.get(f"{TABLES}/{created_table['id']}/qr/download", headers=auth_headers,
                         params={"format": "svg"})
        assert res.status_code == 200
        assert res.headers["content-type"].startswith("image/svg+xml")
        assert b"<svg" in res.content

    def test_download_without_token(self, client: TestClient, auth_headers, catalog, restaurant):
        table = catalog.table(restaurant, number="Z9")
        res = client.get(f"{TABLES}/{table.id}/qr/download", headers=auth_headers)
        assert res.status_code == 400

    def test_download_all(self, client: TestClient, auth_headers, created_table):
        client.post(TABLES, headers=auth_headers, json={"tableNumber": "B 2"})
        res = client.get(f"{TABLES}/qr/download-all", headers=auth_headers)
        assert res.status_code == 200
        assert res.headers["content-type"] == "application/zip"
        with zipfile.ZipFile(io.BytesIO(res.content)) as archive:
            assert sorted(archive.namelist()) == ["table-A1-qr.png", "table-B_2-qr.png"]

    def test_download_all_without_tables(self, client: TestClient, auth_headers):
        res = client.get(f"{TABLES}/qr/download-all", headers=auth_headers)
        assert res.status_code == 404
