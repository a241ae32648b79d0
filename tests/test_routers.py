"""HTTP surface tests: full app with startup/shutdown against the test SQLite database."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import time
import pytest
from fastapi.testclient import TestClient
from app.main import app

API = "/api/v1"


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


def create_device(client, name="Main Gate", device_type="access_controller", ip="10.0.0.1"):
    resp = client.post(f"{API}/devices",
                       json={"name": name, "device_type": device_type, "ip_address": ip})
    assert resp.status_code == 201, resp.text
    return resp.json()


def wait_for_transactions(client, device_id, minimum=1, timeout=3.0):
    deadline = time.time() + timeout
    while time.time() < deadline:
        body = client.get(f"{API}/devices/{device_id}/transactions").json()
        if body["pagination"]["total"] >= minimum:
            return body
        time.sleep(0.02)
    raise AssertionError(f"no transactions for {device_id} within {timeout}s")


class TestDeviceEndpoints:
    def test_create_and_get(self, client):
        device = create_device(client)
        assert device["status"] == "inactive"

        resp = client.get(f"{API}/devices/{device['id']}")
        assert resp.status_code == 200
        assert resp.json()["name"] == "Main Gate"
        assert device["id"] in [d["id"] for d in client.get(f"{API}/devices").json()]

    def test_invalid_type_is_400(self, client):
        resp = client.post(f"{API}/devices",
                           json={"name": "X", "device_type": "turnstile", "ip_address": "10.0.0.9"})
        assert resp.status_code == 400
        assert resp.json()["detail"]["error"] == "validation_error"

    def test_blank_name_is_400(self, client):
        resp = client.post(f"{API}/devices",
                           json={"name": "  ", "device_type": "anpr", "ip_address": "10.0.0.9"})
        assert resp.status_code == 400

    def test_unknown_device_is_404(self, client):
        assert client.get(f"{API}/devices/does-not-exist").status_code == 404
        assert client.post(f"{API}/devices/does-not-exist/activate").status_code == 404
        assert client.delete(f"{API}/devices/does-not-exist").status_code == 404

    def test_activate_generates_and_deactivate_stops(self, client):
        device = create_device(client, name="Lobby", device_type="face_reader")

        resp = client.post(f"{API}/devices/{device['id']}/activate")
        assert resp.status_code == 200
        assert resp.json()["device"]["status"] == "active"
        assert client.get(f"{API}/health").json()["active_devices"] >= 1

        again = client.post(f"{API}/devices/{device['id']}/activate")
        assert again.status_code == 400
        assert again.json()["detail"]["error"] == "invalid_state"

        body = wait_for_transactions(client, device["id"])
        assert body["device_id"] == device["id"]
        assert body["transactions"][0]["device_id"] == device["id"]

        resp = client.post(f"{API}/devices/{device['id']}/deactivate")
        assert resp.status_code == 200
        assert resp.json()["device"]["status"] == "inactive"
        assert client.post(f"{API}/devices/{device['id']}/deactivate").status_code == 400

    def test_delete_removes_transactions(self, client):
        device = create_device(client, name="Parking", device_type="anpr")
        client.post(f"{API}/devices/{device['id']}/activate")
        wait_for_transactions(client, device["id"], minimum=2)

        resp = client.delete(f"{API}/devices/{device['id']}")
        assert resp.status_code == 200
        assert resp.json() == {"message": "Device deleted successfully"}

        time.sleep(0.05)
        body = client.get(f"{API}/transactions", params={"device_id": device["id"]}).json()
        assert body["pagination"]["total"] == 0
        assert client.get(f"{API}/devices/{device['id']}").status_code == 404


class TestTransactionEndpoints:
    def test_listing_embeds_device_and_paginates(self, client):
        device = create_device(client, name="Embed", device_type="anpr")
        client.post(f"{API}/devices/{device['id']}/activate")
        wait_for_transactions(client, device["id"], minimum=3)
        client.post(f"{API}/devices/{device['id']}/deactivate")

        body = client.get(f"{API}/transactions",
                          params={"device_id": device["id"], "limit": 2}).json()
        assert len(body["transactions"]) == 2
        assert body["pagination"]["limit"] == 2
        assert body["transactions"][0]["device"]["name"] == "Embed"

        capped = client.get(f"{API}/transactions", params={"limit": 5000}).json()
        assert capped["pagination"]["limit"] == 1000


class TestHealth:
    def test_health_ok(self, client):
        body = client.get(f"{API}/health").json()
        assert body["status"] == "ok"
        assert body["database"] == "ok"
        assert isinstance(body["active_devices"], int)
