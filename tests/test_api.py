import logging

import pytest
from fastapi.testclient import TestClient

from api import main
from api.main import app, encode_component

ADDRESS_ENC = "Nueva%20Tajamar%20481%2C%20Torre%20Sur%2C%20Oficina%201601.%20Las%20Condes"


def _drop_request_log_handlers():
    raw = logging.getLogger("request.raw")
    for h in list(raw.handlers):
        raw.removeHandler(h)
        h.close()


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setattr(main.config, "LOG_DIR", str(tmp_path))
    with TestClient(app) as c:
        yield c
    _drop_request_log_handlers()


def test_matcher_built_and_logged_at_startup(tmp_path, monkeypatch, caplog):
    monkeypatch.setattr(main.config, "LOG_DIR", str(tmp_path))
    caplog.set_level(logging.INFO)
    with TestClient(app):
        pass
    _drop_request_log_handlers()
    assert app.state.matcher.region_names() == ["Región Metropolitana de Santiago"]
    assert "serving 1 regions" in caplog.text


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {
        "status": "ok",
        "regionsConfigured": 1,
        "regions": ["Región Metropolitana de Santiago"],
    }


def test_post_exact(client):
    r = client.post("/nearest", json={"region": "Región Metropolitana de Santiago"})
    assert r.status_code == 200
    center = r.json()["centers"][0]
    assert center["name"] == "SAMTEK"
    assert center["imageUrl"] == "http://testserver/images/samtek.png"
    assert center["mapLink"] == f"https://www.google.com/maps/dir/?api=1&destination={ADDRESS_ENC}"
    assert center["addressLink"] == f"https://www.google.com/maps/search/?api=1&query={ADDRESS_ENC}"
    assert center["embedUrl"] == f"https://maps.google.com/maps?q={ADDRESS_ENC}&output=embed"


@pytest.mark.parametrize("region", ["santiago", "region metropolotana de santiago", "rm"])
def test_get_flexible(client, region):
    r = client.get("/nearest", params={"region": region})
    assert r.status_code == 200
    assert r.json()["centers"][0]["name"] == "SAMTEK"


def test_form_body(client):
    r = client.post("/nearest", data={"region": "Santiago"})
    assert r.status_code == 200


def test_not_found(client):
    r = client.post("/nearest", json={"region": "Valparaíso"})
    assert r.status_code == 404
    body = r.json()
    assert body["error"] == 'No service center found for region: "Valparaíso"'
    assert "hint" in body
    assert body["expectedRegions"] == ["Región Metropolitana de Santiago"]


def test_not_found_get_has_no_hint(client):
    r = client.get("/nearest", params={"region": "Antofagasta"})
    assert r.status_code == 404
    assert "hint" not in r.json()


@pytest.mark.parametrize("payload", [{"region": ""}, {"region": 13}, {}, ["rm"]])
def test_invalid_payload(client, payload):
    r = client.post("/nearest", json=payload)
    assert r.status_code == 422
    assert r.json()["error"].startswith("Invalid payload")
    assert r.json()["expectedRegions"] == ["Región Metropolitana de Santiago"]


@pytest.mark.parametrize("region", ["   ", "!!!"])
def test_blank_after_normalizing_reaches_matcher(client, region):
    r = client.post("/nearest", json={"region": region})
    assert r.status_code == 200
    assert r.json()["centers"][0]["name"] == "SAMTEK"
    assert client.get("/nearest", params={"region": region}).status_code == 200


def test_invalid_json_body(client):
    r = client.post("/nearest", content=b"{not json", headers={"content-type": "application/json"})
    assert r.status_code == 422


def test_missing_query(client):
    r = client.get("/nearest")
    assert r.status_code == 422
    assert r.json()["example"].startswith("/nearest?region=")


def test_forwarded_proto(client):
    r = client.get("/nearest", params={"region": "rm"}, headers={"x-forwarded-proto": "https"})
    assert r.json()["centers"][0]["imageUrl"] == "https://testserver/images/samtek.png"


def test_base_url_override(client, monkeypatch):
    monkeypatch.setattr(main.config, "BASE_URL", "https://centers.example.com//")
    r = client.get("/nearest", params={"region": "rm"})
    assert r.json()["centers"][0]["imageUrl"] == "https://centers.example.com/images/samtek.png"


def test_map_page(client):
    r = client.get("/map", params={"address": "Las Condes, Santiago"})
    assert r.status_code == 200
    assert 'src="https://maps.google.com/maps?q=Las%20Condes%2C%20Santiago&output=embed"' in r.text


def test_image_served(client):
    r = client.get("/images/samtek.png")
    assert r.status_code == 200
    assert r.headers["content-type"] == "image/png"


def test_body_limit(client, monkeypatch):
    monkeypatch.setattr(main.config, "BODY_LIMIT", 10)
    r = client.post("/nearest", json={"region": "Región Metropolitana de Santiago"})
    assert r.status_code == 413


def test_encode_component():
    assert encode_component("a b/c?d&é") == "a%20b%2Fc%3Fd%26%C3%A9"
    assert encode_component("it's (ok)!*~") == "it's%20(ok)!*~"


def test_body_limit_without_content_length(client, monkeypatch):
    monkeypatch.setattr(main.config, "BODY_LIMIT", 10)
    chunks = iter([b'{"region": ', b'"Region Metropolitana de Santiago"}'])
    r = client.post("/nearest", content=chunks, headers={"content-type": "application/json"})
    assert r.status_code == 413
    assert r.json() == {"error": "Payload too large"}


def test_too_large_response_has_cors_headers(client, monkeypatch):
    monkeypatch.setattr(main.config, "BODY_LIMIT", 10)
    r = client.post(
        "/nearest",
        json={"region": "Región Metropolitana de Santiago"},
        headers={"origin": "https://example.com"},
    )
    assert r.status_code == 413
    assert "access-control-allow-origin" in r.headers
