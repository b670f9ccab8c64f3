from app.dependencies import get_pricing_config
from app.settings import settings


def test_healthz(client):
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_healthz_head(client):
    response = client.head("/healthz")
    assert response.status_code == 200


def test_readyz_reports_pricing_config(client):
    response = client.get("/readyz")
    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True
    check = body["checks"][0]
    assert check["name"] == "pricing_config"
    assert check["ok"] is True
    assert check["detail"]["pricing_config_id"] == "arqexpress"
    assert check["detail"]["config_hash"].startswith("sha256:")


def test_readyz_fails_when_pricing_config_missing(client):
    settings.pricing_config_path = "pricing/missing.json"
    get_pricing_config.cache_clear()

    response = client.get("/readyz")
    assert response.status_code == 503
    body = response.json()
    assert body["ok"] is False
    assert body["checks"][0]["detail"]["error"] == "FileNotFoundError"
