from unittest.mock import AsyncMock, patch

from storeforge.app import app

from fastapi.testclient import TestClient

client = TestClient(app)

ROUTER = "storeforge.core.features.monitoring.router"


@patch(f"{ROUTER}.check_event_bus_status", new_callable=AsyncMock)
@patch(f"{ROUTER}.check_redis_status", new_callable=AsyncMock)
@patch(f"{ROUTER}.check_db_status", new_callable=AsyncMock)
def test_health_check_ok(mock_db, mock_redis, mock_bus):
    mock_db.return_value = True
    mock_redis.return_value = True
    mock_bus.return_value = {"connected": True, "stream_prefix": "storeforge:"}

    response = client.get("/monitoring/health")
    assert response.status_code == 200
    assert response.json() == {
        "status": "ok",
        "details": {
            "database": "up",
            "redis": "up",
            "event_bus": "up",
        }
    }


@patch(f"{ROUTER}.check_event_bus_status", new_callable=AsyncMock)
@patch(f"{ROUTER}.check_redis_status", new_callable=AsyncMock)
@patch(f"{ROUTER}.check_db_status", new_callable=AsyncMock)
def test_health_check_fail(mock_db, mock_redis, mock_bus):
    mock_db.return_value = False
    mock_redis.return_value = True
    mock_bus.return_value = {"connected": True, "stream_prefix": "storeforge:"}

    response = client.get("/monitoring/health")
    assert response.status_code == 200
    assert response.json()["status"] == "error"
    assert response.json()["details"]["database"] == "down"


@patch(f"{ROUTER}.check_event_bus_status", new_callable=AsyncMock)
@patch(f"{ROUTER}.check_redis_status", new_callable=AsyncMock)
@patch(f"{ROUTER}.check_db_status", new_callable=AsyncMock)
def test_health_check_degraded_without_event_bus(mock_db, mock_redis, mock_bus):
    """A disconnected bus leaves the service up but degraded."""
    mock_db.return_value = True
    mock_redis.return_value = True
    mock_bus.return_value = {"connected": False, "stream_prefix": "storeforge:"}

    response = client.get("/monitoring/health")
    assert response.json() == {
        "status": "degraded",
        "details": {
            "database": "up",
            "redis": "up",
            "event_bus": "down",
        }
    }


def test_metrics_endpoint():
    response = client.get("/monitoring/metrics")
    assert response.status_code == 200
    assert "storeforge_provisioning_total" in response.text


def test_tenant_lookup_rejects_malformed_id():
    response = client.get("/tenants/not-a-uuid")
    assert response.status_code == 422
