import pytest
from fastapi import status


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/api/health")
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_readiness_checks_store(client):
    response = await client.get("/api/health/ready")
    assert response.json() == {"status": "ok", "checks": {"store": "ok"}}
