"""
Integration tests for health endpoints.
"""
import pytest
from httpx import AsyncClient


@pytest.mark.integration
@pytest.mark.asyncio
class TestHealth:

    async def test_health(self, client: AsyncClient):
        response = await client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    async def test_email_health_without_credentials(self, client: AsyncClient):
        response = await client.get("/api/v1/health/email")

        assert response.status_code == 200
        assert response.json() == {"configured": False, "message": "Email credentials not set"}
