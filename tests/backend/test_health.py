"""
Tests for health check endpoints.

These tests verify:
- Basic health endpoint returns 200
- Readiness check reports datastore status
- Health degrades gracefully when services are down
"""

import pytest
from unittest.mock import AsyncMock, patch


class TestHealthEndpoint:
    """Tests for GET /health endpoint."""

    @pytest.mark.asyncio
    async def test_health_endpoint_returns_200_when_api_running(self, async_client):
        """Basic health check should return 200 if API is up."""
        response = await async_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_root_lists_api_information(self, async_client):
        response = await async_client.get("/")

        assert response.status_code == 200
        assert response.json()["name"] == "SampleHub API"


class TestReadinessEndpoint:
    """Tests for GET /health/ready endpoint."""

    @pytest.mark.asyncio
    async def test_readiness_healthy_when_all_pings_succeed(self, async_client):
        with patch("samplehub.routers.health.ping_mongo", AsyncMock()), \
             patch("samplehub.routers.health.ping_redis", AsyncMock()):

            response = await async_client.get("/health/ready")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["checks"] == {"api": "healthy", "mongodb": "healthy", "redis": "healthy"}

    @pytest.mark.asyncio
    async def test_readiness_reports_mongodb_unhealthy(self, async_client):
        with patch(
            "samplehub.routers.health.ping_mongo",
            AsyncMock(side_effect=Exception("Connection refused")),
        ), patch("samplehub.routers.health.ping_redis", AsyncMock()):

            response = await async_client.get("/health/ready")

        data = response.json()
        assert response.status_code == 200
        assert data["status"] == "degraded"
        assert data["checks"]["mongodb"] == "unhealthy: Connection refused"
        assert data["checks"]["redis"] == "healthy"

    @pytest.mark.asyncio
    async def test_readiness_degraded_when_all_services_down(self, async_client):
        with patch(
            "samplehub.routers.health.ping_mongo", AsyncMock(side_effect=Exception("MongoDB down"))
        ), patch(
            "samplehub.routers.health.ping_redis", AsyncMock(side_effect=Exception("Redis down"))
        ):

            response = await async_client.get("/health/ready")

        data = response.json()
        assert data["status"] == "degraded"
        assert "unhealthy" in data["checks"]["mongodb"]
        assert "unhealthy" in data["checks"]["redis"]

    @pytest.mark.asyncio
    async def test_pings_use_shared_clients(self):
        """ping_mongo / ping_redis go through the process-wide clients."""
        from samplehub.database import connections

        mongo = AsyncMock()
        redis = AsyncMock()
        with patch.object(connections, "get_mongo_client", AsyncMock(return_value=mongo)), \
             patch.object(connections, "get_redis_client", AsyncMock(return_value=redis)):
            await connections.ping_mongo()
            await connections.ping_redis()

        mongo.admin.command.assert_awaited_once_with("ping")
        redis.ping.assert_awaited_once()
