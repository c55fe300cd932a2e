"""
Simple test cases to verify test configuration.
"""
import pytest
from httpx import AsyncClient
from sqlalchemy import text

@pytest.mark.asyncio
async def test_app_exists(client: AsyncClient):
    """Test that app exists."""
    response = await client.get("/openapi.json")
    assert response.status_code == 200

@pytest.mark.asyncio
async def test_database_session(async_uow):
    """Test that a scope's session reaches the database."""
    async with async_uow.transaction() as scope:
        result = await scope.handle().execute(text("SELECT 1"))
        assert result.scalar() == 1

def test_sync_database_session(sync_uow):
    """Test that a blocking scope's session reaches the database."""
    with sync_uow.transaction() as scope:
        assert scope.handle().execute(text("SELECT 1")).scalar() == 1
