# tests/integration/conftest.py
"""
Integration test fixtures and configuration.

The real client is used with aiohttp traffic intercepted by aioresponses.
"""
import pytest
from aioresponses import aioresponses

from questclient.services.work_items import WorkItemClient


WORK_ITEMS_URL = "https://dev.azure.com/test-org/test-project/_apis/wit/workitems"
QUERY = "api-version=6.0&expand=Fields"


@pytest.fixture
def mock_aiohttp():
    """Mock aiohttp responses for Azure DevOps API calls."""
    with aioresponses() as m:
        yield m


@pytest.fixture
def work_item_url():
    """Build the expected URL for a work item ID or "$Type" segment."""
    def build(resource) -> str:
        return f"{WORK_ITEMS_URL}/{resource}?{QUERY}"
    return build


@pytest.fixture
async def work_item_client():
    """Client in permissive mode (no status checking)."""
    client = WorkItemClient("test-pat-token", "test-org", "test-project")
    yield client
    await client.close()


@pytest.fixture
async def strict_work_item_client():
    """Client that raises on HTTP error statuses."""
    client = WorkItemClient(
        "test-pat-token", "test-org", "test-project", check_status=True
    )
    yield client
    await client.close()


@pytest.fixture
def recorded_requests(mock_aiohttp):
    """Return (url, kwargs) for every intercepted request with a given method."""
    def collect(method: str) -> list:
        return [
            (url, call.kwargs)
            for (request_method, url), calls in mock_aiohttp.requests.items()
            if request_method == method
            for call in calls
        ]
    return collect
