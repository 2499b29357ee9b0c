# tests/conftest.py
"""
Pytest configuration and fixtures for questclient tests.
"""
import pytest

from questclient.models.json_patch import PatchOperation, PatchOperationType
from questclient.utils.config import Settings


TEST_TOKEN = "test-pat-token"
TEST_ORG = "test-org"
TEST_PROJECT = "test-project"


@pytest.fixture
def test_settings():
    """Settings built explicitly, ignoring the environment and .env files."""
    return Settings(
        AZURE_DEVOPS_TOKEN=TEST_TOKEN,
        AZURE_DEVOPS_ORG=TEST_ORG,
        AZURE_DEVOPS_PROJECT=TEST_PROJECT,
        _env_file=None,
    )


@pytest.fixture
def clean_env(monkeypatch):
    """Remove client settings from the environment."""
    for name in (
        "AZURE_DEVOPS_TOKEN",
        "AZURE_DEVOPS_ORG",
        "AZURE_DEVOPS_PROJECT",
        "QUEST_CHECK_STATUS",
        "QUEST_REQUEST_TIMEOUT",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def sample_operations():
    """Patch document describing a new user story."""
    return [
        PatchOperation(
            op=PatchOperationType.ADD,
            path="/fields/System.Title",
            value="Document the release process",
        ),
        PatchOperation(
            op=PatchOperationType.ADD,
            path="/fields/System.Description",
            value="<p>Write it down before the next release.</p>",
        ),
        PatchOperation(
            op=PatchOperationType.ADD,
            path="/fields/System.Tags",
            value="docs; release",
        ),
    ]


@pytest.fixture
def sample_work_item():
    """Work item as returned by GET workitems/{id}?expand=Fields."""
    return {
        "id": 42,
        "rev": 3,
        "fields": {
            "System.AreaPath": "test-project",
            "System.TeamProject": "test-project",
            "System.WorkItemType": "User Story",
            "System.State": "New",
            "System.Title": "Document the release process",
            "System.Tags": "docs; release",
        },
        "url": "https://dev.azure.com/test-org/_apis/wit/workItems/42",
    }
