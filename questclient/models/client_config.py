# questclient/models/client_config.py
"""
Client Configuration Model

Connection coordinates for a single Azure DevOps organization/project.

Version: 1.0.0
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator


class ClientConfig(BaseModel):
    """
    Credentials and scope for a work item client.

    Azure DevOps tokens are scoped to an organization and project, so a
    client talking to a different org needs its own config and token.
    Immutable once created.
    """

    model_config = ConfigDict(frozen=True)

    token: str = Field(
        ..., min_length=1, repr=False, description="Personal access token"
    )
    organization: str = Field(
        ..., min_length=1, max_length=255, description="Azure DevOps organization"
    )
    project: str = Field(
        ..., min_length=1, max_length=255, description="Azure DevOps project"
    )

    @field_validator("token", "organization", "project")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Reject whitespace-only values and null bytes; values are kept as given."""
        if not v.strip():
            raise ValueError("Field cannot be empty or whitespace")
        if "\x00" in v:
            raise ValueError("Field contains null bytes")
        return v
