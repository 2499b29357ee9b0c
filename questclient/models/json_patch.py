# questclient/models/json_patch.py
"""
Pydantic Models for JSON Patch Documents

RFC 6902 operations as sent to the Azure DevOps work item endpoints.

Version: 1.0.0
"""
import json
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from questclient.utils.constants import JSON_INDENT


class PatchOperationType(str, Enum):
    """JSON Patch operation names, in the casing the wire format expects."""

    ADD = "add"
    REMOVE = "remove"
    REPLACE = "replace"
    TEST = "test"
    MOVE = "move"
    COPY = "copy"


# Operations whose "value" member is always written, even when null
_VALUE_OPERATIONS = {
    PatchOperationType.ADD,
    PatchOperationType.REPLACE,
    PatchOperationType.TEST,
}

# Operations that read from a second location
_FROM_OPERATIONS = {PatchOperationType.MOVE, PatchOperationType.COPY}


class PatchOperation(BaseModel):
    """
    A single JSON Patch operation.

    Example:
        PatchOperation(op="add", path="/fields/System.Title", value="Fix login")
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    op: PatchOperationType = Field(..., description="Operation name")
    path: str = Field(..., description="JSON Pointer to the target location")
    value: Optional[Any] = Field(None, description="Operation value")
    from_: Optional[str] = Field(
        None, alias="from", description="Source pointer for move/copy"
    )

    @field_validator("path", "from_")
    @classmethod
    def validate_pointer(cls, v: Optional[str]) -> Optional[str]:
        """Require JSON Pointer syntax (empty or leading slash)."""
        if v is None:
            return v
        if v and not v.startswith("/"):
            raise ValueError(f"Invalid JSON Pointer '{v}': must start with '/'")
        return v

    @model_validator(mode="after")
    def validate_from_member(self) -> "PatchOperation":
        """move and copy need a source location."""
        if self.op in _FROM_OPERATIONS and self.from_ is None:
            raise ValueError(f"'{self.op.value}' operation requires a 'from' member")
        return self

    def to_json(self) -> Dict[str, Any]:
        """Convert to the JSON object written on the wire."""
        data: Dict[str, Any] = {"op": self.op.value, "path": self.path}
        if self.from_ is not None:
            data["from"] = self.from_
        if self.value is not None or self.op in _VALUE_OPERATIONS:
            data["value"] = self.value
        return data


PatchOperationLike = Union[PatchOperation, Mapping[str, Any]]


def coerce_operations(operations: Iterable[PatchOperationLike]) -> List[PatchOperation]:
    """
    Validate a sequence of operations.

    Accepts PatchOperation instances or plain mappings such as
    {"op": "add", "path": "/fields/System.Title", "value": "x"}.

    Raises:
        pydantic.ValidationError: If a mapping is not a valid operation
        TypeError: If an item is neither an operation nor a mapping
    """
    result = []
    for item in operations:
        if isinstance(item, PatchOperation):
            result.append(item)
        elif isinstance(item, Mapping):
            result.append(PatchOperation.model_validate(dict(item)))
        else:
            raise TypeError(
                f"Patch operations must be PatchOperation or mapping, "
                f"got {type(item).__name__}"
            )
    return result


def serialize_patch_document(operations: Iterable[PatchOperationLike]) -> str:
    """Serialize operations to an indented JSON array."""
    return json.dumps(
        [operation.to_json() for operation in coerce_operations(operations)],
        indent=JSON_INDENT,
    )


def parse_patch_document(document: str) -> List[PatchOperation]:
    """
    Parse a JSON Patch document.

    Args:
        document: JSON text holding an array of operation objects

    Returns:
        List of validated operations

    Raises:
        ValueError: If the text is not JSON or not an array
        pydantic.ValidationError: If an element is not a valid operation
    """
    data = json.loads(document)
    if not isinstance(data, list):
        raise ValueError(
            f"JSON Patch document must be an array, got {type(data).__name__}"
        )
    return coerce_operations(data)
