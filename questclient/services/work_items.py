# questclient/services/work_items.py
"""
Azure DevOps Work Item REST Client

Creates, reads and updates work items through the work item tracking
REST API (v6.0) using JSON Patch documents.

Authentication:
- Personal access token sent as HTTP Basic credentials (empty user name)

Status handling:
- By default the response body is parsed as JSON whatever the status code,
  so Azure DevOps error payloads are returned to the caller as-is
- With check_status=True, error statuses raise WorkItemHTTPError

Version: 1.0.0
"""
import aiohttp
import asyncio
import base64
import json
from typing import Any, Dict, Iterable, Optional
from urllib.parse import quote

from questclient.models.client_config import ClientConfig
from questclient.models.json_patch import PatchOperationLike, serialize_patch_document
from questclient.utils.config import Settings, get_settings
from questclient.utils.constants import (
    AZURE_DEVOPS_API_VERSION,
    AZURE_DEVOPS_BASE_URL,
    DEFAULT_WORK_ITEM_TYPE,
    ERROR_BODY_MAX_LENGTH,
    HTTP_ERROR_STATUS_THRESHOLD,
    MEDIA_TYPE_JSON,
    MEDIA_TYPE_JSON_PATCH,
    WORK_ITEM_EXPAND,
)
from questclient.utils.logging import get_logger

logger = get_logger(__name__)


class WorkItemError(Exception):
    """Base class for work item client errors."""
    pass


class WorkItemResponseError(WorkItemError, ValueError):
    """Response body could not be parsed as JSON."""
    def __init__(self, message: str, status: int, body: str):
        super().__init__(message)
        self.status = status
        self.body = body


class WorkItemHTTPError(WorkItemError):
    """Azure DevOps answered with an error status (only raised with check_status)."""
    def __init__(self, status: int, method: str, url: str, body: str):
        super().__init__(f"{method} {url} failed with HTTP {status}")
        self.status = status
        self.method = method
        self.url = url
        self.body = body


def build_basic_auth_header(token: str) -> str:
    """
    Build the Authorization header value for a personal access token.

    Azure DevOps expects Basic credentials with an empty user name,
    i.e. base64(":" + token).
    """
    credentials = base64.b64encode(f":{token}".encode("utf-8")).decode("ascii")
    return f"Basic {credentials}"


class WorkItemClient:
    """
    Client for the Azure DevOps work item tracking REST API.

    Tokens are scoped to an organization and project, so both are fixed at
    construction time. Use a second client with its own token to work
    against another organization.

    The underlying aiohttp session is shared by all requests and is safe
    for concurrent use. Release it with close() or by using the client as
    an async context manager:

        async with WorkItemClient(token, "my-org", "my-project") as client:
            item = await client.get_work_item(42)
    """

    def __init__(
        self,
        token: str,
        organization: str,
        project: str,
        *,
        check_status: bool = False,
        timeout: Optional[float] = None,
    ) -> None:
        """
        Initialize the client. No network I/O happens here.

        Args:
            token: Personal access token
            organization: Azure DevOps organization name
            project: Azure DevOps project name
            check_status: Raise WorkItemHTTPError on 4xx/5xx responses
                instead of parsing the body
            timeout: Optional total timeout per request, in seconds

        Raises:
            pydantic.ValidationError: If any argument is empty
        """
        self._config = ClientConfig(
            token=token, organization=organization, project=project
        )
        self.check_status = check_status
        self._timeout: Optional[aiohttp.ClientTimeout] = (
            aiohttp.ClientTimeout(total=timeout) if timeout is not None else None
        )
        self._headers: Dict[str, str] = {
            "Accept": MEDIA_TYPE_JSON,
            "Authorization": build_basic_auth_header(self._config.token),
        }
        self.base_url: str = (
            f"{AZURE_DEVOPS_BASE_URL}/{quote(self._config.organization, safe='')}"
            f"/{quote(self._config.project, safe='')}/_apis/wit"
        )
        self._session: Optional[aiohttp.ClientSession] = None
        self._session_lock = asyncio.Lock()
        self._closed = False

    @classmethod
    def from_config(cls, config: ClientConfig, **kwargs: Any) -> "WorkItemClient":
        """Create a client from an existing ClientConfig."""
        return cls(config.token, config.organization, config.project, **kwargs)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "WorkItemClient":
        """
        Create a client from environment settings.

        Args:
            settings: Settings to use; defaults to the cached get_settings()
        """
        settings = settings or get_settings()
        return cls.from_config(
            settings.to_client_config(),
            check_status=settings.QUEST_CHECK_STATUS,
            timeout=settings.QUEST_REQUEST_TIMEOUT,
        )

    @property
    def organization(self) -> str:
        return self._config.organization

    @property
    def project(self) -> str:
        return self._config.project

    @property
    def closed(self) -> bool:
        return self._closed

    def work_item_url(self, resource: str) -> str:
        """
        Build a work item URL.

        Args:
            resource: Path segment after workitems/ (an ID or "$<type>"),
                already percent-encoded

        Returns:
            Absolute URL including api-version and expand parameters
        """
        return (
            f"{self.base_url}/workitems/{resource}"
            f"?api-version={AZURE_DEVOPS_API_VERSION}&expand={WORK_ITEM_EXPAND}"
        )

    async def _get_session(self) -> aiohttp.ClientSession:
        """
        Lazy-initialized HTTP session carrying the default headers.

        aiohttp sessions must be created inside a running event loop, so
        creation is deferred to the first request (or context entry).
        """
        async with self._session_lock:
            if self._closed:
                raise RuntimeError("WorkItemClient is closed")

            if self._session is None or self._session.closed:
                kwargs: Dict[str, Any] = {"headers": self._headers}
                if self._timeout is not None:
                    kwargs["timeout"] = self._timeout
                self._session = aiohttp.ClientSession(**kwargs)

                logger.debug(
                    "work_item_session_created",
                    organization=self.organization,
                    project=self.project,
                )

            return self._session

    async def _send(self, method: str, url: str, body: Optional[str] = None) -> Any:
        """
        Issue a request and decode the JSON response body.

        Raises:
            WorkItemHTTPError: If check_status is set and the status is >= 400
            WorkItemResponseError: If the body is not valid JSON (including
                bodies that are not valid text)
            aiohttp.ClientError: On transport failures
            asyncio.TimeoutError: If the configured timeout elapses
        """
        session = await self._get_session()

        request_kwargs: Dict[str, Any] = {}
        if body is not None:
            request_kwargs["data"] = body.encode("utf-8")
            request_kwargs["headers"] = {"Content-Type": MEDIA_TYPE_JSON_PATCH}

        try:
            async with session.request(method, url, **request_kwargs) as response:
                status = response.status
                raw_body = await response.read()

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(
                "work_item_request_failed",
                method=method,
                url=url,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

        text = raw_body.decode("utf-8", errors="replace")

        if status >= HTTP_ERROR_STATUS_THRESHOLD:
            if self.check_status:
                logger.error(
                    "work_item_http_error", method=method, url=url, status=status
                )
                raise WorkItemHTTPError(
                    status, method, url, text[:ERROR_BODY_MAX_LENGTH]
                )
            logger.warning(
                "work_item_error_status_unchecked",
                method=method,
                url=url,
                status=status,
            )

        try:
            return json.loads(raw_body)
        except ValueError as e:
            logger.error(
                "work_item_response_not_json",
                method=method,
                url=url,
                status=status,
                body_length=len(raw_body),
            )
            raise WorkItemResponseError(
                f"{method} {url} returned a non-JSON body (HTTP {status}): {e}",
                status=status,
                body=text[:ERROR_BODY_MAX_LENGTH],
            ) from e

    async def create_work_item(
        self,
        operations: Iterable[PatchOperationLike],
        work_item_type: str = DEFAULT_WORK_ITEM_TYPE,
    ) -> Any:
        """
        Create a work item from a JSON Patch document.

        Args:
            operations: Patch operations describing the new item
            work_item_type: Work item type name (e.g., "User Story", "Bug")

        Returns:
            The JSON document representing the new item
        """
        body = serialize_patch_document(operations)
        url = self.work_item_url(f"${quote(work_item_type, safe='')}")

        logger.info(
            "work_item_create",
            project=self.project,
            work_item_type=work_item_type,
        )

        result = await self._send("POST", url, body)

        logger.info(
            "work_item_created",
            work_item_id=result.get("id") if isinstance(result, dict) else None,
        )

        return result

    async def get_work_item(self, work_item_id: int) -> Any:
        """
        Retrieve a work item by ID.

        Args:
            work_item_id: The work item ID

        Returns:
            The JSON document for the item
        """
        url = self.work_item_url(str(_validate_work_item_id(work_item_id)))

        logger.info("work_item_fetch", project=self.project, work_item_id=work_item_id)

        return await self._send("GET", url)

    async def patch_work_item(
        self, work_item_id: int, operations: Iterable[PatchOperationLike]
    ) -> Any:
        """
        Update a work item.

        Args:
            work_item_id: The work item ID
            operations: Patch operations enumerating the updates

        Returns:
            The JSON document for the updated item
        """
        url = self.work_item_url(str(_validate_work_item_id(work_item_id)))
        body = serialize_patch_document(operations)

        logger.info("work_item_patch", project=self.project, work_item_id=work_item_id)

        return await self._send("PATCH", url, body)

    async def close(self) -> None:
        """Close the HTTP session. Safe to call more than once."""
        async with self._session_lock:
            self._closed = True
            if self._session is not None:
                try:
                    if not self._session.closed:
                        await self._session.close()
                        logger.debug("work_item_session_closed")
                finally:
                    self._session = None

    async def __aenter__(self) -> "WorkItemClient":
        """Async context manager entry."""
        await self._get_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        """Async context manager exit."""
        await self.close()
        return False  # Don't suppress exceptions


def _validate_work_item_id(work_item_id: int) -> int:
    if isinstance(work_item_id, bool) or not isinstance(work_item_id, int):
        raise TypeError(
            f"work_item_id must be an int, got {type(work_item_id).__name__}"
        )
    if work_item_id <= 0:
        raise ValueError(f"work_item_id must be positive, got {work_item_id}")
    return work_item_id
