# questclient/utils/constants.py
"""
Application Constants

Centralized constants for the Azure DevOps work item client.
All magic strings and configuration values should be defined here.

Version: 1.0.0
"""

# =============================================================================
# AZURE DEVOPS API SETTINGS
# =============================================================================

# Base host for Azure DevOps Services; org and project are appended per call
AZURE_DEVOPS_BASE_URL = "https://dev.azure.com"

# Work item tracking REST API version used by every request
AZURE_DEVOPS_API_VERSION = "6.0"

# Query string expansion requested on every work item call
WORK_ITEM_EXPAND = "Fields"

# Work item type used when creating items without an explicit type
DEFAULT_WORK_ITEM_TYPE = "User Story"

# =============================================================================
# MEDIA TYPES
# =============================================================================

MEDIA_TYPE_JSON = "application/json"

# Content type Azure DevOps requires for JSON Patch request bodies
MEDIA_TYPE_JSON_PATCH = "application/json-patch+json"

# =============================================================================
# HTTP SETTINGS
# =============================================================================

# Status codes at or above this value are treated as failures when
# status checking is enabled
HTTP_ERROR_STATUS_THRESHOLD = 400

# Maximum number of response body characters kept on raised errors
ERROR_BODY_MAX_LENGTH = 2000

# =============================================================================
# LOGGING SETTINGS
# =============================================================================

# Maximum length for log field values (prevents log bloat)
LOG_FIELD_MAX_LENGTH = 100

# Indentation used when serializing JSON Patch documents and CLI output
JSON_INDENT = 2
