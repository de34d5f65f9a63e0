from superops_mcp.core_infrastructure.config import ClientConfig
from superops_mcp.core_infrastructure.errors import (
    APIError,
    ConfigurationError,
    ErrorClassification,
    InvalidResponseError,
    ReadOnlyViolation,
    RequestContext,
    RequestTimeoutError,
    SuperOpsError,
    TransportError,
    classify,
    format_message,
)
from superops_mcp.core_infrastructure.graphql_client import SuperOpsClient, is_mutation
from superops_mcp.core_infrastructure.retry import RetryPolicy, is_retryable_error

__all__ = [
    "APIError",
    "ClientConfig",
    "ConfigurationError",
    "ErrorClassification",
    "InvalidResponseError",
    "ReadOnlyViolation",
    "RequestContext",
    "RequestTimeoutError",
    "RetryPolicy",
    "SuperOpsClient",
    "SuperOpsError",
    "TransportError",
    "classify",
    "format_message",
    "is_mutation",
    "is_retryable_error",
]
