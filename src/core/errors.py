from __future__ import annotations


class BitbucketToolError(Exception):
    """Base error for the Bitbucket tool adapters."""


class ValidationError(BitbucketToolError):
    """Raised when user input is invalid."""


class ExternalServiceError(BitbucketToolError):
    """Raised when Bitbucket fails or returns an unusable payload."""


class OperationCancelledError(BitbucketToolError):
    """Raised when an invocation's cancellation token fires."""


class ToolExecutionError(BitbucketToolError):
    """Raised by the MCP layer when a tool run ends with an error event."""
