"""
Defines project-specific exception classes.
"""
from typing import Any, Optional


class GatewayBaseError(Exception):
    """Base class for all custom exceptions in the Chatwoot MCP gateway."""
    pass


class ConfigurationError(GatewayBaseError):
    """Raised when loading or validating the configuration fails."""
    pass


class AccountRequiredError(GatewayBaseError):
    """Raised when an account-scoped call has no account id to target."""

    def __init__(self,
                 message: str = ("account_id is required when "
                                 "CHATWOOT_ACCOUNT_ID is not set")):
        super().__init__(message)


class BackendApiError(GatewayBaseError):
    """
    Raised when a backend REST call fails, either with an HTTP error
    response or at the transport level (connection, timeout, DNS).
    """

    label = "Backend API"

    def __init__(self,
                 status_code: int,
                 message: str,
                 details: Optional[Any] = None):
        self.status_code = status_code
        self.message = message
        self.details = details
        super().__init__(message)

    def describe(self) -> str:
        """Render the error the way tool results report it."""
        return f"{self.label} Error ({self.status_code}): {self.message}"


class ChatwootApiError(BackendApiError):
    """Failure on the account-scoped application API."""

    label = "Chatwoot API"


class PlatformApiError(BackendApiError):
    """Failure on the platform (super-admin) API."""

    label = "Platform API"


class PublicApiError(BackendApiError):
    """Failure on the public inbox (widget) API."""

    label = "Public API"


class CapabilityConflictError(GatewayBaseError):
    """
    Raised when two buckets register the same tool name.
    """

    def __init__(self, cap_name: str, bucket1_name: str, bucket2_name: str):

        message = (
            f"Tool name conflict: '{cap_name}' is provided by both "
            f"'{bucket1_name}' and '{bucket2_name}'. Tool names must be "
            "unique across all buckets.")
        super().__init__(message)


class SessionError(GatewayBaseError):
    """Raised on invalid session registry configuration or use."""
    pass


class ToolArgumentError(GatewayBaseError):
    """Raised when a tool call lacks an argument its REST mapping needs."""

    def __init__(self, arg_name: str, tool_name: Optional[str] = None):
        self.arg_name = arg_name
        self.tool_name = tool_name
        message = f"Missing required argument: {arg_name}"
        if tool_name:
            message += f" (tool: {tool_name})"
        super().__init__(message)
