"""
Error taxonomy shared by the data-platform client, the filter builder
and the conversation orchestrator.
"""
import re
from typing import Optional


class DataPlatformError(Exception):
    """Base class for every failure raised by the core."""


class UnauthenticatedError(DataPlatformError):
    """No session (or a rejected one) for a session-backed deployment."""

    def __init__(self, message: str = "Data platform session not found"):
        super().__init__(message)
        self.message = message


class UpstreamError(DataPlatformError):
    """Non-success response (or no response at all) from the data platform."""

    def __init__(self, status_code: Optional[int], message: str):
        super().__init__(f"{status_code} {message}" if status_code else message)
        self.status_code = status_code
        self.message = message


class SessionRejectedError(UnauthenticatedError, UpstreamError):
    """401 from the data platform: the key or session token was refused."""

    def __init__(self, message: str = "Data platform session not found"):
        UpstreamError.__init__(self, 401, message)


# Matches the quoted name in e.g. "Access Forbidden to 'Application.Cities'"
_QUOTED_RESOURCE = re.compile(r"['\"`]([^'\"`]+)['\"`]")


def extract_denied_resource(text: str) -> Optional[str]:
    """Best-effort pull of the resource name out of a 403 error message."""
    m = _QUOTED_RESOURCE.search(text or "")
    return m.group(1).strip() if m else None


class AccessForbiddenError(UpstreamError):
    """403 from the data platform. `code` is the discriminator the HTTP layer keys on."""

    code = "access_forbidden"

    def __init__(self, message: str, resource: Optional[str] = None):
        super().__init__(403, message)
        self.resource = resource if resource is not None else extract_denied_resource(message)

    @classmethod
    def looks_forbidden(cls, exc: BaseException) -> bool:
        text = str(exc)
        return isinstance(exc, cls) or ("403" in text and "access forbidden" in text.lower())


class UnknownTableError(DataPlatformError):
    def __init__(self, service: str, table: str, available: list[str]):
        super().__init__(
            f'Table "{table}" does not exist in service "{service}". '
            f"Available tables: {', '.join(available)}"
        )
        self.service = service
        self.table = table
        self.available = available


class UnknownFieldError(DataPlatformError):
    def __init__(self, table: str, missing: list[str], available: list[str]):
        quoted = " and/or ".join(f'"{f}"' for f in missing)
        super().__init__(
            f'Fields {quoted} do not exist in table "{table}". '
            f"Available fields: {', '.join(available)}"
        )
        self.table = table
        self.missing = missing
        self.available = available


class NoSearchableFieldsError(DataPlatformError):
    def __init__(self, table: str):
        super().__init__(f"No searchable string fields found in table {table}")
        self.table = table


class UnknownToolError(DataPlatformError):
    def __init__(self, name: str, available: list[str]):
        super().__init__(f"Unknown function: {name}. Declared tools: {', '.join(available)}")
        self.name = name
        self.available = available


class ToolArgumentsError(DataPlatformError, ValueError):
    """Tool arguments from the model that are not a JSON object."""
