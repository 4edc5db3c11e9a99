"""Error taxonomy for the recommendation engine."""

from typing import Optional


class DraftAssistantError(Exception):
    """Base class for all engine errors."""


class ValidationError(DraftAssistantError):
    """Malformed draft state, rejected before any I/O."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class ToolExecutionError(DraftAssistantError):
    """A single tool call failed. Captured per call, never fatal to a batch."""

    def __init__(self, tool_name: str, message: str):
        self.tool_name = tool_name
        self.message = message
        super().__init__(f"{tool_name}: {message}")


class UpstreamError(DraftAssistantError):
    """
    The reasoning service call failed.

    kind is one of "timeout", "transport" or "malformed".
    """

    TIMEOUT = "timeout"
    TRANSPORT = "transport"
    MALFORMED = "malformed"

    def __init__(self, kind: str, message: str, status_code: Optional[int] = None):
        self.kind = kind
        self.message = message
        self.status_code = status_code
        super().__init__(f"Reasoning service {kind} error: {message}")

    @property
    def is_timeout(self) -> bool:
        return self.kind == self.TIMEOUT
