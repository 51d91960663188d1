"""
Error types raised by nextup.

Library code raises these; the CLI turns them into user-facing messages.
"""

from typing import Optional


class NextupError(Exception):
    """Base class for all nextup errors"""


class ConfigurationError(NextupError):
    """Invalid or missing configuration (bad paths, unknown options)"""


class ToolUnavailableError(NextupError):
    """A required external tool (rg, gh, git) is not installed"""

    def __init__(self, tool: str, message: Optional[str] = None):
        self.tool = tool
        super().__init__(message or f"Required tool not found on PATH: {tool}")


class SourceFetchError(NextupError):
    """A task source could not be read"""

    def __init__(self, source: str, message: str):
        self.source = source
        super().__init__(f"{source}: {message}")


class SearchError(NextupError):
    """The code search backend failed while scanning the tree"""
