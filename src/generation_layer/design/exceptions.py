"""
Exceptions for design-source imports.
"""

from typing import Any


class DesignSourceError(Exception):
    """
    Base exception for design-source failures (HTTP errors, missing frames).
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidFigmaUrl(DesignSourceError):
    """
    URL is not a figma.com file/design/proto link and not a bare file key.
    """

    def __init__(self, url: str):
        self.url = url
        super().__init__(f"Not a Figma file URL: {url}", details={"url": url})
