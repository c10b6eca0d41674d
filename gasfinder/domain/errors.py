from __future__ import annotations

from typing import Any, Optional


class GasFinderError(Exception):
    """Base class for all client errors."""


class ConfigError(GasFinderError):
    """Raised when config.yaml is present but invalid."""


class ConfigApiError(GasFinderError):
    """
    Non-success response from the configuration API.

    Parameters
    ----------
    status
        HTTP status code.
    body
        Decoded JSON body if available, else the raw text.
    """

    def __init__(self, status: int, body: Any = None, url: Optional[str] = None) -> None:
        self.status = status
        self.body = body
        self.url = url
        super().__init__(f"Configuration API returned {status}" + (f" for {url}" if url else ""))


class ThresholdValidationError(GasFinderError):
    """Raised when a user-entered threshold is not a valid number."""
