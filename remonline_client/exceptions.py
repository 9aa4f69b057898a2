"""
Custom exception types for the RemOnline API client.

These exceptions allow callers to distinguish between a rejected
API key, a refused create call and a broken credentials file.
Transport errors raised by
``requests`` and JSON decoding errors are not wrapped.
"""

from typing import Any, Optional


class RemOnlineError(Exception):
    """Base exception for all RemOnline client errors."""


class RemOnlineAuthError(RemOnlineError):
    """Raised when the token endpoint refuses to issue a new token.

    The raw response body is kept in ``response_text`` and, when it
    could be decoded, the parsed payload in ``payload``.
    """

    def __init__(
        self,
        message: str,
        *,
        response_text: str = "",
        payload: Optional[Any] = None,
    ) -> None:
        super().__init__(message)
        self.response_text = response_text
        self.payload = payload


class RemOnlineAPIError(RemOnlineError):
    """Raised when an envelope lacks the data an operation returns.

    This happens when the retried request is refused as well.  The
    envelope is kept in ``envelope``.
    """

    def __init__(self, message: str, *, envelope: Optional[Any] = None) -> None:
        super().__init__(message)
        self.envelope = envelope


class RemOnlineConfigError(RemOnlineError):
    """Raised when a key file lacks ``apiKey`` or a file is not a JSON object."""
