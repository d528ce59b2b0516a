"""
Exception classes for cluster queries.

This module defines the failures a collection cycle can run into:
- TransportError: HTTP/network failure after the retry budget is spent
- DecodeError: Response body is not JSON or has an unexpected shape
- MissingFieldError: An expected key is absent from a JSON object

All three are caught at the refresh loop boundary. They never reach the
HTTP serving surface.
"""


class ExporterError(Exception):
    """Base class for errors raised while querying the cluster."""


class TransportError(ExporterError):
    """
    Raised when a request still fails after all retry attempts.

    Attributes:
        url: The URL that was requested
        attempts: How many attempts were made
        reason: Description of the last failure
    """

    def __init__(self, url: str, attempts: int, reason: str) -> None:
        self.url = url
        self.attempts = attempts
        self.reason = reason
        super().__init__(
            f"Request to {url} failed after {attempts} attempt(s): {reason}"
        )


class DecodeError(ExporterError):
    """
    Raised when a response body cannot be decoded into the expected shape.

    Not retried: a malformed body is not expected to fix itself within
    one cycle.

    Attributes:
        url: The URL whose response failed to decode
        reason: Description of the decoding failure
    """

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Could not decode response from {url}: {reason}")


class MissingFieldError(ExporterError):
    """
    Raised when a JSON object lacks an expected key.

    Attributes:
        field: The missing key
        url: The URL whose response lacked the key
    """

    def __init__(self, field: str, url: str) -> None:
        self.field = field
        self.url = url
        super().__init__(f"Response from {url} has no '{field}' field")
