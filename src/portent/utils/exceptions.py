from __future__ import annotations


class PortentException(Exception):
    """Base exception for the portent bot."""

    pass


class ConfigurationError(PortentException):
    """Raised when startup configuration is missing or invalid."""

    pass


class TransportError(PortentException):
    """Raised when an HTTP exchange fails at the network level."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Request to {url} failed: {reason}")


class ResponseParseError(PortentException):
    """Raised when a response body is not valid JSON."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Response from {url} is not valid JSON: {reason}")


class MalformedPayloadError(PortentException):
    """Raised when a platform or completion payload does not match its schema."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Malformed {source} payload: {reason}")


class NoCompletionAlternativeError(MalformedPayloadError):
    """Raised when a completion response carries no alternatives."""

    def __init__(self) -> None:
        super().__init__("completion", "response has no alternatives")
