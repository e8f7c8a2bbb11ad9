from __future__ import annotations

from portent.utils.exceptions import (
    ConfigurationError,
    MalformedPayloadError,
    NoCompletionAlternativeError,
    PortentException,
    ResponseParseError,
    TransportError,
)
from portent.utils.logging import get_logger, setup_logging

__all__ = [
    "setup_logging",
    "get_logger",
    "PortentException",
    "ConfigurationError",
    "TransportError",
    "ResponseParseError",
    "MalformedPayloadError",
    "NoCompletionAlternativeError",
]
