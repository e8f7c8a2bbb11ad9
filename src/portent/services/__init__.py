from __future__ import annotations

from portent.services.completion_service import CompletionService
from portent.services.http_client import JsonHttpClient
from portent.services.portent_handler import PortentHandler
from portent.services.telegram_bot import PollState, TelegramBot

__all__ = [
    "JsonHttpClient",
    "CompletionService",
    "TelegramBot",
    "PollState",
    "PortentHandler",
]
