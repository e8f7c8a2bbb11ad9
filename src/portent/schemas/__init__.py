from __future__ import annotations

from portent.schemas.completion import (
    CompletionMessage,
    CompletionOptions,
    CompletionRequest,
    CompletionResponse,
)
from portent.schemas.telegram import (
    InlineAnswer,
    InlineQueryResultArticle,
    InputTextMessageContent,
    TelegramInlineQuery,
    TelegramUpdate,
    TelegramUpdatesResponse,
    TelegramUser,
    UpdateKind,
)

__all__ = [
    "CompletionMessage",
    "CompletionOptions",
    "CompletionRequest",
    "CompletionResponse",
    "InlineAnswer",
    "InlineQueryResultArticle",
    "InputTextMessageContent",
    "TelegramInlineQuery",
    "TelegramUpdate",
    "TelegramUpdatesResponse",
    "TelegramUser",
    "UpdateKind",
]
