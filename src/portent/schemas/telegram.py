"""Telegram Bot API schemas used by the polling loop and inline answers."""
from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class UpdateKind(str, Enum):
    """Update payload variants the bot knows about."""

    MESSAGE = "message"
    INLINE_QUERY = "inline_query"


class TelegramUser(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    id: int
    is_bot: bool = False
    username: str | None = None
    first_name: str | None = None


class TelegramChat(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    id: int


class TelegramMessage(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    message_id: int
    chat: TelegramChat
    text: str | None = None


class TelegramInlineQuery(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    id: str
    from_user: TelegramUser = Field(..., alias="from")
    query: str = ""
    offset: str = ""


class TelegramUpdate(BaseModel):
    """
    One event from getUpdates.

    Carries at most one known payload variant. Variants the bot does not
    model (edited messages, callback queries, ...) are dropped and leave
    ``kind`` as None.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    update_id: int
    message: TelegramMessage | None = None
    inline_query: TelegramInlineQuery | None = None

    @model_validator(mode="after")
    def check_single_variant(self) -> "TelegramUpdate":
        if self.message is not None and self.inline_query is not None:
            raise ValueError("update carries more than one payload variant")
        return self

    @property
    def kind(self) -> UpdateKind | None:
        if self.inline_query is not None:
            return UpdateKind.INLINE_QUERY
        if self.message is not None:
            return UpdateKind.MESSAGE
        return None


class RawUpdate(BaseModel):
    """Envelope view of an update: only the id is required."""

    model_config = ConfigDict(extra="allow")

    update_id: int


class TelegramUpdatesResponse(BaseModel):
    """Response of getUpdates."""

    model_config = ConfigDict(extra="ignore")

    ok: bool
    result: list[RawUpdate] = Field(default_factory=list)
    description: str | None = None
    error_code: int | None = None


class TelegramAnswerResponse(BaseModel):
    """Response of answerInlineQuery."""

    model_config = ConfigDict(extra="ignore")

    ok: bool
    result: Any = None
    description: str | None = None


class InputTextMessageContent(BaseModel):
    message_text: str = Field(..., min_length=1, max_length=4096)
    parse_mode: Literal["MarkdownV2", "HTML"] | None = None


class InlineQueryResultArticle(BaseModel):
    type: Literal["article"] = "article"
    id: str = Field(..., min_length=1, max_length=64)
    title: str
    caption: str | None = None
    input_message_content: InputTextMessageContent


class InlineAnswer(BaseModel):
    """Payload of answerInlineQuery."""

    inline_query_id: str
    results: list[InlineQueryResultArticle] = Field(..., max_length=50)
    cache_time: int = Field(default=300, ge=0)
    is_personal: bool = False
