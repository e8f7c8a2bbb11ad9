from __future__ import annotations

from typing import Protocol

import structlog

from portent.schemas.telegram import (
    InlineAnswer,
    InlineQueryResultArticle,
    InputTextMessageContent,
    TelegramUpdate,
)

logger = structlog.get_logger(__name__)

RESULT_ID = "0"
RESULT_CAPTION = "Предсказание"
RESULT_TITLE = "Узнай судьбу на день"
CACHE_TIME_SECONDS = 300


class PortentSource(Protocol):
    async def fetch_portent(self) -> str: ...


class InlineAnswerSink(Protocol):
    async def answer_inline_query(self, answer: InlineAnswer) -> bool: ...


class PortentHandler:
    """Answers inline queries with a freshly generated portent."""

    def __init__(self, bot: InlineAnswerSink, completion_service: PortentSource):
        self.bot = bot
        self.completion_service = completion_service

    async def __call__(self, update: TelegramUpdate) -> None:
        inline_query = update.inline_query
        if inline_query is None or not inline_query.from_user.username:
            return

        username = inline_query.from_user.username
        logger.info(
            "inline_query_received",
            update_id=update.update_id,
            inline_query_id=inline_query.id,
            username=username,
        )

        portent = await self.completion_service.fetch_portent()
        answer = self.build_answer(inline_query.id, username, portent)

        acknowledged = await self.bot.answer_inline_query(answer)
        if acknowledged:
            logger.info("inline_query_answered", inline_query_id=inline_query.id)
        else:
            logger.warning("inline_query_answer_not_acknowledged", inline_query_id=inline_query.id)

    @staticmethod
    def build_answer(inline_query_id: str, username: str, portent: str) -> InlineAnswer:
        return InlineAnswer(
            inline_query_id=inline_query_id,
            results=[
                InlineQueryResultArticle(
                    id=RESULT_ID,
                    caption=RESULT_CAPTION,
                    title=RESULT_TITLE,
                    input_message_content=InputTextMessageContent(
                        message_text=f"Предсказание для @{username}:\n\n{portent}",
                    ),
                )
            ],
            cache_time=CACHE_TIME_SECONDS,
            is_personal=True,
        )
