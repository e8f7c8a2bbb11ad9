"""Unit and end-to-end tests for PortentHandler."""
from __future__ import annotations

import random
from typing import Any
from unittest.mock import AsyncMock

import pytest

from conftest import inline_query_update
from portent.schemas.telegram import TelegramUpdate
from portent.services.completion_service import CompletionService
from portent.services.portent_handler import PortentHandler
from portent.services.telegram_bot import TelegramBot
from portent.utils.exceptions import NoCompletionAlternativeError
from portent.workers.dispatcher import UpdateDispatcher

COMPLETION_URL = "https://llm.api.cloud.yandex.net/foundationModels/v1/completion"


def _handler(portent: str = "Sunshine awaits.") -> tuple[PortentHandler, AsyncMock, AsyncMock]:
    bot = AsyncMock()
    bot.answer_inline_query = AsyncMock(return_value=True)
    completion = AsyncMock()
    completion.fetch_portent = AsyncMock(return_value=portent)
    return PortentHandler(bot, completion), bot, completion


@pytest.mark.unit
async def test_answers_inline_query() -> None:
    handler, bot, completion = _handler()
    update = TelegramUpdate.model_validate(inline_query_update(1, username="alice", query_id="q-9"))

    await handler(update)

    completion.fetch_portent.assert_awaited_once()
    answer = bot.answer_inline_query.call_args.args[0]
    assert answer.inline_query_id == "q-9"
    assert len(answer.results) == 1
    result = answer.results[0]
    assert result.id == "0"
    assert result.type == "article"
    assert result.title == "Узнай судьбу на день"
    assert result.caption == "Предсказание"
    assert result.input_message_content.message_text == "Предсказание для @alice:\n\nSunshine awaits."
    assert answer.cache_time == 300
    assert answer.is_personal is True


@pytest.mark.unit
async def test_ignores_query_without_username() -> None:
    handler, bot, completion = _handler()
    update = TelegramUpdate.model_validate(inline_query_update(1, username=None))

    await handler(update)

    completion.fetch_portent.assert_not_awaited()
    bot.answer_inline_query.assert_not_awaited()


@pytest.mark.unit
async def test_ignores_non_inline_updates() -> None:
    handler, bot, completion = _handler()
    update = TelegramUpdate.model_validate(
        {"update_id": 3, "message": {"message_id": 1, "chat": {"id": 5}, "text": "hi"}}
    )

    await handler(update)

    completion.fetch_portent.assert_not_awaited()
    bot.answer_inline_query.assert_not_awaited()


@pytest.mark.unit
async def test_completion_errors_propagate() -> None:
    handler, bot, completion = _handler()
    completion.fetch_portent.side_effect = NoCompletionAlternativeError()
    update = TelegramUpdate.model_validate(inline_query_update(1))

    with pytest.raises(NoCompletionAlternativeError):
        await handler(update)

    bot.answer_inline_query.assert_not_awaited()


@pytest.mark.unit
async def test_unacknowledged_answer_does_not_raise() -> None:
    handler, bot, _ = _handler()
    bot.answer_inline_query.return_value = False

    await handler(TelegramUpdate.model_validate(inline_query_update(1)))

    bot.answer_inline_query.assert_awaited_once()


@pytest.mark.unit
async def test_end_to_end_inline_query_answered() -> None:
    """One getUpdates batch through the real bot, completion client and handler."""
    answers: list[dict[str, Any]] = []
    updates = [{"ok": True, "result": [inline_query_update(100, username="alice")]}]
    http_client = AsyncMock()

    bot = TelegramBot(
        token="123:SECRET",
        http_client=http_client,
        dispatcher=UpdateDispatcher(max_in_flight=4),
    )

    async def _request(url: str, method: str = "GET", **kwargs: Any) -> Any:
        if url == COMPLETION_URL:
            return {"result": {"alternatives": [{"message": {"text": "Sunshine awaits."}}]}}
        if url.endswith("/answerInlineQuery"):
            answers.append(kwargs["body"])
            return {"ok": True, "result": True}
        if updates:
            return updates.pop(0)
        await bot.stop()
        return {"ok": True, "result": []}

    http_client.request = AsyncMock(side_effect=_request)
    completion = CompletionService(
        http_client=http_client,
        api_key="key",
        folder_id="folder",
        topics=["A", "B", "C"],
        rng=random.Random(3),
    )
    bot.on_update(PortentHandler(bot, completion))

    await bot.watch(["inline_query"])

    assert len(answers) == 1
    answer = answers[0]
    assert answer["inline_query_id"] == "q-1"
    assert answer["cache_time"] == 300
    assert answer["is_personal"] is True
    assert len(answer["results"]) == 1
    assert answer["results"][0]["input_message_content"]["message_text"] == (
        "Предсказание для @alice:\n\nSunshine awaits."
    )
    assert bot.offset == 101
