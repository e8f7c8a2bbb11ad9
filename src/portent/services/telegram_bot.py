"""Long-polling Telegram Bot API client."""
from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from typing import Any, Sequence

import structlog
from pydantic import ValidationError

from portent.schemas.telegram import (
    InlineAnswer,
    RawUpdate,
    TelegramAnswerResponse,
    TelegramUpdate,
    TelegramUpdatesResponse,
)
from portent.services.http_client import JsonHttpClient
from portent.utils.exceptions import MalformedPayloadError, PortentException
from portent.workers.dispatcher import UpdateDispatcher, UpdateHandler

logger = structlog.get_logger(__name__)

TELEGRAM_API_URL = "https://api.telegram.org"

# Extra seconds on top of the long-poll hold before the client gives up
POLL_TIMEOUT_MARGIN = 10.0
ANSWER_TIMEOUT_SECONDS = 10.0


@dataclass
class PollState:
    """Next update offset to request; None until the first update arrives."""

    offset: int | None = None

    def advance(self, update_ids: Sequence[int]) -> int | None:
        """
        Move past the last id of a batch.

        An empty batch keeps the offset, and the offset never moves backwards.
        """
        if update_ids:
            next_offset = update_ids[-1] + 1
            if self.offset is None or next_offset > self.offset:
                self.offset = next_offset
            else:
                logger.warning(
                    "telegram_offset_regression_ignored",
                    offset=self.offset,
                    last_update_id=update_ids[-1],
                )
        return self.offset

    def as_param(self) -> str:
        return "" if self.offset is None else str(self.offset)


class TelegramBot:
    """Polls getUpdates and hands every update to the registered handlers."""

    def __init__(
        self,
        token: str,
        http_client: JsonHttpClient,
        dispatcher: UpdateDispatcher,
        api_url: str = TELEGRAM_API_URL,
        poll_limit: int = 100,
        poll_timeout: int = 30,
        poll_error_delay_seconds: float = 1.0,
    ):
        self.token = token
        self.http_client = http_client
        self.dispatcher = dispatcher
        self.api_url = api_url.rstrip("/")
        self.poll_limit = poll_limit
        self.poll_timeout = poll_timeout
        self.poll_error_delay_seconds = poll_error_delay_seconds
        self.poll_state = PollState()
        self.running = False
        self._handlers: list[UpdateHandler] = []

    @property
    def offset(self) -> int | None:
        return self.poll_state.offset

    def method_url(self, method: str) -> str:
        return f"{self.api_url}/bot{self.token}/{method}"

    def on_update(self, handler: UpdateHandler) -> None:
        """Register a handler; handlers run in registration order for every update."""
        self._handlers.append(handler)

    async def watch(self, allowed_updates: Sequence[str]) -> None:
        """
        Run the polling loop until stop() is called.

        Args:
            allowed_updates: Update kinds the platform should deliver
        """
        self.running = True
        await self.dispatcher.start()
        logger.info(
            "telegram_polling_started",
            allowed_updates=list(allowed_updates),
            handler_count=len(self._handlers),
        )

        try:
            while self.running:
                try:
                    response = await self._get_updates(allowed_updates)
                except PortentException as exc:
                    logger.error(
                        "telegram_poll_failed",
                        offset=self.offset,
                        error=str(exc),
                    )
                    await asyncio.sleep(self.poll_error_delay_seconds)
                    continue

                await self._process_response(response)
        finally:
            self.running = False
            await self.dispatcher.stop()
            logger.info("telegram_polling_stopped", offset=self.offset)

    async def stop(self) -> None:
        """Stop polling once the request in flight returns."""
        self.running = False
        logger.info("telegram_polling_stop_requested")

    async def answer_inline_query(self, answer: InlineAnswer) -> bool:
        """
        Send an answer to an inline query.

        Returns:
            True if the platform acknowledged the answer, False otherwise
        """
        data = await self.http_client.request(
            self.method_url("answerInlineQuery"),
            "POST",
            body=answer.model_dump(mode="json", exclude_none=True),
            timeout=ANSWER_TIMEOUT_SECONDS,
        )
        try:
            response = TelegramAnswerResponse.model_validate(data)
        except ValidationError as exc:
            raise MalformedPayloadError("answerInlineQuery", str(exc)) from exc

        if not response.ok:
            logger.warning(
                "telegram_answer_rejected",
                inline_query_id=answer.inline_query_id,
                description=response.description,
            )
        return response.ok

    async def _get_updates(self, allowed_updates: Sequence[str]) -> Any:
        return await self.http_client.request(
            self.method_url("getUpdates"),
            "GET",
            params={
                "offset": self.poll_state.as_param(),
                "limit": self.poll_limit,
                "timeout": self.poll_timeout,
                "allowed_updates": json.dumps(list(allowed_updates)),
            },
            timeout=self.poll_timeout + POLL_TIMEOUT_MARGIN,
        )

    async def _process_response(self, data: Any) -> None:
        """Dispatch one getUpdates batch and advance the offset past it."""
        try:
            response = TelegramUpdatesResponse.model_validate(data)
            if not response.ok:
                logger.warning(
                    "telegram_poll_not_ok",
                    offset=self.offset,
                    error_code=response.error_code,
                    description=response.description,
                )
                return

            for raw_update in response.result:
                await self._dispatch(raw_update)

            self.poll_state.advance([raw.update_id for raw in response.result])
            if response.result:
                logger.debug(
                    "telegram_updates_dispatched",
                    count=len(response.result),
                    next_offset=self.offset,
                )
        except Exception as exc:
            logger.error(
                "telegram_dispatch_failed",
                offset=self.offset,
                error=str(exc),
                exc_info=True,
            )

    async def _dispatch(self, raw_update: RawUpdate) -> None:
        try:
            update = TelegramUpdate.model_validate(raw_update.model_dump())
        except ValidationError as exc:
            error = MalformedPayloadError("update", str(exc))
            logger.warning(
                "telegram_update_rejected",
                update_id=raw_update.update_id,
                error=error.reason,
            )
            return

        for handler in self._handlers:
            await self.dispatcher.submit(handler, update)
