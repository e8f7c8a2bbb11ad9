from __future__ import annotations

import asyncio
import sys

import structlog

from portent.config import Settings, get_settings, load_topics
from portent.schemas.telegram import UpdateKind
from portent.services.completion_service import CompletionService
from portent.services.http_client import JsonHttpClient
from portent.services.portent_handler import PortentHandler
from portent.services.telegram_bot import TelegramBot
from portent.utils.exceptions import ConfigurationError
from portent.utils.logging import setup_logging
from portent.workers.dispatcher import UpdateDispatcher

logger = structlog.get_logger(__name__)


def build_bot(settings: Settings, topics: tuple[str, ...]) -> TelegramBot:
    """Wire the HTTP client, completion service, dispatcher and handler together."""
    http_client = JsonHttpClient()

    completion_service = CompletionService(
        http_client=http_client,
        api_key=settings.api_key,
        folder_id=settings.folder_id,
        topics=topics,
        model_name=settings.model_name,
        endpoint=settings.completion_url,
        timeout_seconds=settings.completion_timeout_seconds,
    )

    dispatcher = UpdateDispatcher(
        max_in_flight=settings.max_concurrent_handlers,
        queue_size=settings.handler_queue_size,
    )

    bot = TelegramBot(
        token=settings.bot_token,
        http_client=http_client,
        dispatcher=dispatcher,
        api_url=settings.telegram_api_url,
        poll_limit=settings.poll_limit,
        poll_timeout=settings.poll_timeout,
        poll_error_delay_seconds=settings.poll_error_delay_seconds,
    )
    bot.on_update(PortentHandler(bot, completion_service))
    return bot


async def main() -> None:
    """Load configuration and poll for inline queries until terminated."""
    try:
        settings = get_settings()
    except ConfigurationError as exc:
        setup_logging()
        logger.error("startup_configuration_error", error=str(exc))
        sys.exit(1)

    setup_logging(settings.log_level, json_logs=settings.log_json)

    try:
        topics = load_topics(settings.settings_path)
    except ConfigurationError as exc:
        logger.error("startup_configuration_error", error=str(exc))
        sys.exit(1)

    logger.info(
        "starting_bot",
        topic_count=len(topics),
        model_name=settings.model_name,
    )

    bot = build_bot(settings, topics)
    await bot.watch([UpdateKind.INLINE_QUERY.value])


def cli() -> None:
    """Console script entry point."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("shutdown_requested")


if __name__ == "__main__":
    cli()
