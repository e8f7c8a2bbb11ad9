from __future__ import annotations

import random
from typing import Sequence

import structlog
from pydantic import ValidationError

from portent.schemas.completion import (
    CompletionMessage,
    CompletionOptions,
    CompletionRequest,
    CompletionResponse,
)
from portent.services.http_client import JsonHttpClient
from portent.utils.exceptions import MalformedPayloadError, NoCompletionAlternativeError

logger = structlog.get_logger(__name__)

DEFAULT_COMPLETION_URL = "https://llm.api.cloud.yandex.net/foundationModels/v1/completion"
DEFAULT_MODEL_NAME = "yandexgpt-lite"
DEFAULT_TIMEOUT_SECONDS = 30.0

# Chance of drawing one more word after each pick
EFFECT_CONTINUE_PROBABILITY = 0.3
CAUSE_CONTINUE_PROBABILITY = 0.2

PERSONA_PROMPT = "Ты професиональная гадалка и пишешь саркастические предсказания"


class CompletionService:
    """Generates portents with a foundation-model completion endpoint."""

    def __init__(
        self,
        http_client: JsonHttpClient,
        api_key: str,
        folder_id: str,
        topics: Sequence[str],
        model_name: str = DEFAULT_MODEL_NAME,
        temperature: float = 0.6,
        max_tokens: int = 200,
        endpoint: str = DEFAULT_COMPLETION_URL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        rng: random.Random | None = None,
    ):
        self.http_client = http_client
        self.api_key = api_key
        self.folder_id = folder_id
        self.topics = tuple(dict.fromkeys(topics))
        self.model_name = model_name
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.endpoint = endpoint
        self.timeout_seconds = timeout_seconds
        self.rng = rng or random.Random()

    @property
    def model_uri(self) -> str:
        return f"gpt://{self.folder_id}/{self.model_name}"

    def select_words(self) -> tuple[list[str], list[str]]:
        """
        Draw effect words and cause words from the topics.

        Each list takes at least one draw, then keeps drawing with a fixed
        continuation probability while topics remain. Words are removed
        from a shared pool, so the two lists never overlap.

        Returns:
            (effect_words, cause_words)
        """
        pool = list(self.topics)
        effect_words = self._draw(pool, EFFECT_CONTINUE_PROBABILITY)
        cause_words = self._draw(pool, CAUSE_CONTINUE_PROBABILITY)
        return effect_words, cause_words

    def _draw(self, pool: list[str], continue_probability: float) -> list[str]:
        drawn: list[str] = []
        while pool:
            drawn.append(pool.pop(self.rng.randrange(len(pool))))
            if not pool or self.rng.random() >= continue_probability:
                break
        return drawn

    @staticmethod
    def build_prompt(effect_words: Sequence[str], cause_words: Sequence[str]) -> str:
        return (
            "Напиши короткое предсказание для человека где есть "
            f"{', '.join(effect_words)} и это из-за того, что у него "
            f"{', '.join(cause_words)}. "
            "Не используй разметку Markdown! "
            "Не упоминай что ты искусственный интеллект! "
            "Не добавляй того как помочь!"
        )

    def build_request(self, prompt: str) -> CompletionRequest:
        return CompletionRequest(
            model_uri=self.model_uri,
            completion_options=CompletionOptions(
                stream=False,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            ),
            messages=[
                CompletionMessage(role="system", text=PERSONA_PROMPT),
                CompletionMessage(role="user", text=prompt),
            ],
        )

    async def fetch_portent(self) -> str:
        """
        Request one portent from the completion endpoint.

        Returns:
            Text of the first alternative, unmodified

        Raises:
            TransportError: If the endpoint cannot be reached
            ResponseParseError: If the response is not JSON
            MalformedPayloadError: If the response has an unexpected shape
            NoCompletionAlternativeError: If the response has no alternatives
        """
        effect_words, cause_words = self.select_words()
        prompt = self.build_prompt(effect_words, cause_words)
        request = self.build_request(prompt)

        logger.info(
            "completion_requested",
            model_uri=self.model_uri,
            effect_words=effect_words,
            cause_words=cause_words,
        )

        data = await self.http_client.request(
            self.endpoint,
            "POST",
            headers={"Authorization": f"Api-Key {self.api_key}"},
            body=request.model_dump(mode="json", by_alias=True),
            timeout=self.timeout_seconds,
        )

        try:
            response = CompletionResponse.model_validate(data)
        except ValidationError as exc:
            logger.error("completion_response_malformed", errors=exc.error_count())
            raise MalformedPayloadError("completion", str(exc)) from exc

        if not response.result.alternatives:
            logger.error("completion_without_alternatives", model_uri=self.model_uri)
            raise NoCompletionAlternativeError()

        text = response.result.alternatives[0].message.text
        logger.info("completion_received", length=len(text))
        return text
