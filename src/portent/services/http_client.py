from __future__ import annotations

import json
from typing import Any, Literal, Mapping

import httpx
import structlog

from portent.utils.exceptions import ResponseParseError, TransportError

logger = structlog.get_logger(__name__)

HttpMethod = Literal["GET", "POST"]


class JsonHttpClient:
    """Single JSON request/response exchanges over HTTPS."""

    def __init__(self, user_agent: str = "portent-bot/1.0"):
        self.user_agent = user_agent

    async def request(
        self,
        url: str,
        method: HttpMethod = "GET",
        *,
        headers: Mapping[str, str] | None = None,
        body: Mapping[str, Any] | None = None,
        params: Mapping[str, str | int] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """
        Perform one request and return the parsed JSON body.

        POST bodies are serialized here and get Content-Type and
        Content-Length set automatically; caller headers cannot override
        those two. The status code is not inspected.

        Args:
            url: Target address
            method: "GET" or "POST"
            headers: Extra request headers
            body: JSON object to send with POST
            params: Query string parameters
            timeout: Seconds to wait for the whole exchange, None for no limit

        Returns:
            Decoded JSON response body

        Raises:
            TransportError: On network-level failures
            ResponseParseError: If the body is not valid JSON
        """
        if method not in ("GET", "POST"):
            raise ValueError(f"Unsupported HTTP method: {method}")

        request_headers = httpx.Headers({"User-Agent": self.user_agent})
        request_headers.update(headers or {})

        content: bytes | None = None
        if method == "POST":
            if body is None:
                raise ValueError("POST requests require a body")
            content = json.dumps(body, ensure_ascii=False).encode("utf-8")
            request_headers["Content-Type"] = "application/json"
            request_headers["Content-Length"] = str(len(content))

        try:
            async with httpx.AsyncClient(timeout=timeout) as client:
                response = await client.request(
                    method,
                    url,
                    params=params,
                    headers=request_headers,
                    content=content,
                )
        except httpx.RequestError as exc:
            # Log the path only: Telegram URLs embed the bot token
            logger.error(
                "http_request_failed",
                method=method,
                path=_safe_path(url),
                error=str(exc) or exc.__class__.__name__,
            )
            raise TransportError(_safe_path(url), str(exc) or exc.__class__.__name__) from exc

        try:
            return json.loads(response.content)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            logger.warning(
                "http_response_not_json",
                method=method,
                path=_safe_path(url),
                status_code=response.status_code,
            )
            raise ResponseParseError(_safe_path(url), str(exc)) from exc


def _safe_path(url: str) -> str:
    """Strip anything that looks like a bot token from a URL for logging."""
    parsed = httpx.URL(url)
    segments = [
        "bot<token>" if segment.startswith("bot") and ":" in segment else segment
        for segment in parsed.path.split("/")
    ]
    return f"{parsed.scheme}://{parsed.host}{'/'.join(segments)}"
