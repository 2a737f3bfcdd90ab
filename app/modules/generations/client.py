"""OpenRouter chat-completions client with structured output.

The client is built from an explicit ``OpenRouterSettings`` object and fails
at construction when the API key is missing. It never retries; a failed call
surfaces as one of the classified errors in ``errors.py``.
"""

from __future__ import annotations

from typing import Any, Optional, TypeVar

import httpx
from pydantic import BaseModel

from app.core.config import OpenRouterSettings
from app.core.logging import get_logger
from app.modules.generations.errors import (
    ApiError,
    AuthenticationError,
    ConfigurationError,
    NetworkError,
    RateLimitError,
    ServerError,
)
from app.modules.generations.extractor import extract
from app.modules.generations.schema import DEFAULT_SCHEMA_NAME, response_format

T = TypeVar("T", bound=BaseModel)

UNKNOWN_API_ERROR = "An unknown API error occurred."

logger = get_logger(__name__)


def _provider_error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text.strip() or UNKNOWN_API_ERROR
    error = data.get("error") if isinstance(data, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    if isinstance(error, str) and error:
        return error
    return UNKNOWN_API_ERROR


def classify_error_response(response: httpx.Response) -> ApiError:
    message = _provider_error_message(response)
    status = response.status_code
    if status == 401:
        return AuthenticationError(message)
    if status == 429:
        return RateLimitError(message)
    if status >= 500:
        return ServerError(message, status)
    return ApiError(message, status)


class OpenRouterClient:
    """Sends one chat completion per call to the configured endpoint."""

    def __init__(
        self,
        config: OpenRouterSettings,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        if not config.api_key:
            raise ConfigurationError(
                "OPENROUTER_API_KEY is not set in environment variables."
            )
        self._config = config
        self._api_key = config.api_key
        self._http_client = http_client

    @property
    def default_model(self) -> str:
        return self._config.model

    def _headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_key}",
        }
        if self._config.app_url:
            headers["HTTP-Referer"] = self._config.app_url
        if self._config.app_title:
            headers["X-Title"] = self._config.app_title
        return headers

    def build_request_body(
        self,
        system_prompt: str,
        user_prompt: str,
        shape: type[BaseModel],
        *,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> dict[str, Any]:
        return {
            "model": model or self._config.model,
            "temperature": (
                self._config.temperature if temperature is None else temperature
            ),
            "max_tokens": max_tokens or self._config.max_tokens,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "response_format": response_format(shape, DEFAULT_SCHEMA_NAME),
        }

    async def _post(self, body: dict[str, Any]) -> httpx.Response:
        url = self._config.chat_completions_url
        timeout = self._config.timeout_seconds
        if self._http_client is not None:
            return await self._http_client.post(
                url, headers=self._headers(), json=body, timeout=timeout
            )
        async with httpx.AsyncClient(timeout=timeout) as client:
            return await client.post(url, headers=self._headers(), json=body)

    async def _send_request(self, body: dict[str, Any]) -> dict[str, Any]:
        try:
            response = await self._post(body)
        except httpx.TransportError as e:
            raise NetworkError(
                f"Network request to OpenRouter API failed: {e}"
            ) from e

        if not response.is_success:
            error = classify_error_response(response)
            logger.warning(
                f"OpenRouter returned {response.status_code} ({error.kind.value}): {error.message}"
            )
            raise error

        try:
            return response.json()
        except ValueError as e:
            raise NetworkError(
                f"Network request to OpenRouter API failed: undecodable response body ({e})"
            ) from e

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        shape: type[BaseModel],
        *,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> dict[str, Any]:
        """Return the decoded provider envelope; content is not inspected here."""
        body = self.build_request_body(
            system_prompt,
            user_prompt,
            shape,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        return await self._send_request(body)

    async def generate_structured_response(
        self,
        system_prompt: str,
        user_prompt: str,
        shape: type[T],
        *,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> T:
        raw = await self.complete(
            system_prompt,
            user_prompt,
            shape,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        return extract(raw, shape)
