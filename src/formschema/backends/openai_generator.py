"""OpenAI-compatible attribute generator backend."""

from __future__ import annotations

import json
import re
from typing import TYPE_CHECKING, Any

import httpx
from openai import APIConnectionError, APIStatusError, APITimeoutError, AsyncOpenAI, OpenAIError

from formschema import logger
from formschema.exceptions import GeneratorError, GeneratorResponseError
from formschema.settings import build_httpx_client_kwargs

if TYPE_CHECKING:
    from formschema.settings import Settings

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


class OpenAIAttributeBackend:
    """Chat-completions transport against OpenAI-compatible endpoints."""

    def __init__(self, settings: Settings) -> None:
        """Initialize backend.

        Args:
            settings (Settings): Runtime settings.
        """
        self._settings = settings

    def _client(self, http_client: httpx.AsyncClient) -> AsyncOpenAI:
        """Build the SDK client.

        Raises:
            GeneratorError: If no API key is configured.
        """
        if not self._settings.openai_api_key:
            raise GeneratorError(message="OPENAI_API_KEY is required for attribute generation")
        return AsyncOpenAI(
            api_key=self._settings.openai_api_key,
            base_url=self._settings.openai_base_url,
            http_client=http_client,
        )

    async def complete(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Send one completion request.

        Args:
            payload (dict[str, Any]): Request payload.

        Raises:
            GeneratorError: If the request fails or the endpoint is misconfigured.

        Returns:
            dict[str, Any]: Response payload as JSON-compatible data.
        """
        try:
            http_client = httpx.AsyncClient(**build_httpx_client_kwargs(self._settings))
        except (OSError, ValueError, httpx.InvalidURL) as exc:
            raise GeneratorError(message=f"Could not set up the HTTP client: {exc}") from exc

        async with http_client:
            client = self._client(http_client)
            try:
                completion = await client.chat.completions.create(**payload)
            except APIStatusError as exc:
                raise GeneratorError(
                    message=f"Chat completion request failed with status {exc.status_code}",
                ) from exc
            except APITimeoutError as exc:
                raise GeneratorError(message="Chat completion request timed out") from exc
            except APIConnectionError as exc:
                raise GeneratorError(message=f"Chat completion request failed: {exc}") from exc
            except OpenAIError as exc:
                raise GeneratorError(message=f"Chat completion request failed: {exc}") from exc
        return completion.model_dump(mode="json")


def completion_content(data: dict[str, Any]) -> str:
    """Return the first choice's message text.

    Args:
        data (dict[str, Any]): Chat-completion response payload.

    Raises:
        GeneratorResponseError: If the response carries no content.

    Returns:
        str: Message content.
    """
    choices = data.get("choices") or []
    message = choices[0].get("message") if choices else None
    content = (message or {}).get("content")
    if not content:
        raise GeneratorResponseError(message=f"No response content from generator (choices={len(choices)})")
    return content


def parse_attribute_content(content: str) -> dict[str, Any]:
    """Decode the generator's JSON object, tolerating surrounding prose.

    Args:
        content (str): Message content.

    Raises:
        GeneratorResponseError: If no JSON object can be decoded.

    Returns:
        dict[str, Any]: Raw, unsanitized attribute record.
    """
    try:
        parsed = json.loads(content)
    except json.JSONDecodeError:
        match = _JSON_OBJECT.search(content)
        if match is None:
            raise GeneratorResponseError(message="Invalid JSON response from generator") from None
        try:
            parsed = json.loads(match.group(0))
        except json.JSONDecodeError as exc:
            raise GeneratorResponseError(message="Invalid JSON response from generator") from exc
        logger.debug("Recovered JSON object embedded in generator prose")

    if not isinstance(parsed, dict):
        raise GeneratorResponseError(message=f"Generator returned {type(parsed).__name__}, expected an object")
    return parsed
