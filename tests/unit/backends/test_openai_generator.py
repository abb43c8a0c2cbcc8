from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import httpx
import openai
import pytest

from formschema.backends.openai_generator import (
    OpenAIAttributeBackend,
    completion_content,
    parse_attribute_content,
)
from formschema.exceptions import GeneratorError, GeneratorResponseError
from formschema.settings import Settings

if TYPE_CHECKING:
    from pathlib import Path

_PAYLOAD = {"model": "gpt-test", "messages": [{"role": "user", "content": "hi"}], "max_completion_tokens": 16}


def _patched_client(mocker, *, result=None, error: Exception | None = None):
    client = mocker.Mock()
    client.chat.completions.create = mocker.AsyncMock(return_value=result, side_effect=error)
    factory = mocker.patch("formschema.backends.openai_generator.AsyncOpenAI", return_value=client)
    return client, factory


def test_complete_returns_completion_payload(mocker) -> None:
    completion = mocker.Mock()
    completion.model_dump.return_value = {"choices": [{"message": {"content": "{}"}}]}
    client, factory = _patched_client(mocker, result=completion)

    result = asyncio.run(OpenAIAttributeBackend(Settings(openai_api_key="sk-test")).complete(_PAYLOAD))

    assert result == {"choices": [{"message": {"content": "{}"}}]}
    client.chat.completions.create.assert_awaited_once_with(**_PAYLOAD)
    assert factory.call_args.kwargs["api_key"] == "sk-test"
    completion.model_dump.assert_called_once_with(mode="json")


def test_complete_requires_api_key(mocker, monkeypatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    _patched_client(mocker)

    with pytest.raises(GeneratorError, match="OPENAI_API_KEY is required"):
        asyncio.run(OpenAIAttributeBackend(Settings()).complete(_PAYLOAD))


@pytest.mark.parametrize(
    ("error", "message"),
    [
        (
            openai.APIStatusError(
                "server error",
                response=httpx.Response(503, request=httpx.Request("POST", "https://api.example.com")),
                body=None,
            ),
            "failed with status 503",
        ),
        (openai.APITimeoutError(request=httpx.Request("POST", "https://api.example.com")), "timed out"),
        (
            openai.APIConnectionError(request=httpx.Request("POST", "https://api.example.com")),
            "Chat completion request failed",
        ),
    ],
)
def test_complete_maps_sdk_errors(mocker, error: Exception, message: str) -> None:
    _patched_client(mocker, error=error)

    with pytest.raises(GeneratorError, match=message) as exc_info:
        asyncio.run(OpenAIAttributeBackend(Settings(openai_api_key="sk-test")).complete(_PAYLOAD))

    assert exc_info.value.__cause__ is error


def test_completion_content_returns_first_choice() -> None:
    data = {"choices": [{"message": {"content": "first"}}, {"message": {"content": "second"}}]}
    assert completion_content(data) == "first"


@pytest.mark.parametrize(
    "data",
    [{}, {"choices": []}, {"choices": [{"message": None}]}, {"choices": [{"message": {"content": ""}}]}],
)
def test_completion_content_requires_content(data: dict[str, object]) -> None:
    with pytest.raises(GeneratorResponseError, match="No response content"):
        completion_content(data)


def test_parse_attribute_content_plain_json() -> None:
    assert parse_attribute_content('{"display_name": "Name", "width": 6}') == {"display_name": "Name", "width": 6}


def test_parse_attribute_content_recovers_embedded_object() -> None:
    content = 'Here you go:\n```json\n{"display_name": "Name"}\n```'
    assert parse_attribute_content(content) == {"display_name": "Name"}


@pytest.mark.parametrize("content", ["no json here", "{not: json}", "[1, 2]", '"text"'])
def test_parse_attribute_content_rejects_non_objects(content: str) -> None:
    with pytest.raises(GeneratorResponseError):
        parse_attribute_content(content)


@pytest.mark.parametrize(
    ("overrides", "cause"),
    [
        ({"cert_path": "missing-ca-bundle.pem"}, FileNotFoundError),
        ({"https_proxy": "ftp://proxy.example.com:21"}, ValueError),
    ],
)
def test_complete_maps_client_setup_errors(mocker, tmp_path: Path, overrides: dict[str, str], cause: type) -> None:
    _, factory = _patched_client(mocker)
    if "cert_path" in overrides:
        overrides = {"cert_path": str(tmp_path / overrides["cert_path"])}
    settings = Settings(openai_api_key="sk-test", **overrides)

    with pytest.raises(GeneratorError, match="Could not set up the HTTP client") as exc_info:
        asyncio.run(OpenAIAttributeBackend(settings).complete(_PAYLOAD))

    assert isinstance(exc_info.value.__cause__, cause)
    factory.assert_not_called()
