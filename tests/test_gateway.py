import asyncio
from types import SimpleNamespace

import pytest
from openai import OpenAIError

from alt_agent import AppConfig, ConfigError, ImagePayload, ModelError, ModelGateway
from conftest import make_client


def test_ask_returns_trimmed_text():
    client, _ = make_client(content="  Acme Corp logo \n")
    gateway = ModelGateway(client, "test-model")

    assert asyncio.run(gateway.ask("describe")) == "Acme Corp logo"


def test_ask_sends_generation_config():
    client, completions = make_client(content="ok")
    gateway = ModelGateway(client, "test-model")

    asyncio.run(gateway.ask("describe"))

    call = completions.calls[0]
    assert call["model"] == "test-model"
    assert call["temperature"] == 1.0
    assert call["top_p"] == 0.95
    assert call["max_tokens"] == 8192
    assert call["response_format"] == {"type": "text"}
    assert call["extra_body"] == {"top_k": 64}
    assert call["messages"] == [{"role": "user", "content": "describe"}]


def test_ask_attaches_image_inline():
    client, completions = make_client(content="A cat")
    gateway = ModelGateway(client, "test-model")

    asyncio.run(gateway.ask("describe", ImagePayload(mime_type="image/jpeg", base64_data="QUJD")))

    content = completions.calls[0]["messages"][0]["content"]
    assert content[0] == {"type": "text", "text": "describe"}
    assert content[1] == {"type": "image_url", "image_url": {"url": "data:image/jpeg;base64,QUJD"}}


def test_each_call_starts_a_fresh_session():
    client, completions = make_client(content="ok")
    gateway = ModelGateway(client, "test-model")

    async def twice():
        await gateway.ask("first")
        await gateway.ask("second")

    asyncio.run(twice())

    first, second = completions.calls
    assert first["messages"] == [{"role": "user", "content": "first"}]
    assert second["messages"] == [{"role": "user", "content": "second"}]


def test_empty_text_is_returned_not_raised():
    client, _ = make_client(content="   ")
    gateway = ModelGateway(client, "test-model")

    assert asyncio.run(gateway.ask("describe")) == ""


@pytest.mark.parametrize("response", [
    None,
    SimpleNamespace(choices=[]),
    SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=None))]),
    SimpleNamespace(choices=[SimpleNamespace(message=None)]),
])
def test_unusable_response_raises_model_error(response):
    async def create(**kwargs):
        return response

    client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))
    gateway = ModelGateway(client, "test-model")

    with pytest.raises(ModelError):
        asyncio.run(gateway.ask("describe"))


def test_client_error_raises_model_error():
    client, _ = make_client(error=OpenAIError("quota exceeded"))
    gateway = ModelGateway(client, "test-model")

    with pytest.raises(ModelError) as excinfo:
        asyncio.run(gateway.ask("describe"))
    assert isinstance(excinfo.value.cause, OpenAIError)


def test_timeout_raises_model_error():
    client, _ = make_client(content="late", delay=0.5)
    gateway = ModelGateway(client, "test-model", timeout=0.01)

    with pytest.raises(ModelError):
        asyncio.run(gateway.ask("describe"))


def test_from_config_requires_api_key():
    with pytest.raises(ConfigError):
        ModelGateway.from_config(AppConfig(api_key=None))


def test_from_config_builds_single_attempt_client():
    gateway = ModelGateway.from_config(AppConfig(api_key="k", model="m", request_timeout=12.0))

    assert gateway.model == "m"
    assert gateway.timeout == 12.0
    assert gateway.client.max_retries == 0
