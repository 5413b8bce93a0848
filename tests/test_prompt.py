"""Tests for prompt strategies and upstream payload defaults."""

from __future__ import annotations

from hf_proxy.features.chat_completions.command import ChatCompletionRequest
from hf_proxy.features.chat_completions.prompt import build_payload, build_prompt
from hf_proxy.shared.config import PromptStrategy


def _request(**overrides) -> ChatCompletionRequest:
    data = {
        "messages": [
            {"role": "system", "content": "You are terse."},
            {"role": "user", "content": "Hi"},
            {"role": "assistant", "content": "Hello"},
            {"role": "user", "content": "Bye"},
        ]
    }
    data.update(overrides)
    return ChatCompletionRequest(**data)


def test_last_message_strategy_uses_final_content():
    request = _request()

    assert build_prompt(request.messages, PromptStrategy.LAST_MESSAGE) == "Bye"


def test_role_concatenated_strategy_renders_transcript():
    request = _request()

    prompt = build_prompt(request.messages, PromptStrategy.ROLE_CONCATENATED)

    assert prompt == (
        "System: You are terse.\n"
        "Human: Hi\n"
        "Assistant: Hello\n"
        "Human: Bye\n"
        "Assistant:"
    )


def test_passthrough_strategy_keeps_messages():
    request = _request()

    prompt = build_prompt(request.messages, PromptStrategy.PASSTHROUGH)

    assert prompt == [
        {"role": "system", "content": "You are terse."},
        {"role": "user", "content": "Hi"},
        {"role": "assistant", "content": "Hello"},
        {"role": "user", "content": "Bye"},
    ]


def test_payload_defaults():
    payload = build_payload(_request(), PromptStrategy.LAST_MESSAGE)

    assert payload.model_dump() == {
        "inputs": "Bye",
        "stream": False,
        "parameters": {
            "max_new_tokens": 500,
            "temperature": 0.7,
            "top_p": 1.0,
            "repetition_penalty": 1.0,
        },
    }


def test_payload_uses_request_parameters():
    request = _request(
        stream=True, max_tokens=64, temperature=0.2, top_p=0.9, frequency_penalty=0.5
    )

    payload = build_payload(request, PromptStrategy.LAST_MESSAGE)

    assert payload.stream is True
    assert payload.parameters.max_new_tokens == 64
    assert payload.parameters.temperature == 0.2
    assert payload.parameters.top_p == 0.9
    assert payload.parameters.repetition_penalty == 1.5


def test_zero_values_fall_back_to_defaults():
    request = _request(max_tokens=0, temperature=0, top_p=0, frequency_penalty=0)

    params = build_payload(request, PromptStrategy.LAST_MESSAGE).parameters

    assert params.max_new_tokens == 500
    assert params.temperature == 0.7
    assert params.top_p == 1.0
    assert params.repetition_penalty == 1.0
