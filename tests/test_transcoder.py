"""Tests for the upstream -> OpenAI response transcoder."""

from __future__ import annotations

import pytest

from hf_proxy.features.chat_completions.transcoder import (
    extract_generated_text,
    to_chunk,
    to_completion,
)


@pytest.mark.parametrize(
    "upstream, expected",
    [
        ({"generated_text": "object form"}, "object form"),
        ([{"generated_text": "array form"}, {"generated_text": "ignored"}], "array form"),
        ("raw string", "raw string"),
        ([], ""),
        ({}, ""),
        ({"error": "Model is loading"}, ""),
        ([{"summary_text": "other task"}], ""),
        ({"generated_text": None}, ""),
        (["not an object"], ""),
        (None, ""),
        (42, ""),
    ],
)
def test_extract_generated_text(upstream, expected):
    assert extract_generated_text(upstream) == expected


def test_to_completion_populates_envelope():
    completion = to_completion([{"generated_text": "Hi!"}], "google/gemma-2-2b-it").model_dump()

    assert completion["id"].startswith("chatcmpl-")
    assert completion["object"] == "chat.completion"
    assert isinstance(completion["created"], int)
    assert completion["model"] == "google/gemma-2-2b-it"
    assert completion["choices"] == [
        {
            "index": 0,
            "message": {"role": "assistant", "content": "Hi!"},
            "finish_reason": "stop",
        }
    ]
    assert completion["usage"] == {
        "prompt_tokens": -1,
        "completion_tokens": -1,
        "total_tokens": -1,
    }


def test_to_completion_is_deterministic_apart_from_instrument_fields():
    fixture = {"generated_text": "same answer"}

    first = to_completion(fixture, "m").model_dump()
    second = to_completion(fixture, "m").model_dump()

    assert first["choices"] == second["choices"]
    assert first["usage"] == second["usage"]
    assert first["id"] != second["id"]


def test_to_completion_degrades_to_empty_content():
    completion = to_completion({"unexpected": True}, "m")

    assert completion.choices[0].message.content == ""


def test_to_chunk_wraps_fragment_verbatim():
    fragment = '{"token": {"text": " wor'

    chunk = to_chunk(fragment, "m").model_dump()

    assert chunk["object"] == "chat.completion.chunk"
    assert chunk["model"] == "m"
    assert chunk["choices"] == [
        {
            "index": 0,
            "delta": {"role": "assistant", "content": fragment},
            "finish_reason": None,
        }
    ]
    assert "usage" not in chunk
