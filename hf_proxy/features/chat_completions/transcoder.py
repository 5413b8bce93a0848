"""
Maps Hugging Face inference output onto OpenAI chat-completion shapes.

The inference API answers in one of three forms, which are classified here
and nowhere else:

* an object: ``{"generated_text": "..."}``
* an array:  ``[{"generated_text": "..."}, ...]`` (first element wins)
* a raw string

Anything else yields empty content rather than an error.
"""

import time
import uuid
from typing import Any

from .command import (
    AssistantMessage,
    ChatCompletionChunk,
    ChatCompletionResponse,
    Choice,
    ChunkChoice,
    Delta,
    Usage,
)


def new_completion_id() -> str:
    return f"chatcmpl-{uuid.uuid4().hex}"


def _text_field(obj: Any) -> str:
    if isinstance(obj, dict):
        text = obj.get("generated_text")
        if isinstance(text, str):
            return text
    return ""


def extract_generated_text(upstream: Any) -> str:
    if isinstance(upstream, str):
        return upstream
    if isinstance(upstream, dict):
        return _text_field(upstream)
    if isinstance(upstream, list) and upstream:
        return _text_field(upstream[0])
    return ""


def to_completion(upstream: Any, model: str) -> ChatCompletionResponse:
    return ChatCompletionResponse(
        id=new_completion_id(),
        created=int(time.time()),
        model=model,
        choices=[Choice(message=AssistantMessage(content=extract_generated_text(upstream)))],
        usage=Usage(),
    )


def to_chunk(fragment: str, model: str) -> ChatCompletionChunk:
    """Wrap one decoded upstream fragment as-is; no boundary detection."""
    return ChatCompletionChunk(
        id=new_completion_id(),
        created=int(time.time()),
        model=model,
        choices=[ChunkChoice(delta=Delta(content=fragment))],
    )
