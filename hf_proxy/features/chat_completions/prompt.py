"""
Prompt construction and upstream payload building.

Three mutually exclusive strategies turn an OpenAI ``messages`` array into
the ``inputs`` field of a Hugging Face text-generation call:

``last_message``
    Only the content of the final message is sent.
``role_concatenated``
    The whole history rendered as a transcript::

        System: You are terse.
        Human: Hi
        Assistant: Hello
        Human: Bye
        Assistant:

``passthrough``
    The messages array is forwarded unmodified as a list of
    ``{"role", "content"}`` objects.
"""

from typing import Callable, Dict, List, Union

from hf_proxy.shared.config import PromptStrategy
from hf_proxy.shared.constants import (
    DEFAULT_MAX_NEW_TOKENS, DEFAULT_TEMPERATURE, DEFAULT_TOP_P
)

from .command import ChatCompletionRequest, ChatMessage, UpstreamParameters, UpstreamPayload

ROLE_LABELS = {
    "system": "System",
    "user": "Human",
    "assistant": "Assistant",
}

PromptInputs = Union[str, List[Dict[str, str]]]


def last_message_prompt(messages: List[ChatMessage]) -> str:
    return messages[-1].content


def role_concatenated_prompt(messages: List[ChatMessage]) -> str:
    lines = [f"{ROLE_LABELS[m.role]}: {m.content}" for m in messages]
    lines.append(f"{ROLE_LABELS['assistant']}:")
    return "\n".join(lines)


def passthrough_prompt(messages: List[ChatMessage]) -> List[Dict[str, str]]:
    return [{"role": m.role, "content": m.content} for m in messages]


PROMPT_BUILDERS: Dict[PromptStrategy, Callable[[List[ChatMessage]], PromptInputs]] = {
    PromptStrategy.LAST_MESSAGE: last_message_prompt,
    PromptStrategy.ROLE_CONCATENATED: role_concatenated_prompt,
    PromptStrategy.PASSTHROUGH: passthrough_prompt,
}


def build_prompt(messages: List[ChatMessage], strategy: PromptStrategy) -> PromptInputs:
    return PROMPT_BUILDERS[strategy](messages)


def build_payload(request: ChatCompletionRequest, strategy: PromptStrategy) -> UpstreamPayload:
    """
    Derive the upstream body from a chat request.
    Missing or zero sampling values fall back to the defaults.
    """
    penalty = request.frequency_penalty
    return UpstreamPayload(
        inputs=build_prompt(request.messages, strategy),
        stream=bool(request.stream),
        parameters=UpstreamParameters(
            max_new_tokens=request.max_tokens or DEFAULT_MAX_NEW_TOKENS,
            temperature=request.temperature or DEFAULT_TEMPERATURE,
            top_p=request.top_p or DEFAULT_TOP_P,
            repetition_penalty=1 + penalty if penalty else 1.0,
        ),
    )
