from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Literal, Union


class ChatMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str


class ChatCompletionRequest(BaseModel):
    messages: List[ChatMessage] = Field(..., min_length=1)
    model: Optional[str] = None
    stream: Optional[bool] = False
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    frequency_penalty: Optional[float] = None


class UpstreamParameters(BaseModel):
    max_new_tokens: int
    temperature: float
    top_p: float
    repetition_penalty: float


class UpstreamPayload(BaseModel):
    """Body of a Hugging Face text-generation call."""
    inputs: Union[str, List[Dict[str, str]]]
    stream: bool
    parameters: UpstreamParameters


class Usage(BaseModel):
    """Token accounting. The inference API does not report it, so -1 means unknown."""
    prompt_tokens: int = -1
    completion_tokens: int = -1
    total_tokens: int = -1


class AssistantMessage(BaseModel):
    role: Literal["assistant"] = "assistant"
    content: str


class Choice(BaseModel):
    index: int = 0
    message: AssistantMessage
    finish_reason: Literal["stop"] = "stop"


class ChatCompletionResponse(BaseModel):
    id: str
    object: Literal["chat.completion"] = "chat.completion"
    created: int
    model: str
    choices: List[Choice]
    usage: Usage = Usage()


class Delta(BaseModel):
    role: Literal["assistant"] = "assistant"
    content: str


class ChunkChoice(BaseModel):
    index: int = 0
    delta: Delta
    finish_reason: None = None


class ChatCompletionChunk(BaseModel):
    id: str
    object: Literal["chat.completion.chunk"] = "chat.completion.chunk"
    created: int
    model: str
    choices: List[ChunkChoice]
