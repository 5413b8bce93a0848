from typing import Optional

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse, StreamingResponse

from hf_proxy.shared.utils import bearer_token

from .command import ChatCompletionRequest
from .handler import ChatCompletionsHandler

router = APIRouter()


@router.post("/chat/completions", response_model=None)
async def chat_completions(
    request: Request,
    chat_request: ChatCompletionRequest,
    authorization: Optional[str] = Header(None),
    handler: ChatCompletionsHandler = Depends(ChatCompletionsHandler),
) -> StreamingResponse | JSONResponse:
    return await handler.handle(
        chat_request,
        client_token=bearer_token(authorization),
        disconnected=request.is_disconnected,
    )
