# hf_proxy/features/chat_completions/handler.py
from typing import Optional, Union

from fastapi import Depends
from fastapi.responses import JSONResponse, StreamingResponse
import httpx

from hf_proxy.dependencies import get_config, get_http_client
from hf_proxy.shared.config import AppConfig, logger
from hf_proxy.shared.constants import SSE_HEADERS, SSE_MEDIA_TYPE

from .client import HuggingFaceClient
from .command import ChatCompletionRequest
from .prompt import build_payload
from .relay import DisconnectProbe, StreamRelay
from .transcoder import to_completion


class ChatCompletionsHandler:
    def __init__(
        self,
        config: AppConfig = Depends(get_config),
        http_client: httpx.AsyncClient = Depends(get_http_client),
    ):
        self._config = config
        self._client = HuggingFaceClient(http_client, config)

    def resolve_token(self, client_token: Optional[str]) -> Optional[str]:
        """The configured token wins; otherwise the caller's bearer token is forwarded."""
        return self._config.huggingface.token or client_token

    async def handle(
        self,
        request: ChatCompletionRequest,
        client_token: Optional[str] = None,
        disconnected: Optional[DisconnectProbe] = None,
    ) -> Union[JSONResponse, StreamingResponse]:
        model = request.model or self._config.huggingface.default_model
        payload = build_payload(request, self._config.huggingface.prompt_strategy)
        token = self.resolve_token(client_token)

        if payload.stream:
            # The upstream call starts lazily inside the relay, after headers go out.
            relay = StreamRelay(
                self._client.send_stream(model, payload, token),
                model,
                disconnected=disconnected,
            )
            return StreamingResponse(
                relay.events(),
                status_code=200,
                media_type=SSE_MEDIA_TYPE,
                headers=SSE_HEADERS,
            )

        upstream = await self._client.send_non_stream(model, payload, token)
        completion = to_completion(upstream, model)
        logger.debug("Completion %s built for model '%s'.", completion.id, model)
        return JSONResponse(content=completion.model_dump())
