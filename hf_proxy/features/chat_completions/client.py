# hf_proxy/features/chat_completions/client.py
import httpx
from typing import Any, AsyncGenerator, Dict, Optional

from hf_proxy.shared.config import AppConfig, logger
from hf_proxy.shared.errors import UpstreamError
from hf_proxy.shared.metrics import UPSTREAM_ERRORS, UPSTREAM_REQUESTS
from hf_proxy.shared.utils import mask_key

from .command import UpstreamPayload


class HuggingFaceClient:
    """Sends exactly one request per call to the Hugging Face Inference API. No retries."""

    def __init__(self, http_client: httpx.AsyncClient, config: AppConfig):
        self._client = http_client
        self._config = config

    def model_url(self, model: str) -> str:
        return f"{self._config.huggingface.base_url.rstrip('/')}/{model}"

    def _headers(self, token: Optional[str]) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _status_error(self, response: httpx.Response, model: str) -> UpstreamError:
        body = response.text
        logger.error(
            "HTTP error from Hugging Face for model '%s': %s - %s",
            model, response.status_code, body
        )
        UPSTREAM_ERRORS.labels(model=model, kind="status").inc()
        message = f"Hugging Face API error: {response.status_code} {response.reason_phrase}"
        if body:
            message = f"{message}: {body}"
        # 1xx and 3xx are not passed through.
        status = response.status_code if response.status_code >= 400 else 502
        return UpstreamError(message, status_code=status)

    def _transport_error(self, exc: httpx.RequestError, model: str) -> UpstreamError:
        if isinstance(exc, httpx.TimeoutException):
            kind, status, text = "timeout", 504, "Hugging Face API request timed out"
        elif isinstance(exc, httpx.ConnectError):
            kind, status, text = "connect", 503, "Unable to connect to Hugging Face API"
        else:
            kind, status, text = "request", 500, "Request to Hugging Face API failed"
        logger.error("%s for model '%s': %s", text, model, exc)
        UPSTREAM_ERRORS.labels(model=model, kind=kind).inc()
        return UpstreamError(f"{text}: {exc}", status_code=status)

    async def send_non_stream(
        self, model: str, payload: UpstreamPayload, token: Optional[str]
    ) -> Any:
        """Sends a non-streaming request and returns the decoded body."""
        logger.info("Non-stream request for model '%s' using token %s.", model, mask_key(token))
        UPSTREAM_REQUESTS.labels(model=model, stream="false").inc()
        try:
            response = await self._client.post(
                self.model_url(model),
                json=payload.model_dump(),
                headers=self._headers(token),
            )
        except httpx.RequestError as e:
            raise self._transport_error(e, model) from e

        if not response.is_success:
            raise self._status_error(response, model)

        try:
            return response.json()
        except ValueError:
            logger.warning("Non-JSON body from Hugging Face for model '%s'; using raw text.", model)
            return response.text

    async def send_stream(
        self, model: str, payload: UpstreamPayload, token: Optional[str]
    ) -> AsyncGenerator[bytes, None]:
        """
        Streams the upstream body as raw byte chunks.
        Nothing is sent until the first chunk is requested.
        """
        logger.info("Stream request for model '%s' using token %s.", model, mask_key(token))
        UPSTREAM_REQUESTS.labels(model=model, stream="true").inc()
        try:
            async with self._client.stream(
                "POST",
                self.model_url(model),
                json=payload.model_dump(),
                headers=self._headers(token),
            ) as response:
                if not response.is_success:
                    await response.aread()
                    raise self._status_error(response, model)
                logger.info("Stream started for model '%s'.", model)
                async for chunk in response.aiter_bytes():
                    yield chunk
        except httpx.RequestError as e:
            raise self._transport_error(e, model) from e
