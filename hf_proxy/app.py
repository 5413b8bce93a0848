#!/usr/bin/env python3
"""
Hugging Face OpenAI Proxy
Translates OpenAI chat-completion requests into Hugging Face Inference API calls.
"""

from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI

from hf_proxy import __version__
from hf_proxy.shared.config import AppConfig, load_config, logger
from hf_proxy.shared.errors import register_exception_handlers
from hf_proxy.shared.middleware import install_middleware
from hf_proxy.shared.utils import mask_key
from hf_proxy.features.chat_completions.endpoints import router as chat_completions_router
from hf_proxy.features.health_check.endpoints import router as health_check_router
from hf_proxy.features.metrics.endpoints import router as metrics_router


def build_http_client(
    config: AppConfig, transport: Optional[httpx.AsyncBaseTransport] = None
) -> httpx.AsyncClient:
    client_kwargs = {"timeout": config.huggingface.request_timeout}
    if config.request_proxy.enabled and config.request_proxy.url:
        client_kwargs["proxy"] = config.request_proxy.url
        logger.info("Using proxy for httpx client: %s", config.request_proxy.url)
    if transport is not None:
        client_kwargs["transport"] = transport
    return httpx.AsyncClient(**client_kwargs)


def create_app(
    config: Optional[AppConfig] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Build the application around one frozen configuration."""
    config = config or load_config()

    @asynccontextmanager
    async def lifespan(app_: FastAPI):
        """Manage application lifespan resources."""
        app_.state.http_client = build_http_client(config, transport)
        logger.info(
            "Application startup complete (default model: %s, token: %s, prompt strategy: %s)",
            config.huggingface.default_model,
            mask_key(config.huggingface.token),
            config.huggingface.prompt_strategy.value,
        )
        yield
        await app_.state.http_client.aclose()
        logger.info("Application shutdown complete")

    app = FastAPI(
        title="Hugging Face OpenAI Proxy",
        description="Serves OpenAI-style chat completions backed by the Hugging Face Inference API",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config

    app.include_router(chat_completions_router, prefix="/v1", tags=["Proxy"])
    app.include_router(health_check_router, tags=["Monitoring"])
    app.include_router(metrics_router)

    register_exception_handlers(app)
    install_middleware(app)
    return app
