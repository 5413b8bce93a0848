from datetime import datetime, timezone

from fastapi import Depends

from hf_proxy.dependencies import get_config
from hf_proxy.shared.config import AppConfig
from .query import HealthCheckResponse


class HealthCheckHandler:
    """Reports liveness without contacting the inference API."""

    def __init__(self, config: AppConfig = Depends(get_config)):
        self._config = config

    async def handle(self) -> HealthCheckResponse:
        return HealthCheckResponse(
            status="ok",
            timestamp=datetime.now(timezone.utc).isoformat(),
            token_configured=self._config.token_configured,
            default_model=self._config.huggingface.default_model,
            prompt_strategy=self._config.huggingface.prompt_strategy.value,
        )
