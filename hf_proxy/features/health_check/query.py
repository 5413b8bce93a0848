from pydantic import BaseModel


class HealthCheckResponse(BaseModel):
    status: str
    timestamp: str
    token_configured: bool
    default_model: str
    prompt_strategy: str
