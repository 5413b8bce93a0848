#!/usr/bin/env python3
"""
Configuration module for the Hugging Face OpenAI proxy.
Loads settings from an optional YAML file, applies environment overrides
and validates everything with Pydantic.
"""

import os
import logging
from enum import Enum
from typing import Any, Dict, Mapping, Optional

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

CONFIG_FILE = "config.yml"

logger = logging.getLogger("hf-proxy")


class ConfigError(Exception):
    """Raised when the configuration file or environment is invalid."""


class PromptStrategy(str, Enum):
    LAST_MESSAGE = "last_message"
    ROLE_CONCATENATED = "role_concatenated"
    PASSTHROUGH = "passthrough"


class ServerConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"
    http_log_level: str = "INFO"


class HuggingFaceConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    token: str = ""
    base_url: str = "https://api-inference.huggingface.co/models"
    default_model: str = "google/gemma-2-2b-it"
    prompt_strategy: PromptStrategy = PromptStrategy.LAST_MESSAGE
    request_timeout: float = 120.0


class RequestProxyConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    enabled: bool = False
    url: Optional[str] = None


class AppConfig(BaseModel):
    """Immutable application configuration, built once at process entry."""

    model_config = ConfigDict(frozen=True)

    server: ServerConfig = ServerConfig()
    huggingface: HuggingFaceConfig = HuggingFaceConfig()
    request_proxy: RequestProxyConfig = RequestProxyConfig()

    @property
    def token_configured(self) -> bool:
        return bool(self.huggingface.token)


# Environment variable -> (section, field)
ENV_OVERRIDES = {
    "HOST": ("server", "host"),
    "PORT": ("server", "port"),
    "LOG_LEVEL": ("server", "log_level"),
    "HF_TOKEN": ("huggingface", "token"),
    "HF_API_BASE_URL": ("huggingface", "base_url"),
    "DEFAULT_MODEL": ("huggingface", "default_model"),
    "PROMPT_STRATEGY": ("huggingface", "prompt_strategy"),
    "REQUEST_TIMEOUT": ("huggingface", "request_timeout"),
}


def _read_config_file(path: str) -> Dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as file:
            data = yaml.safe_load(file) or {}
    except FileNotFoundError:
        return {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Error parsing {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file {path} must contain a mapping")
    return data


def load_config(
    path: Optional[str] = None, environ: Optional[Mapping[str, str]] = None
) -> AppConfig:
    """Load and validate configuration with Pydantic models."""
    environ = os.environ if environ is None else environ
    path = path or environ.get("HF_PROXY_CONFIG", CONFIG_FILE)
    config_data = _read_config_file(path)

    for env_name, (section, field) in ENV_OVERRIDES.items():
        if env_name in environ and environ[env_name] != "":
            config_data.setdefault(section, {})[field] = environ[env_name]

    if environ.get("HTTP_PROXY_URL"):
        proxy = config_data.setdefault("request_proxy", {})
        proxy["enabled"] = True
        proxy["url"] = environ["HTTP_PROXY_URL"]

    try:
        return AppConfig(**config_data)
    except ValidationError as e:
        raise ConfigError(f"Error in configuration: {e}") from e


def setup_logging(config_: AppConfig) -> logging.Logger:
    """Configure logging based on validated configuration."""
    log_level = config_.server.log_level
    log_level_int = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level_int,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    logger.setLevel(log_level_int)
    logger.info("Logging level set to %s", log_level)
    return logger
