#!/usr/bin/env python3
"""
Hugging Face OpenAI Proxy
Entry point: loads configuration once and serves the app with uvicorn.
"""

import sys

import uvicorn

from hf_proxy.app import create_app
from hf_proxy.shared.config import ConfigError, load_config, setup_logging
from hf_proxy.shared.utils import get_local_ip


def main() -> None:
    try:
        config = load_config()
    except ConfigError as e:
        print(e)
        sys.exit(1)

    logger = setup_logging(config)
    if not config.token_configured:
        logger.warning("HF_TOKEN is not set; requests must carry their own bearer token.")

    host = config.server.host
    port = config.server.port

    display_host = get_local_ip() if host == "0.0.0.0" else host
    logger.warning("Starting Hugging Face OpenAI Proxy on %s:%s", host, port)
    logger.warning("API URL: http://%s:%s/v1", display_host, port)
    logger.warning("Metrics: http://%s:%s/metrics", display_host, port)

    log_config = uvicorn.config.LOGGING_CONFIG
    http_log_level = config.server.http_log_level.upper()
    log_config["loggers"]["uvicorn.access"]["level"] = http_log_level

    uvicorn.run(
        create_app(config),
        host=host,
        port=port,
        log_config=log_config,
        timeout_graceful_shutdown=30,
        server_header=False
    )


if __name__ == "__main__":
    main()
