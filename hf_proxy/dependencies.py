#!/usr/bin/env python3
"""
Dependency provider functions for the application.
"""

from fastapi import Request
import httpx

from hf_proxy.shared.config import AppConfig


def get_config(request: Request) -> AppConfig:
    """Returns the frozen application configuration."""
    return request.app.state.config


def get_http_client(request: Request) -> httpx.AsyncClient:
    """Returns the shared httpx.AsyncClient instance."""
    return request.app.state.http_client
