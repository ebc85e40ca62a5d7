"""ASGI entry point for uvicorn.

Usage:
    uvicorn cachegate.asgi:create_asgi_app --factory --host 0.0.0.0 --port 1235
"""

from fastapi import FastAPI

from cachegate.config import GatewayConfig
from cachegate.logging_filters import configure_logging, install_uvicorn_access_log_filters
from cachegate.main import create_app


def create_asgi_app() -> FastAPI:
    """Build the app from config.json, secrets.yml and the environment."""
    config = GatewayConfig.from_json_file()
    configure_logging(config.log_level)
    install_uvicorn_access_log_filters()
    return create_app(config)
