"""Application entry point and bootstrap.

This module builds the S3 client, object store and artifact service from
configuration, wires them into a FastAPI app and runs it under uvicorn.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import boto3
from botocore.config import Config as BotoConfig
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cachegate import __version__
from cachegate.config import GatewayConfig
from cachegate.logging_filters import configure_logging, install_uvicorn_access_log_filters
from cachegate.observability.error_log_file import setup_error_log_file
from cachegate.routers import create_artifact_router, register_error_handlers
from cachegate.services import ArtifactService
from cachegate.storage import ObjectStore

logger = logging.getLogger(__name__)


class Application:
    """Main application container.

    Owns the S3 client and the services built on it. Nothing here is
    mutated per request.
    """

    def __init__(self, config: GatewayConfig) -> None:
        """Initialize the application with configuration.

        Args:
            config: Application configuration.
        """
        self.config = config

        # Initialized in setup
        self.s3_client = None
        self.object_store: ObjectStore | None = None
        self.artifact_service: ArtifactService | None = None
        self.fastapi_app: FastAPI | None = None

    def _create_s3_client(self):
        """Create S3 client (custom endpoint such as MinIO, or AWS).

        Returns:
            Boto3 S3 client.
        """
        kwargs = {
            "region_name": self.config.aws_region,
            "aws_access_key_id": self.config.aws_access_key_id,
            "aws_secret_access_key": self.config.aws_secret_access_key,
        }
        if self.config.s3_endpoint_url:
            logger.info("Using S3-compatible endpoint at %s", self.config.s3_endpoint_url)
            return boto3.client(
                "s3",
                endpoint_url=self.config.s3_endpoint_url,
                config=BotoConfig(s3={"addressing_style": "path"}),
                **kwargs,
            )
        logger.info("Using AWS S3 in region %s", self.config.aws_region)
        return boto3.client("s3", **kwargs)

    def setup(self) -> None:
        """Initialize the storage client and services."""
        logger.info("Setting up application components...")

        setup_error_log_file(self.config)

        self.s3_client = self._create_s3_client()
        self.object_store = ObjectStore(self.s3_client, self.config.s3_bucket_name)
        self.artifact_service = ArtifactService(
            self.object_store,
            public_url=self.config.public_url,
        )
        logger.info("Artifact service initialized (bucket=%s)", self.config.s3_bucket_name)

    def create_fastapi_app(self) -> FastAPI:
        """Create and configure FastAPI application.

        Returns:
            Configured FastAPI application.
        """
        if self.artifact_service is None:
            raise RuntimeError("Application not set up")

        @asynccontextmanager
        async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
            """Manage application lifespan."""
            logger.info("Remote cache gateway starting...")
            yield
            self.shutdown()

        self.fastapi_app = FastAPI(
            title="cachegate",
            description="Remote build cache gateway backed by S3",
            version=__version__,
            lifespan=lifespan,
        )

        self.fastapi_app.add_middleware(
            CORSMiddleware,
            allow_origins=self.config.cors_allow_origins,
            allow_methods=["*"],
            allow_headers=["*"],
        )
        register_error_handlers(self.fastapi_app)

        self.fastapi_app.include_router(
            create_artifact_router(
                self.artifact_service,
                api_token=self.config.turbo_api_token,
            )
        )
        logger.info("Artifact router registered")

        @self.fastapi_app.get("/health")
        async def health_check() -> dict:
            """Health check endpoint."""
            return {"status": "healthy"}

        return self.fastapi_app

    def shutdown(self) -> None:
        """Release the S3 client's connection pool."""
        logger.info("Shutting down...")
        if self.s3_client is not None:
            self.s3_client.close()
            self.s3_client = None
        logger.info("Shutdown complete")


def create_app(config: GatewayConfig | None = None) -> FastAPI:
    """Create the configured FastAPI app.

    Args:
        config: Optional configuration. If not provided, loads from
                config.json and secrets.yml with environment overrides.

    Returns:
        FastAPI application ready to serve.
    """
    if config is None:
        config = GatewayConfig.from_json_file()

    application = Application(config)
    application.setup()
    return application.create_fastapi_app()


async def main() -> None:
    """Load configuration and serve until interrupted."""
    import uvicorn

    config = GatewayConfig.from_json_file()
    configure_logging(config.log_level)
    logger.info("Configuration loaded")

    app = create_app(config)

    uvicorn_config = uvicorn.Config(
        app,
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )
    # Ensure Uvicorn logging is configured, then suppress healthcheck access logs.
    uvicorn_config.load()
    install_uvicorn_access_log_filters()

    logger.info("Server running on http://%s:%d", config.host, config.port)
    await uvicorn.Server(uvicorn_config).serve()


def run() -> None:
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
