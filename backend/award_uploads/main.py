"""Award Uploads Backend Application.

This is the main entry point for the award image upload service.  Award
images are attached to award entities by the admin UI; this service stores
them locally or on a remote image store and hands back the value to save.

Modules:
    - uploads: staging, persistence strategies, registry and cleanup
    - config: YAML settings loader
"""
import logging
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI

from award_uploads.config import AppSettings, get_config
from award_uploads.uploads.capability import S3ImageCapability, set_remote_capability
from award_uploads.uploads.router import create_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

# Silence verbose third-party loggers.
# botocore.auth logs the full SigV4 canonical request, including
# x-amz-security-token, which leaks credentials into the console.
for _noisy in (
    "botocore",
    "boto3",
    "s3transfer",
    "urllib3",
    "urllib3.connectionpool",
    "httpx",
    "httpcore",
):
    logging.getLogger(_noisy).setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


def register_remote_capability(config: AppSettings) -> None:
    """Register the configured remote image capability, if any."""
    remote = config.remote
    if not remote.enabled:
        logger.info("Remote image storage disabled; uploads stay local.")
        return

    if not remote.bucket:
        logger.warning("Remote image storage enabled but no bucket configured; uploads stay local.")
        return

    aws = config.secrets.aws
    set_remote_capability(
        S3ImageCapability(
            bucket=remote.bucket,
            prefix=remote.prefix,
            public_base_url=remote.public_base_url,
            aws_access_key_id=aws.access_key_id or None,
            aws_secret_access_key=aws.secret_access_key or None,
            region_name=aws.region,
        )
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup/shutdown events."""
    # Startup
    config = app.state.config_source()

    # Apply configured log level to root logger so that
    # `logging.level: "debug"` in awards.settings.yaml activates DEBUG output.
    configured_level = getattr(logging, config.logging.level.upper(), None)
    if configured_level is not None:
        logging.getLogger().setLevel(configured_level)
        logger.info("Root logger level set to %s", config.logging.level.upper())

    register_remote_capability(config)

    yield  # Application runs here

    # Shutdown
    logger.info("Application shutdown complete")


def create_app(config: Optional[AppSettings] = None) -> FastAPI:
    """Build the FastAPI application.

    With no ``config`` the app follows the process-wide settings from
    ``get_config()``; otherwise it is bound to ``config`` for its lifetime.
    """
    config_source: Callable[[], AppSettings] = get_config
    if config is not None:
        config_source = lambda: config

    application = FastAPI(
        title="Award Uploads API",
        description="Stores award images locally or on a remote image store",
        version="0.1.0",
        lifespan=lifespan,
    )
    application.state.config_source = config_source
    application.include_router(create_router(config_source))

    @application.get("/health")
    async def health() -> dict:
        """Health check endpoint.

        Returns:
            dict: Status object indicating the server is running.
        """
        return {"status": "ok"}

    return application


app = create_app()
