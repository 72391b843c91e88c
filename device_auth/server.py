"""
Device authorization server.

Issues device codes and user codes for the OAuth 2.0 Device Authorization Grant.
"""

import argparse
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import settings
from .core.dependencies import get_code_store
from .core.exception_handler import register_exception_handlers
from .routes.device_authorization import router as device_authorization_router
from .services.expiry_sweeper import ExpirySweeper

settings.configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    sweeper = None
    if settings.device_code_sweep_interval_seconds > 0:
        sweeper = ExpirySweeper(get_code_store(), settings.device_code_sweep_interval_seconds)
        sweeper.start()
    app.state.sweeper = sweeper
    yield
    if sweeper is not None:
        await sweeper.stop()


# Create FastAPI app
api_prefix = settings.auth_server_api_prefix.rstrip("/") if settings.auth_server_api_prefix else ""
logger.info(f"Device auth server API prefix: '{api_prefix}'")

app = FastAPI(
    title="Device Authorization Server",
    description="OAuth 2.0 Device Authorization Grant: device code and user code issuance",
    version="0.1.0",
    docs_url=f"{api_prefix}/docs",
    redoc_url=f"{api_prefix}/redoc",
    openapi_url=f"{api_prefix}/openapi.json",
    lifespan=lifespan,
)

# Parse CORS origins from settings (comma-separated list or "*")
cors_origins_list = (
    [origin.strip() for origin in settings.cors_origins.split(",")] if settings.cors_origins != "*" else ["*"]
)
logger.info(f"CORS origins configured: {cors_origins_list}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(device_authorization_router, prefix=api_prefix, tags=["device-authorization"])


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "device-auth-server"}


def parse_arguments():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Device Authorization Server")

    parser.add_argument(
        "--host",
        type=str,
        default="0.0.0.0",
        help="Host for the server to listen on (default: 0.0.0.0)",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=8888,
        help="Port for the server to listen on (default: 8888)",
    )

    return parser.parse_args()


def main():
    """Run the server"""
    args = parse_arguments()

    logger.info(f"Starting device auth server on {args.host}:{args.port}")

    uvicorn.run(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
