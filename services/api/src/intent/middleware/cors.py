"""CORS middleware configuration."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from intent.config import Settings


def setup_cors(app: FastAPI, settings: Settings) -> None:
    """Allow the web client origins; the wallet SDK sends apikey/x-client-info headers."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
        allow_headers=["authorization", "x-client-info", "apikey", "content-type", "x-request-id"],
        expose_headers=["X-Request-Id", "X-RateLimit-Remaining", "X-RateLimit-Limit"],
    )
