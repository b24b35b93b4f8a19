"""Centralised CORS configuration."""

import os
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware


DEFAULT_ORIGIN = "http://localhost:3000"


def get_allowed_origins() -> list[str]:
    """Read CORS_ORIGIN, which may hold a comma-separated list."""
    raw = os.getenv("CORS_ORIGIN", DEFAULT_ORIGIN)
    origins = []
    for origin in raw.split(","):
        clean = origin.strip().rstrip("/")
        if clean and clean not in origins:
            origins.append(clean)
    return origins


def setup_cors(app: FastAPI) -> None:
    """Add CORS middleware to a FastAPI app."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_allowed_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
