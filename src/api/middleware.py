"""Rate limiting, CORS and compression for the REST API."""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from core.config import HTTPConfig
from protocol.sse_server import get_allowed_origins

logger = logging.getLogger(__name__)

# Limits are read once; route decorators need them at import time
_limits = HTTPConfig.from_env()
limiter = Limiter(key_func=get_remote_address, default_limits=[_limits.rate_limit_default])
TOOL_RATE_LIMIT = _limits.rate_limit_tools

GZIP_MIN_SIZE = 1000


def setup_rate_limiting(app: FastAPI):
    """Attach the shared limiter; tool calls get the stricter TOOL_RATE_LIMIT."""
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)
    logger.info(f"Rate limits: default {_limits.rate_limit_default}, tools {TOOL_RATE_LIMIT}")


def setup_middleware(app: FastAPI, http_config: HTTPConfig):
    """Install CORS, GZip and rate limiting on the REST app."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_allowed_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        max_age=http_config.cors_preflight_max_age,
    )
    app.add_middleware(GZipMiddleware, minimum_size=GZIP_MIN_SIZE)
    setup_rate_limiting(app)
