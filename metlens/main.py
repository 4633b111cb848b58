"""
Purpose:
- FastAPI application factory and router mounts.
- Same-origin by default; CORS (POST only) is mounted only when origins are configured.
- Every error leaves the app as {"error": "..."}; that is the only shape the front end reads.
- Serve with: uvicorn metlens.main:app
"""

import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from .core.log_config import setup_logging
from .core.settings import settings
from .gateway.errors import GatewayError
from .api.analyze import router as analyze_router
from .api.health import router as health_router

logger = logging.getLogger(__name__)

async def _gateway_error_handler(request: Request, exc: GatewayError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc, exc_info=exc.__cause__ is not None)
    else:
        logger.warning("%s %s rejected: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})

async def _http_error_handler(request: Request, exc: StarletteHTTPException):
    logger.warning("%s %s -> %d", request.method, request.url.path, exc.status_code)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )

def create_app() -> FastAPI:
    setup_logging(settings.log_level)
    if not settings.api_key:
        logger.warning("API_KEY is not set; /api/analyze will answer 500 until it is configured")

    app = FastAPI(title="METLens Kids Gateway", version="0.1.0")
    if settings.cors_allow_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_allow_origins,
            allow_methods=["POST"],
            allow_headers=["Content-Type"],
        )
    app.add_exception_handler(GatewayError, _gateway_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)

    app.include_router(analyze_router)
    app.include_router(health_router)
    return app

app = create_app()
