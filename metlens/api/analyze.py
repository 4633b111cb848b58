"""
Purpose:
- POST /api/analyze: the single gateway endpoint the front end talks to.
- Dispatches {action, payload} to the provider and returns its reshaped result.

Order of checks (each one short-circuits):
  405 non-POST (handled by the router + app exception handler)
  500 missing API key, before anything else is read
  400 body not a JSON object / unknown action / payload of the wrong shape
  500 provider or response-shape failure
"""

from __future__ import annotations
import json
import logging
from typing import Any, Dict
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from ..core.settings import Settings, get_settings
from ..gateway.errors import (
    INVALID_ACTION_MESSAGE,
    UNKNOWN_SERVER_ERROR,
    GatewayError,
    MissingApiKey,
    PayloadError,
)
from ..gateway.gemini import GeminiProvider
from ..gateway.schema import (
    KNOWN_ACTIONS,
    AnalyzeImageRequest,
    AudioResponse,
    gateway_request_adapter,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["gateway"])

def get_provider(cfg: Settings = Depends(get_settings)) -> GeminiProvider:
    if not cfg.api_key:
        raise MissingApiKey()
    return GeminiProvider(cfg)

def _format_errors(e: ValidationError) -> str:
    parts = []
    for err in e.errors():
        # drop the leading "payload" and the union tag from the location
        loc = [str(x) for x in err.get("loc", ()) if x not in ("payload", *KNOWN_ACTIONS)]
        parts.append(f"{'.'.join(loc) or 'payload'}: {err.get('msg', 'invalid')}")
    return "; ".join(parts)

async def _read_body(request: Request) -> Dict[str, Any]:
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        body = None
    if not isinstance(body, dict):
        raise PayloadError("Request body must be a JSON object")
    return body

@router.post("/api/analyze")
async def analyze(request: Request, provider: GeminiProvider = Depends(get_provider)):
    body = await _read_body(request)

    action = body.get("action")
    if action not in KNOWN_ACTIONS:
        return JSONResponse(status_code=400, content={"error": INVALID_ACTION_MESSAGE})

    try:
        req = gateway_request_adapter.validate_python({"action": action, "payload": body.get("payload")})
    except ValidationError as e:
        raise PayloadError(f"Invalid payload for {action}: {_format_errors(e)}") from e

    try:
        if isinstance(req, AnalyzeImageRequest):
            objects = await provider.analyze_image(req.payload.base64_image, req.payload.language)
            return JSONResponse(status_code=200, content=[o.model_dump() for o in objects])
        else:
            audio = await provider.generate_audio(req.payload.text)
            return JSONResponse(status_code=200, content=AudioResponse(audio=audio).model_dump())
    except GatewayError:
        raise
    except Exception as e:
        logger.exception("Unexpected failure in %s", action)
        return JSONResponse(status_code=500, content={"error": str(e) or UNKNOWN_SERVER_ERROR})
