# Common language: Environment/ops probe that surfaces version pins and provider config.
# Reports whether the API key is present, never its value.

from fastapi import APIRouter, Depends
from ..core.settings import Settings, get_settings
import sys, importlib

router = APIRouter(tags=["health"])

def _ver(modname: str) -> str:
    try:
        m = importlib.import_module(modname)
        return getattr(m, "__version__", "unknown")
    except Exception:
        return "not-installed"

@router.get("/healthz")
def healthz(cfg: Settings = Depends(get_settings)):
    return {
        "status": "ok",
        "python": sys.version.split()[0],
        "versions": {
            "fastapi": _ver("fastapi"),
            "uvicorn": _ver("uvicorn"),
            "pydantic_settings": _ver("pydantic_settings"),
            "httpx": _ver("httpx"),
            "numpy": _ver("numpy"),
        },
        "config": {
            "analysis_model": cfg.analysis_model,
            "tts_model": cfg.tts_model,
            "tts_voice": cfg.tts_voice,
            "max_objects": cfg.max_objects,
        },
        "env_keys_present": {
            "API_KEY": bool(cfg.api_key),
        },
    }
