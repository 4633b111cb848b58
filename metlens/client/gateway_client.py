"""
Purpose:
- Client side of /api/analyze: post {action, payload}, read the JSON answer.
- Front ends never see the provider or its key; they only talk to the gateway.

Notes:
- Failures collapse to one generic message per operation (GatewayClientError);
  the underlying cause is logged and chained.
"""

from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional
import httpx
from pydantic import ValidationError
from ..core.settings import settings
from ..gateway.schema import DetectedObject, Language, detected_objects_adapter

logger = logging.getLogger(__name__)

ANALYZE_FAILED = "Failed to analyze image. Please try again."
AUDIO_FAILED = "Failed to generate audio pronunciation."

class GatewayClientError(Exception):
    pass

class GatewayClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        path: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.gateway_base_url).rstrip("/")
        self.path = path or settings.gateway_path
        self.timeout = timeout if timeout is not None else settings.gateway_timeout_s
        self._transport = transport

    async def _post(self, action: str, payload: Dict[str, Any]) -> Any:
        async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self._transport) as client:
            r = await client.post(self.path, json={"action": action, "payload": payload})

        if r.is_error:
            try:
                err = r.json()
            except ValueError:
                err = {"error": "An unknown error occurred."}
            msg = err.get("error") if isinstance(err, dict) else None
            raise GatewayClientError(msg or f"Request failed with status {r.status_code}")
        return r.json()

    async def analyze_image_for_objects(self, base64_image: str, language: Language | str) -> List[DetectedObject]:
        lang = language.value if isinstance(language, Language) else language
        try:
            result = await self._post("analyzeImage", {"base64Image": base64_image, "language": lang})
            return detected_objects_adapter.validate_python(result)
        except (GatewayClientError, httpx.HTTPError, ValidationError, ValueError) as e:
            logger.error("Error analyzing image: %s", e)
            raise GatewayClientError(ANALYZE_FAILED) from e

    async def generate_audio(self, text: str) -> str:
        try:
            result = await self._post("generateAudio", {"text": text})
            audio = result.get("audio") if isinstance(result, dict) else None
            if not audio:
                raise GatewayClientError("No audio data received from server.")
            return audio
        except (GatewayClientError, httpx.HTTPError, ValueError) as e:
            logger.error("Error generating audio: %s", e)
            raise GatewayClientError(AUDIO_FAILED) from e
