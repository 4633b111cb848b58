"""
Purpose:
- Call the Gemini generateContent REST API for the two gateway actions.
- analyze_image: image + instruction -> schema-constrained JSON array of objects.
- generate_audio: "Say cheerfully: ..." -> base64 PCM16 (24kHz mono) from the TTS model.

Notes:
- The API key goes in the x-goog-api-key header, never in the URL, so httpx error
  messages (which include the URL) cannot leak it.
- One short-lived AsyncClient per call; nothing is kept between requests.
- No retries: a failure is surfaced once as ProviderError.
"""

from __future__ import annotations
import json
import logging
from typing import Any, Dict, List, Optional
import httpx
from pydantic import ValidationError
from ..core.settings import Settings
from .errors import ProviderError
from .schema import DetectedObject, Language, detected_objects_adapter

logger = logging.getLogger(__name__)

# Schema the analysis model must answer with (Gemini OpenAPI subset, upper-case types)
OBJECTS_RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "name": {"type": "STRING", "description": "The English name of the object."},
            "translation": {"type": "STRING", "description": "The translation of the object name in the target language."},
            "pronunciation": {"type": "STRING", "description": "A simple phonetic guide for the translated word."},
        },
        "required": ["name", "translation", "pronunciation"],
    },
}

def build_analysis_prompt(language: Language | str, max_objects: int = 5) -> str:
    lang = language.value if isinstance(language, Language) else str(language)
    return (
        "You are an expert in identifying objects for a children's language learning app. "
        f"Analyze the provided image. Identify up to {max_objects} main objects that a child would be interested in. "
        f"For each object, provide its name in English, and its translation in {lang}. "
        f"Also provide a simple phonetic pronunciation guide for the {lang} word. "
        "Respond ONLY with the JSON array."
    )

def build_speech_prompt(text: str) -> str:
    return f"Say cheerfully: {text}"

def _analysis_body(base64_image: str, prompt: str) -> Dict[str, Any]:
    return {
        "contents": [{
            "parts": [
                {"text": prompt},
                {"inlineData": {"mimeType": "image/jpeg", "data": base64_image}},
            ]
        }],
        "generationConfig": {
            "responseMimeType": "application/json",
            "responseSchema": OBJECTS_RESPONSE_SCHEMA,
        },
    }

def _speech_body(prompt: str, voice: str) -> Dict[str, Any]:
    return {
        "contents": [{"parts": [{"text": prompt}]}],
        "generationConfig": {
            "responseModalities": ["AUDIO"],
            "speechConfig": {"voiceConfig": {"prebuiltVoiceConfig": {"voiceName": voice}}},
        },
    }

def _first_parts(data: Dict[str, Any]) -> List[Dict[str, Any]]:
    candidates = data.get("candidates") or []
    if not candidates:
        feedback = data.get("promptFeedback") or {}
        reason = feedback.get("blockReason")
        raise ProviderError(f"Provider returned no candidates{f' (blocked: {reason})' if reason else ''}.")
    content = candidates[0].get("content") or {}
    return content.get("parts") or []

def extract_text(data: Dict[str, Any]) -> str:
    """
    Join the text parts of the first candidate (the SDK's `response.text`).
    """
    texts = [p["text"] for p in _first_parts(data) if isinstance(p.get("text"), str)]
    if not texts:
        raise ProviderError("Provider response contained no text.")
    return "".join(texts).strip()

def extract_inline_audio(data: Dict[str, Any]) -> str:
    for part in _first_parts(data):
        inline = part.get("inlineData") or part.get("inline_data") or {}
        payload = inline.get("data")
        if payload:
            return payload
    raise ProviderError("No audio data received from API.")

def parse_objects(text: str, max_objects: int = 5) -> List[DetectedObject]:
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise ProviderError(f"Provider returned malformed JSON: {e.msg}") from e
    if not isinstance(raw, list):
        raise ProviderError("Provider returned JSON that is not an array.")
    try:
        objects = detected_objects_adapter.validate_python(raw)
    except ValidationError as e:
        raise ProviderError(f"Provider returned objects of the wrong shape ({e.error_count()} errors).") from e
    return objects[:max_objects]

class GeminiProvider:
    def __init__(self, cfg: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        if not cfg.api_key:
            # callers check first; this keeps the class honest when built directly
            raise ProviderError("Provider API key is not configured.")
        self.cfg = cfg
        self._transport = transport

    def _url(self, model: str) -> str:
        return f"{self.cfg.provider_base_url.rstrip('/')}/models/{model}:generateContent"

    async def _generate(self, model: str, body: Dict[str, Any]) -> Dict[str, Any]:
        headers = {"x-goog-api-key": self.cfg.api_key or "", "Content-Type": "application/json"}
        try:
            async with httpx.AsyncClient(timeout=self.cfg.provider_timeout_s, transport=self._transport) as client:
                r = await client.post(self._url(model), json=body, headers=headers)
                r.raise_for_status()
                data = r.json()
        except httpx.HTTPStatusError as e:
            raise ProviderError(f"Provider request failed with status {e.response.status_code}.") from e
        except httpx.TimeoutException as e:
            raise ProviderError("Provider request timed out.") from e
        except httpx.HTTPError as e:
            raise ProviderError(f"Provider request failed: {e.__class__.__name__}.") from e
        except ValueError as e:
            raise ProviderError("Provider returned a non-JSON body.") from e
        if not isinstance(data, dict):
            raise ProviderError("Provider returned an unexpected body.")
        return data

    async def analyze_image(self, base64_image: str, language: Language | str) -> List[DetectedObject]:
        prompt = build_analysis_prompt(language, self.cfg.max_objects)
        data = await self._generate(self.cfg.analysis_model, _analysis_body(base64_image, prompt))
        objects = parse_objects(extract_text(data), self.cfg.max_objects)
        logger.info("analyzeImage: %d objects (%s)", len(objects), getattr(language, "value", language))
        return objects

    async def generate_audio(self, text: str) -> str:
        data = await self._generate(self.cfg.tts_model, _speech_body(build_speech_prompt(text), self.cfg.tts_voice))
        audio = extract_inline_audio(data)
        logger.info("generateAudio: %d base64 chars for %d chars of text", len(audio), len(text))
        return audio
