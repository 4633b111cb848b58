"""
Purpose:
- Pydantic models for the /api/analyze contract so every action is validated at the boundary.
- GatewayRequest is a tagged variant on `action`; each variant owns its payload shape.
"""

from __future__ import annotations
import base64
import binascii
from enum import Enum
from typing import Annotated, List, Literal, Union
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

class Language(str, Enum):
    ARABIC = "Arabic"
    MALAY = "Malay"

class AppMode(str, Enum):
    HOME = "home"
    IMAGE = "image"
    VIDEO = "video"

class DetectedObject(BaseModel):
    # extra keys from the model are dropped; the three fields are all that leave the gateway
    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = Field(..., description="English name of the object")
    translation: str = Field(..., description="Name in the target language")
    pronunciation: str = Field(..., description="Simple phonetic guide for the translation")

class AnalyzeImagePayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    base64_image: str = Field(..., alias="base64Image", min_length=1, description="JPEG bytes, base64, no data-URL prefix")
    language: Language

    @field_validator("base64_image")
    @classmethod
    def _must_be_base64(cls, v: str) -> str:
        try:
            base64.b64decode(v, validate=True)
        except (binascii.Error, ValueError):
            raise ValueError("base64Image is not valid base64")
        return v

class GenerateAudioPayload(BaseModel):
    text: str = Field(..., min_length=1, description="Text to pronounce")

class AnalyzeImageRequest(BaseModel):
    action: Literal["analyzeImage"]
    payload: AnalyzeImagePayload

class GenerateAudioRequest(BaseModel):
    action: Literal["generateAudio"]
    payload: GenerateAudioPayload

GatewayRequest = Annotated[
    Union[AnalyzeImageRequest, GenerateAudioRequest],
    Field(discriminator="action"),
]

gateway_request_adapter: TypeAdapter[GatewayRequest] = TypeAdapter(GatewayRequest)

KNOWN_ACTIONS = ("analyzeImage", "generateAudio")

detected_objects_adapter: TypeAdapter[List[DetectedObject]] = TypeAdapter(List[DetectedObject])

class AudioResponse(BaseModel):
    audio: str = Field(..., min_length=1, description="base64 PCM16 mono 24kHz")

class ErrorResponse(BaseModel):
    error: str
