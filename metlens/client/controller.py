"""
Purpose:
- State behind one photo/camera view: results, loading flag, error text, what is playing.
- Front ends render these fields; they call analyze() and play() and nothing else.

Notes:
- Each operation bumps its own generation counter. A response that comes back
  after a newer call started is dropped, and it does not clear state the newer
  call owns.
- Only one play() writes to the output at a time; a play that was superseded
  while waiting for its turn is dropped.
- The view owns its AudioOutput; close() (or leaving the async with block) releases it.
"""

from __future__ import annotations
import asyncio
import logging
from pathlib import Path
from typing import List, Optional, Union
from PIL import Image
from ..core.settings import settings
from ..gateway.schema import AppMode, DetectedObject, Language
from .audio import AudioOutput, play_audio
from .gateway_client import GatewayClient, GatewayClientError
from .imaging import encode_jpeg_base64, strip_data_url

logger = logging.getLogger(__name__)

UNKNOWN_ERROR = "An unknown error occurred."
PLAY_FAILED = "Could not play audio."

# str = base64 JPEG (data-URL prefix allowed); anything else is encoded first
ImageInput = Union[str, bytes, Path, Image.Image]

class LensController:
    def __init__(
        self,
        language: Language,
        mode: AppMode = AppMode.IMAGE,
        client: Optional[GatewayClient] = None,
        output: Optional[AudioOutput] = None,
    ):
        self.language = language
        self.mode = mode
        self.client = client or GatewayClient()
        self.output = output or AudioOutput()

        self.results: List[DetectedObject] = []
        self.is_loading = False
        self.error: Optional[str] = None
        self.playing_for: Optional[str] = None

        self._analyze_gen = 0
        self._play_gen = 0
        # playback is serialized; whoever waits on it re-checks its generation
        self._play_lock = asyncio.Lock()

    async def _to_base64(self, image: ImageInput) -> str:
        if isinstance(image, str):
            return strip_data_url(image)
        return await asyncio.to_thread(encode_jpeg_base64, image, settings.jpeg_quality)

    async def analyze(self, image: ImageInput) -> bool:
        """
        Send one photo/frame for object detection. Returns True if results were applied.
        """
        self._analyze_gen += 1
        gen = self._analyze_gen
        self.is_loading = True
        self.error = None
        self.results = []
        try:
            b64 = await self._to_base64(image)
            objects = await self.client.analyze_image_for_objects(b64, self.language)
            if gen != self._analyze_gen:
                logger.debug("Dropping stale analysis result (gen %d, current %d)", gen, self._analyze_gen)
                return False
            self.results = objects
            return True
        except Exception as e:
            logger.error("Analysis failed: %s", e)
            if gen == self._analyze_gen:
                self.error = str(e) if isinstance(e, GatewayClientError) else UNKNOWN_ERROR
            return False
        finally:
            if gen == self._analyze_gen:
                self.is_loading = False

    async def play(self, obj: DetectedObject) -> bool:
        """
        Fetch and play the pronunciation of obj.translation. Returns True if audio played.
        """
        if self.playing_for == obj.translation:
            return False
        self._play_gen += 1
        gen = self._play_gen
        self.playing_for = obj.translation
        try:
            audio = await self.client.generate_audio(obj.translation)
            if gen != self._play_gen:
                logger.debug("Dropping stale audio for %r", obj.translation)
                return False
            async with self._play_lock:
                if gen != self._play_gen:
                    logger.debug("Dropping superseded audio for %r", obj.translation)
                    return False
                await play_audio(audio, self.output)
            return True
        except Exception as e:
            logger.error("Could not play audio for %r: %s", obj.translation, e)
            if gen == self._play_gen:
                self.error = PLAY_FAILED
            return False
        finally:
            if gen == self._play_gen:
                self.playing_for = None

    def close(self) -> None:
        self.output.close()

    async def __aenter__(self) -> "LensController":
        return self

    async def __aexit__(self, *exc) -> None:
        self.close()
