"""
Audio playback for synthesized pronunciations.

The gateway returns raw PCM: signed 16-bit little-endian, mono, 24 kHz, base64
encoded, with no container header. This module turns that into float32 samples
and plays them on the default output device.

Malformed payloads (bad base64, empty, odd number of bytes) raise
AudioDecodeError instead of producing noise.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Optional

import numpy as np

logger = logging.getLogger(__name__)

SAMPLE_RATE = 24000
CHANNELS = 1
PCM16_SCALE = 32768.0


class AudioDecodeError(ValueError):
    """Raised when a PCM16 payload cannot be decoded."""


@dataclass(frozen=True)
class AudioBuffer:
    """Decoded mono audio ready for playback."""

    samples: np.ndarray
    sample_rate: int = SAMPLE_RATE
    channels: int = CHANNELS

    @property
    def frame_count(self) -> int:
        return int(self.samples.shape[0])

    @property
    def duration(self) -> float:
        """Length in seconds."""
        return self.frame_count / float(self.sample_rate)


def decode_base64(data: str) -> bytes:
    try:
        raw = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise AudioDecodeError(f"Audio payload is not valid base64: {e}") from e
    if not raw:
        raise AudioDecodeError("Audio payload is empty")
    return raw


def pcm16_to_float32(raw: bytes) -> np.ndarray:
    """
    Reinterpret little-endian int16 PCM as float32 in [-1.0, 1.0).

    Args:
        raw: PCM16 bytes, length must be even

    Returns:
        1-D float32 array, one value per sample
    """
    if len(raw) % 2:
        raise AudioDecodeError(f"PCM16 payload has an odd byte count ({len(raw)})")
    ints = np.frombuffer(raw, dtype="<i2")
    return ints.astype(np.float32) / PCM16_SCALE


def decode_audio(data: str) -> AudioBuffer:
    samples = pcm16_to_float32(decode_base64(data))
    return AudioBuffer(samples=samples, sample_rate=SAMPLE_RATE, channels=CHANNELS)


class AudioOutput:
    """
    Handle to the default output device, owned by one view.

    The sounddevice stream is opened on first play and reused afterwards; a
    stopped stream is started again before writing. Use as a context manager
    (sync or async) so the stream is closed when the owning view goes away.
    """

    def __init__(
        self,
        device: Optional[Any] = None,
        stream_factory: Optional[Callable[..., Any]] = None,
    ):
        """
        Args:
            device: sounddevice device index or name, None for the system default
            stream_factory: Callable building the output stream, defaults to
                sounddevice.OutputStream (imported on first play so decoding
                works on machines without PortAudio)
        """
        self.sample_rate = SAMPLE_RATE
        self.device = device
        self._stream_factory = stream_factory
        self._stream = None
        self._closed = False
        # one PortAudio blocking write at a time
        self._write_lock = threading.Lock()

    @property
    def is_open(self) -> bool:
        return self._stream is not None

    def _ensure_stream(self):
        if self._closed:
            raise RuntimeError("AudioOutput is closed")

        if self._stream is None:
            factory = self._stream_factory
            if factory is None:
                import sounddevice as sd

                factory = sd.OutputStream
            self._stream = factory(
                samplerate=self.sample_rate,
                channels=CHANNELS,
                dtype="float32",
                device=self.device,
            )
            logger.debug("Opened audio output at %d Hz", self.sample_rate)
        if self._stream.stopped:
            # equivalent of resuming a suspended context
            self._stream.start()
        return self._stream

    def play_blocking(self, buffer: AudioBuffer) -> None:
        if buffer.sample_rate != self.sample_rate:
            raise ValueError(
                f"Buffer is {buffer.sample_rate} Hz but the output runs at {self.sample_rate} Hz"
            )
        with self._write_lock:
            stream = self._ensure_stream()
            stream.write(buffer.samples.reshape(-1, CHANNELS))
        logger.debug("Played %.2fs of audio", buffer.duration)

    async def play(self, buffer: AudioBuffer) -> None:
        await asyncio.to_thread(self.play_blocking, buffer)

    def close(self) -> None:
        with self._write_lock:
            if self._stream is not None:
                try:
                    self._stream.stop()
                    self._stream.close()
                except Exception as e:
                    logger.error("Error closing audio stream: %s", e)
                self._stream = None
            self._closed = True

    def __enter__(self) -> "AudioOutput":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    async def __aenter__(self) -> "AudioOutput":
        return self

    async def __aexit__(self, *exc) -> None:
        self.close()


async def play_audio(data: str, output: AudioOutput) -> AudioBuffer:
    """Decode a base64 PCM16 payload and play it through ``output``."""
    buffer = decode_audio(data)
    await output.play(buffer)
    return buffer
