"""Sounddevice-backed completion tone."""

import logging
from typing import Optional

import numpy as np
import sounddevice as sd

from .alerts import AlertError

DEFAULT_SAMPLE_RATE_HZ = 44_100


def synthesize_tone(
    frequency_hz: float,
    duration_seconds: float,
    sample_rate_hz: int = DEFAULT_SAMPLE_RATE_HZ,
) -> np.ndarray:
    """Return a mono sine tone that decays exponentially to near silence."""
    sample_count = max(1, int(duration_seconds * sample_rate_hz))
    t = np.arange(sample_count, dtype=np.float32) / sample_rate_hz
    envelope = np.geomspace(1.0, 1e-5, num=sample_count).astype(np.float32)
    return (np.sin(2.0 * np.pi * frequency_hz * t) * envelope).astype(np.float32)


class SoundDeviceToneOutput:
    """Plays a short decaying sine through a selected sounddevice output."""
    def __init__(
        self,
        *,
        frequency_hz: float = 440.0,
        duration_seconds: float = 1.0,
        volume: float = 0.5,
        output_device_index: Optional[int] = None,
        sample_rate_hz: int = DEFAULT_SAMPLE_RATE_HZ,
        logger: Optional[logging.Logger] = None,
    ):
        self._output_device_index = output_device_index
        self._sample_rate_hz = sample_rate_hz
        self._logger = logger or logging.getLogger(__name__)
        self._wave = synthesize_tone(frequency_hz, duration_seconds, sample_rate_hz) * volume

    def play_tone(self) -> None:
        try:
            # Non-blocking; playback continues after this returns.
            sd.play(
                self._wave,
                samplerate=self._sample_rate_hz,
                device=self._output_device_index,
            )
        except Exception as error:
            raise AlertError(f"Tone playback failed: {error}") from error
        self._logger.debug("Playing %d tone samples", len(self._wave))
