"""Haptic feedback, rendered as short/long tone bursts on the audio device."""

import asyncio
import logging

import numpy as np

from soundscape.config import (
    BEEP_DURATIONS,
    BEEP_FREQUENCIES,
    BEEP_VOLUME,
    PLAYBACK_SAMPLE_RATE,
)
from soundscape.models import Haptic

logger = logging.getLogger(__name__)


def tone(kind: Haptic, sample_rate: int = PLAYBACK_SAMPLE_RATE) -> np.ndarray:
    """Sine burst for a pulse kind, with a short fade to avoid clicks."""
    freq = BEEP_FREQUENCIES[kind.value]
    duration = BEEP_DURATIONS[kind.value]
    t = np.arange(int(sample_rate * duration)) / sample_rate
    wave = BEEP_VOLUME * np.sin(2 * np.pi * freq * t)
    fade = min(len(wave) // 10, int(sample_rate * 0.01))
    if fade:
        ramp = np.linspace(0.0, 1.0, fade)
        wave[:fade] *= ramp
        wave[-fade:] *= ramp[::-1]
    return wave.astype(np.float32)


class HapticOutput:
    """Best-effort feedback channel. Failures are logged and swallowed."""

    def __init__(self, enabled: bool = True, sample_rate: int = PLAYBACK_SAMPLE_RATE):
        self.enabled = enabled
        self.sample_rate = sample_rate

    def _play_blocking(self, samples: np.ndarray) -> None:
        import sounddevice as sd
        # Own stream so the pulse does not cut off speech on the default one
        with sd.OutputStream(samplerate=self.sample_rate, channels=1, dtype="float32") as stream:
            stream.write(samples.reshape(-1, 1))

    async def pulse(self, kind: Haptic) -> None:
        if not self.enabled or kind == Haptic.NONE:
            return
        try:
            await asyncio.to_thread(self._play_blocking, tone(kind, self.sample_rate))
        except Exception as e:
            logger.warning("Haptic feedback error: %s", e)
