"""Fixed-window microphone recording to a temporary WAV file."""

import asyncio
import logging
import os
import tempfile

import numpy as np
from scipy.io.wavfile import write

from soundscape.config import RECORD_DURATION_MS, SAMPLE_RATE
from soundscape.errors import RecordingFailed

logger = logging.getLogger(__name__)


class MicrophoneRecorder:
    """Records mono 16-bit audio; the window always runs to completion."""

    def __init__(self, sample_rate: int = SAMPLE_RATE):
        self.sample_rate = sample_rate

    async def record(self, duration_ms: int = RECORD_DURATION_MS) -> str:
        """Record for duration_ms and return the path of the WAV clip."""
        frames = int(self.sample_rate * duration_ms / 1000)
        try:
            import sounddevice as sd
            buffer = sd.rec(frames, samplerate=self.sample_rate, channels=1, dtype="int16")
        except Exception as e:
            raise RecordingFailed(f"Failed to start recording: {e}") from e

        logger.info("🎤 Recording started")
        await asyncio.sleep(duration_ms / 1000)

        path = None
        try:
            await asyncio.to_thread(sd.wait)
            audio = np.asarray(buffer, dtype=np.int16)
            fd, path = tempfile.mkstemp(prefix="soundscape_", suffix=".wav")
            os.close(fd)
            write(path, self.sample_rate, audio)
        except Exception as e:
            if path is not None:
                try:
                    os.remove(path)
                except OSError as cleanup_error:
                    logger.warning("Could not delete partial clip %s: %s", path, cleanup_error)
            raise RecordingFailed(f"Failed to record audio: {e}") from e

        logger.info("🎤 Recording stopped: %s", path)
        return path
