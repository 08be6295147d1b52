"""Text-to-speech - ElevenLabs with local pyttsx3 fallback."""

import asyncio
import io
import logging
from typing import Optional

from soundscape.config import (
    ELEVENLABS_API_KEY,
    ELEVENLABS_MODEL,
    ELEVENLABS_SIMILARITY_BOOST,
    ELEVENLABS_STABILITY,
    ELEVENLABS_VOICE_ID,
)

logger = logging.getLogger(__name__)


class LocalAnnouncer:
    """Minimal always-available voice: pyttsx3, or the log if even that is missing."""

    def __init__(self):
        self._engine = None
        try:
            import pyttsx3
            self._engine = pyttsx3.init()
            self._engine.setProperty("rate", 170)
        except Exception as e:
            logger.warning("[TTS] pyttsx3 unavailable: %s", e)
            self._engine = None

    def _say_blocking(self, text: str) -> None:
        if not self._engine:
            logger.info("[TTS] (no engine): %s", text)
            return
        try:
            self._engine.say(text)
            self._engine.runAndWait()
        except Exception as e:
            logger.error("[TTS] pyttsx3 error: %s | %s", e, text)

    async def say(self, text: str) -> None:
        await asyncio.to_thread(self._say_blocking, text)


class TTSClient:
    """
    Speak text via ElevenLabs. Satisfies the SpeechOutput contract.

    A new utterance stops whatever is still playing. Failures never
    propagate: they fall back to the LocalAnnouncer.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_id: str = ELEVENLABS_MODEL,
        fallback: Optional[LocalAnnouncer] = None,
    ):
        self.api_key = api_key if api_key is not None else ELEVENLABS_API_KEY
        self.model_id = model_id
        self._fallback = fallback
        self._client = None
        if self.api_key:
            from elevenlabs.client import ElevenLabs
            self._client = ElevenLabs(api_key=self.api_key)

    def is_configured(self) -> bool:
        return self._client is not None

    @property
    def fallback(self) -> LocalAnnouncer:
        if self._fallback is None:
            self._fallback = LocalAnnouncer()
        return self._fallback

    def _synthesize(self, text: str, voice_id: str) -> bytes:
        from elevenlabs import VoiceSettings
        audio = self._client.text_to_speech.convert(
            voice_id=voice_id,
            text=text,
            model_id=self.model_id,
            voice_settings=VoiceSettings(
                stability=ELEVENLABS_STABILITY,
                similarity_boost=ELEVENLABS_SIMILARITY_BOOST,
            ),
        )
        # Convert generator to bytes if needed
        return b"".join(audio) if not isinstance(audio, (bytes, bytearray)) else bytes(audio)

    def _play(self, mp3_bytes: bytes) -> None:
        import numpy as np
        import sounddevice as sd
        from pydub import AudioSegment

        segment = AudioSegment.from_mp3(io.BytesIO(mp3_bytes))
        samples = np.array(segment.get_array_of_samples(), dtype=np.float32)
        samples /= float(1 << (8 * segment.sample_width - 1))
        if segment.channels > 1:
            samples = samples.reshape((-1, segment.channels))
        # sd.play stops the previous utterance on the default stream
        sd.play(samples, segment.frame_rate)

    def stop(self) -> None:
        try:
            import sounddevice as sd
            sd.stop()
        except Exception as e:
            logger.warning("[TTS] stop failed: %s", e)

    async def say(self, text: str, voice_id: str = ELEVENLABS_VOICE_ID) -> None:
        """Fire-and-forget playback request. Never raises."""
        if not text:
            return
        if not self._client:
            await self.fallback.say(text)
            return
        try:
            mp3_bytes = await asyncio.to_thread(self._synthesize, text, voice_id)
            await asyncio.to_thread(self._play, mp3_bytes)
            logger.info("🔊 %s", text)
        except Exception as e:
            logger.error("ElevenLabs TTS error: %s, falling back to local voice", e)
            await self.fallback.say(text)
