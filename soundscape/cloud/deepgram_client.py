"""Deepgram pre-recorded speech-to-text for voice commands."""

import logging
from pathlib import Path
from typing import Optional

from soundscape.config import DEEPGRAM_API_KEY, DEEPGRAM_MODEL
from soundscape.errors import TranscriptionFailed, TranscriptionUnavailable

logger = logging.getLogger(__name__)


class DeepgramClient:
    """Transcribe a WAV clip. Satisfies the Transcriber contract."""

    def __init__(self, api_key: Optional[str] = None, model: str = DEEPGRAM_MODEL):
        self.api_key = api_key if api_key is not None else DEEPGRAM_API_KEY
        self.model = model
        self._client = None
        if self.api_key:
            from deepgram import DeepgramClient as _Deepgram
            self._client = _Deepgram(self.api_key)

    def is_configured(self) -> bool:
        return self._client is not None

    async def transcribe(self, clip_path: str) -> str:
        if not self._client:
            raise TranscriptionUnavailable("Deepgram API key not configured")

        from deepgram import PrerecordedOptions

        try:
            wav_bytes = Path(clip_path).read_bytes()
            options = PrerecordedOptions(
                model=self.model,
                smart_format=False,
                language="en-US",
            )
            response = await self._client.listen.asyncprerecorded.v("1").transcribe_file(
                {"buffer": wav_bytes},
                options,
            )
        except Exception as e:
            logger.error("🎤 Transcription error: %s", e)
            raise TranscriptionFailed("Speech recognition failed") from e

        if not response or not response.results or not response.results.channels:
            logger.warning("🎤 No transcription results")
            return ""
        alternatives = response.results.channels[0].alternatives
        transcript = alternatives[0].transcript if alternatives else ""
        logger.info("🎤 Transcript: %r", transcript)
        return transcript or ""
