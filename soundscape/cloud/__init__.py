"""Cloud APIs: Gemini, ElevenLabs, Deepgram."""

from soundscape.cloud.gemini_client import GeminiClient
from soundscape.cloud.tts_client import TTSClient
from soundscape.cloud.deepgram_client import DeepgramClient

__all__ = ["GeminiClient", "TTSClient", "DeepgramClient"]
