"""SoundScape - keys, timing constants and prompts."""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# =============================================================================
# API KEYS - read from environment / .env
# =============================================================================

GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY", "")
GOOGLE_MAPS_API_KEY = os.getenv("GOOGLE_MAPS_API_KEY", "") or GOOGLE_API_KEY
ELEVENLABS_API_KEY = os.getenv("ELEVENLABS_API_KEY", "")
DEEPGRAM_API_KEY = os.getenv("DEEPGRAM_API_KEY", "")

# =============================================================================
# MODELS / VOICES
# =============================================================================

GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
# "Rachel" - free pre-made voice
ELEVENLABS_VOICE_ID = os.getenv("ELEVENLABS_VOICE_ID", "21m00Tcm4TlvDq8ikWAM")
ELEVENLABS_MODEL = os.getenv("ELEVENLABS_MODEL", "eleven_turbo_v2")
ELEVENLABS_STABILITY = 0.4
ELEVENLABS_SIMILARITY_BOOST = 0.8
DEEPGRAM_MODEL = "nova-2"

# =============================================================================
# CAMERA
# =============================================================================

CAMERA_INDEX = int(os.getenv("CAMERA_INDEX", "0"))
FRAME_WIDTH = 640
FRAME_HEIGHT = 480
JPEG_QUALITY = 50

# =============================================================================
# TIMING (milliseconds)
# =============================================================================

# Same cue text is not repeated within this window
MIN_CUE_INTERVAL_MS = 2500
SAFE_MODE_MULTIPLIER = 1.5

# "Vision offline" announcement cooldown
ERROR_CUE_INTERVAL_MS = 5000

DEFAULT_CAPTURE_INTERVAL_MS = int(os.getenv("CAPTURE_INTERVAL_MS", "1200"))
MIN_CAPTURE_INTERVAL_MS = 800
MAX_CAPTURE_INTERVAL_MS = 3000

RATE_WINDOW_MS = 1000
RECORD_DURATION_MS = 3000

# =============================================================================
# AUDIO
# =============================================================================

SAMPLE_RATE = 16000
PLAYBACK_SAMPLE_RATE = 44100

# Haptic pulses are rendered as tone bursts on the output device
BEEP_FREQUENCIES = {
    "short": 880,
    "long": 440,
}
BEEP_DURATIONS = {
    "short": 0.12,
    "long": 0.45,
}
BEEP_VOLUME = 0.3

# =============================================================================
# PHRASES
# =============================================================================

VISION_OFFLINE_PHRASE = "Vision offline, proceed with caution."
DEFAULT_NARRATION = "Scene analysis complete. No detailed description available."
LOCATION_UNKNOWN_PHRASE = "Location unknown."

# =============================================================================
# PERSISTENCE / LOGGING
# =============================================================================

SETTINGS_PATH = Path(
    os.getenv("SOUNDSCAPE_SETTINGS_PATH", Path.home() / ".soundscape" / "settings.json")
)
LOG_LEVEL = os.getenv("SOUNDSCAPE_LOG_LEVEL", "INFO")

HTTP_TIMEOUT_SECONDS = 6

# =============================================================================
# PROMPTS
# =============================================================================

SCENE_ANALYSIS_PROMPT = """You are a scene safety parser. Return ONLY valid JSON matching:
{
  "crosswalk_present": boolean,
  "alignment": "center" | "veer_left" | "veer_right" | "unknown",
  "curb_ahead": boolean,
  "obstacle_close": boolean,
  "pedestrian_signal": "walk" | "dont_walk" | "countdown" | "none",
  "confidence": number,
  "narration": string
}

Guidelines:
- "alignment": Estimate where the crosswalk center aligns relative to camera center; use "unknown" if unclear.
- "curb_ahead": true only if a curb/step edge likely within ~2 meters ahead.
- "obstacle_close": true only if a person/object is in the walking path within ~1 meter.
- "pedestrian_signal": state of a visible pedestrian signal facing the user; "none" if not visible.
- "confidence": 0 to 1.
- "narration": one or two sentences describing the scene for a blind pedestrian.
- Be conservative. If uncertain, prefer false and "unknown".
- Output JSON only. No extra keys. No prose."""
