"""SoundScape - crossing guidance for visually impaired pedestrians."""

from soundscape.guidance import GuidanceEngine, derive_guidance
from soundscape.speech_gate import SpeechGate, shared_gate
from soundscape.capture_loop import CaptureLoop, RateEstimator
from soundscape.commands import CommandRecognizer, classify
from soundscape.session import AssistantSession

__all__ = [
    "GuidanceEngine",
    "derive_guidance",
    "SpeechGate",
    "shared_gate",
    "CaptureLoop",
    "RateEstimator",
    "CommandRecognizer",
    "classify",
    "AssistantSession",
]
