"""Output-channel cooldown shared by every utterance and haptic pulse."""

from typing import Optional

from soundscape.clock import SYSTEM_CLOCK, Clock
from soundscape.config import MIN_CUE_INTERVAL_MS


class SpeechGate:
    """
    Decides whether the audio/haptic channel is free to fire.

    Independent of cue text: GuidanceEngine decides *what* is due, the gate
    decides whether anything may be voiced right now.
    """

    def __init__(self, clock: Clock = SYSTEM_CLOCK):
        self.clock = clock
        self._last_speech_ms: Optional[float] = None

    def can_speak(self, min_interval_ms: float = MIN_CUE_INTERVAL_MS) -> bool:
        if self._last_speech_ms is None:
            return True
        return self.clock.now_ms() - self._last_speech_ms >= min_interval_ms

    def mark_speech_time(self) -> None:
        self._last_speech_ms = self.clock.now_ms()

    def reset_speech_time(self) -> None:
        self._last_speech_ms = None

    def try_acquire(self, min_interval_ms: float = MIN_CUE_INTERVAL_MS) -> bool:
        """Check and mark in one step. Must stay free of awaits."""
        if not self.can_speak(min_interval_ms):
            return False
        self.mark_speech_time()
        return True


# Single active session per process
shared_gate = SpeechGate()
