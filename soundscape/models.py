"""Value types shared across the guidance pipeline."""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr

from soundscape.config import (
    DEFAULT_CAPTURE_INTERVAL_MS,
    ELEVENLABS_VOICE_ID,
    MAX_CAPTURE_INTERVAL_MS,
    MIN_CAPTURE_INTERVAL_MS,
)


class Alignment(str, Enum):
    CENTER = "center"
    VEER_LEFT = "veer_left"
    VEER_RIGHT = "veer_right"
    UNKNOWN = "unknown"


class PedestrianSignal(str, Enum):
    WALK = "walk"
    DONT_WALK = "dont_walk"
    COUNTDOWN = "countdown"
    NONE = "none"


class Haptic(str, Enum):
    SHORT = "short"
    LONG = "long"
    NONE = "none"


class CaptureState(str, Enum):
    OFFLINE = "offline"
    ANALYZING = "analyzing"
    READY = "ready"
    ERROR = "error"


class VoiceCommand(str, Enum):
    WHERE_AM_I = "where_am_i"
    GUIDE_ME = "guide_me"
    STOP = "stop"
    WHAT_DO_YOU_SEE = "what_do_you_see"
    UNKNOWN = "unknown"


class ControlAction(str, Enum):
    START = "start"
    STOP = "stop"
    WHERE_AM_I = "where_am_i"
    DESCRIBE_SCENE = "describe_scene"


class SceneDescription(BaseModel):
    """One analysis cycle's view of the street. Immutable, validated strictly."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    crosswalk_present: StrictBool
    alignment: Alignment
    curb_ahead: StrictBool
    obstacle_close: StrictBool
    pedestrian_signal: PedestrianSignal = PedestrianSignal.NONE
    confidence: float = Field(ge=0.0, le=1.0)
    narration: Optional[StrictStr] = None


@dataclass(frozen=True)
class GuidanceEvent:
    timestamp: float  # ms since epoch
    text: str
    haptic: Haptic


@dataclass(frozen=True)
class CommandResult:
    command: VoiceCommand
    transcript: str


@dataclass(frozen=True)
class LocationResult:
    phrase: str
    street: Optional[str] = None
    intersection: Optional[Tuple[str, str]] = None


def clamp_capture_interval(value_ms: int) -> int:
    return max(MIN_CAPTURE_INTERVAL_MS, min(MAX_CAPTURE_INTERVAL_MS, int(value_ms)))


@dataclass(frozen=True)
class AssistantMode:
    """User-tunable settings read by every capture cycle."""

    capture_interval_ms: int = DEFAULT_CAPTURE_INTERVAL_MS
    safe_mode: bool = False
    voice_id: str = ELEVENLABS_VOICE_ID
    cue_verbosity: str = "normal"  # "normal" | "brief"
    voice_mode: bool = True

    def __post_init__(self):
        object.__setattr__(
            self, "capture_interval_ms", clamp_capture_interval(self.capture_interval_ms)
        )
        if self.cue_verbosity not in ("normal", "brief"):
            object.__setattr__(self, "cue_verbosity", "normal")

    def updated(self, **changes) -> "AssistantMode":
        return replace(self, **changes)
