"""Scene -> guidance cue decision, with repeat suppression."""

import logging
from typing import Dict, Optional, Tuple

from soundscape.clock import SYSTEM_CLOCK, Clock
from soundscape.config import MIN_CUE_INTERVAL_MS, SAFE_MODE_MULTIPLIER
from soundscape.models import (
    Alignment,
    GuidanceEvent,
    Haptic,
    PedestrianSignal,
    SceneDescription,
)

logger = logging.getLogger(__name__)

Cue = Tuple[str, Haptic]

OBSTACLE_CUE: Cue = ("Obstacle close. Stop.", Haptic.LONG)
CURB_CUE: Cue = ("Curb in two steps.", Haptic.SHORT)

# (signal, alignment) -> cue. Countdown / don't walk ignore alignment.
CROSSWALK_TABLE: Dict[Tuple[PedestrianSignal, Alignment], Cue] = {}

for _alignment in Alignment:
    CROSSWALK_TABLE[(PedestrianSignal.COUNTDOWN, _alignment)] = (
        "Countdown signal. Do not start crossing.",
        Haptic.SHORT,
    )
    CROSSWALK_TABLE[(PedestrianSignal.DONT_WALK, _alignment)] = (
        "Stop. Do not walk signal.",
        Haptic.LONG,
    )

CROSSWALK_TABLE.update({
    (PedestrianSignal.WALK, Alignment.CENTER): ("Walk sign. Crosswalk ahead.", Haptic.SHORT),
    (PedestrianSignal.WALK, Alignment.VEER_LEFT): ("Walk sign. Veer left.", Haptic.SHORT),
    (PedestrianSignal.WALK, Alignment.VEER_RIGHT): ("Walk sign. Veer right.", Haptic.SHORT),
    (PedestrianSignal.WALK, Alignment.UNKNOWN): (
        "Walk sign. Crosswalk detected, alignment unclear.",
        Haptic.NONE,
    ),
    (PedestrianSignal.NONE, Alignment.CENTER): ("Crosswalk ahead.", Haptic.SHORT),
    (PedestrianSignal.NONE, Alignment.VEER_LEFT): ("Veer left.", Haptic.SHORT),
    (PedestrianSignal.NONE, Alignment.VEER_RIGHT): ("Veer right.", Haptic.SHORT),
    (PedestrianSignal.NONE, Alignment.UNKNOWN): (
        "Crosswalk detected, alignment unclear.",
        Haptic.NONE,
    ),
})


def candidate_cue(scene: SceneDescription) -> Optional[Cue]:
    """Highest-priority cue for a scene, ignoring debounce."""
    if scene.obstacle_close:
        return OBSTACLE_CUE
    if scene.curb_ahead:
        return CURB_CUE
    if scene.crosswalk_present:
        return CROSSWALK_TABLE[(scene.pedestrian_signal, scene.alignment)]
    return None


def min_repeat_interval_ms(safe_mode: bool) -> float:
    if safe_mode:
        return MIN_CUE_INTERVAL_MS * SAFE_MODE_MULTIPLIER
    return MIN_CUE_INTERVAL_MS


def derive_guidance(
    scene: SceneDescription,
    last_event: Optional[GuidanceEvent] = None,
    safe_mode: bool = False,
    now_ms: Optional[float] = None,
) -> Optional[GuidanceEvent]:
    """
    Turn a scene into the next cue, or None.

    Priority: obstacle > curb > crosswalk (signal, then alignment).
    A candidate whose text equals last_event.text is dropped while the
    repeat window is still open; only the text is compared.
    """
    now = SYSTEM_CLOCK.now_ms() if now_ms is None else now_ms

    cue = candidate_cue(scene)
    if cue is None or not cue[0]:
        logger.debug("No guidance needed")
        return None
    text, haptic = cue

    if last_event is not None and last_event.text == text:
        elapsed = now - last_event.timestamp
        if elapsed < min_repeat_interval_ms(safe_mode):
            logger.debug("🔇 Suppressing repeat cue %r (%.0fms ago)", text, elapsed)
            return None

    logger.debug("📢 Cue %r haptic=%s", text, haptic.value)
    return GuidanceEvent(timestamp=now, text=text, haptic=haptic)


class GuidanceEngine:
    """derive_guidance bound to a clock."""

    def __init__(self, clock: Clock = SYSTEM_CLOCK):
        self.clock = clock

    def decide(
        self,
        scene: SceneDescription,
        last_event: Optional[GuidanceEvent] = None,
        safe_mode: bool = False,
    ) -> Optional[GuidanceEvent]:
        return derive_guidance(scene, last_event, safe_mode, now_ms=self.clock.now_ms())
