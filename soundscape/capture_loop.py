"""Periodic capture -> analyze -> decide -> speak loop."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Coroutine, Optional, Set

from soundscape.clock import SYSTEM_CLOCK, Clock
from soundscape.config import (
    DEFAULT_NARRATION,
    ERROR_CUE_INTERVAL_MS,
    MIN_CUE_INTERVAL_MS,
    RATE_WINDOW_MS,
    VISION_OFFLINE_PHRASE,
)
from soundscape.errors import HardwareNotReady, VisionUnconfigured
from soundscape.guidance import GuidanceEngine
from soundscape.models import AssistantMode, CaptureState, GuidanceEvent, SceneDescription
from soundscape.speech_gate import SpeechGate, shared_gate

logger = logging.getLogger(__name__)


class RateEstimator:
    """
    Cycles per second over a window that resets each time it is reported.

    Every ``record()`` counts one completed cycle. Once at least
    ``window_ms`` has passed since the window started, the rate is
    ``count / elapsed * 1000`` and both counter and window restart.
    """

    def __init__(self, clock: Clock = SYSTEM_CLOCK, window_ms: float = RATE_WINDOW_MS):
        self.clock = clock
        self.window_ms = window_ms
        self.rate = 0.0
        self.reset()

    def reset(self) -> None:
        self.count = 0
        self.window_start = self.clock.now_ms()

    def record(self) -> Optional[float]:
        self.count += 1
        now = self.clock.now_ms()
        elapsed = now - self.window_start
        if elapsed >= self.window_ms:
            self.rate = self.count / elapsed * 1000
            self.count = 0
            self.window_start = now
            return self.rate
        return None


@dataclass(frozen=True)
class CaptureStatus:
    state: CaptureState
    message: str
    rate: Optional[float]


class CaptureLoop:
    """
    Drives guidance while active.

    The ticker fires every ``mode.capture_interval_ms``. A tick that lands
    while the previous cycle is still running is dropped, so analyses never
    overlap; a slow cycle makes the next one start late.
    """

    def __init__(
        self,
        camera,
        analyzer,
        speech,
        haptics,
        permissions,
        mode: AssistantMode,
        gate: SpeechGate = shared_gate,
        clock: Clock = SYSTEM_CLOCK,
        on_scene: Optional[Callable[[SceneDescription], None]] = None,
    ):
        self.camera = camera
        self.analyzer = analyzer
        self.speech = speech
        self.haptics = haptics
        self.permissions = permissions
        self.mode = mode
        self.gate = gate
        self.engine = GuidanceEngine(clock)
        self.rate_estimator = RateEstimator(clock)
        self.on_scene = on_scene

        self.state = CaptureState.OFFLINE
        self.last_message = ""
        self.last_guidance: Optional[GuidanceEvent] = None
        self.ticks_started = 0
        self.ticks_skipped = 0

        self._active = False
        self._ticker: Optional[asyncio.Task] = None
        self._cycle: Optional[asyncio.Task] = None
        self._recheck: Optional[asyncio.Task] = None
        self._background: Set[asyncio.Task] = set()

    # -- lifecycle ---------------------------------------------------------

    @property
    def active(self) -> bool:
        return self._active

    @property
    def busy(self) -> bool:
        return self._cycle is not None and not self._cycle.done()

    @property
    def status(self) -> CaptureStatus:
        if not self._active:
            return CaptureStatus(CaptureState.OFFLINE, self.last_message, None)
        return CaptureStatus(self.state, self.last_message, self.rate_estimator.rate)

    def start(self) -> None:
        if self._active:
            return
        self.state = CaptureState.OFFLINE
        self._active = True
        self.gate.reset_speech_time()
        self.rate_estimator.reset()
        self._ticker = asyncio.create_task(self._run_ticker())
        logger.info("▶️  Guidance started (every %dms)", self.mode.capture_interval_ms)

    def stop(self) -> None:
        """Deactivate. An in-flight cycle finishes; no further ticks run."""
        if not self._active:
            return
        self._active = False
        self.state = CaptureState.OFFLINE
        if self._ticker is not None:
            self._ticker.cancel()
            self._ticker = None
        logger.info("⏹  Guidance stopped")

    async def drain(self) -> None:
        """Wait for the current cycle and any speech/haptic tasks."""
        if self._cycle is not None:
            await asyncio.gather(self._cycle, return_exceptions=True)
        if self._recheck is not None:
            await asyncio.gather(self._recheck, return_exceptions=True)
        if self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    # -- scheduling --------------------------------------------------------

    async def _run_ticker(self) -> None:
        while self._active:
            await asyncio.sleep(self.mode.capture_interval_ms / 1000)
            if not self._active:
                break
            self.tick()

    def tick(self) -> Optional[asyncio.Task]:
        """One timer firing. Returns the started cycle, or None if skipped."""
        if not self._active:
            self.state = CaptureState.OFFLINE
            return None
        if not self.permissions.granted("camera"):
            self.state = CaptureState.OFFLINE
            if self._recheck is None or self._recheck.done():
                self._recheck = asyncio.create_task(self._recheck_camera())
            return None
        if self.busy:
            self.ticks_skipped += 1
            logger.debug("Tick skipped, previous cycle still running")
            return None
        self.ticks_started += 1
        self._cycle = asyncio.create_task(self.run_cycle())
        return self._cycle

    async def _recheck_camera(self) -> None:
        """Re-probe a denied camera off the event loop and open it once granted."""
        try:
            if not await asyncio.to_thread(self.permissions.camera):
                return
            if not self.camera.is_ready():
                await asyncio.to_thread(self.camera.open)
        except Exception as e:
            logger.error("📷 Camera re-check failed: %s", e)

    # -- one cycle ---------------------------------------------------------

    async def run_cycle(self) -> None:
        """capture -> analyze -> decide -> (speak). Never raises."""
        try:
            self.state = CaptureState.ANALYZING
            image = await self.camera.capture()
            scene = await self.analyzer.analyze(image)
            if self.on_scene is not None:
                self.on_scene(scene)

            guidance = self.engine.decide(scene, self.last_guidance, self.mode.safe_mode)
            if guidance and self.gate.try_acquire(MIN_CUE_INTERVAL_MS):
                logger.info("🔊 Speaking guidance: %s", guidance.text)
                self.last_message = guidance.text
                self.last_guidance = guidance
                self._fire(self.haptics.pulse(guidance.haptic))
                self._fire(self.speech.say(guidance.text, self.mode.voice_id))
            elif guidance:
                logger.debug("🔇 Guidance ready but speech gated: %s", guidance.text)

            if self._active:
                self.state = CaptureState.READY
            rate = self.rate_estimator.record()
            if rate is not None:
                logger.debug("Throughput %.2f cycles/s", rate)
        except Exception as e:
            logger.error("Capture/analysis error: %s", e)
            if self._active:
                self.state = CaptureState.ERROR
            self.last_message = VISION_OFFLINE_PHRASE
            if self.gate.try_acquire(ERROR_CUE_INTERVAL_MS):
                self._fire(self.speech.say(VISION_OFFLINE_PHRASE, self.mode.voice_id))

    def _fire(self, coro: Coroutine) -> None:
        task = asyncio.create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._forget)

    def _forget(self, task: asyncio.Task) -> None:
        self._background.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.warning("Output task failed: %s", task.exception())

    # -- on demand ---------------------------------------------------------

    async def capture_and_describe(self) -> str:
        """Single frame narration. Skips the engine, the gate and the schedule."""
        if not self.analyzer.is_configured():
            raise VisionUnconfigured("Scene analysis is not configured")
        if not self.camera.is_ready():
            raise HardwareNotReady("Camera not ready")
        image = await self.camera.capture()
        scene = await self.analyzer.analyze(image)
        return (scene.narration or "").strip() or DEFAULT_NARRATION
