"""Control surface: start/stop, where am I, describe scene, voice commands."""

import asyncio
import logging
from typing import Optional

from soundscape.capture_loop import CaptureLoop, CaptureStatus
from soundscape.clock import SYSTEM_CLOCK, Clock
from soundscape.errors import (
    HardwareNotReady,
    PermissionDenied,
    RecognitionInProgress,
    RecordingFailed,
    TranscriptionFailed,
    TranscriptionUnavailable,
    VisionUnconfigured,
)
from soundscape.models import (
    AssistantMode,
    CommandResult,
    ControlAction,
    VoiceCommand,
)
from soundscape.speech_gate import SpeechGate, shared_gate

logger = logging.getLogger(__name__)

VOICE_ACTIONS = {
    VoiceCommand.GUIDE_ME: ControlAction.START,
    VoiceCommand.STOP: ControlAction.STOP,
    VoiceCommand.WHERE_AM_I: ControlAction.WHERE_AM_I,
    VoiceCommand.WHAT_DO_YOU_SEE: ControlAction.DESCRIBE_SCENE,
}

DESCRIBE_OFFLINE = "Scene description unavailable. Vision service is offline."
DESCRIBE_FAILED = "Scene description unavailable."
CAMERA_NOT_READY = "Camera not ready."
LOCATION_DENIED = "Location permission required."
NOT_UNDERSTOOD = "Sorry, I didn't catch that."

RECOGNIZE_APOLOGIES = {
    PermissionDenied: "Microphone permission required.",
    TranscriptionUnavailable: "Voice commands unavailable.",
    RecordingFailed: "Could not record audio.",
    TranscriptionFailed: "Sorry, I couldn't understand that.",
}


class AssistantSession:
    """
    Owns one guidance session: the capture loop, the recognizer and the
    current AssistantMode. Created by ``initialize()``, torn down by
    ``close()``.
    """

    def __init__(
        self,
        camera,
        analyzer,
        speech,
        haptics,
        permissions,
        recognizer,
        location,
        settings_store,
        gate: SpeechGate = shared_gate,
        clock: Clock = SYSTEM_CLOCK,
    ):
        self.camera = camera
        self.speech = speech
        self.permissions = permissions
        self.recognizer = recognizer
        self.location = location
        self.settings_store = settings_store
        self.gate = gate
        self.mode: AssistantMode = settings_store.load()
        self.loop = CaptureLoop(
            camera,
            analyzer,
            speech,
            haptics,
            permissions,
            self.mode,
            gate=gate,
            clock=clock,
        )
        self._describing = False

    async def initialize(self) -> None:
        grants = self.permissions.request_all()
        if not grants.get("camera"):
            logger.warning("Camera permission required for guidance")
            return
        try:
            await asyncio.to_thread(self.camera.open)
        except HardwareNotReady as e:
            logger.error("📷 %s", e)

    async def close(self) -> None:
        self.loop.stop()
        await self.loop.drain()
        self.gate.reset_speech_time()
        self.camera.release()

    @property
    def status(self) -> CaptureStatus:
        return self.loop.status

    async def say(self, text: str) -> None:
        await self.speech.say(text, self.mode.voice_id)

    # -- settings ----------------------------------------------------------

    def update_settings(self, **changes) -> AssistantMode:
        self.mode = self.mode.updated(**changes)
        self.loop.mode = self.mode
        self.settings_store.save(self.mode)
        logger.info("Settings updated: %s", self.mode)
        return self.mode

    # -- control surface ---------------------------------------------------

    async def dispatch(self, action: ControlAction) -> None:
        if action == ControlAction.START:
            self.loop.start()
        elif action == ControlAction.STOP:
            self.loop.stop()
        elif action == ControlAction.WHERE_AM_I:
            await self.where_am_i()
        elif action == ControlAction.DESCRIBE_SCENE:
            await self.describe_scene()

    async def toggle(self) -> None:
        await self.dispatch(ControlAction.STOP if self.loop.active else ControlAction.START)

    async def describe_scene(self) -> Optional[str]:
        if self._describing:
            return None
        self._describing = True
        try:
            narration = await self.loop.capture_and_describe()
        except VisionUnconfigured:
            await self.say(DESCRIBE_OFFLINE)
            return None
        except HardwareNotReady:
            await self.say(CAMERA_NOT_READY)
            return None
        except Exception as e:
            logger.error("Scene description error: %s", e)
            await self.say(DESCRIBE_FAILED)
            return None
        finally:
            self._describing = False
        await self.say(narration)
        return narration

    async def where_am_i(self) -> str:
        if not self.permissions.location():
            await self.say(LOCATION_DENIED)
            return LOCATION_DENIED
        result = await self.location.where_am_i()
        await self.say(result.phrase)
        return result.phrase

    async def voice_command(self) -> Optional[CommandResult]:
        """Listen for one command and dispatch it."""
        try:
            result = await self.recognizer.recognize()
        except RecognitionInProgress:
            logger.info("🎤 Already listening, ignoring")
            return None
        except tuple(RECOGNIZE_APOLOGIES) as e:
            logger.error("🎤 Recognition error: %s", e)
            for error_type, apology in RECOGNIZE_APOLOGIES.items():
                if isinstance(e, error_type):
                    await self.say(apology)
                    break
            return None

        action = VOICE_ACTIONS.get(result.command)
        if action is None:
            await self.say(NOT_UNDERSTOOD)
        else:
            await self.dispatch(action)
        return result
