"""Shared fakes: no camera, microphone, speaker or network is touched."""

from __future__ import annotations

import asyncio
import os
import tempfile

import pytest

from soundscape.clock import ManualClock
from soundscape.errors import HardwareNotReady
from soundscape.models import (
    Alignment,
    AssistantMode,
    LocationResult,
    PedestrianSignal,
    SceneDescription,
)
from soundscape.speech_gate import SpeechGate


def make_scene(**overrides) -> SceneDescription:
    data = dict(
        crosswalk_present=False,
        alignment=Alignment.UNKNOWN,
        curb_ahead=False,
        obstacle_close=False,
        pedestrian_signal=PedestrianSignal.NONE,
        confidence=0.9,
        narration=None,
    )
    data.update(overrides)
    return SceneDescription(**data)


class FakeCamera:
    def __init__(self, ready: bool = True):
        self.ready = ready
        self.captures = 0
        self.released = False

    def open(self):
        if not self.ready:
            raise HardwareNotReady("no camera")

    def is_ready(self):
        return self.ready

    def release(self):
        self.released = True

    async def capture(self) -> bytes:
        if not self.ready:
            raise HardwareNotReady("Camera not open")
        self.captures += 1
        return b"\xff\xd8jpeg"


class FakeAnalyzer:
    def __init__(self, scene=None, error=None, configured=True, wait_for=None):
        self.scene = scene or make_scene()
        self.error = error
        self.configured = configured
        self.wait_for = wait_for
        self.calls = 0

    def is_configured(self):
        return self.configured

    async def analyze(self, image_bytes):
        self.calls += 1
        if self.wait_for is not None:
            await self.wait_for.wait()
        if self.error is not None:
            raise self.error
        return self.scene


class FakeSpeech:
    def __init__(self):
        self.said = []

    async def say(self, text, voice_id=None):
        self.said.append(text)


class FakeHaptics:
    def __init__(self):
        self.pulses = []

    async def pulse(self, kind):
        self.pulses.append(kind)


class FakePermissions:
    def __init__(self, camera=True, microphone=True, location=True):
        self.grants = {"camera": camera, "microphone": microphone, "location": location}
        self.checks = []

    def request_all(self):
        return dict(self.grants)

    def granted(self, resource):
        return self.grants[resource]

    def camera(self):
        self.checks.append("camera")
        return self.grants["camera"]

    def microphone(self):
        return self.grants["microphone"]

    def location(self):
        return self.grants["location"]


class FakeRecorder:
    def __init__(self, error=None, wait_for=None):
        self.error = error
        self.wait_for = wait_for
        self.paths = []

    async def record(self, duration_ms):
        if self.wait_for is not None:
            await self.wait_for.wait()
        if self.error is not None:
            raise self.error
        fd, path = tempfile.mkstemp(suffix=".wav")
        os.close(fd)
        self.paths.append(path)
        return path


class FakeTranscriber:
    def __init__(self, transcript="", error=None, configured=True):
        self.transcript = transcript
        self.error = error
        self.configured = configured
        self.clips = []

    def is_configured(self):
        return self.configured

    async def transcribe(self, clip_path):
        self.clips.append(clip_path)
        if self.error is not None:
            raise self.error
        return self.transcript


class FakeRecognizer:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error

    async def recognize(self):
        if self.error is not None:
            raise self.error
        return self.result


class FakeLocation:
    def __init__(self, phrase="At Main Street and 1st Avenue."):
        self.phrase = phrase
        self.calls = 0

    async def where_am_i(self):
        self.calls += 1
        return LocationResult(phrase=self.phrase)


class MemorySettingsStore:
    def __init__(self, mode=None):
        self.mode = mode or AssistantMode(capture_interval_ms=3000)
        self.saved = []

    def load(self):
        return self.mode

    def save(self, mode):
        self.saved.append(mode)
        self.mode = mode

    def reset(self):
        self.mode = AssistantMode()


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def gate(clock):
    return SpeechGate(clock)


@pytest.fixture
def speech():
    return FakeSpeech()


@pytest.fixture
def haptics():
    return FakeHaptics()


@pytest.fixture
def permissions():
    return FakePermissions()


@pytest.fixture
def camera():
    return FakeCamera()


@pytest.fixture
def release():
    return asyncio.Event()
