"""Spoken control commands: record, transcribe, match keywords."""

import logging
import os
from typing import List, Tuple

from soundscape.config import RECORD_DURATION_MS
from soundscape.errors import (
    PermissionDenied,
    RecognitionInProgress,
    RecordingFailed,
    TranscriptionUnavailable,
)
from soundscape.models import CommandResult, VoiceCommand

logger = logging.getLogger(__name__)

# Checked in order; first bucket with a hit wins. "stop" sits before the
# start bucket so "stop guidance" never reads as a start.
KEYWORDS: List[Tuple[VoiceCommand, Tuple[str, ...]]] = [
    (VoiceCommand.WHERE_AM_I, (
        "where am i",
        "where's my location",
        "what's my location",
        "where are we",
        "current location",
        "location",
    )),
    (VoiceCommand.STOP, (
        "stop",
        "stop guidance",
        "stop guiding",
        "end guidance",
        "cancel",
    )),
    (VoiceCommand.GUIDE_ME, (
        "guide me",
        "start guidance",
        "start guiding",
        "begin guidance",
        "help me navigate",
        "start",
        "guide",
    )),
    (VoiceCommand.WHAT_DO_YOU_SEE, (
        "what do you see",
        "describe",
        "what's in front",
        "what's ahead",
        "tell me what you see",
        "scene description",
        "scene",
    )),
]


def classify(transcript: str) -> VoiceCommand:
    normalized = transcript.lower().strip()
    logger.debug("🎤 Parsing transcript: %r", normalized)
    for command, phrases in KEYWORDS:
        if any(phrase in normalized for phrase in phrases):
            return command
    return VoiceCommand.UNKNOWN


class CommandRecognizer:
    """
    One utterance -> one command.

    Not re-entrant: a call made while another is recording or transcribing
    raises RecognitionInProgress straight away.
    """

    def __init__(self, recorder, transcriber, permissions, duration_ms: int = RECORD_DURATION_MS):
        self.recorder = recorder
        self.transcriber = transcriber
        self.permissions = permissions
        self.duration_ms = duration_ms
        self._in_flight = False

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    async def recognize(self) -> CommandResult:
        if self._in_flight:
            raise RecognitionInProgress("Already listening")
        self._in_flight = True
        try:
            return await self._recognize()
        finally:
            self._in_flight = False

    async def _recognize(self) -> CommandResult:
        if not self.permissions.microphone():
            raise PermissionDenied("microphone")
        if not self.transcriber.is_configured():
            raise TranscriptionUnavailable("Transcription not configured")

        clip = await self.recorder.record(self.duration_ms)
        if not clip:
            raise RecordingFailed("Failed to record audio")

        try:
            transcript = await self.transcriber.transcribe(clip)
        finally:
            try:
                os.remove(clip)
            except OSError as e:
                logger.warning("Failed to delete audio file %s: %s", clip, e)

        transcript = (transcript or "").strip()
        if not transcript:
            return CommandResult(VoiceCommand.UNKNOWN, "")
        command = classify(transcript)
        logger.info("🎤 %r -> %s", transcript, command.value)
        return CommandResult(command, transcript)
