#!/usr/bin/env python3
"""
SoundScape - crossing guidance for visually impaired pedestrians.

Camera -> Gemini scene JSON -> prioritized cue -> ElevenLabs voice + haptic pulse
Voice commands via Deepgram ("guide me", "stop", "where am I", "what do you see").

Usage:
  python -m soundscape.main
  python -m soundscape.main --url http://192.168.1.100:4747/video  # DroidCam
  python -m soundscape.main --mock-scene scene.json                # No Gemini key

Keys (then Enter):
  s  start / stop guidance
  d  describe scene
  w  where am I
  v  voice command
  q  quit
"""

import argparse
import asyncio
import logging
from functools import partial

from soundscape.camera import Camera
from soundscape.cloud.deepgram_client import DeepgramClient
from soundscape.cloud.gemini_client import GeminiClient
from soundscape.cloud.mock import MockSceneAnalyzer
from soundscape.cloud.tts_client import TTSClient
from soundscape.commands import CommandRecognizer
from soundscape.config import LOG_LEVEL
from soundscape.haptics import HapticOutput
from soundscape.location import LocationService
from soundscape.permissions import PermissionProvider, probe_camera
from soundscape.recorder import MicrophoneRecorder
from soundscape.session import AssistantSession
from soundscape.settings import SettingsStore

logger = logging.getLogger("soundscape")


def build_session(args) -> AssistantSession:
    settings = SettingsStore(args.settings)
    if args.reset_settings:
        settings.reset()

    if args.mock_scene:
        analyzer = MockSceneAnalyzer.from_file(args.mock_scene)
    else:
        analyzer = GeminiClient()
    if not analyzer.is_configured():
        logger.warning("GOOGLE_API_KEY not set - guidance will report vision offline")

    permissions = PermissionProvider(
        camera_probe=partial(probe_camera, index=args.camera_index, url=args.url),
    )
    session = AssistantSession(
        camera=Camera(index=args.camera_index, url=args.url),
        analyzer=analyzer,
        speech=TTSClient(),
        haptics=HapticOutput(enabled=not args.no_haptics),
        permissions=permissions,
        recognizer=CommandRecognizer(MicrophoneRecorder(), DeepgramClient(), permissions),
        location=LocationService(),
        settings_store=settings,
    )

    changes = {}
    if args.interval is not None:
        changes["capture_interval_ms"] = args.interval
    if args.safe_mode:
        changes["safe_mode"] = True
    if args.no_voice:
        changes["voice_mode"] = False
    if changes:
        session.update_settings(**changes)
    return session


async def run(args) -> None:
    session = build_session(args)
    await session.initialize()
    print(__doc__.split("Keys (then Enter):", 1)[1])

    try:
        while True:
            key = (await asyncio.to_thread(input, "> ")).strip().lower()
            if key == "q":
                break
            if key == "s":
                await session.toggle()
            elif key == "d":
                await session.describe_scene()
            elif key == "w":
                await session.where_am_i()
            elif key == "v":
                if session.mode.voice_mode:
                    result = await session.voice_command()
                    if result:
                        print(f'Heard: "{result.transcript}" -> {result.command.value}')
                else:
                    print("Voice commands are off (--no-voice).")
            status = session.status
            rate = f" {status.rate:.2f}/s" if status.rate else ""
            print(f"[{status.state.value}{rate}] {status.message}")
    except (EOFError, KeyboardInterrupt):
        pass
    finally:
        await session.close()


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="SoundScape - crossing guidance for blind pedestrians")
    ap.add_argument("--url", type=str, default=None, help="Camera URL (DroidCam, IP Webcam)")
    ap.add_argument("--camera-index", type=int, default=None, help="Local camera index")
    ap.add_argument("--interval", type=int, default=None, help="Capture interval ms (800-3000)")
    ap.add_argument("--safe-mode", action="store_true", help="Wider repeat window for cues")
    ap.add_argument("--no-voice", action="store_true", help="Disable voice commands")
    ap.add_argument("--no-haptics", action="store_true", help="Disable haptic tones")
    ap.add_argument("--mock-scene", type=str, default=None, help="Replay scene JSON instead of Gemini")
    ap.add_argument("--settings", type=str, default=None, help="Settings file path")
    ap.add_argument("--reset-settings", action="store_true", help="Restore default settings")
    return ap


def main():
    args = build_parser().parse_args()

    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    print("Starting SoundScape. Type q to quit.")
    asyncio.run(run(args))


if __name__ == "__main__":
    main()
