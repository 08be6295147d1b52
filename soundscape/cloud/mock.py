"""Offline scene analyzer - replays a fixed scene for demos without a key."""

import asyncio
import json
from pathlib import Path
from typing import Union

from soundscape.errors import VisionFailed
from soundscape.models import SceneDescription


class MockSceneAnalyzer:
    """Returns the same scene every call after a short simulated API delay."""

    def __init__(self, scene: SceneDescription, delay_seconds: float = 0.2):
        self.scene = scene
        self.delay_seconds = delay_seconds

    @classmethod
    def from_file(cls, path: Union[str, Path], delay_seconds: float = 0.2) -> "MockSceneAnalyzer":
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
            scene = SceneDescription.model_validate(data)
        except (OSError, ValueError) as e:
            raise VisionFailed(f"Cannot load mock scene {path}: {e}") from e
        return cls(scene, delay_seconds)

    def is_configured(self) -> bool:
        return True

    async def analyze(self, image_bytes: bytes) -> SceneDescription:
        await asyncio.sleep(self.delay_seconds)
        return self.scene
