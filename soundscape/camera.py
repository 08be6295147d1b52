"""Video capture - local webcam, DroidCam, or IP Webcam."""

import asyncio
import logging
from typing import Optional, Union

import cv2

from soundscape.config import CAMERA_INDEX, FRAME_HEIGHT, FRAME_WIDTH, JPEG_QUALITY
from soundscape.errors import HardwareNotReady

logger = logging.getLogger(__name__)


def camera_source(index: Optional[int] = None, url: Optional[str] = None) -> Union[int, str]:
    return url if url else (index if index is not None else CAMERA_INDEX)


def open_camera(
    index: Optional[int] = None,
    width: int = FRAME_WIDTH,
    height: int = FRAME_HEIGHT,
    url: Optional[str] = None,
) -> cv2.VideoCapture:
    """
    Open video source. Use url for IP Webcam / DroidCam WiFi stream.
    Examples:
      url="http://192.168.1.100:4747/video"  # DroidCam
      url="http://192.168.1.100:8080/video"   # IP Webcam
    """
    source = camera_source(index, url)
    cap = cv2.VideoCapture(source)

    if not cap.isOpened():
        cap.release()
        raise HardwareNotReady(f"Cannot open camera (source={source})")

    cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
    cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
    return cap


class Camera:
    """
    Single-frame JPEG snapshots for the capture loop and on-demand describe.

    Only one grab runs at a time; the periodic loop and scene description
    share the device through ``_lock``.
    """

    def __init__(
        self,
        index: Optional[int] = None,
        url: Optional[str] = None,
        jpeg_quality: int = JPEG_QUALITY,
    ):
        self.index = index
        self.url = url
        self.jpeg_quality = jpeg_quality
        self._cap: Optional[cv2.VideoCapture] = None
        self._lock = asyncio.Lock()

    def open(self) -> None:
        if self._cap is None:
            self._cap = open_camera(index=self.index, url=self.url)
            logger.info("📷 Camera opened")

    def is_ready(self) -> bool:
        return self._cap is not None and self._cap.isOpened()

    def release(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None
            logger.info("📷 Camera released")

    def _grab_jpeg(self) -> bytes:
        if not self.is_ready():
            raise HardwareNotReady("Camera not open")
        ret, frame = self._cap.read()
        if not ret or frame is None:
            raise HardwareNotReady("Failed to capture image")
        ok, buf = cv2.imencode(".jpg", frame, [int(cv2.IMWRITE_JPEG_QUALITY), self.jpeg_quality])
        if not ok:
            raise HardwareNotReady("Failed to encode image")
        return buf.tobytes()

    async def capture(self) -> bytes:
        """Grab one frame as JPEG bytes."""
        async with self._lock:
            return await asyncio.to_thread(self._grab_jpeg)
