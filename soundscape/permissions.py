"""Camera / microphone / location grants."""

import logging
from typing import Callable, Dict, Optional

from soundscape.camera import camera_source

logger = logging.getLogger(__name__)

Probe = Callable[[], bool]


def probe_camera(index: Optional[int] = None, url: Optional[str] = None) -> bool:
    """Probe the same source the Camera will open."""
    import cv2
    cap = cv2.VideoCapture(camera_source(index, url))
    try:
        return bool(cap.isOpened())
    finally:
        cap.release()


def probe_microphone() -> bool:
    try:
        import sounddevice as sd
        sd.query_devices(kind="input")
        return True
    except Exception as e:
        logger.warning("Microphone unavailable: %s", e)
        return False


def probe_location() -> bool:
    # Desktop has no OS prompt; IP geolocation is always allowed
    return True


class PermissionProvider:
    """
    Boolean grants, requested once at startup.

    A denied grant is re-probed the next time it is asked for, so plugging
    in a camera or mic after startup is picked up without a restart.
    """

    def __init__(
        self,
        camera_probe: Optional[Probe] = None,
        microphone_probe: Optional[Probe] = None,
        location_probe: Optional[Probe] = None,
    ):
        self._probes: Dict[str, Probe] = {
            "camera": camera_probe or probe_camera,
            "microphone": microphone_probe or probe_microphone,
            "location": location_probe or probe_location,
        }
        self._grants: Dict[str, bool] = {}

    def _check(self, resource: str) -> bool:
        if self._grants.get(resource):
            return True
        try:
            granted = bool(self._probes[resource]())
        except Exception as e:
            logger.error("Error checking %s permission: %s", resource, e)
            granted = False
        self._grants[resource] = granted
        return granted

    def granted(self, resource: str) -> bool:
        """Last known grant, without probing."""
        return bool(self._grants.get(resource))

    def request_all(self) -> Dict[str, bool]:
        result = {name: self._check(name) for name in self._probes}
        logger.info("Permissions: %s", result)
        return result

    def camera(self) -> bool:
        return self._check("camera")

    def microphone(self) -> bool:
        return self._check("microphone")

    def location(self) -> bool:
        return self._check("location")
