"""Error taxonomy for the guidance core and its collaborators."""


class SoundscapeError(Exception):
    """Base for every error raised by the assistant."""


class PermissionDenied(SoundscapeError):
    def __init__(self, resource: str):
        super().__init__(f"{resource} permission denied")
        self.resource = resource


class HardwareNotReady(SoundscapeError):
    """Camera or microphone missing or not open."""


class CollaboratorUnconfigured(SoundscapeError):
    """No API key / credentials for a remote collaborator."""


class CollaboratorFailed(SoundscapeError):
    """Remote call errored or returned unparseable data."""


class VisionUnavailable(SoundscapeError):
    """Scene analysis could not produce a SceneDescription."""


class VisionUnconfigured(VisionUnavailable, CollaboratorUnconfigured):
    pass


class VisionFailed(VisionUnavailable, CollaboratorFailed):
    pass


class TranscriptionUnavailable(CollaboratorUnconfigured):
    pass


class TranscriptionFailed(CollaboratorFailed):
    pass


class RecordingFailed(SoundscapeError):
    pass


class RecognitionInProgress(SoundscapeError):
    """A voice command is already being recorded or transcribed."""
