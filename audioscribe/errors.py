"""Error taxonomy — every failure the pipeline can surface to the user.

All errors derive from AudioscribeError and carry a human-readable message.
The pipeline catches AudioscribeError at each operation boundary and shows
that message; anything else is a bug and propagates.
"""
from typing import Literal

from audioscribe.constants import (
    MSG_ERR_DEVICE,
    MSG_ERR_FILE_READ,
    MSG_ERR_FILE_TYPE,
    MSG_ERR_NO_FILE,
    MSG_ERR_PDF_FALLBACK,
    MSG_ERR_TRANSCRIPTION,
)

FailureReason = Literal["transport", "malformed"]


class AudioscribeError(Exception):
    """Base exception for all audioscribe errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class DeviceUnavailable(AudioscribeError):
    """Microphone missing, busy, or access denied."""

    def __init__(self, message: str = MSG_ERR_DEVICE) -> None:
        super().__init__(message)


class InvalidFileType(AudioscribeError):
    """Selected file does not declare an audio MIME type."""

    def __init__(self, mime_type: str | None = None) -> None:
        self.mime_type = mime_type
        super().__init__(MSG_ERR_FILE_TYPE)


class NoFileSelected(AudioscribeError):
    def __init__(self) -> None:
        super().__init__(MSG_ERR_NO_FILE)


class FileReadFailed(AudioscribeError):
    def __init__(self) -> None:
        super().__init__(MSG_ERR_FILE_READ)


class TranscriptionFailed(AudioscribeError):
    """The remote call failed or returned no usable text.

    ``reason`` separates an unreachable/erroring API ("transport") from a
    reachable one whose body has no text ("malformed"). Both are terminal
    for the current attempt.
    """

    def __init__(
        self,
        message: str = MSG_ERR_TRANSCRIPTION,
        reason: FailureReason = "transport",
    ) -> None:
        self.reason = reason
        super().__init__(message)


class RenderingFallback(AudioscribeError):
    """PDF export unavailable — the transcription was saved as plain text."""

    def __init__(self) -> None:
        super().__init__(MSG_ERR_PDF_FALLBACK)
