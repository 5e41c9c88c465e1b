"""Encoder — raw audio bytes → Base64 payload tagged with its MIME type."""
import base64
from dataclasses import dataclass


def encode_audio(audio: bytes) -> str:
    return base64.standard_b64encode(audio).decode("ascii")


def decode_audio(data: str) -> bytes:
    return base64.standard_b64decode(data)


@dataclass(frozen=True)
class TranscriptionRequest:
    data: str
    mime_type: str

    @classmethod
    def from_audio(cls, audio: bytes, mime_type: str) -> "TranscriptionRequest":
        return cls(data=encode_audio(audio), mime_type=mime_type)
