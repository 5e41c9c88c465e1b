"""Microphone capture — one RecordingSession per start/stop pair.

The session owns the PyAudio instance and its input stream. PortAudio calls
back on its own thread; fragments are handed to the event loop with
call_soon_threadsafe so the fragment list has a single mutator.

Stopping encodes the captured 16-bit PCM as Opus in a WebM container.
"""
import asyncio
import logging
import tempfile
from abc import ABC, abstractmethod
from fractions import Fraction
from pathlib import Path
from typing import Any, Callable, Optional

from audioscribe.constants import (
    CHANNEL_LAYOUTS,
    CHANNELS,
    FRAMES_PER_BUFFER,
    MSG_ALREADY_RECORDING,
    MSG_RECORDING_DISCARDED,
    MSG_RECORDING_STARTED,
    MSG_RECORDING_STOPPED,
    OPUS_SAMPLE_RATE,
    PCM_SAMPLE_FORMAT,
    RECORDING_MIME_TYPE,
    SAMPLE_RATE,
    SAMPLE_WIDTH_BYTES,
    WEBM_AUDIO_CODEC,
    WEBM_FORMAT,
    WEBM_SUFFIX,
)
from audioscribe.errors import DeviceUnavailable

logger = logging.getLogger(__name__)

# Returns the pyaudio module (or a stand-in exposing PyAudio and paContinue).
BackendLoader = Callable[[], Any]


def _load_pyaudio() -> Any:
    import pyaudio

    return pyaudio


def pcm_to_webm(pcm: bytes, sample_rate: int, channels: int) -> bytes:
    """Encode raw 16-bit PCM as Opus in a WebM container.

    Empty input still gives a valid container with no audio packets.
    """
    import av

    layout = CHANNEL_LAYOUTS[channels]
    frame_bytes = SAMPLE_WIDTH_BYTES * channels
    samples = len(pcm) // frame_bytes

    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / f"recording{WEBM_SUFFIX}"
        with av.open(str(path), mode="w", format=WEBM_FORMAT) as container:
            stream = container.add_stream(WEBM_AUDIO_CODEC, rate=OPUS_SAMPLE_RATE)
            stream.codec_context.layout = layout
            # Writes the header even when no packet follows.
            container.start_encoding()
            if samples:
                frame = av.AudioFrame(format=PCM_SAMPLE_FORMAT, layout=layout, samples=samples)
                frame.planes[0].update(pcm[: samples * frame_bytes])
                frame.sample_rate = sample_rate
                frame.pts = 0
                frame.time_base = Fraction(1, sample_rate)
                container.mux(stream.encode(frame))
            container.mux(stream.encode(None))
        return path.read_bytes()


class AudioRecorder(ABC):
    """Produces one complete audio buffer per start/stop pair."""

    mime_type: str = RECORDING_MIME_TYPE

    @property
    @abstractmethod
    def is_recording(self) -> bool: ...

    @abstractmethod
    async def start(self) -> None:
        """Acquire the input device. Raises DeviceUnavailable."""
        ...

    @abstractmethod
    async def stop(self) -> bytes:
        """Release the device and return the finished buffer."""
        ...

    @abstractmethod
    async def discard(self) -> None:
        """Release the device and drop whatever was captured."""
        ...


class RecordingSession:

    def __init__(self, backend: Any) -> None:
        self.backend = backend
        self.stream: Any = None
        self.fragments: list[bytes] = []

    def append(self, fragment: bytes) -> None:
        self.fragments.append(fragment)

    def release(self) -> None:
        """Stop all capture and hand the device back. Safe to call twice."""
        stream, self.stream = self.stream, None
        backend, self.backend = self.backend, None
        try:
            match stream:
                case None:
                    pass
                case s:
                    s.stop_stream()
                    s.close()
        finally:
            match backend:
                case None:
                    pass
                case b:
                    b.terminate()


class MicrophoneRecorder(AudioRecorder):

    def __init__(
        self,
        sample_rate: int = SAMPLE_RATE,
        channels: int = CHANNELS,
        frames_per_buffer: int = FRAMES_PER_BUFFER,
        backend_loader: Optional[BackendLoader] = None,
    ) -> None:
        self._sample_rate = sample_rate
        self._channels = channels
        self._frames_per_buffer = frames_per_buffer
        self._load_backend = backend_loader or _load_pyaudio
        self._session: Optional[RecordingSession] = None

    @property
    def is_recording(self) -> bool:
        return self._session is not None

    async def start(self) -> None:
        match self._session:
            case RecordingSession():
                logger.warning(MSG_ALREADY_RECORDING)
                return
            case None:
                pass

        loop = asyncio.get_running_loop()
        try:
            pyaudio = self._load_backend()
            backend = pyaudio.PyAudio()
        except (ImportError, OSError) as exc:
            logger.warning("Microphone backend unavailable: %s", exc)
            raise DeviceUnavailable() from exc

        session = RecordingSession(backend)

        def _on_fragment(in_data, frame_count, time_info, status):
            loop.call_soon_threadsafe(session.append, in_data)
            return (None, pyaudio.paContinue)

        try:
            session.stream = backend.open(
                format=backend.get_format_from_width(SAMPLE_WIDTH_BYTES),
                channels=self._channels,
                rate=self._sample_rate,
                input=True,
                frames_per_buffer=self._frames_per_buffer,
                stream_callback=_on_fragment,
            )
            session.stream.start_stream()
        except Exception as exc:
            session.release()
            logger.warning("Microphone open failed: %s", exc)
            raise DeviceUnavailable() from exc

        self._session = session
        logger.info(MSG_RECORDING_STARTED, self._sample_rate, self._channels)

    async def stop(self) -> bytes:
        session, self._session = self._session, None
        match session:
            case None:
                return await self._encode(b"")
            case _:
                pass
        try:
            session.release()
        except OSError as exc:
            logger.warning("Releasing microphone failed: %s", exc)
        # Let fragments already queued by the callback thread land.
        await asyncio.sleep(0)
        pcm = b"".join(session.fragments)
        logger.info(MSG_RECORDING_STOPPED, len(session.fragments), len(pcm))
        return await self._encode(pcm)

    async def discard(self) -> None:
        session, self._session = self._session, None
        match session:
            case None:
                return
            case _:
                session.release()
                logger.info(MSG_RECORDING_DISCARDED)

    async def _encode(self, pcm: bytes) -> bytes:
        return await asyncio.to_thread(pcm_to_webm, pcm, self._sample_rate, self._channels)
