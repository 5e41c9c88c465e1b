"""TranscriptionPipeline — capture → encode → transcribe, transport-agnostic.

The pipeline is the only mutator of UIState. Every public operation catches
AudioscribeError at its boundary and turns it into the single visible error;
loading phases are always left in a ``finally``.
"""
import asyncio
import logging
import time
from collections.abc import Awaitable
from typing import Callable, Optional

from audioscribe.capture.files import SelectedFile, read_file, validate_audio
from audioscribe.capture.microphone import AudioRecorder
from audioscribe.constants import (
    MSG_FILE_SELECTED,
    MSG_NOT_RECORDING,
    MSG_TRANSCRIBE_FAIL,
    MSG_TRANSCRIBE_OK,
    MSG_TRANSCRIBING,
    MSG_UPLOAD_BUSY,
)
from audioscribe.encoder import TranscriptionRequest
from audioscribe.errors import (
    AudioscribeError,
    DeviceUnavailable,
    InvalidFileType,
    NoFileSelected,
    RenderingFallback,
)
from audioscribe.export import ExportResult, TranscriptExporter
from audioscribe.state import (
    Phase,
    UIState,
    begin_recording,
    begin_transcribing,
    cleared,
    end_recording,
    failed,
    noted,
    settled,
    succeeded,
)
from audioscribe.transcription.client import TranscriptionClient

logger = logging.getLogger(__name__)

OnChange = Callable[[UIState], None]


class TranscriptionPipeline:

    def __init__(
        self,
        client: TranscriptionClient,
        recorder: AudioRecorder,
        exporter: TranscriptExporter,
        on_change: Optional[OnChange] = None,
    ) -> None:
        self._client = client
        self._recorder = recorder
        self._exporter = exporter
        self._on_change = on_change
        self._state = UIState()
        self._selected: Optional[SelectedFile] = None

    @property
    def state(self) -> UIState:
        return self._state

    @property
    def selected_file(self) -> Optional[SelectedFile]:
        return self._selected

    def _set(self, state: UIState) -> None:
        self._state = state
        match self._on_change:
            case None:
                pass
            case callback:
                callback(state)

    # ── recording ─────────────────────────────────────────────────────────────

    async def start_recording(self) -> None:
        match self._state.phase:
            case Phase.IDLE:
                pass
            case _:
                return

        self._selected = None
        self._set(cleared(self._state))
        try:
            await self._recorder.start()
        except DeviceUnavailable as exc:
            self._set(failed(self._state, exc.message))
            return
        self._set(begin_recording(self._state))

    async def stop_recording(self) -> None:
        match self._state.phase:
            case Phase.RECORDING:
                pass
            case _:
                logger.debug(MSG_NOT_RECORDING)
                return

        self._set(end_recording(self._state))
        await self._transcribe(self._recorder.stop(), self._recorder.mime_type)

    # ── file upload ───────────────────────────────────────────────────────────

    async def select_file(self, file: SelectedFile) -> None:
        try:
            validate_audio(file)
        except InvalidFileType as exc:
            logger.warning("Rejected %s (%s)", file.name, exc.mime_type)
            self._selected = None
            self._set(noted(self._state, exc.message))
            return

        self._selected = file
        logger.info(MSG_FILE_SELECTED, file.name, file.mime_type)
        match self._state.phase:
            case Phase.RECORDING:
                # The partial clip is still transcribed, as an explicit stop would.
                await self.stop_recording()
            case _:
                self._set(cleared(self._state))

    async def trigger_upload(self) -> None:
        match (self._selected, self._state.phase):
            case (None, _):
                self._set(noted(self._state, NoFileSelected().message))
            case (file, Phase.IDLE):
                await self._transcribe(read_file(file), file.mime_type)
            case _:
                logger.warning(MSG_UPLOAD_BUSY)

    # ── transcription ─────────────────────────────────────────────────────────

    async def _transcribe(self, audio: Awaitable[bytes], mime_type: str) -> None:
        self._set(begin_transcribing(self._state))
        started = time.monotonic()
        try:
            request = TranscriptionRequest.from_audio(await audio, mime_type)
            logger.info(MSG_TRANSCRIBING, request.mime_type, len(request.data))
            text = await self._client.transcribe(request)
        except AudioscribeError as exc:
            logger.warning(MSG_TRANSCRIBE_FAIL, time.monotonic() - started, exc.message)
            self._set(failed(self._state, exc.message))
        else:
            logger.info(MSG_TRANSCRIBE_OK, time.monotonic() - started, len(text))
            self._set(succeeded(self._state, text))
        finally:
            self._set(settled(self._state))

    # ── download / reset ──────────────────────────────────────────────────────

    async def download(self) -> Optional[ExportResult]:
        match self._state.transcription:
            case str() as text if text:
                pass
            case _:
                return None

        source = self._selected.name if self._selected else None
        result = await asyncio.to_thread(self._exporter.export, text, source)
        if result.fell_back:
            self._set(noted(self._state, RenderingFallback().message))
        return result

    async def reset(self) -> None:
        await self._recorder.discard()
        self._selected = None
        self._set(UIState())
