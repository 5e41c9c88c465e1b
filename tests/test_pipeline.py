"""TranscriptionPipeline tests — fake microphone backend, mocked Gemini transport."""
import base64
import io
import json
from unittest.mock import AsyncMock, MagicMock

import av
import httpx
import pytest

from audioscribe.capture.files import SelectedFile
from audioscribe.capture.microphone import MicrophoneRecorder
from audioscribe.encoder import TranscriptionRequest
from audioscribe.errors import TranscriptionFailed
from audioscribe.export import TranscriptExporter
from audioscribe.pipeline import TranscriptionPipeline
from audioscribe.state import Phase, UIState
from audioscribe.transcription.client import TranscriptionClient
from audioscribe.transcription.gemini import GeminiTranscriptionClient


class FakeGemini:
    """Records every request and answers with a canned JSON body."""

    def __init__(self, body: dict) -> None:
        self.body = body
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(200, json=self.body)

    @property
    def inline_data(self) -> dict:
        body = json.loads(self.requests[-1].content)
        return body["contents"][0]["parts"][1]["inlineData"]


def reply(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def make_backend():
    backend = MagicMock()
    backend.get_format_from_width.return_value = 8
    backend.open.return_value = MagicMock()
    return backend


def pyaudio_with(backend) -> MagicMock:
    """A stand-in for the pyaudio module handing out the given backend."""
    module = MagicMock()
    module.PyAudio.return_value = backend
    module.paContinue = 0
    return module


def make_pipeline(api, tmp_path, backend=None, pdf_enabled=False, **kwargs):
    client = GeminiTranscriptionClient("test-key", transport=httpx.MockTransport(api))
    recorder = MicrophoneRecorder(backend_loader=lambda: pyaudio_with(backend or make_backend()))
    exporter = TranscriptExporter(tmp_path, pdf_enabled=pdf_enabled)
    return TranscriptionPipeline(client, recorder, exporter, **kwargs)


def audio_file(tmp_path, name="clip.wav", mime="audio/wav", content=b"RIFF-fake-audio"):
    path = tmp_path / name
    path.write_bytes(content)
    return SelectedFile.from_path(path, mime)


# ── end-to-end scenarios ──────────────────────────────────────────────────────


async def test_record_silence_then_stop_transcribes_hello_world(tmp_path):
    api = FakeGemini(reply("hello world"))
    backend = make_backend()
    pipeline = make_pipeline(api, tmp_path, backend=backend)

    await pipeline.start_recording()
    assert pipeline.state.phase is Phase.RECORDING

    callback = backend.open.call_args.kwargs["stream_callback"]
    silence = b"\x00\x00" * 1000
    list(map(lambda _: callback(silence, 1000, {}, 0), range(32)))  # 2 s at 16 kHz

    await pipeline.stop_recording()

    assert pipeline.state == UIState(transcription="hello world")
    inline = api.inline_data
    assert inline["mimeType"] == "audio/webm"
    with av.open(io.BytesIO(base64.b64decode(inline["data"]))) as container:
        assert "webm" in container.format.name
        assert container.streams.audio[0].codec_context.name == "opus"
        assert container.duration / av.time_base == pytest.approx(2.0, abs=0.1)
    backend.terminate.assert_called_once()


async def test_upload_wav_with_empty_candidates_shows_error(tmp_path):
    api = FakeGemini({"candidates": []})
    pipeline = make_pipeline(api, tmp_path)

    await pipeline.select_file(audio_file(tmp_path))
    await pipeline.trigger_upload()

    assert pipeline.state.phase is Phase.IDLE
    assert pipeline.state.transcription is None
    assert pipeline.state.error == "No transcription found or unexpected response structure."
    assert api.inline_data["mimeType"] == "audio/wav"
    assert base64.b64decode(api.inline_data["data"]) == b"RIFF-fake-audio"


async def test_download_without_pdf_writes_plain_text(tmp_path):
    pipeline = make_pipeline(FakeGemini(reply("abc")), tmp_path)
    await pipeline.select_file(audio_file(tmp_path, name="clip.wav"))
    await pipeline.trigger_upload()

    result = await pipeline.download()

    assert result.format == "text"
    assert result.path.name == "clip.wav.txt"
    assert result.path.read_bytes() == b"abc"
    assert pipeline.state.transcription == "abc"
    assert pipeline.state.error == "PDF export unavailable. Downloading as plain text."


async def test_download_after_recording_uses_default_name(tmp_path):
    pipeline = make_pipeline(FakeGemini(reply("abc")), tmp_path)
    await pipeline.start_recording()
    await pipeline.stop_recording()

    result = await pipeline.download()

    assert result.path.name == "transcription.txt"


async def test_download_without_transcription_is_noop(tmp_path):
    pipeline = make_pipeline(FakeGemini(reply("abc")), tmp_path)

    assert await pipeline.download() is None
    assert list(tmp_path.iterdir()) == []


# ── recording properties ──────────────────────────────────────────────────────


async def test_start_recording_clears_file_result_and_error(tmp_path):
    pipeline = make_pipeline(FakeGemini({"candidates": []}), tmp_path)
    await pipeline.select_file(audio_file(tmp_path))
    await pipeline.trigger_upload()
    assert pipeline.state.error

    await pipeline.start_recording()

    assert pipeline.selected_file is None
    assert pipeline.state == UIState(phase=Phase.RECORDING)


async def test_start_recording_device_failure_surfaces_error(tmp_path):
    pyaudio = pyaudio_with(None)
    pyaudio.PyAudio.side_effect = OSError("No Default Input Device Available")
    client = GeminiTranscriptionClient("k", transport=httpx.MockTransport(FakeGemini(reply("x"))))
    pipeline = TranscriptionPipeline(
        client,
        MicrophoneRecorder(backend_loader=lambda: pyaudio),
        TranscriptExporter(tmp_path, pdf_enabled=False),
    )

    await pipeline.start_recording()

    assert pipeline.state.phase is Phase.IDLE
    assert pipeline.state.error.startswith("Could not access microphone")


async def test_start_recording_twice_is_noop(tmp_path):
    pyaudio = pyaudio_with(make_backend())
    client = GeminiTranscriptionClient("k", transport=httpx.MockTransport(FakeGemini(reply("x"))))
    pipeline = TranscriptionPipeline(
        client,
        MicrophoneRecorder(backend_loader=lambda: pyaudio),
        TranscriptExporter(tmp_path, pdf_enabled=False),
    )

    await pipeline.start_recording()
    await pipeline.start_recording()

    pyaudio.PyAudio.assert_called_once()
    assert pipeline.state.recording


async def test_stop_while_not_recording_is_noop(tmp_path):
    api = FakeGemini(reply("x"))
    pipeline = make_pipeline(api, tmp_path)
    await pipeline.select_file(audio_file(tmp_path, mime="video/mp4"))
    before = pipeline.state

    await pipeline.stop_recording()

    assert pipeline.state is before
    assert api.requests == []


async def test_zero_length_recording_is_still_transcribed(tmp_path):
    api = FakeGemini(reply("(silence)"))
    pipeline = make_pipeline(api, tmp_path)

    await pipeline.start_recording()
    await pipeline.stop_recording()

    assert pipeline.state.transcription == "(silence)"
    assert base64.b64decode(api.inline_data["data"]).startswith(b"\x1a\x45\xdf\xa3")
    assert api.inline_data["mimeType"] == "audio/webm"


async def test_microphone_released_even_when_transcription_fails(tmp_path):
    def broken(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    backend = make_backend()
    pipeline = make_pipeline(broken, tmp_path, backend=backend)

    await pipeline.start_recording()
    await pipeline.stop_recording()

    backend.terminate.assert_called_once()
    assert pipeline.state.phase is Phase.IDLE
    assert pipeline.state.error == "Failed to transcribe audio. Please try again."


# ── file selection / upload properties ────────────────────────────────────────


async def test_upload_without_file_makes_no_network_call(tmp_path):
    api = FakeGemini(reply("x"))
    pipeline = make_pipeline(api, tmp_path)

    await pipeline.trigger_upload()

    assert pipeline.state.phase is Phase.IDLE
    assert pipeline.state.error == "Please select an audio file to upload."
    assert api.requests == []


async def test_select_non_audio_file_rejects_and_unstages(tmp_path):
    pipeline = make_pipeline(FakeGemini(reply("x")), tmp_path)
    await pipeline.select_file(audio_file(tmp_path))

    await pipeline.select_file(audio_file(tmp_path, name="notes.txt", mime="text/plain"))

    assert pipeline.selected_file is None
    assert pipeline.state.error == "Please select an audio file (e.g., MP3, WAV)."


async def test_select_file_clears_prior_result_and_error(tmp_path):
    pipeline = make_pipeline(FakeGemini(reply("first")), tmp_path)
    await pipeline.select_file(audio_file(tmp_path, name="a.wav"))
    await pipeline.trigger_upload()
    assert pipeline.state.transcription == "first"

    second = audio_file(tmp_path, name="b.mp3", mime="audio/mpeg")
    await pipeline.select_file(second)

    assert pipeline.selected_file == second
    assert pipeline.state == UIState()


async def test_select_file_while_recording_transcribes_partial_clip(tmp_path):
    api = FakeGemini(reply("partial"))
    backend = make_backend()
    pipeline = make_pipeline(api, tmp_path, backend=backend)
    await pipeline.start_recording()
    callback = backend.open.call_args.kwargs["stream_callback"]
    callback(b"\x00\x00" * 1600, 1600, {}, 0)
    file = audio_file(tmp_path)

    await pipeline.select_file(file)

    backend.terminate.assert_called_once()
    assert len(api.requests) == 1
    assert api.inline_data["mimeType"] == "audio/webm"
    assert pipeline.state == UIState(transcription="partial")
    assert pipeline.selected_file == file


async def test_upload_unreadable_file_reports_read_failure(tmp_path):
    api = FakeGemini(reply("x"))
    pipeline = make_pipeline(api, tmp_path)
    await pipeline.select_file(SelectedFile.from_path(tmp_path / "missing.wav", "audio/wav"))

    await pipeline.trigger_upload()

    assert pipeline.state.error == "Failed to read the audio file."
    assert pipeline.state.phase is Phase.IDLE
    assert api.requests == []


async def test_new_attempt_replaces_previous_result(tmp_path):
    answers = iter([reply("one"), {"candidates": []}])

    def api(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=next(answers))

    pipeline = make_pipeline(api, tmp_path)
    await pipeline.select_file(audio_file(tmp_path))
    await pipeline.trigger_upload()
    assert pipeline.state.transcription == "one"

    await pipeline.trigger_upload()

    assert pipeline.state.transcription is None
    assert pipeline.state.error is not None


# ── state notifications ───────────────────────────────────────────────────────


async def test_transcribing_phase_is_visible_and_always_released(tmp_path):
    seen: list[Phase] = []
    pipeline = make_pipeline(
        FakeGemini(reply("x")), tmp_path, on_change=lambda state: seen.append(state.phase)
    )
    await pipeline.select_file(audio_file(tmp_path))

    await pipeline.trigger_upload()

    assert Phase.TRANSCRIBING in seen
    assert seen[-1] is Phase.IDLE


async def test_client_failure_from_any_backend_is_surfaced(tmp_path):
    client = MagicMock(spec=TranscriptionClient)
    client.transcribe = AsyncMock(side_effect=TranscriptionFailed())
    pipeline = TranscriptionPipeline(
        client,
        MicrophoneRecorder(backend_loader=lambda: pyaudio_with(make_backend())),
        TranscriptExporter(tmp_path, pdf_enabled=False),
    )
    await pipeline.select_file(audio_file(tmp_path, name="a.ogg", mime="audio/ogg"))

    await pipeline.trigger_upload()

    request = client.transcribe.call_args.args[0]
    assert isinstance(request, TranscriptionRequest)
    assert request.mime_type == "audio/ogg"
    assert pipeline.state.error == "Failed to transcribe audio. Please try again."


async def test_reset_returns_to_fresh_idle(tmp_path):
    backend = make_backend()
    pipeline = make_pipeline(FakeGemini(reply("x")), tmp_path, backend=backend)
    await pipeline.start_recording()

    await pipeline.reset()

    assert pipeline.state == UIState()
    assert pipeline.selected_file is None
    backend.terminate.assert_called_once()


async def test_unexpected_errors_propagate(tmp_path):
    client = MagicMock(spec=TranscriptionClient)
    client.transcribe = AsyncMock(side_effect=RuntimeError("bug"))
    pipeline = TranscriptionPipeline(
        client,
        MicrophoneRecorder(backend_loader=lambda: pyaudio_with(make_backend())),
        TranscriptExporter(tmp_path, pdf_enabled=False),
    )
    await pipeline.select_file(audio_file(tmp_path))

    with pytest.raises(RuntimeError):
        await pipeline.trigger_upload()

    assert pipeline.state.phase is Phase.IDLE
