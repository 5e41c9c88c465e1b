"""Entry point — wires Config → recorder/client/exporter → pipeline → CLI."""
import asyncio
import logging

from rich.logging import RichHandler

from audioscribe.capture.microphone import MicrophoneRecorder
from audioscribe.cli import TranscriberCLI
from audioscribe.config import Config
from audioscribe.constants import MSG_APP_STARTING
from audioscribe.export import TranscriptExporter
from audioscribe.pipeline import TranscriptionPipeline
from audioscribe.transcription.gemini import GeminiTranscriptionClient


def _setup_logging(level: str) -> None:
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    list(map(root.removeHandler, root.handlers[:]))
    root.addHandler(RichHandler(rich_tracebacks=True))


def build_pipeline(config: Config) -> TranscriptionPipeline:
    client = GeminiTranscriptionClient(
        config.gemini_api_key,
        model=config.gemini_model,
        base_url=config.gemini_api_base,
        prompt=config.transcription_prompt,
        timeout=config.transcription_timeout,
    )
    recorder = MicrophoneRecorder(
        sample_rate=config.sample_rate,
        channels=config.channels,
        frames_per_buffer=config.frames_per_buffer,
    )
    exporter = TranscriptExporter(config.output_dir)
    return TranscriptionPipeline(client, recorder, exporter)


def main() -> None:
    config = Config.from_env()
    _setup_logging(config.log_level)

    logger = logging.getLogger(__name__)
    logger.info(MSG_APP_STARTING)

    cli = TranscriberCLI(build_pipeline(config))
    try:
        asyncio.run(cli.run())
    except (KeyboardInterrupt, EOFError):
        pass


if __name__ == "__main__":
    main()
