from dataclasses import dataclass
from pathlib import Path
import os
from dotenv import load_dotenv

from audioscribe.constants import (
    CHANNELS,
    FRAMES_PER_BUFFER,
    GEMINI_API_BASE,
    GEMINI_MODEL,
    SAMPLE_RATE,
    TRANSCRIPTION_PROMPT,
    TRANSCRIPTION_TIMEOUT,
)


@dataclass(frozen=True)
class Config:
    gemini_api_key: str
    gemini_model: str
    gemini_api_base: str
    transcription_prompt: str
    transcription_timeout: float
    log_level: str
    sample_rate: int
    channels: int
    frames_per_buffer: int
    output_dir: Path

    @classmethod
    def from_env(cls) -> "Config":
        load_dotenv()

        api_key = os.getenv("GEMINI_API_KEY", "")
        model = os.getenv("GEMINI_MODEL", GEMINI_MODEL)
        api_base = os.getenv("GEMINI_API_BASE", GEMINI_API_BASE)
        prompt = os.getenv("TRANSCRIPTION_PROMPT") or TRANSCRIPTION_PROMPT
        timeout = os.getenv("TRANSCRIPTION_TIMEOUT", str(TRANSCRIPTION_TIMEOUT))
        log_level = os.getenv("LOG_LEVEL", "INFO")
        sample_rate = os.getenv("SAMPLE_RATE", str(SAMPLE_RATE))
        channels = os.getenv("CHANNELS", str(CHANNELS))
        frames_per_buffer = os.getenv("FRAMES_PER_BUFFER", str(FRAMES_PER_BUFFER))
        output_dir = os.getenv("OUTPUT_DIR") or "."

        return cls._validate(
            gemini_api_key=api_key,
            gemini_model=model,
            gemini_api_base=api_base.rstrip("/"),
            transcription_prompt=prompt,
            transcription_timeout=float(timeout),
            log_level=log_level,
            sample_rate=int(sample_rate),
            channels=int(channels),
            frames_per_buffer=int(frames_per_buffer),
            output_dir=Path(output_dir),
        )

    @staticmethod
    def _validate(
        gemini_api_key: str,
        gemini_model: str,
        gemini_api_base: str,
        transcription_prompt: str,
        transcription_timeout: float,
        log_level: str,
        sample_rate: int,
        channels: int,
        frames_per_buffer: int,
        output_dir: Path,
    ) -> "Config":
        # An empty API key is allowed: requests simply fail upstream.
        checks = (
            ("SAMPLE_RATE", sample_rate),
            ("CHANNELS", channels),
            ("FRAMES_PER_BUFFER", frames_per_buffer),
            ("TRANSCRIPTION_TIMEOUT", transcription_timeout),
        )
        invalid = [name for name, value in checks if value <= 0]
        match invalid:
            case []:
                pass
            case [name, *_]:
                raise ValueError(f"{name} must be a positive number")

        match channels:
            case 1 | 2:
                pass
            case _:
                raise ValueError("CHANNELS must be 1 (mono) or 2 (stereo)")

        return Config(
            gemini_api_key=gemini_api_key,
            gemini_model=gemini_model,
            gemini_api_base=gemini_api_base,
            transcription_prompt=transcription_prompt,
            transcription_timeout=transcription_timeout,
            log_level=log_level,
            sample_rate=sample_rate,
            channels=channels,
            frames_per_buffer=frames_per_buffer,
            output_dir=output_dir,
        )
