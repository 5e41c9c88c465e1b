"""SelectedFile — a staged audio file plus its declared MIME type."""
import asyncio
import logging
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from audioscribe.constants import AUDIO_MIME_PREFIX, FALLBACK_MIME_TYPE
from audioscribe.errors import FileReadFailed, InvalidFileType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelectedFile:
    path: Path
    name: str
    mime_type: str

    @classmethod
    def from_path(cls, path: str | Path, mime_type: Optional[str] = None) -> "SelectedFile":
        """Declare a file; the MIME type is guessed from its name unless given."""
        p = Path(path).expanduser()
        declared = mime_type or mimetypes.guess_type(p.name)[0] or FALLBACK_MIME_TYPE
        return cls(path=p, name=p.name, mime_type=declared)

    @property
    def is_audio(self) -> bool:
        return self.mime_type.startswith(AUDIO_MIME_PREFIX)


def validate_audio(file: SelectedFile) -> SelectedFile:
    match file.is_audio:
        case True:
            return file
        case False:
            raise InvalidFileType(file.mime_type)


async def read_file(file: SelectedFile) -> bytes:
    """Read the whole file off the event loop. Raises FileReadFailed."""
    try:
        return await asyncio.to_thread(file.path.read_bytes)
    except OSError as exc:
        logger.warning("Reading %s failed: %s", file.path, exc)
        raise FileReadFailed() from exc
