"""TranscriptExporter — saves a transcription as PDF, or plain text without fpdf2."""
import importlib.util
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional

from audioscribe.constants import (
    DEFAULT_EXPORT_STEM,
    MSG_EXPORTED,
    PDF_EXTENSION,
    PDF_FONT,
    PDF_FONT_SIZE,
    PDF_LINE_HEIGHT,
    PDF_MODULE,
    STRIPPED_SOURCE_SUFFIX,
    TEXT_EXTENSION,
)

logger = logging.getLogger(__name__)

ExportFormat = Literal["pdf", "text"]


@dataclass(frozen=True)
class ExportResult:
    path: Path
    format: ExportFormat
    fell_back: bool


def export_stem(source_name: Optional[str]) -> str:
    """Name artifacts after the source file, minus a literal '.mp3' suffix."""
    match source_name:
        case str() as name if name.endswith(STRIPPED_SOURCE_SUFFIX):
            return name[: -len(STRIPPED_SOURCE_SUFFIX)] or DEFAULT_EXPORT_STEM
        case str() as name if name:
            return name
        case _:
            return DEFAULT_EXPORT_STEM


def pdf_available() -> bool:
    return importlib.util.find_spec(PDF_MODULE) is not None


def render_pdf(text: str, path: Path) -> None:
    from fpdf import FPDF

    pdf = FPDF(format="A4")
    pdf.add_page()
    pdf.set_font(PDF_FONT, size=PDF_FONT_SIZE)
    pdf.multi_cell(0, PDF_LINE_HEIGHT, text)
    pdf.output(str(path))


def render_text(text: str, path: Path) -> None:
    path.write_text(text, encoding="utf-8", newline="")


class TranscriptExporter:

    def __init__(self, output_dir: Path = Path("."), pdf_enabled: Optional[bool] = None) -> None:
        self._output_dir = output_dir
        self._pdf_enabled = pdf_enabled

    def _use_pdf(self) -> bool:
        match self._pdf_enabled:
            case None:
                return pdf_available()
            case enabled:
                return enabled

    def export(self, text: str, source_name: Optional[str] = None) -> ExportResult:
        self._output_dir.mkdir(parents=True, exist_ok=True)
        stem = export_stem(source_name)

        if self._use_pdf():
            from fpdf.errors import FPDFException

            path = self._output_dir / (stem + PDF_EXTENSION)
            try:
                render_pdf(text, path)
                logger.info(MSG_EXPORTED, path)
                return ExportResult(path=path, format="pdf", fell_back=False)
            except FPDFException as exc:
                logger.warning("PDF rendering failed, saving as text: %s", exc)

        path = self._output_dir / (stem + TEXT_EXTENSION)
        render_text(text, path)
        logger.info(MSG_EXPORTED, path)
        return ExportResult(path=path, format="text", fell_back=True)
