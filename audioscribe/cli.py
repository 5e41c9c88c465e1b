"""Terminal front-end — renders UIState with rich and dispatches typed commands."""
import asyncio
import logging
import shlex
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Callable, Optional

from rich.console import Console, Group
from rich.panel import Panel
from rich.prompt import Prompt
from rich.text import Text

from audioscribe.capture.files import SelectedFile
from audioscribe.constants import (
    CLI_PROMPT,
    CMD_DOWNLOAD,
    CMD_HELP,
    CMD_QUIT,
    CMD_RECORD,
    CMD_RESET,
    CMD_SELECT,
    CMD_STOP,
    CMD_UPLOAD,
    MSG_COMMAND_ERROR,
    MSG_COMMAND_FAILED,
    MSG_HELP,
    MSG_NO_SELECTED_FILE,
    MSG_SAVED,
    MSG_SELECT_USAGE,
    MSG_SELECTED_FILE,
    MSG_TRANSCRIBING_STATUS,
    MSG_UNKNOWN_COMMAND,
)
from audioscribe.pipeline import TranscriptionPipeline
from audioscribe.state import UIState

logger = logging.getLogger(__name__)

Handler = Callable[[tuple[str, ...]], Awaitable[None]]


@dataclass(frozen=True)
class Command:
    name: str
    args: tuple[str, ...] = ()


def parse_command(line: str) -> Optional[Command]:
    try:
        parts = shlex.split(line)
    except ValueError:
        parts = line.split()
    match parts:
        case []:
            return None
        case [name, *args]:
            return Command(name=name.lower(), args=tuple(args))


def render_state(state: UIState, selected: Optional[SelectedFile]) -> Group:
    record = Panel(
        Text("● Recording — type 'stop'" if state.recording else "Type 'record' to start"),
        title="Record Audio",
    )
    upload = Panel(
        Text(MSG_SELECTED_FILE % selected.name if selected else MSG_NO_SELECTED_FILE),
        title="Upload Audio File",
    )
    parts = [record, upload]
    if state.transcribing:
        parts.append(Text(MSG_TRANSCRIBING_STATUS, style="magenta"))
    if state.error:
        parts.append(Panel(Text(state.error), title="Error!", border_style="red"))
    if state.transcription:
        parts.append(
            Panel(Text(state.transcription), title="Transcription:", border_style="blue")
        )
    return Group(*parts)


class TranscriberCLI:

    def __init__(self, pipeline: TranscriptionPipeline, console: Optional[Console] = None) -> None:
        self._pipeline = pipeline
        self._console = console or Console()
        self._handlers: dict[str, Handler] = {
            CMD_RECORD: self._record,
            CMD_STOP: self._stop,
            CMD_SELECT: self._select,
            CMD_UPLOAD: self._upload,
            CMD_DOWNLOAD: self._download,
            CMD_RESET: self._reset,
            CMD_HELP: self._help,
        }

    def show(self) -> None:
        self._console.print(render_state(self._pipeline.state, self._pipeline.selected_file))

    async def dispatch(self, command: Command) -> bool:
        """Run one command. Returns False when the user asked to quit."""
        match command.name:
            case name if name == CMD_QUIT:
                return False
            case name if name in self._handlers:
                try:
                    await self._handlers[name](command.args)
                except Exception:
                    logger.exception(MSG_COMMAND_FAILED, name)
                    self._console.print(Text(MSG_COMMAND_ERROR % name, style="red"))
            case name:
                self._console.print(MSG_UNKNOWN_COMMAND % name, markup=False)
        return True

    async def run(self) -> None:
        self._console.print(MSG_HELP, markup=False)
        running = True
        try:
            while running:
                line = await asyncio.to_thread(
                    Prompt.ask, CLI_PROMPT, console=self._console, default="", show_default=False
                )
                match parse_command(line):
                    case None:
                        continue
                    case command:
                        running = await self.dispatch(command)
                if running:
                    self.show()
        finally:
            # Never leave the microphone open on exit.
            await self._pipeline.reset()

    # ── command handlers ──────────────────────────────────────────────────────

    async def _record(self, args: tuple[str, ...]) -> None:
        await self._pipeline.start_recording()

    async def _stop(self, args: tuple[str, ...]) -> None:
        with self._console.status(MSG_TRANSCRIBING_STATUS):
            await self._pipeline.stop_recording()

    async def _select(self, args: tuple[str, ...]) -> None:
        match args:
            case (path,):
                await self._pipeline.select_file(SelectedFile.from_path(path))
            case (path, mime_type):
                await self._pipeline.select_file(SelectedFile.from_path(path, mime_type))
            case _:
                self._console.print(MSG_SELECT_USAGE, markup=False)

    async def _upload(self, args: tuple[str, ...]) -> None:
        with self._console.status(MSG_TRANSCRIBING_STATUS):
            await self._pipeline.trigger_upload()

    async def _download(self, args: tuple[str, ...]) -> None:
        try:
            result = await self._pipeline.download()
        except OSError as exc:
            logger.exception("Saving transcription failed")
            self._console.print(Text(f"Could not save transcription: {exc}", style="red"))
            return
        match result:
            case None:
                pass
            case saved:
                self._console.print(MSG_SAVED % saved.path, markup=False)

    async def _reset(self, args: tuple[str, ...]) -> None:
        await self._pipeline.reset()

    async def _help(self, args: tuple[str, ...]) -> None:
        self._console.print(MSG_HELP, markup=False)
