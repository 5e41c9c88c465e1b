"""UIState — the pipeline phase plus optional error and result.

Transitions are pure functions returning a new state; the pipeline is the
only caller. A single phase enum makes "recording while transcribing"
unrepresentable.
"""
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional


class Phase(Enum):
    IDLE = "idle"
    RECORDING = "recording"
    TRANSCRIBING = "transcribing"


@dataclass(frozen=True)
class UIState:
    phase: Phase = Phase.IDLE
    error: Optional[str] = None
    transcription: Optional[str] = None

    @property
    def recording(self) -> bool:
        return self.phase is Phase.RECORDING

    @property
    def transcribing(self) -> bool:
        return self.phase is Phase.TRANSCRIBING


def cleared(state: UIState) -> UIState:
    """Drop any prior error and result, keeping the phase."""
    return replace(state, error=None, transcription=None)


def begin_recording(state: UIState) -> UIState:
    match state.phase:
        case Phase.IDLE:
            return UIState(phase=Phase.RECORDING)
        case _:
            return state


def end_recording(state: UIState) -> UIState:
    match state.phase:
        case Phase.RECORDING:
            return replace(state, phase=Phase.IDLE)
        case _:
            return state


def begin_transcribing(state: UIState) -> UIState:
    match state.phase:
        case Phase.IDLE:
            return UIState(phase=Phase.TRANSCRIBING)
        case _:
            return state


def succeeded(state: UIState, text: str) -> UIState:
    return replace(state, error=None, transcription=text)


def failed(state: UIState, message: str) -> UIState:
    return replace(state, error=message, transcription=None)


def noted(state: UIState, message: str) -> UIState:
    """Show a message without touching the result."""
    return replace(state, error=message)


def settled(state: UIState) -> UIState:
    """Leave any loading phase; error and result are kept."""
    return replace(state, phase=Phase.IDLE)
