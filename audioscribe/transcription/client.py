"""TranscriptionClient — abstract base for speech-to-text backends."""
from abc import ABC, abstractmethod

from audioscribe.encoder import TranscriptionRequest


class TranscriptionClient(ABC):
    @abstractmethod
    async def transcribe(self, request: TranscriptionRequest) -> str:
        """Convert one encoded audio payload to text. Raises TranscriptionFailed."""
        ...
