"""GeminiTranscriptionClient — Gemini generateContent speech-to-text backend."""
import logging
from typing import Any, Optional

import httpx

from audioscribe.constants import (
    GEMINI_API_BASE,
    GEMINI_GENERATE_PATH,
    GEMINI_KEY_PARAM,
    GEMINI_MODEL,
    MSG_API_ERROR,
    MSG_ERR_NO_TRANSCRIPTION,
    MSG_ERR_TRANSCRIPTION,
    TRANSCRIPTION_PROMPT,
    TRANSCRIPTION_TIMEOUT,
)
from audioscribe.encoder import TranscriptionRequest
from audioscribe.errors import TranscriptionFailed
from audioscribe.transcription.client import TranscriptionClient

logger = logging.getLogger(__name__)


def build_payload(request: TranscriptionRequest, prompt: str = TRANSCRIPTION_PROMPT) -> dict:
    return {
        "contents": [
            {
                "role": "user",
                "parts": [
                    {"text": prompt},
                    {
                        "inlineData": {
                            "mimeType": request.mime_type,
                            "data": request.data,
                        }
                    },
                ],
            }
        ]
    }


def extract_text(body: Any) -> str:
    """Return candidates[0].content.parts[0].text or raise TranscriptionFailed."""
    match body:
        case {"candidates": [{"content": {"parts": [{"text": str() as text}, *_]}}, *_]}:
            return text
        case _:
            raise TranscriptionFailed(MSG_ERR_NO_TRANSCRIPTION, reason="malformed")


class GeminiTranscriptionClient(TranscriptionClient):

    def __init__(
        self,
        api_key: str,
        model: str = GEMINI_MODEL,
        base_url: str = GEMINI_API_BASE,
        prompt: str = TRANSCRIPTION_PROMPT,
        timeout: float = TRANSCRIPTION_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._prompt = prompt
        self._timeout = timeout
        self._transport = transport

    @property
    def model(self) -> str:
        return self._model

    @property
    def endpoint(self) -> str:
        return self._base_url + GEMINI_GENERATE_PATH % self._model

    async def transcribe(self, request: TranscriptionRequest) -> str:
        payload = build_payload(request, self._prompt)
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as http:
                response = await http.post(
                    self.endpoint,
                    params={GEMINI_KEY_PARAM: self._api_key},
                    json=payload,
                )
            body = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise TranscriptionFailed(MSG_ERR_TRANSCRIPTION, reason="transport") from exc

        match (response.is_success, body):
            case (True, _):
                return extract_text(body)
            case (False, {"error": {"message": str() as message}}):
                logger.warning(MSG_API_ERROR, message)
            case _:
                logger.warning(MSG_API_ERROR, response.status_code)
        raise TranscriptionFailed(MSG_ERR_TRANSCRIPTION, reason="transport")
