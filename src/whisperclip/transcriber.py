"""Transcription through the hosted Whisper endpoint."""

from __future__ import annotations

import logging
import os
from typing import Optional

import requests

from . import api
from .errors import AudioFileError, ProtocolError

logger = logging.getLogger(__name__)

TRANSCRIPTION_URL = "https://api.openai.com/v1/audio/transcriptions"
TRANSCRIPTION_MODEL = "whisper-1"


class TranscriptionClient:
    def __init__(
        self,
        url: str = TRANSCRIPTION_URL,
        model: str = TRANSCRIPTION_MODEL,
        timeout: float = 60.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.url = url
        self.model = model
        self.timeout = timeout
        self.session = session or requests.Session()

    def transcribe(self, file_path: str, language: str, credential: str) -> str:
        """Upload ``file_path`` and return the transcript text.

        Raises ``AudioFileError`` when the file cannot be read,
        ``NetworkError`` on connection problems and ``ProtocolError`` when
        the endpoint answers with an error status or an unexpected body.
        """
        headers = api.auth_headers(credential)
        if not os.path.isfile(file_path):
            raise AudioFileError(f"Audio file not found: {file_path}")

        data = {"model": self.model}
        if language:
            data["language"] = language

        logger.info("Transcribing %s (language=%s)", file_path, language or "auto")
        try:
            with open(file_path, "rb") as handle:
                files = {"file": (os.path.basename(file_path), handle, "audio/wav")}
                payload = api.post(
                    self.session,
                    self.url,
                    self.timeout,
                    headers=headers,
                    data=data,
                    files=files,
                )
        except OSError as exc:
            raise AudioFileError(f"Cannot read {file_path}: {exc}") from exc

        text = payload.get("text")
        if not isinstance(text, str):
            raise ProtocolError("Transcription response has no 'text' field")
        logger.debug("Raw transcript: %s", text)
        return text


def transcribe_audio(
    audio_path: str,
    language: str,
    credential: str,
    url: str = TRANSCRIPTION_URL,
    model: str = TRANSCRIPTION_MODEL,
    timeout: float = 60.0,
) -> str:
    client = TranscriptionClient(url=url, model=model, timeout=timeout)
    return client.transcribe(audio_path, language, credential)
