"""Transcript clean-up through a chat-completion endpoint."""

from __future__ import annotations

import logging
from typing import Optional

import requests

from . import api
from .errors import ProtocolError

logger = logging.getLogger(__name__)

REFINEMENT_URL = "https://api.openai.com/v1/chat/completions"
REFINEMENT_MODEL = "gpt-3.5-turbo"

ROLE_PROMPTS = {
    "en": "You are an editor that corrects errors in speech to text transcription.",
    "cs": "Jste editor, který opravuje chyby v přepisu řeči na text.",
}


def role_prompt(language: str) -> str:
    """English prompt for ``en``, Czech for everything else."""
    if language == "en":
        return ROLE_PROMPTS["en"]
    return ROLE_PROMPTS["cs"]


class RefinementClient:
    def __init__(
        self,
        url: str = REFINEMENT_URL,
        model: str = REFINEMENT_MODEL,
        timeout: float = 60.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.url = url
        self.model = model
        self.timeout = timeout
        self.session = session or requests.Session()

    def build_payload(self, raw_text: str, language: str) -> dict:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": role_prompt(language)},
                {"role": "user", "content": raw_text},
            ],
        }

    def refine(self, raw_text: str, language: str, credential: str) -> str:
        """Return the corrected transcript.

        When the endpoint answers without any choices the raw text comes back
        unchanged; that is a normal outcome, not an error.
        """
        if not raw_text.strip():
            return raw_text
        headers = api.auth_headers(credential)

        payload = api.post(
            self.session,
            self.url,
            self.timeout,
            headers=headers,
            json=self.build_payload(raw_text, language),
        )

        choices = payload.get("choices") or []
        if not choices:
            logger.info("Refinement returned no choices, keeping raw transcript")
            return raw_text

        try:
            content = choices[0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise ProtocolError("Refinement response has no message content") from exc
        if not isinstance(content, str):
            raise ProtocolError("Refinement message content is not text")
        logger.debug("Refined transcript: %s", content)
        return content
