"""Shared request/response handling for the OpenAI-style endpoints."""

from __future__ import annotations

import logging
from typing import Any, Dict

import requests

from .errors import ConfigError, NetworkError, ProtocolError

logger = logging.getLogger(__name__)


def auth_headers(credential: str) -> Dict[str, str]:
    if not credential or not credential.strip():
        raise ConfigError("API key is not set.")
    key = credential.strip()
    try:
        key.encode("latin-1")
    except UnicodeEncodeError as exc:
        raise ConfigError("API key contains invalid characters.") from exc
    return {"Authorization": f"Bearer {key}"}


def post(session: requests.Session, url: str, timeout: float, **kwargs) -> Dict[str, Any]:
    """POST and return the decoded JSON object, mapping failures to our errors."""
    try:
        response = session.post(url, timeout=timeout, **kwargs)
    except requests.Timeout as exc:
        raise NetworkError(f"Request to {url} timed out after {timeout}s") from exc
    except requests.RequestException as exc:
        raise NetworkError(f"Request to {url} failed: {exc}") from exc
    except UnicodeError as exc:
        raise ConfigError(f"Request to {url} cannot be encoded: {exc}") from exc
    except ValueError as exc:
        raise NetworkError(f"Request to {url} failed: {exc}") from exc

    logger.info("POST %s -> %s", url, response.status_code)
    if not 200 <= response.status_code < 300:
        raise ProtocolError(
            f"{url} returned HTTP {response.status_code}: {_error_detail(response)}",
            status_code=response.status_code,
        )

    try:
        data = response.json()
    except ValueError as exc:
        raise ProtocolError(
            f"{url} returned a body that is not JSON",
            status_code=response.status_code,
        ) from exc
    if not isinstance(data, dict):
        raise ProtocolError(
            f"{url} returned JSON that is not an object",
            status_code=response.status_code,
        )
    return data


def _error_detail(response: requests.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return (response.text or "").strip()[:200]
    if isinstance(data, dict) and isinstance(data.get("error"), dict):
        message = data["error"].get("message")
        if message:
            return str(message)
    return (response.text or "").strip()[:200]
