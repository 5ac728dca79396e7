from unittest.mock import Mock

import pytest
import requests

from conftest import make_response
from whisperclip.audio_utils import write_silence
from whisperclip.errors import AudioFileError, ConfigError, NetworkError, ProtocolError
from whisperclip.transcriber import TranscriptionClient


@pytest.fixture
def audio_path(tmp_path):
    path = tmp_path / "clip.wav"
    write_silence(str(path), 0.1)
    return str(path)


def _client(response=None, side_effect=None):
    session = Mock(spec=requests.Session)
    session.post.return_value = response
    session.post.side_effect = side_effect
    return TranscriptionClient(session=session, timeout=5), session


def test_transcribe_returns_text(audio_path):
    client, session = _client(make_response(200, {"text": "hello world"}))

    assert client.transcribe(audio_path, "en", "sk-test") == "hello world"


def test_transcribe_sends_multipart_upload(audio_path):
    client, session = _client(make_response(200, {"text": "ok"}))
    client.transcribe(audio_path, "cs", "sk-test")

    args, kwargs = session.post.call_args
    assert args[0] == "https://api.openai.com/v1/audio/transcriptions"
    assert kwargs["headers"] == {"Authorization": "Bearer sk-test"}
    assert kwargs["data"] == {"model": "whisper-1", "language": "cs"}
    assert kwargs["files"]["file"][0] == "clip.wav"
    assert kwargs["timeout"] == 5


def test_transcribe_omits_empty_language(audio_path):
    client, session = _client(make_response(200, {"text": "ok"}))
    client.transcribe(audio_path, "", "sk-test")

    assert "language" not in session.post.call_args.kwargs["data"]


def test_non_2xx_is_protocol_error(audio_path):
    body = {"error": {"message": "Incorrect API key provided"}}
    client, _ = _client(make_response(401, body))

    with pytest.raises(ProtocolError) as info:
        client.transcribe(audio_path, "en", "sk-bad")
    assert info.value.status_code == 401
    assert "Incorrect API key" in str(info.value)


def test_malformed_json_is_protocol_error(audio_path):
    client, _ = _client(make_response(200, text="<html>gateway</html>"))

    with pytest.raises(ProtocolError):
        client.transcribe(audio_path, "en", "sk-test")


def test_missing_text_field_is_protocol_error(audio_path):
    client, _ = _client(make_response(200, {"transcript": "hi"}))

    with pytest.raises(ProtocolError):
        client.transcribe(audio_path, "en", "sk-test")


def test_connection_failure_is_network_error(audio_path):
    client, _ = _client(side_effect=requests.ConnectionError("refused"))

    with pytest.raises(NetworkError):
        client.transcribe(audio_path, "en", "sk-test")


def test_timeout_is_network_error(audio_path):
    client, _ = _client(side_effect=requests.Timeout("slow"))

    with pytest.raises(NetworkError):
        client.transcribe(audio_path, "en", "sk-test")


def test_missing_file_is_audio_file_error(tmp_path):
    client, session = _client(make_response(200, {"text": "x"}))

    with pytest.raises(AudioFileError):
        client.transcribe(str(tmp_path / "gone.wav"), "en", "sk-test")
    session.post.assert_not_called()


def test_missing_credential_is_config_error(audio_path):
    client, session = _client(make_response(200, {"text": "x"}))

    with pytest.raises(ConfigError):
        client.transcribe(audio_path, "en", "  ")
    session.post.assert_not_called()


def test_credential_with_non_latin1_characters_is_config_error(audio_path):
    client, session = _client(make_response(200, {"text": "x"}))

    with pytest.raises(ConfigError):
        client.transcribe(audio_path, "en", "sk-abc\u200b")
    session.post.assert_not_called()


def test_unencodable_request_is_config_error(audio_path):
    error = UnicodeEncodeError("latin-1", "\u200b", 0, 1, "ordinal not in range")
    client, _ = _client(side_effect=error)

    with pytest.raises(ConfigError):
        client.transcribe(audio_path, "en", "sk-test")
