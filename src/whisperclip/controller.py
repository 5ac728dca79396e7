"""Record → transcribe → refine → publish orchestration."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from .clipboard import copy_to_clipboard
from .config import AppConfig, Settings
from .errors import ClipboardError, ConfigError, SessionActiveError, WhisperClipError
from .models import RecordingSession, SessionState, TranscriptResult
from .recorder import CaptureSession
from .refiner import RefinementClient
from .storage import build_recording_path, cleanup_recordings, default_recordings_dir
from .timer import ElapsedTimer
from .transcriber import TranscriptionClient

logger = logging.getLogger(__name__)


class SessionController:
    """Owns the recording state for one application instance.

    ``start`` and ``stop`` form an explicit action pair. ``stop`` runs the
    whole pipeline and blocks its caller until the network calls return; the
    GUI calls it from a worker thread. Failures are reported through
    ``on_error`` and leave the controller idle.
    """

    def __init__(
        self,
        settings: Settings,
        config: Optional[AppConfig] = None,
        capture: Optional[CaptureSession] = None,
        transcriber: Optional[TranscriptionClient] = None,
        refiner: Optional[RefinementClient] = None,
        timer: Optional[ElapsedTimer] = None,
        clipboard: Callable[[str], None] = copy_to_clipboard,
        on_display: Optional[Callable[[str], None]] = None,
        on_error: Optional[Callable[[WhisperClipError], None]] = None,
        on_state: Optional[Callable[[SessionState], None]] = None,
    ) -> None:
        self.settings = settings
        self.config = config or AppConfig()
        self.capture = capture or CaptureSession(
            device_name=self.config.device_name,
            block_size=self.config.block_size,
        )
        self.transcriber = transcriber or TranscriptionClient(
            url=self.config.transcription_url,
            model=self.config.transcription_model,
            timeout=self.config.timeout_seconds,
        )
        if refiner is None and self.config.refine:
            refiner = RefinementClient(
                url=self.config.refinement_url,
                model=self.config.refinement_model,
                timeout=self.config.timeout_seconds,
            )
        self.refiner = refiner
        self.timer = timer
        self.clipboard = clipboard
        self.on_display = on_display
        self.on_error = on_error
        self.on_state = on_state
        self.recordings_dir = self.config.recordings_dir or default_recordings_dir()

        self._lock = threading.Lock()
        self._state = SessionState.IDLE
        self._recording: Optional[RecordingSession] = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def recording(self) -> Optional[RecordingSession]:
        return self._recording

    def start(self) -> Optional[RecordingSession]:
        """Begin a recording.

        Raises ``SessionActiveError`` unless idle. Other failures are
        reported and ``None`` is returned.
        """
        with self._lock:
            if self._state is not SessionState.IDLE:
                raise SessionActiveError(f"Cannot start while {self._state.value}")
            try:
                if not self.settings.credential.strip():
                    raise ConfigError("Set the API key in Settings before recording.")
                sample_rate_hz = self.settings.sample_rate_hz()
                path = build_recording_path(self.recordings_dir)
                if self.timer is not None:
                    self.timer.start()
                self._recording = self.capture.start(path, sample_rate_hz)
            except WhisperClipError as exc:
                if self.timer is not None:
                    self.timer.stop()
                self._recording = None
                failure = exc
            except OSError as exc:
                if self.timer is not None:
                    self.timer.stop()
                self._recording = None
                failure = ConfigError(f"Cannot prepare recordings folder: {exc}")
            else:
                self._state = SessionState.RECORDING
                failure = None

        if failure is not None:
            self._report(failure)
            return None
        logger.info("Recording started: %s", self._recording.target_path)
        self._notify_state(SessionState.RECORDING)
        return self._recording

    def stop(self) -> Optional[TranscriptResult]:
        """Finish the recording and run transcription and refinement.

        A no-op returning ``None`` unless recording.
        """
        with self._lock:
            if self._state is not SessionState.RECORDING:
                logger.info("Stop ignored while %s", self._state.value)
                return None
            self._state = SessionState.TRANSCRIBING
            recording, self._recording = self._recording, None
        self._notify_state(SessionState.TRANSCRIBING)

        if self.timer is not None:
            self.timer.stop()
        try:
            result = self.capture.stop(recording)
            if result is None:
                return None
            logger.info(
                "Recording stopped: %s (%.1fs)",
                result.audio_path,
                result.duration_seconds,
            )
            raw_text = self.transcriber.transcribe(
                result.audio_path, self.settings.language, self.settings.credential
            )
            transcript = TranscriptResult(raw_text=raw_text)
            if self.refiner is not None:
                self._set_state(SessionState.REFINING)
                transcript.refined_text = self.refiner.refine(
                    raw_text, self.settings.language, self.settings.credential
                )
            self._publish(transcript.final_text)
            cleanup_recordings(self.recordings_dir, self.config.keep_recordings_hours)
            return transcript
        except WhisperClipError as exc:
            self._report(exc)
            return None
        finally:
            self._set_state(SessionState.IDLE)

    def shutdown(self) -> None:
        """Drop any active recording without transcribing it."""
        if self.timer is not None:
            self.timer.stop()
        with self._lock:
            recording, self._recording = self._recording, None
            was_recording = self._state is SessionState.RECORDING
            if was_recording:
                self._state = SessionState.IDLE
        if recording is None:
            return
        try:
            self.capture.stop(recording)
        except WhisperClipError as exc:
            logger.warning("Recording did not stop cleanly: %s", exc)
        if was_recording:
            self._notify_state(SessionState.IDLE)

    def _publish(self, text: str) -> None:
        if self.on_display is not None:
            self.on_display(text)
        try:
            self.clipboard(text)
        except ClipboardError as exc:
            self._report(exc)

    def _set_state(self, state: SessionState) -> None:
        with self._lock:
            self._state = state
        self._notify_state(state)

    def _notify_state(self, state: SessionState) -> None:
        if self.on_state is not None:
            self.on_state(state)

    def _report(self, exc: WhisperClipError) -> None:
        logger.error("%s: %s", type(exc).__name__, exc)
        if self.on_error is not None:
            self.on_error(exc)
