"""Tkinter GUI: record, transcribe, copy."""

from __future__ import annotations

import logging
import os
import threading
from typing import Optional

from .config import (
    LANGUAGES,
    SAMPLE_RATES,
    SETTINGS_FILENAME,
    Settings,
    ensure_config_dir,
    load_settings,
    resolve_app_config,
    save_settings,
)
from .controller import SessionController
from .errors import ConfigError, SessionActiveError, WhisperClipError
from .logging_utils import setup_logging
from .models import SessionState
from .timer import ElapsedTimer

logger = logging.getLogger(__name__)


class UiDispatcher:
    """Runs callbacks on the Tk thread until the window starts closing.

    Worker threads hand callbacks over with ``root.after(0, ...)``. Once
    ``close`` has run, new calls and callbacks still queued are dropped so
    nothing touches a destroyed root.
    """

    def __init__(self, root, errors=(RuntimeError,)) -> None:
        self._root = root
        self._errors = errors
        self._closed = threading.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def close(self) -> None:
        self._closed.set()

    def call(self, func, *args) -> None:
        if self.closed:
            return
        if threading.current_thread() is threading.main_thread():
            func(*args)
            return
        try:
            self._root.after(0, lambda: self._run(func, args))
        except self._errors as exc:
            logger.debug("UI update dropped: %s", exc)

    def _run(self, func, args) -> None:
        if not self.closed:
            func(*args)


def launch_gui(config_path: Optional[str] = None) -> None:
    import tkinter as tk
    from tkinter import messagebox, ttk

    config_dir = ensure_config_dir()
    config = resolve_app_config(config_dir, config_path)
    logger, log_path = setup_logging(
        log_dir=config.log_dir or os.path.join(config_dir, "logs"),
        level=logging.DEBUG if config.debug_logging else logging.INFO,
    )
    logger.info("GUI starting (log: %s)", log_path)

    def _thread_excepthook(args) -> None:
        logger.exception(
            "Thread exception",
            exc_info=(args.exc_type, args.exc_value, args.exc_traceback),
        )

    threading.excepthook = _thread_excepthook

    settings_path = os.path.join(config_dir, SETTINGS_FILENAME)
    try:
        settings = load_settings(settings_path)
    except ConfigError as exc:
        logger.warning("Settings ignored: %s", exc)
        settings = Settings()

    root = tk.Tk()
    root.title("Whisper")
    root.geometry("400x300")

    timer_var = tk.StringVar(value="00:00:00")
    transcript_var = tk.StringVar(value=" ")
    status_var = tk.StringVar(value="Idle")

    dispatcher = UiDispatcher(root, errors=(RuntimeError, tk.TclError))
    _on_ui_thread = dispatcher.call
    workers = {"stop": None}

    def _set_status(text: str) -> None:
        _on_ui_thread(status_var.set, text)
        logger.info(text)

    def _show_error(exc: WhisperClipError) -> None:
        def _dialog() -> None:
            status_var.set(f"Error: {exc}")
            messagebox.showerror("Whisper", str(exc), parent=root)

        _on_ui_thread(_dialog)

    def _apply_state(state: SessionState) -> None:
        def _update() -> None:
            idle = state is SessionState.IDLE
            start_btn.configure(state="normal" if idle else "disabled")
            stop_btn.configure(
                state="normal" if state is SessionState.RECORDING else "disabled"
            )
            status_var.set(
                {
                    SessionState.IDLE: "Idle",
                    SessionState.RECORDING: "Recording...",
                    SessionState.TRANSCRIBING: "Transcribing...",
                    SessionState.REFINING: "Refining...",
                }[state]
            )

        _on_ui_thread(_update)

    timer = ElapsedTimer(
        schedule=root.after,
        cancel=root.after_cancel,
        on_tick=lambda text: _on_ui_thread(timer_var.set, text),
    )
    controller = SessionController(
        settings=settings,
        config=config,
        timer=timer,
        on_display=lambda text: _on_ui_thread(transcript_var.set, text),
        on_error=_show_error,
        on_state=_apply_state,
    )

    def _start_recording() -> None:
        logger.info("Start recording requested")
        try:
            controller.start()
        except SessionActiveError as exc:
            _set_status(str(exc))

    def _stop_recording() -> None:
        if controller.state is not SessionState.RECORDING:
            return
        logger.info("Stop recording requested")
        worker = threading.Thread(
            target=controller.stop, name="whisperclip-stop", daemon=True
        )
        workers["stop"] = worker
        worker.start()

    notebook = ttk.Notebook(root)
    notebook.pack(fill="both", expand=True)

    app_tab = ttk.Frame(notebook, padding=8)
    settings_tab = ttk.Frame(notebook, padding=8)
    notebook.add(app_tab, text="App")
    notebook.add(settings_tab, text="Settings")

    start_btn = ttk.Button(app_tab, text="Start recording", command=_start_recording)
    start_btn.pack(fill="x")
    stop_btn = ttk.Button(
        app_tab, text="Stop recording", command=_stop_recording, state="disabled"
    )
    stop_btn.pack(fill="x", pady=(4, 0))
    ttk.Label(app_tab, textvariable=timer_var).pack(anchor="w", pady=(8, 0))
    ttk.Label(app_tab, textvariable=transcript_var, wraplength=370).pack(
        anchor="w", fill="x", pady=(8, 0)
    )
    ttk.Label(app_tab, textvariable=status_var, foreground="#666666").pack(
        side="bottom", anchor="w"
    )

    ttk.Label(settings_tab, text="OpenAI key:").pack(anchor="w")
    key_var = tk.StringVar(value=settings.credential)
    ttk.Entry(settings_tab, textvariable=key_var, show="*").pack(fill="x")

    ttk.Label(settings_tab, text="Language:").pack(anchor="w", pady=(8, 0))
    lang_var = tk.StringVar(value=settings.language)
    ttk.Combobox(
        settings_tab, textvariable=lang_var, values=LANGUAGES, state="readonly"
    ).pack(fill="x")

    ttk.Label(settings_tab, text="Sample rate:").pack(anchor="w", pady=(8, 0))
    rate_var = tk.StringVar(value=settings.sample_rate)
    ttk.Combobox(
        settings_tab, textvariable=rate_var, values=SAMPLE_RATES, state="readonly"
    ).pack(fill="x")

    def _on_key_change(*_args) -> None:
        settings.credential = key_var.get()

    def _on_lang_change(*_args) -> None:
        settings.language = lang_var.get()
        logger.info("Selected language: %s", settings.language)

    def _on_rate_change(*_args) -> None:
        settings.sample_rate = rate_var.get()
        logger.info("Selected sample rate: %s", settings.sample_rate)

    key_var.trace_add("write", _on_key_change)
    lang_var.trace_add("write", _on_lang_change)
    rate_var.trace_add("write", _on_rate_change)

    def _on_close() -> None:
        logger.info("GUI closing")
        dispatcher.close()
        worker = workers["stop"]
        if worker is not None and worker.is_alive():
            logger.warning("Closing during transcription; the result is dropped")
        controller.shutdown()
        try:
            save_settings(settings_path, settings)
        except ConfigError:
            logger.exception("Settings not saved")
        root.destroy()

    root.protocol("WM_DELETE_WINDOW", _on_close)
    root.mainloop()
