import threading

from whisperclip.gui import UiDispatcher


class FakeRoot:
    def __init__(self, fail=False):
        self.queued = []
        self.fail = fail

    def after(self, _delay_ms, callback):
        if self.fail:
            raise RuntimeError("main thread is not in main loop")
        self.queued.append(callback)

    def pump(self):
        queued, self.queued = self.queued, []
        for callback in queued:
            callback()


def _from_worker(func):
    worker = threading.Thread(target=func)
    worker.start()
    worker.join()


def test_main_thread_calls_run_immediately():
    root = FakeRoot()
    seen = []

    UiDispatcher(root).call(seen.append, "idle")

    assert seen == ["idle"]
    assert root.queued == []


def test_worker_calls_are_queued_for_the_ui_thread():
    root = FakeRoot()
    dispatcher = UiDispatcher(root)
    seen = []

    _from_worker(lambda: dispatcher.call(seen.append, "hello"))
    assert seen == []

    root.pump()
    assert seen == ["hello"]


def test_calls_after_close_are_dropped():
    root = FakeRoot()
    dispatcher = UiDispatcher(root)
    seen = []
    _from_worker(lambda: dispatcher.call(seen.append, "queued"))

    dispatcher.close()
    _from_worker(lambda: dispatcher.call(seen.append, "late"))
    dispatcher.call(seen.append, "main")
    root.pump()

    assert dispatcher.closed
    assert seen == []
    assert root.queued == []


def test_destroyed_root_does_not_raise_in_worker():
    dispatcher = UiDispatcher(FakeRoot(fail=True))
    failures = []

    def _work():
        try:
            dispatcher.call(lambda: None)
        except RuntimeError as exc:
            failures.append(exc)

    _from_worker(_work)

    assert failures == []
