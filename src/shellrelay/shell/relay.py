"""Background relays that drain interpreter output line by line."""

import logging
import threading
from collections.abc import Iterator
from typing import BinaryIO

from shellrelay.encoding import to_canonical
from shellrelay.models import OutputSink

log = logging.getLogger(__name__)


def iter_lines(stream: BinaryIO) -> Iterator[bytes]:
    """Yield raw lines from a pipe until it reaches EOF."""
    yield from iter(stream.readline, b"")


class StreamRelay:
    """Forward every non-empty line of one output pipe to an output sink."""

    def __init__(
        self,
        stream: BinaryIO,
        encoding: str,
        sink: OutputSink,
        is_error: bool,
        name: str = "shellrelay-relay",
    ) -> None:
        self._stream = stream
        self._encoding = encoding
        self._sink = sink
        self._is_error = is_error
        self._name = name
        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()
        # Held across check-and-emit so nothing is emitted once stop() returns.
        self._emit_lock = threading.RLock()

    def start(self) -> None:
        self._thread = threading.Thread(target=self._run, daemon=True, name=self._name)
        self._thread.start()

    def stop(self) -> None:
        """Stop forwarding; lines read after this are discarded."""
        with self._emit_lock:
            self._stop_event.set()

    def join(self, timeout: float | None = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout=timeout)

    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def relay_line(self, raw: bytes | None) -> None:
        """Decode one raw line and emit it; empty lines are dropped."""
        if not raw:
            return
        line = raw.rstrip(b"\r\n")
        if not line:
            return
        text = to_canonical(line, self._encoding) + "\n"
        with self._emit_lock:
            if self._stop_event.is_set():
                return
            try:
                self._sink.emit(text, self._is_error)
            except Exception:
                log.exception("%s: output sink raised", self._name)

    def _run(self) -> None:
        log.debug("%s: started", self._name)
        try:
            for raw in iter_lines(self._stream):
                if self._stop_event.is_set():
                    break
                self.relay_line(raw)
        except (OSError, ValueError) as e:
            # Pipe closed underneath the reader during teardown.
            log.debug("%s: read stopped: %s", self._name, e)
        log.debug("%s: finished", self._name)
