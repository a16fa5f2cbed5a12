"""Ready-made output sinks."""

import sys
from collections.abc import Callable
from typing import TextIO


class StreamSink:
    """Write relayed output to text streams, errors to a separate stream."""

    def __init__(self, out: TextIO | None = None, err: TextIO | None = None) -> None:
        self._out = out if out is not None else sys.stdout
        self._err = err if err is not None else sys.stderr

    def emit(self, text: str, is_error: bool) -> None:
        stream = self._err if is_error else self._out
        stream.write(text)
        stream.flush()


class CallbackSink:
    """Adapt a plain ``fn(text, is_error)`` callable to the sink contract."""

    def __init__(self, callback: Callable[[str, bool], None]) -> None:
        self._callback = callback

    def emit(self, text: str, is_error: bool) -> None:
        self._callback(text, is_error)
