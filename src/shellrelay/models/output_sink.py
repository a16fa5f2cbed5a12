"""Output sink contract."""

from typing import Protocol


class OutputSink(Protocol):
    """Receiver of relayed shell output and session notifications."""

    def emit(self, text: str, is_error: bool) -> None: ...
