"""Persistent interpreter session with asynchronous output relay."""

from shellrelay.shell.relay import StreamRelay, iter_lines
from shellrelay.shell.session import (
    CREATE_FAILED_MESSAGE,
    NEW_SESSION_MESSAGE,
    WRITE_FAILED_MESSAGE,
    Shell,
)

__all__ = [
    "CREATE_FAILED_MESSAGE",
    "NEW_SESSION_MESSAGE",
    "Shell",
    "StreamRelay",
    "WRITE_FAILED_MESSAGE",
    "iter_lines",
]
