"""Persistent shell sessions whose output is relayed to an external sink."""

__version__ = "0.1.0"

from shellrelay.models import OutputSink, RelayConfig, SessionState  # noqa: E402
from shellrelay.shell import Shell  # noqa: E402
from shellrelay.sinks import CallbackSink, StreamSink  # noqa: E402

__all__ = [
    "CallbackSink",
    "OutputSink",
    "RelayConfig",
    "SessionState",
    "Shell",
    "StreamSink",
    "__version__",
]
