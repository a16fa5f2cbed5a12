"""Model package for shellrelay."""

from shellrelay.models.output_sink import OutputSink
from shellrelay.models.relay_config import DEFAULT_JOIN_TIMEOUT, RelayConfig
from shellrelay.models.session_state import SessionState
from shellrelay.models.shell_launch_config import ShellLaunchConfig

__all__ = [
    "DEFAULT_JOIN_TIMEOUT",
    "OutputSink",
    "RelayConfig",
    "SessionState",
    "ShellLaunchConfig",
]
