"""Shell launch model for the session manager."""

from dataclasses import dataclass


@dataclass
class ShellLaunchConfig:
    """How to launch the interpreter process backing a session."""

    kind: str
    executable: str
    argv: list[str]
    cwd: str
    env: dict[str, str]
    encoding: str
