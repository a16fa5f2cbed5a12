"""Interpreter detection and launch configuration."""

import logging
import os
import shutil
from pathlib import PureWindowsPath

from shellrelay.encoding import code_page_number, resolve_native_encoding
from shellrelay.models import RelayConfig, ShellLaunchConfig

log = logging.getLogger(__name__)

POSIX_SHELLS = {"bash", "zsh", "sh", "dash", "ksh"}


def _classify_shell(candidate: str) -> str | None:
    """Return the supported interpreter kind for a candidate executable/path."""
    name = os.path.basename(candidate.replace("\\", "/")).lower()
    if name.endswith(".exe"):
        name = name[: -len(".exe")]
    if name == "cmd":
        return "cmd"
    if name in POSIX_SHELLS:
        return "posix"
    return None


def _resolve_executable(candidate: str) -> str | None:
    """Resolve an executable name or path to a runnable command path."""
    has_sep = os.path.sep in candidate or (
        os.path.altsep is not None and os.path.altsep in candidate
    )
    if has_sep:
        if os.path.isfile(candidate) and os.access(candidate, os.X_OK):
            return candidate
        return None
    return shutil.which(candidate)


def _shell_candidates(override: str | None = None) -> list[str]:
    """Return interpreter candidates in preference order."""
    candidates: list[str] = []
    if override and override.strip():
        candidates.append(override.strip())

    env_override = os.environ.get("SHELLRELAY_SHELL", "").strip()
    if env_override:
        candidates.append(env_override)

    if os.name == "nt":
        comspec = os.environ.get("COMSPEC", "").strip()
        if comspec:
            candidates.append(comspec)
        candidates.append("cmd.exe")
    else:
        env_shell = os.environ.get("SHELL", "").strip()
        if env_shell:
            candidates.append(env_shell)
        candidates.extend(["bash", "sh"])

    deduped: list[str] = []
    seen: set[str] = set()
    for item in candidates:
        key = item.lower()
        if key in seen:
            continue
        seen.add(key)
        deduped.append(item)
    return deduped


def _detect_shell(override: str | None = None) -> tuple[str, str]:
    """Detect a supported interpreter and return (kind, executable path)."""
    for candidate in _shell_candidates(override):
        kind = _classify_shell(candidate)
        if not kind:
            continue
        executable = _resolve_executable(candidate)
        if executable:
            return kind, executable
    raise RuntimeError(
        "No supported shell found. Install cmd, bash, or sh, "
        "or set SHELLRELAY_SHELL to one of them."
    )


def system_root() -> str:
    """Return the root of the volume holding the operating system."""
    if os.name == "nt":
        windir = os.environ.get("SystemRoot") or os.environ.get("WINDIR") or "C:\\Windows"
        return PureWindowsPath(windir).anchor or "C:\\"
    return "/"


def build_launch_config(config: RelayConfig) -> ShellLaunchConfig:
    """Build the launch configuration for a new session.

    The encoding is resolved fresh on every call so that each session picks
    up the host's current code page.
    """
    kind, executable = _detect_shell(config.shell)
    encoding = config.encoding or resolve_native_encoding()
    cwd = config.working_dir or system_root()
    env = dict(os.environ)

    argv = [executable]
    if kind == "cmd":
        # Switch the console code page so cmd writes bytes in `encoding`.
        code_page = code_page_number(encoding)
        if code_page is not None:
            argv.extend(["/K", f"CHCP {code_page}"])
        else:
            log.warning(
                "encoding %s has no Windows code page; cmd keeps its default "
                "and output may be decoded incorrectly",
                encoding,
            )
    elif config.encoding is not None:
        native = resolve_native_encoding()
        if native != config.encoding:
            log.warning(
                "encoding override %s differs from the shell locale encoding %s; "
                "output may be decoded incorrectly",
                config.encoding,
                native,
            )

    log.debug("launch kind=%s argv=%s cwd=%s encoding=%s", kind, argv, cwd, encoding)
    return ShellLaunchConfig(
        kind=kind,
        executable=executable,
        argv=argv,
        cwd=cwd,
        env=env,
        encoding=encoding,
    )
