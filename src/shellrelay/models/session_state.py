"""Lifecycle states of a shell session."""

from enum import Enum


class SessionState(Enum):
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    TERMINATED = "terminated"
