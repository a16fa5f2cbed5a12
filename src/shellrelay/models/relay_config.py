"""Configuration model for shellrelay."""

import codecs

from pydantic import BaseModel, Field, field_validator

DEFAULT_JOIN_TIMEOUT = 1.0


class RelayConfig(BaseModel):
    """Runtime configuration for shell sessions."""

    shell: str | None = None
    working_dir: str | None = None
    encoding: str | None = None
    join_timeout: float = Field(default=DEFAULT_JOIN_TIMEOUT, ge=0)

    @field_validator("encoding")
    @classmethod
    def _known_encoding(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        try:
            return codecs.lookup(value.strip()).name
        except LookupError as e:
            raise ValueError(f"unknown encoding: {value}") from e
