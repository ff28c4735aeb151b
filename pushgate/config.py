"""Hook configuration — a dotenv-format file and/or ``PUSHGATE_*`` environment variables."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from dotenv import dotenv_values
from pydantic import BaseModel, Field, ValidationError, field_validator

from pushgate.gate.errors import ConfigurationError
from pushgate.gate.push_gate import DEFAULT_TAG_DELETE_DENIED_MESSAGE

ENV_PREFIX = "PUSHGATE_"


class GateConfig(BaseModel):
    repo_id: str = Field(min_length=1)
    repo_path: Path = Path(".")
    allowed_users: list[str] = Field(default_factory=list)
    policy_url: str | None = None
    policy_timeout: float = Field(default=10.0, gt=0)
    git_timeout: float = Field(default=30.0, gt=0)
    git_binary: str = "git"
    allow_tag_removal: bool = True
    tag_delete_denied_message: str = DEFAULT_TAG_DELETE_DENIED_MESSAGE
    log_level: str = "WARNING"

    @field_validator("allowed_users", mode="before")
    @classmethod
    def _split_users(cls, value):
        if isinstance(value, str):
            return [user.strip() for user in value.split(",") if user.strip()]
        return value

    @field_validator("policy_url", mode="before")
    @classmethod
    def _blank_url_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.strip().upper()

    @classmethod
    def from_mapping(cls, values: Mapping[str, str | None]) -> GateConfig:
        """Build from ``PUSHGATE_*`` keys; other keys are ignored.

        Raises
        ------
        ConfigurationError
            If a value is missing or invalid.
        """
        fields = {
            key[len(ENV_PREFIX):].lower(): value
            for key, value in values.items()
            if key.startswith(ENV_PREFIX) and value is not None
        }
        fields = {k: v for k, v in fields.items() if k in cls.model_fields}
        if "repo_path" not in fields and values.get("GIT_DIR"):
            fields["repo_path"] = values["GIT_DIR"]
        try:
            return cls(**fields)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid configuration: {exc}") from exc

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> GateConfig:
        return cls.from_mapping(os.environ if environ is None else environ)

    @classmethod
    def from_file(cls, path: Path | str, environ: Mapping[str, str] | None = None) -> GateConfig:
        """Load *path* (dotenv format) layered over the environment; the file wins."""
        config_path = Path(path)
        if not config_path.is_file():
            raise ConfigurationError(f"Error: failed to load configuration file {config_path}.")
        merged: dict[str, str | None] = dict(os.environ if environ is None else environ)
        merged.update(dotenv_values(config_path))
        return cls.from_mapping(merged)
