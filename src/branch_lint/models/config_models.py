"""Runtime configuration for the diff-scoped lint pipeline."""

import os
import shlex
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

DEFAULT_EXECUTABLE = "pylint"
DEFAULT_EXTENSION = ".py"
DEFAULT_CONFIG_FILE_NAME = ".pylintrc"
DEFAULT_REPORT_ARGS = ("--disable=import-error", "--output=pylint_report.txt")

ENV_EXECUTABLE = "BRANCH_LINT_EXECUTABLE"
ENV_EXTENSION = "BRANCH_LINT_EXTENSION"
ENV_CONFIG_FILE_NAME = "BRANCH_LINT_RCFILE_NAME"
ENV_REPORT_ARGS = "BRANCH_LINT_REPORT_ARGS"
ENV_TIMEOUT = "BRANCH_LINT_TIMEOUT"


class ConfigError(Exception):
    """Raised when pipeline configuration is invalid."""


class LintConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    executable: str = DEFAULT_EXECUTABLE
    extension: str = DEFAULT_EXTENSION
    config_file_name: str | None = DEFAULT_CONFIG_FILE_NAME
    report_args: tuple[str, ...] = DEFAULT_REPORT_ARGS
    timeout_seconds: float | None = None
    extra_env: dict[str, str] = Field(default_factory=dict)

    @field_validator("executable")
    @classmethod
    def _check_executable(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("executable must not be empty")
        return value

    @field_validator("extension")
    @classmethod
    def _normalize_extension(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("extension must not be empty")
        return value if value.startswith(".") else f".{value}"

    @field_validator("timeout_seconds")
    @classmethod
    def _check_timeout(cls, value: float | None) -> float | None:
        if value is not None and value <= 0:
            raise ValueError("timeout must be positive")
        return value

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        **overrides,
    ) -> "LintConfig":
        """Build a config from BRANCH_LINT_* variables, then apply overrides.

        Overrides whose value is None are ignored so argparse defaults
        do not mask environment values.

        Raises:
            ConfigError: If any value fails validation.
        """
        environ = os.environ if environ is None else environ
        values: dict = {}
        if environ.get(ENV_EXECUTABLE):
            values["executable"] = environ[ENV_EXECUTABLE]
        if environ.get(ENV_EXTENSION):
            values["extension"] = environ[ENV_EXTENSION]
        if ENV_CONFIG_FILE_NAME in environ:
            values["config_file_name"] = environ[ENV_CONFIG_FILE_NAME] or None
        if ENV_REPORT_ARGS in environ:
            values["report_args"] = tuple(shlex.split(environ[ENV_REPORT_ARGS]))
        if environ.get(ENV_TIMEOUT):
            values["timeout_seconds"] = environ[ENV_TIMEOUT]

        values.update({k: v for k, v in overrides.items() if v is not None})

        try:
            return cls(**values)
        except ValidationError as exc:
            raise ConfigError(f"Invalid configuration: {exc}") from exc
