"""Canonical Pydantic models shared across all credprovider modules.

This is the single source of truth for data shapes in the project. The
models fall into three groups:

**Protocol models** -- what goes to and comes back from a provider
executable:
    :class:`Verbosity`, :class:`CredentialRequest`, :class:`ResponseCode`,
    :class:`ProviderResponse` and :class:`ProcessResult`.

**Outcome models** -- the interpreted result of one provider invocation:
    :class:`AuthType`, :class:`TypedCredential`, :class:`AuthSuccess`,
    :class:`NoCredentials`, :class:`Abort` and the :data:`ExitOutcome`
    union that the cache stores.

**Configuration models** -- serialised as JSON in the user's config
directory:
    :class:`ProviderSettings`, :class:`OutputConfig` and
    :class:`GlobalConfig`.
"""

from __future__ import annotations

import enum
from pathlib import Path
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


# --- Protocol models ---


class Verbosity(str, enum.Enum):
    """Log verbosity a provider is asked to use (``-Verbosity <level>``).

    ``INFORMATION`` is the provider default and is never sent on the
    command line.
    """

    DEBUG = "Debug"
    VERBOSE = "Verbose"
    INFORMATION = "Information"
    MINIMAL = "Minimal"
    WARNING = "Warning"
    ERROR = "Error"


class CredentialRequest(BaseModel):
    """One request sent to one provider, encoded by
    :func:`~credprovider.providers.protocol.build_args`.

    Built fresh for every invocation and never mutated; the verbosity
    escalation retry derives a new request with ``model_copy``.
    """

    model_config = ConfigDict(frozen=True)

    uri: str
    non_interactive: bool = False
    can_show_dialog: bool = False
    is_retry: bool = False
    verbosity: Verbosity = Verbosity.INFORMATION


class ResponseCode(enum.IntEnum):
    """The ``ResponseCode`` field of a provider's JSON body."""

    SUCCESS = 0
    ERROR = 1
    NOT_FOUND = 2


class ProviderResponse(BaseModel):
    """JSON document a provider writes to stdout.

    Field names follow the wire format (``ResponseCode``, ``Username``,
    ``Password``, ``Message``, ``AuthenticationTypes``); the Python names are
    accepted too. Keys match case-insensitively, so ``username`` and
    ``USERNAME`` both fill :attr:`username`. ``Username``/``Password`` are
    only meaningful when the process itself exited with
    :attr:`~credprovider.providers.protocol.ProviderExitCode.SUCCESS`.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    response_code: Union[ResponseCode, int] = Field(
        default=ResponseCode.SUCCESS, alias="ResponseCode"
    )
    username: Optional[str] = Field(default=None, alias="Username")
    password: Optional[str] = Field(default=None, alias="Password")
    message: Optional[str] = Field(default=None, alias="Message")
    auth_types: Optional[list[str]] = Field(default=None, alias="AuthenticationTypes")

    @model_validator(mode="before")
    @classmethod
    def _match_keys_ignoring_case(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        names = {}
        for name, field in cls.model_fields.items():
            names[name.lower()] = name
            if field.alias:
                names[field.alias.lower()] = field.alias
        return {
            names.get(key.lower(), key) if isinstance(key, str) else key: value
            for key, value in data.items()
        }

    @property
    def is_valid(self) -> bool:
        # Placeholder for schema checks on ResponseCode; every parsed body passes.
        return True


class ProcessResult(BaseModel):
    """Captured result of running a provider executable once."""

    exit_code: int
    stdout_lines: list[str] = Field(default_factory=list)
    stderr_lines: list[str] = Field(default_factory=list)

    @property
    def stdout(self) -> str:
        return "\n".join(self.stdout_lines)

    @property
    def stderr(self) -> str:
        return "\n".join(self.stderr_lines)


# --- Outcome models ---


class AuthType(str, enum.Enum):
    """Authentication schemes the package client knows how to use."""

    BASIC = "Basic"
    NTLM = "NTLM"


class TypedCredential(BaseModel):
    """A username/password pair tagged with the scheme it is meant for."""

    model_config = ConfigDict(frozen=True)

    username: Optional[str] = None
    password: Optional[str] = None
    auth_type: AuthType = AuthType.BASIC


class AuthSuccess(BaseModel):
    """The provider produced credentials (possibly zero usable ones)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["success"] = "success"
    credentials: list[TypedCredential] = Field(default_factory=list)


class NoCredentials(BaseModel):
    """The provider does not apply to this source."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["no_credentials"] = "no_credentials"
    message: str = ""


class Abort(BaseModel):
    """The provider aborted; the whole resolution must fail.

    ``message`` is already formatted for the user and includes the provider
    path, the command line and the captured stderr.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["abort"] = "abort"
    message: str


ExitOutcome = Annotated[
    Union[AuthSuccess, NoCredentials, Abort], Field(discriminator="kind")
]
"""Result of interpreting one provider invocation."""


# --- Configuration models ---


def _default_root_dir() -> Path:
    return Path.home() / ".nuget" / "plugins" / "netcore"


class ProviderSettings(BaseModel):
    """How providers are discovered and invoked.

    Stored under the ``providers`` key of :class:`GlobalConfig` and
    resolved (with environment and CLI overrides) by
    :func:`~credprovider.config.resolve_settings`.
    """

    env_vars: list[str] = Field(
        default_factory=lambda: ["NUGET_NETCORE_PLUGIN_PATHS", "NUGET_PLUGIN_PATHS"],
        description="Environment variables holding ';'-separated search directories",
    )
    root_dir: Path = Field(
        default_factory=_default_root_dir,
        description="Per-user plugin root, searched after the env-var directories",
    )
    plugin_pattern: str = Field(
        default="CredentialProvider*",
        description="Glob matched recursively inside search directories",
    )
    install_pattern: str = Field(
        default="CredentialProvider*",
        description="Glob matched inside the installation directory",
    )
    install_dir: Optional[Path] = Field(
        default=None,
        description="Installation directory to scan (None = interpreter scripts dir)",
    )
    search_install_dir: bool = True
    timeout_seconds: float = Field(
        default=600.0, gt=0, description="Per-invocation timeout in seconds"
    )
    verbosity: Verbosity = Verbosity.INFORMATION
    interactive: Optional[bool] = Field(
        default=None,
        description="Whether providers may prompt (None = detect from stdin TTY)",
    )


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/credprovider/config.json``.

    Loaded and saved by :func:`~credprovider.config.load_global_config` and
    :func:`~credprovider.config.save_global_config`.
    """

    providers: ProviderSettings = Field(default_factory=ProviderSettings)
    output: OutputConfig = Field(default_factory=OutputConfig)
