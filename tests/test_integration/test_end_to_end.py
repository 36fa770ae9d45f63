"""End-to-end tests running real provider executables.

Each test writes small Python scripts named ``CredentialProvider.*`` into a
search directory and lets the orchestrator discover and invoke them.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from conftest import posix_only, provider_calls
from credprovider.auth import CredentialProviderOrchestrator
from credprovider.exceptions import ProviderAbortError, UnrecoverableProtocolError
from credprovider.models import AuthType, ProviderSettings, TypedCredential, Verbosity

pytestmark = posix_only

SOURCE = "https://pkgs.example.com/v3/index.json"


@pytest.fixture
def plugin_dir(tmp_path: Path) -> Path:
    return tmp_path / "plugins"


@pytest.fixture
def orchestrator(settings: ProviderSettings, plugin_dir: Path, monkeypatch):
    monkeypatch.setenv("NUGET_PLUGIN_PATHS", str(plugin_dir))
    monkeypatch.delenv("NUGET_NETCORE_PLUGIN_PATHS", raising=False)
    return CredentialProviderOrchestrator(settings=settings)


def test_success(orchestrator, plugin_dir, make_provider) -> None:
    make_provider(
        plugin_dir, "CredentialProvider.Basic", exit_code=0,
        stdout='{"ResponseCode":0,"Username":"u","Password":"p","AuthenticationTypes":["Basic"]}',
    )
    assert orchestrator.get_credentials(SOURCE) == [
        TypedCredential(username="u", password="p", auth_type=AuthType.BASIC)
    ]


def test_request_flags_reach_the_provider(orchestrator, plugin_dir, make_provider) -> None:
    provider = make_provider(plugin_dir, "CredentialProvider.Flags", exit_code=1)
    orchestrator.get_credentials(SOURCE, is_retry=True)
    assert provider_calls(provider) == [
        f"-Uri {SOURCE} -OutputFormat Json -NonInteractive True -IsRetry True"
    ]


def test_abort_stops_later_providers(orchestrator, plugin_dir, make_provider) -> None:
    make_provider(plugin_dir, "CredentialProvider.A", exit_code=2, stdout='{"Message":"cancelled"}')
    later = make_provider(
        plugin_dir, "CredentialProvider.B", exit_code=0,
        stdout='{"Username":"u","Password":"p"}',
    )

    with pytest.raises(ProviderAbortError, match="cancelled"):
        orchestrator.get_credentials(SOURCE)
    assert provider_calls(later) == []


def test_not_applicable_falls_through(orchestrator, plugin_dir, make_provider) -> None:
    make_provider(plugin_dir, "CredentialProvider.A", exit_code=1, stdout='{"Message":"nope"}')
    make_provider(
        plugin_dir, "CredentialProvider.B", exit_code=0,
        stdout='{"Username":"b","Password":"2","AuthenticationTypes":["ntlm"]}',
    )
    assert orchestrator.get_credentials(SOURCE) == [
        TypedCredential(username="b", password="2", auth_type=AuthType.NTLM)
    ]


def test_cached_across_calls(orchestrator, plugin_dir, make_provider) -> None:
    provider = make_provider(
        plugin_dir, "CredentialProvider.A", exit_code=0, stdout='{"Username":"u","Password":"p"}'
    )
    orchestrator.get_credentials(SOURCE)
    orchestrator.get_credentials(SOURCE)
    assert len(provider_calls(provider)) == 1


def test_unknown_exit_code_escalates_verbosity(
    settings, plugin_dir, make_provider, monkeypatch
) -> None:
    monkeypatch.setenv("NUGET_PLUGIN_PATHS", str(plugin_dir))
    provider = make_provider(plugin_dir, "CredentialProvider.Broken", exit_code=7)
    orchestrator = CredentialProviderOrchestrator(
        settings=settings.model_copy(update={"verbosity": Verbosity.DEBUG})
    )

    with pytest.raises(UnrecoverableProtocolError, match="\\(7\\)"):
        orchestrator.get_credentials(SOURCE)
    calls = provider_calls(provider)
    assert len(calls) == 2
    assert calls[0].endswith("-Verbosity Debug")
    assert "-Verbosity" not in calls[1]


def test_companion_files_next_to_a_provider_are_ignored(
    orchestrator, plugin_dir, make_provider
) -> None:
    provider_dir = plugin_dir / "CredentialProvider.Microsoft"
    make_provider(
        provider_dir, "CredentialProvider.Microsoft", exit_code=0,
        stdout='{"Username":"u","Password":"p","AuthenticationTypes":["Basic"]}',
    )
    (provider_dir / "CredentialProvider.Microsoft.deps.json").write_text('{"targets": {}}')
    (provider_dir / "CredentialProvider.Microsoft.runtimeconfig.json").write_text("{}")

    assert orchestrator.get_credentials(SOURCE) == [
        TypedCredential(username="u", password="p", auth_type=AuthType.BASIC)
    ]


def test_lowercase_response_keys(orchestrator, plugin_dir, make_provider) -> None:
    make_provider(
        plugin_dir, "CredentialProvider.Lower", exit_code=0,
        stdout='{"username":"u","password":"p","authenticationTypes":["basic"]}',
    )
    assert orchestrator.get_credentials(SOURCE) == [
        TypedCredential(username="u", password="p", auth_type=AuthType.BASIC)
    ]
