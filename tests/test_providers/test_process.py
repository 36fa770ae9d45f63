"""Tests for running provider executables."""

from __future__ import annotations

from pathlib import Path

import pytest

from conftest import posix_only, provider_calls
from credprovider.exceptions import ProcessInvocationError
from credprovider.providers.process import run_process


@posix_only
class TestRunProcess:
    def test_captures_exit_code_and_lines(self, tmp_path: Path, make_provider) -> None:
        provider = make_provider(
            tmp_path, "CredentialProvider.Echo", exit_code=1,
            stdout='{"Message":\n"hi"}\n', stderr="warn one\nwarn two\n",
        )
        result = run_process(str(provider), "-Uri https://x -OutputFormat Json", 30)
        assert result.exit_code == 1
        assert result.stdout_lines == ['{"Message":', '"hi"}']
        assert result.stderr_lines == ["warn one", "warn two"]
        assert result.stdout == '{"Message":\n"hi"}'

    def test_arguments_are_split_on_spaces(self, tmp_path: Path, make_provider) -> None:
        provider = make_provider(tmp_path, "CredentialProvider.Args")
        run_process(str(provider), "-Uri https://x -OutputFormat Json -IsRetry True", 30)
        assert provider_calls(provider) == ["-Uri https://x -OutputFormat Json -IsRetry True"]

    def test_timeout_raises_invocation_error(self, tmp_path: Path) -> None:
        import sys

        provider = tmp_path / "CredentialProvider.Slow"
        provider.write_text(f"#!{sys.executable}\nimport time\ntime.sleep(10)\n")
        provider.chmod(0o755)
        with pytest.raises(ProcessInvocationError, match="timed out"):
            run_process(str(provider), "-Uri https://x", 0.5)


def test_missing_executable_raises_invocation_error(tmp_path: Path) -> None:
    with pytest.raises(ProcessInvocationError, match="Failed to start"):
        run_process(str(tmp_path / "CredentialProvider.Missing"), "-Uri https://x", 5)
