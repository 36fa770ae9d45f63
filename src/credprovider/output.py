"""Terminal output for the credprovider CLI.

Data and diagnostics never share a stream:

* **stdout** carries what a script would consume: credential records,
  provider paths, configuration.
* **stderr** carries everything addressed to the person at the terminal:
  status lines, errors, next-step hints and the log handler
  installed by :mod:`credprovider.app`.

Data is rendered in one of three formats. ``json`` is meant for tools,
``plain`` prints tab-separated rows, and ``rich`` draws tables or
syntax-highlighted JSON. ``auto`` picks ``rich`` for an interactive
terminal and ``plain`` otherwise. ``NO_COLOR``, ``TERM=dumb`` and
``--no-color`` turn colour off.

Commands use the module-level helpers (:func:`format_response`,
:func:`info`, ...), which delegate to the :class:`OutputManager` installed
by :func:`~credprovider.app.main_callback`.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table


class OutputFormat(str, Enum):
    """How data written to stdout is rendered."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set to anything or ``TERM`` is ``dumb``."""
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"


def _is_record_list(data: Any) -> bool:
    return (
        isinstance(data, list)
        and bool(data)
        and all(isinstance(item, dict) for item in data)
    )


class OutputManager:
    """Render data on stdout and diagnostics on stderr.

    Args:
        format: Data format; ``AUTO`` is resolved from the terminal.
        no_color: Disable colour and markup.
        quiet: Drop informational diagnostics (``info``, ``success`` and
            ``suggest``). Errors and data are always written.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._format = self._resolve_format(format)

        rich_data = self._format == OutputFormat.RICH
        self._stdout = Console(file=sys.stdout, no_color=self._no_color, force_terminal=rich_data)
        self._stderr = Console(file=sys.stderr, no_color=self._no_color)

    def _resolve_format(self, requested: OutputFormat) -> OutputFormat:
        if requested != OutputFormat.AUTO:
            return requested
        if _is_tty() and not self._no_color:
            return OutputFormat.RICH
        return OutputFormat.PLAIN

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def stderr_console(self) -> Console:
        """Console for diagnostics; the CLI log handler writes here too."""
        return self._stderr

    # --- stdout ---

    def print_data(self, text: str) -> None:
        """Write one line of raw data to stdout."""
        print(text, file=sys.stdout, flush=True)

    def format_response(self, data: Any) -> None:
        """Write *data* to stdout in the active format.

        A non-empty list of dicts (credential records) is drawn as a table in
        rich mode and as one tab-separated line per record in plain mode.
        A dict becomes ``key<TAB>value`` lines in plain mode.
        """
        if self._format == OutputFormat.JSON:
            self.print_data(self._dumps(data))
        elif self._format == OutputFormat.PLAIN:
            for line in self._plain_lines(data):
                self.print_data(line)
        elif _is_record_list(data):
            headers = list(data[0])
            self._print_rich_table(headers, [[str(r.get(h, "")) for h in headers] for r in data])
        else:
            self._stdout.print(Syntax(self._dumps(data), "json", word_wrap=True))

    def print_table(
        self, headers: list[str], rows: list[list[str]], title: Optional[str] = None
    ) -> None:
        """Write rows to stdout: objects keyed by header in JSON, TSV in plain."""
        if self._format == OutputFormat.JSON:
            self.print_data(self._dumps([dict(zip(headers, row)) for row in rows]))
        elif self._format == OutputFormat.PLAIN:
            for row in [headers, *rows]:
                self.print_data("\t".join(row))
        else:
            self._print_rich_table(headers, rows, title)

    def _print_rich_table(
        self, headers: list[str], rows: list[list[str]], title: Optional[str] = None
    ) -> None:
        table = Table(*headers, title=title, header_style="bold cyan")
        for row in rows:
            table.add_row(*row)
        self._stdout.print(table)

    @staticmethod
    def _dumps(data: Any) -> str:
        return json.dumps(data, indent=2, ensure_ascii=False, default=str)

    @staticmethod
    def _plain_lines(data: Any) -> list[str]:
        if isinstance(data, dict):
            return [f"{key}\t{value}" for key, value in data.items()]
        if isinstance(data, list):
            return [
                "\t".join(str(v) for v in item.values()) if isinstance(item, dict) else str(item)
                for item in data
            ]
        return [str(data)]

    # --- stderr ---

    def _diagnostic(
        self, message: str, label: str = "", style: str = "", optional: bool = True
    ) -> None:
        if optional and self._quiet:
            return
        if self._no_color:
            print(f"{label}{message}", file=sys.stderr, flush=True)
            return
        text = escape(label) + escape(message)
        self._stderr.print(f"[{style}]{text}[/{style}]" if style else text)

    def info(self, message: str) -> None:
        self._diagnostic(message)

    def success(self, message: str) -> None:
        self._diagnostic(message, style="green")

    def suggest(self, message: str) -> None:
        self._diagnostic(message, label="→ ", style="dim")

    def error(self, message: str) -> None:
        self._diagnostic(message, label="Error: ", style="bold red", optional=False)


_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed :class:`OutputManager`, creating a default one."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager. Used between tests."""
    global _output
    _output = None


def format_response(data: Any) -> None:
    get_output().format_response(data)


def print_data(text: str) -> None:
    get_output().print_data(text)


def print_table(headers: list[str], rows: list[list[str]], title: Optional[str] = None) -> None:
    get_output().print_table(headers, rows, title)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def suggest(message: str) -> None:
    get_output().suggest(message)


def error(message: str) -> None:
    get_output().error(message)
