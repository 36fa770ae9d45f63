"""credprovider -- resolve package-feed credentials via external providers.

A *credential provider* is an independently installed executable that
speaks a small command-line/JSON protocol: it is invoked with ``-Uri``
and a handful of flags, writes one JSON document to stdout and exits with
``0`` (credentials produced), ``1`` (not applicable) or ``2`` (abort).

This package discovers those executables, invokes them, interprets their
answers, caches the results per ``(provider, source)`` pair and hands the
aggregated credentials to the caller.

Typical usage::

    from credprovider.auth import create_default_orchestrator

    orchestrator = create_default_orchestrator()
    credential = orchestrator.get_credential("https://pkgs.example.com/v3/index.json")

Modules:
    app: Typer application factory and CLI entry point.
    models: Pydantic models shared across the package.
    config: XDG-aware configuration and settings resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes for the ``credprovider`` CLI.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
