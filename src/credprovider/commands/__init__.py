"""Built-in CLI sub-commands for credprovider.

* :mod:`~credprovider.commands.credentials` -- ``get`` and ``providers``.
* :mod:`~credprovider.commands.config` -- view and modify global settings.

Each module either exports a :class:`typer.Typer` sub-application (for
multi-command groups like ``config``) or plain callback functions
registered directly on the root app.
"""
