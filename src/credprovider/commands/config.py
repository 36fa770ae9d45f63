"""Config commands -- view and modify the global configuration.

Provides the ``credprovider config`` sub-command group::

    credprovider config show
    credprovider config set verbosity Verbose
    credprovider config set env_vars NUGET_PLUGIN_PATHS,MY_PLUGIN_PATHS
    credprovider config path
"""

from __future__ import annotations

import typer

from credprovider.output import format_response, print_data, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Print the global configuration."""
    from credprovider.config import load_global_config

    config = load_global_config()
    format_response(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Provider setting name, e.g. verbosity or timeout_seconds."),
    value: str = typer.Argument(help="New value ('none' clears optional settings)."),
) -> None:
    """Set a provider setting in the global configuration."""
    from credprovider.config import load_global_config, save_global_config, set_provider_setting

    config = set_provider_setting(load_global_config(), key, value)
    save_global_config(config)
    success(f"Set providers.{key}.")


@config_app.command("path")
def config_path() -> None:
    """Print the location of the global configuration file."""
    from credprovider.config import global_config_path

    print_data(str(global_config_path()))
