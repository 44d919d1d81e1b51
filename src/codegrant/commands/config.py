"""Config commands -- project properties and settings.

Project properties back ``${#Project#name}`` placeholders in profile URIs,
so one profile can point at staging or production by switching a property::

    codegrant config set-property authHost https://staging.example.com
    codegrant config show
"""

from __future__ import annotations

from typing import Optional

import typer

from codegrant.output import error, format_response, info, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Show the effective configuration (user-level merged with ./codegrant.json)."""
    from codegrant.config import get_config_dir, resolve_project_config

    info(f"Config directory: {get_config_dir()}")
    format_response(resolve_project_config().model_dump(mode="json"))


@config_app.command("set-property")
def config_set_property(
    key: str = typer.Argument(help="Property name."),
    value: str = typer.Argument(help="Property value."),
) -> None:
    """Set a project property."""
    from codegrant.config import load_project_config, save_project_config

    config = load_project_config()
    config.properties[key] = value
    save_project_config(config)
    success(f"Set property '{key}'.")


@config_app.command("unset-property")
def config_unset_property(key: str = typer.Argument(help="Property name.")) -> None:
    """Remove a project property."""
    from codegrant.config import load_project_config, save_project_config

    config = load_project_config()
    if key not in config.properties:
        error(f"Property '{key}' is not set.")
        raise typer.Exit(code=2)
    del config.properties[key]
    save_project_config(config)
    success(f"Removed property '{key}'.")


@config_app.command("set-default")
def config_set_default(
    profile_name: Optional[str] = typer.Argument(
        None, help="Profile used when commands omit one. Omit to clear."
    ),
) -> None:
    """Set or clear the default profile."""
    from codegrant.config import load_project_config, profile_exists, save_project_config

    if profile_name is not None and not profile_exists(profile_name):
        error(f"Profile '{profile_name}' does not exist.")
        raise typer.Exit(code=2)
    config = load_project_config()
    config.default_profile = profile_name
    save_project_config(config)
    success(
        f"Default profile set to '{profile_name}'."
        if profile_name
        else "Default profile cleared."
    )


@config_app.command("set-timeout")
def config_set_timeout(
    seconds: Optional[float] = typer.Argument(
        None, min=1, help="Seconds to wait for authorization. Omit to wait forever."
    ),
) -> None:
    """Set or clear how long ``token request`` waits for the browser."""
    from codegrant.config import load_project_config, save_project_config

    config = load_project_config()
    config.browser_timeout = seconds
    save_project_config(config)
    success(f"Browser timeout set to {seconds:g}s." if seconds else "Browser timeout cleared.")
