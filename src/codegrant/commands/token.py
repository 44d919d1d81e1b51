"""Token commands -- run the authorization code flow.

``codegrant token request`` opens the provider's authorization page in the
system browser, waits for the authorization code, exchanges it, and stores
the access token in the profile. ``codegrant token show`` prints the stored
token to stdout for use in scripts::

    codegrant token request github --timeout 300
    curl -H "Authorization: Bearer $(codegrant token show github)" ...
"""

from __future__ import annotations

from typing import Optional

import typer

from codegrant.browser.system import SystemBrowserFacade
from codegrant.exceptions import CodegrantError, InvalidParametersError, UserCancelledError
from codegrant.output import debug, error, info, print_data, success, suggest, warning


token_app = typer.Typer(no_args_is_help=True)


def _resolve_profile_name(name: Optional[str]) -> str:
    from codegrant.config import resolve_project_config

    if name:
        return name
    default = resolve_project_config().default_profile
    if not default:
        error("No profile given and no default profile configured.")
        suggest("Set one: codegrant config set-default NAME")
        raise typer.Exit(code=2)
    return default


@token_app.command("request")
def token_request(
    profile_name: Optional[str] = typer.Argument(
        None, help="Profile to authorize. Defaults to the configured default profile."
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", "-t", min=1, help="Seconds to wait for authorization."
    ),
) -> None:
    """Authorize in the browser and store a new access token on the profile."""
    from codegrant.config import load_profile, resolve_project_config, save_profile
    from codegrant.expansion import ProjectPropertyExpander
    from codegrant.oauth2.flow import OAuth2Flow

    name = _resolve_profile_name(profile_name)
    project = resolve_project_config()
    profile = load_profile(name)

    flow = OAuth2Flow(
        browser_factory=SystemBrowserFacade,
        expander=ProjectPropertyExpander(project.properties),
        timeout=timeout if timeout is not None else project.browser_timeout,
        on_transition=lambda state: debug(f"OAuth2 flow: {state.value}"),
    )

    try:
        flow.request_access_token(profile)
    except InvalidParametersError as exc:
        error(f"Profile '{name}' is not valid:")
        for _, message in exc.problems:
            info(f"  - {message}")
        suggest(f"Fix it: codegrant profile add {name} --force ...")
        raise typer.Exit(code=exc.exit_code) from None
    except UserCancelledError as exc:
        warning(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    except CodegrantError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    save_profile(profile)
    success(f'Access token stored in profile "{name}".')
    suggest(f"Use it: codegrant token show {name}")


@token_app.command("show")
def token_show(
    profile_name: Optional[str] = typer.Argument(
        None, help="Profile to read. Defaults to the configured default profile."
    ),
) -> None:
    """Print the stored access token to stdout."""
    from codegrant.config import load_profile

    name = _resolve_profile_name(profile_name)
    profile = load_profile(name)
    if not profile.access_token:
        error(f"Profile '{name}' has no access token.")
        suggest(f"Request one: codegrant token request {name}")
        raise typer.Exit(code=1)
    print_data(profile.access_token)
