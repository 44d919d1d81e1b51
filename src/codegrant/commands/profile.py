"""Profile commands -- manage OAuth2 client profiles.

Typical workflow::

    codegrant profile add github \
        --authorization-uri https://github.com/login/oauth/authorize \
        --access-token-uri https://github.com/login/oauth/access_token \
        --redirect-uri http://localhost:8080/callback \
        --client-id Iv1.abc --client-secret '${#Env#GITHUB_SECRET}'
    codegrant profile list
    codegrant profile show github
"""

from __future__ import annotations

from typing import Optional

import typer

from codegrant.models import OAUTH2_OOB_URN, OAuth2Profile
from codegrant.output import error, format_response, info, print_table, success, suggest


profile_app = typer.Typer(no_args_is_help=True)


def _mask(value: str) -> str:
    if not value:
        return ""
    if "${" in value:
        return value  # placeholder, not a secret
    return value[:4] + "..." if len(value) > 8 else "****"


@profile_app.command("add")
def profile_add(
    name: str = typer.Argument(help="Profile name."),
    authorization_uri: str = typer.Option(
        ..., "--authorization-uri", help="Provider authorization endpoint."
    ),
    access_token_uri: str = typer.Option(
        ..., "--access-token-uri", help="Provider token endpoint."
    ),
    redirect_uri: str = typer.Option(
        OAUTH2_OOB_URN,
        "--redirect-uri",
        help="Registered redirect URI. Defaults to out-of-band.",
    ),
    client_id: str = typer.Option(..., "--client-id", help="OAuth2 client id."),
    client_secret: str = typer.Option(
        ..., "--client-secret", help="OAuth2 client secret (placeholders allowed)."
    ),
    scope: Optional[str] = typer.Option(None, "--scope", help="Space-separated scopes."),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing profile."),
) -> None:
    """Create or replace an OAuth2 profile.

    Values are stored as given; ``${...}`` placeholders are resolved only
    when a token is requested.
    """
    from codegrant.config import profile_exists, save_profile

    if profile_exists(name) and not force:
        error(f"Profile '{name}' already exists. Use --force to replace it.")
        raise typer.Exit(code=2)

    profile = OAuth2Profile(
        name=name,
        authorization_uri=authorization_uri,
        access_token_uri=access_token_uri,
        redirect_uri=redirect_uri,
        client_id=client_id,
        client_secret=client_secret,
        scope=scope,
    )
    save_profile(profile)
    success(f'Profile "{name}" saved.')
    suggest(f"Request a token: codegrant token request {name}")


@profile_app.command("list")
def profile_list() -> None:
    """List all profiles with their redirect strategy and token status."""
    from codegrant.config import list_profiles, load_profile

    names = list_profiles()
    if not names:
        info("No profiles configured.")
        suggest("Create one: codegrant profile add NAME ...")
        return

    rows: list[list[str]] = []
    for name in names:
        profile = load_profile(name)
        strategy = "oob" if profile.redirect_uri == OAUTH2_OOB_URN else "redirect"
        rows.append([name, strategy, "yes" if profile.access_token else "no"])
    print_table(["name", "strategy", "token"], rows, title="Profiles")


@profile_app.command("show")
def profile_show(
    name: str = typer.Argument(help="Profile name."),
    reveal: bool = typer.Option(
        False, "--reveal", help="Show the client secret and access token unmasked."
    ),
) -> None:
    """Show a profile's settings."""
    from codegrant.config import load_profile

    data = load_profile(name).model_dump(mode="json")
    if not reveal:
        data["client_secret"] = _mask(data["client_secret"])
        data["access_token"] = _mask(data["access_token"])
    format_response(data)


@profile_app.command("remove")
def profile_remove(name: str = typer.Argument(help="Profile name.")) -> None:
    """Delete a profile and the token stored in it."""
    from codegrant.config import delete_profile

    delete_profile(name)
    success(f'Profile "{name}" removed.')
