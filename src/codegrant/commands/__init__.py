"""Built-in CLI sub-commands for codegrant.

* :mod:`~codegrant.commands.profile` -- create, inspect, and remove OAuth2
  client profiles.
* :mod:`~codegrant.commands.config` -- project properties and settings.
* :mod:`~codegrant.commands.token` -- run the authorization code flow and
  read the resulting access token.

Each module exports a :class:`typer.Typer` sub-application registered on the
root app in :mod:`codegrant.app`.
"""
