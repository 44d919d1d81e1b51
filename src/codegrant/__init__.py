"""codegrant -- OAuth2 authorization code grant driven through a browser.

This package obtains an access token for a configured OAuth2 client: it
validates the client profile, opens the provider's authorization page,
captures the authorization code (from the redirect or, for out-of-band
clients, from the page the provider shows), exchanges the code for a token,
and stores the token in the profile.

Typical workflow::

    codegrant profile add github --authorization-uri ... --client-id ...
    codegrant token request github

Modules:
    app: Typer application factory and CLI entry point.
    models: Pydantic models shared across the entire package.
    config: XDG-aware project configuration and profile management.
    expansion: ``${...}`` placeholder resolution for profile values.
    oauth2: Parameter validation, token exchange, and the flow orchestrator.
    browser: Browsing surface interface, code capture, system browser.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
