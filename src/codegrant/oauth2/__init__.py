"""OAuth2 authorization code grant.

Exports:
    :class:`OAuth2Flow` -- the orchestrator and its :class:`FlowState`.
    :class:`ParameterValidator` -- upfront profile validation.
    :class:`TokenExchangeClient` -- the token endpoint call.

See Also:
    :mod:`codegrant.browser` for authorization code capture.
"""

from codegrant.oauth2.flow import FlowState, OAuth2Flow
from codegrant.oauth2.token_client import TokenExchangeClient
from codegrant.oauth2.validator import ParameterValidator

__all__ = ["FlowState", "OAuth2Flow", "ParameterValidator", "TokenExchangeClient"]
