from src.schoolops.core.identity.gotrue import GoTrueAdminClient, create_http_client
from src.schoolops.core.identity.provider import (
    IdentityProvider,
    IdentityProviderError,
    IdentityUser,
)

__all__ = [
    "GoTrueAdminClient",
    "IdentityProvider",
    "IdentityProviderError",
    "IdentityUser",
    "create_http_client",
]
