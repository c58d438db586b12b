from .transport import ChatGatewayError, ClientConfig
from .gateway import ChatGateway
from .auth_session import (
    ANONYMOUS,
    AUTHENTICATED,
    LOADING,
    AuthGateway,
    AuthSession,
    CredentialStore,
    MemoryCredentialStore,
)

__all__ = [
    "ChatGatewayError",
    "ClientConfig",
    "ChatGateway",
    "AuthGateway",
    "AuthSession",
    "CredentialStore",
    "MemoryCredentialStore",
    "LOADING",
    "AUTHENTICATED",
    "ANONYMOUS",
]
