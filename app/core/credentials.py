from typing import Protocol

from app.core.config import get_settings
from app.core.errors import MissingCredentialError

MISSING_TOKEN_MESSAGE = (
    "Pinterest API access token is not configured. "
    "Set PINTEREST_ACCESS_TOKEN to a valid OAuth2 access token."
)


class CredentialProvider(Protocol):
    def get_access_token(self) -> str | None: ...


class StaticCredentialProvider:
    def __init__(self, token: str | None):
        self._token = token

    def get_access_token(self) -> str | None:
        return self._token


class InMemoryCredentialProvider:
    """Holds a token handed over at runtime, e.g. by an OAuth callback."""

    def __init__(self, token: str | None = None):
        self._token = token

    def set_access_token(self, token: str | None) -> None:
        self._token = token

    def get_access_token(self) -> str | None:
        return self._token


def get_credential_provider() -> CredentialProvider:
    return StaticCredentialProvider(get_settings().pinterest_access_token)


def require_access_token(provider: CredentialProvider) -> str:
    token = provider.get_access_token()
    if not token or not token.strip():
        raise MissingCredentialError(MISSING_TOKEN_MESSAGE)
    return token.strip()
