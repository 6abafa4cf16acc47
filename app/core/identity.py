"""
Identity provider interface.

The identity provider owns credential storage, password checks, token
issuance and verification links. Implementations raise the error kinds from
``app.core.exceptions``:

- ``ValidationError`` when the provider rejects input (duplicate email, weak password)
- ``InvalidCredentials`` when a sign-in is refused
- ``AccountNotFound`` when no account matches
- ``ProviderError`` for anything else
"""

from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass(frozen=True)
class ProviderAccount:
    """Account record as reported by the identity provider."""
    uid: str
    email: Optional[str] = None
    display_name: Optional[str] = None


@dataclass(frozen=True)
class SignInResult:
    """Outcome of a successful credential check."""
    uid: str
    id_token: str
    email: Optional[str] = None
    display_name: Optional[str] = None


class IdentityProvider(Protocol):

    async def create_account(self, display_name: str, email: str, password: str) -> ProviderAccount:
        ...

    async def verify_credentials(self, email: str, password: str) -> SignInResult:
        ...

    async def get_account_by_email(self, email: str) -> ProviderAccount:
        ...

    async def generate_verification_link(self, email: str, continue_url: str) -> str:
        ...
