"""
Service wiring dependencies.

Each collaborator is provided by its own dependency so tests can replace it
through ``app.dependency_overrides``.
"""

from typing import Optional

from fastapi import Depends

from app.core.config import Settings, settings
from app.core.firebase import get_firebase_identity_provider
from app.core.identity import IdentityProvider
from app.core.mailer import MailTransport, SmtpMailTransport
from app.db.session import AsyncSessionLocal
from app.services.auth_service import AuthService
from app.services.email_service import VerificationEmailService
from app.services.profile_store import ProfileStore, SqlProfileStore
from app.services.user_service import UserService


def get_settings() -> Settings:
    return settings


def get_identity_provider() -> IdentityProvider:
    return get_firebase_identity_provider()


def get_profile_store() -> ProfileStore:
    return SqlProfileStore(AsyncSessionLocal)


def get_mail_transport(settings: Settings = Depends(get_settings)) -> Optional[MailTransport]:
    """SMTP transport, or None when SMTP is not fully configured."""
    return SmtpMailTransport.from_settings(settings)


def get_email_service(
    identity: IdentityProvider = Depends(get_identity_provider),
    mailer: Optional[MailTransport] = Depends(get_mail_transport),
    settings: Settings = Depends(get_settings),
) -> VerificationEmailService:
    return VerificationEmailService(identity, mailer, settings)


def get_user_service(
    identity: IdentityProvider = Depends(get_identity_provider),
    store: ProfileStore = Depends(get_profile_store),
    emails: VerificationEmailService = Depends(get_email_service),
) -> UserService:
    return UserService(identity, store, emails)


def get_auth_service(
    identity: IdentityProvider = Depends(get_identity_provider),
    users: UserService = Depends(get_user_service),
) -> AuthService:
    return AuthService(identity, users)
