"""Shared fixtures: in-memory collaborators wired into the app through dependency overrides."""

import smtplib
from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.core.exceptions import AccountNotFound, InvalidCredentials, ProviderError, ValidationError
from app.core.identity import ProviderAccount, SignInResult
from app.dependencies.services import (
    get_identity_provider,
    get_mail_transport,
    get_profile_store,
    get_settings,
)
from app.main import create_app
from app.services.email_service import VerificationEmailService
from app.services.user_service import UserService


class FakeIdentityProvider:
    def __init__(self):
        self.accounts: Dict[str, ProviderAccount] = {}
        self.passwords: Dict[str, str] = {}
        self.links: List[str] = []
        self.lookups: List[str] = []
        self.fail_lookups = False
        self.fail_links = False

    async def create_account(self, display_name, email, password):
        if email in self.accounts:
            raise ValidationError("An account with this email already exists")
        if len(password) < 6:
            raise ValidationError("Invalid account details: password too weak")
        account = ProviderAccount(uid=f"uid-{len(self.accounts) + 1}", email=email, display_name=display_name)
        self.accounts[email] = account
        self.passwords[email] = password
        return account

    async def verify_credentials(self, email, password):
        if self.passwords.get(email) != password:
            raise InvalidCredentials()
        account = self.accounts[email]
        return SignInResult(
            uid=account.uid,
            id_token=f"token-{account.uid}",
            email=email,
            display_name=account.display_name,
        )

    async def get_account_by_email(self, email):
        self.lookups.append(email)
        if self.fail_lookups:
            raise ProviderError()
        if email not in self.accounts:
            raise AccountNotFound()
        return self.accounts[email]

    async def generate_verification_link(self, email, continue_url):
        if self.fail_links:
            raise ProviderError("Unable to generate verification link")
        if email not in self.accounts:
            raise AccountNotFound()
        link = f"https://auth.example.com/verify?email={email}&continueUrl={continue_url}"
        self.links.append(link)
        return link


class InMemoryProfileStore:
    def __init__(self):
        self.documents: Dict[str, dict] = {}
        self.reads: List[str] = []
        self.writes: List[str] = []
        self.fail_writes = False
        self.drop_writes = False

    async def get(self, uid):
        self.reads.append(uid)
        document = self.documents.get(uid)
        return dict(document) if document is not None else None

    async def set(self, uid, document):
        if self.fail_writes:
            raise RuntimeError("store unavailable")
        self.writes.append(uid)
        if not self.drop_writes:
            self.documents[uid] = dict(document)

    async def delete(self, uid):
        self.documents.pop(uid, None)

    async def list_all(self):
        return [dict(document) for document in self.documents.values()]


class FakeMailTransport:
    def __init__(self):
        self.sent: List[dict] = []
        self.fail = False

    async def send(self, sender, recipient, subject, html) -> Optional[str]:
        if self.fail:
            raise smtplib.SMTPServerDisconnected("relay went away")
        self.sent.append({"sender": sender, "recipient": recipient, "subject": subject, "html": html})
        return f"<{len(self.sent)}@example.com>"


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        frontend_url="https://app.example.com",
        frontend_base_domain="example.com",
        email_from=None,
        smtp_host=None,
        smtp_port=None,
        smtp_user=None,
        smtp_pass=None,
        node_env="development",
    )


@pytest.fixture
def identity():
    return FakeIdentityProvider()


@pytest.fixture
def store():
    return InMemoryProfileStore()


@pytest.fixture
def mailer():
    return FakeMailTransport()


@pytest.fixture
def user_service(identity, store, settings):
    return UserService(identity, store, VerificationEmailService(identity, None, settings))


@pytest.fixture
def app(identity, store, settings):
    app = create_app()
    app.dependency_overrides[get_identity_provider] = lambda: identity
    app.dependency_overrides[get_profile_store] = lambda: store
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_mail_transport] = lambda: None
    return app


@pytest.fixture
def client(app):
    """Client for an app without SMTP configured."""
    return TestClient(app)


@pytest.fixture
def smtp_client(app, mailer):
    """Client for an app delivering email through ``mailer``."""
    app.dependency_overrides[get_mail_transport] = lambda: mailer
    return TestClient(app)


@pytest.fixture
def signup():
    """Create an account through the API and return the response body."""
    def _signup(client, email="a@x.com", password="secret1", full_name="A"):
        response = client.post("/users", json={"fullName": full_name, "email": email, "password": password})
        assert response.status_code == 201, response.text
        return response.json()
    return _signup
