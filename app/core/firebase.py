

import asyncio
import logging
from typing import Any, Dict, Optional

import firebase_admin
import httpx
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials
from firebase_admin.exceptions import FirebaseError, InvalidArgumentError

from app.core.config import Settings, settings as default_settings
from app.core.exceptions import AccountNotFound, InvalidCredentials, ProviderError, ValidationError
from app.core.identity import ProviderAccount, SignInResult


logger = logging.getLogger(__name__)

# Identity Toolkit error codes that mean the email/password pair was refused
SIGN_IN_REJECTIONS = {
    "EMAIL_NOT_FOUND",
    "INVALID_PASSWORD",
    "INVALID_LOGIN_CREDENTIALS",
    "INVALID_EMAIL",
    "USER_DISABLED",
    "MISSING_PASSWORD",
}


class FirebaseIdentityProvider:
    """
    Identity provider backed by Firebase Authentication.

    Admin operations (account creation, lookup, verification links) go
    through the firebase-admin SDK, which is blocking and therefore runs in a
    worker thread. Password sign-in is not part of the admin SDK and uses the
    Identity Toolkit REST API instead.
    """

    def __init__(
        self,
        settings: Settings = default_settings,
        app: Optional[firebase_admin.App] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the provider; the admin app is created on first use."""
        self.settings = settings
        self._app = app
        self.client = http_client or httpx.AsyncClient(
            base_url=settings.identity_toolkit_url,
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            timeout=30.0,
        )

    async def aclose(self) -> None:
        """Close the Identity Toolkit HTTP client."""
        await self.client.aclose()

    @property
    def app(self) -> firebase_admin.App:
        """Return the firebase-admin app, initializing the default one if needed."""
        if self._app is None:
            try:
                self._app = firebase_admin.get_app()
            except ValueError:
                if self.settings.firebase_credentials_path:
                    cred = credentials.Certificate(self.settings.firebase_credentials_path)
                else:
                    cred = credentials.ApplicationDefault()
                options = {}
                if self.settings.firebase_project_id:
                    options["projectId"] = self.settings.firebase_project_id
                self._app = firebase_admin.initialize_app(cred, options)
                logger.info("Initialized Firebase admin app")
        return self._app

    @staticmethod
    def _to_account(record: firebase_auth.UserRecord) -> ProviderAccount:
        return ProviderAccount(
            uid=record.uid,
            email=record.email,
            display_name=record.display_name,
        )

    async def create_account(self, display_name: str, email: str, password: str) -> ProviderAccount:
        """
        Create a Firebase account.

        Args:
            display_name: Display name stored on the account.
            email: Account email address.
            password: Plain password, checked by Firebase.

        Returns:
            ProviderAccount: The created account.

        Raises:
            ValidationError: If Firebase rejects the email or password.
            ProviderError: For any other Firebase failure.
        """
        try:
            record = await asyncio.to_thread(
                firebase_auth.create_user,
                display_name=display_name,
                email=email,
                password=password,
                app=self.app,
            )
        except firebase_auth.EmailAlreadyExistsError:
            raise ValidationError("An account with this email already exists")
        except (ValueError, InvalidArgumentError) as e:
            raise ValidationError(f"Invalid account details: {e}")
        except FirebaseError as e:
            logger.error(f"Firebase create_user failed for {email}: {e}")
            raise ProviderError("Unable to create account. Please try again.")

        if not record:
            raise ProviderError("Unable to create account. Please try again.")
        return self._to_account(record)

    async def get_account_by_email(self, email: str) -> ProviderAccount:
        """
        Look up an account by email.

        Raises:
            AccountNotFound: If no account uses this email.
            ProviderError: For any other Firebase failure.
        """
        try:
            record = await asyncio.to_thread(firebase_auth.get_user_by_email, email, app=self.app)
        except firebase_auth.UserNotFoundError:
            raise AccountNotFound()
        except (ValueError, FirebaseError) as e:
            logger.error(f"Firebase get_user_by_email failed for {email}: {e}")
            raise ProviderError()
        return self._to_account(record)

    async def generate_verification_link(self, email: str, continue_url: str) -> str:
        """
        Generate a one-time email verification link.

        Args:
            email: Address to verify.
            continue_url: Where the user lands after verifying.

        Returns:
            str: Verification link.
        """
        action_code_settings = firebase_auth.ActionCodeSettings(
            url=continue_url,
            handle_code_in_app=False,
        )
        try:
            return await asyncio.to_thread(
                firebase_auth.generate_email_verification_link,
                email,
                action_code_settings,
                app=self.app,
            )
        except firebase_auth.UserNotFoundError:
            raise AccountNotFound()
        except (ValueError, FirebaseError) as e:
            logger.error(f"Firebase verification link generation failed for {email}: {e}")
            raise ProviderError("Unable to generate verification link")

    def _handle_sign_in_response(self, response: httpx.Response) -> Dict[str, Any]:
        """
        Handle Identity Toolkit sign-in response with error checking.

        Raises:
            InvalidCredentials: If the credentials were refused.
            ProviderError: For malformed responses or other API errors.
        """
        try:
            data = response.json()
        except ValueError:
            logger.error(f"Invalid JSON response from Identity Toolkit: {response.text}")
            raise ProviderError("Invalid response from identity provider")

        if not response.is_success:
            message = str(data.get("error", {}).get("message", "UNKNOWN"))
            # Messages may carry a suffix, e.g. "INVALID_PASSWORD : ..."
            code = message.split(":")[0].strip()
            if code in SIGN_IN_REJECTIONS:
                raise InvalidCredentials()
            logger.error(f"Identity Toolkit error ({response.status_code}): {message}")
            raise ProviderError()

        if not data.get("idToken") or not data.get("localId"):
            logger.error("Identity Toolkit sign-in response missing idToken/localId")
            raise ProviderError("Invalid response from identity provider")
        return data

    async def verify_credentials(self, email: str, password: str) -> SignInResult:
        """
        Verify an email/password pair and obtain an identity token.

        Returns:
            SignInResult: Token and account identifiers.

        Raises:
            InvalidCredentials: If Firebase refuses the credentials.
            ProviderError: On timeouts, transport or API failures.
        """
        if not self.settings.firebase_api_key:
            logger.error("FIREBASE_API_KEY not configured; cannot verify credentials")
            raise ProviderError("Identity provider not configured")

        url = "/accounts:signInWithPassword"
        try:
            response = await self.client.post(
                url,
                params={"key": self.settings.firebase_api_key},
                json={"email": email, "password": password, "returnSecureToken": True},
            )
        except httpx.TimeoutException:
            logger.error(f"Timeout making POST request to {url}")
            raise ProviderError("Identity provider request timed out")
        except httpx.HTTPError as e:
            logger.error(f"HTTP error making POST request to {url}: {e}")
            raise ProviderError()

        data = self._handle_sign_in_response(response)
        return SignInResult(
            uid=data["localId"],
            id_token=data["idToken"],
            email=data.get("email"),
            display_name=data.get("displayName") or None,
        )


# Singleton instance for application-wide use
_identity_provider = None

def get_firebase_identity_provider() -> FirebaseIdentityProvider:
    """
    Get singleton Firebase identity provider instance.

    Returns:
        FirebaseIdentityProvider: Configured provider.
    """
    global _identity_provider
    if _identity_provider is None:
        _identity_provider = FirebaseIdentityProvider()
    return _identity_provider


async def close_firebase_identity_provider() -> None:
    """Close and drop the singleton provider, if one was created."""
    global _identity_provider
    if _identity_provider is not None:
        await _identity_provider.aclose()
        _identity_provider = None
