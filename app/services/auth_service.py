
import logging
from dataclasses import dataclass

from app.core.exceptions import AccountNotFound
from app.core.identity import IdentityProvider
from app.schemas.user import UserProfile, UserRole
from app.services.user_service import UserService
from app.utils.tasks import run_best_effort


logger = logging.getLogger(__name__)


@dataclass
class LoginResult:
    id_token: str
    user: UserProfile


class AuthService:
    """Service class for credential checks and session issuance."""

    def __init__(self, identity: IdentityProvider, users: UserService):
        self.identity = identity
        self.users = users

    async def login(self, email: str, password: str) -> LoginResult:
        """
        Verify credentials with the identity provider.

        The returned user is the stored profile. Accounts without a profile
        document are reported with the USER role. ``lastLogin`` is refreshed
        best-effort.

        Raises:
            InvalidCredentials: If the provider refuses the credentials.
            ProviderError: If the provider cannot be reached.
        """
        result = await self.identity.verify_credentials(email, password)

        try:
            user = await self.users.find_one(result.uid)
        except AccountNotFound:
            logger.warning(f"Account {result.uid} signed in without a profile document")
            user = UserProfile(
                uid=result.uid,
                email=result.email or email,
                full_name=result.display_name,
                role=UserRole.USER,
            )
        else:
            refreshed = await run_best_effort(
                self.users.record_login(user), f"lastLogin update for {result.uid}"
            )
            if refreshed is not None:
                user = refreshed

        logger.info(f"User {result.uid} logged in")
        return LoginResult(id_token=result.id_token, user=user)
