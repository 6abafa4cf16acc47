
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

import pydantic

from app.core.exceptions import (
    AccountNotFound,
    EmailDispatchError,
    InternalError,
    PersistenceInconsistency,
    ServiceError,
    ValidationError,
)
from app.core.identity import IdentityProvider
from app.schemas.user import UserCreate, UserProfile, UserRole, UserUpdate, VerificationResult
from app.services.email_service import VerificationEmailService
from app.services.profile_store import ProfileStore
from app.utils.tasks import run_best_effort


logger = logging.getLogger(__name__)

# Keys an update may not change, or may not clear
IMMUTABLE_FIELDS = ("uid",)
NON_NULLABLE_FIELDS = ("purchases", "role")


def to_document(profile: UserProfile) -> Dict[str, Any]:
    """Serialize a profile to the JSON document kept in the store."""
    return profile.model_dump(mode="json", by_alias=True)


class UserService:
    """Service class for account provisioning and profile CRUD."""

    def __init__(
        self,
        identity: IdentityProvider,
        store: ProfileStore,
        emails: VerificationEmailService,
    ):
        self.identity = identity
        self.store = store
        self.emails = emails

    async def create(self, data: UserCreate) -> Tuple[UserProfile, Optional[VerificationResult]]:
        """
        Create a provider account and its profile document.

        The verification email is best-effort: its failure is logged and
        never fails or rolls back the account. A provider account created
        before a failed document write is not removed.

        Args:
            data: Account details.

        Returns:
            tuple: (stored UserProfile, verification outcome or None if dispatch failed)

        Raises:
            ValidationError, ProviderError: If the provider rejects the account.
            InternalError: If the profile cannot be saved.
            PersistenceInconsistency: If the saved profile cannot be read back.
        """
        try:
            account = await self.identity.create_account(
                display_name=data.full_name,
                email=data.email,
                password=data.password,
            )

            now = datetime.now(timezone.utc)
            await self.save_user(account.uid, UserProfile(
                uid=account.uid,
                email=data.email,
                full_name=data.full_name,
                phone_number=data.phone_number,
                created_at=now,
                last_login=now,
                purchases=[],
                role=UserRole.USER,
            ))
            logger.info(f"Created account {account.uid}")

            verification = await run_best_effort(
                self.emails.send_verification(data.email, uid=account.uid),
                f"verification email for {account.uid}",
            )

            document = await self.store.get(account.uid)
            if document is None:
                logger.error(f"Profile {account.uid} missing right after it was saved")
                raise PersistenceInconsistency()

            return UserProfile.model_validate(document), verification
        except ServiceError as e:
            logger.error(f"Error creating user {data.email}: {e.detail}")
            raise

    async def resend_verification(self, email: str) -> VerificationResult:
        """
        Resend the verification link to an existing account.

        Raises:
            AccountNotFound: If the provider has no account for ``email``;
                no email is attempted in that case.
            InternalError: For any other provider failure.
        """
        try:
            account = await self.identity.get_account_by_email(email)
        except AccountNotFound:
            logger.warning(f"Verification resend requested for unknown email {email}")
            raise
        except ServiceError as e:
            logger.error(f"Error resolving account for {email}: {e.detail}")
            raise InternalError("Unable to resend verification link")

        try:
            return await self.emails.send_verification(email, uid=account.uid, resend=True)
        except EmailDispatchError:
            return VerificationResult(success=False)
        except AccountNotFound:
            raise
        except ServiceError as e:
            logger.error(f"Error resending verification to {email}: {e.detail}")
            raise InternalError("Unable to resend verification link")

    async def save_user(self, uid: str, profile: UserProfile) -> None:
        """
        Persist a full profile document.

        Raises:
            InternalError: If the store fails.
        """
        await self._write(uid, to_document(profile))

    async def _write(self, uid: str, document: Dict[str, Any]) -> None:
        try:
            await self.store.set(uid, document)
        except Exception as e:
            logger.error(f"Error saving user {uid} in db: {e}")
            raise InternalError("Unable to save account information. Please try again.") from e

    async def find_all(self) -> List[UserProfile]:
        """List all profiles; missing purchases/role fall back to their defaults."""
        documents = await self.store.list_all()
        return [UserProfile.model_validate(document) for document in documents]

    async def find_one(self, uid: str) -> UserProfile:
        """
        Get one profile.

        Raises:
            AccountNotFound: If no document exists for ``uid``.
        """
        document = await self.store.get(uid)
        if document is None:
            raise AccountNotFound()
        document.setdefault("uid", uid)
        return UserProfile.model_validate(document)

    async def update(self, uid: str, data: UserUpdate) -> UserProfile:
        """
        Shallow-merge the fields present in ``data`` over the stored profile.

        Concurrent updates are last-write-wins.

        Raises:
            AccountNotFound: If no document exists; nothing is written.
            ValidationError: If a merged field has the wrong type; nothing is written.
        """
        existing = await self.find_one(uid)
        changes = data.model_dump(mode="json", by_alias=True, exclude_unset=True)
        for key in IMMUTABLE_FIELDS:
            changes.pop(key, None)
        for key in NON_NULLABLE_FIELDS:
            if key in changes and changes[key] is None:
                del changes[key]

        merged = {**to_document(existing), **changes}
        try:
            updated = UserProfile.model_validate(merged)
        except pydantic.ValidationError as e:
            fields = sorted({".".join(str(part) for part in error["loc"]) for error in e.errors()})
            raise ValidationError(f"Invalid profile fields: {', '.join(fields)}") from e
        await self._write(uid, to_document(updated))
        logger.info(f"Updated user {uid}: {sorted(changes)}")
        return updated

    async def record_login(self, profile: UserProfile, when: Optional[datetime] = None) -> UserProfile:
        """Persist ``profile`` with a fresh ``lastLogin`` and return the updated copy."""
        updated = profile.model_copy(update={"last_login": when or datetime.now(timezone.utc)})
        await self.save_user(updated.uid, updated)
        return updated

    async def remove(self, uid: str) -> UserProfile:
        """
        Delete a profile and return the pre-deletion snapshot.

        Raises:
            AccountNotFound: If no document exists for ``uid``.
        """
        profile = await self.find_one(uid)
        await self.store.delete(uid)
        logger.info(f"Deleted user {uid}")
        return profile
