
import logging
from typing import Any, Dict, List, Optional, Protocol

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.future import select

from app.models.user_profile import UserProfileRecord


logger = logging.getLogger(__name__)

Document = Dict[str, Any]


class ProfileStore(Protocol):
    """Key-value document store holding one profile per uid."""

    async def get(self, uid: str) -> Optional[Document]:
        ...

    async def set(self, uid: str, document: Document) -> None:
        ...

    async def delete(self, uid: str) -> None:
        ...

    async def list_all(self) -> List[Document]:
        ...


class SqlProfileStore:
    """Profile store keeping each document as a JSON column in a SQL table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def get(self, uid: str) -> Optional[Document]:
        """
        Fetch one document.

        Args:
            uid: Document key.

        Returns:
            Optional[Document]: Copy of the stored document, or None.
        """
        async with self.session_factory() as session:
            record = await session.get(UserProfileRecord, uid)
            if record is None:
                return None
            return dict(record.document)

    async def set(self, uid: str, document: Document) -> None:
        """Create or fully replace the document stored under ``uid``."""
        async with self.session_factory() as session:
            record = await session.get(UserProfileRecord, uid)
            if record is None:
                session.add(UserProfileRecord(uid=uid, email=document.get("email"), document=document))
            else:
                record.email = document.get("email")
                record.document = dict(document)
            await session.commit()
        logger.debug(f"Stored profile document {uid}")

    async def delete(self, uid: str) -> None:
        """Delete the document under ``uid``; deleting a missing key is a no-op."""
        async with self.session_factory() as session:
            record = await session.get(UserProfileRecord, uid)
            if record is not None:
                await session.delete(record)
                await session.commit()
                logger.debug(f"Deleted profile document {uid}")

    async def list_all(self) -> List[Document]:
        """Return every stored document, oldest first."""
        async with self.session_factory() as session:
            result = await session.execute(
                select(UserProfileRecord).order_by(UserProfileRecord.created_at, UserProfileRecord.uid)
            )
            return [dict(record.document) for record in result.scalars().all()]
