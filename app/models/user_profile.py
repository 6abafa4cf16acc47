

from sqlalchemy import Column, DateTime, JSON, String
from sqlalchemy.sql import func

from app.db.base import Base


class UserProfileRecord(Base):
    """
    Stored user profile document.

    One row per identity-provider account, keyed by the provider uid. The
    profile itself lives in ``document`` as JSON so partial updates can add
    keys without schema changes.
    """

    __tablename__ = "user_profiles"

    uid = Column(String(128), primary_key=True)
    email = Column(String, nullable=True, index=True)
    document = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
