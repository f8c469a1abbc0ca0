"""
User Model
Account identity referenced by workspaces, boards and cards
"""

from sqlalchemy import Column, String, Boolean, Index
from taskboard.models.base import SoftDeleteModel


class User(SoftDeleteModel):
    """User account (credentials are managed by the auth service)"""
    __tablename__ = "users"

    email = Column(String(254), nullable=False, unique=True, index=True)
    username = Column(String(50), nullable=True, unique=True)
    full_name = Column(String(100), nullable=False)
    avatar_url = Column(String(500), nullable=True)

    # Account status
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    is_superuser = Column(Boolean, default=False, nullable=False)

    __table_args__ = (
        Index('ix_user_email_active', 'email', 'is_active'),
    )

    def __repr__(self):
        return f"<User(email='{self.email}', full_name='{self.full_name}')>"
