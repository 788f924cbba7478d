"""
User model configuration.
"""

from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, Enum, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from civicdesk.models.base.base_model import BaseModel
from civicdesk.models.base.enums import UserRole
from civicdesk.models.base.mixins import TimestampMixin

if TYPE_CHECKING:
    from civicdesk.models.ward.ward import Ward

__all__ = ["User"]


class User(BaseModel, TimestampMixin):
    """
    Core User entity.

    Staff (administrators, ward officers, maintenance team) and citizens
    share this table. `created_at` doubles as account-creation order for
    assignment tie-breaks. Citizens created through guest verification
    have no password until they set one.
    """

    __tablename__ = "users"
    __table_args__ = (
        Index("ix_users_role_ward_active", "role", "ward_id", "is_active"),
        {"comment": "Core user identity and role"},
    )

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
        comment="Unique email address (normalized to lowercase)",
    )
    phone_number: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, name="user_role_enum", native_enum=False, length=32),
        nullable=False,
        default=UserRole.CITIZEN,
        index=True,
    )
    ward_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("wards.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)

    ward: Mapped[Optional["Ward"]] = relationship("Ward", back_populates="users")
