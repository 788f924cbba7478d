"""
Ward model: a municipal administrative zone scoping officers and complaints.
"""

from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from civicdesk.models.base.base_model import BaseModel
from civicdesk.models.base.mixins import TimestampMixin

if TYPE_CHECKING:
    from civicdesk.models.user.user import User

__all__ = ["Ward"]


class Ward(BaseModel, TimestampMixin):
    __tablename__ = "wards"

    name: Mapped[str] = mapped_column(String(120), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    users: Mapped[List["User"]] = relationship("User", back_populates="ward")
