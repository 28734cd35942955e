"""SQLAlchemy ORM model for the companions table.

One row is one directed edge: ``user_id`` grants ``companion_user_id`` a
global permission over everything ``user_id`` owns.
"""

import uuid

from sqlalchemy import CheckConstraint, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from tripshare.db.schemas.base import Base, TimestampMixin


class Companion(TimestampMixin, Base):
    __tablename__ = "companions"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(nullable=False)
    companion_user_id: Mapped[uuid.UUID] = mapped_column(nullable=False)
    permission_level: Mapped[str] = mapped_column(String(20), nullable=False, default="none")

    __table_args__ = (
        UniqueConstraint("user_id", "companion_user_id", name="companions_user_companion_unique"),
        CheckConstraint(
            "permission_level IN ('none', 'view', 'manage_all')", name="chk_companions_permission_level"
        ),
        CheckConstraint("user_id <> companion_user_id", name="chk_companions_not_self"),
        Index("idx_companions_companion_user_id", "companion_user_id"),
        Index("idx_companions_user_permission", "user_id", "permission_level"),
    )

    def __repr__(self) -> str:
        return f"<Companion {self.user_id} -> {self.companion_user_id} ({self.permission_level})>"
