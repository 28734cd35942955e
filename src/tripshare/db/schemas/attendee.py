"""SQLAlchemy ORM model for the attendees table.

``(item_type, item_id)`` is a polymorphic reference into the collaborator-owned
item tables, so there is no foreign key on ``item_id``.
"""

import uuid

from sqlalchemy import CheckConstraint, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from tripshare.db.schemas.base import Base, TimestampMixin


class Attendee(TimestampMixin, Base):
    __tablename__ = "attendees"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(nullable=False)
    item_type: Mapped[str] = mapped_column(String(20), nullable=False)
    item_id: Mapped[uuid.UUID] = mapped_column(nullable=False)
    permission_level: Mapped[str] = mapped_column(String(20), nullable=False, default="view")
    added_by: Mapped[uuid.UUID] = mapped_column(nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "item_type", "item_id", name="attendees_user_item_unique"),
        CheckConstraint(
            "item_type IN ('trip', 'flight', 'hotel', 'event', 'transportation', 'car_rental')",
            name="chk_attendees_item_type",
        ),
        CheckConstraint("permission_level IN ('view', 'manage')", name="chk_attendees_permission_level"),
        Index("idx_attendees_item", "item_type", "item_id"),
        Index("idx_attendees_user_id", "user_id"),
        Index("idx_attendees_added_by", "added_by"),
    )

    def __repr__(self) -> str:
        return f"<Attendee {self.user_id} on {self.item_type}:{self.item_id} ({self.permission_level})>"
