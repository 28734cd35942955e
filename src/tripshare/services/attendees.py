"""Attendee store — one user's standing on one specific trip or item.

The attendee table is the only mutation surface the cascade engine uses.
"""

import logging
import uuid

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tripshare.db.schemas.attendee import Attendee
from tripshare.db.session import atomic
from tripshare.errors import ConflictError, ErrorCode, NotFoundError
from tripshare.models.permissions import AttendeeLevel, ItemType
from tripshare.services.validation import coerce_enum, coerce_uuid

logger = logging.getLogger(__name__)


def for_item(item_type: ItemType, item_id: uuid.UUID):
    """WHERE clause selecting every attendee row of one trip or item."""
    return (Attendee.item_type == item_type.value) & (Attendee.item_id == item_id)


class AttendeeStore:
    def __init__(self, session: Session) -> None:
        self._session = session

    def add_attendee(
        self,
        user_id: uuid.UUID,
        item_type: ItemType | str,
        item_id: uuid.UUID,
        level: AttendeeLevel | str,
        added_by: uuid.UUID,
    ) -> Attendee:
        user_id = coerce_uuid(user_id, "user_id")
        item_type = coerce_enum(item_type, ItemType, ErrorCode.INVALID_ITEM_TYPE)
        item_id = coerce_uuid(item_id, "item_id")
        level = coerce_enum(level, AttendeeLevel, ErrorCode.INVALID_PERMISSION_LEVEL)
        added_by = coerce_uuid(added_by, "added_by")

        with atomic(self._session):
            if self.find_attendance(user_id, item_type, item_id) is not None:
                raise ConflictError(
                    f"User {user_id} is already an attendee of {item_type.value}:{item_id}",
                    code=ErrorCode.ATTENDEE_EXISTS,
                )
            attendee = Attendee(
                user_id=user_id,
                item_type=item_type.value,
                item_id=item_id,
                permission_level=level.value,
                added_by=added_by,
            )
            self._session.add(attendee)
            try:
                self._session.flush()
            except IntegrityError as e:
                raise ConflictError(
                    f"User {user_id} was added to {item_type.value}:{item_id} concurrently",
                    code=ErrorCode.ATTENDEE_EXISTS,
                ) from e

        logger.info("Attendee %s added to %s:%s (%s) by %s", user_id, item_type.value, item_id, level.value, added_by)
        return attendee

    def upsert_attendee(
        self,
        user_id: uuid.UUID,
        item_type: ItemType | str,
        item_id: uuid.UUID,
        level: AttendeeLevel | str,
        added_by: uuid.UUID,
    ) -> tuple[Attendee, bool]:
        """Create the record, or overwrite level and added_by on the existing one.

        Returns the record and whether it was created.
        """
        level = coerce_enum(level, AttendeeLevel, ErrorCode.INVALID_PERMISSION_LEVEL)
        with atomic(self._session):
            existing = self.find_attendance(user_id, item_type, item_id)
            if existing is None:
                return self.add_attendee(user_id, item_type, item_id, level, added_by), True
            existing.permission_level = level.value
            existing.added_by = added_by
            self._session.flush()
        return existing, False

    def bulk_add(
        self,
        item_type: ItemType | str,
        item_id: uuid.UUID,
        user_ids: list[uuid.UUID],
        level: AttendeeLevel | str,
        added_by: uuid.UUID,
    ) -> list[Attendee]:
        """Add several users at once, skipping those already attending.

        A user inserted concurrently still raises ConflictError and rolls back
        the whole batch.
        """
        item_type = coerce_enum(item_type, ItemType, ErrorCode.INVALID_ITEM_TYPE)
        item_id = coerce_uuid(item_id, "item_id")
        added = []
        with atomic(self._session):
            for user_id in user_ids:
                user_id = coerce_uuid(user_id, "user_id")
                if self.find_attendance(user_id, item_type, item_id) is not None:
                    logger.warning("Bulk add skipped %s on %s:%s: already an attendee", user_id, item_type.value, item_id)
                    continue
                added.append(self.add_attendee(user_id, item_type, item_id, level, added_by))
        return added

    def find_by_id(self, attendee_id: uuid.UUID) -> Attendee | None:
        return self._session.get(Attendee, coerce_uuid(attendee_id, "attendee_id"))

    def get(self, attendee_id: uuid.UUID) -> Attendee:
        attendee = self.find_by_id(attendee_id)
        if attendee is None:
            raise NotFoundError(f"Attendee {attendee_id} not found", code=ErrorCode.ATTENDEE_NOT_FOUND)
        return attendee

    def update_attendee_level(self, attendee_id: uuid.UUID, level: AttendeeLevel | str) -> Attendee:
        level = coerce_enum(level, AttendeeLevel, ErrorCode.INVALID_PERMISSION_LEVEL)
        with atomic(self._session):
            attendee = self.get(attendee_id)
            attendee.permission_level = level.value
            self._session.flush()

        logger.info("Attendee %s level set to %s", attendee_id, level.value)
        return attendee

    def remove_attendee(self, attendee_id: uuid.UUID) -> Attendee:
        with atomic(self._session):
            attendee = self.get(attendee_id)
            self._session.delete(attendee)
            self._session.flush()

        logger.info("Attendee %s removed from %s:%s", attendee.user_id, attendee.item_type, attendee.item_id)
        return attendee

    def remove_user_from_item(self, user_id: uuid.UUID, item_type: ItemType | str, item_id: uuid.UUID) -> int:
        """Delete one user's record on one item, if present. Returns rows deleted."""
        item_type = coerce_enum(item_type, ItemType, ErrorCode.INVALID_ITEM_TYPE)
        item_id = coerce_uuid(item_id, "item_id")
        user_id = coerce_uuid(user_id, "user_id")
        with atomic(self._session):
            result = self._session.execute(
                delete(Attendee).where(for_item(item_type, item_id), Attendee.user_id == user_id)
            )
        return result.rowcount or 0

    def remove_all_for_item(self, item_type: ItemType | str, item_id: uuid.UUID) -> int:
        """Delete every attendee row of one item. Zero rows is not an error."""
        item_type = coerce_enum(item_type, ItemType, ErrorCode.INVALID_ITEM_TYPE)
        item_id = coerce_uuid(item_id, "item_id")
        with atomic(self._session):
            result = self._session.execute(delete(Attendee).where(for_item(item_type, item_id)))
        removed = result.rowcount or 0
        logger.info("Removed %d attendees from %s:%s", removed, item_type.value, item_id)
        return removed

    def find_attendance(self, user_id: uuid.UUID, item_type: ItemType | str, item_id: uuid.UUID) -> Attendee | None:
        item_type = coerce_enum(item_type, ItemType, ErrorCode.INVALID_ITEM_TYPE)
        return self._session.execute(
            select(Attendee).where(
                for_item(item_type, coerce_uuid(item_id, "item_id")),
                Attendee.user_id == coerce_uuid(user_id, "user_id"),
            )
        ).scalar_one_or_none()

    def list_for_item(self, item_type: ItemType | str, item_id: uuid.UUID) -> list[Attendee]:
        item_type = coerce_enum(item_type, ItemType, ErrorCode.INVALID_ITEM_TYPE)
        return list(
            self._session.execute(
                select(Attendee)
                .where(for_item(item_type, coerce_uuid(item_id, "item_id")))
                .order_by(Attendee.created_at, Attendee.id)
            ).scalars()
        )

    def list_for_user(self, user_id: uuid.UUID) -> list[Attendee]:
        return list(
            self._session.execute(
                select(Attendee)
                .where(Attendee.user_id == coerce_uuid(user_id, "user_id"))
                .order_by(Attendee.created_at, Attendee.id)
            ).scalars()
        )
