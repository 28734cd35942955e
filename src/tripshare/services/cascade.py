"""Cascade engine — keeps a trip and its child items agreeing on who has access.

Propagation is a batch copy made at explicit lifecycle points, not a live
subscription: item-management services call the ``on_*`` hooks when a trip or
item is created or deleted and when a trip's attendee list changes.

Every hook that touches more than one row runs as a single unit of work. A
failure part way through rolls the whole set back. Typed store errors such as
ConflictError propagate unchanged; anything else surfaces as one
CascadeFailureError.
"""

import logging
import uuid
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass

from sqlalchemy.orm import Session

from tripshare.db.directory import ItemDirectory
from tripshare.db.schemas.attendee import Attendee
from tripshare.db.session import atomic
from tripshare.errors import CascadeFailureError, ErrorCode, TripShareError
from tripshare.models.permissions import AttendeeLevel, ItemType
from tripshare.models.sharing import CascadeSummary
from tripshare.services.attendees import AttendeeStore
from tripshare.services.validation import coerce_enum, coerce_uuid

logger = logging.getLogger(__name__)


@dataclass
class _Progress:
    summary: CascadeSummary
    current: tuple[str, object] | None = None
    applied: int = 0

    def at(self, item_type: ItemType, item_id: uuid.UUID) -> None:
        self.current = (item_type.value, item_id)

    def done(self) -> None:
        self.applied += 1


class CascadeEngine:
    def __init__(self, session: Session, attendees: AttendeeStore, items: ItemDirectory) -> None:
        self._session = session
        self._attendees = attendees
        self._items = items

    @contextmanager
    def _cascade(self, operation: str, trip_id: uuid.UUID | None) -> Iterator[_Progress]:
        progress = _Progress(summary=CascadeSummary(operation=operation, trip_id=trip_id))
        try:
            with atomic(self._session):
                yield progress
        except TripShareError as e:
            logger.warning("Cascade %s on trip %s rolled back: %s (%s)", operation, trip_id, e.message, e.code.value)
            raise
        except Exception as e:
            logger.exception(
                "Cascade %s on trip %s rolled back after %d mutations (failed at %s)",
                operation,
                trip_id,
                progress.applied,
                progress.current,
            )
            raise CascadeFailureError(
                f"{operation} failed for trip {trip_id}: {e}",
                operation=operation,
                trip_id=trip_id,
                applied=progress.applied,
                failed_item=progress.current,
            ) from e

        summary = progress.summary
        logger.info(
            "Cascade %s on trip %s: %d created, %d updated, %d removed, %d skipped",
            operation,
            trip_id,
            summary.created,
            summary.updated,
            summary.removed,
            summary.skipped,
        )

    def on_trip_created(self, trip_id: uuid.UUID, creator_id: uuid.UUID) -> Attendee:
        """Enroll the creator as a managing attendee of their new trip."""
        trip_id = coerce_uuid(trip_id, "trip_id")
        creator_id = coerce_uuid(creator_id, "creator_id")
        attendee = self._attendees.add_attendee(creator_id, ItemType.TRIP, trip_id, AttendeeLevel.MANAGE, creator_id)
        logger.info("Creator %s enrolled on trip %s", creator_id, trip_id)
        return attendee

    def on_item_created(
        self,
        trip_id: uuid.UUID | None,
        item_type: ItemType | str,
        item_id: uuid.UUID,
        creator_id: uuid.UUID,
    ) -> CascadeSummary:
        """Enroll the creator on a new item and copy the parent trip's attendees onto it.

        Runs once. Later changes to the trip's attendees reach this item only
        through ``on_trip_attendee_added`` / ``on_trip_attendee_removed``.
        """
        item_type = coerce_enum(item_type, ItemType, ErrorCode.INVALID_ITEM_TYPE)
        item_id = coerce_uuid(item_id, "item_id")
        creator_id = coerce_uuid(creator_id, "creator_id")
        trip_id = coerce_uuid(trip_id, "trip_id") if trip_id is not None else None

        with self._cascade("inherit_trip_attendees", trip_id) as progress:
            progress.at(item_type, item_id)
            self._attendees.add_attendee(creator_id, item_type, item_id, AttendeeLevel.MANAGE, creator_id)
            progress.summary.created += 1
            progress.done()

            if trip_id is not None:
                for trip_attendee in self._attendees.list_for_item(ItemType.TRIP, trip_id):
                    if trip_attendee.user_id == creator_id:
                        progress.summary.skipped += 1
                        continue
                    self._attendees.add_attendee(
                        trip_attendee.user_id,
                        item_type,
                        item_id,
                        trip_attendee.permission_level,
                        trip_attendee.added_by,
                    )
                    progress.summary.created += 1
                    progress.done()

        return progress.summary

    def on_trip_attendee_added(self, trip_id: uuid.UUID, attendee_record) -> CascadeSummary:
        """Fan a trip-level attendee out to every child item of the trip.

        Existing child records for the same user are overwritten with the
        trip-level level and added_by. Children the user created are left
        alone; creators already hold full access.
        Also used when a trip-level attendee's level changes.
        """
        trip_id = coerce_uuid(trip_id, "trip_id")
        user_id = attendee_record.user_id
        level = coerce_enum(attendee_record.permission_level, AttendeeLevel, ErrorCode.INVALID_PERMISSION_LEVEL)

        with self._cascade("trip_attendee_added", trip_id) as progress:
            for child in self._items.children_of(trip_id):
                if child.created_by == user_id:
                    progress.summary.skipped += 1
                    continue
                progress.at(child.kind, child.item_id)
                _, created = self._attendees.upsert_attendee(
                    user_id, child.kind, child.item_id, level, attendee_record.added_by
                )
                if created:
                    progress.summary.created += 1
                else:
                    progress.summary.updated += 1
                progress.done()

        return progress.summary

    def on_trip_attendee_removed(self, trip_id: uuid.UUID, user_id: uuid.UUID) -> CascadeSummary:
        """Remove a user's record from every child item of the trip. Companion data is untouched."""
        trip_id = coerce_uuid(trip_id, "trip_id")
        user_id = coerce_uuid(user_id, "user_id")

        with self._cascade("trip_attendee_removed", trip_id) as progress:
            for child in self._items.children_of(trip_id):
                progress.at(child.kind, child.item_id)
                progress.summary.removed += self._attendees.remove_user_from_item(user_id, child.kind, child.item_id)
                progress.done()

        return progress.summary

    def on_item_deleted(self, item_type: ItemType | str, item_id: uuid.UUID) -> int:
        return self._attendees.remove_all_for_item(item_type, item_id)

    def on_trip_deleted(self, trip_id: uuid.UUID, child_items: Sequence | None = None) -> CascadeSummary:
        """Drop attendee rows of the trip and each of its children.

        ``child_items`` defaults to the children currently recorded for the
        trip; pass them explicitly when the children are already gone.
        """
        trip_id = coerce_uuid(trip_id, "trip_id")
        if child_items is None:
            child_items = self._items.children_of(trip_id)

        with self._cascade("trip_deleted", trip_id) as progress:
            progress.at(ItemType.TRIP, trip_id)
            progress.summary.removed += self.on_item_deleted(ItemType.TRIP, trip_id)
            progress.done()
            for child in child_items:
                progress.at(child.kind, child.item_id)
                progress.summary.removed += self.on_item_deleted(child.kind, child.item_id)
                progress.done()

        return progress.summary
