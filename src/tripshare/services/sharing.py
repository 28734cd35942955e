"""Sharing service — the companion and attendee operations exposed to clients.

Composes the stores, the permission resolver and the cascade engine. Each
public method is one unit of work: an attendee change on a trip commits
together with its fan-out to the trip's items, or not at all.
"""

import logging
import uuid

from sqlalchemy.orm import Session

from tripshare.db.directory import ItemDirectory, SqlItemDirectory, SqlUserDirectory, UserDirectory
from tripshare.db.session import atomic
from tripshare.errors import ErrorCode, NotFoundError, PermissionDeniedError
from tripshare.models.permissions import (
    Action,
    AttendeeLevel,
    CompanionLevel,
    EffectivePermission,
    ItemType,
    default_attendee_level,
)
from tripshare.models.sharing import AttendeeOut, CompanionOut
from tripshare.services.attendees import AttendeeStore
from tripshare.services.cascade import CascadeEngine
from tripshare.services.companions import CompanionStore
from tripshare.services.permissions import PermissionResolver
from tripshare.services.validation import coerce_enum, coerce_uuid

logger = logging.getLogger(__name__)


class SharingService:
    def __init__(
        self,
        session: Session,
        users: UserDirectory,
        items: ItemDirectory,
    ) -> None:
        self._session = session
        self._users = users
        self._items = items
        self.companions = CompanionStore(session)
        self.attendees = AttendeeStore(session)
        self.resolver = PermissionResolver(self.attendees, self.companions)
        self.cascade = CascadeEngine(session, self.attendees, items)

    @classmethod
    def from_session(cls, session: Session) -> "SharingService":
        return cls(session, SqlUserDirectory(session), SqlItemDirectory(session))

    # ── Companions ────────────────────────────────────────────────────────────

    def add_companion(
        self, actor_id: uuid.UUID, identifier: str, level: CompanionLevel | str = CompanionLevel.VIEW
    ) -> CompanionOut:
        companion_user_id = self._resolve_user(identifier)
        edge = self.companions.add_companion(actor_id, companion_user_id, level)
        reverse = self.companions.get_outbound_level(companion_user_id, actor_id)
        return CompanionOut.model_validate(edge).model_copy(update={"reverse_permission_level": reverse})

    def list_companions(self, actor_id: uuid.UUID) -> list[CompanionOut]:
        edges = self.companions.list_companions(actor_id)
        reverse = self.companions.reverse_levels(actor_id, [e.companion_user_id for e in edges])
        return [
            CompanionOut.model_validate(e).model_copy(
                update={"reverse_permission_level": reverse.get(e.companion_user_id, CompanionLevel.NONE)}
            )
            for e in edges
        ]

    def list_received(self, actor_id: uuid.UUID) -> list[CompanionOut]:
        return [CompanionOut.model_validate(e) for e in self.companions.list_received(actor_id)]

    def update_companion(
        self, actor_id: uuid.UUID, companion_user_id: uuid.UUID, level: CompanionLevel | str
    ) -> CompanionOut:
        return CompanionOut.model_validate(self.companions.update_companion_level(actor_id, companion_user_id, level))

    def remove_companion(self, actor_id: uuid.UUID, companion_user_id: uuid.UUID) -> CompanionOut:
        return CompanionOut.model_validate(self.companions.remove_companion(actor_id, companion_user_id))

    # ── Attendees ─────────────────────────────────────────────────────────────

    def add_attendee(
        self,
        actor_id: uuid.UUID,
        identifier: str,
        item_type: ItemType | str,
        item_id: uuid.UUID,
        level: AttendeeLevel | str | None = None,
    ) -> AttendeeOut:
        """Share a trip or item with a user. Sharing a trip also shares its items."""
        item = self._load_item(item_type, item_id)
        self.resolver.verify_access(actor_id, item, Action.MANAGE)
        user_id = self._resolve_user(identifier)
        if level is None:
            level = default_attendee_level(item.kind)

        with atomic(self._session):
            attendee = self.attendees.add_attendee(user_id, item.kind, item.item_id, level, actor_id)
            if item.kind is ItemType.TRIP:
                self.cascade.on_trip_attendee_added(item.item_id, attendee)
        return AttendeeOut.model_validate(attendee)

    def list_attendees(self, actor_id: uuid.UUID, item_type: ItemType | str, item_id: uuid.UUID) -> list[AttendeeOut]:
        item = self._load_item(item_type, item_id)
        self.resolver.verify_access(actor_id, item, Action.VIEW)
        return [AttendeeOut.model_validate(a) for a in self.attendees.list_for_item(item.kind, item.item_id)]

    def update_attendee(self, actor_id: uuid.UUID, attendee_id: uuid.UUID, level: AttendeeLevel | str) -> AttendeeOut:
        """Change an attendee's level. A trip-level change is copied to the trip's items."""
        level = coerce_enum(level, AttendeeLevel, ErrorCode.INVALID_PERMISSION_LEVEL)
        attendee = self.attendees.get(attendee_id)
        item = self._load_item(attendee.item_type, attendee.item_id)
        self.resolver.verify_access(actor_id, item, Action.MANAGE)

        with atomic(self._session):
            attendee = self.attendees.update_attendee_level(attendee.id, level)
            if item.kind is ItemType.TRIP:
                self.cascade.on_trip_attendee_added(item.item_id, attendee)
        return AttendeeOut.model_validate(attendee)

    def remove_attendee(self, actor_id: uuid.UUID, attendee_id: uuid.UUID) -> AttendeeOut:
        """Un-share a trip or item.

        Allowed for the item's creator and for the attendee removing
        themself. The creator's own record cannot be removed from a trip or a
        standalone item, only from an item inside a trip.
        """
        actor_id = coerce_uuid(actor_id, "actor_id")
        attendee = self.attendees.get(attendee_id)
        item = self._load_item(attendee.item_type, attendee.item_id)

        in_trip = item.kind is not ItemType.TRIP and item.trip_id is not None
        if attendee.user_id == item.created_by and not in_trip:
            raise PermissionDeniedError(
                f"Creator {item.created_by} cannot be removed from {item.kind.value} {item.item_id}",
                code=ErrorCode.CREATOR_NOT_REMOVABLE,
            )
        if actor_id not in (item.created_by, attendee.user_id):
            if self.resolver.resolve_effective_permission(actor_id, item) is EffectivePermission.NONE:
                raise NotFoundError(f"{item.kind.value} {item.item_id} not found", code=ErrorCode.ITEM_NOT_FOUND)
            raise PermissionDeniedError(f"User {actor_id} may not remove attendee {attendee.id}")

        removed = AttendeeOut.model_validate(attendee)
        with atomic(self._session):
            self.attendees.remove_attendee(attendee.id)
            if item.kind is ItemType.TRIP:
                self.cascade.on_trip_attendee_removed(item.item_id, attendee.user_id)
        return removed

    # ── Helpers ───────────────────────────────────────────────────────────────

    def _resolve_user(self, identifier: str) -> uuid.UUID:
        user_id = self._users.resolve(identifier)
        if user_id is None:
            raise NotFoundError(f"No user matches {identifier!r}", code=ErrorCode.USER_NOT_FOUND)
        return user_id

    def _load_item(self, item_type: ItemType | str, item_id: uuid.UUID):
        item_type = coerce_enum(item_type, ItemType, ErrorCode.INVALID_ITEM_TYPE)
        item_id = coerce_uuid(item_id, "item_id")
        item = self._items.get(item_type, item_id)
        if item is None:
            raise NotFoundError(f"{item_type.value} {item_id} not found", code=ErrorCode.ITEM_NOT_FOUND)
        return item
