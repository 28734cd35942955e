"""Permission resolver — one effective permission per (user, item).

Rules, first match wins:

1. The creator gets manage+delete. This is the only route to delete.
2. The current owner, when not the creator, gets manage.
3. An attendee record on exactly this trip or item gets its own level.
   An explicit share always beats the coarser companion grant.
4. Otherwise the owner's outbound companion edge towards the user:
   manage_all -> manage, view -> view, none -> deny.
5. Deny.

Users with no permission at all are told the item does not exist, so a
probing user cannot learn which ids are real.
"""

import logging
import uuid

from tripshare.errors import ErrorCode, NotFoundError, PermissionDeniedError
from tripshare.models.permissions import (
    ATTENDEE_TO_EFFECTIVE,
    COMPANION_TO_EFFECTIVE,
    Action,
    AttendeeLevel,
    EffectivePermission,
    PermissionDecision,
    PermissionFlags,
    PermissionSource,
)
from tripshare.services.attendees import AttendeeStore
from tripshare.services.companions import CompanionStore
from tripshare.services.validation import coerce_enum

logger = logging.getLogger(__name__)

_DENY = PermissionDecision(permission=EffectivePermission.NONE, source=PermissionSource.NONE)


class PermissionResolver:
    def __init__(self, attendees: AttendeeStore, companions: CompanionStore) -> None:
        self._attendees = attendees
        self._companions = companions

    def resolve(self, user_id: uuid.UUID, item) -> PermissionDecision:
        if user_id == item.created_by:
            return PermissionDecision(permission=EffectivePermission.FULL, source=PermissionSource.CREATOR)

        if item.user_id is not None and user_id == item.user_id:
            return PermissionDecision(permission=EffectivePermission.MANAGE, source=PermissionSource.OWNER)

        attendance = self._attendees.find_attendance(user_id, item.kind, item.item_id)
        if attendance is not None:
            level = AttendeeLevel(attendance.permission_level)
            return PermissionDecision(permission=ATTENDEE_TO_EFFECTIVE[level], source=PermissionSource.ATTENDEE)

        owner_id = item.owner_user_id
        if owner_id != user_id:
            granted = COMPANION_TO_EFFECTIVE[self._companions.get_outbound_level(owner_id, user_id)]
            if granted is not EffectivePermission.NONE:
                return PermissionDecision(permission=granted, source=PermissionSource.COMPANION)

        return _DENY

    def resolve_effective_permission(self, user_id: uuid.UUID, item) -> EffectivePermission:
        return self.resolve(user_id, item).permission

    def check_permission(self, user_id: uuid.UUID | None, item, required: Action | str) -> bool:
        """Boolean guard for collaborators. Fails closed on anything unexpected."""
        if user_id is None or item is None:
            return False
        try:
            action = Action(required)
        except ValueError:
            logger.warning("Unknown action %r requested on %s:%s; denying", required, item.kind.value, item.item_id)
            return False

        try:
            allowed = self.resolve(user_id, item).allows(action)
        except Exception:
            logger.exception("Permission lookup failed for %s on %s:%s; denying", user_id, item.kind.value, item.item_id)
            return False

        if not allowed:
            logger.warning("Denied %s on %s:%s for %s", action.value, item.kind.value, item.item_id, user_id)
        return allowed

    def verify_access(self, user_id: uuid.UUID, item, required: Action | str) -> PermissionDecision:
        """Raise unless ``user_id`` may perform ``required`` on ``item``.

        NotFoundError when the user may not even see the item, otherwise
        PermissionDeniedError when the user sees it but lacks the action.
        """
        action = coerce_enum(required, Action)
        if item is None:
            raise NotFoundError("Item not found", code=ErrorCode.ITEM_NOT_FOUND)

        decision = self.resolve(user_id, item)
        if decision.permission is EffectivePermission.NONE:
            raise NotFoundError(f"{item.kind.value} {item.item_id} not found", code=ErrorCode.ITEM_NOT_FOUND)
        if not decision.allows(action):
            raise PermissionDeniedError(
                f"User {user_id} has {decision.permission.value} on {item.kind.value} {item.item_id}, "
                f"needs {action.value}"
            )
        return decision

    def permission_flags(self, user_id: uuid.UUID, item) -> PermissionFlags:
        permission = self.resolve_effective_permission(user_id, item)
        is_owner = user_id == item.owner_user_id
        can_view = permission.allows(Action.VIEW)
        return PermissionFlags(
            can_view=can_view,
            can_edit=permission.allows(Action.MANAGE),
            can_delete=permission.allows(Action.DELETE),
            is_owner=is_owner,
            is_shared=can_view and not is_owner,
        )
