"""Permission vocabularies for companions, attendees and resolved access."""

from enum import Enum

from pydantic import BaseModel


class ItemType(str, Enum):
    """Closed set of item kinds. Only TRIP owns other kinds."""

    TRIP = "trip"
    FLIGHT = "flight"
    HOTEL = "hotel"
    EVENT = "event"
    TRANSPORTATION = "transportation"
    CAR_RENTAL = "car_rental"


CHILD_ITEM_TYPES: tuple[ItemType, ...] = tuple(t for t in ItemType if t is not ItemType.TRIP)


class CompanionLevel(str, Enum):
    """Global, cross-trip grant from one user to another."""

    NONE = "none"
    VIEW = "view"
    MANAGE_ALL = "manage_all"


class AttendeeLevel(str, Enum):
    """Grant scoped to a single trip or item. MANAGE never implies delete."""

    VIEW = "view"
    MANAGE = "manage"


class Action(str, Enum):
    VIEW = "view"
    MANAGE = "manage"
    DELETE = "delete"


class EffectivePermission(str, Enum):
    """Resolved access for a (user, item) pair, ordered weakest to strongest."""

    NONE = "none"
    VIEW = "view"
    MANAGE = "manage"
    FULL = "manage+delete"

    @property
    def rank(self) -> int:
        return _RANKS[self]

    def allows(self, action: Action) -> bool:
        return self.rank >= _REQUIRED_RANK[action]


_RANKS = {
    EffectivePermission.NONE: 0,
    EffectivePermission.VIEW: 1,
    EffectivePermission.MANAGE: 2,
    EffectivePermission.FULL: 3,
}

_REQUIRED_RANK = {
    Action.VIEW: 1,
    Action.MANAGE: 2,
    Action.DELETE: 3,
}


class PermissionSource(str, Enum):
    """Which rule produced an effective permission."""

    CREATOR = "creator"
    OWNER = "owner"
    ATTENDEE = "attendee"
    COMPANION = "companion"
    NONE = "none"


class PermissionDecision(BaseModel):
    permission: EffectivePermission
    source: PermissionSource

    def allows(self, action: Action) -> bool:
        return self.permission.allows(action)


class PermissionFlags(BaseModel):
    can_view: bool
    can_edit: bool
    can_delete: bool
    is_owner: bool
    is_shared: bool


COMPANION_TO_EFFECTIVE: dict[CompanionLevel, EffectivePermission] = {
    CompanionLevel.NONE: EffectivePermission.NONE,
    CompanionLevel.VIEW: EffectivePermission.VIEW,
    CompanionLevel.MANAGE_ALL: EffectivePermission.MANAGE,
}

ATTENDEE_TO_EFFECTIVE: dict[AttendeeLevel, EffectivePermission] = {
    AttendeeLevel.VIEW: EffectivePermission.VIEW,
    AttendeeLevel.MANAGE: EffectivePermission.MANAGE,
}


def default_attendee_level(item_type: ItemType) -> AttendeeLevel:
    """Trips are shared for management by default, single items for viewing."""
    return AttendeeLevel.MANAGE if item_type is ItemType.TRIP else AttendeeLevel.VIEW
