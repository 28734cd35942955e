"""
Pydantic models for Trip Share.
"""

from tripshare.models.items import (
    CarRental,
    Event,
    Flight,
    Hotel,
    ItemRef,
    Transportation,
    TravelItem,
    Trip,
    parse_item,
)
from tripshare.models.permissions import (
    Action,
    AttendeeLevel,
    CompanionLevel,
    EffectivePermission,
    ItemType,
    PermissionDecision,
    PermissionFlags,
    PermissionSource,
)
from tripshare.models.sharing import (
    AddAttendeeRequest,
    AddCompanionRequest,
    AttendeeOut,
    CascadeSummary,
    CompanionOut,
    UpdateAttendeeRequest,
    UpdateCompanionRequest,
)

__all__ = [
    "Action",
    "AddAttendeeRequest",
    "AddCompanionRequest",
    "AttendeeLevel",
    "AttendeeOut",
    "CarRental",
    "CascadeSummary",
    "CompanionLevel",
    "CompanionOut",
    "EffectivePermission",
    "Event",
    "Flight",
    "Hotel",
    "ItemRef",
    "ItemType",
    "PermissionDecision",
    "PermissionFlags",
    "PermissionSource",
    "Transportation",
    "TravelItem",
    "Trip",
    "UpdateAttendeeRequest",
    "UpdateCompanionRequest",
    "parse_item",
]
