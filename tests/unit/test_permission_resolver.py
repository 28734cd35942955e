"""Unit tests for the permission resolver."""

import uuid
from unittest.mock import patch

import pytest

from tripshare.errors import ErrorCode, NotFoundError, PermissionDeniedError, ValidationError
from tripshare.models.items import Hotel, Trip
from tripshare.models.permissions import (
    Action,
    AttendeeLevel,
    CompanionLevel,
    EffectivePermission,
    ItemType,
    PermissionSource,
)
from tripshare.services.attendees import AttendeeStore
from tripshare.services.companions import CompanionStore
from tripshare.services.permissions import PermissionResolver

ALICE = uuid.uuid4()
BOB = uuid.uuid4()
CAROL = uuid.uuid4()


@pytest.fixture
def attendees(session):
    return AttendeeStore(session)


@pytest.fixture
def companions(session):
    return CompanionStore(session)


@pytest.fixture
def resolver(attendees, companions):
    return PermissionResolver(attendees, companions)


@pytest.fixture
def trip():
    return Trip(item_id=uuid.uuid4(), created_by=ALICE)


# --- resolve ---


def test_creator_has_full_access(resolver, trip):
    decision = resolver.resolve(ALICE, trip)
    assert decision.permission is EffectivePermission.FULL
    assert decision.source is PermissionSource.CREATOR


def test_creator_wins_over_contradictory_records(resolver, attendees, companions, trip):
    attendees.add_attendee(ALICE, ItemType.TRIP, trip.item_id, AttendeeLevel.VIEW, BOB)
    companions.add_companion(ALICE, BOB, CompanionLevel.NONE)

    assert resolver.resolve_effective_permission(ALICE, trip) is EffectivePermission.FULL


def test_stranger_is_denied(resolver, trip):
    decision = resolver.resolve(BOB, trip)
    assert decision.permission is EffectivePermission.NONE
    assert decision.source is PermissionSource.NONE


@pytest.mark.parametrize(
    "level, expected",
    [
        (CompanionLevel.NONE, EffectivePermission.NONE),
        (CompanionLevel.VIEW, EffectivePermission.VIEW),
        (CompanionLevel.MANAGE_ALL, EffectivePermission.MANAGE),
    ],
)
def test_companion_fallback(resolver, companions, trip, level, expected):
    companions.add_companion(ALICE, BOB, level)

    assert resolver.resolve_effective_permission(BOB, trip) is expected


def test_reverse_edge_grants_nothing(resolver, companions, trip):
    # Bob trusts Alice; that says nothing about Alice's trip.
    companions.add_companion(BOB, ALICE, CompanionLevel.MANAGE_ALL)

    assert resolver.resolve_effective_permission(BOB, trip) is EffectivePermission.NONE


def test_attendee_overrides_companion_both_ways(resolver, attendees, companions, trip):
    companions.add_companion(ALICE, BOB, CompanionLevel.MANAGE_ALL)
    record = attendees.add_attendee(BOB, ItemType.TRIP, trip.item_id, AttendeeLevel.VIEW, ALICE)

    decision = resolver.resolve(BOB, trip)
    assert decision.permission is EffectivePermission.VIEW
    assert decision.source is PermissionSource.ATTENDEE

    attendees.remove_attendee(record.id)
    assert resolver.resolve_effective_permission(BOB, trip) is EffectivePermission.MANAGE


def test_attendee_upgrades_companion_view(resolver, attendees, companions, trip):
    companions.add_companion(ALICE, BOB, CompanionLevel.VIEW)
    attendees.add_attendee(BOB, ItemType.TRIP, trip.item_id, AttendeeLevel.MANAGE, ALICE)

    assert resolver.resolve_effective_permission(BOB, trip) is EffectivePermission.MANAGE


def test_attendance_is_per_item(resolver, attendees, trip):
    hotel = Hotel(item_id=uuid.uuid4(), created_by=ALICE, trip_id=trip.item_id)
    attendees.add_attendee(BOB, ItemType.TRIP, trip.item_id, AttendeeLevel.MANAGE, ALICE)

    assert resolver.resolve_effective_permission(BOB, hotel) is EffectivePermission.NONE


def test_owner_other_than_creator_can_manage(resolver):
    hotel = Hotel(item_id=uuid.uuid4(), created_by=ALICE, user_id=BOB)

    decision = resolver.resolve(BOB, hotel)
    assert decision.permission is EffectivePermission.MANAGE
    assert decision.source is PermissionSource.OWNER


def test_companion_grant_follows_owner(resolver, companions):
    hotel = Hotel(item_id=uuid.uuid4(), created_by=ALICE, user_id=BOB)
    companions.add_companion(BOB, CAROL, CompanionLevel.VIEW)

    assert resolver.resolve_effective_permission(CAROL, hotel) is EffectivePermission.VIEW


# --- check_permission ---


def test_delete_reserved_for_creator(resolver, attendees, companions, trip):
    companions.add_companion(ALICE, BOB, CompanionLevel.MANAGE_ALL)
    attendees.add_attendee(CAROL, ItemType.TRIP, trip.item_id, AttendeeLevel.MANAGE, ALICE)

    assert resolver.check_permission(ALICE, trip, "delete")
    assert not resolver.check_permission(BOB, trip, Action.DELETE)
    assert not resolver.check_permission(CAROL, trip, Action.DELETE)
    assert resolver.check_permission(CAROL, trip, Action.MANAGE)


def test_unknown_action_fails_closed(resolver, trip):
    assert not resolver.check_permission(ALICE, trip, "archive")


def test_missing_inputs_fail_closed(resolver, trip):
    assert not resolver.check_permission(None, trip, Action.VIEW)
    assert not resolver.check_permission(ALICE, None, Action.VIEW)


def test_lookup_error_fails_closed(resolver, attendees, trip):
    with patch.object(attendees, "find_attendance", side_effect=RuntimeError("db down")):
        assert not resolver.check_permission(BOB, trip, Action.VIEW)


# --- verify_access ---


def test_verify_access_hides_item_from_strangers(resolver, trip):
    with pytest.raises(NotFoundError) as exc_info:
        resolver.verify_access(BOB, trip, Action.VIEW)
    assert exc_info.value.code == ErrorCode.ITEM_NOT_FOUND


def test_verify_access_denies_insufficient_level(resolver, companions, trip):
    companions.add_companion(ALICE, BOB, CompanionLevel.VIEW)

    assert resolver.verify_access(BOB, trip, Action.VIEW).permission is EffectivePermission.VIEW
    with pytest.raises(PermissionDeniedError):
        resolver.verify_access(BOB, trip, Action.MANAGE)


def test_verify_access_missing_item(resolver):
    with pytest.raises(NotFoundError):
        resolver.verify_access(ALICE, None, Action.VIEW)


def test_verify_access_unknown_action(resolver, trip):
    with pytest.raises(ValidationError):
        resolver.verify_access(ALICE, trip, "archive")


# --- permission_flags ---


def test_flags_for_creator(resolver, trip):
    flags = resolver.permission_flags(ALICE, trip)
    assert flags.can_view and flags.can_edit and flags.can_delete
    assert flags.is_owner
    assert not flags.is_shared


def test_flags_for_shared_viewer(resolver, attendees, trip):
    attendees.add_attendee(BOB, ItemType.TRIP, trip.item_id, AttendeeLevel.VIEW, ALICE)

    flags = resolver.permission_flags(BOB, trip)
    assert flags.can_view
    assert not flags.can_edit
    assert not flags.can_delete
    assert not flags.is_owner
    assert flags.is_shared


def test_flags_for_stranger(resolver, trip):
    flags = resolver.permission_flags(CAROL, trip)
    assert not flags.can_view
    assert not flags.is_shared
