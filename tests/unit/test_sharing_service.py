"""Unit tests for the sharing service, end to end over SQLite."""

import uuid

import pytest

from tripshare.errors import ConflictError, ErrorCode, NotFoundError, PermissionDeniedError
from tripshare.models.permissions import Action, AttendeeLevel, CompanionLevel, EffectivePermission, ItemType
from tripshare.services.sharing import SharingService


@pytest.fixture
def service(session):
    return SharingService.from_session(session)


@pytest.fixture
def alice(world):
    return world.user(email="alice@example.com")


@pytest.fixture
def bob(world):
    return world.user(email="bob@example.com", phone="+15550001111")


@pytest.fixture
def carol(world):
    return world.user(email="carol@example.com")


@pytest.fixture
def trip(service, world, alice):
    trip = world.trip(alice)
    service.cascade.on_trip_created(trip.item_id, alice)
    return trip


@pytest.fixture
def flight(service, world, alice, trip):
    flight = world.item(ItemType.FLIGHT, alice, trip=trip)
    service.cascade.on_item_created(trip.item_id, ItemType.FLIGHT, flight.item_id, alice)
    return flight


# --- End to end ---


def test_trip_share_reaches_items_but_not_delete(service, alice, bob, trip, flight):
    assert service.resolver.resolve_effective_permission(alice, flight) is EffectivePermission.FULL

    shared = service.add_attendee(alice, "bob@example.com", "trip", trip.item_id, "view")

    assert shared.user_id == bob
    assert shared.added_by == alice
    assert service.resolver.resolve_effective_permission(bob, flight) is EffectivePermission.VIEW
    assert not service.resolver.check_permission(bob, flight, Action.DELETE)
    assert service.resolver.check_permission(alice, flight, Action.DELETE)


def test_trip_share_defaults_to_manage(service, alice, bob, trip, flight):
    shared = service.add_attendee(alice, str(bob), ItemType.TRIP, trip.item_id)

    assert shared.permission_level is AttendeeLevel.MANAGE
    record = service.attendees.find_attendance(bob, ItemType.FLIGHT, flight.item_id)
    assert record.permission_level == "manage"
    assert record.added_by == alice


def test_item_share_defaults_to_view_and_does_not_cascade(service, alice, bob, trip, flight):
    shared = service.add_attendee(alice, "+15550001111", ItemType.FLIGHT, flight.item_id)

    assert shared.permission_level is AttendeeLevel.VIEW
    assert service.attendees.find_attendance(bob, ItemType.TRIP, trip.item_id) is None


def test_unshare_trip_removes_item_records(service, world, alice, bob, trip, flight):
    other_trip = world.trip(alice)
    service.add_attendee(alice, "bob@example.com", ItemType.TRIP, other_trip.item_id, "view")
    shared = service.add_attendee(alice, "bob@example.com", ItemType.TRIP, trip.item_id, "view")

    removed = service.remove_attendee(alice, shared.id)

    assert removed.id == shared.id
    assert service.attendees.find_attendance(bob, ItemType.FLIGHT, flight.item_id) is None
    assert service.attendees.find_attendance(bob, ItemType.TRIP, other_trip.item_id) is not None
    assert service.resolver.resolve_effective_permission(bob, flight) is EffectivePermission.NONE


def test_update_trip_level_cascades(service, alice, bob, trip, flight):
    shared = service.add_attendee(alice, "bob@example.com", ItemType.TRIP, trip.item_id, "view")

    updated = service.update_attendee(alice, shared.id, "manage")

    assert updated.permission_level is AttendeeLevel.MANAGE
    assert service.resolver.resolve_effective_permission(bob, flight) is EffectivePermission.MANAGE


def test_list_attendees(service, alice, bob, trip):
    service.add_attendee(alice, "bob@example.com", ItemType.TRIP, trip.item_id, "view")

    listed = service.list_attendees(bob, "trip", trip.item_id)

    assert {a.user_id for a in listed} == {alice, bob}


def test_duplicate_share_conflicts(service, alice, bob, trip):
    service.add_attendee(alice, "bob@example.com", ItemType.TRIP, trip.item_id)

    with pytest.raises(ConflictError):
        service.add_attendee(alice, "bob@example.com", ItemType.TRIP, trip.item_id)


def test_unknown_user(service, alice, trip):
    with pytest.raises(NotFoundError) as exc_info:
        service.add_attendee(alice, "ghost@example.com", ItemType.TRIP, trip.item_id)
    assert exc_info.value.code == ErrorCode.USER_NOT_FOUND


def test_unknown_item(service, alice):
    with pytest.raises(NotFoundError) as exc_info:
        service.add_attendee(alice, "bob@example.com", ItemType.HOTEL, uuid.uuid4())
    assert exc_info.value.code == ErrorCode.ITEM_NOT_FOUND


# --- Concealment ---


def test_stranger_sees_not_found(service, carol, trip):
    with pytest.raises(NotFoundError):
        service.list_attendees(carol, ItemType.TRIP, trip.item_id)


def test_viewer_sees_permission_denied(service, alice, bob, carol, trip):
    service.add_attendee(alice, "bob@example.com", ItemType.TRIP, trip.item_id, "view")

    with pytest.raises(PermissionDeniedError):
        service.add_attendee(bob, "carol@example.com", ItemType.TRIP, trip.item_id)


def test_companion_manager_can_share(service, alice, bob, carol, trip):
    service.add_companion(alice, "bob@example.com", CompanionLevel.MANAGE_ALL)

    shared = service.add_attendee(bob, "carol@example.com", ItemType.TRIP, trip.item_id, "view")

    assert shared.added_by == bob


# --- Removal rules ---


def test_creator_cannot_leave_own_trip(service, alice, trip):
    record = service.attendees.find_attendance(alice, ItemType.TRIP, trip.item_id)

    with pytest.raises(PermissionDeniedError) as exc_info:
        service.remove_attendee(alice, record.id)
    assert exc_info.value.code == ErrorCode.CREATOR_NOT_REMOVABLE


def test_creator_can_leave_item_inside_trip(service, alice, flight):
    record = service.attendees.find_attendance(alice, ItemType.FLIGHT, flight.item_id)

    service.remove_attendee(alice, record.id)

    assert service.attendees.find_attendance(alice, ItemType.FLIGHT, flight.item_id) is None


def test_attendee_can_remove_themself(service, alice, bob, trip):
    shared = service.add_attendee(alice, "bob@example.com", ItemType.TRIP, trip.item_id, "manage")

    service.remove_attendee(bob, shared.id)

    assert service.attendees.find_by_id(shared.id) is None


def test_other_attendee_cannot_remove(service, alice, bob, carol, trip):
    service.add_attendee(alice, "bob@example.com", ItemType.TRIP, trip.item_id, "manage")
    shared = service.add_attendee(alice, "carol@example.com", ItemType.TRIP, trip.item_id, "view")

    with pytest.raises(PermissionDeniedError):
        service.remove_attendee(bob, shared.id)


def test_stranger_removal_is_not_found(service, world, alice, bob, trip):
    shared = service.add_attendee(alice, "bob@example.com", ItemType.TRIP, trip.item_id, "view")
    stranger = world.user()

    with pytest.raises(NotFoundError):
        service.remove_attendee(stranger, shared.id)


# --- Companions ---


def test_add_companion_reports_reverse_level(service, alice, bob):
    edge = service.add_companion(alice, "bob@example.com", "view")

    assert edge.companion_user_id == bob
    assert edge.permission_level is CompanionLevel.VIEW
    assert edge.reverse_permission_level is CompanionLevel.NONE


def test_list_companions_includes_reverse_levels(service, alice, bob, carol):
    service.add_companion(alice, "bob@example.com", "view")
    service.add_companion(carol, "alice@example.com", "manage_all")
    service.update_companion(alice, carol, "view")

    listed = {c.companion_user_id: c.reverse_permission_level for c in service.list_companions(alice)}

    assert listed == {bob: CompanionLevel.NONE, carol: CompanionLevel.MANAGE_ALL}


def test_list_received(service, alice, bob):
    service.add_companion(alice, "bob@example.com", "manage_all")

    received = service.list_received(bob)

    assert [(c.user_id, c.permission_level) for c in received] == [(alice, CompanionLevel.MANAGE_ALL)]


def test_remove_companion_keeps_their_grant(service, alice, bob, trip):
    service.add_companion(alice, "bob@example.com", "view")
    service.update_companion(bob, alice, "manage_all")

    service.remove_companion(alice, bob)

    assert service.companions.get_outbound_level(alice, bob) is CompanionLevel.NONE
    assert service.companions.get_outbound_level(bob, alice) is CompanionLevel.MANAGE_ALL
    assert service.resolver.resolve_effective_permission(bob, trip) is EffectivePermission.NONE
