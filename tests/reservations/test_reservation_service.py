from __future__ import annotations

from datetime import date, datetime

import pytest

from src.desk_booking.desk_booking.core.enums import (
    CellType,
    ReservationStatus,
    ReservationType,
    Role,
    RoomRole,
    TimeSegment,
)
from src.desk_booking.desk_booking.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from src.desk_booking.desk_booking.reservations.model import Reservation
from src.desk_booking.desk_booking.reservations.operations import (
    ApproveReservation,
    CancelReservation,
    CheckAvailability,
    CreateReservation,
    ListMyReservations,
    ListPendingApprovals,
    ListRoomReservations,
    RejectReservation,
)
from src.desk_booking.desk_booking.reservations.service import ReservationService
from tests.fakes import ctx_for

NOW = datetime(2026, 3, 2, 8, 0, 0)
MON, TUE, WED = date(2026, 3, 2), date(2026, 3, 3), date(2026, 3, 4)


@pytest.fixture
def service(repos, container):
    return ReservationService(repos.reservations, repos.rooms, repos.users, container.policy, clock=lambda: NOW)


@pytest.fixture
def layout(repos, people):
    room = repos.rooms.create_room(name="Lab", description=None, grid_width=5, grid_height=5, created_by=people.admin.user_id)
    repos.rooms.add_grant(room_id=room, user_id=people.member.user_id, role=RoomRole.MEMBER)
    repos.rooms.add_grant(room_id=room, user_id=people.other.user_id, role=RoomRole.MEMBER)
    desk = repos.rooms.create_cell(room_id=room, x=0, y=0, cell_type=CellType.DESK, label="D1", default_owner_id=None)
    desk2 = repos.rooms.create_cell(room_id=room, x=1, y=0, cell_type=CellType.DESK, label="D2", default_owner_id=None)
    return room, desk, desk2


def reserve(room, cell, start, end, segment=TimeSegment.FULL):
    return CreateReservation(
        room_id=room,
        cell_id=cell,
        date_start=start,
        date_end=end,
        reservation_type=ReservationType.DAY,
        time_segment=segment,
    )


def pending(reservation_id, room, cell, user_id, day=WED):
    return Reservation(
        reservation_id=reservation_id,
        room_id=room,
        cell_id=cell,
        user_id=user_id,
        reservation_type=ReservationType.DAY,
        status=ReservationStatus.PENDING,
        date_start=day,
        date_end=day,
    )


def test_create_is_approved_by_the_caller(service, people, layout):
    room, desk, _ = layout
    result = service.dispatch(ctx_for(people.member), reserve(room, desk, MON, TUE))

    assert result["status"] == "approved"
    assert result["approved_by"] == people.member.user_id
    assert result["approved_at"] == NOW
    assert result["date_start"] == "2026-03-02"


def test_create_checks_dates_access_and_cell(service, repos, people, layout):
    room, desk, _ = layout

    with pytest.raises(ValidationError, match="End date"):
        service.dispatch(ctx_for(people.member), reserve(room, desk, TUE, MON))
    outsider = repos.users.add("erin", Role.MEMBER)
    with pytest.raises(AuthorizationError):
        service.dispatch(ctx_for(outsider), reserve(room, desk, MON, MON))
    with pytest.raises(NotFoundError):
        service.dispatch(ctx_for(people.member), reserve(room, 999, MON, MON))


def test_global_admin_may_reserve_without_grant(service, people, layout):
    room, desk, _ = layout
    assert service.dispatch(ctx_for(people.root), reserve(room, desk, MON, MON))["user_id"] == people.root.user_id


def test_one_desk_per_person_per_period(service, people, layout):
    room, desk, desk2 = layout
    service.dispatch(ctx_for(people.member), reserve(room, desk, MON, TUE))

    with pytest.raises(ConflictError, match="more than one desk"):
        service.dispatch(ctx_for(people.member), reserve(room, desk2, TUE, WED))


@pytest.mark.parametrize(
    "first, second, clash",
    [
        (TimeSegment.AM, TimeSegment.PM, False),
        (TimeSegment.AM, TimeSegment.AM, True),
        (TimeSegment.FULL, TimeSegment.PM, True),
        (TimeSegment.PM, TimeSegment.FULL, True),
    ],
)
def test_half_day_segments(service, people, layout, first, second, clash):
    room, desk, _ = layout
    service.dispatch(ctx_for(people.member), reserve(room, desk, MON, MON, first))

    op = reserve(room, desk, MON, MON, second)
    if clash:
        with pytest.raises(ConflictError, match="already reserved"):
            service.dispatch(ctx_for(people.other), op)
    else:
        assert service.dispatch(ctx_for(people.other), op)["time_segment"] == second.value


def test_approve_and_reject_pending(service, repos, people, layout):
    room, desk, desk2 = layout
    repos.reservations.add(pending(50, room, desk, people.member.user_id))
    repos.reservations.add(pending(51, room, desk2, people.other.user_id))

    with pytest.raises(AuthorizationError, match="Only room admins can approve"):
        service.dispatch(ctx_for(people.member), ApproveReservation(50))

    approved = service.dispatch(ctx_for(people.admin), ApproveReservation(50))
    assert approved["status"] == "approved"
    assert approved["approved_by"] == people.admin.user_id

    with pytest.raises(ValidationError, match="Only pending reservations can be approved"):
        service.dispatch(ctx_for(people.admin), ApproveReservation(50))

    assert service.dispatch(ctx_for(people.admin), RejectReservation(51))["status"] == "rejected"
    with pytest.raises(NotFoundError):
        service.dispatch(ctx_for(people.admin), RejectReservation(999))


def test_pending_approvals_scope(service, repos, people, layout):
    room, desk, _ = layout
    other_room = repos.rooms.create_room(name="Far", description=None, grid_width=2, grid_height=2, created_by=people.root.user_id)
    repos.reservations.add(pending(60, room, desk, people.member.user_id))
    repos.reservations.add(pending(61, other_room, desk, people.member.user_id))

    everything = service.dispatch(ctx_for(people.admin), ListPendingApprovals())
    assert {r["id"] for r in everything} == {60, 61}

    lead = repos.users.add("frank", Role.MEMBER)
    repos.rooms.add_grant(room_id=room, user_id=lead.user_id, role=RoomRole.ADMIN)
    scoped = service.dispatch(ctx_for(lead), ListPendingApprovals())
    assert [r["id"] for r in scoped] == [60]

    assert service.dispatch(ctx_for(people.member), ListPendingApprovals()) == []


def test_cancel_rules(service, people, layout):
    room, desk, _ = layout
    mine = service.dispatch(ctx_for(people.member), reserve(room, desk, MON, MON))

    with pytest.raises(AuthorizationError, match="your own reservations"):
        service.dispatch(ctx_for(people.other), CancelReservation(mine["id"]))

    assert service.dispatch(ctx_for(people.admin), CancelReservation(mine["id"]))["status"] == "cancelled"
    with pytest.raises(ValidationError, match="already cancelled"):
        service.dispatch(ctx_for(people.member), CancelReservation(mine["id"]))


def test_cancelled_reservation_frees_the_desk(service, people, layout):
    room, desk, _ = layout
    mine = service.dispatch(ctx_for(people.member), reserve(room, desk, MON, MON))
    service.dispatch(ctx_for(people.member), CancelReservation(mine["id"]))

    assert service.dispatch(ctx_for(people.other), reserve(room, desk, MON, MON))["status"] == "approved"


def test_listings_and_availability(service, people, layout):
    room, desk, _ = layout
    service.dispatch(ctx_for(people.member), reserve(room, desk, MON, MON, TimeSegment.AM))
    service.dispatch(ctx_for(people.member), reserve(room, desk, WED, WED))

    mine = service.dispatch(ctx_for(people.member), ListMyReservations())
    assert [r["date_start"] for r in mine] == ["2026-03-04", "2026-03-02"]

    assert len(service.dispatch(ctx_for(people.other), ListRoomReservations(room))) == 2
    with pytest.raises(AuthorizationError):
        service.dispatch(ctx_for(people.other), ListRoomReservations(999))

    busy = service.dispatch(ctx_for(people.other), CheckAvailability(desk, MON, TUE))
    assert busy["available"] is False
    assert busy["conflicts"][0]["time_segment"] == "AM"
    assert service.dispatch(ctx_for(people.other), CheckAvailability(desk, TUE, TUE)) == {"available": True, "conflicts": []}
