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
from src.desk_booking.desk_booking.reservations.conflicts import one_year_after
from src.desk_booking.desk_booking.reservations.model import FixedAssignment
from src.desk_booking.desk_booking.reservations.operations import (
    CreateFixedAssignment,
    CreateReservation,
    DeleteFixedAssignment,
    ListFixedAssignments,
    ListMyReservations,
)
from src.desk_booking.desk_booking.reservations.service import ReservationService
from tests.fakes import CREATED, ctx_for

NOW = datetime(2026, 3, 2, 8, 0, 0)
MON, TUE, WED, FRI = date(2026, 3, 2), date(2026, 3, 3), date(2026, 3, 4), date(2026, 3, 6)


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


def assign(room, cell, user, start, end):
    return CreateFixedAssignment(room_id=room, cell_id=cell, assigned_to=user.user_id, date_start=start, date_end=end)


def reserve(room, cell, start, end):
    return CreateReservation(
        room_id=room,
        cell_id=cell,
        date_start=start,
        date_end=end,
        reservation_type=ReservationType.DAY,
        time_segment=TimeSegment.FULL,
    )


def test_assignment_expands_into_daily_reservations(service, people, layout):
    room, desk, _ = layout
    result = service.dispatch(ctx_for(people.admin), assign(room, desk, people.member, MON, WED))

    assert result["assigned_to"] == people.member.user_id
    assert result["created_by"] == people.admin.user_id
    days = result["reservations"]
    assert [r["date_start"] for r in days] == ["2026-03-02", "2026-03-03", "2026-03-04"]
    assert all(r["date_start"] == r["date_end"] for r in days)
    assert {(r["status"], r["time_segment"], r["user_id"]) for r in days} == {
        ("approved", "FULL", people.member.user_id)
    }
    assert {r["assignment_id"] for r in days} == {result["id"]}


def test_only_room_admins_assign_desks(service, repos, people, layout):
    room, desk, _ = layout

    with pytest.raises(AuthorizationError, match="admin access"):
        service.dispatch(ctx_for(people.member), assign(room, desk, people.other, MON, TUE))

    lead = repos.users.add("frank", Role.MEMBER)
    repos.rooms.add_grant(room_id=room, user_id=lead.user_id, role=RoomRole.ADMIN)
    assert service.dispatch(ctx_for(lead), assign(room, desk, people.other, MON, TUE))["room_id"] == room


def test_assignment_period_is_capped_at_one_year(service, people, layout):
    room, desk, _ = layout

    with pytest.raises(ValidationError, match="1 year"):
        service.dispatch(ctx_for(people.admin), assign(room, desk, people.member, MON, date(2027, 3, 3)))
    with pytest.raises(ValidationError, match="End date"):
        service.dispatch(ctx_for(people.admin), assign(room, desk, people.member, TUE, MON))

    assert one_year_after(MON) == date(2027, 3, 2)
    assert one_year_after(date(2028, 2, 29)) == date(2029, 2, 28)


def test_assignment_needs_cell_and_active_assignee(service, people, layout):
    room, desk, _ = layout

    with pytest.raises(NotFoundError, match="Cell"):
        service.dispatch(ctx_for(people.admin), assign(room, 999, people.member, MON, TUE))
    with pytest.raises(NotFoundError, match="User"):
        service.dispatch(ctx_for(people.admin), assign(room, desk, people.inactive, MON, TUE))


def test_assignee_with_reservations_is_rejected(service, people, layout):
    room, desk, desk2 = layout
    service.dispatch(ctx_for(people.member), reserve(room, desk2, TUE, TUE))

    with pytest.raises(ConflictError, match="already has reservations"):
        service.dispatch(ctx_for(people.admin), assign(room, desk, people.member, MON, WED))


def test_assignment_needs_a_free_desk(service, people, layout):
    room, desk, _ = layout
    service.dispatch(ctx_for(people.other), reserve(room, desk, WED, WED))

    with pytest.raises(ConflictError, match="already reserved"):
        service.dispatch(ctx_for(people.admin), assign(room, desk, people.member, MON, FRI))


def test_reserving_blocked_by_assignments(service, repos, people, layout):
    room, desk, desk2 = layout
    # Stored without its daily reservations so only the assignment rules apply.
    repos.reservations.add_assignment(
        FixedAssignment(
            assignment_id=7,
            room_id=room,
            cell_id=desk,
            assigned_to=people.member.user_id,
            date_start=MON,
            date_end=FRI,
            created_by=people.admin.user_id,
            created_at=CREATED,
        )
    )

    with pytest.raises(ConflictError, match="desk assigned"):
        service.dispatch(ctx_for(people.member), reserve(room, desk2, TUE, TUE))
    with pytest.raises(ConflictError, match="fixed assignment"):
        service.dispatch(ctx_for(people.other), reserve(room, desk, WED, WED))

    later = date(2026, 3, 9)
    assert service.dispatch(ctx_for(people.other), reserve(room, desk, later, later))["status"] == "approved"


def test_my_reservations_list_assignment_once(service, people, layout):
    room, desk, desk2 = layout
    service.dispatch(ctx_for(people.member), reserve(room, desk2, date(2026, 3, 10), date(2026, 3, 10)))
    created = service.dispatch(ctx_for(people.admin), assign(room, desk, people.member, MON, WED))

    mine = service.dispatch(ctx_for(people.member), ListMyReservations())

    assert [r["date_start"] for r in mine] == ["2026-03-10", "2026-03-02"]
    merged = mine[1]
    assert merged["id"] == created["id"]
    assert merged["type"] == "fixed_assignment"
    assert merged["status"] == "approved"
    assert merged["time_segment"] == "FULL"
    assert merged["user_id"] == people.member.user_id


def test_list_fixed_assignments_needs_room_access(service, repos, people, layout):
    room, desk, _ = layout
    service.dispatch(ctx_for(people.admin), assign(room, desk, people.member, MON, TUE))

    listed = service.dispatch(ctx_for(people.other), ListFixedAssignments(room))
    assert [a["assigned_user"]["id"] for a in listed] == [people.member.user_id]

    outsider = repos.users.add("erin", Role.MEMBER)
    with pytest.raises(AuthorizationError):
        service.dispatch(ctx_for(outsider), ListFixedAssignments(room))


def test_delete_assignment_frees_the_desk(service, repos, people, layout):
    room, desk, _ = layout
    created = service.dispatch(ctx_for(people.admin), assign(room, desk, people.member, MON, WED))

    with pytest.raises(AuthorizationError, match="assigned to you"):
        service.dispatch(ctx_for(people.other), DeleteFixedAssignment(created["id"]))

    assert service.dispatch(ctx_for(people.member), DeleteFixedAssignment(created["id"]))["id"] == created["id"]
    assert repos.reservations.get_assignment(created["id"]) is None
    assert {r.status for r in repos.reservations.list_by_assignment(created["id"])} == {ReservationStatus.CANCELLED}

    assert service.dispatch(ctx_for(people.other), reserve(room, desk, TUE, TUE))["status"] == "approved"
    with pytest.raises(NotFoundError, match="Fixed assignment"):
        service.dispatch(ctx_for(people.admin), DeleteFixedAssignment(created["id"]))


def test_room_admin_deletes_any_assignment_in_room(service, people, layout):
    room, desk, _ = layout
    created = service.dispatch(ctx_for(people.admin), assign(room, desk, people.member, MON, MON))

    assert service.dispatch(ctx_for(people.admin), DeleteFixedAssignment(created["id"]))["assigned_to"] == people.member.user_id
