from __future__ import annotations

from types import SimpleNamespace

import pytest

from src.desk_booking.desk_booking.container import assemble_container
from src.desk_booking.desk_booking.core.enums import Role
from tests.fakes import (
    InMemoryBookings,
    InMemoryOffices,
    InMemoryReservations,
    InMemoryRooms,
    InMemorySessions,
    InMemoryUsers,
)


@pytest.fixture
def repos():
    users = InMemoryUsers()
    offices = InMemoryOffices()
    rooms = InMemoryRooms(users)
    reservations = InMemoryReservations()
    rooms.reservations = reservations
    return SimpleNamespace(
        users=users,
        sessions=InMemorySessions(),
        rooms=rooms,
        offices=offices,
        bookings=InMemoryBookings(offices),
        reservations=reservations,
    )


@pytest.fixture
def people(repos):
    """super_admin, admin, two members and an inactive account."""
    return SimpleNamespace(
        root=repos.users.add("root", Role.SUPER_ADMIN),
        admin=repos.users.add("alice", Role.ADMIN),
        member=repos.users.add("bob", Role.MEMBER),
        other=repos.users.add("carol", Role.MEMBER),
        inactive=repos.users.add("dave", Role.MEMBER, is_active=False),
    )


@pytest.fixture
def container(repos):
    return assemble_container(
        users_repo=repos.users,
        sessions_repo=repos.sessions,
        rooms_repo=repos.rooms,
        offices_repo=repos.offices,
        bookings_repo=repos.bookings,
        reservations_repo=repos.reservations,
    )
