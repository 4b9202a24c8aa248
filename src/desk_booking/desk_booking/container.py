from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .access.policy import AccessPolicy
from .bookings.mysql_booking_repository import MySQLOfficeBookingRepository
from .bookings.repository import OfficeBookingRepository
from .bookings.service import OfficeBookingService
from .core.constants import DEFAULT_SESSION_HOURS
from .database.connection import DBConfig, DatabaseConnection
from .offices.mysql_office_repository import MySQLOfficeRepository
from .offices.repository import OfficeRepository
from .offices.service import OfficeService
from .reservations.mysql_reservation_repository import MySQLReservationRepository
from .reservations.repository import ReservationRepository
from .reservations.service import ReservationService
from .rooms.mysql_room_repository import MySQLRoomRepository
from .rooms.repository import RoomRepository
from .rooms.service import RoomService
from .sessions.mysql_session_repository import MySQLSessionRepository
from .sessions.repository import SessionRepository
from .sessions.service import AuthService, SessionResolver
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import UserService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    sessions_repo: SessionRepository
    rooms_repo: RoomRepository
    offices_repo: OfficeRepository
    bookings_repo: OfficeBookingRepository
    reservations_repo: ReservationRepository

    policy: AccessPolicy
    session_resolver: SessionResolver
    auth_service: AuthService
    user_service: UserService
    room_service: RoomService
    office_service: OfficeService
    booking_service: OfficeBookingService
    reservation_service: ReservationService


def assemble_container(
    *,
    users_repo: UserRepository,
    sessions_repo: SessionRepository,
    rooms_repo: RoomRepository,
    offices_repo: OfficeRepository,
    bookings_repo: OfficeBookingRepository,
    reservations_repo: ReservationRepository,
    session_hours: int = DEFAULT_SESSION_HOURS,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services onto already built repositories (MySQL or in-memory)."""
    policy = AccessPolicy(rooms_repo)

    return Container(
        conn=conn,
        users_repo=users_repo,
        sessions_repo=sessions_repo,
        rooms_repo=rooms_repo,
        offices_repo=offices_repo,
        bookings_repo=bookings_repo,
        reservations_repo=reservations_repo,
        policy=policy,
        session_resolver=SessionResolver(sessions_repo, users_repo),
        auth_service=AuthService(users_repo, sessions_repo, session_hours=session_hours),
        user_service=UserService(users_repo, policy),
        room_service=RoomService(rooms_repo, users_repo, policy),
        office_service=OfficeService(offices_repo, policy),
        booking_service=OfficeBookingService(bookings_repo, offices_repo, policy),
        reservation_service=ReservationService(reservations_repo, rooms_repo, users_repo, policy),
    )


def build_container(*, db_config: dict, session_hours: int = DEFAULT_SESSION_HOURS) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return assemble_container(
        users_repo=MySQLUserRepository(conn),
        sessions_repo=MySQLSessionRepository(conn),
        rooms_repo=MySQLRoomRepository(conn),
        offices_repo=MySQLOfficeRepository(conn),
        bookings_repo=MySQLOfficeBookingRepository(conn),
        reservations_repo=MySQLReservationRepository(conn),
        session_hours=session_hours,
        conn=conn,
    )
