"""In-memory repositories mirroring the MySQL ones, for service and API tests."""
from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Optional

from werkzeug.security import generate_password_hash

from src.desk_booking.desk_booking.bookings.model import OfficeBooking
from src.desk_booking.desk_booking.core.enums import (
    CellType,
    ReservationStatus,
    ReservationType,
    Role,
    RoomRole,
    TimeSegment,
)
from src.desk_booking.desk_booking.offices.model import Office
from src.desk_booking.desk_booking.reservations.conflicts import dates_overlap, each_day, segments_clash
from src.desk_booking.desk_booking.reservations.model import FixedAssignment, Reservation
from src.desk_booking.desk_booking.rooms.model import Room, RoomAccessGrant, RoomCell, RoomWall
from src.desk_booking.desk_booking.sessions.model import RequestContext, Session
from src.desk_booking.desk_booking.users.model import User

CREATED = datetime(2026, 3, 1, 9, 0, 0)


class InMemoryUsers:
    def __init__(self):
        self._users: dict[int, User] = {}
        self._next_id = 1

    def add(self, username: str, role: Role, *, password: str = "secret1", is_active: bool = True) -> User:
        user_id = self.create_user(
            username=username,
            full_name=username.title(),
            password_hash=generate_password_hash(password),
            role=role,
            is_active=is_active,
        )
        return self._users[user_id]

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self._users.get(int(user_id))

    def get_by_username(self, username: str) -> Optional[User]:
        return next((u for u in self._users.values() if u.username == username), None)

    def create_user(self, *, username, full_name, password_hash, role, is_active=True) -> int:
        user_id = self._next_id
        self._next_id += 1
        self._users[user_id] = User(
            user_id=user_id,
            username=username,
            full_name=full_name,
            password_hash=password_hash,
            role=role,
            is_active=is_active,
            created_at=CREATED,
        )
        return user_id

    def update_user(self, user_id, updates) -> bool:
        user = self._users.get(int(user_id))
        if not user:
            return False
        self._users[user.user_id] = replace(user, **updates)
        return True

    def delete_by_id(self, user_id) -> bool:
        return self._users.pop(int(user_id), None) is not None

    def list_all(self):
        return sorted(self._users.values(), key=lambda u: u.user_id, reverse=True)

    def list_active(self):
        return sorted((u for u in self._users.values() if u.is_active), key=lambda u: u.full_name)


class InMemorySessions:
    def __init__(self):
        self.sessions: dict[str, Session] = {}

    def get_by_token(self, token):
        return self.sessions.get(token)

    def create_session(self, *, user_id, token, expires_at) -> None:
        self.sessions[token] = Session(token=token, user_id=int(user_id), expires_at=expires_at)

    def delete_by_token(self, token) -> bool:
        return self.sessions.pop(token, None) is not None


class InMemoryRooms:
    def __init__(self, users: InMemoryUsers):
        self._users = users
        self.rooms: dict[int, Room] = {}
        self.grants: dict[int, RoomAccessGrant] = {}
        self.cells: dict[int, RoomCell] = {}
        self.walls: dict[int, RoomWall] = {}
        self.reservations: Optional["InMemoryReservations"] = None
        self._next_id = 1

    def _id(self) -> int:
        value = self._next_id
        self._next_id += 1
        return value

    # grants
    def get_room_role(self, room_id, user_id):
        for g in self.grants.values():
            if g.room_id == int(room_id) and g.user_id == int(user_id):
                return g.role
        return None

    def list_grants(self, room_id):
        return [g for g in self.grants.values() if g.room_id == int(room_id)]

    def add_grant(self, *, room_id, user_id, role) -> int:
        user = self._users.get_by_id(user_id)
        access_id = self._id()
        self.grants[access_id] = RoomAccessGrant(
            access_id=access_id,
            room_id=int(room_id),
            user_id=int(user_id),
            role=role,
            username=user.username if user else "",
            full_name=user.full_name if user else "",
        )
        return access_id

    def get_grant(self, access_id):
        return self.grants.get(int(access_id))

    def remove_grant(self, *, room_id, access_id) -> bool:
        grant = self.grants.get(int(access_id))
        if not grant or grant.room_id != int(room_id):
            return False
        del self.grants[grant.access_id]
        return True

    def list_admin_room_ids(self, user_id):
        return [g.room_id for g in self.grants.values() if g.user_id == int(user_id) and g.role == RoomRole.ADMIN]

    # rooms
    def get_by_id(self, room_id):
        return self.rooms.get(int(room_id))

    def list_all(self):
        return sorted(self.rooms.values(), key=lambda r: r.room_id, reverse=True)

    def list_for_user(self, user_id):
        granted = {g.room_id for g in self.grants.values() if g.user_id == int(user_id)}
        return [r for r in self.list_all() if r.room_id in granted]

    def create_room(self, *, name, description, grid_width, grid_height, created_by) -> int:
        room_id = self._id()
        self.rooms[room_id] = Room(
            room_id=room_id,
            name=name,
            description=description,
            grid_width=grid_width,
            grid_height=grid_height,
            created_by=created_by,
            created_at=CREATED,
        )
        self.add_grant(room_id=room_id, user_id=created_by, role=RoomRole.ADMIN)
        return room_id

    def update_room(self, room_id, updates) -> bool:
        room = self.rooms.get(int(room_id))
        if not room:
            return False
        self.rooms[room.room_id] = replace(room, **updates)
        return True

    def delete_by_id(self, room_id) -> bool:
        return self.rooms.pop(int(room_id), None) is not None

    # aggregates
    def count_desks(self, room_id) -> int:
        return sum(1 for c in self.cells.values() if c.room_id == int(room_id) and c.cell_type == CellType.DESK)

    def count_active_reservations(self, room_id, *, on: date) -> int:
        if self.reservations is None:
            return 0
        return sum(
            1
            for r in self.reservations.items.values()
            if r.room_id == int(room_id)
            and r.date_start <= on <= r.date_end
            and r.status not in (ReservationStatus.CANCELLED, ReservationStatus.REJECTED)
        )

    # layout
    def list_cells(self, room_id):
        return [c for c in self.cells.values() if c.room_id == int(room_id)]

    def get_cell(self, cell_id):
        return self.cells.get(int(cell_id))

    def create_cell(self, *, room_id, x, y, cell_type, label, default_owner_id) -> int:
        cell_id = self._id()
        self.cells[cell_id] = RoomCell(
            cell_id=cell_id,
            room_id=int(room_id),
            x=x,
            y=y,
            cell_type=cell_type,
            label=label,
            default_owner_id=default_owner_id,
        )
        return cell_id

    def update_cell(self, cell_id, updates) -> bool:
        cell = self.cells.get(int(cell_id))
        if not cell:
            return False
        fields = dict(updates)
        if "type" in fields:
            fields["cell_type"] = fields.pop("type")
        self.cells[cell.cell_id] = replace(cell, **fields)
        return True

    def delete_cell(self, cell_id) -> bool:
        return self.cells.pop(int(cell_id), None) is not None

    def list_walls(self, room_id):
        return [w for w in self.walls.values() if w.room_id == int(room_id)]

    def get_wall(self, wall_id):
        return self.walls.get(int(wall_id))

    def create_wall(self, *, room_id, start_row, start_col, end_row, end_col, orientation, wall_type) -> int:
        wall_id = self._id()
        self.walls[wall_id] = RoomWall(
            wall_id=wall_id,
            room_id=int(room_id),
            start_row=start_row,
            start_col=start_col,
            end_row=end_row,
            end_col=end_col,
            orientation=orientation,
            wall_type=wall_type,
        )
        return wall_id

    def delete_wall(self, wall_id) -> bool:
        return self.walls.pop(int(wall_id), None) is not None

    def clear_layout(self, room_id) -> None:
        for wall in self.list_walls(room_id):
            del self.walls[wall.wall_id]
        for cell in self.list_cells(room_id):
            del self.cells[cell.cell_id]


class InMemoryOffices:
    def __init__(self):
        self.offices: dict[int, Office] = {}
        self._next_id = 1

    def get_by_id(self, office_id):
        return self.offices.get(int(office_id))

    def list_offices(self, *, shared_only):
        items = sorted(self.offices.values(), key=lambda o: o.office_id, reverse=True)
        return [o for o in items if o.is_shared] if shared_only else items

    def create_office(self, *, name, location, is_shared, created_by) -> int:
        office_id = self._next_id
        self._next_id += 1
        self.offices[office_id] = Office(
            office_id=office_id,
            name=name,
            location=location,
            is_shared=is_shared,
            created_by=created_by,
            created_at=CREATED,
        )
        return office_id

    def update_office(self, office_id, updates) -> bool:
        office = self.offices.get(int(office_id))
        if not office:
            return False
        self.offices[office.office_id] = replace(office, **updates)
        return True

    def delete_by_id(self, office_id) -> bool:
        return self.offices.pop(int(office_id), None) is not None


class InMemoryBookings:
    """Keeps the insert-time re-check of the MySQL repository.

    ``interleave`` is stored just before the guarded write re-checks, which is
    how tests stage a concurrent writer winning the slot.
    """

    def __init__(self, offices: InMemoryOffices):
        self._offices = offices
        self.bookings: dict[int, OfficeBooking] = {}
        self.interleave: Optional[OfficeBooking] = None
        self._next_id = 1

    def _overlap(self, office_id, start_time, end_time, exclude_booking_id=None) -> bool:
        return any(
            b.office_id == int(office_id)
            and b.booking_id != exclude_booking_id
            and b.start_time < end_time
            and start_time < b.end_time
            for b in self.bookings.values()
        )

    def _apply_interleave(self) -> None:
        if self.interleave is not None:
            self.bookings[self.interleave.booking_id] = self.interleave
            self.interleave = None

    def add(self, office_id, start_time, end_time, *, user_id: Optional[int] = 1) -> OfficeBooking:
        booking_id = self.insert_if_free(
            office_id=office_id,
            user_id=user_id,
            start_time=start_time,
            end_time=end_time,
            is_admin_block=user_id is None,
            created_by=user_id or 1,
        )
        return self.bookings[booking_id]

    def get_by_id(self, booking_id):
        return self.bookings.get(int(booking_id))

    def has_conflict(self, office_id, start_time, end_time, exclude_booking_id=None) -> bool:
        return self._overlap(office_id, start_time, end_time, exclude_booking_id)

    def insert_if_free(self, *, office_id, user_id, start_time, end_time, is_admin_block, created_by):
        self._apply_interleave()
        if self._overlap(office_id, start_time, end_time):
            return None
        booking_id = self._next_id
        self._next_id += 1
        self.bookings[booking_id] = OfficeBooking(
            booking_id=booking_id,
            office_id=int(office_id),
            user_id=user_id,
            start_time=start_time,
            end_time=end_time,
            is_admin_block=is_admin_block,
            created_by=created_by,
            created_at=CREATED,
        )
        return booking_id

    def reschedule_if_free(self, booking_id, *, office_id, start_time, end_time) -> bool:
        self._apply_interleave()
        if self._overlap(office_id, start_time, end_time, int(booking_id)):
            return False
        booking = self.bookings[int(booking_id)]
        self.bookings[booking.booking_id] = replace(booking, start_time=start_time, end_time=end_time)
        return True

    def delete_by_id(self, booking_id) -> bool:
        return self.bookings.pop(int(booking_id), None) is not None

    def list_by_office(self, office_id, *, start_from, end_until):
        items = [
            b
            for b in self.bookings.values()
            if b.office_id == int(office_id) and b.start_time >= start_from and b.end_time <= end_until
        ]
        return [b.to_dict() for b in sorted(items, key=lambda b: b.start_time)]

    def list_by_user(self, user_id):
        items = [b for b in self.bookings.values() if b.user_id == int(user_id)]
        out = []
        for b in sorted(items, key=lambda b: b.start_time):
            office = self._offices.get_by_id(b.office_id)
            out.append({**b.to_dict(), "offices": {"id": office.office_id, "name": office.name}})
        return out


class InMemoryReservations:
    def __init__(self):
        self.items: dict[int, Reservation] = {}
        self._next_id = 1
        self.assignments: dict[int, FixedAssignment] = {}

    def add(self, reservation: Reservation) -> Reservation:
        self.items[reservation.reservation_id] = reservation
        self._next_id = max(self._next_id, reservation.reservation_id + 1)
        return reservation

    def get_by_id(self, reservation_id):
        return self.items.get(int(reservation_id))

    def user_has_overlap(self, user_id, date_start, date_end) -> bool:
        return any(
            r.user_id == int(user_id)
            and r.status in (ReservationStatus.PENDING, ReservationStatus.APPROVED)
            and dates_overlap(r.date_start, r.date_end, date_start, date_end)
            for r in self.items.values()
        )

    def list_approved_for_cell(self, cell_id, date_start, date_end):
        return [
            r
            for r in self.items.values()
            if r.cell_id == int(cell_id)
            and r.status == ReservationStatus.APPROVED
            and dates_overlap(r.date_start, r.date_end, date_start, date_end)
        ]

    def insert_if_free(
        self, *, room_id, cell_id, user_id, reservation_type, date_start, date_end, time_segment, approved_by, approved_at
    ):
        if self.user_has_overlap(user_id, date_start, date_end):
            return None
        if any(a.assigned_to != int(user_id) for a in self.list_assignments_for_cell(cell_id, date_start, date_end)):
            return None
        if any(segments_clash(r.time_segment, time_segment) for r in self.list_approved_for_cell(cell_id, date_start, date_end)):
            return None
        reservation_id = self._next_id
        self._next_id += 1
        self.items[reservation_id] = Reservation(
            reservation_id=reservation_id,
            room_id=int(room_id),
            cell_id=int(cell_id),
            user_id=int(user_id),
            reservation_type=reservation_type,
            status=ReservationStatus.APPROVED,
            date_start=date_start,
            date_end=date_end,
            time_segment=time_segment,
            approved_by=approved_by,
            approved_at=approved_at,
            created_at=CREATED,
        )
        return reservation_id

    def set_status(self, reservation_id, status, *, approved_by=None, approved_at=None) -> bool:
        reservation = self.items.get(int(reservation_id))
        if not reservation:
            return False
        changes = {"status": status}
        if approved_by is not None:
            changes.update(approved_by=approved_by, approved_at=approved_at)
        self.items[reservation.reservation_id] = replace(reservation, **changes)
        return True

    def list_by_user(self, user_id):
        items = [r for r in self.items.values() if r.user_id == int(user_id)]
        return [r.to_dict() for r in sorted(items, key=lambda r: r.date_start, reverse=True)]

    def list_by_room(self, room_id):
        items = [r for r in self.items.values() if r.room_id == int(room_id)]
        return [r.to_dict() for r in sorted(items, key=lambda r: r.date_start, reverse=True)]

    def list_pending(self, room_ids=None):
        items = [
            r
            for r in self.items.values()
            if r.status == ReservationStatus.PENDING and (room_ids is None or r.room_id in room_ids)
        ]
        return [r.to_dict() for r in sorted(items, key=lambda r: r.reservation_id)]

    def list_by_assignment(self, assignment_id):
        items = [r for r in self.items.values() if r.assignment_id == int(assignment_id)]
        return sorted(items, key=lambda r: r.date_start)

    def add_assignment(self, assignment: FixedAssignment) -> FixedAssignment:
        self.assignments[assignment.assignment_id] = assignment
        return assignment

    def get_assignment(self, assignment_id):
        return self.assignments.get(int(assignment_id))

    def user_has_assignment(self, user_id, date_start, date_end) -> bool:
        return any(
            a.assigned_to == int(user_id) and dates_overlap(a.date_start, a.date_end, date_start, date_end)
            for a in self.assignments.values()
        )

    def list_assignments_for_cell(self, cell_id, date_start, date_end):
        return [
            a
            for a in self.assignments.values()
            if a.cell_id == int(cell_id) and dates_overlap(a.date_start, a.date_end, date_start, date_end)
        ]

    def create_assignment_if_free(self, *, room_id, cell_id, assigned_to, date_start, date_end, created_by, approved_at):
        if self.user_has_overlap(assigned_to, date_start, date_end) or self.user_has_assignment(
            assigned_to, date_start, date_end
        ):
            return None
        if self.list_approved_for_cell(cell_id, date_start, date_end) or self.list_assignments_for_cell(
            cell_id, date_start, date_end
        ):
            return None
        assignment_id = max(self.assignments, default=0) + 1
        self.assignments[assignment_id] = FixedAssignment(
            assignment_id=assignment_id,
            room_id=int(room_id),
            cell_id=int(cell_id),
            assigned_to=int(assigned_to),
            date_start=date_start,
            date_end=date_end,
            created_by=int(created_by),
            created_at=CREATED,
        )
        for day in each_day(date_start, date_end):
            reservation_id = self._next_id
            self._next_id += 1
            self.items[reservation_id] = Reservation(
                reservation_id=reservation_id,
                room_id=int(room_id),
                cell_id=int(cell_id),
                user_id=int(assigned_to),
                reservation_type=ReservationType.DAY,
                status=ReservationStatus.APPROVED,
                date_start=day,
                date_end=day,
                time_segment=TimeSegment.FULL,
                approved_by=int(created_by),
                approved_at=approved_at,
                created_at=CREATED,
                assignment_id=assignment_id,
            )
        return assignment_id

    def delete_assignment(self, assignment_id) -> bool:
        if self.assignments.pop(int(assignment_id), None) is None:
            return False
        for r in list(self.items.values()):
            held = r.status in (ReservationStatus.PENDING, ReservationStatus.APPROVED)
            if r.assignment_id == int(assignment_id) and held:
                self.items[r.reservation_id] = replace(r, status=ReservationStatus.CANCELLED)
        return True

    def list_assignments_by_room(self, room_id):
        items = [a for a in self.assignments.values() if a.room_id == int(room_id)]
        return [
            {**a.to_dict(), "assigned_user": {"id": a.assigned_to}}
            for a in sorted(items, key=lambda a: a.date_start)
        ]

    def list_assignments_by_user(self, user_id):
        items = [a for a in self.assignments.values() if a.assigned_to == int(user_id)]
        return [a.as_reservation_dict() for a in sorted(items, key=lambda a: a.date_start, reverse=True)]


def ctx_for(user: User) -> RequestContext:
    return RequestContext(user_id=user.user_id, username=user.username, full_name=user.full_name, role=user.role)

