from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Dict

from ..access.policy import AccessPolicy, is_global_admin
from ..common.datetime_utils import now_utc
from ..core.enums import ReservationStatus
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..rooms.repository import RoomRepository
from ..sessions.model import RequestContext
from ..users.repository import UserRepository
from .conflicts import segments_clash, validate_assignment_period, validate_date_range
from .model import FixedAssignment, Reservation
from .operations import (
    ApproveReservation,
    CancelReservation,
    CheckAvailability,
    CreateFixedAssignment,
    CreateReservation,
    DeleteFixedAssignment,
    ListFixedAssignments,
    ListMyReservations,
    ListPendingApprovals,
    ListRoomReservations,
    RejectReservation,
)
from .repository import ReservationRepository

logger = logging.getLogger(__name__)

ALREADY_HOLDING = "You cannot reserve more than one desk in the same period, even in different rooms"
DESK_TAKEN = "This desk is already reserved for the selected dates and time"
ALREADY_ASSIGNED = "You already have a desk assigned in this period"
DESK_ASSIGNED = "This desk has a fixed assignment for the selected period"


class ReservationService:
    """Use case: reserve desks of a room by day or half day.

    Reservations made by the desk user are approved immediately; ``pending``
    ones wait for a room admin to approve or reject them. Room admins can also
    hand a desk to one user for up to a year as a fixed assignment.
    """

    def __init__(
        self,
        reservations: ReservationRepository,
        rooms: RoomRepository,
        users: UserRepository,
        policy: AccessPolicy,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._reservations = reservations
        self._rooms = rooms
        self._users = users
        self._policy = policy
        self._now = clock
        self._handlers: Dict[type, Callable[[RequestContext, Any], Any]] = {
            CreateReservation: self._create,
            ListMyReservations: self._list_mine,
            ListRoomReservations: self._list_room,
            ListPendingApprovals: self._list_pending,
            ApproveReservation: self._approve,
            RejectReservation: self._reject,
            CancelReservation: self._cancel,
            CheckAvailability: self._check_availability,
            CreateFixedAssignment: self._create_assignment,
            ListFixedAssignments: self._list_assignments,
            DeleteFixedAssignment: self._delete_assignment,
        }

    def dispatch(self, ctx: RequestContext, op) -> Any:
        return self._handlers[type(op)](ctx, op)

    def _get_reservation(self, reservation_id: int) -> Reservation:
        reservation = self._reservations.get_by_id(reservation_id)
        if not reservation:
            raise NotFoundError("Reservation not found")
        return reservation

    def _require_room_reader(self, ctx: RequestContext, room_id: int) -> None:
        if not is_global_admin(ctx) and not self._policy.has_room_access(ctx, room_id):
            raise AuthorizationError("You do not have access to this room")

    def _create(self, ctx: RequestContext, op: CreateReservation) -> dict:
        validate_date_range(op.date_start, op.date_end)
        self._require_room_reader(ctx, op.room_id)
        cell = self._rooms.get_cell(op.cell_id)
        if not cell or cell.room_id != op.room_id:
            raise NotFoundError("Cell not found in this room")

        if self._reservations.user_has_overlap(ctx.user_id, op.date_start, op.date_end):
            raise ConflictError(ALREADY_HOLDING)
        if self._reservations.user_has_assignment(ctx.user_id, op.date_start, op.date_end):
            raise ConflictError(ALREADY_ASSIGNED)
        for assignment in self._reservations.list_assignments_for_cell(op.cell_id, op.date_start, op.date_end):
            if assignment.assigned_to != ctx.user_id:
                raise ConflictError(DESK_ASSIGNED)
        for existing in self._reservations.list_approved_for_cell(op.cell_id, op.date_start, op.date_end):
            if segments_clash(existing.time_segment, op.time_segment):
                raise ConflictError(DESK_TAKEN)

        reservation_id = self._reservations.insert_if_free(
            room_id=op.room_id,
            cell_id=op.cell_id,
            user_id=ctx.user_id,
            reservation_type=op.reservation_type,
            date_start=op.date_start,
            date_end=op.date_end,
            time_segment=op.time_segment,
            approved_by=ctx.user_id,
            approved_at=self._now(),
        )
        if reservation_id is None:
            raise ConflictError(DESK_TAKEN)

        logger.info(
            "Desk %s in room %s reserved %s..%s (%s) by user %s",
            op.cell_id, op.room_id, op.date_start, op.date_end, op.time_segment.value, ctx.user_id,
        )
        return self._get_reservation(reservation_id).to_dict()

    def _list_mine(self, ctx: RequestContext, op: ListMyReservations) -> list:
        # Days generated by an assignment show up once, as the assignment itself.
        items = [r for r in self._reservations.list_by_user(ctx.user_id) if r.get("assignment_id") is None]
        items.extend(self._reservations.list_assignments_by_user(ctx.user_id))
        return sorted(items, key=lambda item: item["date_start"], reverse=True)

    def _list_room(self, ctx: RequestContext, op: ListRoomReservations) -> list:
        self._require_room_reader(ctx, op.room_id)
        return list(self._reservations.list_by_room(op.room_id))

    def _list_pending(self, ctx: RequestContext, op: ListPendingApprovals) -> list:
        if is_global_admin(ctx):
            return list(self._reservations.list_pending())
        return list(self._reservations.list_pending(self._rooms.list_admin_room_ids(ctx.user_id)))

    def _decide(self, ctx: RequestContext, reservation_id: int, *, approve: bool) -> dict:
        verb = "approve" if approve else "reject"
        reservation = self._get_reservation(reservation_id)
        if reservation.status != ReservationStatus.PENDING:
            raise ValidationError(f"Only pending reservations can be {verb}d")
        self._policy.require_room_admin(ctx, reservation.room_id, f"Only room admins can {verb} reservations")

        if approve:
            self._reservations.set_status(
                reservation.reservation_id,
                ReservationStatus.APPROVED,
                approved_by=ctx.user_id,
                approved_at=self._now(),
            )
        else:
            self._reservations.set_status(reservation.reservation_id, ReservationStatus.REJECTED)
        logger.info("Reservation %s %sd by user %s", reservation.reservation_id, verb, ctx.user_id)
        return self._get_reservation(reservation.reservation_id).to_dict()

    def _approve(self, ctx: RequestContext, op: ApproveReservation) -> dict:
        return self._decide(ctx, op.reservation_id, approve=True)

    def _reject(self, ctx: RequestContext, op: RejectReservation) -> dict:
        return self._decide(ctx, op.reservation_id, approve=False)

    def _cancel(self, ctx: RequestContext, op: CancelReservation) -> dict:
        reservation = self._get_reservation(op.reservation_id)
        if reservation.user_id != ctx.user_id and not self._policy.is_room_admin(ctx, reservation.room_id):
            raise AuthorizationError("You can only cancel your own reservations")
        if reservation.status == ReservationStatus.CANCELLED:
            raise ValidationError("Reservation is already cancelled")

        self._reservations.set_status(reservation.reservation_id, ReservationStatus.CANCELLED)
        logger.info("Reservation %s cancelled by user %s", reservation.reservation_id, ctx.user_id)
        return self._get_reservation(reservation.reservation_id).to_dict()

    def _check_availability(self, ctx: RequestContext, op: CheckAvailability) -> dict:
        validate_date_range(op.date_start, op.date_end)
        conflicts = self._reservations.list_approved_for_cell(op.cell_id, op.date_start, op.date_end)
        return {
            "available": not conflicts,
            "conflicts": [
                {
                    "id": r.reservation_id,
                    "date_start": r.date_start.isoformat(),
                    "date_end": r.date_end.isoformat(),
                    "time_segment": r.time_segment.value,
                }
                for r in conflicts
            ],
        }

    def _create_assignment(self, ctx: RequestContext, op: CreateFixedAssignment) -> dict:
        validate_assignment_period(op.date_start, op.date_end)
        self._policy.require_room_admin(ctx, op.room_id, "You do not have admin access to this room")
        cell = self._rooms.get_cell(op.cell_id)
        if not cell or cell.room_id != op.room_id:
            raise NotFoundError("Cell not found in this room")
        assignee = self._users.get_by_id(op.assigned_to)
        if not assignee or not assignee.is_active:
            raise NotFoundError("User not found")

        if self._reservations.user_has_overlap(op.assigned_to, op.date_start, op.date_end) or (
            self._reservations.user_has_assignment(op.assigned_to, op.date_start, op.date_end)
        ):
            raise ConflictError("User already has reservations in this period")
        if self._reservations.list_assignments_for_cell(op.cell_id, op.date_start, op.date_end):
            raise ConflictError(DESK_ASSIGNED)
        if self._reservations.list_approved_for_cell(op.cell_id, op.date_start, op.date_end):
            raise ConflictError(DESK_TAKEN)

        assignment_id = self._reservations.create_assignment_if_free(
            room_id=op.room_id,
            cell_id=op.cell_id,
            assigned_to=op.assigned_to,
            date_start=op.date_start,
            date_end=op.date_end,
            created_by=ctx.user_id,
            approved_at=self._now(),
        )
        if assignment_id is None:
            raise ConflictError(DESK_TAKEN)

        days = list(self._reservations.list_by_assignment(assignment_id))
        logger.info(
            "Desk %s in room %s assigned to user %s for %s..%s (%s days) by user %s",
            op.cell_id, op.room_id, op.assigned_to, op.date_start, op.date_end, len(days), ctx.user_id,
        )
        return {
            **self._get_assignment(assignment_id).to_dict(),
            "reservations": [r.to_dict() for r in days],
        }

    def _get_assignment(self, assignment_id: int) -> FixedAssignment:
        assignment = self._reservations.get_assignment(assignment_id)
        if not assignment:
            raise NotFoundError("Fixed assignment not found")
        return assignment

    def _list_assignments(self, ctx: RequestContext, op: ListFixedAssignments) -> list:
        self._require_room_reader(ctx, op.room_id)
        return list(self._reservations.list_assignments_by_room(op.room_id))

    def _delete_assignment(self, ctx: RequestContext, op: DeleteFixedAssignment) -> dict:
        assignment = self._get_assignment(op.assignment_id)
        if assignment.assigned_to != ctx.user_id and not self._policy.is_room_admin(ctx, assignment.room_id):
            raise AuthorizationError(
                "You can only delete assignments assigned to you or assignments in rooms you manage"
            )

        self._reservations.delete_assignment(assignment.assignment_id)
        logger.info("Fixed assignment %s deleted by user %s", assignment.assignment_id, ctx.user_id)
        return assignment.to_dict()
