from __future__ import annotations

import logging
from typing import Any, Callable, Dict

from ..access.policy import AccessPolicy, can_access_office, is_global_admin
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError
from ..offices.model import Office
from ..offices.repository import OfficeRepository
from ..sessions.model import RequestContext
from .conflicts import validate_booking_window
from .model import OfficeBooking
from .operations import CreateAdminBlock, CreateBooking, DeleteBooking, ListByOffice, ListByUser, UpdateBooking
from .repository import OfficeBookingRepository

logger = logging.getLogger(__name__)

SLOT_TAKEN = "This time slot is already booked"


class OfficeBookingService:
    """Use case: book office time slots.

    Writes go through the same ordered checks: 15-minute increments, end after
    start, office exists and is usable by the caller, then the conflict scan.
    Each step stops at the first failure.
    """

    def __init__(self, bookings: OfficeBookingRepository, offices: OfficeRepository, policy: AccessPolicy):
        self._bookings = bookings
        self._offices = offices
        self._policy = policy
        self._handlers: Dict[type, Callable[[RequestContext, Any], Any]] = {
            ListByOffice: self._list_by_office,
            ListByUser: self._list_by_user,
            CreateBooking: self._create,
            CreateAdminBlock: self._create_admin_block,
            UpdateBooking: self._update,
            DeleteBooking: self._delete,
        }

    def dispatch(self, ctx: RequestContext, op) -> Any:
        return self._handlers[type(op)](ctx, op)

    def _office_for(self, ctx: RequestContext, office_id: int, denied_message: str) -> Office:
        office = self._offices.get_by_id(office_id)
        if not office:
            raise NotFoundError("Office not found")
        if not can_access_office(ctx, office):
            raise AuthorizationError(denied_message)
        return office

    def _get_booking(self, booking_id: int) -> OfficeBooking:
        booking = self._bookings.get_by_id(booking_id)
        if not booking:
            raise NotFoundError("Booking not found")
        return booking

    def _list_by_office(self, ctx: RequestContext, op: ListByOffice) -> list:
        self._office_for(ctx, op.office_id, "You do not have access to this office")
        return list(self._bookings.list_by_office(op.office_id, start_from=op.start_date, end_until=op.end_date))

    def _list_by_user(self, ctx: RequestContext, op: ListByUser) -> list:
        return list(self._bookings.list_by_user(ctx.user_id))

    def _insert(self, ctx: RequestContext, op: CreateBooking, *, admin_block: bool) -> dict:
        if self._bookings.has_conflict(op.office_id, op.start_time, op.end_time):
            raise ConflictError(SLOT_TAKEN)

        booking_id = self._bookings.insert_if_free(
            office_id=op.office_id,
            user_id=None if admin_block else ctx.user_id,
            start_time=op.start_time,
            end_time=op.end_time,
            is_admin_block=admin_block,
            created_by=ctx.user_id,
        )
        if booking_id is None:
            # Lost the race against a concurrent booking between scan and insert.
            raise ConflictError(SLOT_TAKEN)

        logger.info(
            "Office %s booked %s-%s by user %s (admin block: %s)",
            op.office_id, op.start_time.isoformat(), op.end_time.isoformat(), ctx.user_id, admin_block,
        )
        item = self._get_booking(booking_id).to_dict()
        # Same shape as list_by_office rows; admin blocks have no occupant.
        item["users"] = (
            None
            if admin_block
            else {"id": ctx.user_id, "username": ctx.username, "full_name": ctx.full_name}
        )
        return item

    def _create(self, ctx: RequestContext, op: CreateBooking) -> dict:
        validate_booking_window(op.start_time, op.end_time)
        self._office_for(ctx, op.office_id, "This office is not available for booking")
        return self._insert(ctx, op, admin_block=False)

    def _create_admin_block(self, ctx: RequestContext, op: CreateAdminBlock) -> dict:
        self._policy.require_global_admin(ctx, "Only admins can create admin blocks")
        validate_booking_window(op.start_time, op.end_time)
        self._office_for(ctx, op.office_id, "This office is not available for booking")
        return self._insert(ctx, op, admin_block=True)

    def _update(self, ctx: RequestContext, op: UpdateBooking) -> dict:
        validate_booking_window(op.start_time, op.end_time)
        booking = self._get_booking(op.booking_id)
        if not is_global_admin(ctx) and booking.user_id != ctx.user_id:
            raise AuthorizationError("You can only change your own bookings")
        self._office_for(ctx, booking.office_id, "This office is not available for booking")

        if self._bookings.has_conflict(booking.office_id, op.start_time, op.end_time, exclude_booking_id=booking.booking_id):
            raise ConflictError(SLOT_TAKEN)
        moved = self._bookings.reschedule_if_free(
            booking.booking_id,
            office_id=booking.office_id,
            start_time=op.start_time,
            end_time=op.end_time,
        )
        if not moved:
            raise ConflictError(SLOT_TAKEN)
        return self._get_booking(booking.booking_id).to_dict()

    def _delete(self, ctx: RequestContext, op: DeleteBooking) -> dict:
        booking = self._get_booking(op.booking_id)
        if not is_global_admin(ctx) and booking.user_id != ctx.user_id:
            raise AuthorizationError("You can only delete your own bookings")

        if not self._bookings.delete_by_id(booking.booking_id):
            raise NotFoundError("Booking not found")
        logger.info("Booking %s deleted by user %s", booking.booking_id, ctx.user_id)
        return {"success": True}
