from __future__ import annotations

import logging

from flask import Flask, jsonify

from ..common.http import parse_request_operation, resolve_request_context
from ..container import Container
from .operations import BOOKING_OPERATIONS

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/manage-office-bookings", methods=["POST"], endpoint="manage_office_bookings")
    def manage_office_bookings():
        ctx = resolve_request_context(container.session_resolver)
        op = parse_request_operation(BOOKING_OPERATIONS)
        logger.info("User %s (%s) performing office bookings operation: %s", ctx.user_id, ctx.role.value, op.name)
        return jsonify(container.booking_service.dispatch(ctx, op))
