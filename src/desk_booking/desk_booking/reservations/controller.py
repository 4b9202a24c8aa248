from __future__ import annotations

import logging

from flask import Flask, jsonify

from ..common.http import parse_request_operation, resolve_request_context
from ..container import Container
from .operations import RESERVATION_OPERATIONS

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/manage-reservations", methods=["POST"], endpoint="manage_reservations")
    def manage_reservations():
        ctx = resolve_request_context(container.session_resolver)
        op = parse_request_operation(RESERVATION_OPERATIONS)
        logger.info("User %s (%s) performing reservations operation: %s", ctx.user_id, ctx.role.value, op.name)
        return jsonify(container.reservation_service.dispatch(ctx, op))
