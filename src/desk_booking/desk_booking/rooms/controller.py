from __future__ import annotations

import logging

from flask import Flask, jsonify

from ..common.http import parse_request_operation, resolve_request_context
from ..container import Container
from .operations import ROOM_OPERATIONS

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/manage-rooms", methods=["POST"], endpoint="manage_rooms")
    def manage_rooms():
        ctx = resolve_request_context(container.session_resolver)
        op = parse_request_operation(ROOM_OPERATIONS)
        logger.info("User %s (%s) performing rooms operation: %s", ctx.user_id, ctx.role.value, op.name)
        return jsonify(container.room_service.dispatch(ctx, op))
