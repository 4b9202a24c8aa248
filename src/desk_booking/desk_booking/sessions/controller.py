from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from ..common.http import parse_request_operation
from ..container import Container
from ..core.constants import SESSION_HEADER
from .operations import AUTH_OPERATIONS, Login

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/health", methods=["GET"], endpoint="health")
    def health():
        return jsonify({"ok": True})

    @app.route("/auth", methods=["POST"], endpoint="auth")
    def auth():
        op = parse_request_operation(AUTH_OPERATIONS)
        if isinstance(op, Login):
            result = container.auth_service.login(op.username, op.password)
            return jsonify(result.to_dict())

        container.auth_service.logout(request.headers.get(SESSION_HEADER))
        return jsonify({"success": True})
