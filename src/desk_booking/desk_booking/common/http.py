"""Flask plumbing shared by every ``{operation, data}`` endpoint.

JSON encoding of dates and enums, CORS headers, the OPTIONS preflight and the
mapping from ``DomainError`` to ``{"error": ...}`` responses live here so the
controllers only resolve the caller, parse the operation and dispatch.
"""
from __future__ import annotations

import logging
from datetime import date, datetime
from enum import Enum
from typing import Any, Mapping, Tuple, Type, TypeVar

from flask import Flask, jsonify, request
from flask.json.provider import DefaultJSONProvider
from werkzeug.exceptions import HTTPException

from ..core.constants import CORS_ALLOW_HEADERS, CORS_ALLOW_METHODS, SESSION_HEADER
from ..core.exceptions import DomainError, ValidationError
from ..sessions.model import RequestContext
from ..sessions.service import SessionResolver
from .datetime_utils import format_timestamp
from .operations import parse_operation

logger = logging.getLogger(__name__)

O = TypeVar("O")


def _default(o: Any) -> Any:
    if isinstance(o, datetime):
        return format_timestamp(o)
    if isinstance(o, date):
        return o.isoformat()
    if isinstance(o, Enum):
        return o.value
    return DefaultJSONProvider.default(o)


class ApiJSONProvider(DefaultJSONProvider):
    """Timestamps as ISO-8601 UTC with a ``Z`` suffix, enums as their value."""

    default = staticmethod(_default)
    sort_keys = False


def install_http_handlers(app: Flask, *, cors_allow_origin: str = "*") -> None:
    app.json = ApiJSONProvider(app)

    @app.before_request
    def _preflight():
        if request.method == "OPTIONS":
            return app.response_class(status=200)
        return None

    @app.after_request
    def _cors(response):
        response.headers["Access-Control-Allow-Origin"] = cors_allow_origin
        response.headers["Access-Control-Allow-Headers"] = CORS_ALLOW_HEADERS
        response.headers["Access-Control-Allow-Methods"] = CORS_ALLOW_METHODS
        return response

    @app.errorhandler(DomainError)
    def _domain_error(e: DomainError):
        if e.status_code >= 500:
            logger.error("%s on %s: %s", type(e).__name__, request.path, e)
        else:
            logger.info("%s on %s: %s", type(e).__name__, request.path, e)
        return jsonify({"error": str(e)}), e.status_code

    @app.errorhandler(HTTPException)
    def _http_error(e: HTTPException):
        return jsonify({"error": e.description or e.name}), e.code or 500

    @app.errorhandler(Exception)
    def _unexpected(e: Exception):
        logger.exception("Unhandled error on %s", request.path)
        return jsonify({"error": str(e) or "Unknown error"}), 500


def resolve_request_context(resolver: SessionResolver) -> RequestContext:
    return resolver.resolve(request.headers.get(SESSION_HEADER))


def read_operation_body() -> Tuple[Any, Any]:
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body.get("operation"), body.get("data")


def parse_request_operation(registry: Mapping[str, Type[O]]) -> O:
    name, data = read_operation_body()
    return parse_operation(registry, name, data)
