"""Helpers shared by the Flask controllers (auth guard, JSON envelopes)."""

from __future__ import annotations

import logging
from functools import wraps
from typing import Any

from flask import Request, current_app, jsonify, request, session

from ..core.enums import AdminRole
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BusinessRuleError,
    ConflictError,
    DomainError,
    NotFoundError,
    RateLimitExceeded,
    ValidationError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: list[tuple[type[DomainError], int]] = [
    (ValidationError, 400),
    (BusinessRuleError, 400),
    (NotFoundError, 404),
    (ConflictError, 409),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (RateLimitExceeded, 429),
]


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "admin_id" not in session:
            return jsonify({"success": False, "error": "Unauthorized"}), 401
        return view(*args, **kwargs)

    return wrapper


def session_role() -> AdminRole:
    try:
        return AdminRole(session.get("role"))
    except ValueError:
        raise AuthenticationError("Session is no longer valid") from None


def cron_secret_required(view):
    """When CRON_SECRET is configured, demand `Authorization: Bearer <secret>`."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        secret = current_app.config.get("CRON_SECRET")
        if secret and request.headers.get("Authorization") != f"Bearer {secret}":
            return jsonify({"success": False, "error": "Unauthorized"}), 401
        return view(*args, **kwargs)

    return wrapper


def ok(data: Any = None, *, status: int = 200, **extra: Any):
    body: dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = data
    body.update(extra)
    return jsonify(body), status


def error_response(exc: DomainError):
    status = next((code for kind, code in _STATUS_BY_ERROR if isinstance(exc, kind)), 400)
    body: dict[str, Any] = {"success": False, "error": str(exc)}
    if isinstance(exc, BusinessRuleError):
        body["reason"] = exc.reason.value
        body.update(exc.details)
    return jsonify(body), status


def internal_error(message: str):
    """Log the active exception and answer with a message that leaks nothing."""
    logger.exception(message)
    return jsonify({"success": False, "error": message}), 500


def json_body(request: Request) -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.remote_addr or "unknown"
