from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import parse_iso_date
from ..common.http import (
    client_ip,
    cron_secret_required,
    error_response,
    internal_error,
    json_body,
    login_required,
    ok,
)
from ..common.pagination import PageRequest
from ..common.validators import parse_optional_int
from ..core.constants import DEFAULT_ATTENDANCE_PAGE_SIZE
from ..core.exceptions import DomainError, RateLimitExceeded, ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance/mark", methods=["POST"], endpoint="api_attendance_mark")
    def mark_attendance():
        """Public kiosk endpoint: check in, or check out of the current session."""
        try:
            if not container.rate_limiter.hit(client_ip(request)):
                raise RateLimitExceeded("Too many requests. Please wait.")
            data = json_body(request)
            result = container.attendance_service.mark(str(data.get("registrationNumber") or ""))
            return ok(**result.to_dict())
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("Failed to mark attendance. Please try again.")

    @app.route("/api/attendance/session", methods=["GET"], endpoint="api_attendance_session")
    def current_session():
        try:
            return ok(container.attendance_service.current_session().to_dict())
        except Exception:
            return internal_error("Failed to resolve the current session")

    @app.route("/api/attendance", methods=["GET"], endpoint="api_attendance_list")
    @login_required
    def list_attendance():
        try:
            raw_date = (request.args.get("date") or "").strip()
            try:
                day = parse_iso_date(raw_date) if raw_date else None
            except ValueError:
                raise ValidationError("date must be in YYYY-MM-DD format") from None

            page = PageRequest.from_args(
                request.args.get("page"), request.args.get("limit"), default_limit=DEFAULT_ATTENDANCE_PAGE_SIZE
            )
            result = container.attendance_service.list_records(
                day=day,
                member_id=parse_optional_int(request.args.get("memberId"), "memberId"),
                page=page,
            )
            return ok([row.to_dict() for row in result.items], pagination=result.pagination())
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("Failed to fetch attendance")

    @app.route("/api/attendance/current", methods=["GET"], endpoint="api_attendance_current")
    @login_required
    def currently_inside():
        try:
            rows = container.attendance_service.currently_inside()
            return ok([row.to_dict() for row in rows], count=len(rows))
        except Exception:
            return internal_error("Failed to fetch current members")

    @app.route("/api/cron/auto-exit", methods=["GET"], endpoint="api_cron_auto_exit")
    @cron_secret_required
    def auto_exit():
        try:
            result = container.attendance_service.auto_checkout()
            return ok(message=result.message, processed=result.processed)
        except Exception:
            return internal_error("Auto-exit failed")
