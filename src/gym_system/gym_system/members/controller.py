from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import parse_iso_datetime
from ..common.http import cron_secret_required, error_response, internal_error, json_body, login_required, ok
from ..common.pagination import PageRequest
from ..core.constants import DEFAULT_PAGE_SIZE
from ..core.exceptions import DomainError, ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/members", methods=["GET"], endpoint="api_members_list")
    @login_required
    def list_members():
        try:
            page = PageRequest.from_args(
                request.args.get("page"), request.args.get("limit"), default_limit=DEFAULT_PAGE_SIZE
            )
            result = container.member_service.list(
                search=request.args.get("search", ""),
                status=request.args.get("status"),
                sort_by=request.args.get("sortBy", "createdAt"),
                sort_order=request.args.get("sortOrder", "desc"),
                page=page,
            )
            return ok([m.to_dict() for m in result.items], pagination=result.pagination())
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("Failed to fetch members")

    @app.route("/api/members", methods=["POST"], endpoint="api_members_create")
    @login_required
    def create_member():
        try:
            data = json_body(request)
            join_raw = data.get("joinDate")
            try:
                join_date = parse_iso_datetime(join_raw) if join_raw else None
            except (TypeError, ValueError):
                raise ValidationError("joinDate must be an ISO date") from None

            member = container.member_service.create(
                full_name=data.get("fullName"),
                phone=data.get("phone"),
                address=data.get("address"),
                registration_number=data.get("registrationNumber"),
                join_date=join_date,
                membership_plan=data.get("membershipPlan"),
                notes=str(data.get("notes") or ""),
            )
            return ok(member.to_dict(), status=201)
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("Failed to create member")

    @app.route("/api/members/<int:member_id>", methods=["GET"], endpoint="api_members_detail")
    @login_required
    def member_detail(member_id: int):
        try:
            return ok(container.member_service.get_detail(member_id).to_dict())
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("Failed to fetch member")

    @app.route("/api/members/<int:member_id>", methods=["PUT"], endpoint="api_members_update")
    @login_required
    def update_member(member_id: int):
        try:
            member = container.member_service.update(member_id, json_body(request))
            return ok(member.to_dict())
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("Failed to update member")

    @app.route("/api/members/<int:member_id>", methods=["DELETE"], endpoint="api_members_delete")
    @login_required
    def delete_member(member_id: int):
        try:
            container.member_service.delete(member_id)
            return ok(message="Member deleted successfully")
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("Failed to delete member")

    @app.route("/api/members/lookup", methods=["GET"], endpoint="api_members_lookup")
    def lookup_member():
        """Public: the kiosk shows who is about to check in."""
        try:
            result = container.member_service.lookup(request.args.get("regNumber", ""))
            return ok(result.to_dict())
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("Lookup failed")

    @app.route("/api/cron/expire-memberships", methods=["GET"], endpoint="api_cron_expire_memberships")
    @cron_secret_required
    def expire_memberships():
        try:
            count = container.member_service.expire_memberships()
            return ok(message="Membership expiry check completed", expiredCount=count)
        except Exception:
            return internal_error("Membership expiry check failed")
