from __future__ import annotations

from datetime import timedelta
from typing import Optional

from flask import Flask, request

from ..common.datetime_utils import parse_iso_datetime
from ..common.http import error_response, internal_error, json_body, login_required, ok, session_role
from ..common.pagination import PageRequest
from ..common.validators import parse_amount, parse_optional_int, require_max_length, require_non_empty
from ..core.constants import DEFAULT_PAGE_SIZE, MAX_PAYMENT_AMOUNT, MAX_PLAN_NAME_LENGTH
from ..core.exceptions import DomainError, ValidationError
from ..container import Container
from .model import PaymentRequest


def _query_datetime(name: str, *, end_of_day: bool = False):
    raw = (request.args.get(name) or "").strip()
    if not raw:
        return None
    try:
        value = parse_iso_datetime(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an ISO date") from None
    # a bare date as upper bound covers the whole day
    if end_of_day and len(raw) == 10:
        value = value + timedelta(days=1) - timedelta(microseconds=1)
    return value


def _bounded_amount(value, field_name: str = "Amount"):
    amount = parse_amount(value, field_name)
    if amount > MAX_PAYMENT_AMOUNT:
        raise ValidationError(f"{field_name} is too large")
    return amount


def _optional_amount(value, field_name: str):
    if value is None or value == "":
        return None
    return _bounded_amount(value, field_name)


def _payment_request(data: dict) -> PaymentRequest:
    start_raw: Optional[str] = data.get("startDate")
    try:
        start_date = parse_iso_datetime(start_raw) if start_raw else None
    except (TypeError, ValueError):
        raise ValidationError("startDate must be an ISO date") from None
    plan_name = str(data.get("customPlanName") or "").strip()

    return PaymentRequest(
        plan_id=require_non_empty(data.get("planId"), "Plan"),
        amount=_bounded_amount(data.get("amount")),
        payment_mode=require_max_length(require_non_empty(data.get("paymentMode"), "Payment mode"), "Payment mode", 50),
        custom_duration=parse_optional_int(data.get("customDuration"), "Custom duration"),
        custom_amount=_optional_amount(data.get("customAmount"), "Custom amount"),
        custom_plan_name=require_max_length(plan_name, "Custom plan name", MAX_PLAN_NAME_LENGTH) or None,
        start_date=start_date,
        notes=require_max_length(str(data.get("notes") or ""), "Notes", 500),
    )


def _member_id(data: dict) -> int:
    member_id = parse_optional_int(data.get("memberId"), "Member ID")
    if member_id is None:
        raise ValidationError("Member ID is required")
    return member_id


def register(app: Flask, container: Container) -> None:
    @app.route("/api/payments", methods=["GET"], endpoint="api_payments_list")
    @login_required
    def list_payments():
        try:
            page = PageRequest.from_args(
                request.args.get("page"), request.args.get("limit"), default_limit=DEFAULT_PAGE_SIZE
            )
            result = container.payment_service.list(
                member_id=parse_optional_int(request.args.get("memberId"), "memberId"),
                start=_query_datetime("startDate"),
                end=_query_datetime("endDate", end_of_day=True),
                page=page,
            )
            return ok([row.to_dict() for row in result.items], pagination=result.pagination())
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("Failed to fetch payments")

    @app.route("/api/payments", methods=["POST"], endpoint="api_payments_create")
    @login_required
    def create_payment():
        try:
            data = json_body(request)
            member_id = _member_id(data)
            outcome = container.payment_service.record_payment(member_id, _payment_request(data))
            return ok(outcome.to_dict(), status=201)
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("Failed to record payment")

    @app.route("/api/payments/<int:payment_id>", methods=["DELETE"], endpoint="api_payments_delete")
    @login_required
    def delete_payment(payment_id: int):
        try:
            container.payment_service.soft_delete(payment_id, current_role=session_role())
            return ok(message="Payment deleted")
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("Failed to delete payment")

    @app.route("/api/payments/balance", methods=["POST"], endpoint="api_payments_balance")
    @login_required
    def pay_balance():
        try:
            data = json_body(request)
            member_id = _member_id(data)
            amount = _bounded_amount(data.get("amount"))
            outcome = container.payment_service.pay_balance(
                member_id,
                amount,
                payment_mode=require_max_length(str(data.get("paymentMode") or "Cash"), "Payment mode", 50),
                notes=require_max_length(str(data.get("notes") or ""), "Notes", 500),
            )
            return ok(
                {
                    "previousBalance": float(outcome.previous_balance),
                    "amountPaid": float(amount),
                    "newBalance": float(outcome.member.outstanding_balance),
                    "payment": outcome.payment.to_dict(),
                }
            )
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("Failed to process balance payment")
