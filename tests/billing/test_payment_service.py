from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

import pytest

from src.gym_system.gym_system.billing.model import PaymentRequest
from src.gym_system.gym_system.billing.service import PaymentService
from src.gym_system.gym_system.common.pagination import PageRequest
from src.gym_system.gym_system.configuration.service import ConfigService
from src.gym_system.gym_system.core.enums import AdminRole, MemberStatus
from src.gym_system.gym_system.core.exceptions import AuthorizationError, NotFoundError, ValidationError


@pytest.fixture
def service(payments, members, configs):
    return PaymentService(payments, members, ConfigService(configs))


def _req(plan_id="monthly", amount="1000", **kw):
    return PaymentRequest(plan_id=plan_id, amount=Decimal(amount), payment_mode="UPI", **kw)


def test_record_payment_persists_payment_and_updates_member(service, make_member, members, payments, fixed_now):
    make_member(status=MemberStatus.EXPIRED, expiry=fixed_now - timedelta(days=5))

    outcome = service.record_payment(1, _req(amount="800"), now=fixed_now)

    assert outcome.payment.payment_id == 1
    assert payments.rows[1].receipt_number == "RCP2025030001"
    member = members.get_by_id(1)
    assert member.status == MemberStatus.ACTIVE
    assert member.outstanding_balance == Decimal("200")
    assert member.membership_expiry_date == fixed_now + timedelta(days=30)
    assert outcome.member == member
    assert outcome.previous_balance == Decimal("0")


def test_receipts_are_sequential_within_a_month(service, make_member, fixed_now):
    make_member()

    first = service.record_payment(1, _req(), now=fixed_now).payment
    second = service.record_payment(1, _req(), now=fixed_now + timedelta(hours=1)).payment

    assert first.receipt_number == "RCP2025030001"
    assert second.receipt_number == "RCP2025030002"
    # back-to-back: the second payment starts where the first ends
    assert second.start_date == first.expiry_date


def test_plans_come_from_stored_config(payments, members, configs, make_member, fixed_now):
    configs.document["plans"] = [{"id": "weekly", "name": "Weekly", "duration": 7, "price": 300}]
    service = PaymentService(payments, members, ConfigService(configs))
    make_member()

    outcome = service.record_payment(1, _req("weekly", "300"), now=fixed_now)

    assert outcome.payment.plan_name == "Weekly"
    with pytest.raises(ValidationError):
        service.record_payment(1, _req("monthly"), now=fixed_now)


def test_unknown_member_is_not_found(service, fixed_now):
    with pytest.raises(NotFoundError):
        service.record_payment(99, _req(), now=fixed_now)


def test_rejected_payment_writes_nothing(service, make_member, payments, members, fixed_now):
    make_member(balance=Decimal("50"))

    with pytest.raises(ValidationError):
        service.record_payment(1, _req("custom", "500"), now=fixed_now)

    assert payments.rows == {}
    assert payments.counters == {}
    assert members.get_by_id(1).outstanding_balance == Decimal("50")


def test_pay_balance_keeps_membership_window(service, make_member, members, fixed_now):
    expiry = fixed_now + timedelta(days=12)
    make_member(expiry=expiry, balance=Decimal("700"))

    outcome = service.pay_balance(1, Decimal("300"), payment_mode="Cash", now=fixed_now)

    member = members.get_by_id(1)
    assert member.outstanding_balance == Decimal("400")
    assert member.membership_expiry_date == expiry
    assert outcome.previous_balance == Decimal("700")
    assert outcome.payment.plan_id == "balance_clearance"


def test_list_excludes_soft_deleted_and_filters_by_member(service, make_member, fixed_now):
    make_member()
    make_member(2, registration_number="HF002")
    service.record_payment(1, _req(), now=fixed_now)
    second = service.record_payment(2, _req(), now=fixed_now + timedelta(minutes=5)).payment
    third = service.record_payment(1, _req(), now=fixed_now + timedelta(minutes=10)).payment

    service.soft_delete(third.payment_id, current_role=AdminRole.OWNER)

    page = service.list(page=PageRequest(page=1, limit=20))
    assert [row.payment.payment_id for row in page.items] == [second.payment_id, 1]
    assert page.items[0].member.registration_number == "HF002"

    only_first = service.list(member_id=1, page=PageRequest(page=1, limit=20))
    assert only_first.total == 1


def test_list_filters_by_date_range(service, make_member, fixed_now):
    make_member()
    service.record_payment(1, _req(), now=fixed_now - timedelta(days=20))
    service.record_payment(1, _req(), now=fixed_now)

    page = service.list(start=fixed_now - timedelta(days=1), end=fixed_now + timedelta(days=1), page=PageRequest())

    assert page.total == 1


def test_list_rejects_inverted_range(service, fixed_now):
    with pytest.raises(ValidationError):
        service.list(start=fixed_now, end=fixed_now - timedelta(days=1), page=PageRequest())


def test_soft_delete_unknown_payment(service):
    with pytest.raises(NotFoundError):
        service.soft_delete(123, current_role=AdminRole.OWNER)


def test_soft_delete_twice_is_not_found(service, make_member, fixed_now):
    make_member()
    payment = service.record_payment(1, _req(), now=fixed_now).payment
    service.soft_delete(payment.payment_id, current_role=AdminRole.OWNER)

    with pytest.raises(NotFoundError):
        service.soft_delete(payment.payment_id, current_role=AdminRole.OWNER)


def test_soft_delete_requires_owner(service, make_member, payments, fixed_now):
    make_member()
    payment = service.record_payment(1, _req(), now=fixed_now).payment

    with pytest.raises(AuthorizationError):
        service.soft_delete(payment.payment_id, current_role=AdminRole.STAFF)

    assert payments.get_by_id(payment.payment_id).is_deleted is False


def test_failed_member_update_leaves_no_payment(service, make_member, members, payments, fixed_now, monkeypatch):
    make_member(balance=Decimal("100"))

    def broken_update(member_id, fields):
        raise RuntimeError("connection lost")

    monkeypatch.setattr(members, "update_fields", broken_update)

    with pytest.raises(RuntimeError):
        service.record_payment(1, _req(amount="400"), now=fixed_now)

    assert payments.rows == {}
    assert members.get_by_id(1).outstanding_balance == Decimal("100")


def test_balance_change_applies_to_current_balance(service, make_member, members, fixed_now, monkeypatch):
    stale = make_member(balance=Decimal("0"))
    # another payment lands between the read and the write
    members.update_fields(1, {"outstanding_balance": Decimal("300")})
    real_get = members.get_by_id
    reads = []

    def first_read_is_stale(member_id):
        reads.append(member_id)
        return stale if len(reads) == 1 else real_get(member_id)

    monkeypatch.setattr(members, "get_by_id", first_read_is_stale)

    outcome = service.record_payment(1, _req(amount="600"), now=fixed_now)

    assert outcome.payment.balance_remaining == Decimal("400")
    assert real_get(1).outstanding_balance == Decimal("700")


def test_payment_for_member_deleted_mid_flight_is_not_found(service, make_member, members, payments, fixed_now, monkeypatch):
    member = make_member()
    members.delete(1)
    monkeypatch.setattr(members, "get_by_id", lambda member_id: member)

    with pytest.raises(NotFoundError):
        service.record_payment(1, _req(), now=fixed_now)

    assert payments.rows == {}
