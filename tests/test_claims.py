from __future__ import annotations

from decimal import Decimal

import pytest

from dues import claims
from dues.exceptions import ConflictError, NotFoundError
from dues.models import PaymentClaim

pytestmark = pytest.mark.django_db


def test_submitted_claim_is_pending(due, submit_cash, student) -> None:
    claim = submit_cash(due, '300')
    assert claim.status == PaymentClaim.Status.PENDING
    assert claim.submitter == student
    assert claim.amount == Decimal('300.00')
    assert claim.decided_at is None
    assert claim.is_decided is False


def test_transition_records_decision(due, submit_cash, coordinator) -> None:
    claim = submit_cash(due, '300')
    decided = claims.transition(claim.pk, PaymentClaim.Status.REJECTED, coordinator, note='blurry')
    assert decided.status == PaymentClaim.Status.REJECTED
    assert decided.decided_by == coordinator
    assert decided.decision_note == 'blurry'
    assert decided.decided_at is not None


def test_second_transition_conflicts(due, submit_cash, coordinator) -> None:
    claim = submit_cash(due, '300')
    claims.transition(claim.pk, PaymentClaim.Status.VERIFIED, coordinator)

    with pytest.raises(ConflictError) as excinfo:
        claims.transition(claim.pk, PaymentClaim.Status.REJECTED, coordinator)
    assert excinfo.value.current_status == PaymentClaim.Status.VERIFIED
    assert excinfo.value.status_code == 409

    claim.refresh_from_db()
    assert claim.status == PaymentClaim.Status.VERIFIED


def test_transition_unknown_claim() -> None:
    with pytest.raises(NotFoundError):
        claims.transition(987654, PaymentClaim.Status.VERIFIED, None)


def test_transition_back_to_pending_is_refused(due, submit_cash, coordinator) -> None:
    claim = submit_cash(due, '300')
    with pytest.raises(ValueError):
        claims.transition(claim.pk, PaymentClaim.Status.PENDING, coordinator)


def test_get_claim_respects_scope(due, submit_cash, group, other_group) -> None:
    claim = submit_cash(due, '300')
    assert claims.get_claim(claim.pk, due__group=group).pk == claim.pk
    with pytest.raises(NotFoundError):
        claims.get_claim(claim.pk, due__group=other_group)


def test_pending_lists(make_due, submit_cash, coordinator, group) -> None:
    first_due = make_due(title='Org Shirt')
    second_due = make_due(title='Field Trip')
    a = submit_cash(first_due, '100')
    b = submit_cash(second_due, '200')
    c = submit_cash(first_due, '50')
    claims.transition(c.pk, PaymentClaim.Status.VERIFIED, coordinator)

    assert [x.pk for x in claims.list_pending_by_due(first_due.pk)] == [a.pk]
    assert [x.pk for x in claims.list_pending_by_group(group)] == [a.pk, b.pk]
