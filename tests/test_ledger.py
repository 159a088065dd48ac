from __future__ import annotations

from datetime import date, datetime, timezone as dt_timezone
from decimal import Decimal

import pytest

from dues.exceptions import LedgerDriftError
from dues.ledger import build_snapshot, check_ledger, compute_ledger, derive_status, money, recompute_ledger

NOW = datetime(2026, 3, 15, 4, 0, tzinfo=dt_timezone.utc)


def test_money_rounds_half_up() -> None:
    assert money('10.005') == Decimal('10.01')
    assert money(None) == Decimal('0.00')
    assert money(7) == Decimal('7.00')


@pytest.mark.parametrize(
    ('total', 'paid', 'due_date', 'expected'),
    [
        ('1000', '1000', None, 'paid'),
        ('1000', '999.99', None, 'paid'),           # within epsilon
        ('1000', '999.98', None, 'partially_paid'),
        ('1000', '400', date(2026, 1, 1), 'partially_paid'),
        ('1000', '0', date(2026, 1, 1), 'overdue'),
        ('1000', '0', date(2026, 12, 31), 'pending'),
        ('1000', '0', None, 'pending'),
    ],
)
def test_derive_status(total, paid, due_date, expected) -> None:
    assert derive_status(Decimal(total), Decimal(paid), due_date, NOW) == expected


def test_due_date_today_is_not_overdue() -> None:
    today = date(2026, 3, 15)
    assert derive_status(Decimal('100'), Decimal('0'), today, NOW) == 'pending'


def test_snapshot_clamps_overpayment() -> None:
    snap = build_snapshot(Decimal('1000'), Decimal('1100'), None, NOW)
    assert snap.amount_paid == Decimal('1000.00')
    assert snap.remaining == Decimal('0.00')
    assert snap.status == 'paid'
    assert snap.overpaid_amount == Decimal('100.00')
    assert snap.overpaid is True


def test_snapshot_remaining_never_negative() -> None:
    snap = build_snapshot(Decimal('50'), Decimal('50.004'), None, NOW)
    assert snap.remaining == Decimal('0.00')
    assert snap.overpaid is False


@pytest.mark.django_db
def test_recompute_is_idempotent(due, submit_cash, coordinator) -> None:
    from dues.services import verify_claim

    claim = submit_cash(due, '250')
    verify_claim(claim.pk, coordinator)
    due.refresh_from_db()

    first = recompute_ledger(due)
    second = recompute_ledger(due)
    assert first == second
    assert first.amount_paid == Decimal('250.00')
    assert first.remaining == Decimal('750.00')
    assert first.status == 'partially_paid'


@pytest.mark.django_db
def test_pending_and_rejected_claims_do_not_count(due, submit_cash, coordinator) -> None:
    from dues.services import reject_claim

    submit_cash(due, '100')
    rejected = submit_cash(due, '200')
    reject_claim(rejected.pk, coordinator, note='no cash received')

    ledger = compute_ledger(due)
    assert ledger.amount_paid == Decimal('0.00')
    assert ledger.remaining == Decimal('1000.00')


@pytest.mark.django_db
def test_check_ledger_reports_drift(due) -> None:
    from dues.models import Due

    Due.objects.filter(pk=due.pk).update(amount_paid=Decimal('300.00'))
    due.refresh_from_db()

    with pytest.raises(LedgerDriftError) as excinfo:
        check_ledger(due)
    assert 'amount_paid' in excinfo.value.drift

    recompute_ledger(due)
    assert check_ledger(due).amount_paid == Decimal('0.00')
