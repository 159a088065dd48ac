"""
dues/ledger.py
──────────────
Derives a Due's paid / remaining / status view from its claim set.

The ledger is never maintained with incremental arithmetic: every read
and every claim transition recomputes it from the full list of verified
claims, so the snapshot stored on the Due can always be rebuilt.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings
from django.db.models import Max, Sum
from django.utils import timezone

from .exceptions import LedgerDriftError

logger = logging.getLogger(__name__)

ZERO = Decimal('0.00')


def money(x) -> Decimal:
    """Always return a 2-decimal Decimal with HALF_UP rounding."""
    if x is None:
        x = 0
    if not isinstance(x, Decimal):
        x = Decimal(str(x))
    return x.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)


def ledger_epsilon() -> Decimal:
    return Decimal(str(getattr(settings, 'DUES_LEDGER_EPSILON', '0.01')))


def derive_status(total_amount_due, amount_paid, due_date, now) -> str:
    """
    Status of a due from its amounts and deadline:

      paid            amount_paid >= total - epsilon
      partially_paid  something verified, not all of it
      overdue         nothing verified and the due date has passed
      pending         otherwise
    """
    total = money(total_amount_due)
    paid = money(amount_paid)

    if paid >= total - ledger_epsilon():
        return 'paid'
    if paid > 0:
        return 'partially_paid'
    if due_date is not None and now is not None:
        if isinstance(due_date, datetime):
            if now > due_date:
                return 'overdue'
        else:
            today = timezone.localdate(now) if timezone.is_aware(now) else now.date()
            if today > due_date:
                return 'overdue'
    return 'pending'


@dataclass(frozen=True)
class LedgerSnapshot:
    verified_total:  Decimal
    amount_paid:     Decimal
    remaining:       Decimal
    overpaid_amount: Decimal
    status:          str
    last_payment_at: datetime = None

    @property
    def overpaid(self):
        return self.overpaid_amount > 0

    def as_dict(self):
        return {
            'verified_total':  str(self.verified_total),
            'amount_paid':     str(self.amount_paid),
            'remaining':       str(self.remaining),
            'overpaid_amount': str(self.overpaid_amount),
            'status':          self.status,
            'last_payment_at': self.last_payment_at.isoformat() if self.last_payment_at else None,
        }


def build_snapshot(total_amount_due, verified_total, due_date, now, last_payment_at=None):
    """
    Pure ledger arithmetic.  Verified money above the total (beyond epsilon)
    is clamped: the due reads as fully paid and the excess is reported in
    overpaid_amount.
    """
    total = money(total_amount_due)
    verified = money(verified_total)
    overpaid = verified - total if verified > total + ledger_epsilon() else ZERO
    paid = min(verified, total)
    return LedgerSnapshot(
        verified_total=verified,
        amount_paid=paid,
        remaining=max(total - verified, ZERO),
        overpaid_amount=money(overpaid),
        status=derive_status(total, paid, due_date, now),
        last_payment_at=last_payment_at,
    )


def compute_ledger(due, now=None) -> LedgerSnapshot:
    """Derive the ledger for *due* from its verified claims (read-only)."""
    verified_status = due.claims.model.Status.VERIFIED
    agg = due.claims.filter(status=verified_status).aggregate(
        total=Sum('amount'),
        last=Max('decided_at'),
    )
    return build_snapshot(
        due.total_amount_due,
        agg['total'] or ZERO,
        due.due_date,
        now or timezone.now(),
        last_payment_at=agg['last'],
    )


def recompute_ledger(due, now=None) -> LedgerSnapshot:
    """
    Rebuild and persist the ledger snapshot columns of *due*.

    Idempotent: running it twice with no new claim decisions writes the
    same values.  Callers that race on one due must hold its row lock
    (select_for_update) inside a transaction.
    """
    snapshot = compute_ledger(due, now=now)
    due.amount_paid = snapshot.amount_paid
    due.overpaid_amount = snapshot.overpaid_amount
    due.last_payment_at = snapshot.last_payment_at
    due.save(update_fields=['amount_paid', 'overpaid_amount', 'last_payment_at'])
    logger.debug(
        'ledger recomputed for due %s: paid=%s remaining=%s status=%s',
        due.pk, snapshot.amount_paid, snapshot.remaining, snapshot.status,
    )
    return snapshot


def check_ledger(due, now=None) -> LedgerSnapshot:
    """
    Compare the stored snapshot on *due* with a fresh derivation.

    Raises LedgerDriftError listing every column that disagrees.
    """
    snapshot = compute_ledger(due, now=now)
    drift = {}
    if money(due.amount_paid) != snapshot.amount_paid:
        drift['amount_paid'] = (str(due.amount_paid), str(snapshot.amount_paid))
    if money(due.overpaid_amount) != snapshot.overpaid_amount:
        drift['overpaid_amount'] = (str(due.overpaid_amount), str(snapshot.overpaid_amount))
    if drift:
        raise LedgerDriftError(due.pk, drift)
    return snapshot

