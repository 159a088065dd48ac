"""
dues/verification.py
────────────────────
Coordinator decisions on payment claims.

    pending ──verify──▶ verified   (ledger recomputed)
       │
       └────reject──▶ rejected    (ledger untouched)

Both end states are final.  verify() locks the owning Due row for the whole
transaction, so two verifications against the same due serialise their
ledger recomputation and neither update is lost.  If anything fails after
the status flip, the transaction rolls back and the claim is still pending.
"""

import logging
from dataclasses import dataclass

from django.db import transaction

from . import claims
from .exceptions import NotFoundError, OverpaymentSignal
from .ledger import LedgerSnapshot, compute_ledger, recompute_ledger
from .models import Due, PaymentClaim

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecisionResult:
    due: Due
    claim: PaymentClaim
    ledger: LedgerSnapshot
    overpayment: OverpaymentSignal = None


def _lock_due(due_id):
    try:
        return Due.objects.select_for_update().get(pk=due_id)
    except Due.DoesNotExist:
        raise NotFoundError(f'Due {due_id} not found.')


def verify(claim_id, decider, **scope):
    """
    Mark a pending claim verified and rebuild its due's ledger.

    A second verify of the same claim raises ConflictError without touching
    the ledger.  When verified money now exceeds the due total the call
    still succeeds; the result carries an OverpaymentSignal.
    """
    claim = claims.get_claim(claim_id, **scope)

    with transaction.atomic():
        due = _lock_due(claim.due_id)
        claim = claims.transition(claim.pk, PaymentClaim.Status.VERIFIED, decider)
        ledger = recompute_ledger(due)

    overpayment = None
    if ledger.overpaid:
        overpayment = OverpaymentSignal(
            due_id=due.pk,
            claim_id=claim.pk,
            overpaid_amount=ledger.overpaid_amount,
        )
        logger.warning(
            'overpayment on due %s after verifying claim %s: %s over total %s',
            due.pk, claim.pk, ledger.overpaid_amount, due.total_amount_due,
        )

    logger.info(
        'claim %s verified by user %s: due=%s paid=%s remaining=%s status=%s',
        claim.pk, decider.pk, due.pk, ledger.amount_paid, ledger.remaining, ledger.status,
    )
    return DecisionResult(due=due, claim=claim, ledger=ledger, overpayment=overpayment)


def reject(claim_id, decider, note='', **scope):
    """Mark a pending claim rejected.  Rejected claims never count as paid."""
    claim = claims.get_claim(claim_id, **scope)
    claim = claims.transition(claim.pk, PaymentClaim.Status.REJECTED, decider, note=note)
    due = claim.due
    logger.info('claim %s rejected by user %s (due %s)', claim.pk, decider.pk, due.pk)
    return DecisionResult(due=due, claim=claim, ledger=compute_ledger(due))
