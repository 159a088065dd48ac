"""
dues/claims.py
──────────────
Persistence for payment claims.

transition() is the single place a claim's status changes.  It is a
conditional UPDATE ... WHERE status = 'pending', so two coordinators
deciding the same claim cannot both win.
"""

import logging

from django.db import transaction
from django.utils import timezone

from .exceptions import ConflictError, NotFoundError
from .models import PaymentClaim

logger = logging.getLogger(__name__)

DECISIONS = (PaymentClaim.Status.VERIFIED, PaymentClaim.Status.REJECTED)


def create_claim(validated):
    """Persist an accepted ValidatedClaimRequest as a PENDING claim."""
    claim = PaymentClaim.objects.create(
        due=validated.due,
        submitter=validated.submitter,
        amount=validated.amount,
        method=validated.method,
        payment_type=validated.payment_type,
        reference_id=validated.reference_id,
        receipt_ref=validated.receipt_ref,
        cash_confirmed=validated.cash_confirmed,
        status=PaymentClaim.Status.PENDING,
        created_at=timezone.now(),
    )
    logger.info(
        'claim %s submitted: due=%s amount=%s method=%s type=%s',
        claim.pk, claim.due_id, claim.amount, claim.method, claim.payment_type,
    )
    return claim


def get_claim(claim_id, **scope):
    """Fetch one claim; *scope* narrows the lookup (e.g. due__group=group)."""
    try:
        return PaymentClaim.objects.select_related('due', 'submitter').get(pk=claim_id, **scope)
    except (PaymentClaim.DoesNotExist, ValueError, TypeError):
        raise NotFoundError(f'Payment claim {claim_id} not found.')


def list_pending_by_due(due_id):
    return (
        PaymentClaim.objects
        .filter(due_id=due_id, status=PaymentClaim.Status.PENDING)
        .select_related('submitter')
        .order_by('created_at', 'pk')
    )


def list_pending_by_group(group):
    """Pending claims for every due in *group*, oldest first."""
    return (
        PaymentClaim.objects
        .filter(due__group=group, status=PaymentClaim.Status.PENDING)
        .select_related('due', 'submitter')
        .order_by('created_at', 'pk')
    )


def transition(claim_id, new_status, decider, note=''):
    """
    Move a PENDING claim to *new_status* (verified / rejected).

    Raises ConflictError when the claim has already been decided and
    NotFoundError when it does not exist.
    """
    if new_status not in DECISIONS:
        raise ValueError(f'Cannot transition a claim to "{new_status}".')

    with transaction.atomic():
        updated = (
            PaymentClaim.objects
            .filter(pk=claim_id, status=PaymentClaim.Status.PENDING)
            .update(
                status=new_status,
                decided_at=timezone.now(),
                decided_by=decider,
                decision_note=note or '',
            )
        )
        if not updated:
            current = (
                PaymentClaim.objects
                .filter(pk=claim_id)
                .values_list('status', flat=True)
                .first()
            )
            if current is None:
                raise NotFoundError(f'Payment claim {claim_id} not found.')
            logger.warning(
                'claim %s already %s; %s by user %s refused',
                claim_id, current, new_status, getattr(decider, 'pk', None),
            )
            raise ConflictError(claim_id, current)

    return get_claim(claim_id)
