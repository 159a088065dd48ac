"""
dues/services.py
────────────────
Entry points used by the views and management commands.

Functions
─────────
submit_claim(due, submitter, ...)
    Validate a student's claim against a fresh ledger and store it PENDING.

verify_claim(claim_id, decider, group=None)
reject_claim(claim_id, decider, note='', group=None)
    Coordinator decisions; *group* scopes the claim lookup.

get_due_summary(due_id, **scope)
    Due + ledger + claims, derived from the claim set at read time.

create_group_due(group, created_by, ...)
    One Due per active student of a group.

list_group_dues(group, limit=None)
    The group's dues grouped per assignment, with a status count each.

group_stats(group)
    Money collected (verified claims) and outstanding across the group.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from itertools import groupby

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Max, Q, Sum
from django.utils import timezone

from . import claims, verification
from .exceptions import NotFoundError
from .ledger import ZERO, build_snapshot, compute_ledger, money
from .models import Due, PaymentClaim
from .validation import validate_claim

logger = logging.getLogger(__name__)


def get_due(due_id, **scope):
    try:
        return Due.objects.select_related('group', 'owner').get(pk=due_id, **scope)
    except (Due.DoesNotExist, ValueError, TypeError):
        raise NotFoundError(f'Due {due_id} not found.')


def submit_claim(due, submitter, *, method, amount=None,
                 payment_type=PaymentClaim.PaymentType.FULL,
                 reference_id='', receipt_ref='', cash_confirmed=False):
    """
    Accept a payment claim for *due*.

    The remaining balance is derived from verified claims right now; pending
    claims do not reduce it.  Raises ClaimValidationError on bad input.
    """
    ledger = compute_ledger(due)
    validated = validate_claim(
        due,
        submitter,
        method=method,
        amount=amount,
        payment_type=payment_type,
        reference_id=reference_id,
        receipt_ref=receipt_ref,
        cash_confirmed=cash_confirmed,
        remaining=ledger.remaining,
    )
    return claims.create_claim(validated)


def _group_scope(group):
    return {} if group is None else {'due__group': group}


def verify_claim(claim_id, decider, group=None):
    return verification.verify(claim_id, decider, **_group_scope(group))


def reject_claim(claim_id, decider, note='', group=None):
    return verification.reject(claim_id, decider, note=note, **_group_scope(group))


def get_due_summary(due_id, **scope):
    due = get_due(due_id, **scope)
    return due, compute_ledger(due), list(due.claims.select_related('submitter', 'decided_by'))


def create_group_due(group, created_by, *, title, total_amount_due, description='',
                     due_date=None, payment_method_restriction=Due.MethodRestriction.ALL):
    """
    Assign a new due to every active student member of *group*.
    Returns the created Due rows.
    """
    User = get_user_model()
    students = (
        User.objects
        .filter(group=group, role=User.Role.STUDENT, is_active=True)
        .order_by('last_name', 'first_name', 'username')
    )
    total = money(total_amount_due)

    with transaction.atomic():
        dues = [
            Due.objects.create(
                group=group,
                owner=student,
                title=title,
                description=description or '',
                total_amount_due=total,
                due_date=due_date,
                payment_method_restriction=payment_method_restriction,
                created_by=created_by,
            )
            for student in students
        ]

    logger.info(
        'due "%s" (%s) assigned to %s students of group %s by user %s',
        title, total, len(dues), group.pk, created_by.pk,
    )
    return dues


# ── Group overview ────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class DueAssignment:
    """
    One due as the coordinator created it: the same title, total and due date
    assigned to many members.  *rows* holds (Due, LedgerSnapshot) per member.
    """

    title: str
    description: str
    total_amount_due: Decimal
    due_date: date
    created_at: datetime
    rows: tuple

    @property
    def status_summary(self):
        summary = {status: 0 for status in Due.Status.values}
        for _, ledger in self.rows:
            summary[ledger.status] += 1
        return summary

    @property
    def amount_collected(self):
        return money(sum((ledger.verified_total for _, ledger in self.rows), ZERO))

    @property
    def amount_outstanding(self):
        return money(sum((ledger.remaining for _, ledger in self.rows), ZERO))


@dataclass(frozen=True)
class GroupStats:
    total_dues: int
    total_students: int
    total_amount_collected: Decimal
    total_amount_outstanding: Decimal
    needs_reconciliation: int

    def as_dict(self):
        return {
            'total_dues':               self.total_dues,
            'total_students':           self.total_students,
            'total_amount_collected':   str(self.total_amount_collected),
            'total_amount_outstanding': str(self.total_amount_outstanding),
            'needs_reconciliation':     self.needs_reconciliation,
        }


def group_ledgers(group, now=None):
    """Every due of *group* with its ledger, derived from verified claims in one query."""
    verified = Q(claims__status=PaymentClaim.Status.VERIFIED)
    dues = (
        Due.objects
        .filter(group=group)
        .select_related('owner')
        .annotate(
            verified_total=Sum('claims__amount', filter=verified),
            last_verified_at=Max('claims__decided_at', filter=verified),
        )
        .order_by('title', 'total_amount_due', 'due_date',
                  'owner__last_name', 'owner__first_name', 'owner__username')
    )
    now = now or timezone.now()
    return [
        (due, build_snapshot(due.total_amount_due, due.verified_total or ZERO, due.due_date, now,
                             last_payment_at=due.last_verified_at))
        for due in dues
    ]


def _assignment_key(row):
    due = row[0]
    return (due.title, due.total_amount_due, due.due_date)


def list_group_dues(group, limit=None):
    """The group's dues, one DueAssignment per created due, newest first."""
    assignments = []
    for (title, total, due_date), rows in groupby(group_ledgers(group), key=_assignment_key):
        rows = tuple(rows)
        assignments.append(DueAssignment(
            title=title,
            description=rows[0][0].description,
            total_amount_due=total,
            due_date=due_date,
            created_at=max(due.created_at for due, _ in rows),
            rows=rows,
        ))
    assignments.sort(key=lambda a: a.created_at, reverse=True)
    return assignments[:limit] if limit else assignments


def group_stats(group):
    """
    Totals for the coordinator dashboard.  Collected money is every verified
    claim, overpayments included; outstanding is the sum of what members
    still owe.
    """
    User = get_user_model()
    rows = group_ledgers(group)
    return GroupStats(
        total_dues=len({_assignment_key(row) for row in rows}),
        total_students=User.objects.filter(group=group, role=User.Role.STUDENT, is_active=True).count(),
        total_amount_collected=money(sum((ledger.verified_total for _, ledger in rows), ZERO)),
        total_amount_outstanding=money(sum((ledger.remaining for _, ledger in rows), ZERO)),
        needs_reconciliation=sum(1 for _, ledger in rows if ledger.overpaid),
    )
