"""
dues/validation.py
──────────────────
Submission rules for a payment claim.

validate_claim() is a pure check against a snapshot of the due: it reads
nothing, writes nothing, and either returns a ValidatedClaimRequest or
raises ClaimValidationError.  Two students racing on one due may both pass
here; overshoot is settled at verification time.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from .exceptions import ClaimValidationError
from .ledger import money
from .models import Due, PaymentClaim


@dataclass(frozen=True)
class ValidatedClaimRequest:
    due: Due
    submitter: object
    method: str
    amount: Decimal
    payment_type: str
    reference_id: str = ''
    receipt_ref: str = ''
    cash_confirmed: bool = False


def _parse_amount(raw):
    if raw is None or raw == '':
        return None
    try:
        return money(raw)
    except (InvalidOperation, ValueError, TypeError):
        raise ClaimValidationError(
            ClaimValidationError.INVALID_AMOUNT, 'Amount must be a number.', field='amount',
        )


def validate_claim(due, submitter, *, method, amount=None,
                   payment_type=PaymentClaim.PaymentType.FULL,
                   reference_id='', receipt_ref='', cash_confirmed=False,
                   remaining=None):
    """
    Check a claim request against *due*.

    *remaining* is the balance the submitter saw; defaults to the due's
    stored ledger snapshot.  Rules are applied in this order:

      1. method permitted by the due's restriction    → method_not_allowed
      2. GCash / Maya need reference id and receipt   → missing_proof
      3. cash needs the submitter's confirmation      → confirmation_required
      4. nothing left to pay                          → already_settled
      5. amount bounds (full == remaining,
         0 < partial < remaining)                     → invalid_amount
    """
    if method not in PaymentClaim.Method.values:
        raise ClaimValidationError(
            ClaimValidationError.METHOD_NOT_ALLOWED,
            f'Unknown payment method "{method}".',
            field='method',
        )
    if not due.permits(method):
        raise ClaimValidationError(
            ClaimValidationError.METHOD_NOT_ALLOWED,
            f'{PaymentClaim.Method(method).label} is not accepted for this due '
            f'({due.get_payment_method_restriction_display()}).',
            field='method',
        )

    reference_id = (reference_id or '').strip()
    receipt_ref = (receipt_ref or '').strip()

    if method in PaymentClaim.ONLINE_METHODS:
        if not reference_id:
            raise ClaimValidationError(
                ClaimValidationError.MISSING_PROOF,
                'Reference ID is required.',
                field='reference_id',
            )
        if not receipt_ref:
            raise ClaimValidationError(
                ClaimValidationError.MISSING_PROOF,
                'Receipt screenshot is required.',
                field='receipt',
            )
    elif not cash_confirmed:
        raise ClaimValidationError(
            ClaimValidationError.CONFIRMATION_REQUIRED,
            'Please confirm you are submitting a cash payment.',
            field='cash_confirmed',
        )

    remaining = money(due.remaining if remaining is None else remaining)
    if remaining <= 0:
        raise ClaimValidationError(
            ClaimValidationError.ALREADY_SETTLED,
            'This due is already fully paid.',
        )

    value = _parse_amount(amount)
    if payment_type == PaymentClaim.PaymentType.FULL:
        if value is None:
            value = remaining
        if value != remaining:
            raise ClaimValidationError(
                ClaimValidationError.INVALID_AMOUNT,
                f'A full payment must equal the remaining balance ({remaining}).',
                field='amount',
            )
    elif payment_type == PaymentClaim.PaymentType.PARTIAL:
        if value is None or value <= 0 or value > remaining:
            raise ClaimValidationError(
                ClaimValidationError.INVALID_AMOUNT,
                f'Please enter a valid partial amount less than the remaining balance ({remaining}).',
                field='amount',
            )
        if value == remaining:
            payment_type = PaymentClaim.PaymentType.FULL
    else:
        raise ClaimValidationError(
            ClaimValidationError.INVALID_AMOUNT,
            f'Unknown payment type "{payment_type}".',
            field='payment_type',
        )

    return ValidatedClaimRequest(
        due=due,
        submitter=submitter,
        method=method,
        amount=value,
        payment_type=payment_type,
        reference_id=reference_id if method in PaymentClaim.ONLINE_METHODS else '',
        receipt_ref=receipt_ref if method in PaymentClaim.ONLINE_METHODS else '',
        cash_confirmed=bool(cash_confirmed) if method == PaymentClaim.Method.CASH else False,
    )
