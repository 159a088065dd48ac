"""
dues/exceptions.py
──────────────────
Typed errors raised by the claim workflow.  Views map them to HTTP status
codes in dues/views/utils.py.

    DuesError
    ├── ClaimValidationError   400  submitter can fix the input
    ├── NotFoundError          404  unknown due / claim id
    ├── ConflictError          409  claim was already decided
    └── LedgerDriftError       500  stored snapshot disagrees with the claims

OverpaymentSignal is not an error: it rides along with a successful
verification.
"""

from dataclasses import dataclass
from decimal import Decimal


class DuesError(Exception):
    code = 'error'
    status_code = 500

    def __init__(self, message, code=None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def as_dict(self):
        return {'error': self.message, 'code': self.code}


class ClaimValidationError(DuesError):
    """A submission broke one of the method / proof / amount rules."""

    status_code = 400

    METHOD_NOT_ALLOWED    = 'method_not_allowed'
    MISSING_PROOF         = 'missing_proof'
    CONFIRMATION_REQUIRED = 'confirmation_required'
    INVALID_AMOUNT        = 'invalid_amount'
    ALREADY_SETTLED       = 'already_settled'

    def __init__(self, code, message, field=None):
        super().__init__(message, code=code)
        self.field = field

    def as_dict(self):
        data = super().as_dict()
        if self.field:
            data['field'] = self.field
        return data


class NotFoundError(DuesError):
    status_code = 404
    code = 'not_found'


class ConflictError(DuesError):
    """Raised when a decision races another one on the same claim."""

    status_code = 409
    ALREADY_DECIDED = 'already_decided'

    def __init__(self, claim_id, current_status):
        super().__init__(
            f'Payment claim {claim_id} was already {current_status}.',
            code=self.ALREADY_DECIDED,
        )
        self.claim_id = claim_id
        self.current_status = current_status

    def as_dict(self):
        data = super().as_dict()
        data['current_status'] = self.current_status
        return data


class LedgerDriftError(DuesError):
    code = 'ledger_drift'

    def __init__(self, due_id, drift):
        fields = ', '.join(
            f'{name} stored={stored} derived={derived}'
            for name, (stored, derived) in sorted(drift.items())
        )
        super().__init__(f'Ledger drift on due {due_id}: {fields}')
        self.due_id = due_id
        self.drift = drift


@dataclass(frozen=True)
class OverpaymentSignal:
    """Verified claims on a due add up to more than the due total."""

    due_id: int
    claim_id: int
    overpaid_amount: Decimal

    def as_dict(self):
        return {
            'due_id':          self.due_id,
            'claim_id':        self.claim_id,
            'overpaid_amount': str(self.overpaid_amount),
            'message':         'Verified payments exceed the amount due; reconcile manually.',
        }
