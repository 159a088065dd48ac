"""
dues/views/utils.py
───────────────────
Shared helpers used by both student and coordinator view modules.
Nothing here imports from other view modules (no circular imports).
"""

import logging
from functools import wraps

from django.http import JsonResponse

from ..exceptions import DuesError
from ..receipts import resolve_receipt

logger = logging.getLogger(__name__)


# ── Access control ────────────────────────────────────────────────────────────

def api_login_required(view_fn):
    """Decorator: anonymous callers get a 401 JSON body instead of a redirect."""
    @wraps(view_fn)
    def wrapper(req, *args, **kwargs):
        if not req.user.is_authenticated:
            return JsonResponse({'error': 'Please authenticate.', 'code': 'unauthenticated'}, status=401)
        return view_fn(req, *args, **kwargs)
    return wrapper


def coordinator_required(view_fn):
    """
    Decorator: unauthenticated users → 401, non-coordinators → 403.
    Coordinators without a group are treated like non-coordinators.
    """
    @wraps(view_fn)
    def wrapper(req, *args, **kwargs):
        if not req.user.is_authenticated:
            return JsonResponse({'error': 'Please authenticate.', 'code': 'unauthenticated'}, status=401)
        if not req.user.is_coordinator or req.user.group_id is None:
            logger.warning(
                'user %s (%s) denied coordinator access to %s',
                req.user.pk, req.user.role, req.path,
            )
            return JsonResponse(
                {'error': 'Access denied. Finance Coordinator role required.', 'code': 'forbidden'},
                status=403,
            )
        return view_fn(req, *args, **kwargs)
    return wrapper


def require_POST_or_405(view_fn):
    """Decorator: return 405 for any non-POST request."""
    @wraps(view_fn)
    def wrapper(req, *args, **kwargs):
        if req.method != 'POST':
            return method_not_allowed('POST')
        return view_fn(req, *args, **kwargs)
    return wrapper


def handle_dues_errors(view_fn):
    """Decorator: translate DuesError subclasses into JSON error responses."""
    @wraps(view_fn)
    def wrapper(req, *args, **kwargs):
        try:
            return view_fn(req, *args, **kwargs)
        except DuesError as exc:
            return error_response(exc)
    return wrapper


# ── Responses ─────────────────────────────────────────────────────────────────

def method_not_allowed(allow):
    return JsonResponse({'error': 'Method not allowed.', 'code': 'method_not_allowed'},
                        status=405, headers={'Allow': allow})


def error_response(exc):
    return JsonResponse(exc.as_dict(), status=exc.status_code)


def form_error_response(form):
    """400 with the first error per field, matching ClaimValidationError's shape."""
    errors = {field: [str(e) for e in errs] for field, errs in form.errors.items()}
    field, messages = next(iter(errors.items()))
    return JsonResponse(
        {'error': messages[0], 'code': 'invalid_input', 'field': field, 'errors': errors},
        status=400,
    )


# ── Serialisation ─────────────────────────────────────────────────────────────

def user_label(user):
    if user is None:
        return None
    return user.get_full_name() or user.username


def serialize_claim(claim, include_receipt=True):
    data = {
        'id':            claim.pk,
        'due_id':        claim.due_id,
        'submitter_id':  claim.submitter_id,
        'submitter':     user_label(claim.submitter),
        'amount':        str(claim.amount),
        'method':        claim.method,
        'payment_type':  claim.payment_type,
        'reference_id':  claim.reference_id or None,
        'status':        claim.status,
        'created_at':    claim.created_at.isoformat(),
        'decided_at':    claim.decided_at.isoformat() if claim.decided_at else None,
        'decided_by_id': claim.decided_by_id,
        'note':          claim.decision_note or None,
    }
    if include_receipt:
        data['receipt_url'] = resolve_receipt(claim.receipt_ref)
    return data


def serialize_due(due, ledger):
    data = {
        'id':                         due.pk,
        'title':                      due.title,
        'description':                due.description,
        'owner_id':                   due.owner_id,
        'owner':                      user_label(due.owner),
        'group_id':                   due.group_id,
        'total_amount_due':           str(due.total_amount_due),
        'payment_method_restriction': due.payment_method_restriction,
        'due_date':                   due.due_date.isoformat() if due.due_date else None,
        'needs_reconciliation':       ledger.overpaid,
    }
    data.update(ledger.as_dict())
    return data
