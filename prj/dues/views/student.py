"""
dues/views/student.py
─────────────────────
Student-facing JSON endpoints: list my dues, one due's summary, and
submitting a payment claim.

Every lookup is scoped to owner=req.user; another member's due is a 404.
"""

from django.http import JsonResponse

from ..exceptions import DuesError
from ..forms import ClaimSubmissionForm
from ..ledger import compute_ledger
from ..models import Due, PaymentClaim
from ..receipts import discard_receipt, store_receipt
from ..services import get_due, get_due_summary, submit_claim
from .utils import (
    api_login_required,
    error_response,
    form_error_response,
    handle_dues_errors,
    require_POST_or_405,
    serialize_claim,
    serialize_due,
)


@api_login_required
def my_dues_view(req):
    """All dues owed by the current user, each with its derived ledger."""
    dues = (
        Due.objects
        .filter(owner=req.user)
        .select_related('owner')
        .order_by('due_date', '-created_at')
    )
    return JsonResponse({
        'dues': [serialize_due(due, compute_ledger(due)) for due in dues],
    })


@api_login_required
@handle_dues_errors
def due_detail_view(req, due_id):
    due, ledger, claims = get_due_summary(due_id, owner=req.user)
    data = serialize_due(due, ledger)
    data['claims'] = [serialize_claim(c) for c in claims]
    return JsonResponse(data)


@api_login_required
@require_POST_or_405
@handle_dues_errors
def submit_claim_view(req, due_id):
    """
    POST (multipart): method, payment_type, amount, reference_id, receipt,
    cash_confirmed.  The receipt is stored only once the form parses, and
    removed again if the claim is refused.
    """
    due = get_due(due_id, owner=req.user)

    form = ClaimSubmissionForm(req.POST, req.FILES)
    if not form.is_valid():
        return form_error_response(form)
    cd = form.cleaned_data

    receipt_ref = ''
    if cd['receipt'] is not None and cd['method'] in PaymentClaim.ONLINE_METHODS:
        receipt_ref = store_receipt(cd['receipt'], req.user, cd['method'])

    try:
        claim = submit_claim(
            due,
            req.user,
            method=cd['method'],
            amount=cd['amount'],
            payment_type=cd['payment_type'],
            reference_id=cd['reference_id'],
            receipt_ref=receipt_ref,
            cash_confirmed=cd['cash_confirmed'],
        )
    except DuesError as exc:
        discard_receipt(receipt_ref)
        return error_response(exc)

    return JsonResponse({
        'message': 'Payment submitted successfully',
        'claim':   serialize_claim(claim),
    }, status=201)
