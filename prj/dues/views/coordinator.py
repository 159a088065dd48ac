"""
dues/views/coordinator.py
─────────────────────────
Coordinator-only JSON endpoints: the pending-claims queue, verify / reject,
the group's dues overview and stats, creating a due for the whole group,
and a due's full claim history.

SECURITY: every lookup is scoped to the coordinator's own group via
req.user.group.  A claim or due of another group is reported as 404.
"""

from django.http import JsonResponse

from .. import claims as claim_store
from ..forms import DueForm, RejectClaimForm
from ..ledger import compute_ledger
from ..services import (
    create_group_due,
    get_due,
    get_due_summary,
    group_stats,
    list_group_dues,
    reject_claim,
    verify_claim,
)
from .utils import (
    coordinator_required,
    form_error_response,
    handle_dues_errors,
    method_not_allowed,
    require_POST_or_405,
    serialize_claim,
    serialize_due,
)


def _decision_payload(result, message):
    return {
        'message':     message,
        'claim':       serialize_claim(result.claim),
        'due':         serialize_due(result.due, result.ledger),
        'overpayment': result.overpayment.as_dict() if result.overpayment else None,
    }


# ── Pending queue ─────────────────────────────────────────────────────────────

@coordinator_required
def pending_claims_view(req):
    """Every pending claim in the coordinator's group, oldest first."""
    pending = claim_store.list_pending_by_group(req.user.group)
    rows = []
    for claim in pending:
        row = serialize_claim(claim)
        row['due_title'] = claim.due.title
        rows.append(row)
    return JsonResponse({'claims': rows})


@coordinator_required
@handle_dues_errors
def due_pending_claims_view(req, due_id):
    due = get_due(due_id, group=req.user.group)
    return JsonResponse({
        'due_id': due.pk,
        'claims': [serialize_claim(c) for c in claim_store.list_pending_by_due(due.pk)],
    })


# ── Decisions ─────────────────────────────────────────────────────────────────

@coordinator_required
@require_POST_or_405
@handle_dues_errors
def verify_claim_view(req, claim_id):
    result = verify_claim(claim_id, req.user, group=req.user.group)
    return JsonResponse(_decision_payload(result, 'Payment verified'))


@coordinator_required
@require_POST_or_405
@handle_dues_errors
def reject_claim_view(req, claim_id):
    form = RejectClaimForm(req.POST)
    if not form.is_valid():
        return form_error_response(form)
    result = reject_claim(claim_id, req.user, note=form.cleaned_data['note'], group=req.user.group)
    return JsonResponse(_decision_payload(result, 'Payment rejected'))


# ── Dues ──────────────────────────────────────────────────────────────────────

def _serialize_assignment(assignment):
    return {
        'title':              assignment.title,
        'description':        assignment.description,
        'total_amount_due':   str(assignment.total_amount_due),
        'due_date':           assignment.due_date.isoformat() if assignment.due_date else None,
        'created_at':         assignment.created_at.isoformat(),
        'members':            len(assignment.rows),
        'status_summary':     assignment.status_summary,
        'amount_collected':   str(assignment.amount_collected),
        'amount_outstanding': str(assignment.amount_outstanding),
        'due_ids':            [due.pk for due, _ in assignment.rows],
    }


@coordinator_required
def group_dues_view(req):
    """
    GET  – the group's dues, newest first, each with a count of members per
           status (pending / partially_paid / paid / overdue).  ?limit=N
    POST – create a new due for every active student of the group.
    """
    if req.method == 'POST':
        return _create_due(req)
    if req.method != 'GET':
        return method_not_allowed('GET, POST')

    limit = req.GET.get('limit', '')
    assignments = list_group_dues(req.user.group, limit=int(limit) if limit.isdigit() else None)
    return JsonResponse({'dues': [_serialize_assignment(a) for a in assignments]})


@coordinator_required
def group_stats_view(req):
    return JsonResponse(group_stats(req.user.group).as_dict())


def _create_due(req):
    form = DueForm(req.POST)
    if not form.is_valid():
        return form_error_response(form)
    cd = form.cleaned_data
    dues = create_group_due(
        req.user.group,
        req.user,
        title=cd['title'],
        description=cd['description'],
        total_amount_due=cd['total_amount_due'],
        due_date=cd['due_date'],
        payment_method_restriction=cd['payment_method_restriction'],
    )
    return JsonResponse({
        'message': f'Due "{cd["title"]}" assigned to {len(dues)} students.',
        'dues':    [serialize_due(due, compute_ledger(due)) for due in dues],
    }, status=201)


@coordinator_required
@handle_dues_errors
def due_status_view(req, due_id):
    due, ledger, claims = get_due_summary(due_id, group=req.user.group)
    data = serialize_due(due, ledger)
    data['claims'] = [serialize_claim(c) for c in claims]
    return JsonResponse(data)
