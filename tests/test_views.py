from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from django.core.files.storage import default_storage
from django.test import Client

from dues.models import Due, PaymentClaim

pytestmark = pytest.mark.django_db


@pytest.fixture
def student_client(client, student):
    client.force_login(student)
    return client


@pytest.fixture
def coordinator_client(client, coordinator):
    client.force_login(coordinator)
    return client


def _submit_url(due):
    return f'/api/dues/{due.pk}/claims/'


# ── Auth ──────────────────────────────────────────────────────────────────────

def test_login_and_me(client, student) -> None:
    resp = client.post('/api/auth/login/', {'username': 'maria', 'password': 'wrong'})
    assert resp.status_code == 401

    resp = client.post('/api/auth/login/', {'username': 'maria', 'password': 's3cret-pass'})
    assert resp.status_code == 200
    assert resp.json()['user']['role'] == 'student'

    me = client.get('/api/auth/me/').json()['user']
    assert me['id'] == student.pk
    assert me['group_id'] == student.group_id

    assert client.post('/api/auth/logout/').status_code == 200
    assert client.get('/api/auth/me/').status_code == 401


def test_anonymous_gets_401(client, due) -> None:
    assert client.get('/api/dues/').status_code == 401
    assert client.post(_submit_url(due), {'method': 'cash'}).status_code == 401
    assert client.get('/api/coordinator/claims/pending/').status_code == 401


# ── Student ───────────────────────────────────────────────────────────────────

def test_my_dues_lists_only_own(student_client, make_due, other_student) -> None:
    mine = make_due()
    make_due(owner=other_student)

    rows = student_client.get('/api/dues/').json()['dues']
    assert [row['id'] for row in rows] == [mine.pk]
    assert rows[0]['remaining'] == '1000.00'
    assert rows[0]['status'] == 'pending'


def test_other_members_due_is_404(student_client, make_due, other_student) -> None:
    theirs = make_due(owner=other_student)
    assert student_client.get(f'/api/dues/{theirs.pk}/').status_code == 404
    resp = student_client.post(_submit_url(theirs), {'method': 'cash', 'cash_confirmed': 'on'})
    assert resp.status_code == 404
    assert not PaymentClaim.objects.exists()


def test_submit_cash_claim(student_client, due) -> None:
    resp = student_client.post(_submit_url(due), {
        'method': 'cash', 'payment_type': 'partial', 'amount': '250', 'cash_confirmed': 'on',
    })
    assert resp.status_code == 201
    claim = resp.json()['claim']
    assert claim['status'] == 'pending'
    assert claim['amount'] == '250.00'
    assert claim['receipt_url'] is None


def test_submit_full_claim_without_amount(student_client, due) -> None:
    resp = student_client.post(_submit_url(due), {'method': 'cash', 'cash_confirmed': 'on'})
    assert resp.status_code == 201
    assert resp.json()['claim']['amount'] == '1000.00'
    assert resp.json()['claim']['payment_type'] == 'full'


def test_submit_gcash_claim_stores_receipt(student_client, due, receipt_file) -> None:
    resp = student_client.post(_submit_url(due), {
        'method': 'gcash',
        'payment_type': 'full',
        'reference_id': '1029384756',
        'receipt': receipt_file(),
    })
    assert resp.status_code == 201
    claim = PaymentClaim.objects.get()
    assert claim.receipt_ref.startswith('receipts/')
    assert default_storage.exists(claim.receipt_ref)
    assert resp.json()['claim']['receipt_url']


def test_gcash_without_reference_is_400(student_client, due, receipt_file) -> None:
    resp = student_client.post(_submit_url(due), {'method': 'gcash', 'receipt': receipt_file()})
    assert resp.status_code == 400
    assert resp.json()['code'] == 'missing_proof'
    assert resp.json()['field'] == 'reference_id'
    assert not PaymentClaim.objects.exists()


def test_cash_without_confirmation_is_400(student_client, due) -> None:
    resp = student_client.post(_submit_url(due), {'method': 'cash', 'amount': '1000'})
    assert resp.status_code == 400
    assert resp.json()['code'] == 'confirmation_required'


def test_non_image_receipt_is_400(student_client, due, receipt_file) -> None:
    resp = student_client.post(_submit_url(due), {
        'method': 'maya',
        'reference_id': 'MAYA-1',
        'receipt': receipt_file(name='receipt.pdf', content_type='application/pdf'),
    })
    assert resp.status_code == 400
    assert resp.json()['field'] == 'receipt'


def test_oversized_receipt_is_400(student_client, due, receipt_file, settings) -> None:
    settings.DUES_RECEIPT_MAX_BYTES = 64
    resp = student_client.post(_submit_url(due), {
        'method': 'gcash', 'reference_id': 'X1', 'receipt': receipt_file(size=256),
    })
    assert resp.status_code == 400
    assert resp.json()['field'] == 'receipt'


def test_restricted_method_is_400(student_client, make_due) -> None:
    cash_only = make_due(restriction=Due.MethodRestriction.CASH_ONLY)
    resp = student_client.post(_submit_url(cash_only), {'method': 'gcash', 'reference_id': 'X'})
    assert resp.status_code == 400
    assert resp.json()['code'] == 'method_not_allowed'


def test_submit_requires_post(student_client, due) -> None:
    resp = student_client.get(_submit_url(due))
    assert resp.status_code == 405
    assert resp['Allow'] == 'POST'


# ── Coordinator ───────────────────────────────────────────────────────────────

def test_student_cannot_reach_coordinator_endpoints(student_client, submit_cash, due) -> None:
    claim = submit_cash(due, '100')
    assert student_client.get('/api/coordinator/claims/pending/').status_code == 403
    assert student_client.post(f'/api/coordinator/claims/{claim.pk}/verify/').status_code == 403


def test_pending_queue(coordinator_client, submit_cash, due) -> None:
    claim = submit_cash(due, '100')
    rows = coordinator_client.get('/api/coordinator/claims/pending/').json()['claims']
    assert [row['id'] for row in rows] == [claim.pk]
    assert rows[0]['due_title'] == due.title

    rows = coordinator_client.get(f'/api/coordinator/dues/{due.pk}/claims/pending/').json()['claims']
    assert [row['id'] for row in rows] == [claim.pk]


def test_verify_then_conflict(coordinator_client, submit_cash, due) -> None:
    claim = submit_cash(due, '400')
    url = f'/api/coordinator/claims/{claim.pk}/verify/'

    resp = coordinator_client.post(url)
    assert resp.status_code == 200
    body = resp.json()
    assert body['claim']['status'] == 'verified'
    assert body['due']['amount_paid'] == '400.00'
    assert body['due']['remaining'] == '600.00'
    assert body['overpayment'] is None

    resp = coordinator_client.post(url)
    assert resp.status_code == 409
    assert resp.json()['code'] == 'already_decided'
    assert resp.json()['current_status'] == 'verified'


def test_verify_reports_overpayment(coordinator_client, submit_cash, due) -> None:
    a = submit_cash(due, '400')
    b = submit_cash(due, '700')
    coordinator_client.post(f'/api/coordinator/claims/{a.pk}/verify/')

    body = coordinator_client.post(f'/api/coordinator/claims/{b.pk}/verify/').json()
    assert body['due']['status'] == 'paid'
    assert body['due']['needs_reconciliation'] is True
    assert body['overpayment']['overpaid_amount'] == '100.00'


def test_reject_with_note(coordinator_client, submit_cash, due) -> None:
    claim = submit_cash(due, '400')
    resp = coordinator_client.post(
        f'/api/coordinator/claims/{claim.pk}/reject/', {'note': 'No matching GCash transfer'},
    )
    assert resp.status_code == 200
    assert resp.json()['claim']['note'] == 'No matching GCash transfer'
    assert resp.json()['due']['amount_paid'] == '0.00'


def test_outside_coordinator_gets_404(client, outside_coordinator, submit_cash, due) -> None:
    claim = submit_cash(due, '400')
    client.force_login(outside_coordinator)

    assert client.post(f'/api/coordinator/claims/{claim.pk}/verify/').status_code == 404
    assert client.get(f'/api/coordinator/dues/{due.pk}/').status_code == 404
    assert client.get('/api/coordinator/claims/pending/').json()['claims'] == []

    claim.refresh_from_db()
    assert claim.status == PaymentClaim.Status.PENDING


def test_create_due_for_group(coordinator_client, student, other_student, group) -> None:
    resp = coordinator_client.post('/api/coordinator/dues/', {
        'title': 'Field Trip',
        'total_amount_due': '350.00',
        'due_date': '2026-12-01',
        'payment_method_restriction': 'online_only',
    })
    assert resp.status_code == 201
    dues = Due.objects.filter(title='Field Trip')
    # Coordinators are members too but are not billed
    assert {d.owner_id for d in dues} == {student.pk, other_student.pk}
    assert all(d.total_amount_due == Decimal('350.00') for d in dues)
    assert all(d.group == group for d in dues)


def test_create_due_rejects_bad_total(coordinator_client, student) -> None:
    resp = coordinator_client.post('/api/coordinator/dues/', {'title': 'Oops', 'total_amount_due': '0'})
    assert resp.status_code == 400
    assert resp.json()['field'] == 'total_amount_due'


def test_due_status_shows_history(coordinator_client, submit_cash, coordinator, due) -> None:
    from dues.services import reject_claim, verify_claim

    verify_claim(submit_cash(due, '300').pk, coordinator)
    reject_claim(submit_cash(due, '200').pk, coordinator, note='duplicate')
    submit_cash(due, '100')

    body = coordinator_client.get(f'/api/coordinator/dues/{due.pk}/').json()
    assert body['amount_paid'] == '300.00'
    assert [c['status'] for c in body['claims']] == ['verified', 'rejected', 'pending']


def test_group_dues_overview(coordinator_client, student, other_student, group, coordinator) -> None:
    from dues.services import create_group_due, submit_claim, verify_claim

    shirts = create_group_due(group, coordinator, title='Org Shirt', total_amount_due='350')
    create_group_due(group, coordinator, title='Field Trip', total_amount_due='500',
                     due_date=date(2020, 1, 1))
    by_owner = {d.owner_id: d for d in shirts}
    for owner, amount, kind in [(student, '350', 'full'), (other_student, '100', 'partial')]:
        claim = submit_claim(by_owner[owner.pk], owner, method='cash', amount=Decimal(amount),
                             payment_type=kind, cash_confirmed=True)
        verify_claim(claim.pk, coordinator)

    rows = coordinator_client.get('/api/coordinator/dues/').json()['dues']
    assert [r['title'] for r in rows] == ['Field Trip', 'Org Shirt']

    trip, shirt = rows
    assert trip['members'] == 2
    assert trip['status_summary'] == {'pending': 0, 'partially_paid': 0, 'paid': 0, 'overdue': 2}
    assert shirt['status_summary'] == {'pending': 0, 'partially_paid': 1, 'paid': 1, 'overdue': 0}
    assert shirt['amount_collected'] == '450.00'
    assert shirt['amount_outstanding'] == '250.00'
    assert sorted(shirt['due_ids']) == sorted(d.pk for d in shirts)

    limited = coordinator_client.get('/api/coordinator/dues/?limit=1').json()['dues']
    assert [r['title'] for r in limited] == ['Field Trip']


def test_group_stats(coordinator_client, student, other_student, group, coordinator) -> None:
    from dues.services import create_group_due, submit_claim, verify_claim

    dues = create_group_due(group, coordinator, title='Org Shirt', total_amount_due='350')
    claim = submit_claim(dues[0], dues[0].owner, method='cash', amount=Decimal('200'),
                         payment_type='partial', cash_confirmed=True)
    verify_claim(claim.pk, coordinator)
    # Pending claims are neither collected nor deducted
    submit_claim(dues[1], dues[1].owner, method='cash', amount=Decimal('350'),
                 payment_type='full', cash_confirmed=True)

    stats = coordinator_client.get('/api/coordinator/stats/').json()
    assert stats == {
        'total_dues': 1,
        'total_students': 2,
        'total_amount_collected': '200.00',
        'total_amount_outstanding': '500.00',
        'needs_reconciliation': 0,
    }


def test_group_overview_is_scoped(client, outside_coordinator, due, student) -> None:
    client.force_login(outside_coordinator)
    assert client.get('/api/coordinator/dues/').json()['dues'] == []
    assert client.get('/api/coordinator/stats/').json()['total_students'] == 0

    client.force_login(student)
    assert client.get('/api/coordinator/dues/').status_code == 403


def test_group_dues_rejects_other_verbs(coordinator_client) -> None:
    resp = coordinator_client.put('/api/coordinator/dues/')
    assert resp.status_code == 405
    assert resp['Allow'] == 'GET, POST'


# ── CSRF ──────────────────────────────────────────────────────────────────────

def test_csrf_cookie_flow(student, due) -> None:
    browser = Client(enforce_csrf_checks=True)

    resp = browser.post('/api/auth/login/', {'username': 'maria', 'password': 's3cret-pass'})
    assert resp.status_code == 403
    assert resp.json()['code'] == 'csrf_failed'

    assert browser.get('/api/auth/csrf/').status_code == 200
    resp = browser.post(
        '/api/auth/login/',
        {'username': 'maria', 'password': 's3cret-pass'},
        HTTP_X_CSRFTOKEN=browser.cookies['csrftoken'].value,
    )
    assert resp.status_code == 200

    # Login rotates the token
    resp = browser.post(
        _submit_url(due),
        {'method': 'cash', 'cash_confirmed': 'on'},
        HTTP_X_CSRFTOKEN=browser.cookies['csrftoken'].value,
    )
    assert resp.status_code == 201


def test_me_sets_csrf_cookie_even_when_anonymous() -> None:
    browser = Client(enforce_csrf_checks=True)
    assert browser.get('/api/auth/me/').status_code == 401
    assert browser.cookies['csrftoken'].value
