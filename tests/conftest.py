from __future__ import annotations

from decimal import Decimal

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile


@pytest.fixture(scope='session')
def django_db_modify_db_settings(django_db_modify_db_settings_parallel_suffix, tmp_path_factory):
    from django.conf import settings

    db = settings.DATABASES['default']
    if db['ENGINE'] == 'django.db.backends.sqlite3':
        # A file database, so threads in one test wait on BEGIN IMMEDIATE
        # rather than hitting shared-cache table locks of the memory database
        db.setdefault('TEST', {})['NAME'] = str(tmp_path_factory.mktemp('sqlite') / 'test.sqlite3')


@pytest.fixture(autouse=True)
def in_memory_receipts(settings):
    # Receipts never touch the disk during tests
    settings.STORAGES = {
        'default': {'BACKEND': 'django.core.files.storage.InMemoryStorage'},
        'staticfiles': {'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage'},
    }


@pytest.fixture
def group(db):
    from accounts.models import StudentGroup
    return StudentGroup.objects.create(name='BSCS 3-A', join_code='CS3A')


@pytest.fixture
def other_group(db):
    from accounts.models import StudentGroup
    return StudentGroup.objects.create(name='BSIT 2-B', join_code='IT2B')


@pytest.fixture
def make_user(db):
    from accounts.models import User

    def _make(username, role=User.Role.STUDENT, group=None):
        return User.objects.create_user(
            username=username,
            password='s3cret-pass',
            first_name=username.capitalize(),
            role=role,
            group=group,
        )
    return _make


@pytest.fixture
def student(make_user, group):
    return make_user('maria', group=group)


@pytest.fixture
def other_student(make_user, group):
    return make_user('jose', group=group)


@pytest.fixture
def coordinator(make_user, group):
    from accounts.models import User
    return make_user('fc_ana', role=User.Role.FINANCE_COORDINATOR, group=group)


@pytest.fixture
def outside_coordinator(make_user, other_group):
    from accounts.models import User
    return make_user('fc_ben', role=User.Role.FINANCE_COORDINATOR, group=other_group)


@pytest.fixture
def make_due(group, student):
    from dues.models import Due

    def _make(total='1000.00', restriction=Due.MethodRestriction.ALL, owner=None, due_date=None,
              title='Org Shirt'):
        return Due.objects.create(
            group=group,
            owner=owner or student,
            title=title,
            total_amount_due=Decimal(total),
            payment_method_restriction=restriction,
            due_date=due_date,
        )
    return _make


@pytest.fixture
def due(make_due):
    return make_due()


@pytest.fixture
def submit_cash(student):
    """Submit a confirmed cash claim through the service layer."""
    from dues.services import submit_claim

    def _submit(due, amount, payment_type='partial', submitter=None):
        return submit_claim(
            due,
            submitter or student,
            method='cash',
            amount=Decimal(amount),
            payment_type=payment_type,
            cash_confirmed=True,
        )
    return _submit


@pytest.fixture
def receipt_file():
    def _make(name='receipt.png', content_type='image/png', size=128):
        return SimpleUploadedFile(name, b'\x89PNG' + b'0' * size, content_type=content_type)
    return _make
