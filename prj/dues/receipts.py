"""
dues/receipts.py
────────────────
Receipt screenshots for GCash / Maya claims.

The claim only ever holds the opaque storage name returned here; bytes go
through Django's default storage backend (local disk in development, any
configured object store in production).
"""

import logging
import os
import uuid

from django.conf import settings
from django.core.files.storage import default_storage

logger = logging.getLogger(__name__)


def store_receipt(uploaded_file, owner, method):
    """
    Save *uploaded_file* and return its receipt_ref.

    Files land under <DUES_RECEIPT_UPLOAD_DIR>/<owner id>/<method>/ with a
    random name so two uploads never collide.
    """
    ext = os.path.splitext(uploaded_file.name or '')[1].lower() or '.jpg'
    name = '/'.join([
        settings.DUES_RECEIPT_UPLOAD_DIR.strip('/'),
        str(owner.pk),
        method,
        f'{uuid.uuid4().hex}{ext}',
    ])
    receipt_ref = default_storage.save(name, uploaded_file)
    logger.info('receipt stored for user %s (%s, %s bytes)', owner.pk, method, uploaded_file.size)
    return receipt_ref


def resolve_receipt(receipt_ref):
    """Displayable URL for *receipt_ref*, or None when there is no receipt."""
    if not receipt_ref:
        return None
    return default_storage.url(receipt_ref)


def discard_receipt(receipt_ref):
    """Remove a stored receipt whose claim was never created."""
    if receipt_ref and default_storage.exists(receipt_ref):
        default_storage.delete(receipt_ref)
