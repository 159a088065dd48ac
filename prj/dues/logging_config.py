"""
dues/logging_config.py
──────────────────────
Structured log output for the ledger and claim workflow.

Referenced from settings.LOGGING when LOG_FORMAT=json.  Receipt references
point at uploaded proof-of-payment images, so they are masked before a
record leaves the process.
"""

import json
import logging
import re

_RECEIPT_RE = re.compile(r'(receipts/)([^\s"\']+)')


def _mask_receipt_refs(value):
    if isinstance(value, str):
        return _RECEIPT_RE.sub(lambda m: m.group(1) + '[REDACTED]', value)
    if isinstance(value, dict):
        return {k: _mask_receipt_refs(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return type(value)(_mask_receipt_refs(v) for v in value)
    return value


class JsonFormatter(logging.Formatter):
    """One JSON object per line; merges the ``extra={'extra': {...}}`` payload."""

    def format(self, record):
        payload = {
            'level':   record.levelname,
            'time':    self.formatTime(record, datefmt='%Y-%m-%dT%H:%M:%S%z'),
            'logger':  record.name,
            'message': record.getMessage(),
        }
        if record.exc_info:
            payload['exc_info'] = self.formatException(record.exc_info)
        extra = getattr(record, 'extra', None)
        if isinstance(extra, dict):
            payload.update(extra)
        return json.dumps(_mask_receipt_refs(payload), ensure_ascii=False, default=str)
