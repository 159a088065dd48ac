"""
dues/models.py
──────────────
The payment-claim ledger.

Due          – what one member owes, e.g. "Org Shirt – 350 PHP".
PaymentClaim – one submission attempt against a Due (GCash / Maya / cash),
               waiting for a coordinator to verify or reject it.

A Due's amount_paid / overpaid_amount / last_payment_at columns are a
snapshot written only by dues.ledger.recompute_ledger().  Nothing else may
assign them; the truth is always the set of verified claims.
"""

from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from .ledger import derive_status, money


class Due(models.Model):
    """
    A single member's obligation inside a StudentGroup.
    """

    class MethodRestriction(models.TextChoices):
        ALL         = 'all',         'Any method'
        ONLINE_ONLY = 'online_only', 'GCash / Maya only'
        CASH_ONLY   = 'cash_only',   'Cash only'

    class Status(models.TextChoices):
        PENDING        = 'pending',        'Pending'
        PARTIALLY_PAID = 'partially_paid', 'Partially paid'
        PAID           = 'paid',           'Paid'
        OVERDUE        = 'overdue',        'Overdue'

    group = models.ForeignKey(
        'accounts.StudentGroup',
        on_delete=models.CASCADE,
        related_name='dues',
        help_text='The group this due belongs to.',
    )
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='dues',
        help_text='Member who owes this amount.',
    )
    title = models.CharField(
        max_length=200,
        help_text='Short description of what the due is for.',
    )
    description = models.TextField(blank=True)
    total_amount_due = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))],
    )
    payment_method_restriction = models.CharField(
        max_length=20,
        choices=MethodRestriction.choices,
        default=MethodRestriction.ALL,
    )
    due_date = models.DateField(
        null=True,
        blank=True,
        help_text='Optional deadline; unpaid dues past it show as overdue.',
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='created_dues',
    )
    created_at = models.DateTimeField(default=timezone.now)

    # Ledger snapshot (see dues.ledger)
    amount_paid = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal('0.00'), editable=False,
    )
    overpaid_amount = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal('0.00'), editable=False,
        help_text='Verified money above the total; needs manual reconciliation.',
    )
    last_payment_at = models.DateTimeField(null=True, blank=True, editable=False)

    class Meta:
        ordering = ['due_date', '-created_at']
        verbose_name = 'Due'
        verbose_name_plural = 'Dues'

    def __str__(self):
        return f"{self.title} – {self.total_amount_due} ({self.owner})"

    @property
    def remaining(self):
        return max(money(self.total_amount_due) - money(self.amount_paid), Decimal('0.00'))

    @property
    def status(self):
        return derive_status(self.total_amount_due, self.amount_paid, self.due_date, timezone.now())

    @property
    def needs_reconciliation(self):
        return self.overpaid_amount > 0

    def permits(self, method):
        """True when *method* is allowed by this due's method restriction."""
        if self.payment_method_restriction == self.MethodRestriction.ONLINE_ONLY:
            return method in PaymentClaim.ONLINE_METHODS
        if self.payment_method_restriction == self.MethodRestriction.CASH_ONLY:
            return method == PaymentClaim.Method.CASH
        return True


class PaymentClaim(models.Model):
    """
    A student's claim that they paid (part of) a Due.

    Starts PENDING; a coordinator moves it exactly once to VERIFIED or
    REJECTED.  Decided claims are never edited or deleted; a corrected
    payment is a new claim.
    """

    class Method(models.TextChoices):
        GCASH = 'gcash', 'GCash'
        MAYA  = 'maya',  'Maya'
        CASH  = 'cash',  'Cash'

    class PaymentType(models.TextChoices):
        FULL    = 'full',    'Full payment'
        PARTIAL = 'partial', 'Partial payment'

    class Status(models.TextChoices):
        PENDING  = 'pending',  'Pending verification'
        VERIFIED = 'verified', 'Verified'
        REJECTED = 'rejected', 'Rejected'

    ONLINE_METHODS = (Method.GCASH, Method.MAYA)

    due = models.ForeignKey(
        Due,
        on_delete=models.PROTECT,
        related_name='claims',
    )
    submitter = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='payment_claims',
    )
    amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))],
    )
    method = models.CharField(max_length=10, choices=Method.choices)
    payment_type = models.CharField(
        max_length=10,
        choices=PaymentType.choices,
        default=PaymentType.FULL,
    )
    reference_id = models.CharField(
        max_length=100,
        blank=True,
        help_text='GCash / Maya transaction reference number.',
    )
    receipt_ref = models.CharField(
        max_length=255,
        blank=True,
        help_text='Storage path of the uploaded receipt screenshot.',
    )
    cash_confirmed = models.BooleanField(
        default=False,
        help_text='Submitter confirmed they handed over cash.',
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
    )
    created_at = models.DateTimeField(default=timezone.now)
    decided_at = models.DateTimeField(null=True, blank=True)
    decided_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='decided_claims',
    )
    decision_note = models.TextField(blank=True)

    class Meta:
        ordering = ['created_at', 'pk']
        verbose_name = 'Payment Claim'
        verbose_name_plural = 'Payment Claims'
        indexes = [
            models.Index(fields=['due', 'status'], name='dues_claim_due_status_idx'),
        ]

    def __str__(self):
        return (
            f"{self.submitter} → {self.due.title} "
            f"({self.amount}, {self.get_method_display()}, {self.get_status_display()})"
        )

    @property
    def is_decided(self):
        return self.status != self.Status.PENDING
