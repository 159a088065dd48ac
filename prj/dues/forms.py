"""
dues/forms.py
─────────────
Input parsing for the claim and due endpoints.

The forms only coerce types and check the uploaded file; the payment rules
themselves live in dues/validation.py so every entry point shares them.
"""

from django import forms
from django.conf import settings

from .models import Due, PaymentClaim


class ClaimSubmissionForm(forms.Form):
    """
    Student form (multipart) to submit a payment claim against one due.
    """

    method = forms.ChoiceField(choices=PaymentClaim.Method.choices)
    payment_type = forms.ChoiceField(
        choices=PaymentClaim.PaymentType.choices,
        required=False,
    )
    amount = forms.DecimalField(
        max_digits=10, decimal_places=2, required=False,
        help_text='Required for partial payments; full payments default to the remaining balance.',
    )
    reference_id = forms.CharField(max_length=100, required=False, strip=True)
    receipt = forms.FileField(required=False)
    cash_confirmed = forms.BooleanField(required=False)

    def clean_payment_type(self):
        return self.cleaned_data.get('payment_type') or PaymentClaim.PaymentType.FULL

    def clean_receipt(self):
        f = self.cleaned_data.get('receipt')
        if not f:
            return None
        content_type = getattr(f, 'content_type', '') or ''
        if not content_type.startswith('image/'):
            raise forms.ValidationError('Only image files are allowed.')
        if f.size > settings.DUES_RECEIPT_MAX_BYTES:
            limit_mb = settings.DUES_RECEIPT_MAX_BYTES // (1024 * 1024)
            raise forms.ValidationError(f'File too large (max {limit_mb}MB).')
        return f


class RejectClaimForm(forms.Form):
    note = forms.CharField(required=False, strip=True, max_length=1000)


class DueForm(forms.ModelForm):
    """Coordinator form to create a due for the whole group."""

    class Meta:
        model  = Due
        fields = ['title', 'description', 'total_amount_due', 'due_date', 'payment_method_restriction']

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['due_date'].input_formats = ['%Y-%m-%d']
        self.fields['payment_method_restriction'].required = False

    def clean_payment_method_restriction(self):
        return self.cleaned_data.get('payment_method_restriction') or Due.MethodRestriction.ALL
