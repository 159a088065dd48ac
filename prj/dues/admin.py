"""
dues/admin.py
─────────────
Admin registrations for Due and PaymentClaim.

Claims are an audit trail: the admin can read them but never edit or delete.
Decisions go through the coordinator endpoints so the ledger is recomputed.
Editing a Due here (e.g. its total) rebuilds its ledger snapshot on save.
"""

from django.contrib import admin
from django.db import transaction

from .ledger import recompute_ledger
from .models import Due, PaymentClaim


class PaymentClaimInline(admin.TabularInline):
    model           = PaymentClaim
    extra           = 0
    can_delete      = False
    fields          = ('submitter', 'amount', 'method', 'payment_type', 'reference_id', 'status', 'decided_by', 'decided_at')
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Due)
class DueAdmin(admin.ModelAdmin):
    list_display    = ('title', 'owner', 'group', 'total_amount_due', 'amount_paid', 'ledger_status',
                       'due_date', 'needs_reconciliation')
    list_filter     = ('group', 'payment_method_restriction', 'due_date')
    search_fields   = ('title', 'owner__username', 'owner__first_name', 'owner__last_name')
    readonly_fields = ('amount_paid', 'overpaid_amount', 'last_payment_at', 'created_at')
    raw_id_fields   = ('owner', 'created_by')
    inlines         = [PaymentClaimInline]

    fieldsets = (
        (None, {
            'fields': ('group', 'owner', 'title', 'description', 'total_amount_due', 'due_date',
                       'payment_method_restriction', 'created_by'),
        }),
        ('Ledger', {
            'fields': ('amount_paid', 'overpaid_amount', 'last_payment_at', 'created_at'),
        }),
    )

    def save_model(self, request, obj, form, change):
        with transaction.atomic():
            if change:
                # Serialise with verify(), which holds the same row lock
                Due.objects.select_for_update().filter(pk=obj.pk).first()
            super().save_model(request, obj, form, change)
            recompute_ledger(obj)

    @admin.display(description='Status')
    def ledger_status(self, obj):
        return Due.Status(obj.status).label

    @admin.display(description='Reconcile', boolean=True)
    def needs_reconciliation(self, obj):
        return obj.needs_reconciliation


@admin.register(PaymentClaim)
class PaymentClaimAdmin(admin.ModelAdmin):
    list_display  = ('due', 'submitter', 'amount', 'method', 'payment_type', 'status', 'created_at', 'decided_at')
    list_filter   = ('status', 'method', 'payment_type')
    search_fields = ('submitter__username', 'submitter__first_name', 'submitter__last_name',
                     'due__title', 'reference_id')

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
