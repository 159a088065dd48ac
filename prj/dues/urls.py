"""
dues/urls.py
────────────
URL patterns for the dues app (student + coordinator endpoints).
Included in the root urls.py with:
    path('api/', include('dues.urls')),
"""

from django.urls import path

from . import views

urlpatterns = [
    # Student endpoints
    path('dues/',                           views.my_dues_view,      name='my_dues'),
    path('dues/<int:due_id>/',              views.due_detail_view,   name='due_detail'),
    path('dues/<int:due_id>/claims/',       views.submit_claim_view, name='submit_claim'),

    # Coordinator endpoints
    path('coordinator/claims/pending/',                     views.pending_claims_view,     name='pending_claims'),
    path('coordinator/claims/<int:claim_id>/verify/',       views.verify_claim_view,       name='verify_claim'),
    path('coordinator/claims/<int:claim_id>/reject/',       views.reject_claim_view,       name='reject_claim'),
    path('coordinator/dues/',                               views.group_dues_view,         name='group_dues'),
    path('coordinator/stats/',                              views.group_stats_view,        name='group_stats'),
    path('coordinator/dues/<int:due_id>/',                  views.due_status_view,         name='due_status'),
    path('coordinator/dues/<int:due_id>/claims/pending/',   views.due_pending_claims_view, name='due_pending_claims'),
]
