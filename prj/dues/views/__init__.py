"""
dues/views/
───────────
Split into sub-modules for clarity:
  utils.py       – shared helpers (decorators, error mapping, serialisers)
  student.py     – a member's own dues and claim submission
  coordinator.py – pending queue, verify / reject, due creation
"""
from .coordinator import (
    due_pending_claims_view,
    due_status_view,
    group_dues_view,
    group_stats_view,
    pending_claims_view,
    reject_claim_view,
    verify_claim_view,
)
from .student import (
    due_detail_view,
    my_dues_view,
    submit_claim_view,
)

__all__ = [
    # student
    'my_dues_view',
    'due_detail_view',
    'submit_claim_view',
    # coordinator
    'pending_claims_view',
    'due_pending_claims_view',
    'verify_claim_view',
    'reject_claim_view',
    'group_dues_view',
    'group_stats_view',
    'due_status_view',
]
