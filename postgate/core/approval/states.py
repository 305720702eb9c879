"""Approval workflow states and transitions.

State Machine Diagram:

    ┌──────────┐
    │ PENDING  │ ← Initial state (new submission)
    └────┬─────┘
         │
         ├─────────────────────┐
         │                     │
    ┌────▼─────┐         ┌─────▼────┐
    │ APPROVED │         │ REJECTED │
    └────┬─────┘         └──────────┘
         │
    ┌────▼─────┐
    │  POSTED  │ ← Confirmed by the downstream workflow
    └──────────┘

REJECTED and POSTED are terminal. Nothing is reversible.
"""

from enum import Enum
from typing import Dict, NamedTuple, Optional

from postgate.core.exceptions import ValidationError
from postgate.db.models.post import PostStatus


class ApprovalTransition(str, Enum):
    """Actions that trigger state transitions."""

    APPROVE = "approve"                  # PENDING → APPROVED
    REJECT = "reject"                    # PENDING → REJECTED
    CONFIRM_POSTED = "confirm_posted"    # APPROVED → POSTED


class TransitionRule(NamedTuple):
    """Defines a valid state transition."""
    from_state: PostStatus
    to_state: PostStatus
    transition: ApprovalTransition
    timestamp_field: Optional[str] = None


TRANSITION_RULES: Dict[ApprovalTransition, TransitionRule] = {
    ApprovalTransition.APPROVE: TransitionRule(
        PostStatus.PENDING, PostStatus.APPROVED, ApprovalTransition.APPROVE, "approved_at"
    ),
    ApprovalTransition.REJECT: TransitionRule(
        PostStatus.PENDING, PostStatus.REJECTED, ApprovalTransition.REJECT
    ),
    ApprovalTransition.CONFIRM_POSTED: TransitionRule(
        PostStatus.APPROVED, PostStatus.POSTED, ApprovalTransition.CONFIRM_POSTED, "posted_at"
    ),
}


def get_transition_rule(transition: ApprovalTransition) -> TransitionRule:
    """Get the rule for a transition."""
    return TRANSITION_RULES[transition]


def parse_status(value: str) -> PostStatus:
    """Parse a case-insensitive status filter."""
    try:
        return PostStatus(value.strip().upper())
    except ValueError:
        allowed = ", ".join(s.value for s in PostStatus)
        raise ValidationError(f"Invalid status '{value}'. Must be one of: {allowed}")
