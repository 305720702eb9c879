"""Approval workflow module for PostGate.

Implements the submission approval state machine and its service layer.
"""

from .states import ApprovalTransition, TransitionRule, TRANSITION_RULES
from .machine import ensure_transition
from .service import ApprovalService

__all__ = [
    "ApprovalTransition",
    "TransitionRule",
    "TRANSITION_RULES",
    "ensure_transition",
    "ApprovalService",
]
