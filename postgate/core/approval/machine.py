"""Transition guards for the approval workflow.

Each operation is guarded by a single check of the record's current status
against the rule's source state.
"""

from postgate.core.exceptions import InvalidStateError
from postgate.db.models.post import PostStatus

from .states import ApprovalTransition, TransitionRule, get_transition_rule


def conflict_message(transition: ApprovalTransition, current: PostStatus) -> str:
    """Message for an attempted transition from the wrong state.

    Approve and reject report the status lower-cased; confirming a post
    reports it as stored.
    """
    if transition is ApprovalTransition.CONFIRM_POSTED:
        return (
            f"Cannot mark post as posted: status must be {PostStatus.APPROVED.value}. "
            f"Current status: {current.value}"
        )
    return f"This post has already been {current.value.lower()}."


def ensure_transition(current: PostStatus, transition: ApprovalTransition) -> TransitionRule:
    """
    Check that ``transition`` may be performed from ``current``.

    Returns:
        The rule describing the transition

    Raises:
        InvalidStateError: If the record is not in the rule's source state
    """
    rule = get_transition_rule(transition)
    if current != rule.from_state:
        raise InvalidStateError(conflict_message(transition, current), current_status=current.value)
    return rule
