"""Petition Rules — pure state-machine and threshold decisions.

Invariants:
    - publish only from SPONSORED
    - reject from VALIDATED, SPONSORED or OPEN; libellous/offensive codes hide instead
    - hide from every state except HIDDEN itself (pending included)
    - close only from OPEN
    - A threshold marker is set once, the first time the count reaches it; it is
      never cleared or moved

Design Decisions:
    - Functions return the decision (target state / markers) and the service applies
      it, so every rule is testable without a database
"""

from dataclasses import dataclass
from datetime import datetime

from epetitions.core.domain_types import (
    HIDING_REJECTION_CODES,
    PetitionState,
    RejectionCode,
    SPONSORABLE_STATES,
)
from epetitions.core.errors import InvalidStateTransitionError

_ALLOWED = {
    PetitionState.OPEN: frozenset({PetitionState.SPONSORED}),
    PetitionState.REJECTED: frozenset({
        PetitionState.VALIDATED, PetitionState.SPONSORED, PetitionState.OPEN,
    }),
    PetitionState.HIDDEN: frozenset({
        PetitionState.PENDING, PetitionState.VALIDATED, PetitionState.SPONSORED,
        PetitionState.OPEN, PetitionState.CLOSED, PetitionState.REJECTED,
    }),
    PetitionState.CLOSED: frozenset({PetitionState.OPEN}),
    PetitionState.VALIDATED: frozenset({PetitionState.PENDING}),
    PetitionState.SPONSORED: frozenset({PetitionState.VALIDATED}),
}


def check_transition(current: PetitionState | str, target: PetitionState) -> None:
    """Raise InvalidStateTransitionError unless current -> target is allowed."""
    current = PetitionState(current)
    if current not in _ALLOWED.get(target, frozenset()):
        raise InvalidStateTransitionError(current.value, target.value)


def rejection_state(code: RejectionCode | str) -> PetitionState:
    if RejectionCode(code) in HIDING_REJECTION_CODES:
        return PetitionState.HIDDEN
    return PetitionState.REJECTED


def accepts_sponsors(state: PetitionState | str) -> bool:
    return PetitionState(state) in SPONSORABLE_STATES


def accepts_signatures(state: PetitionState | str) -> bool:
    return PetitionState(state) == PetitionState.OPEN


def sponsor_cap_reached(sponsor_count: int, maximum: int) -> bool:
    return sponsor_count >= maximum


def should_become_sponsored(
    state: PetitionState | str, sponsor_count: int, threshold: int,
) -> bool:
    """A validated petition moves to moderation once enough sponsors validate."""
    return PetitionState(state) == PetitionState.VALIDATED and sponsor_count >= threshold


@dataclass(frozen=True)
class ThresholdMarkers:
    response_threshold_reached_at: datetime | None
    debate_threshold_reached_at: datetime | None


def threshold_markers(
    signature_count: int,
    response_threshold: int,
    debate_threshold: int,
    current: ThresholdMarkers,
    now: datetime,
) -> ThresholdMarkers:
    """Compute threshold markers after a count change. Existing markers are kept."""
    response_at = current.response_threshold_reached_at
    debate_at = current.debate_threshold_reached_at
    if response_at is None and signature_count >= response_threshold:
        response_at = now
    if debate_at is None and signature_count >= debate_threshold:
        debate_at = now
    return ThresholdMarkers(response_at, debate_at)
