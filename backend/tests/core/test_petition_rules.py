"""Petition Rules — state transitions, sponsoring and threshold markers.

Invariants:
    - Threshold markers are set once and never moved
    - libellous/offensive rejections hide the petition
"""

from datetime import datetime, timezone

import pytest

from epetitions.core.domain_types import PetitionState, RejectionCode
from epetitions.core.errors import InvalidStateTransitionError
from epetitions.core.petition_rules import (
    ThresholdMarkers,
    accepts_signatures,
    accepts_sponsors,
    check_transition,
    rejection_state,
    should_become_sponsored,
    sponsor_cap_reached,
    threshold_markers,
)

NOW = datetime(2015, 6, 1, 12, 0, tzinfo=timezone.utc)
EARLIER = datetime(2015, 5, 1, 12, 0, tzinfo=timezone.utc)


# ─── Transitions ─────────────────────────────────────────────────

@pytest.mark.parametrize("current, target", [
    (PetitionState.PENDING, PetitionState.VALIDATED),
    (PetitionState.VALIDATED, PetitionState.SPONSORED),
    (PetitionState.SPONSORED, PetitionState.OPEN),
    (PetitionState.OPEN, PetitionState.CLOSED),
    (PetitionState.SPONSORED, PetitionState.REJECTED),
    (PetitionState.OPEN, PetitionState.HIDDEN),
    (PetitionState.PENDING, PetitionState.HIDDEN),
])
def test_allowed_transitions(current, target):
    check_transition(current, target)


@pytest.mark.parametrize("current, target", [
    (PetitionState.PENDING, PetitionState.OPEN),
    (PetitionState.VALIDATED, PetitionState.OPEN),
    (PetitionState.CLOSED, PetitionState.OPEN),
    (PetitionState.PENDING, PetitionState.REJECTED),
    (PetitionState.HIDDEN, PetitionState.HIDDEN),
    (PetitionState.SPONSORED, PetitionState.CLOSED),
])
def test_forbidden_transitions(current, target):
    with pytest.raises(InvalidStateTransitionError) as exc:
        check_transition(current.value, target)
    assert exc.value.http_status == 409
    assert exc.value.current == current.value


def test_rejection_state_hides_libellous_and_offensive():
    assert rejection_state(RejectionCode.LIBELLOUS) == PetitionState.HIDDEN
    assert rejection_state("offensive") == PetitionState.HIDDEN
    assert rejection_state(RejectionCode.DUPLICATE) == PetitionState.REJECTED


# ─── Signing ─────────────────────────────────────────────────────

def test_sponsoring_only_while_gathering_sponsors():
    assert accepts_sponsors("validated")
    assert accepts_sponsors(PetitionState.SPONSORED)
    assert not accepts_sponsors(PetitionState.OPEN)
    assert not accepts_sponsors(PetitionState.PENDING)


def test_signing_only_when_open():
    assert accepts_signatures(PetitionState.OPEN)
    assert not accepts_signatures(PetitionState.CLOSED)
    assert not accepts_signatures(PetitionState.SPONSORED)


def test_sponsor_cap():
    assert not sponsor_cap_reached(19, 20)
    assert sponsor_cap_reached(20, 20)


def test_becomes_sponsored_only_from_validated():
    assert should_become_sponsored(PetitionState.VALIDATED, 5, 5)
    assert not should_become_sponsored(PetitionState.VALIDATED, 4, 5)
    assert not should_become_sponsored(PetitionState.SPONSORED, 6, 5)


# ─── Threshold markers ──────────────────────────────────────────

def test_markers_set_when_thresholds_reached():
    markers = threshold_markers(10, 10, 20, ThresholdMarkers(None, None), NOW)
    assert markers.response_threshold_reached_at == NOW
    assert markers.debate_threshold_reached_at is None


def test_markers_below_thresholds_stay_empty():
    markers = threshold_markers(9, 10, 20, ThresholdMarkers(None, None), NOW)
    assert markers == ThresholdMarkers(None, None)


def test_existing_markers_never_move():
    markers = threshold_markers(25, 10, 20, ThresholdMarkers(EARLIER, None), NOW)
    assert markers.response_threshold_reached_at == EARLIER
    assert markers.debate_threshold_reached_at == NOW
