"""Domain Types — enums and state groupings shared across the codebase.

Invariants:
    - All valid states encoded as Enums — no raw string matching
    - SELECTABLE_STATES excludes only PENDING (unvalidated creator)
    - HIDING_REJECTION_CODES move a rejected petition to HIDDEN instead of REJECTED

Design Decisions:
    - str Enums: serialize to JSON and store in String columns without converters
"""

from enum import Enum


# ─── Enums ───────────────────────────────────────────────────────

class PetitionState(str, Enum):
    """Petition lifecycle states — maps to DB `state` column."""
    PENDING = "pending"
    VALIDATED = "validated"
    SPONSORED = "sponsored"
    OPEN = "open"
    CLOSED = "closed"
    REJECTED = "rejected"
    HIDDEN = "hidden"


class SignatureState(str, Enum):
    PENDING = "pending"
    VALIDATED = "validated"


class EmailReceiptName(str, Enum):
    """Named email batches tracked by requested/sent receipts."""
    GOVERNMENT_RESPONSE = "government_response"
    DEBATE_SCHEDULED = "debate_scheduled"
    DEBATE_OUTCOME = "debate_outcome"
    PETITION_EMAIL = "petition_email"


class AdminRole(str, Enum):
    SYSADMIN = "sysadmin"
    MODERATOR = "moderator"


class RejectionCode(str, Enum):
    """Moderation rejection reasons."""
    DUPLICATE = "duplicate"
    IRRELEVANT = "irrelevant"
    NO_ACTION = "no-action"
    HONOURS = "honours"
    FAKE_NAME = "fake-name"
    FOI = "foi"
    LIBELLOUS = "libellous"
    OFFENSIVE = "offensive"


# ─── State groupings ─────────────────────────────────────────────

SELECTABLE_STATES = frozenset(s for s in PetitionState if s != PetitionState.PENDING)
VISIBLE_STATES = frozenset({
    PetitionState.OPEN, PetitionState.CLOSED, PetitionState.REJECTED,
})
MODERATED_STATES = frozenset({
    PetitionState.OPEN, PetitionState.CLOSED,
    PetitionState.REJECTED, PetitionState.HIDDEN,
})
SPONSORABLE_STATES = frozenset({PetitionState.VALIDATED, PetitionState.SPONSORED})
THRESHOLD_STATES = frozenset({PetitionState.OPEN, PetitionState.CLOSED})
HIDING_REJECTION_CODES = frozenset({
    RejectionCode.LIBELLOUS, RejectionCode.OFFENSIVE,
})
