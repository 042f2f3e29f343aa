"""Record Validation — pure validation rules for site, petition and signature attributes.

Invariants:
    - Validators never mutate input; they return {field: [messages]} (empty = valid)
    - Messages follow one vocabulary: "can't be blank", "is too long (maximum is N
      characters)", "is not a number", "must be an integer", "doesn't match Password"
    - Site credentials are only validated while the site is protected
"""

import re
from typing import Any

BLANK = "can't be blank"

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

SITE_TEXT_LIMITS = {
    "title": 50,
    "url": 50,
    "email_from": 100,
    "feedback_email": 100,
}
SITE_NUMBER_FIELDS = (
    "petition_duration",
    "minimum_number_of_sponsors",
    "maximum_number_of_sponsors",
    "threshold_for_moderation",
    "threshold_for_response",
    "threshold_for_debate",
)
SITE_CREDENTIAL_LIMIT = 30

PETITION_TEXT_LIMITS = {"action": 80, "background": 300, "additional_details": 800}
RESPONSE_SUMMARY_LIMIT = 500

SIGNATURE_TEXT_LIMIT = 255


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _too_long(limit: int) -> str:
    return f"is too long (maximum is {limit} characters)"


def _add(errors: dict[str, list[str]], field: str, message: str) -> None:
    errors.setdefault(field, []).append(message)


def _check_text(errors, attrs: dict, field: str, limit: int, required: bool = True):
    value = attrs.get(field)
    if _is_blank(value):
        if required:
            _add(errors, field, BLANK)
        return
    if len(value) > limit:
        _add(errors, field, _too_long(limit))


def validate_site(
    attrs: dict,
    has_password_digest: bool,
    password: str | None = None,
    password_confirmation: str | None = None,
) -> dict[str, list[str]]:
    """Validate the full set of site attributes after an update is applied."""
    errors: dict[str, list[str]] = {}
    for field, limit in SITE_TEXT_LIMITS.items():
        _check_text(errors, attrs, field, limit)

    for field in SITE_NUMBER_FIELDS:
        value = attrs.get(field)
        if value is None or value == "":
            _add(errors, field, BLANK)
        elif isinstance(value, bool) or not isinstance(value, int):
            _add(errors, field, "must be an integer")

    if attrs.get("protected"):
        _check_text(errors, attrs, "username", SITE_CREDENTIAL_LIMIT)
        if password is not None and len(password) > SITE_CREDENTIAL_LIMIT:
            _add(errors, "password", _too_long(SITE_CREDENTIAL_LIMIT))
        if password_confirmation is not None and password_confirmation != password:
            _add(errors, "password_confirmation", "doesn't match Password")
        if not has_password_digest:
            _add(errors, "password", BLANK)
    return errors


def validate_petition(attrs: dict) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    _check_text(errors, attrs, "action", PETITION_TEXT_LIMITS["action"])
    _check_text(errors, attrs, "background", PETITION_TEXT_LIMITS["background"])
    _check_text(
        errors, attrs, "additional_details",
        PETITION_TEXT_LIMITS["additional_details"], required=False,
    )
    return errors


def validate_response(response: str | None, summary: str | None) -> dict[str, list[str]]:
    """Government response requires both the full text and a summary."""
    errors: dict[str, list[str]] = {}
    if _is_blank(response):
        _add(errors, "response", BLANK)
    _check_text(
        errors, {"response_summary": summary}, "response_summary",
        RESPONSE_SUMMARY_LIMIT,
    )
    return errors


def validate_signature(attrs: dict) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    for field in ("name", "email", "postcode"):
        _check_text(errors, attrs, field, SIGNATURE_TEXT_LIMIT)
    email = attrs.get("email")
    if not _is_blank(email) and not EMAIL_PATTERN.match(email.strip()):
        _add(errors, "email", "is invalid")
    if _is_blank(attrs.get("country")):
        _add(errors, "country", BLANK)
    if not attrs.get("uk_citizenship"):
        _add(errors, "uk_citizenship", "must be accepted")
    return errors
