"""Email Formatting — subjects, recipients and bodies of outgoing mail."""

from datetime import date
from types import SimpleNamespace

from epetitions.core.domain_types import EmailReceiptName
from epetitions.core.format_emails import (
    format_creator_confirmation_email,
    format_threshold_email,
    format_validation_email,
    threshold_subject,
)
from epetitions.core.site_config import SiteConfig

SITE = SiteConfig(
    id=1,
    title="Petition parliament",
    url="https://petition.parliament.uk",
    email_from="no-reply@petition.parliament.uk",
    feedback_email="feedback@petition.parliament.uk",
    username=None,
    password_digest=None,
    enabled=True,
    protected=False,
    petition_duration=6,
    minimum_number_of_sponsors=5,
    maximum_number_of_sponsors=20,
    threshold_for_moderation=5,
    threshold_for_response=10_000,
    threshold_for_debate=100_000,
)


def _petition(**attrs):
    values = dict(
        id=7, action="Make me the PM", signature_count=6,
        response_summary=None, scheduled_debate_date=None,
    )
    values.update(attrs)
    return SimpleNamespace(**values)


def _signature(**attrs):
    values = dict(
        name="Jason", email="jason@example.com", creator=False,
        perishable_token="tok123",
    )
    values.update(attrs)
    return SimpleNamespace(**values)


def test_threshold_subject():
    assert threshold_subject("Make me the PM", 6) == (
        "The petition 'Make me the PM' has reached 6 signatures"
    )
    assert threshold_subject("Make me the PM", 100_000).endswith("100,000 signatures")


def test_threshold_email_for_government_response():
    content = format_threshold_email(
        SITE, _petition(response_summary="We will consider it."),
        _signature(), EmailReceiptName.GOVERNMENT_RESPONSE,
    )
    assert content.sender == SITE.email_from
    assert content.recipient == "jason@example.com"
    assert content.subject == "The petition 'Make me the PM' has reached 6 signatures"
    assert "We will consider it." in content.body
    assert "https://petition.parliament.uk/petitions/7" in content.body
    assert content.body.rstrip().endswith(SITE.feedback_email)


def test_threshold_email_for_debate_mentions_date():
    content = format_threshold_email(
        SITE, _petition(scheduled_debate_date=date(2015, 12, 6)),
        _signature(), "debate_scheduled",
    )
    assert "06 December 2015" in content.body


def test_validation_email_links_token():
    content = format_validation_email(SITE, _petition(), _signature())
    assert "https://petition.parliament.uk/signatures/tok123/validate" in content.body
    assert content.subject == "Please confirm your signature on 'Make me the PM'"


def test_validation_email_for_creator():
    content = format_validation_email(SITE, _petition(), _signature(creator=True))
    assert content.subject.startswith("Please confirm your email address for your petition")


def test_creator_confirmation_mentions_thresholds():
    content = format_creator_confirmation_email(SITE, _petition(), _signature())
    assert "10,000" in content.body
    assert "100,000" in content.body
    assert content.subject == "Your petition 'Make me the PM' has been published"
